"""
Similarity metric tests.

Each metric is checked against a hand-computed value; the composite is
checked for tie-breaking and profile selection.
"""
import pytest

from ledger_recon.similarity import (
    exact_score,
    levenshtein_ratio,
    partial_ratio,
    token_sort_ratio,
    token_set_ratio,
    first_words_score,
    containment_score,
    name_component_score,
    split_name_components,
    is_token_prefix,
    score_breakdown,
    similarity,
    client_similarity,
    employee_similarity,
)


class TestBaseMetrics:

    def test_exact_ignores_case(self):
        assert exact_score("ACME", "acme") == 1.0
        assert exact_score("ACME", "acme co") == 0.0

    def test_levenshtein_classic(self):
        # kitten -> sitting: 3 edits over 7 characters
        assert levenshtein_ratio("kitten", "sitting") == pytest.approx(1 - 3 / 7)

    def test_levenshtein_empty(self):
        assert levenshtein_ratio("", "") == 1.0
        assert levenshtein_ratio("abc", "") == 0.0

    def test_levenshtein_ignores_case(self):
        assert levenshtein_ratio("ACME", "acme") == 1.0

    def test_partial_finds_substring(self):
        assert partial_ratio("Mendez", "Antonio Mendez Morillo") == 1.0

    def test_partial_empty(self):
        assert partial_ratio("", "Mendez") == 0.0

    def test_partial_equal_length_matches_levenshtein(self):
        assert partial_ratio("", "") == 1.0
        assert partial_ratio("kitten", "sittin") == levenshtein_ratio("kitten", "sittin")

    def test_token_sort_ignores_order(self):
        assert token_sort_ratio("Mendez Antonio", "Antonio Mendez") == 1.0

    def test_token_set_ignores_order_and_duplicates(self):
        assert token_set_ratio("b a a", "a b") == 1.0

    def test_token_set_leftovers(self):
        # "antonio mendez" vs "antonio mendez morillo": 8 inserts over 22
        assert token_set_ratio("Antonio Mendez", "Antonio Mendez Morillo") == pytest.approx(1 - 8 / 22)

    @pytest.mark.parametrize("metric", [
        exact_score, levenshtein_ratio, partial_ratio, token_sort_ratio, token_set_ratio,
        first_words_score, containment_score, name_component_score,
    ])
    def test_metrics_stay_in_unit_range(self, metric):
        for a, b in [("Acme", "Acme Steel"), ("x", "Lippert Group"), ("John Smith", "Smith John")]:
            assert 0.0 <= metric(a, b) <= 1.0


class TestHeuristics:

    def test_first_words(self):
        assert first_words_score("Acme Steel Works", "Acme Steel Fabrication") == 0.85
        assert first_words_score("Acme Steel", "Acme Iron") == 0.0

    def test_containment(self):
        assert containment_score("Lippert", "Lippert Group") == 0.75
        assert containment_score("Lippert Group", "lippert") == 0.75

    def test_containment_ignores_short_names(self):
        assert containment_score("ab", "abc") == 0.0

    def test_split_name_components(self):
        assert split_name_components("Antonio Mendez Morillo") == ("Antonio", "Morillo")
        assert split_name_components("Cher") == ("Cher", "")
        assert split_name_components("") == ("", "")

    def test_token_prefix(self):
        assert is_token_prefix("Antonio Mendez", "antonio mendez morillo")
        assert not is_token_prefix("Mendez Antonio", "Antonio Mendez Morillo")

    def test_name_component_prefix(self):
        assert name_component_score("Antonio Mendez", "Antonio Mendez Morillo") == 0.95

    def test_name_component_averages_first_and_last(self):
        # first identical, last "lee" vs "lea" is 1 edit over 3
        assert name_component_score("Chris Lee", "Chris Lea") == pytest.approx((1.0 + 2 / 3) / 2)

    def test_name_component_single_tokens(self):
        assert name_component_score("Madonna", "Cher") == 0.0


class TestComposite:

    def test_exact_wins_ties(self):
        assert similarity("Acme", "acme") == (1.0, "exact")

    def test_empty_input(self):
        assert similarity("", "Acme") == (0.0, "empty")
        assert similarity("Acme", "", "employee") == (0.0, "empty")

    def test_unknown_profile(self):
        with pytest.raises(ValueError):
            similarity("a", "b", "phonetic")

    def test_client_profile_uses_containment(self):
        result = similarity("Mendez", "Antonio Mendez Morillo", "client")
        assert result.reason == "containment"
        assert result.score == 0.75

    def test_employee_profile_uses_partial(self):
        result = similarity("Mendez", "Antonio Mendez Morillo", "employee")
        assert result.reason == "partial"
        assert result.score == 1.0

    def test_symmetric(self):
        pairs = [("Acme Steel", "Acme Steel Works"), ("Chris Lee", "Chris Leigh")]
        for a, b in pairs:
            assert client_similarity(a, b) == pytest.approx(client_similarity(b, a))
            assert employee_similarity(a, b) == pytest.approx(employee_similarity(b, a))

    def test_breakdown_lists_profile_metrics(self):
        breakdown = score_breakdown("Acme", "Acme Steel", "client")
        assert list(breakdown) == ["exact", "levenshtein", "first_words", "containment"]
        assert breakdown["containment"] == 0.75

    def test_breakdown_empty(self):
        assert set(score_breakdown("", "x", "employee").values()) == {0.0}
