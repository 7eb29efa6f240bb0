"""
Client matching tests.

Covers the waterfall order, match-type classification, greedy
correspondence and the partition guarantee.
"""
from decimal import Decimal

import pytest

from ledger_recon.config import ReconConfig
from ledger_recon.exception_rules import ExceptionRuleTable
from ledger_recon.matchers import ClientMatcher, ClientMatch, ClientMatchType


@pytest.fixture()
def matcher():
    return ClientMatcher()


# ============================================================================
# A. WATERFALL
# ============================================================================

class TestFindBestClientMatch:

    def test_exact_ignores_case(self, matcher):
        assert matcher.find_best_client_match("Acme Corp", ["Other", "ACME CORP"]) == "ACME CORP"

    def test_exception_rule_outranks_exact(self, matcher):
        """A curated alias wins even when an exact name is available."""
        assert matcher.find_best_client_match("LCI", ["LCI", "Lippert"]) == "Lippert"

    def test_exception_rule_beats_competing_fuzzy(self, matcher):
        assert matcher.find_best_client_match("LCI", ["Lincoln Industries", "Lippert Group Inc"]) == "Lippert Group Inc"

    def test_exception_rule_fuzzy_against_alias(self, matcher):
        assert matcher.find_best_client_match("LCI", ["LCI Industries", "Lippert Group Inc"]) == "Lippert Group Inc"

    def test_exception_rule_reverse_direction(self, matcher):
        assert matcher.find_best_client_match("TJX Companies", ["TJ Maxx ARRC"]) == "TJ Maxx ARRC"

    def test_custom_rules(self):
        matcher = ClientMatcher(exception_rules=ExceptionRuleTable([("Northwind", "Contoso")]))
        assert matcher.find_best_client_match("Northwind", ["Contoso", "Northwind"]) == "Contoso"
        # Curated defaults are not active on a custom table
        assert matcher.find_best_client_match("LCI", ["LCI", "Lippert"]) == "LCI"

    def test_zero_out_outranks_fuzzy(self, matcher):
        amounts_a = {"Acme Services": Decimal("500")}
        amounts_b = {"Acme Services Group": Decimal("100"), "Acme Svc": Decimal("-500")}
        match = matcher.find_best_client_match(
            "Acme Services", ["Acme Services Group", "Acme Svc"], amounts_a, amounts_b,
        )
        assert match == "Acme Svc"

    def test_without_amounts_fuzzy_applies(self, matcher):
        assert matcher.find_best_client_match("Acme Services", ["Acme Services Group", "Acme Svc"]) == "Acme Services Group"

    def test_fuzzy_typo(self, matcher):
        assert matcher.find_best_client_match("Brightwater Plumbing", ["Brightwatr Plumbing"]) == "Brightwatr Plumbing"

    def test_relaxed_threshold_is_last_resort(self):
        matcher = ClientMatcher(ReconConfig(client_fuzzy_threshold=0.99))
        assert matcher.find_best_client_match("Brightwater Plumbing", ["Brightwatr Plumbing"]) == "Brightwatr Plumbing"

    def test_no_match(self, matcher):
        assert matcher.find_best_client_match("Acme", ["Zzyzx Holdings"]) is None

    def test_empty_inputs(self, matcher):
        assert matcher.find_best_client_match("", ["Acme"]) is None
        assert matcher.find_best_client_match("   ", ["Acme"]) is None
        assert matcher.find_best_client_match("Acme", []) is None


# ============================================================================
# B. CLASSIFICATION
# ============================================================================

class TestClassifyMatch:

    def test_exact(self, matcher):
        assert matcher.classify_match("Acme Corp", "ACME CORP") == ClientMatchType.EXACT

    def test_exception_rule(self, matcher):
        assert matcher.classify_match("LCI", "Lippert") == ClientMatchType.EXCEPTION_RULE
        assert matcher.classify_match("LCI", "Lippert Group Inc") == ClientMatchType.EXCEPTION_RULE

    def test_zero_out_before_normalized(self, matcher):
        amounts_a = {"Acme Staffing": Decimal("500")}
        amounts_b = {"Acme Staffing Inc": Decimal("-500")}
        result = matcher.classify_match("Acme Staffing", "Acme Staffing Inc", amounts_a, amounts_b)
        assert result == ClientMatchType.AMOUNT_ZERO_OUT

    def test_normalized(self, matcher):
        assert matcher.classify_match("Acme Staffing", "Acme Staffing Inc") == ClientMatchType.NORMALIZED

    def test_first_words(self, matcher):
        assert matcher.classify_match("Acme Steel Works", "Acme Steel Fabrication") == ClientMatchType.FIRST_WORDS

    def test_fuzzy(self, matcher):
        assert matcher.classify_match("Brightwater Plumbing", "Brightwatr Plumbing") == ClientMatchType.FUZZY


# ============================================================================
# C. CORRESPONDENCE
# ============================================================================

class TestCreateUnifiedMatches:

    def test_partition_completeness(self, matcher):
        names_a = ["Acme Corp", "LCI", "Quartz Mining", "Acme Corp", ""]
        names_b = ["ACME CORP", "Lippert Group Inc", "Blue Heron Farms"]

        matches = matcher.create_unified_matches(names_a, names_b)

        a_side = [m.ledger_a_name for m in matches if m.has_ledger_a]
        b_side = [m.ledger_b_name for m in matches if m.has_ledger_b]
        assert sorted(a_side) == sorted({"Acme Corp", "LCI", "Quartz Mining"})
        assert sorted(b_side) == sorted(names_b)

    def test_match_types(self, matcher):
        matches = matcher.create_unified_matches(
            ["Acme Corp", "LCI", "Quartz Mining"],
            ["ACME CORP", "Lippert Group Inc", "Blue Heron Farms"],
        )
        assert [(m.unified_name, m.match_type) for m in matches] == [
            ("Acme Corp", ClientMatchType.EXACT),
            ("LCI", ClientMatchType.EXCEPTION_RULE),
            ("Quartz Mining", ClientMatchType.LEDGER_A_ONLY),
            ("Blue Heron Farms", ClientMatchType.LEDGER_B_ONLY),
        ]
        assert matches[1].ledger_b_name == "Lippert Group Inc"
        assert matches[2].ledger_b_name is None
        assert matches[3].ledger_a_name is None

    def test_greedy_consumes_candidates(self, matcher):
        matches = matcher.create_unified_matches(["Acme Corp", "Acme Corporation"], ["Acme Corp"])
        assert matches[0].is_perfect_match
        assert matches[1].match_type == ClientMatchType.LEDGER_A_ONLY

    def test_input_order_by_default(self, matcher):
        matches = matcher.create_unified_matches(["Zeta", "alpha"], [])
        assert [m.unified_name for m in matches] == ["Zeta", "alpha"]

    def test_sort_names(self):
        matcher = ClientMatcher(ReconConfig(sort_names=True))
        matches = matcher.create_unified_matches(["Zeta", "alpha"], [])
        assert [m.unified_name for m in matches] == ["alpha", "Zeta"]

    def test_empty(self, matcher):
        assert matcher.create_unified_matches([], []) == []


# ============================================================================
# D. REVERSE LOOKUP AND DIAGNOSTICS
# ============================================================================

class TestLedgerALookup:

    def test_exception_rule(self, matcher):
        assert matcher.find_best_ledger_a_match("Lippert", ["Other", "LCI"]) == "LCI"

    def test_first_two_words(self, matcher):
        assert matcher.find_best_ledger_a_match("Acme Steel Works Inc", ["Acme Steel"]) == "Acme Steel"

    def test_containment(self, matcher):
        assert matcher.find_best_ledger_a_match("Brightwater Group", ["Brightwater"]) == "Brightwater"

    def test_no_match(self, matcher):
        assert matcher.find_best_ledger_a_match("Quartz Mining", ["Blue Heron Farms"]) is None


class TestExtractBestClientMatch:

    def test_best_with_reason(self, matcher):
        assert matcher.extract_best_client_match("Acme Corp", ["Zed", "ACME Corp"]) == ("ACME Corp", 1.0, "exact")

    def test_empty_target(self, matcher):
        assert matcher.extract_best_client_match("", ["Acme"]) == (None, 0.0, "Empty target")

    def test_below_threshold(self, matcher):
        best, score, reason = matcher.extract_best_client_match("Acme", ["Zzyzx Holdings"])
        assert best is None
        assert reason == "No match above 70% threshold"


def test_client_match_requires_a_name():
    with pytest.raises(ValueError):
        ClientMatch(unified_name="", ledger_a_name=None, ledger_b_name=None,
                    match_type=ClientMatchType.FUZZY)
