import pytest

from ledger_recon.normalizer import normalize_name, first_n_words, LEGAL_SUFFIXES


# ============================================================================
# Entity level (clients)
# ============================================================================

def test_entity_strips_trailing_suffix_and_punctuation():
    assert normalize_name("Acme Corp.") == "Acme"
    assert normalize_name("Acme, Inc.") == "Acme"


def test_entity_strips_multiple_suffixes():
    assert normalize_name("Smith & Co LLC") == "Smith"


def test_entity_preserves_case():
    assert normalize_name("ACME Steel Works Corp") == "ACME Steel Works"


def test_entity_suffix_glued_by_underscore():
    assert normalize_name("Acme_Inc") == "Acme"


def test_entity_collapses_whitespace():
    assert normalize_name("  Blue   Heron    Farms  ") == "Blue Heron Farms"


def test_entity_name_made_only_of_suffixes():
    assert normalize_name("Inc.") == ""


# ============================================================================
# Person level (workers)
# ============================================================================

def test_person_keeps_suffix_words():
    assert normalize_name("Jane Inc", "person") == "Jane Inc"


def test_person_strips_punctuation():
    assert normalize_name("O'Brien-Smith,  Jr.", "person") == "O Brien Smith Jr"


# ============================================================================
# Edge cases
# ============================================================================

@pytest.mark.parametrize("level", ["entity", "person"])
def test_empty_and_none(level):
    assert normalize_name(None, level) == ""
    assert normalize_name("", level) == ""
    assert normalize_name("   ", level) == ""


def test_unknown_level_raises():
    with pytest.raises(ValueError):
        normalize_name("Acme", "aggressive")


@pytest.mark.parametrize("name", [
    "Acme Corp.",
    "Lippert Group, Inc.",
    "CMS- Complete Mechanical Services",
    "OWL Services (JBI Electrical Systems Inc.)",
    "Acme_Inc Co",
    "Co. Inc. LLC",
])
@pytest.mark.parametrize("level", ["entity", "person"])
def test_idempotent(name, level):
    once = normalize_name(name, level)
    assert normalize_name(once, level) == once


def test_suffix_list_is_lowercase():
    assert all(s == s.lower() for s in LEGAL_SUFFIXES)


# ============================================================================
# First words
# ============================================================================

def test_first_n_words():
    assert first_n_words("Acme Steel Works", 2) == "Acme Steel"
    assert first_n_words("Acme", 2) == "Acme"


def test_first_n_words_empty():
    assert first_n_words("", 2) == ""
    assert first_n_words(None, 2) == ""
