"""
Name Normalization

Single entry point for canonicalizing client and worker names before they
are compared. Every matcher goes through normalize_name().
"""

import re
from typing import Optional

# Legal-entity suffixes removed from client names (compared lower-cased)
LEGAL_SUFFIXES = frozenset({
    "llc", "inc", "corp", "corporation", "company", "co", "ltd", "limited",
})

# Anything that is not a letter, digit or whitespace (underscore counts as punctuation)
_PUNCTUATION = re.compile(r"[^\w\s]|_")

LEVELS = ("entity", "person")


def normalize_name(name: Optional[str], level: str = "entity") -> str:
    """
    Canonicalize a name for comparison.

    Args:
        name: Raw name (None and blank are allowed)
        level: Normalization level
            - "entity": strip punctuation and legal suffixes (clients)
            - "person": strip punctuation only (workers)

    Returns:
        Normalized name, original letter case preserved

    Examples:
        >>> normalize_name("Acme Corp.")
        'Acme'

        >>> normalize_name("O'Brien-Smith,  Jr.", "person")
        'O Brien Smith Jr'
    """
    if level not in LEVELS:
        raise ValueError(f"Unknown normalization level: {level}. Use 'entity' or 'person'")

    if not name or not name.strip():
        return ""

    tokens = _PUNCTUATION.sub(" ", name.strip()).split()

    # Suffixes are dropped token-wise after punctuation is gone, so a second
    # pass can never expose a new suffix ("Acme_Inc" -> "Acme").
    if level == "entity":
        tokens = [t for t in tokens if t.lower() not in LEGAL_SUFFIXES]

    return " ".join(tokens)


def first_n_words(name: Optional[str], n: int) -> str:
    """
    First n whitespace-delimited tokens of an already-normalized name.

    Returns an empty string if the name has no tokens.
    """
    if not name:
        return ""
    words = name.split()
    if not words:
        return ""
    return " ".join(words[:n])
