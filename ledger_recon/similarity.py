"""
String similarity scoring.

A family of FuzzyWuzzy-style metrics built on RapidFuzz's Levenshtein
distance, combined by taking the best score. Each metric returns a float
in 0.0-1.0 and compares case-insensitively.

Profiles:
  client   - exact, levenshtein, first_words, containment
  employee - exact, levenshtein, partial, token_sort, token_set, name_component
"""

from typing import Callable, Dict, List, NamedTuple, Tuple

from rapidfuzz.distance import Levenshtein

from .config import (
    FIRST_WORDS_SCORE,
    CONTAINMENT_SCORE,
    CONTAINMENT_MIN_LENGTH,
    PREFIX_NAME_SCORE,
)
from .normalizer import first_n_words


class SimilarityResult(NamedTuple):
    """Composite score plus the name of the metric that produced it."""
    score: float
    reason: str


# ============================================================================
# BASE METRICS
# ============================================================================

def exact_score(a: str, b: str) -> float:
    return 1.0 if a.lower() == b.lower() else 0.0


def levenshtein_ratio(a: str, b: str) -> float:
    """1 - edit_distance / max(len). Two empty strings are identical."""
    a, b = a.lower(), b.lower()
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return 1.0 - Levenshtein.distance(a, b) / longest


def partial_ratio(a: str, b: str) -> float:
    """Best levenshtein ratio of the shorter string against any same-length window of the longer."""
    a, b = a.lower(), b.lower()
    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)

    if len(shorter) == len(longer):
        return levenshtein_ratio(shorter, longer)
    if not shorter:
        return 0.0

    width = len(shorter)
    best = 0.0
    for offset in range(len(longer) - width + 1):
        score = levenshtein_ratio(shorter, longer[offset:offset + width])
        if score > best:
            best = score
            if best == 1.0:
                break
    return best


def token_sort_ratio(a: str, b: str) -> float:
    sorted_a = " ".join(sorted(a.lower().split()))
    sorted_b = " ".join(sorted(b.lower().split()))
    return levenshtein_ratio(sorted_a, sorted_b)


def token_set_ratio(a: str, b: str) -> float:
    """
    Compare the shared tokens plus each side's leftovers.

    lhs = "<intersection> <only in a>", rhs = "<intersection> <only in b>",
    each part sorted and space-joined.
    """
    tokens_a = set(a.lower().split())
    tokens_b = set(b.lower().split())

    intersection = " ".join(sorted(tokens_a & tokens_b))
    only_a = " ".join(sorted(tokens_a - tokens_b))
    only_b = " ".join(sorted(tokens_b - tokens_a))

    lhs = f"{intersection} {only_a}".strip()
    rhs = f"{intersection} {only_b}".strip()

    if not lhs and not rhs:
        return 1.0
    if not lhs or not rhs:
        return 0.0
    return levenshtein_ratio(lhs, rhs)


# ============================================================================
# HEURISTICS
# ============================================================================

def first_words_score(a: str, b: str) -> float:
    """Fixed score when the first two normalized tokens agree."""
    first_a = first_n_words(a, 2)
    first_b = first_n_words(b, 2)
    if not first_a or not first_b:
        return 0.0
    return FIRST_WORDS_SCORE if first_a.lower() == first_b.lower() else 0.0


def containment_score(a: str, b: str) -> float:
    """Fixed score when one normalized name contains the other."""
    if len(a) < CONTAINMENT_MIN_LENGTH or len(b) < CONTAINMENT_MIN_LENGTH:
        return 0.0
    a, b = a.lower(), b.lower()
    return CONTAINMENT_SCORE if a in b or b in a else 0.0


def split_name_components(name: str) -> Tuple[str, str]:
    """(first, last) tokens of a person name; last is empty for single-token names."""
    parts = name.split()
    if not parts:
        return "", ""
    first = parts[0]
    last = parts[-1] if len(parts) > 1 else ""
    return first, last


def is_token_prefix(a: str, b: str) -> bool:
    """True if the shorter name's tokens are exactly the leading tokens of the longer."""
    parts_a = a.lower().split()
    parts_b = b.lower().split()
    shorter, longer = (parts_a, parts_b) if len(parts_a) <= len(parts_b) else (parts_b, parts_a)
    if not shorter:
        return False
    return longer[:len(shorter)] == shorter


def name_component_score(a: str, b: str) -> float:
    """
    Person-name structure score.

    "Antonio Mendez" vs "Antonio Mendez Morillo" is a prefix match (0.95);
    otherwise first/last name ratios are averaged.
    """
    first_a, last_a = split_name_components(a)
    first_b, last_b = split_name_components(b)
    valid_a = bool(first_a and last_a)
    valid_b = bool(first_b and last_b)

    if not valid_a and not valid_b:
        return 0.0

    parts_a = a.lower().split()
    parts_b = b.lower().split()
    if len(parts_a) != len(parts_b):
        if is_token_prefix(a, b):
            return PREFIX_NAME_SCORE
        if len(parts_a) >= 2 and len(parts_b) >= 2 and parts_a[:2] == parts_b[:2]:
            return FIRST_WORDS_SCORE

    if not valid_a or not valid_b:
        return 0.0

    return (levenshtein_ratio(first_a, first_b) + levenshtein_ratio(last_a, last_b)) / 2.0


# ============================================================================
# COMPOSITE
# ============================================================================

Metric = Callable[[str, str], float]

CLIENT_METRICS: List[Tuple[str, Metric]] = [
    ("exact", exact_score),
    ("levenshtein", levenshtein_ratio),
    ("first_words", first_words_score),
    ("containment", containment_score),
]

EMPLOYEE_METRICS: List[Tuple[str, Metric]] = [
    ("exact", exact_score),
    ("levenshtein", levenshtein_ratio),
    ("partial", partial_ratio),
    ("token_sort", token_sort_ratio),
    ("token_set", token_set_ratio),
    ("name_component", name_component_score),
]

PROFILES: Dict[str, List[Tuple[str, Metric]]] = {
    "client": CLIENT_METRICS,
    "employee": EMPLOYEE_METRICS,
}


def score_breakdown(a: str, b: str, profile: str = "client") -> Dict[str, float]:
    """Every sub-metric score for a pair, keyed by metric name."""
    if profile not in PROFILES:
        raise ValueError(f"Unknown similarity profile: {profile}. Use 'client' or 'employee'")
    if not a or not b:
        return {metric_name: 0.0 for metric_name, _ in PROFILES[profile]}
    return {metric_name: metric(a, b) for metric_name, metric in PROFILES[profile]}


def similarity(a: str, b: str, profile: str = "client") -> SimilarityResult:
    """
    Best score across the profile's metrics.

    Ties go to the metric listed first, so an exact match always reports
    "exact". Empty input on either side scores 0.0.
    """
    if profile not in PROFILES:
        raise ValueError(f"Unknown similarity profile: {profile}. Use 'client' or 'employee'")
    if not a or not b:
        return SimilarityResult(0.0, "empty")

    best = SimilarityResult(0.0, "none")
    for metric_name, metric in PROFILES[profile]:
        score = metric(a, b)
        if score > best.score:
            best = SimilarityResult(score, metric_name)
    return best


def client_similarity(a: str, b: str) -> float:
    return similarity(a, b, "client").score


def employee_similarity(a: str, b: str) -> float:
    return similarity(a, b, "employee").score
