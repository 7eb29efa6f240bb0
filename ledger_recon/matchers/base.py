"""
Base classes and data structures for matchers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, List, Dict, Any, Iterable, Tuple

from ..config import AMOUNT_EPSILON, ReconConfig
from ..normalizer import normalize_name
from ..similarity import similarity


# ============================================================================
# AMOUNT HELPERS
# ============================================================================

def amounts_equal(a: Decimal, b: Decimal) -> bool:
    return abs(a - b) < AMOUNT_EPSILON


def amounts_zero_out(a: Decimal, b: Decimal) -> bool:
    """Same magnitude, opposite sign: one transaction booked with inverted sign."""
    return abs(abs(a) - abs(b)) < AMOUNT_EPSILON and abs(a + b) < AMOUNT_EPSILON


def is_significant(variance: Decimal) -> bool:
    return abs(variance) > AMOUNT_EPSILON


def amount_similarity(a: Decimal, b: Decimal) -> float:
    """1.0 for identical amounts, falling to 0.0 as the gap reaches the larger amount."""
    if a == 0 and b == 0:
        return 1.0
    if a == 0 or b == 0:
        return 0.0
    largest = max(abs(a), abs(b))
    return max(0.0, 1.0 - float(abs(a - b) / largest))


# ============================================================================
# MATCH TYPES
# ============================================================================

class ClientMatchType(str, Enum):
    EXACT = "Exact"
    EXCEPTION_RULE = "ExceptionRule"
    AMOUNT_ZERO_OUT = "AmountZeroOut"
    NORMALIZED = "Normalized"
    FIRST_WORDS = "FirstWords"
    FUZZY = "Fuzzy"
    LEDGER_A_ONLY = "LedgerAOnly"
    LEDGER_B_ONLY = "LedgerBOnly"


class EmployeeMatchType(str, Enum):
    EXACT = "Exact"
    NORMALIZED = "Normalized"
    NAME_COMPONENTS = "NameComponents"
    AMOUNT_CONTEXT = "AmountContext"
    AMOUNT_ZERO_OUT = "AmountZeroOut"
    FUZZY = "Fuzzy"
    LEDGER_A_ONLY = "LedgerAOnly"
    LEDGER_B_ONLY = "LedgerBOnly"


# ============================================================================
# MATCH RECORDS
# ============================================================================

@dataclass
class ClientMatch:
    """
    Correspondence between a client in each ledger.

    Attributes:
        unified_name: Display name (ledger-A name when present)
        ledger_a_name: Name in ledger A (None if B-only)
        ledger_b_name: Name in ledger B (None if A-only)
        match_type: How the pair was recognized
    """
    unified_name: str
    ledger_a_name: Optional[str]
    ledger_b_name: Optional[str]
    match_type: ClientMatchType

    def __post_init__(self):
        if not self.ledger_a_name and not self.ledger_b_name:
            raise ValueError("ClientMatch needs a name from at least one ledger")

    @property
    def has_ledger_a(self) -> bool:
        return bool(self.ledger_a_name)

    @property
    def has_ledger_b(self) -> bool:
        return bool(self.ledger_b_name)

    @property
    def is_perfect_match(self) -> bool:
        return self.has_ledger_a and self.has_ledger_b

    def to_dict(self) -> Dict[str, Any]:
        return {
            "unified_name": self.unified_name,
            "ledger_a_name": self.ledger_a_name,
            "ledger_b_name": self.ledger_b_name,
            "match_type": self.match_type.value,
            "is_perfect_match": self.is_perfect_match,
        }


@dataclass
class EmployeeMatch:
    """
    Correspondence between a worker in each ledger, within one client.
    """
    unified_name: str
    ledger_a_name: Optional[str]
    ledger_b_name: Optional[str]
    amount_a: Decimal
    amount_b: Decimal
    match_type: EmployeeMatchType

    @property
    def has_ledger_a(self) -> bool:
        return bool(self.ledger_a_name)

    @property
    def has_ledger_b(self) -> bool:
        return bool(self.ledger_b_name)

    @property
    def is_perfect_match(self) -> bool:
        return self.has_ledger_a and self.has_ledger_b

    @property
    def variance(self) -> Decimal:
        return self.amount_a - self.amount_b

    @property
    def has_significant_variance(self) -> bool:
        return is_significant(self.variance)

    @property
    def amounts_zero_out(self) -> bool:
        return amounts_zero_out(self.amount_a, self.amount_b)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "unified_name": self.unified_name,
            "ledger_a_name": self.ledger_a_name,
            "ledger_b_name": self.ledger_b_name,
            "amount_a": str(self.amount_a),
            "amount_b": str(self.amount_b),
            "variance": str(self.variance),
            "match_type": self.match_type.value,
            "amounts_zero_out": self.amounts_zero_out,
        }


# ============================================================================
# BASE MATCHER
# ============================================================================

class BaseMatcher(ABC):
    """
    Abstract base class for name matchers.

    Subclasses set the similarity profile and normalization level and
    implement the decision waterfall in find_best_match().
    """

    profile: str = "client"
    level: str = "entity"

    def __init__(self, config: Optional[ReconConfig] = None):
        self.config = config or ReconConfig()

    @abstractmethod
    def find_best_match(self, name: str, candidates: Iterable[str]) -> Optional[str]:
        """
        Resolve one name against a candidate pool.

        Returns:
            The chosen candidate, or None
        """
        pass

    def normalize(self, name: Optional[str]) -> str:
        return normalize_name(name, self.level)

    def name_similarity(self, a: str, b: str) -> float:
        """Composite similarity of two raw names after normalization."""
        return similarity(self.normalize(a), self.normalize(b), self.profile).score

    def extract_best_match(self, target: str, choices: Iterable[str],
                           threshold: float) -> Tuple[Optional[str], float, str]:
        """
        FuzzyWuzzy-style extractOne: best candidate with score and reason.

        Returns:
            (best_match, score, reason); best_match is None below threshold
        """
        if not target or not target.strip():
            return None, 0.0, "Empty target"

        normalized_target = self.normalize(target)
        best = None
        for choice in choices:
            result = similarity(normalized_target, self.normalize(choice), self.profile)
            if result.score >= threshold and (best is None or result.score > best[1]):
                best = (choice, result.score, result.reason)

        if best:
            return best
        return None, 0.0, f"No match above {threshold:.0%} threshold"

    # ------------------------------------------------------------------
    # Waterfall building blocks
    # ------------------------------------------------------------------

    @staticmethod
    def _exact(name: str, candidates: List[str]) -> Optional[str]:
        """First candidate equal to name, ignoring case."""
        lowered = name.lower()
        for candidate in candidates:
            if candidate.lower() == lowered:
                return candidate
        return None

    def _normalized_exact(self, name: str, candidates: List[str]) -> Optional[str]:
        normalized = self.normalize(name).lower()
        if not normalized:
            return None
        for candidate in candidates:
            if self.normalize(candidate).lower() == normalized:
                return candidate
        return None

    def _best_above(self, name: str, candidates: List[str],
                    threshold: float) -> Optional[Tuple[str, float]]:
        """Highest-scoring candidate at or above threshold; earlier candidates win ties."""
        normalized = self.normalize(name)
        best = None
        for candidate in candidates:
            score = similarity(normalized, self.normalize(candidate), self.profile).score
            if score >= threshold and (best is None or score > best[1]):
                best = (candidate, score)
        return best


def distinct(names: Iterable[Optional[str]]) -> List[str]:
    """Non-blank names, first occurrence order, duplicates removed."""
    seen = set()
    result = []
    for name in names:
        if not name or not name.strip() or name in seen:
            continue
        seen.add(name)
        result.append(name)
    return result
