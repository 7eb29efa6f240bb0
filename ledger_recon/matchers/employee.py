"""
Employee matching within an already-matched client.

Name-only waterfall (first success wins):
1. Exact name, ignoring case
2. Exact after normalization
3. Name components (first name + last name / prefix structure)
4. First two words
5. Fuzzy similarity >= 0.80
6. Relaxed fuzzy similarity >= 0.60

Inside a client, amounts are known on both sides, so the context-aware
scorer weighs name similarity by how well the amounts agree.
"""

import logging
from decimal import Decimal
from typing import Optional, List, Dict, Iterable, Tuple, NamedTuple

from ..config import (
    ReconConfig,
    CONTEXT_AMOUNT_BOOST,
    CONTEXT_AMOUNT_FLOOR,
    CONTEXT_AMOUNT_WEIGHT,
)
from ..similarity import levenshtein_ratio, split_name_components, is_token_prefix
from .base import (
    BaseMatcher,
    EmployeeMatch,
    EmployeeMatchType,
    amount_similarity,
    amounts_equal,
    amounts_zero_out,
    distinct,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class ContextScore(NamedTuple):
    candidate: str
    score: float
    name_similarity: float
    amount_similarity: float
    amount_match: bool


class EmployeeMatcher(BaseMatcher):
    """
    Resolves worker identities between ledger A and ledger B for one client.

    Usage:
        matcher = EmployeeMatcher()
        matcher.find_best_employee_match("Antonio Mendez", ["Antonio Mendez Morillo"])
        matches = matcher.create_employee_matches(names_a, names_b, amounts_a, amounts_b)
    """

    profile = "employee"
    level = "person"

    def find_best_match(self, name: str, candidates: Iterable[str]) -> Optional[str]:
        return self.find_best_employee_match(name, candidates)

    def find_best_employee_match(self, name: str, candidates: Iterable[str]) -> Optional[str]:
        """Name-only waterfall."""
        resolved = self._resolve(name, candidates)
        return resolved[0] if resolved else None

    def _resolve(self, name: str, candidates: Iterable[str]) -> Optional[Tuple[str, str]]:
        if not name or not name.strip():
            return None

        pool = list(candidates)
        if not pool:
            return None

        cfg = self.config

        exact = self._exact(name, pool)
        if exact is not None:
            return exact, "exact"

        normalized_match = self._normalized_exact(name, pool)
        if normalized_match is not None:
            return normalized_match, "normalized"

        normalized = self.normalize(name)
        for candidate in pool:
            if self.components_similar(normalized, self.normalize(candidate)):
                return candidate, "name_components"

        for candidate in pool:
            if first_two_words_equal(normalized, self.normalize(candidate)):
                return candidate, "first_two_words"

        best = self._best_above(name, pool, cfg.employee_fuzzy_threshold)
        if best:
            return best[0], "fuzzy"

        best = self._best_above(name, pool, cfg.employee_relaxed_threshold)
        if best:
            return best[0], "relaxed_fuzzy"

        return None

    def components_similar(self, a: str, b: str) -> bool:
        """
        True if two normalized names look like the same person.

        First names must agree (exactly or >= 0.8 similar). When token
        counts differ the shorter name must be a prefix of the longer;
        otherwise last names must agree the same way.
        """
        first_a, last_a = split_name_components(a)
        first_b, last_b = split_name_components(b)
        if not (first_a and last_a and first_b and last_b):
            return False

        threshold = self.config.employee_component_threshold
        if not (first_a.lower() == first_b.lower() or levenshtein_ratio(first_a, first_b) >= threshold):
            return False

        if len(a.split()) != len(b.split()):
            return is_token_prefix(a, b)

        return last_a.lower() == last_b.lower() or levenshtein_ratio(last_a, last_b) >= threshold

    def extract_best_employee_match(self, target: str, choices: Iterable[str],
                                    threshold: float = 0.8) -> Tuple[Optional[str], float, str]:
        return self.extract_best_match(target, choices, threshold)

    # ------------------------------------------------------------------
    # Amount-aware matching
    # ------------------------------------------------------------------

    def score_with_context(self, name: str, candidates: Iterable[str],
                           amount_a: Decimal,
                           amounts_b: Dict[str, Decimal]) -> List[ContextScore]:
        """
        Composite name/amount score for every candidate with a recorded amount.

        Equal amounts add a flat boost; otherwise the name score is scaled
        by 0.3 + 0.7 * amount similarity.
        """
        scores = []
        for candidate in candidates:
            if candidate not in amounts_b:
                continue
            amount_b = amounts_b[candidate]
            name_score = self.name_similarity(name, candidate)
            amount_score = amount_similarity(amount_a, amount_b)
            amount_match = amounts_equal(amount_a, amount_b)

            if amount_match:
                composite = name_score + CONTEXT_AMOUNT_BOOST
            else:
                composite = name_score * (CONTEXT_AMOUNT_FLOOR + CONTEXT_AMOUNT_WEIGHT * amount_score)

            scores.append(ContextScore(candidate, composite, name_score, amount_score, amount_match))
        return scores

    def find_best_employee_match_with_context(self, name: str, candidates: Iterable[str],
                                              client_name: str, amount_a: Decimal,
                                              amounts_b: Dict[str, Decimal]) -> Optional[str]:
        """
        Best candidate by composite score >= 0.6, name similarity breaking ties.

        Args:
            name: Ledger-A employee name
            candidates: Unconsumed ledger-B employee names for this client
            client_name: Client being reconciled (for logging)
            amount_a: Ledger-A total for the employee
            amounts_b: Ledger-B totals by employee name
        """
        if not name or not name.strip():
            return None

        scores = self.score_with_context(name, candidates, amount_a, amounts_b)
        accepted = [s for s in scores if s.score >= self.config.employee_context_threshold]
        if not accepted:
            return None

        # max() keeps the earliest candidate among equal keys
        best = max(accepted, key=lambda s: (s.score, s.name_similarity))
        logger.debug(
            f"[{client_name}] '{name}' -> '{best.candidate}' "
            f"score={best.score:.3f} name={best.name_similarity:.3f} amount={best.amount_similarity:.3f}"
        )
        return best.candidate

    def find_zero_out_match(self, name: str, candidates: Iterable[str], amount_a: Decimal,
                            amounts_b: Dict[str, Decimal]) -> Optional[str]:
        """Candidate whose amount cancels amount_a, with name similarity >= 0.3."""
        best = None
        for candidate in candidates:
            if candidate not in amounts_b or not amounts_zero_out(amount_a, amounts_b[candidate]):
                continue
            score = self.name_similarity(name, candidate)
            if score >= self.config.employee_zero_out_min_similarity and (best is None or score > best[1]):
                best = (candidate, score)
        return best[0] if best else None

    # ------------------------------------------------------------------
    # Correspondence for one client
    # ------------------------------------------------------------------

    def classify_match(self, name_a: str, name_b: str,
                       amount_a: Decimal, amount_b: Decimal) -> EmployeeMatchType:
        """Derive the match category from the final pair."""
        if name_a.lower() == name_b.lower():
            return EmployeeMatchType.EXACT

        norm_a = self.normalize(name_a)
        norm_b = self.normalize(name_b)
        if norm_a.lower() == norm_b.lower():
            return EmployeeMatchType.NORMALIZED

        if self.components_similar(norm_a, norm_b):
            return EmployeeMatchType.NAME_COMPONENTS

        if amounts_zero_out(amount_a, amount_b):
            return EmployeeMatchType.AMOUNT_ZERO_OUT

        if amounts_equal(amount_a, amount_b):
            return EmployeeMatchType.AMOUNT_CONTEXT

        return EmployeeMatchType.FUZZY

    def _resolve_with_context(self, name: str, pool: List[str], client_name: str,
                              amount_a: Decimal,
                              amounts_b: Dict[str, Decimal]) -> Optional[Tuple[str, str]]:
        exact = self._exact(name, pool)
        if exact is None:
            exact = self._normalized_exact(name, pool)
        if exact is not None:
            return exact, "exact"

        match = self.find_best_employee_match_with_context(name, pool, client_name, amount_a, amounts_b)
        if match is not None:
            return match, "context"

        match = self.find_zero_out_match(name, pool, amount_a, amounts_b)
        if match is not None:
            return match, "amount_zero_out"

        return None

    def create_employee_matches(self, names_a: Iterable[str], names_b: Iterable[str],
                                amounts_a: Dict[str, Decimal],
                                amounts_b: Dict[str, Decimal],
                                client_name: Optional[str] = None,
                                use_context: Optional[bool] = None) -> List[EmployeeMatch]:
        """
        Pair the employees of one client across both ledgers.

        Ledger-A employees are processed first, each against the ledger-B
        employees not yet taken; leftover ledger-B employees are B-only.

        Args:
            names_a: Ledger-A employee names for the client
            names_b: Ledger-B employee names for the client
            amounts_a: Ledger-A totals by employee
            amounts_b: Ledger-B totals by employee
            client_name: Client being reconciled (for logging)
            use_context: Amount-aware matching (defaults to config)

        Returns:
            One EmployeeMatch per distinct employee name
        """
        if use_context is None:
            use_context = self.config.use_employee_context
        client_name = client_name or ""

        a_names = distinct(names_a)
        if self.config.sort_names:
            a_names.sort(key=lambda n: (n.lower(), n))
        pool = distinct(names_b)

        matches = []
        for name_a in a_names:
            amount_a = amounts_a.get(name_a, ZERO)
            if use_context:
                resolved = self._resolve_with_context(name_a, pool, client_name, amount_a, amounts_b)
            else:
                resolved = self._resolve(name_a, pool)

            if resolved is None:
                matches.append(EmployeeMatch(
                    unified_name=name_a,
                    ledger_a_name=name_a,
                    ledger_b_name=None,
                    amount_a=amount_a,
                    amount_b=ZERO,
                    match_type=EmployeeMatchType.LEDGER_A_ONLY,
                ))
                continue

            name_b, step = resolved
            pool.remove(name_b)
            amount_b = amounts_b.get(name_b, ZERO)
            match_type = self.classify_match(name_a, name_b, amount_a, amount_b)
            logger.debug(f"[{client_name}] employee '{name_a}' -> '{name_b}' via {step} ({match_type.value})")
            matches.append(EmployeeMatch(
                unified_name=name_a,
                ledger_a_name=name_a,
                ledger_b_name=name_b,
                amount_a=amount_a,
                amount_b=amount_b,
                match_type=match_type,
            ))

        for name_b in pool:
            matches.append(EmployeeMatch(
                unified_name=name_b,
                ledger_a_name=None,
                ledger_b_name=name_b,
                amount_a=ZERO,
                amount_b=amounts_b.get(name_b, ZERO),
                match_type=EmployeeMatchType.LEDGER_B_ONLY,
            ))

        return matches


def first_two_words_equal(a: str, b: str) -> bool:
    """Both names have at least two tokens and the first two agree."""
    parts_a = a.lower().split()
    parts_b = b.lower().split()
    if len(parts_a) < 2 or len(parts_b) < 2:
        return False
    return parts_a[:2] == parts_b[:2]
