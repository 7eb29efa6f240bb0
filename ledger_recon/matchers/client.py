"""
Client matching between the two ledgers.

Waterfall (first success wins):
1. Exception rule alias (exact, then fuzzy >= 0.75 against the alias)
2. Exact name, ignoring case
3. Amount zero-out with some name similarity
4. Fuzzy similarity >= 0.70
5. Relaxed fuzzy similarity >= 0.50
"""

import logging
from decimal import Decimal
from typing import Optional, List, Dict, Iterable, Tuple

from ..config import ReconConfig, CONTAINMENT_MIN_LENGTH
from ..exception_rules import ExceptionRuleTable, DEFAULT_EXCEPTION_RULES
from ..normalizer import first_n_words
from .base import (
    BaseMatcher,
    ClientMatch,
    ClientMatchType,
    amounts_zero_out,
    distinct,
)

logger = logging.getLogger(__name__)

AmountMap = Dict[str, Decimal]


class ClientMatcher(BaseMatcher):
    """
    Resolves client identities between ledger A and ledger B.

    Usage:
        matcher = ClientMatcher()
        matcher.find_best_client_match("Acme Corp", ["ACME", "Other Co"])   # 'ACME'
        matches = matcher.create_unified_matches(names_a, names_b, totals_a, totals_b)
    """

    profile = "client"
    level = "entity"

    def __init__(self, config: Optional[ReconConfig] = None,
                 exception_rules: Optional[ExceptionRuleTable] = None):
        super().__init__(config)
        self.exception_rules = exception_rules if exception_rules is not None else DEFAULT_EXCEPTION_RULES

    def find_best_match(self, name: str, candidates: Iterable[str]) -> Optional[str]:
        return self.find_best_client_match(name, candidates)

    def find_best_client_match(self, name: str, candidates: Iterable[str],
                               amounts_a: Optional[AmountMap] = None,
                               amounts_b: Optional[AmountMap] = None) -> Optional[str]:
        """
        Find the ledger-B client for a ledger-A client name.

        Args:
            name: Ledger-A client name
            candidates: Ledger-B client names still available
            amounts_a: Optional ledger-A totals by client name
            amounts_b: Optional ledger-B totals by client name

        Returns:
            The matching candidate, or None
        """
        resolved = self._resolve(name, candidates, amounts_a, amounts_b)
        return resolved[0] if resolved else None

    def _resolve(self, name: str, candidates: Iterable[str],
                 amounts_a: Optional[AmountMap],
                 amounts_b: Optional[AmountMap]) -> Optional[Tuple[str, str]]:
        """Run the waterfall; returns (candidate, step) or None."""
        if not name or not name.strip():
            return None

        pool = list(candidates)
        if not pool:
            return None

        cfg = self.config

        # 1. Exception rules outrank every computed score
        alias = self.exception_rules.lookup(name)
        if alias:
            exact = self._exact(alias, pool)
            if exact is not None:
                return exact, "exception_rule"
            best = self._best_above(alias, pool, cfg.client_exception_threshold)
            if best:
                return best[0], "exception_rule_fuzzy"

        # 2. Exact name
        exact = self._exact(name, pool)
        if exact is not None:
            return exact, "exact"

        # 3. Totals that cancel each other out
        if amounts_a is not None and amounts_b is not None and name in amounts_a:
            best = self._best_zero_out(name, amounts_a[name], pool, amounts_b)
            if best:
                return best, "amount_zero_out"

        # 4. Fuzzy
        best = self._best_above(name, pool, cfg.client_fuzzy_threshold)
        if best:
            return best[0], "fuzzy"

        # 5. Relaxed fuzzy, last resort
        best = self._best_above(name, pool, cfg.client_relaxed_threshold)
        if best:
            return best[0], "relaxed_fuzzy"

        return None

    def _best_zero_out(self, name: str, amount: Decimal, pool: List[str],
                       amounts_b: AmountMap) -> Optional[str]:
        best = None
        for candidate in pool:
            if candidate not in amounts_b:
                continue
            if not amounts_zero_out(amount, amounts_b[candidate]):
                continue
            score = self.name_similarity(name, candidate)
            if score >= self.config.client_zero_out_min_similarity and (best is None or score > best[1]):
                best = (candidate, score)
        return best[0] if best else None

    def extract_best_client_match(self, target: str, choices: Iterable[str],
                                  threshold: float = 0.7) -> Tuple[Optional[str], float, str]:
        return self.extract_best_match(target, choices, threshold)

    def find_best_ledger_a_match(self, name: str, candidates: Iterable[str]) -> Optional[str]:
        """
        Reverse lookup: find the ledger-A client for a ledger-B client name.

        Waterfall: exception rule, exact, normalized, first two words, containment.
        """
        if not name or not name.strip():
            return None

        pool = list(candidates)
        if not pool:
            return None

        alias = self.exception_rules.lookup(name)
        if alias:
            exact = self._exact(alias, pool)
            if exact is not None:
                return exact
            best = self._best_above(alias, pool, self.config.client_exception_threshold)
            if best:
                return best[0]

        exact = self._exact(name, pool)
        if exact is not None:
            return exact

        normalized_match = self._normalized_exact(name, pool)
        if normalized_match is not None:
            return normalized_match

        normalized = self.normalize(name)
        first_words = first_n_words(normalized, 2).lower()
        if first_words:
            for candidate in pool:
                if first_n_words(self.normalize(candidate), 2).lower() == first_words:
                    return candidate

        lowered = normalized.lower()
        if lowered:
            for candidate in pool:
                other = self.normalize(candidate).lower()
                if other and (lowered in other or other in lowered):
                    return candidate

        return None

    def classify_match(self, name_a: str, name_b: str,
                       amounts_a: Optional[AmountMap] = None,
                       amounts_b: Optional[AmountMap] = None) -> ClientMatchType:
        """
        Derive the match category from the final pair.

        Independent of which waterfall step picked the candidate; categories
        are checked in priority order.
        """
        if name_a.lower() == name_b.lower():
            return ClientMatchType.EXACT

        alias = self.exception_rules.lookup(name_a)
        if alias and (alias.lower() == name_b.lower()
                      or self.name_similarity(alias, name_b) >= self.config.client_exception_threshold):
            return ClientMatchType.EXCEPTION_RULE

        norm_a = self.normalize(name_a).lower()
        norm_b = self.normalize(name_b).lower()
        first_a = first_n_words(norm_a, 2)
        first_b = first_n_words(norm_b, 2)

        if (amounts_a is not None and amounts_b is not None
                and name_a in amounts_a and name_b in amounts_b
                and amounts_zero_out(amounts_a[name_a], amounts_b[name_b])):
            names_similar = (
                norm_a == norm_b
                or (first_a and first_a == first_b)
                or (len(norm_a) > CONTAINMENT_MIN_LENGTH and norm_a in norm_b)
                or (len(norm_b) > CONTAINMENT_MIN_LENGTH and norm_b in norm_a)
            )
            if names_similar:
                return ClientMatchType.AMOUNT_ZERO_OUT

        if norm_a == norm_b:
            return ClientMatchType.NORMALIZED

        if first_a and first_a == first_b:
            return ClientMatchType.FIRST_WORDS

        return ClientMatchType.FUZZY

    def create_unified_matches(self, names_a: Iterable[str], names_b: Iterable[str],
                               amounts_a: Optional[AmountMap] = None,
                               amounts_b: Optional[AmountMap] = None) -> List[ClientMatch]:
        """
        Pair every distinct ledger-A client with at most one ledger-B client.

        Greedy and order-dependent: each A name takes the best remaining B
        name, which is then unavailable to later A names. Unconsumed B
        names come last as B-only records.

        Returns:
            One ClientMatch per distinct client name across both ledgers
        """
        a_names = distinct(names_a)
        if self.config.sort_names:
            a_names.sort(key=lambda n: (n.lower(), n))
        pool = distinct(names_b)

        matches = []
        for name_a in a_names:
            resolved = self._resolve(name_a, pool, amounts_a, amounts_b)
            if resolved is None:
                logger.debug(f"Client '{name_a}': no ledger-B match")
                matches.append(ClientMatch(
                    unified_name=name_a,
                    ledger_a_name=name_a,
                    ledger_b_name=None,
                    match_type=ClientMatchType.LEDGER_A_ONLY,
                ))
                continue

            name_b, step = resolved
            pool.remove(name_b)
            match_type = self.classify_match(name_a, name_b, amounts_a, amounts_b)
            logger.debug(f"Client '{name_a}' -> '{name_b}' via {step} ({match_type.value})")
            matches.append(ClientMatch(
                unified_name=name_a,
                ledger_a_name=name_a,
                ledger_b_name=name_b,
                match_type=match_type,
            ))

        for name_b in pool:
            matches.append(ClientMatch(
                unified_name=name_b,
                ledger_a_name=None,
                ledger_b_name=name_b,
                match_type=ClientMatchType.LEDGER_B_ONLY,
            ))

        return matches
