"""
Reconciliation Analyzer

Drives a full run:
1. Partition both ledgers by client and total them
2. Resolve client correspondence
3. Resolve employees inside each matched client
4. Attribute variances to employees, then to the client residual
5. Report one-sided clients against zero
"""

import uuid
import logging
from collections import Counter
from datetime import datetime
from decimal import Decimal
from typing import Optional, List, Dict, Callable, Iterable, TypeVar

from .config import ReconConfig
from .exception_rules import ExceptionRuleTable
from .matchers.base import ClientMatch, EmployeeMatch, is_significant
from .matchers.client import ClientMatcher
from .matchers.employee import EmployeeMatcher
from .models import (
    LedgerARecord,
    LedgerBRecord,
    DepositRecord,
    VarianceEntry,
    VarianceType,
    ClientSummary,
    ReconRunStats,
    ReconResults,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
R = TypeVar("R")


def group_by(records: Iterable[R], key: Callable[[R], str]) -> Dict[str, List[R]]:
    """Group records by key in first-seen order, skipping blank keys."""
    groups: Dict[str, List[R]] = {}
    for record in records:
        name = key(record)
        if not name or not name.strip():
            continue
        groups.setdefault(name, []).append(record)
    return groups


def total(records: Iterable[R], amount: Callable[[R], Decimal]) -> Decimal:
    return sum((amount(r) for r in records), ZERO)


def format_amount(value: Decimal) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


class ReconciliationAnalyzer:
    """
    Reconciles ledger A against ledger B and attributes the variance.

    Usage:
        analyzer = ReconciliationAnalyzer()
        results = analyzer.run(records_a, records_b, deposits)
        for entry in results.variances:
            print(entry.client_name, entry.employee_name, entry.variance)
    """

    def __init__(self, config: Optional[ReconConfig] = None,
                 exception_rules: Optional[ExceptionRuleTable] = None):
        self.config = config or ReconConfig()
        self.client_matcher = ClientMatcher(self.config, exception_rules)
        self.employee_matcher = EmployeeMatcher(self.config)

    def run(self, records_a: List[LedgerARecord], records_b: List[LedgerBRecord],
            deposits: Optional[List[DepositRecord]] = None) -> ReconResults:
        """
        Reconcile two record lists.

        Args:
            records_a: Ledger-A transaction lines
            records_b: Ledger-B timesheet lines
            deposits: Optional payment records for payment-method annotation

        Returns:
            ReconResults with matches, variances, summaries and stats
        """
        stats = ReconRunStats(run_id=str(uuid.uuid4())[:8], started_at=datetime.now())
        logger.info(
            f"Starting reconciliation run {stats.run_id}: "
            f"{len(records_a):,} ledger-A lines, {len(records_b):,} ledger-B lines"
        )

        clients_a = group_by(records_a, lambda r: r.name)
        clients_b = group_by(records_b, lambda r: r.bill_to_name)
        totals_a = {c: total(rows, lambda r: r.amount) for c, rows in clients_a.items()}
        totals_b = {c: total(rows, lambda r: r.item_bill) for c, rows in clients_b.items()}

        client_matches = self.client_matcher.create_unified_matches(
            clients_a.keys(), clients_b.keys(), totals_a, totals_b,
        )

        variances: List[VarianceEntry] = []
        employee_matches: Dict[str, List[EmployeeMatch]] = {}

        for client in client_matches:
            if client.is_perfect_match:
                rows_a = clients_a[client.ledger_a_name]
                rows_b = clients_b[client.ledger_b_name]
                matches = self.reconcile_employees(client, rows_a, rows_b)
                employee_matches[client.unified_name] = matches
                variances.extend(self.employee_variances(client, matches))

                residual = self.client_residual(
                    client, totals_a[client.ledger_a_name], totals_b[client.ledger_b_name], matches,
                )
                if residual:
                    variances.append(residual)
            else:
                entry = self.one_sided_variance(client, totals_a, totals_b)
                if entry:
                    variances.append(entry)

        variances.sort(key=lambda v: (v.client_name.lower(), v.employee_name.lower()))

        summaries = self.build_client_summaries(client_matches, clients_a, clients_b, deposits or [])

        self._fill_stats(stats, client_matches, employee_matches, variances)
        logger.info(
            f"Completed run {stats.run_id}: {stats.matched_clients:,} / {stats.total_clients:,} "
            f"clients matched ({stats.client_match_rate:.1f}%), {stats.variance_count:,} variances"
        )

        return ReconResults(
            stats=stats,
            client_matches=client_matches,
            employee_matches=employee_matches,
            variances=variances,
            client_summaries=summaries,
            deposits=list(deposits or []),
        )

    # ------------------------------------------------------------------
    # Employee level
    # ------------------------------------------------------------------

    def reconcile_employees(self, client: ClientMatch, rows_a: List[LedgerARecord],
                            rows_b: List[LedgerBRecord]) -> List[EmployeeMatch]:
        """Employee correspondence for one matched client."""
        employees_a = group_by(rows_a, lambda r: r.item)
        employees_b = group_by(rows_b, lambda r: r.name)
        amounts_a = {e: total(rows, lambda r: r.amount) for e, rows in employees_a.items()}
        amounts_b = {e: total(rows, lambda r: r.item_bill) for e, rows in employees_b.items()}

        return self.employee_matcher.create_employee_matches(
            employees_a.keys(), employees_b.keys(), amounts_a, amounts_b,
            client_name=client.unified_name,
        )

    def employee_variances(self, client: ClientMatch,
                           matches: List[EmployeeMatch]) -> List[VarianceEntry]:
        """
        Variance entries for significant employee gaps.

        Zero-out pairs are the same person booked with inverted sign and are
        never reported.
        """
        entries = []
        for match in matches:
            if not match.has_significant_variance:
                continue
            if match.is_perfect_match and match.amounts_zero_out:
                logger.debug(f"[{client.unified_name}] suppressing zero-out pair '{match.unified_name}'")
                continue

            if not match.has_ledger_b:
                variance_type = VarianceType.A_ONLY_EMPLOYEE
                notes = f"Only in ledger A: {format_amount(match.variance)}"
            elif not match.has_ledger_a:
                variance_type = VarianceType.B_ONLY_EMPLOYEE
                notes = f"Only in ledger B: {format_amount(match.variance)}"
            else:
                variance_type = VarianceType.AMOUNT_VARIANCE
                notes = f"Employee variance: {format_amount(match.variance)}"
                if match.ledger_a_name != match.ledger_b_name:
                    notes += f" (matched to '{match.ledger_b_name}', {match.match_type.value})"

            entries.append(VarianceEntry(
                client_name=client.unified_name,
                employee_name=match.unified_name,
                amount_a=match.amount_a,
                amount_b=match.amount_b,
                variance_type=variance_type,
                notes=notes,
            ))
        return entries

    # ------------------------------------------------------------------
    # Client level
    # ------------------------------------------------------------------

    def client_residual(self, client: ClientMatch, total_a: Decimal, total_b: Decimal,
                        matches: List[EmployeeMatch]) -> Optional[VarianceEntry]:
        """
        Client-level entry for variance no employee accounts for.

        Every employee variance is subtracted so no dollar is counted twice.
        Zero-out pairs count as accounted even though they are never
        reported: the gap belongs to one worker booked with inverted sign.
        The entry carries the residual amounts of each side, so its variance
        is exactly the unexplained part.
        """
        client_variance = total_a - total_b
        accounted = sum((m.variance for m in matches), ZERO)
        unexplained = client_variance - accounted
        if not is_significant(unexplained):
            return None

        return VarianceEntry(
            client_name=client.unified_name,
            employee_name="Total",
            amount_a=total_a - sum((m.amount_a for m in matches), ZERO),
            amount_b=total_b - sum((m.amount_b for m in matches), ZERO),
            variance_type=VarianceType.CLIENT_LEVEL,
            notes=(
                f"Unexplained client variance: {format_amount(unexplained)} "
                f"(client variance {format_amount(client_variance)}, "
                f"employee-level {format_amount(accounted)})"
            ),
        )

    def one_sided_variance(self, client: ClientMatch, totals_a: Dict[str, Decimal],
                           totals_b: Dict[str, Decimal]) -> Optional[VarianceEntry]:
        """Full total against zero for a client found in only one ledger."""
        if client.has_ledger_a:
            amount_a, amount_b = totals_a.get(client.ledger_a_name, ZERO), ZERO
            variance_type = VarianceType.A_ONLY_CLIENT
            notes = "Client not found in ledger B"
        else:
            amount_a, amount_b = ZERO, totals_b.get(client.ledger_b_name, ZERO)
            variance_type = VarianceType.B_ONLY_CLIENT
            notes = "Client not found in ledger A"

        if not is_significant(amount_a - amount_b):
            return None

        return VarianceEntry(
            client_name=client.unified_name,
            employee_name="Total",
            amount_a=amount_a,
            amount_b=amount_b,
            variance_type=variance_type,
            notes=f"{notes}: {format_amount(amount_a - amount_b)}",
        )

    def build_client_summaries(self, client_matches: List[ClientMatch],
                               clients_a: Dict[str, List[LedgerARecord]],
                               clients_b: Dict[str, List[LedgerBRecord]],
                               deposits: List[DepositRecord]) -> List[ClientSummary]:
        """
        One summary per client match, sorted by client name.

        Payment type comes from the first deposit recorded under the exact
        ledger-A name, falling back to the ledger-B name.
        """
        deposit_by_client: Dict[str, DepositRecord] = {}
        for deposit in deposits:
            deposit_by_client.setdefault(deposit.client_name, deposit)

        summaries = []
        for client in client_matches:
            rows_a = clients_a.get(client.ledger_a_name, []) if client.has_ledger_a else []
            rows_b = clients_b.get(client.ledger_b_name, []) if client.has_ledger_b else []

            summary = ClientSummary(
                client_name=client.unified_name,
                ledger_a_total=total(rows_a, lambda r: r.amount),
                ledger_b_name=client.ledger_b_name or "",
                ledger_b_total=total(rows_b, lambda r: r.item_bill),
                match_type=client.match_type.value,
                invoice_count=len({r.type for r in rows_a}),
                record_count=len(rows_b),
                employees=list(dict.fromkeys(r.name for r in rows_b if r.name)),
                job_sites=list(dict.fromkeys(r.memo for r in rows_a if r.memo)),
            )

            deposit = None
            for name in (client.ledger_a_name, client.ledger_b_name):
                if name and name in deposit_by_client:
                    deposit = deposit_by_client[name]
                    break
            if deposit and deposit.payment_method:
                summary.payment_type = deposit.payment_method

            summaries.append(summary)

        summaries.sort(key=lambda s: s.client_name.lower())
        return summaries

    # ------------------------------------------------------------------

    def _fill_stats(self, stats: ReconRunStats, client_matches: List[ClientMatch],
                    employee_matches: Dict[str, List[EmployeeMatch]],
                    variances: List[VarianceEntry]):
        stats.total_clients = len(client_matches)
        stats.matched_clients = sum(1 for m in client_matches if m.is_perfect_match)
        stats.by_client_match_type = dict(Counter(m.match_type.value for m in client_matches))
        for matches in employee_matches.values():
            for m in matches:
                if m.is_perfect_match:
                    stats.matched_employees += 1
                else:
                    stats.unmatched_employees += 1
        stats.variance_count = len(variances)
        stats.total_variance = sum((v.variance for v in variances), ZERO)
        stats.finalize()


def reconcile(records_a: List[LedgerARecord], records_b: List[LedgerBRecord],
              deposits: Optional[List[DepositRecord]] = None,
              config: Optional[ReconConfig] = None) -> ReconResults:
    """
    Convenience function to run a reconciliation with default collaborators.
    """
    return ReconciliationAnalyzer(config).run(records_a, records_b, deposits)
