"""
Ledger Reconciliation Module

Matches clients and employees between two independently kept ledgers
and attributes the dollar variance without double counting.

Usage:
    from ledger_recon import ReconciliationAnalyzer, ReconReport

    results = ReconciliationAnalyzer().run(records_a, records_b, deposits)
    ReconReport(results).print_summary()

    # Single-name checks
    from ledger_recon import ClientMatcher
    ClientMatcher().find_best_client_match("LCI", ["Acme", "Lippert Group Inc"])
"""

from .analyzer import ReconciliationAnalyzer, reconcile
from .config import ReconConfig
from .errors import LoaderError
from .exception_rules import ExceptionRuleTable, DEFAULT_EXCEPTION_RULES, build_default_table
from .matchers import (
    ClientMatch,
    ClientMatchType,
    EmployeeMatch,
    EmployeeMatchType,
    ClientMatcher,
    EmployeeMatcher,
)
from .models import (
    LedgerARecord,
    LedgerBRecord,
    DepositRecord,
    VarianceEntry,
    VarianceType,
    ClientSummary,
    ReconResults,
)
from .normalizer import normalize_name
from .report import ReconReport
from .similarity import similarity

__all__ = [
    'ReconciliationAnalyzer',
    'reconcile',
    'ReconConfig',
    'ExceptionRuleTable',
    'DEFAULT_EXCEPTION_RULES',
    'build_default_table',
    'LoaderError',
    'ClientMatch',
    'ClientMatchType',
    'EmployeeMatch',
    'EmployeeMatchType',
    'ClientMatcher',
    'EmployeeMatcher',
    'LedgerARecord',
    'LedgerBRecord',
    'DepositRecord',
    'VarianceEntry',
    'VarianceType',
    'ClientSummary',
    'ReconResults',
    'normalize_name',
    'ReconReport',
    'similarity',
]
