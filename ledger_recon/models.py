"""
Input and output records for a reconciliation run.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Optional, List, Dict, Any

from .config import DEFAULT_PAYMENT_TYPE

if TYPE_CHECKING:
    from .matchers.base import ClientMatch, EmployeeMatch


def _money(value: Decimal) -> str:
    return str(Decimal(value).quantize(Decimal("0.01")))


# ============================================================================
# INPUT RECORDS
# ============================================================================

@dataclass
class LedgerARecord:
    """
    One accounting-ledger transaction line.

    Attributes:
        name: Client name
        memo: Memo / job site
        item: Item label, which carries the employee name
        amount: Line amount
    """
    name: str
    item: str = ""
    amount: Decimal = Decimal("0")
    memo: str = ""
    type: str = ""
    account: str = ""
    rep: str = ""
    po_number: str = ""


@dataclass
class LedgerBRecord:
    """
    One staffing-ledger timesheet line.

    Attributes:
        name: Worker name
        bill_to_name: Client billed for the work
        item_bill: Amount billed to the client
        item_pay: Amount paid to the worker
        week_worked: Week ending date
    """
    name: str
    bill_to_name: str
    item_bill: Decimal = Decimal("0")
    item_pay: Decimal = Decimal("0")
    week_worked: Optional[date] = None


@dataclass
class DepositRecord:
    """A received payment, used only to annotate a client's payment method."""
    client_name: str
    payment_method: str = "ACH"  # "Check" or "ACH"
    amount: Decimal = Decimal("0")
    date: Optional[date] = None
    check_number: str = ""


# ============================================================================
# OUTPUT RECORDS
# ============================================================================

class VarianceType(str, Enum):
    A_ONLY_EMPLOYEE = "A-only employee"
    B_ONLY_EMPLOYEE = "B-only employee"
    AMOUNT_VARIANCE = "Amount variance"
    CLIENT_LEVEL = "Client-level variance"
    A_ONLY_CLIENT = "A-only client"
    B_ONLY_CLIENT = "B-only client"


@dataclass
class VarianceEntry:
    """A dollar discrepancy attributed to a client, and optionally an employee."""
    client_name: str
    employee_name: str
    amount_a: Decimal
    amount_b: Decimal
    variance_type: VarianceType
    notes: str = ""

    @property
    def variance(self) -> Decimal:
        return self.amount_a - self.amount_b

    def to_dict(self) -> Dict[str, Any]:
        return {
            "client_name": self.client_name,
            "employee_name": self.employee_name,
            "amount_a": _money(self.amount_a),
            "amount_b": _money(self.amount_b),
            "variance": _money(self.variance),
            "variance_type": self.variance_type.value,
            "notes": self.notes,
        }


@dataclass
class ClientSummary:
    """Per-client totals across both ledgers."""
    client_name: str
    ledger_a_total: Decimal = Decimal("0")
    ledger_b_name: str = ""
    ledger_b_total: Decimal = Decimal("0")
    match_type: str = ""
    payment_type: str = DEFAULT_PAYMENT_TYPE
    invoice_count: int = 0
    record_count: int = 0
    employees: List[str] = field(default_factory=list)
    job_sites: List[str] = field(default_factory=list)

    @property
    def variance(self) -> Decimal:
        return self.ledger_a_total - self.ledger_b_total

    def to_dict(self) -> Dict[str, Any]:
        return {
            "client_name": self.client_name,
            "ledger_a_total": _money(self.ledger_a_total),
            "ledger_b_name": self.ledger_b_name,
            "ledger_b_total": _money(self.ledger_b_total),
            "variance": _money(self.variance),
            "match_type": self.match_type,
            "payment_type": self.payment_type,
            "invoice_count": self.invoice_count,
            "record_count": self.record_count,
            "employees": list(self.employees),
            "job_sites": list(self.job_sites),
        }


@dataclass
class ReconRunStats:
    """
    Statistics for a reconciliation run.
    """
    run_id: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    total_clients: int = 0
    matched_clients: int = 0
    by_client_match_type: Dict[str, int] = field(default_factory=dict)
    matched_employees: int = 0
    unmatched_employees: int = 0
    variance_count: int = 0
    total_variance: Decimal = Decimal("0")
    client_match_rate: float = 0.0

    def finalize(self):
        """Calculate final statistics."""
        self.completed_at = datetime.now()
        if self.total_clients > 0:
            self.client_match_rate = (self.matched_clients / self.total_clients) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "total_clients": self.total_clients,
            "matched_clients": self.matched_clients,
            "client_match_rate": round(self.client_match_rate, 2),
            "by_client_match_type": self.by_client_match_type,
            "matched_employees": self.matched_employees,
            "unmatched_employees": self.unmatched_employees,
            "variance_count": self.variance_count,
            "total_variance": _money(self.total_variance),
        }


@dataclass
class ReconResults:
    """Everything a run hands back to rendering and export code."""
    stats: ReconRunStats
    client_matches: List["ClientMatch"] = field(default_factory=list)
    employee_matches: Dict[str, List["EmployeeMatch"]] = field(default_factory=dict)
    variances: List[VarianceEntry] = field(default_factory=list)
    client_summaries: List[ClientSummary] = field(default_factory=list)
    deposits: List[DepositRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stats": self.stats.to_dict(),
            "client_matches": [m.to_dict() for m in self.client_matches],
            "employee_matches": {
                client: [m.to_dict() for m in matches]
                for client, matches in self.employee_matches.items()
            },
            "variances": [v.to_dict() for v in self.variances],
            "client_summaries": [s.to_dict() for s in self.client_summaries],
        }
