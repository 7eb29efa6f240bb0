"""
File loaders for the command-line harness.

Reads CSV or Excel exports whose headers already use the canonical
column names and turns each row into a record. Column mapping and
cleanup of messy exports happen upstream.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

import pandas as pd

from .errors import LoaderError
from .models import LedgerARecord, LedgerBRecord, DepositRecord

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

LEDGER_A_REQUIRED = ("Name", "Item", "Amount")
LEDGER_B_REQUIRED = ("Name", "BillToName", "ItemBill")
DEPOSIT_REQUIRED = ("Name", "Amount")


def read_table(path: PathLike) -> pd.DataFrame:
    """
    Read a CSV or Excel file with every cell as a string.

    Blank cells come back as empty strings.
    """
    path = Path(path)
    if not path.exists():
        raise LoaderError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix in (".xlsx", ".xlsm"):
        df = pd.read_excel(path, engine="openpyxl", dtype=str)
    elif suffix in (".csv", ".txt"):
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    else:
        raise LoaderError(f"Unsupported file type '{suffix}': {path}")

    df.columns = [str(c).strip() for c in df.columns]
    return df.fillna("")


def _require_columns(df: pd.DataFrame, required: Iterable[str], path: PathLike):
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise LoaderError(f"{path}: missing required column(s): {', '.join(missing)}")


def to_decimal(value) -> Decimal:
    """
    Parse a currency cell: "$1,234.50", "-12", "(99.00)" or blank.
    """
    text = str(value).strip().replace("$", "").replace(",", "")
    if not text:
        return Decimal("0")
    negative = text.startswith("(") and text.endswith(")")
    if negative:
        text = text[1:-1]
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise LoaderError(f"Cannot parse amount: {value!r}")
    return -amount if negative else amount


def to_date(value) -> Optional[date]:
    text = str(value).strip()
    if not text:
        return None
    try:
        return pd.to_datetime(text).date()
    except (ValueError, TypeError):
        raise LoaderError(f"Cannot parse date: {value!r}")


def _cell(row: Dict[str, str], column: str) -> str:
    return str(row.get(column, "")).strip()


def load_ledger_a(path: PathLike) -> List[LedgerARecord]:
    """Ledger-A lines; rows without a client name are dropped."""
    df = read_table(path)
    _require_columns(df, LEDGER_A_REQUIRED, path)

    records = []
    for row in df.to_dict("records"):
        name = _cell(row, "Name")
        if not name:
            continue
        records.append(LedgerARecord(
            name=name,
            item=_cell(row, "Item"),
            amount=to_decimal(row.get("Amount", "")),
            memo=_cell(row, "Memo"),
            type=_cell(row, "Type"),
            account=_cell(row, "Account"),
            rep=_cell(row, "Rep"),
            po_number=_cell(row, "PONumber"),
        ))

    logger.info(f"Loaded {len(records):,} ledger-A lines from {path}")
    return records


def load_ledger_b(path: PathLike) -> List[LedgerBRecord]:
    """Ledger-B lines; rows without a bill-to client are dropped."""
    df = read_table(path)
    _require_columns(df, LEDGER_B_REQUIRED, path)

    records = []
    for row in df.to_dict("records"):
        bill_to = _cell(row, "BillToName")
        if not bill_to:
            continue
        records.append(LedgerBRecord(
            name=_cell(row, "Name"),
            bill_to_name=bill_to,
            item_bill=to_decimal(row.get("ItemBill", "")),
            item_pay=to_decimal(row.get("ItemPay", "")),
            week_worked=to_date(row.get("WeekWorked", "")),
        ))

    logger.info(f"Loaded {len(records):,} ledger-B lines from {path}")
    return records


def load_deposits(path: PathLike) -> List[DepositRecord]:
    """
    Deposit lines. A check number in `Num` means the client pays by check,
    otherwise ACH.
    """
    df = read_table(path)
    _require_columns(df, DEPOSIT_REQUIRED, path)

    records = []
    for row in df.to_dict("records"):
        name = _cell(row, "Name")
        if not name:
            continue
        check_number = _cell(row, "Num")
        records.append(DepositRecord(
            client_name=name,
            payment_method="Check" if check_number else "ACH",
            amount=to_decimal(row.get("Amount", "")),
            date=to_date(row.get("Date", "")),
            check_number=check_number,
        ))

    logger.info(f"Loaded {len(records):,} deposits from {path}")
    return records
