"""
Shared test fixtures for the ledger reconciliation test suite.
"""
import sys
import os
from decimal import Decimal

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from ledger_recon.models import LedgerARecord, LedgerBRecord, DepositRecord


def A(client, employee, amount, memo="", type="Invoice"):
    return LedgerARecord(name=client, item=employee, amount=Decimal(str(amount)), memo=memo, type=type)


def B(employee, client, amount):
    return LedgerBRecord(name=employee, bill_to_name=client, item_bill=Decimal(str(amount)))


@pytest.fixture()
def sample_ledgers():
    """
    Three clients:
      Acme Corp / ACME CORP - matched, Jane Doe short by $100 in ledger B
      Other Co              - ledger A only ($50)
      Beta LLC              - ledger B only ($250)
    """
    records_a = [
        A("Acme Corp", "John Smith", 500, memo="Plant 1"),
        A("Acme Corp", "Jane Doe", 500, memo="Plant 2"),
        A("Other Co", "Sam Hill", 50),
    ]
    records_b = [
        B("John Smith", "ACME CORP", 500),
        B("Jane Doe", "ACME CORP", 400),
        B("Kim Park", "Beta LLC", 250),
    ]
    return records_a, records_b


@pytest.fixture()
def sample_deposits():
    return [
        DepositRecord(client_name="Acme Corp", payment_method="Check", amount=Decimal("900")),
        DepositRecord(client_name="Acme Corp", payment_method="ACH", amount=Decimal("100")),
        DepositRecord(client_name="Beta LLC", payment_method="ACH", amount=Decimal("250")),
    ]
