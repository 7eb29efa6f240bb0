"""
Entry point for running the reconciliation module as a script.

Usage:
    python -m ledger_recon run ledger_a.xlsx ledger_b.csv
    python -m ledger_recon rules
"""

from .cli import main

if __name__ == '__main__':
    main()
