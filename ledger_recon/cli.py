"""
Command-line interface for ledger reconciliation.

Usage:
    python -m ledger_recon run ledger_a.xlsx ledger_b.csv
    python -m ledger_recon run ledger_a.csv ledger_b.csv --deposits deposits.csv --format markdown
    python -m ledger_recon test-client "LCI" "Lippert Group Inc" "Acme"
    python -m ledger_recon test-employee "Antonio Mendez" "Antonio Mendez Morillo"
    python -m ledger_recon rules
"""

import argparse
import json
import sys
import logging

from .config import ReconConfig, get_log_level
from .errors import LoaderError
from .exception_rules import ExceptionRuleTable, build_default_table

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else getattr(logging, get_log_level(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )


def load_config(args) -> ReconConfig:
    config = ReconConfig.from_env()
    if getattr(args, 'sort_names', False):
        config.sort_names = True
    if getattr(args, 'no_context', False):
        config.use_employee_context = False
    return config


def load_rules() -> ExceptionRuleTable:
    """Curated rules plus the exceptions file; exit 1 if the file is unusable."""
    try:
        return build_default_table()
    except LoaderError as e:
        print(f"Error: {e}")
        sys.exit(1)


def cmd_run(args):
    """Reconcile two ledger files."""
    from .analyzer import ReconciliationAnalyzer
    from .loaders import load_ledger_a, load_ledger_b, load_deposits
    from .report import ReconReport

    try:
        records_a = load_ledger_a(args.ledger_a)
        records_b = load_ledger_b(args.ledger_b)
        deposits = load_deposits(args.deposits) if args.deposits else None
    except LoaderError as e:
        print(f"Error: {e}")
        sys.exit(1)

    analyzer = ReconciliationAnalyzer(load_config(args), load_rules())
    report = ReconReport(analyzer.run(records_a, records_b, deposits))

    if args.format == "markdown":
        print(report.to_markdown())
    elif args.format == "json":
        print(json.dumps(report.to_dict(), indent=2, default=str))
    else:
        report.print_summary()


def _print_test_header(title: str, name: str, candidates):
    print(f"\n{'='*60}")
    print(title)
    print(f"{'='*60}")
    print(f"  Input: {name}")
    print(f"  Candidates: {', '.join(candidates)}")
    print()


def cmd_test_client(args):
    """Test client matching for a single name."""
    from .matchers.client import ClientMatcher

    matcher = ClientMatcher(load_config(args), load_rules())
    _print_test_header("CLIENT MATCH TEST", args.name, args.candidates)

    match = matcher.find_best_client_match(args.name, args.candidates)
    if match:
        print(f"  MATCHED!")
        print(f"  Target: {match}")
        print(f"  Type: {matcher.classify_match(args.name, match).value}")
        print(f"  Score: {matcher.name_similarity(args.name, match):.4f}")
    else:
        print(f"  NO MATCH FOUND")

    best, score, reason = matcher.extract_best_client_match(args.name, args.candidates)
    print(f"  Best scored: {best or '-'} ({score:.4f}, {reason})")
    print()


def cmd_test_employee(args):
    """Test employee matching for a single name."""
    from .matchers.employee import EmployeeMatcher

    matcher = EmployeeMatcher(load_config(args))
    _print_test_header("EMPLOYEE MATCH TEST", args.name, args.candidates)

    match = matcher.find_best_employee_match(args.name, args.candidates)
    if match:
        print(f"  MATCHED!")
        print(f"  Target: {match}")
        print(f"  Score: {matcher.name_similarity(args.name, match):.4f}")
    else:
        print(f"  NO MATCH FOUND")

    best, score, reason = matcher.extract_best_employee_match(args.name, args.candidates)
    print(f"  Best scored: {best or '-'} ({score:.4f}, {reason})")
    print()


def cmd_rules(args):
    """List active exception rules."""
    rules = load_rules()

    print("\n" + "=" * 60)
    print("EXCEPTION RULES")
    print("=" * 60 + "\n")

    for primary, alias in rules.pairs:
        print(f"  {primary}  <->  {alias}")
    print()


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Ledger Reconciliation CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m ledger_recon run ledger_a.xlsx ledger_b.csv
  python -m ledger_recon run ledger_a.csv ledger_b.csv --deposits deposits.csv --format json
  python -m ledger_recon test-client "LCI" "Lippert Group Inc"
  python -m ledger_recon test-employee "Antonio Mendez" "Antonio Mendez Morillo"
  python -m ledger_recon rules
        """
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Run command
    run_parser = subparsers.add_parser('run', help='Reconcile two ledger files')
    run_parser.add_argument('ledger_a', help='Ledger-A file (CSV or Excel)')
    run_parser.add_argument('ledger_b', help='Ledger-B file (CSV or Excel)')
    run_parser.add_argument('--deposits', help='Deposits file for payment methods')
    run_parser.add_argument('--format', '-f', choices=['summary', 'markdown', 'json'],
                            default='summary', help='Output format')
    run_parser.add_argument('--sort-names', action='store_true',
                            help='Process ledger-A names alphabetically instead of file order')
    run_parser.add_argument('--no-context', action='store_true',
                            help='Match employees by name only, ignoring amounts')
    run_parser.set_defaults(func=cmd_run)

    # Test commands
    client_parser = subparsers.add_parser('test-client', help='Test matching a single client name')
    client_parser.add_argument('name', help='Ledger-A client name')
    client_parser.add_argument('candidates', nargs='+', help='Ledger-B client names')
    client_parser.set_defaults(func=cmd_test_client)

    employee_parser = subparsers.add_parser('test-employee', help='Test matching a single employee name')
    employee_parser.add_argument('name', help='Ledger-A employee name')
    employee_parser.add_argument('candidates', nargs='+', help='Ledger-B employee names')
    employee_parser.set_defaults(func=cmd_test_employee)

    # Rules command
    rules_parser = subparsers.add_parser('rules', help='List exception rules')
    rules_parser.set_defaults(func=cmd_rules)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose)
    args.func(args)


if __name__ == '__main__':
    main()
