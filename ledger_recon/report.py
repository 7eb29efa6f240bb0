"""
Reconciliation Report

Renders ReconResults as a console summary, markdown, or a JSON-ready dict.
"""

from dataclasses import dataclass
from typing import Dict, Any

from .analyzer import format_amount
from .models import ReconResults

# Rows shown per markdown table before truncating
DISPLAY_LIMIT = 50


@dataclass
class ReconReport:
    """
    Presentation wrapper around a reconciliation run.
    """
    results: ReconResults
    limit: int = DISPLAY_LIMIT

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return self.results.to_dict()

    def to_markdown(self) -> str:
        """Generate markdown report."""
        stats = self.results.stats
        lines = []

        lines.append(f"# Reconciliation: run {stats.run_id}")
        lines.append(f"Started: {stats.started_at.isoformat(timespec='seconds')}")
        lines.append("")

        lines.append("## Summary")
        lines.append("")
        lines.append("| Metric | Value |")
        lines.append("|--------|-------|")
        lines.append(f"| Clients | {stats.total_clients:,} |")
        lines.append(f"| Matched clients | {stats.matched_clients:,} ({stats.client_match_rate:.1f}%) |")
        lines.append(f"| Matched employees | {stats.matched_employees:,} |")
        lines.append(f"| Unmatched employees | {stats.unmatched_employees:,} |")
        lines.append(f"| Variances | {stats.variance_count:,} |")
        lines.append(f"| Net variance | {format_amount(stats.total_variance)} |")
        lines.append("")

        matches = self.results.client_matches
        if matches:
            lines.append(f"## Client Matches ({len(matches)})")
            lines.append("")
            lines.append("| Ledger A | Ledger B | Match Type |")
            lines.append("|----------|----------|------------|")
            for m in matches[:self.limit]:
                lines.append(f"| {m.ledger_a_name or '-'} | {m.ledger_b_name or '-'} | {m.match_type.value} |")
            if len(matches) > self.limit:
                lines.append(f"| ... | {len(matches) - self.limit} more | ... |")
            lines.append("")

        variances = self.results.variances
        if variances:
            lines.append(f"## Variances ({len(variances)})")
            lines.append("")
            lines.append("| Client | Employee | Ledger A | Ledger B | Variance | Type |")
            lines.append("|--------|----------|----------|----------|----------|------|")
            for v in variances[:self.limit]:
                lines.append(
                    f"| {v.client_name} | {v.employee_name} | "
                    f"{format_amount(v.amount_a)} | {format_amount(v.amount_b)} | "
                    f"{format_amount(v.variance)} | {v.variance_type.value} |"
                )
            if len(variances) > self.limit:
                lines.append(f"| ... | {len(variances) - self.limit} more | ... | ... | ... | ... |")
            lines.append("")

        return "\n".join(lines)

    def print_summary(self):
        """Print summary to console."""
        stats = self.results.stats
        print(f"\n{'='*60}")
        print(f"RECONCILIATION: run {stats.run_id}")
        print(f"{'='*60}")
        print(f"Clients:          {stats.total_clients:,}")
        print(f"Matched clients:  {stats.matched_clients:,} ({stats.client_match_rate:.1f}%)")
        for match_type, count in sorted(stats.by_client_match_type.items()):
            print(f"    {match_type}: {count:,}")
        print(f"Employees:        {stats.matched_employees:,} matched, {stats.unmatched_employees:,} unmatched")
        print(f"Variances:        {stats.variance_count:,} (net {format_amount(stats.total_variance)})")
        print()

        for v in self.results.variances:
            print(f"  {v.client_name} / {v.employee_name}: {format_amount(v.variance)} [{v.variance_type.value}]")
        print(f"{'='*60}\n")
