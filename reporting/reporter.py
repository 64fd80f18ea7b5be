"""
Generate Markdown reports for check runs.

Report sections:
- Header with run timestamp and duration
- Summary table with core counts
- Rules fired during the tests, plus rules no test exercised
- Failed tests with their diagnosis
- Files rejected by the loader

Design decisions:
- Markdown output so reports can be committed next to the logic files
- Uses tabulate library for table formatting (GitHub-flavored)
- Reports saved with timestamp for historical tracking
"""
from datetime import datetime
from typing import List, Optional
from pathlib import Path
from tabulate import tabulate

from evaluation import ComparisonOutcome
from .metrics import CheckMetrics


class CheckReporter:
    """Generates Markdown reports from check run metrics and outcomes."""

    def generate_report(
        self,
        metrics: CheckMetrics,
        outcomes: List[ComparisonOutcome],
        rule_ids: Optional[List[str]] = None
    ) -> str:
        """
        Generate full run report in Markdown format.

        Args:
            metrics: CheckMetrics from a completed run
            outcomes: Every comparison outcome of the run
            rule_ids: All loaded rule ids, in order, to list unexercised rules

        Returns:
            Markdown-formatted report as string
        """
        lines = []

        lines.append("# Logic Check Report")
        lines.append(f"**Started:** {metrics.started_at.isoformat()}")
        if metrics.completed_at:
            duration = (metrics.completed_at - metrics.started_at).total_seconds()
            lines.append(f"**Duration:** {duration:.2f} seconds")
        status = "PASSED" if metrics.succeeded else "FAILED"
        lines.append(f"**Status:** {status}")
        lines.append("")

        lines.append("## Summary")
        summary_data = [
            ["Rule Files", metrics.rule_files],
            ["Rules", metrics.rules_loaded],
            ["Test Files", metrics.test_files],
            ["Tests", metrics.tests_total],
            ["Passed", metrics.tests_passed],
            ["Failed", metrics.tests_failed],
            ["Unmatched Inputs", metrics.unmatched_tests],
            ["Load Errors", len(metrics.load_errors)],
        ]
        lines.append(tabulate(summary_data, headers=["Metric", "Value"], tablefmt="github"))
        lines.append("")

        if metrics.rules_fired:
            lines.append("## Rules Fired")
            rules_data = [[k, v] for k, v in sorted(metrics.rules_fired.items())]
            lines.append(tabulate(rules_data, headers=["Rule", "Count"], tablefmt="github"))
            lines.append("")

        if rule_ids:
            unfired = metrics.unfired_rules(rule_ids)
            if unfired:
                lines.append("## Rules Without Tests")
                lines.extend(f"- `{rule_id}`" for rule_id in unfired)
                lines.append("")

        failures = [o for o in outcomes if not o.passed]
        if failures:
            lines.append("## Failed Tests")
            failure_data = [
                [o.file or "-", o.name, o.actual.matched_rule_id or "-", o.reason]
                for o in failures
            ]
            lines.append(tabulate(
                failure_data,
                headers=["File", "Test", "Matched Rule", "Reason"],
                tablefmt="github"
            ))
            lines.append("")

        if metrics.load_errors:
            lines.append("## Load Errors")
            error_data = [[e["file"], e["message"]] for e in metrics.load_errors]
            lines.append(tabulate(error_data, headers=["File", "Problem"], tablefmt="github"))
            lines.append("")

        return "\n".join(lines)

    def save_report(self, report: str, output_dir: Path) -> Path:
        """
        Save report to file with timestamp.

        Args:
            report: Markdown report content
            output_dir: Directory to save report in

        Returns:
            Path to saved report file
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        filepath = output_dir / f"check-report-{timestamp}.md"
        filepath.write_text(report, encoding="utf-8")
        return filepath
