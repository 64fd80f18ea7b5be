"""
Metrics collection for check runs.

CheckMetrics tracks what a single `logicrepo check` run loaded and how the
tests fared:
- Rule and test files loaded, and files rejected by validation
- Tests passed and failed
- Which rules fired during the tests, and how often
- Tests whose input matched no rule at all

Design decisions:
- Single metrics object per run
- Defaultdict used for automatic initialization of counters
- Serializable to_dict() for the Markdown report and JSON consumers
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Any, Optional
from collections import defaultdict

from evaluation import ComparisonOutcome


@dataclass
class CheckMetrics:
    """
    Metrics for a single check run.

    Counts are updated by the runner as files load and outcomes arrive.
    """
    started_at: datetime
    completed_at: Optional[datetime] = None

    rule_files: int = 0
    rules_loaded: int = 0
    test_files: int = 0
    tests_passed: int = 0
    tests_failed: int = 0

    # Files rejected by the loader: {"file": ..., "message": ...}
    load_errors: List[Dict[str, Any]] = field(default_factory=list)

    # Key: rule id, Value: number of tests whose input fired it
    rules_fired: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    # Tests whose input matched no rule
    unmatched_tests: int = 0

    @property
    def tests_total(self) -> int:
        return self.tests_passed + self.tests_failed

    @property
    def succeeded(self) -> bool:
        return not self.load_errors and self.tests_failed == 0

    def record_outcome(self, outcome: ComparisonOutcome):
        """
        Record a comparison outcome.

        Args:
            outcome: Result of one expectation check
        """
        if outcome.passed:
            self.tests_passed += 1
        else:
            self.tests_failed += 1

        if outcome.actual.matched_rule_id is None:
            self.unmatched_tests += 1
        else:
            self.rules_fired[outcome.actual.matched_rule_id] += 1

    def record_load_error(self, file: str, message: str):
        self.load_errors.append({"file": file, "message": message})

    def unfired_rules(self, rule_ids: List[str]) -> List[str]:
        """Rule ids that no test exercised, in the given order."""
        return [rule_id for rule_id in rule_ids if rule_id not in self.rules_fired]

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert metrics to dictionary for JSON serialization.

        Returns:
            Dictionary representation with ISO timestamps
        """
        return {
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "rule_files": self.rule_files,
            "rules_loaded": self.rules_loaded,
            "test_files": self.test_files,
            "tests_total": self.tests_total,
            "tests_passed": self.tests_passed,
            "tests_failed": self.tests_failed,
            "unmatched_tests": self.unmatched_tests,
            "load_errors": list(self.load_errors),
            "rules_fired": dict(self.rules_fired),
        }
