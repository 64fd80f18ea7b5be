#!/usr/bin/env python3
"""
Command-line entry point for validating business logic kept in YAML.

A logic directory holds two trees of YAML files:
- rules/: ordered decision rules (first match wins, across files in
  sorted path order)
- tests/: named inputs with the result each is expected to produce

`check` loads every rule file, runs every test against the combined rule
list and reports failures with a diagnosis. `evaluate` runs one JSON input
against the rules and prints the result.

Exit codes:
    0  all files loaded and all tests passed
    1  a file failed to load, a test failed, or the run could not start

Usage:
    python run_checks.py [--config config.yaml] check [--dir ./logic] [--report]
    python run_checks.py evaluate --input '{"tier": "vip"}'
"""
import sys
import json
import logging
import argparse
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from evaluation import Rule, ComparisonOutcome, RuleEngine, run_expectations, type_scope
from loading import (
    CheckConfig,
    describe_rule_ids,
    find_yaml_files,
    is_validation_error,
    load_config,
    load_rule_file,
    load_test_file,
)
from reporting import CheckMetrics, CheckReporter, formatter

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


class LogicChecker:
    """
    Loads a logic directory and runs its tests.

    The run follows a fixed order:
    1. Load every rule file (errors are collected, not fatal)
    2. Load every test file and run its tests against all loaded rules
    3. Print failures and a summary
    4. Optionally write a Markdown report
    """

    def __init__(self, config: CheckConfig, console: Optional[Console] = None):
        self.config = config
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.reporter = CheckReporter()
        self.rules: List[Rule] = []

    def load_rules(self, metrics: CheckMetrics) -> bool:
        """
        Load all rule files into self.rules.

        Returns:
            True if every rule file loaded
        """
        rules_path = self.config.rules_path
        self.console.print("\nLoading rules...")
        rule_files = find_yaml_files(rules_path)

        if not rule_files:
            self.console.print(f"  No rule files found in {escape(str(rules_path))}")

        errors = []
        loaded = []
        for path in rule_files:
            result = load_rule_file(path)
            if is_validation_error(result):
                self.console.print(formatter.format_load_error(str(path)))
                metrics.record_load_error(result.file, result.message)
                errors.append(result)
            else:
                self.console.print(
                    formatter.format_load_success(result.file, len(result.rules), "rules")
                )
                loaded.append(result)
                self.rules.extend(result.rules)

        metrics.rule_files = len(loaded)
        metrics.rules_loaded = len(self.rules)

        for rule_id, files in describe_rule_ids(loaded).items():
            if len(files) > 1:
                logger.warning(f"Rule id '{rule_id}' is defined in multiple files: {', '.join(files)}")

        if errors:
            self.console.print("")
            for error in errors:
                self.console.print(formatter.format_validation_error(error))

        logger.info(f"Loaded {len(self.rules)} rules from {len(loaded)} files")
        return not errors

    def run_tests(self, metrics: CheckMetrics) -> List[ComparisonOutcome]:
        tests_path = self.config.tests_path
        self.console.print("\nRunning tests...")
        test_files = find_yaml_files(tests_path)

        if not test_files:
            self.console.print(f"  No test files found in {escape(str(tests_path))}")

        outcomes: List[ComparisonOutcome] = []
        errors = []
        for path in test_files:
            result = load_test_file(path)
            if is_validation_error(result):
                self.console.print(formatter.format_load_error(str(path)))
                metrics.record_load_error(result.file, result.message)
                errors.append(result)
                continue

            metrics.test_files += 1
            file_outcomes = run_expectations(
                result.tests,
                self.rules,
                discriminator=self.config.discriminator_field,
                file=result.file,
            )
            for outcome in file_outcomes:
                metrics.record_outcome(outcome)
            outcomes.extend(file_outcomes)

            passed = sum(1 for o in file_outcomes if o.passed)
            failed = len(file_outcomes) - passed
            if failed:
                self.console.print(formatter.format_test_file_failure(result.file, passed, failed))
            else:
                self.console.print(formatter.format_test_file_success(result.file, passed))

        if errors:
            self.console.print("")
            for error in errors:
                self.console.print(formatter.format_validation_error(error))

        return outcomes

    def run(self, write_report: bool = False) -> CheckMetrics:
        """
        Execute a complete check run.

        Args:
            write_report: If True, save a Markdown report to the report dir

        Returns:
            CheckMetrics for the run
        """
        metrics = CheckMetrics(started_at=datetime.now())
        logger.info(f"Checking logic in {Path(self.config.logic_dir).resolve()}")

        self.load_rules(metrics)
        outcomes = self.run_tests(metrics)

        failures = [o for o in outcomes if not o.passed]
        if failures:
            self.console.print("")
            for outcome in failures:
                self.console.print(formatter.format_test_failure(outcome))

        self.console.print(formatter.format_summary(
            metrics.tests_total, metrics.tests_passed, metrics.tests_failed
        ))
        metrics.completed_at = datetime.now()

        if write_report:
            report = self.reporter.generate_report(
                metrics, outcomes, [rule.id for rule in self.rules]
            )
            report_path = self.reporter.save_report(report, Path(self.config.report_dir))
            self.console.print(f"Report: {escape(str(report_path))}")
            logger.info(f"Report written to {report_path}")

        return metrics


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logicrepo",
        description="Validate business logic defined in YAML files"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to configuration file (default: config.yaml if present)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Validate rules and run tests")
    check.add_argument("-d", "--dir", default=None, help="Base directory for logic files")
    check.add_argument(
        "--report",
        action="store_true",
        help="Write a Markdown report to the configured report directory"
    )

    evaluate = subparsers.add_parser("evaluate", help="Evaluate one input against the rules")
    evaluate.add_argument("-d", "--dir", default=None, help="Base directory for logic files")
    evaluate.add_argument("--input", required=True, help="Input record as a JSON object")
    evaluate.add_argument(
        "--rule-type",
        default=None,
        help="Only evaluate rules scoped to this discriminator value"
    )

    return parser


def _evaluate_command(config: CheckConfig, args: argparse.Namespace, console: Console) -> int:
    try:
        record = json.loads(args.input)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON input: {e}")
        return 1
    if not isinstance(record, dict):
        logger.error("Input must be a JSON object")
        return 1

    checker = LogicChecker(config, console)
    metrics = CheckMetrics(started_at=datetime.now())
    if not checker.load_rules(metrics):
        return 1

    engine = RuleEngine(checker.rules, discriminator=config.discriminator_field)
    rule_type = args.rule_type or type_scope(record, config.discriminator_field)
    if rule_type is not None:
        result = engine.evaluate_by_type(rule_type, record)
    else:
        result = engine.evaluate(record)

    console.print("")
    console.print_json(json.dumps(result.to_dict(), default=str))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = _build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        logging.basicConfig(format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        logger.error(f"Configuration error: {e}")
        return 1

    if args.dir:
        config.logic_dir = args.dir

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, config.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console = Console(highlight=False, soft_wrap=True)

    try:
        if args.command == "evaluate":
            return _evaluate_command(config, args, console)

        metrics = LogicChecker(config, console).run(write_report=args.report)
        return 0 if metrics.succeeded else 1

    except Exception as e:
        logger.error(f"Check failed: {e}", exc_info=args.verbose)
        return 1


if __name__ == "__main__":
    sys.exit(main())
