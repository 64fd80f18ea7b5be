"""
Console formatting for check runs.

Each function returns a string of rich console markup; printing is left to
the caller. Values that come from user files are escaped so brackets in
rule ids or test names are never read as markup.
"""
from typing import Any, Dict
import json

from rich.markup import escape

from evaluation import ComparisonOutcome, MATCHED_RULE_KEY
from loading import ValidationError


def indent(text: str, spaces: int) -> str:
    prefix = ' ' * spaces
    return '\n'.join(prefix + line for line in text.split('\n'))


def format_value(value: Any) -> str:
    return json.dumps(value, default=str)


def format_object(obj: Dict[str, Any], spaces: int = 4) -> str:
    lines = [f"{key}: {format_value(value)}" for key, value in obj.items()]
    return indent(escape('\n'.join(lines)), spaces)


def format_validation_error(error: ValidationError) -> str:
    lines = [
        '[red]ERROR: Invalid syntax[/red]',
        '',
        f"  File: {escape(error.file)}",
    ]

    if error.line is not None:
        lines.append(f"  Line: {error.line}")

    lines.append(f"  Problem: {escape(error.message)}")

    if error.hint:
        lines.extend(['', f"  {escape(error.hint)}"])

    lines.append('')
    return '\n'.join(lines)


def format_test_failure(outcome: ComparisonOutcome) -> str:
    expectation = outcome.expectation
    matched = outcome.actual.matched_rule_id
    lines = [
        f"[red]FAILED: {escape(expectation.name)}[/red]",
        '',
        f"  File: {escape(outcome.file or '-')}",
        f"  Test: {escape(expectation.name)}",
        '',
        '  Input:',
        format_object(expectation.input),
        '',
        '  Expected:',
        format_object(expectation.expected),
        '',
        '  Actual:',
        f"    {MATCHED_RULE_KEY}: {escape(format_value(matched))}",
    ]

    if outcome.actual.output:
        lines.append(format_object(outcome.actual.output))

    if outcome.reason:
        lines.extend(['', f"  Why: {escape(outcome.reason)}"])

    lines.append('')
    return '\n'.join(lines)


def format_load_success(file: str, count: int, kind: str) -> str:
    return f"[green]  ✓[/green] {escape(file)} ({count} {kind})"


def format_load_error(file: str) -> str:
    return f"[red]  ✗[/red] {escape(file)}"


def format_test_file_success(file: str, passed: int) -> str:
    return f"[green]  ✓[/green] {escape(file)} ({passed} passed)"


def format_test_file_failure(file: str, passed: int, failed: int) -> str:
    return f"[red]  ✗[/red] {escape(file)} ({passed} passed, {failed} failed)"


def format_summary(total: int, passed: int, failed: int) -> str:
    if failed == 0:
        return f"[green]\n✓ All {total} tests passed\n[/green]"
    return f"[red]\n✗ {failed} of {total} tests failed\n[/red]"
