"""
Expectation comparison and mismatch diagnosis.

Runs a named input through the rule evaluator, checks the result against
the expected mapping, and on failure produces a single human-readable
reason. Reasons are selected in priority order:

1. Expected rule, nothing matched
2. Another rule matched, and it sits earlier in the rule list (ordering)
3. Another rule matched
4. An output field differs
5. Unknown mismatch
"""
from collections.abc import Mapping, Sequence
from typing import List, Dict, Any, Optional
import json

from .conditions import MISSING, is_number
from .rule_engine import DEFAULT_DISCRIMINATOR, evaluate, evaluate_by_type, type_scope
from .rules import (
    MATCHED_RULE_KEY,
    ComparisonOutcome,
    EvaluationResult,
    Expectation,
    Rule,
)


def deep_equal(a: Any, b: Any) -> bool:
    """
    Structural equality over JSON-like values.

    Mappings compare by key set and values irrespective of key order,
    sequences element-wise in order, scalars strictly (booleans never
    equal numbers, numbers never equal strings).
    """
    if a is None or b is None:
        return a is None and b is None
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) or is_number(b):
        return is_number(a) and is_number(b) and a == b
    if isinstance(a, str) or isinstance(b, str):
        return isinstance(a, str) and isinstance(b, str) and a == b
    if isinstance(a, Mapping) or isinstance(b, Mapping):
        if not (isinstance(a, Mapping) and isinstance(b, Mapping)):
            return False
        if set(a.keys()) != set(b.keys()):
            return False
        return all(deep_equal(a[key], b[key]) for key in a)
    if isinstance(a, Sequence) or isinstance(b, Sequence):
        if not (isinstance(a, Sequence) and isinstance(b, Sequence)):
            return False
        if len(a) != len(b):
            return False
        return all(deep_equal(x, y) for x, y in zip(a, b))
    # Dates and other YAML scalars
    return type(a) is type(b) and a == b


def _render(value: Any) -> str:
    if value is MISSING:
        return '<missing>'
    return json.dumps(value, default=str)


def _expected_output(expected: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in expected.items() if key != MATCHED_RULE_KEY}


def _first_output_mismatch(expected: Dict[str, Any], actual: EvaluationResult) -> Optional[str]:
    for key, expected_value in _expected_output(expected).items():
        if not deep_equal(expected_value, actual.output.get(key, MISSING)):
            return key
    return None


def _rule_position(rules: List[Rule], rule_id: Any) -> Optional[int]:
    for position, rule in enumerate(rules):
        if rule.id == rule_id:
            return position
    return None


def generate_reason(
    expected: Dict[str, Any],
    actual: EvaluationResult,
    rules: List[Rule]
) -> str:
    """
    Explain why an evaluation result does not meet an expectation.

    Args:
        expected: Expected mapping, optionally carrying the matched rule key
        actual: Result produced by the evaluator
        rules: Full rule list, used to compare rule positions

    Returns:
        Reason string
    """
    if MATCHED_RULE_KEY in expected and expected[MATCHED_RULE_KEY] != actual.matched_rule_id:
        expected_id = expected[MATCHED_RULE_KEY]

        if actual.matched_rule_id is None:
            return "No rule matched the input. Check your rule conditions."

        if expected_id is None:
            return f"Expected no rule to match, but '{actual.matched_rule_id}' matched instead."

        expected_position = _rule_position(rules, expected_id)
        actual_position = _rule_position(rules, actual.matched_rule_id)
        if (
            expected_position is not None
            and actual_position is not None
            and actual_position < expected_position
        ):
            return (
                f"Rule '{actual.matched_rule_id}' matched before '{expected_id}'. "
                "Check rule ordering."
            )

        return (
            f"Expected rule '{expected_id}' to match, "
            f"but '{actual.matched_rule_id}' matched instead."
        )

    key = _first_output_mismatch(expected, actual)
    if key is not None:
        return (
            f"Output mismatch: expected {key}={_render(expected[key])}, "
            f"got {_render(actual.output.get(key, MISSING))}"
        )

    return "Unknown mismatch"


def compare(
    expectation: Expectation,
    rules: List[Rule],
    discriminator: str = DEFAULT_DISCRIMINATOR,
    file: Optional[str] = None
) -> ComparisonOutcome:
    """
    Evaluate an expectation's input and check the result.

    Inputs carrying a non-empty string discriminator value are evaluated
    against the rules scoped to that type only.

    Args:
        expectation: Named input with its expected result
        rules: Full ordered rule list
        discriminator: Input field used to scope rules by type
        file: Source file of the expectation, for reporting

    Returns:
        ComparisonOutcome; reason is set only when the check failed
    """
    rule_type = type_scope(expectation.input, discriminator)
    if rule_type is not None:
        actual = evaluate_by_type(rules, rule_type, expectation.input, discriminator)
    else:
        actual = evaluate(rules, expectation.input)

    expected = expectation.expected
    rule_correct = (
        MATCHED_RULE_KEY not in expected
        or expected[MATCHED_RULE_KEY] == actual.matched_rule_id
    )
    output_correct = _first_output_mismatch(expected, actual) is None
    passed = rule_correct and output_correct

    return ComparisonOutcome(
        passed=passed,
        actual=actual,
        expectation=expectation,
        reason=None if passed else generate_reason(expected, actual, rules),
        file=file,
    )


def run_expectations(
    expectations: List[Expectation],
    rules: List[Rule],
    discriminator: str = DEFAULT_DISCRIMINATOR,
    file: Optional[str] = None
) -> List[ComparisonOutcome]:
    return [compare(expectation, rules, discriminator, file) for expectation in expectations]
