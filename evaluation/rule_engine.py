"""
Rule engine that evaluates input records against an ordered rule list.

Rules are applied in list order and the first matching rule determines the
result. Order is the priority mechanism: authors control it by placing
rules, typically ending with a catch-all rule whose condition is empty.
"""
from typing import List, Dict, Any, Optional, Sequence
import logging

from .conditions import Scalar, match_conditions, strict_equal
from .rules import Rule, EvaluationResult


logger = logging.getLogger(__name__)

DEFAULT_DISCRIMINATOR = 'rule_type'


def evaluate(rules: Sequence[Rule], record: Dict[str, Any]) -> EvaluationResult:
    """
    Return the first rule whose condition matches the record.

    Args:
        rules: Rules in priority order
        record: Input record

    Returns:
        EvaluationResult with the matched rule id and a copy of its output,
        or an empty result if no rule matched
    """
    for rule in rules:
        if match_conditions(rule.condition, record):
            return EvaluationResult(matched_rule_id=rule.id, output=dict(rule.output))

    return EvaluationResult(matched_rule_id=None, output={})


def type_scope(record: Dict[str, Any], field: str = DEFAULT_DISCRIMINATOR) -> Optional[Any]:
    """Discriminator value that scopes evaluation, or None for an unscoped record."""
    value = record.get(field)
    return value if value else None


def rules_of_type(
    rules: Sequence[Rule],
    rule_type: Any,
    field: str = DEFAULT_DISCRIMINATOR
) -> List[Rule]:
    """Rules constraining ``field`` at the top level to exactly ``rule_type``."""
    scoped = []
    for rule in rules:
        constraint = rule.condition.fields.get(field)
        if isinstance(constraint, Scalar) and strict_equal(constraint.value, rule_type):
            scoped.append(rule)
    return scoped


def evaluate_by_type(
    rules: Sequence[Rule],
    rule_type: Any,
    record: Dict[str, Any],
    field: str = DEFAULT_DISCRIMINATOR
) -> EvaluationResult:
    """
    Evaluate only the rules scoped to one discriminator value.

    Rules that do not constrain the discriminator field at the top level
    are out of scope, including catch-all rules.
    """
    return evaluate(rules_of_type(rules, rule_type, field), record)


class RuleEngine:
    """
    Evaluates records against a fixed, ordered rule list.

    Thin stateful wrapper over the pure evaluation functions, adding batch
    evaluation, evaluation traces and debug logging.
    """

    def __init__(self, rules: Sequence[Rule], discriminator: str = DEFAULT_DISCRIMINATOR):
        self.rules = list(rules)
        self.discriminator = discriminator

    def evaluate(self, record: Dict[str, Any]) -> EvaluationResult:
        result = evaluate(self.rules, record)
        self._log_result(result)
        return result

    def evaluate_by_type(self, rule_type: Any, record: Dict[str, Any]) -> EvaluationResult:
        result = evaluate_by_type(self.rules, rule_type, record, self.discriminator)
        self._log_result(result, rule_type)
        return result

    def evaluate_batch(self, records: List[Dict[str, Any]]) -> List[EvaluationResult]:
        """
        Evaluate multiple records.

        Records carrying a discriminator value are scoped to that type.

        Returns:
            List of results in same order as input
        """
        results = []
        for record in records:
            rule_type = type_scope(record, self.discriminator)
            if rule_type is not None:
                results.append(self.evaluate_by_type(rule_type, record))
            else:
                results.append(self.evaluate(record))
        return results

    def explain_evaluation(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Get a detailed trace of the evaluation.

        Every rule is checked, including those after the first match, so the
        trace shows which later rules were shadowed.

        Returns:
            Dictionary with the result, per-rule trace and shadowed rule ids
        """
        trace = []
        result = EvaluationResult(matched_rule_id=None, output={})

        for position, rule in enumerate(self.rules):
            matched = match_conditions(rule.condition, record)
            trace.append({
                'rule_id': rule.id,
                'position': position,
                'matched': matched,
            })
            if matched and not result.matched:
                result = EvaluationResult(matched_rule_id=rule.id, output=dict(rule.output))

        shadowed = [
            entry['rule_id'] for entry in trace
            if entry['matched'] and entry['rule_id'] != result.matched_rule_id
        ]

        return {
            'result': result,
            'evaluation_trace': trace,
            'shadowed_rules': shadowed,
            'total_rules_evaluated': len(trace),
        }

    def _log_result(self, result: EvaluationResult, rule_type: Optional[Any] = None):
        scope = f" (type {rule_type})" if rule_type is not None else ""
        if result.matched:
            logger.debug(f"Rule {result.matched_rule_id} matched{scope}")
        else:
            logger.debug(f"No rule matched{scope}")
