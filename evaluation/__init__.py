"""
Rule evaluation core.

Provides condition matching, first-match-wins rule evaluation and
expectation comparison with mismatch diagnosis. Every function here is pure
over its inputs.
"""
from .conditions import (
    ConditionTree,
    Scalar,
    Range,
    SetMembership,
    Malformed,
    MISSING,
    parse_condition,
    match_field,
    match_conditions,
    matches,
)
from .rules import (
    Rule,
    EvaluationResult,
    Expectation,
    ComparisonOutcome,
    MATCHED_RULE_KEY,
)
from .rule_engine import RuleEngine, evaluate, evaluate_by_type, rules_of_type, type_scope
from .comparer import compare, deep_equal, generate_reason, run_expectations


__all__ = [
    'ConditionTree',
    'Scalar',
    'Range',
    'SetMembership',
    'Malformed',
    'MISSING',
    'parse_condition',
    'match_field',
    'match_conditions',
    'matches',
    'Rule',
    'EvaluationResult',
    'Expectation',
    'ComparisonOutcome',
    'MATCHED_RULE_KEY',
    'RuleEngine',
    'evaluate',
    'evaluate_by_type',
    'rules_of_type',
    'type_scope',
    'compare',
    'deep_equal',
    'generate_reason',
    'run_expectations',
]
