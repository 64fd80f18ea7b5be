"""
Data model for rule evaluation.

A rule pairs a condition tree with the output it produces when the tree
matches an input record. Expectations describe what a named input should
evaluate to, and comparison outcomes record whether it did.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

from .conditions import ConditionTree, parse_condition


# Reserved key in an expectation's expected mapping naming the rule that
# should fire. Every other key is compared against the evaluation output.
MATCHED_RULE_KEY = 'matched_rule'


@dataclass(frozen=True)
class Rule:
    """A single ordered decision rule."""
    id: str
    condition: ConditionTree
    output: Dict[str, Any]
    description: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.condition, ConditionTree):
            object.__setattr__(self, 'condition', parse_condition(self.condition))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Rule':
        """
        Build a rule from its loaded YAML form.

        Accepts the file spelling (``when``/``then``) as well as the
        attribute names (``condition``/``output``).
        """
        raw_condition = data['when'] if 'when' in data else data.get('condition', {})
        raw_output = data['then'] if 'then' in data else data.get('output', {})
        return cls(
            id=data['id'],
            condition=raw_condition,
            output=dict(raw_output),
            description=data.get('description'),
        )


@dataclass
class EvaluationResult:
    """Which rule fired for an input, and the output it produced."""
    matched_rule_id: Optional[str]
    output: Dict[str, Any] = field(default_factory=dict)

    @property
    def matched(self) -> bool:
        return self.matched_rule_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            MATCHED_RULE_KEY: self.matched_rule_id,
            'output': dict(self.output),
        }


@dataclass(frozen=True)
class Expectation:
    """A named input and the evaluation result it is expected to produce."""
    name: str
    input: Dict[str, Any]
    expected: Dict[str, Any]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Expectation':
        expected = data['expect'] if 'expect' in data else data.get('expected', {})
        return cls(name=data['name'], input=dict(data['input']), expected=dict(expected))


@dataclass
class ComparisonOutcome:
    """Result of running one expectation through the evaluator."""
    passed: bool
    actual: EvaluationResult
    expectation: Expectation
    reason: Optional[str] = None  # only set when passed is False
    file: Optional[str] = None

    @property
    def name(self) -> str:
        return self.expectation.name
