"""
Condition matching for rule evaluation.

A condition tree maps field names to constraints and may carry the reserved
``all``/``any`` keys holding nested trees. Raw mappings loaded from YAML are
parsed once into tagged constraint variants so that matching never has to
inspect object shapes:

- Scalar:        exact match, strict equality with no type coercion
- Range:         numeric bounds (gte, lte, gt, lt), all present bounds ANDed
- SetMembership: ``{in: [...]}``, strict membership in a heterogeneous list
- Malformed:     anything else; never matches

Matching is pure and total. Unrecognised shapes fail closed, with the single
exception of the empty tree, which matches every input (catch-all rules).
"""
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple, Union


ALL_KEY = 'all'
ANY_KEY = 'any'
IN_KEY = 'in'
RANGE_KEYS = ('gte', 'lte', 'gt', 'lt')


class _Missing:
    """Marker for a field absent from the input record."""

    def __repr__(self) -> str:
        return '<missing>'


# Absent and explicit null are distinct: a null constraint only matches
# a field that is present with the value None.
MISSING = _Missing()


@dataclass(frozen=True)
class Scalar:
    value: Any


@dataclass(frozen=True)
class Range:
    gte: Any = None
    lte: Any = None
    gt: Any = None
    lt: Any = None


@dataclass(frozen=True)
class SetMembership:
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class Malformed:
    raw: Any


FieldConstraint = Union[Scalar, Range, SetMembership, Malformed]


@dataclass
class ConditionTree:
    """Parsed condition: conjoined field constraints plus nested groups."""
    fields: Dict[str, FieldConstraint] = field(default_factory=dict)
    all_of: List['ConditionTree'] = field(default_factory=list)
    any_of: List['ConditionTree'] = field(default_factory=list)
    malformed: bool = False

    @property
    def is_catch_all(self) -> bool:
        return not (self.fields or self.all_of or self.any_of or self.malformed)


def is_number(value: Any) -> bool:
    """True for real numbers; booleans are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def strict_equal(a: Any, b: Any) -> bool:
    """
    Equality without implicit coercion.

    Numbers compare by value (1 == 1.0), but a number never equals its
    string form, and booleans only equal booleans.
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if is_number(a) and is_number(b):
        return a == b
    if a is None or b is None:
        return a is None and b is None
    if type(a) is not type(b):
        return False
    if isinstance(a, (dict, list)):
        # Compound values only match by identity
        return a is b
    return a == b


def parse_field_constraint(raw: Any) -> FieldConstraint:
    if isinstance(raw, Mapping):
        if any(key in raw for key in RANGE_KEYS):
            bounds = {key: raw[key] for key in RANGE_KEYS if key in raw}
            if not all(is_number(bound) for bound in bounds.values()):
                return Malformed(raw)
            return Range(**bounds)
        if IN_KEY in raw and _is_sequence(raw[IN_KEY]):
            return SetMembership(tuple(raw[IN_KEY]))
        return Malformed(raw)
    if raw is None or isinstance(raw, (str, bool, int, float)):
        return Scalar(raw)
    return Malformed(raw)


def parse_condition(raw: Any) -> ConditionTree:
    """
    Parse a raw condition mapping into a ConditionTree.

    Never raises. A non-mapping value yields a tree that matches nothing;
    an ``all``/``any`` value that is not a list adds no constraint.
    """
    if isinstance(raw, ConditionTree):
        return raw
    if not isinstance(raw, Mapping):
        return ConditionTree(malformed=True)

    tree = ConditionTree()
    for key, value in raw.items():
        if key == ALL_KEY:
            if _is_sequence(value):
                tree.all_of = [parse_condition(nested) for nested in value]
        elif key == ANY_KEY:
            if _is_sequence(value):
                tree.any_of = [parse_condition(nested) for nested in value]
        else:
            tree.fields[key] = parse_field_constraint(value)
    return tree


def _in_range(actual: Any, bounds: Range) -> bool:
    if not is_number(actual):
        return False
    if bounds.gte is not None and not actual >= bounds.gte:
        return False
    if bounds.lte is not None and not actual <= bounds.lte:
        return False
    if bounds.gt is not None and not actual > bounds.gt:
        return False
    if bounds.lt is not None and not actual < bounds.lt:
        return False
    return True


def match_field(constraint: FieldConstraint, actual: Any) -> bool:
    """Check one field constraint against the input value (or MISSING)."""
    if actual is MISSING:
        return False
    if isinstance(constraint, Range):
        return _in_range(actual, constraint)
    if isinstance(constraint, SetMembership):
        return any(strict_equal(actual, value) for value in constraint.values)
    if isinstance(constraint, Scalar):
        return strict_equal(actual, constraint.value)
    return False


def match_conditions(tree: ConditionTree, record: Mapping) -> bool:
    if tree.malformed:
        return False

    for field_name, constraint in tree.fields.items():
        if not match_field(constraint, record.get(field_name, MISSING)):
            return False

    for nested in tree.all_of:
        if not match_conditions(nested, record):
            return False

    if tree.any_of and not any(match_conditions(nested, record) for nested in tree.any_of):
        return False

    return True


def matches(condition: Any, record: Mapping) -> bool:
    """
    Decide whether an input record satisfies a condition.

    Args:
        condition: Parsed ConditionTree or a raw condition mapping
        record: Input record; never mutated

    Returns:
        True if every constraint holds
    """
    return match_conditions(parse_condition(condition), record)
