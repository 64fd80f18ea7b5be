"""
Tests for condition matching.

Validates operator semantics, strict typing, null/missing handling and
boolean composition of condition trees.
"""
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from evaluation import (
    ConditionTree,
    Malformed,
    MISSING,
    Range,
    Scalar,
    SetMembership,
    match_field,
    matches,
    parse_condition,
)


class TestParseCondition:
    """Test parsing of raw conditions into tagged constraints."""

    def test_scalar_range_and_set_variants(self):
        """Each raw shape parses to its tagged variant."""
        tree = parse_condition({
            'tier': 'vip',
            'qty': {'gte': 10, 'lt': 20},
            'status': {'in': ['active', 1]},
        })

        assert tree.fields['tier'] == Scalar('vip')
        assert tree.fields['qty'] == Range(gte=10, lt=20)
        assert tree.fields['status'] == SetMembership(('active', 1))

    def test_boolean_groups_are_parsed_recursively(self):
        """all/any entries become nested trees."""
        tree = parse_condition({'all': [{'a': 1}], 'any': [{'b': 2}, {'c': 3}]})

        assert tree.fields == {}
        assert len(tree.all_of) == 1
        assert len(tree.any_of) == 2
        assert tree.any_of[1].fields['c'] == Scalar(3)

    def test_range_takes_precedence_over_in(self):
        """Range keys win when mixed with in."""
        constraint = parse_condition({'x': {'gte': 1, 'in': [5]}}).fields['x']
        assert isinstance(constraint, Range)

    @pytest.mark.parametrize('raw', [
        {'in': 'active'},
        {'gte': '10'},
        {'lte': True},
        {'between': [1, 2]},
        ['a', 'b'],
    ])
    def test_unrecognised_shapes_are_malformed(self, raw):
        """Unknown or ill-typed shapes parse as Malformed."""
        assert isinstance(parse_condition({'x': raw}).fields['x'], Malformed)

    def test_empty_condition_is_catch_all(self):
        """Only an empty mapping is a catch-all."""
        assert parse_condition({}).is_catch_all
        assert not parse_condition({'a': 1}).is_catch_all

    def test_non_mapping_is_malformed_tree(self):
        """A non-mapping condition is malformed, not a catch-all."""
        tree = parse_condition('tier == vip')
        assert tree.malformed
        assert not tree.is_catch_all

    def test_parse_is_idempotent_for_trees(self):
        """Parsing an already parsed tree returns it unchanged."""
        tree = ConditionTree()
        assert parse_condition(tree) is tree


class TestScalarMatching:
    """Exact matches use strict equality without coercion."""

    def test_number_does_not_match_numeric_string(self):
        """100 and "100" never match each other."""
        assert matches({'field': 100}, {'field': '100'}) is False
        assert matches({'field': '100'}, {'field': 100}) is False

    def test_int_matches_equal_float(self):
        """1 and 1.0 are the same number."""
        assert matches({'field': 1}, {'field': 1.0}) is True

    def test_boolean_does_not_match_number(self):
        """Booleans are not numbers."""
        assert matches({'flag': True}, {'flag': 1}) is False
        assert matches({'count': 0}, {'count': False}) is False

    def test_null_matches_explicit_null_only(self):
        """null matches an explicit null, not an absent key."""
        assert matches({'field': None}, {'field': None}) is True
        assert matches({'field': None}, {}) is False
        assert matches({'field': None}, {'field': 0}) is False

    def test_missing_field_never_matches(self):
        """An absent field fails every constraint."""
        assert matches({'tier': 'vip'}, {'other': 'vip'}) is False
        assert match_field(Scalar(None), MISSING) is False

    def test_all_fields_must_match(self):
        """Plain fields are ANDed."""
        condition = {'tier': 'vip', 'region': 'eu'}
        assert matches(condition, {'tier': 'vip', 'region': 'eu'}) is True
        assert matches(condition, {'tier': 'vip', 'region': 'us'}) is False


class TestRangeMatching:
    """Comparison operators require a real number."""

    @pytest.mark.parametrize('value,expected', [
        (10, True),
        (55.5, True),
        (100, True),
        (9, False),
        (101, False),
    ])
    def test_closed_range(self, value, expected):
        """gte/lte bounds are inclusive."""
        assert matches({'q': {'gte': 10, 'lte': 100}}, {'q': value}) is expected

    def test_half_open_range(self):
        """gt excludes its bound."""
        condition = {'score': {'gt': 0.5}}
        assert matches(condition, {'score': 0.51}) is True
        assert matches(condition, {'score': 0.5}) is False

    def test_strict_bounds(self):
        """gt and lt together exclude both ends."""
        condition = {'q': {'gt': 1, 'lt': 3}}
        assert matches(condition, {'q': 2}) is True
        assert matches(condition, {'q': 1}) is False
        assert matches(condition, {'q': 3}) is False

    @pytest.mark.parametrize('value', ['50', None, True, [50], {'v': 50}])
    def test_non_numbers_never_satisfy_range(self, value):
        """Strings, null, booleans and containers fail ranges."""
        assert matches({'q': {'gte': 0}}, {'q': value}) is False

    def test_missing_field_fails_range(self):
        """An absent field fails a range."""
        assert matches({'q': {'gte': 0}}, {}) is False

    def test_malformed_bound_fails_closed(self):
        """A string bound never matches."""
        assert matches({'q': {'gte': '10'}}, {'q': 50}) is False

    def test_nan_fails_every_bound(self):
        """NaN satisfies no comparison."""
        assert matches({'q': {'gte': 0}}, {'q': float('nan')}) is False


class TestSetMembership:
    """The in operator uses strict membership over heterogeneous lists."""

    def test_mixed_type_list(self):
        """Membership is strict across mixed-type lists."""
        condition = {'status': {'in': ['active', 1, True]}}

        assert matches(condition, {'status': True}) is True
        assert matches(condition, {'status': 'true'}) is False
        assert matches(condition, {'status': 'active'}) is True
        assert matches(condition, {'status': 1}) is True
        assert matches(condition, {'status': '1'}) is False

    def test_true_does_not_match_one(self):
        """True is not a member of [1]."""
        assert matches({'status': {'in': [1]}}, {'status': True}) is False

    def test_null_member(self):
        """A null member matches explicit null only."""
        condition = {'owner': {'in': [None, 'ops']}}
        assert matches(condition, {'owner': None}) is True
        assert matches(condition, {}) is False

    def test_empty_list_matches_nothing(self):
        """in: [] matches no value."""
        assert matches({'status': {'in': []}}, {'status': 'active'}) is False

    def test_non_list_in_fails_closed(self):
        """in with a string value never matches."""
        assert matches({'status': {'in': 'active'}}, {'status': 'active'}) is False


class TestBooleanComposition:
    """Nested all/any groups."""

    def test_all_requires_every_nested_tree(self):
        """all needs every nested tree to match."""
        condition = {'all': [{'a': 1}, {'b': 2}]}
        assert matches(condition, {'a': 1, 'b': 2}) is True
        assert matches(condition, {'a': 1, 'b': 3}) is False

    def test_any_requires_one_nested_tree(self):
        """any needs at least one nested tree to match."""
        condition = {'any': [{'a': 1}, {'b': 2}]}
        assert matches(condition, {'a': 0, 'b': 2}) is True
        assert matches(condition, {'a': 0, 'b': 0}) is False

    def test_any_nested_inside_all(self):
        """Groups compose to any depth."""
        condition = {
            'all': [
                {'country': {'in': ['US', 'CA']}},
                {'any': [{'tier': 'vip'}, {'total': {'gte': 100}}]},
            ]
        }

        assert matches(condition, {'country': 'US', 'tier': 'vip'}) is True
        assert matches(condition, {'country': 'CA', 'total': 150}) is True
        assert matches(condition, {'country': 'CA', 'total': 50}) is False
        assert matches(condition, {'country': 'MX', 'tier': 'vip'}) is False

    def test_plain_fields_conjoined_with_groups(self):
        """Plain fields and groups are ANDed."""
        condition = {'region': 'eu', 'any': [{'a': 1}, {'b': 1}]}
        assert matches(condition, {'region': 'eu', 'b': 1}) is True
        assert matches(condition, {'region': 'us', 'b': 1}) is False

    def test_empty_any_adds_no_constraint(self):
        """An empty any list is ignored."""
        assert matches({'any': []}, {}) is True

    def test_non_list_group_adds_no_constraint(self):
        """A group value that is not a list is ignored."""
        assert matches({'all': 'oops', 'a': 1}, {'a': 1}) is True

    def test_non_mapping_nested_tree_fails_closed(self):
        """Nested entries that are not mappings never match."""
        assert matches({'all': ['a == 1']}, {'a': 1}) is False
        assert matches({'any': [5]}, {}) is False

    def test_empty_condition_matches_everything(self):
        """The empty tree matches any input."""
        assert matches({}, {}) is True
        assert matches({}, {'anything': [1, 2, 3]}) is True

    def test_input_is_not_mutated(self):
        """Matching leaves the input record untouched."""
        record = {'tier': 'vip', 'tags': ['a']}
        matches({'all': [{'tier': 'vip'}], 'missing': None}, record)
        assert record == {'tier': 'vip', 'tags': ['a']}
