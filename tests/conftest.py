"""
Shared pytest fixtures for logicrepo tests.

This module provides reusable rule lists and a temporary logic directory
builder so file-based tests do not repeat YAML boilerplate.
"""
import sys
from pathlib import Path

import pytest
import yaml

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from evaluation import Rule


@pytest.fixture
def tier_rules():
    """
    The two-rule set from the product examples.

    Returns:
        [r1 (tier == vip -> pct 30), r2 (catch-all -> pct 0)]
    """
    return [
        Rule(id="r1", condition={"tier": "vip"}, output={"pct": 30}),
        Rule(id="r2", condition={}, output={"pct": 0}),
    ]


@pytest.fixture
def typed_rules():
    """
    Rules for two independent rule sets sharing one list.

    Returns:
        Discount and shipping rules interleaved, plus an unscoped catch-all
    """
    return [
        Rule(id="d_vip", condition={"rule_type": "discount", "tier": "vip"}, output={"pct": 30}),
        Rule(id="s_free", condition={"rule_type": "shipping", "total": {"gte": 50}}, output={"cost": 0}),
        Rule(id="d_none", condition={"rule_type": "discount"}, output={"pct": 0}),
        Rule(id="s_std", condition={"rule_type": "shipping"}, output={"cost": 8}),
        Rule(id="anything", condition={}, output={"fallback": True}),
    ]


def _write_yaml(path: Path, document) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def write_yaml():
    """Write a Python object to a YAML file, creating parent directories."""
    return _write_yaml


@pytest.fixture
def logic_dir(tmp_path):
    """
    Create a logic directory with one rule file and one passing test file.

    Yields:
        Path to the logic directory (contains rules/ and tests/)
    """
    base = tmp_path / "logic"
    _write_yaml(base / "rules" / "pricing.yaml", {
        "version": 1,
        "rules": [
            {"id": "vip", "when": {"tier": "vip"}, "then": {"pct": 30}},
            {"id": "default", "when": {}, "then": {"pct": 0}},
        ],
    })
    _write_yaml(base / "tests" / "pricing.yaml", {
        "version": 1,
        "tests": [
            {"name": "vip gets 30", "input": {"tier": "vip"},
             "expect": {"matched_rule": "vip", "pct": 30}},
            {"name": "standard gets 0", "input": {"tier": "standard"},
             "expect": {"matched_rule": "default", "pct": 0}},
        ],
    })
    yield base
