"""
YAML loader for rule and test files.

Rule files and test files share a versioned envelope:

    version: 1
    rules: [...]      # or tests: [...]

Loading never raises for bad user files. Problems are returned as
ValidationError values so the caller can report every broken file in one
run instead of stopping at the first.

Design decisions:
- PyYAML safe_load only; no custom tags
- safe_load follows YAML 1.1, so unquoted yes/no/on/off (any case) load
  as booleans. `country: NO` is False and will not match `in: ["NO"]`;
  quote such values in rule and test files
- Files are read as UTF-8; undecodable bytes are a ValidationError
- Records are validated here so the evaluation core can assume well-formed
  rules and expectations
- Line numbers come from the YAML parser mark when one is available
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

import yaml

from evaluation import Rule, Expectation


logger = logging.getLogger(__name__)

SUPPORTED_VERSION = 1
YAML_SUFFIXES = ('.yaml', '.yml')
CATCH_ALL_HINT = 'Use "when: {}" for a catch-all rule'


@dataclass
class ValidationError:
    """A rule or test file that could not be loaded."""
    file: str
    message: str
    line: Optional[int] = None
    hint: Optional[str] = None


@dataclass
class LoadedRules:
    file: str
    rules: List[Rule]


@dataclass
class LoadedTests:
    file: str
    tests: List[Expectation]


def find_yaml_files(directory: Union[str, Path]) -> List[Path]:
    """
    Recursively find YAML files under a directory.

    Returns:
        Sorted list of paths; empty if the directory does not exist
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    return sorted(
        path for path in directory.rglob('*')
        if path.is_file() and path.suffix in YAML_SUFFIXES
    )


def is_validation_error(result: Union[LoadedRules, LoadedTests, ValidationError]) -> bool:
    return isinstance(result, ValidationError)


def _read_document(path: Path, collection: str) -> Union[List[Any], ValidationError]:
    """Parse a YAML file and return its top-level collection list."""
    file = str(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            parsed = yaml.safe_load(f)
    except yaml.YAMLError as e:
        mark = getattr(e, 'problem_mark', None)
        return ValidationError(
            file=file,
            message=f"Failed to parse YAML: {getattr(e, 'problem', None) or e}",
            line=mark.line + 1 if mark is not None else None,
        )
    except (OSError, UnicodeDecodeError) as e:
        return ValidationError(file=file, message=f"Failed to read file: {e}")

    if not isinstance(parsed, dict):
        return ValidationError(file=file, message='File is empty or not a valid YAML object')

    version = parsed.get('version')
    if version != SUPPORTED_VERSION or isinstance(version, bool):
        return ValidationError(
            file=file,
            message=f"Unsupported version: {version}. Expected version: {SUPPORTED_VERSION}",
            hint=f"Add 'version: {SUPPORTED_VERSION}' at the top of the file",
        )

    items = parsed.get(collection)
    if not isinstance(items, list):
        return ValidationError(file=file, message=f'Missing or invalid "{collection}" array')

    return items


def _validate_rule(raw: Any, index: int, seen_ids: set) -> Optional[ValidationError]:
    """Return the first problem with a raw rule, without the file set."""
    if not isinstance(raw, dict):
        return ValidationError(file='', message=f"Rule at index {index} is not a mapping")
    rule_id = raw.get('id')
    if not rule_id or not isinstance(rule_id, str):
        return ValidationError(file='', message=f'Rule at index {index} is missing a valid "id" field')
    if rule_id in seen_ids:
        return ValidationError(file='', message=f'Duplicate rule id "{rule_id}"')
    if 'when' not in raw:
        return ValidationError(
            file='', message=f'Rule "{rule_id}" is missing a "when" field', hint=CATCH_ALL_HINT
        )
    if not isinstance(raw['when'], dict):
        return ValidationError(
            file='', message=f'Rule "{rule_id}" has an invalid "when" field', hint=CATCH_ALL_HINT
        )
    if not isinstance(raw.get('then'), dict):
        return ValidationError(file='', message=f'Rule "{rule_id}" is missing a valid "then" field')
    return None


def load_rule_file(path: Union[str, Path]) -> Union[LoadedRules, ValidationError]:
    """
    Load and validate a rule file.

    Args:
        path: Path to a YAML rule file

    Returns:
        LoadedRules with rules in file order, or ValidationError
    """
    path = Path(path)
    items = _read_document(path, 'rules')
    if isinstance(items, ValidationError):
        return items

    rules = []
    seen_ids = set()
    for index, raw in enumerate(items):
        problem = _validate_rule(raw, index, seen_ids)
        if problem:
            problem.file = str(path)
            return problem
        seen_ids.add(raw['id'])
        rules.append(Rule.from_dict(raw))

    logger.debug(f"Loaded {len(rules)} rules from {path}")
    return LoadedRules(file=str(path), rules=rules)


def _validate_test(raw: Any, index: int) -> Optional[str]:
    if not isinstance(raw, dict):
        return f"Test at index {index} is not a mapping"
    name = raw.get('name')
    if not name or not isinstance(name, str):
        return f'Test at index {index} is missing a valid "name" field'
    if not isinstance(raw.get('input'), dict):
        return f'Test "{name}" is missing a valid "input" field'
    if not isinstance(raw.get('expect'), dict):
        return f'Test "{name}" is missing a valid "expect" field'
    return None


def load_test_file(path: Union[str, Path]) -> Union[LoadedTests, ValidationError]:
    """
    Load and validate a test file.

    Args:
        path: Path to a YAML test file

    Returns:
        LoadedTests with expectations in file order, or ValidationError
    """
    path = Path(path)
    items = _read_document(path, 'tests')
    if isinstance(items, ValidationError):
        return items

    tests = []
    for index, raw in enumerate(items):
        problem = _validate_test(raw, index)
        if problem:
            return ValidationError(file=str(path), message=problem)
        tests.append(Expectation.from_dict(raw))

    logger.debug(f"Loaded {len(tests)} tests from {path}")
    return LoadedTests(file=str(path), tests=tests)


def describe_rule_ids(loaded: List[LoadedRules]) -> Dict[str, List[str]]:
    """Map each rule id to the files defining it."""
    owners: Dict[str, List[str]] = {}
    for entry in loaded:
        for rule in entry.rules:
            owners.setdefault(rule.id, []).append(entry.file)
    return owners
