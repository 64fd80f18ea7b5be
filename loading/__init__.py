"""
Loading layer for rule and test files.

Components:
- find_yaml_files: Recursive discovery of .yaml/.yml files
- load_rule_file / load_test_file: Parse and validate versioned YAML files
- ValidationError: Value describing a file that could not be loaded
- load_config / CheckConfig: Runner configuration from config.yaml

Usage:
    from loading import find_yaml_files, load_rule_file, is_validation_error

    for path in find_yaml_files("logic/rules"):
        result = load_rule_file(path)
        if is_validation_error(result):
            ...
"""

from .yaml_loader import (
    ValidationError,
    LoadedRules,
    LoadedTests,
    find_yaml_files,
    load_rule_file,
    load_test_file,
    is_validation_error,
    describe_rule_ids,
)
from .config import CheckConfig, load_config

__all__ = [
    "ValidationError",
    "LoadedRules",
    "LoadedTests",
    "find_yaml_files",
    "load_rule_file",
    "load_test_file",
    "is_validation_error",
    "describe_rule_ids",
    "CheckConfig",
    "load_config",
]
