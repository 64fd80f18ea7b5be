"""
Configuration for the check runner.

Settings come from a YAML file (config.yaml by default). Every key is
optional; command-line flags override whatever the file provides.

Example:
    logic_dir: ./logic
    rules_dir: rules
    tests_dir: tests
    discriminator_field: rule_type
    report_dir: output
    log_level: WARNING
"""
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Union
import logging

import yaml


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = 'config.yaml'
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class CheckConfig:
    """Resolved settings for one check run."""
    logic_dir: str = './logic'
    rules_dir: str = 'rules'
    tests_dir: str = 'tests'
    discriminator_field: str = 'rule_type'
    report_dir: str = 'output'
    log_level: str = 'WARNING'

    @property
    def rules_path(self) -> Path:
        return Path(self.logic_dir).resolve() / self.rules_dir

    @property
    def tests_path(self) -> Path:
        return Path(self.logic_dir).resolve() / self.tests_dir


def load_config(config_path: Optional[Union[str, Path]] = None) -> CheckConfig:
    """
    Load check configuration.

    Args:
        config_path: Path to YAML configuration file. If None, config.yaml in
                     the working directory is used when present.

    Returns:
        CheckConfig with file values applied over defaults

    Raises:
        FileNotFoundError: If an explicitly given config file does not exist
        ValueError: If the file is not valid YAML, not a mapping, has unknown
                    keys or bad values
    """
    if config_path is None:
        path = Path(DEFAULT_CONFIG_PATH)
        if not path.exists():
            logger.debug("No config.yaml found, using defaults")
            return CheckConfig()
    else:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(path, encoding='utf-8') as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if raw is None:
        return CheckConfig()
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")

    known = {f.name for f in fields(CheckConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {', '.join(unknown)}")

    for key, value in raw.items():
        if not isinstance(value, str) or not value:
            raise ValueError(f"Config key '{key}' must be a non-empty string")

    config = CheckConfig(**raw)
    config.log_level = config.log_level.upper()
    if config.log_level not in LOG_LEVELS:
        raise ValueError(f"Invalid log_level: {config.log_level}")

    logger.debug(f"Loaded config from {path}")
    return config
