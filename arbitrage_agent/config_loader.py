"""
Configuration loading for the arbitrage agent.

Reads a YAML file, validates it against ``config_schema.AgentConfig`` and
wraps every failure in ``ConfigurationError`` so callers handle one type.
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError as SchemaValidationError

from .config_schema import AgentConfig, validate_agent_config
from .exceptions import ConfigurationError


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load and parse YAML configuration file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if config_dict is None:
        raise ConfigurationError(f"Empty configuration file: {config_path}")
    if not isinstance(config_dict, dict):
        raise ConfigurationError(f"Configuration must be a YAML mapping: {config_path}")

    return config_dict


def parse_agent_config(config_dict: Dict[str, Any]) -> AgentConfig:
    """Validate a configuration dictionary."""
    try:
        return validate_agent_config(config_dict)
    except SchemaValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed: {e}",
            {"errors": e.errors(include_url=False)},
        ) from e


def load_agent_config(config_path: Union[str, Path]) -> AgentConfig:
    """
    Load and validate an agent configuration file.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    return parse_agent_config(load_yaml_config(config_path))
