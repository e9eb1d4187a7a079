"""Evaluator configuration: metadata values and parser limits."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from .exceptions import ConfigValidationError, ValidationError


logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64
# Each nesting level costs about a dozen parser frames under the default recursion limit
MAX_DEPTH_LIMIT = 64


@dataclass(frozen=True)
class Config:
    """
    Caller-supplied evaluator settings.

    Attributes:
        terraform_env: Value of ${terraform.env}
        terraform_workspace: Value of ${terraform.workspace}
        max_depth: Maximum expression nesting accepted by the parser
    """
    terraform_env: str = ""
    terraform_workspace: str = ""
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self):
        if not 1 <= self.max_depth <= MAX_DEPTH_LIMIT:
            raise ValueError(f"max_depth must be between 1 and {MAX_DEPTH_LIMIT}, got {self.max_depth}")

    @classmethod
    def init(cls) -> 'Config':
        """Return the default configuration."""
        return cls()


KNOWN_FIELDS = {'terraform_env', 'terraform_workspace', 'max_depth'}


def load_config(path: Union[str, Path]) -> Config:
    """
    Load a Config from a YAML file.

    Unknown keys and wrongly-typed values are collected and reported together.

    Raises:
        ConfigValidationError: If the file cannot be read or is invalid
    """
    path = Path(path)
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigValidationError([ValidationError(f"Failed to load config: {e}", str(path))])

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigValidationError([
            ValidationError("Config must be a YAML object/dictionary", str(path))
        ])

    errors = validate_config(data, str(path))
    if errors:
        raise ConfigValidationError(errors)

    logger.debug(f"Loaded config from {path}: {data}")
    return Config(**data)


def validate_config(data: Dict[str, Any], path: str = "") -> List[ValidationError]:
    """Return validation errors for a raw config mapping."""
    errors = []

    for key in data:
        if key not in KNOWN_FIELDS:
            errors.append(ValidationError(f"Unknown field '{key}'", path))

    for key in ('terraform_env', 'terraform_workspace'):
        if key in data and not isinstance(data[key], str):
            errors.append(ValidationError(
                f"'{key}' must be a string, got {type(data[key]).__name__}", path
            ))

    if 'max_depth' in data:
        max_depth = data['max_depth']
        if isinstance(max_depth, bool) or not isinstance(max_depth, int):
            errors.append(ValidationError(
                f"'max_depth' must be an integer, got {type(max_depth).__name__}", path
            ))
        elif not 1 <= max_depth <= MAX_DEPTH_LIMIT:
            errors.append(ValidationError(
                f"'max_depth' must be between 1 and {MAX_DEPTH_LIMIT}, got {max_depth}", path
            ))

    return errors
