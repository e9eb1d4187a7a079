"""Configuration file loader and variable declaration validation."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from .exceptions import ValidationError
from .literals import is_literal


logger = logging.getLogger(__name__)


class PreservingLoader(yaml.SafeLoader):
    """YAML loader that keeps strings like 'on' and 'yes' as strings instead of booleans."""
    pass


# Drop the implicit bool resolvers for on/off/yes/no (and their capitalised
# forms); only true/false keep resolving to booleans.
PreservingLoader.yaml_implicit_resolvers = {
    first: [
        (tag, regexp) for tag, regexp in resolvers
        if tag != 'tag:yaml.org,2002:bool' or first in 'tTfF'
    ]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


CONFIG_SUFFIXES = ('.tf.json', '.tf.yaml', '.tf.yml')
KNOWN_VARIABLE_FIELDS = {'type', 'default', 'description', 'sensitive', 'nullable', 'validation'}
KNOWN_TYPES = {'string', 'number', 'list', 'map', 'bool', 'any'}


@dataclass
class ConfigFile:
    """
    One parsed configuration file.

    Attributes:
        name: File identifier (usually its path)
        body: Top-level mapping of block types to blocks
        errors: Problems found while reading or validating the file
    """
    name: str
    body: Dict[str, Any] = field(default_factory=dict)
    errors: List[ValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @classmethod
    def from_body(cls, name: str, body: Any) -> 'ConfigFile':
        """Wrap an already-parsed body, validating its variable declarations."""
        if body is None:
            body = {}
        if not isinstance(body, dict):
            return cls(name, {}, [ValidationError("File body must be an object/dictionary", name)])
        return cls(name, body, validate_body(body, name))

    @classmethod
    def from_values(cls, name: str, body: Any) -> 'ConfigFile':
        """Wrap a variable-values mapping (name to literal value)."""
        if body is None:
            body = {}
        if not isinstance(body, dict):
            return cls(name, {}, [ValidationError("Variable file must be an object/dictionary", name)])

        errors = []
        for var_name, value in body.items():
            if not is_literal(value):
                errors.append(ValidationError(
                    f"Value for '{var_name}' must be a string, number, list or map literal", name
                ))
        return cls(name, body, errors)


def iter_variable_blocks(body: Dict[str, Any]):
    """Yield (name, block) for every variable declaration in a file body.

    Accepts the JSON-syntax form {"variable": {"name": {...}}} and the
    list-of-blocks form {"variable": [{"name": {...}}, ...]}.
    """
    blocks = body.get('variable')
    if blocks is None:
        return
    if isinstance(blocks, dict):
        blocks = [blocks]
    for group in blocks:
        for name, block in group.items():
            yield name, block


def validate_body(body: Dict[str, Any], path: str = "") -> List[ValidationError]:
    """Validate the variable declarations of a file body."""
    errors = []

    blocks = body.get('variable')
    if blocks is None:
        return errors
    if isinstance(blocks, dict):
        groups = [blocks]
    elif isinstance(blocks, list):
        groups = blocks
    else:
        errors.append(ValidationError("'variable' must be an object or a list of objects", path))
        return errors

    for i, group in enumerate(groups):
        if not isinstance(group, dict):
            errors.append(ValidationError(f"'variable[{i}]' must be an object", path))
            continue

        for name, block in group.items():
            errors.extend(_validate_variable(name, block, path))

    return errors


def _validate_variable(name: Any, block: Any, path: str) -> List[ValidationError]:
    errors = []

    if not isinstance(name, str) or not name:
        return [ValidationError(f"Variable name must be a non-empty string, got {name!r}", path)]

    if block is None:
        # variable "name" {} written as a bare key
        return errors
    if not isinstance(block, dict):
        return [ValidationError(f"Variable '{name}' must be an object", path)]

    for key in block:
        if key not in KNOWN_VARIABLE_FIELDS:
            errors.append(ValidationError(f"Variable '{name}': unknown attribute '{key}'", path))

    if 'type' in block:
        declared = block['type']
        if not isinstance(declared, str):
            errors.append(ValidationError(f"Variable '{name}': 'type' must be a string", path))
        else:
            # Accept both "list" and list(string) style annotations
            base = declared.split('(', 1)[0].strip()
            if base not in KNOWN_TYPES:
                errors.append(ValidationError(f"Variable '{name}': unknown type '{declared}'", path))

    default = block.get('default')
    if default is not None and not is_literal(default):
        errors.append(ValidationError(
            f"Variable '{name}': default must be a string, number, list or map literal", path
        ))

    return errors


class ConfigLoader:
    """Loads JSON or YAML configuration bodies from disk."""

    def load(self, path: Union[str, Path]) -> ConfigFile:
        """
        Load one configuration file.

        Read and validation failures are recorded on the returned ConfigFile
        rather than raised; the table builder decides what to do with them.
        """
        path = Path(path)
        try:
            body = self._read(path)
        except (OSError, yaml.YAMLError) as e:
            logger.debug(f"Failed to read {path}: {e}")
            return ConfigFile(str(path), {}, [ValidationError(f"Failed to load file: {e}", str(path))])

        config_file = ConfigFile.from_body(str(path), body)
        logger.debug(f"Loaded {path} with {len(config_file.errors)} error(s)")
        return config_file

    def load_directory(self, directory: Union[str, Path]) -> Dict[str, ConfigFile]:
        """Load every configuration file in a directory, in sorted name order."""
        directory = Path(directory)
        files = {}
        for path in sorted(directory.iterdir()):
            if path.is_file() and path.name.endswith(CONFIG_SUFFIXES):
                files[str(path)] = self.load(path)
        logger.debug(f"Discovered {len(files)} configuration file(s) in {directory}")
        return files

    def load_variable_file(self, path: Union[str, Path]) -> ConfigFile:
        """
        Load a variable-values file mapping variable names to literal values.

        Values that are not literals are recorded as errors.
        """
        path = Path(path)
        try:
            body = self._read(path)
        except (OSError, yaml.YAMLError) as e:
            return ConfigFile(str(path), {}, [ValidationError(f"Failed to load file: {e}", str(path))])

        return ConfigFile.from_values(str(path), body)

    def _read(self, path: Path) -> Any:
        with open(path, 'r') as f:
            return yaml.load(f, Loader=PreservingLoader)
