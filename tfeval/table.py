"""
Variable table construction.

Collects variable declarations from parsed configuration files, decodes their
defaults and stores the environment/workspace metadata next to them.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Sequence, Union

from .config import Config
from .exceptions import MalformedDeclarationError
from .literals import decode_literal
from .loader import ConfigFile, iter_variable_blocks
from .values import ABSENT, Value


logger = logging.getLogger(__name__)

ENVIRONMENT_NAME = 'env'
WORKSPACE_NAME = 'workspace'

FileInput = Union[ConfigFile, Dict[str, Any]]


@dataclass(frozen=True)
class VariableEntry:
    """A declared variable and its decoded default (ABSENT when there is none)."""
    name: str
    default: Value = ABSENT


class VariableTable:
    """
    Read-only lookup space for one evaluation session.

    Variables and metadata live in separate namespaces, so a variable named
    'env' never shadows terraform.env.
    """

    def __init__(self, variables: Mapping[str, VariableEntry], metadata: Mapping[str, str]):
        self._variables = MappingProxyType(dict(variables))
        self._metadata = MappingProxyType(dict(metadata))

    @property
    def variables(self) -> Mapping[str, VariableEntry]:
        return self._variables

    @property
    def metadata(self) -> Mapping[str, str]:
        return self._metadata

    def lookup(self, name: str) -> Value:
        """Return the variable's default, or ABSENT if undeclared or without default."""
        entry = self._variables.get(name)
        if entry is None:
            return ABSENT
        return entry.default

    def metadata_value(self, slot: str) -> str:
        return self._metadata.get(slot, '')

    def __contains__(self, name: str) -> bool:
        return name in self._variables

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        return f"VariableTable(variables={sorted(self._variables)}, metadata={dict(self._metadata)})"


def build_variable_table(
    files: Mapping[str, FileInput],
    schemas: Sequence[Any] = (),
    overrides: Sequence[FileInput] = (),
    config: Optional[Config] = None
) -> VariableTable:
    """
    Build a VariableTable from parsed configuration files.

    Args:
        files: File identifier to parsed file; later files win on duplicate names
        schemas: Module schema descriptors (accepted, not consulted)
        overrides: Variable-value files applied to declared variables, in order
        config: Supplies the environment and workspace names

    Returns:
        The constructed table

    Raises:
        MalformedDeclarationError: If any supplied file failed to parse
    """
    config = config or Config.init()

    if schemas:
        logger.debug(f"Ignoring {len(schemas)} module schema(s)")

    variables: Dict[str, VariableEntry] = {}
    for name, config_file in _as_config_files(files.items(), ConfigFile.from_body):
        for var_name, block in iter_variable_blocks(config_file.body):
            default = ABSENT
            if isinstance(block, dict) and block.get('default') is not None:
                default = decode_literal(block['default'])
            if var_name in variables:
                logger.debug(f"Variable '{var_name}' redeclared in {name}")
            variables[var_name] = VariableEntry(var_name, default)

    named_overrides = (
        (getattr(item, 'name', f"<override_{i}>"), item) for i, item in enumerate(overrides)
    )
    for name, override in _as_config_files(named_overrides, ConfigFile.from_values):
        for var_name, value in override.body.items():
            if var_name not in variables:
                logger.debug(f"Override for undeclared variable '{var_name}' in {name} ignored")
                continue
            variables[var_name] = VariableEntry(var_name, decode_literal(value))

    metadata = {
        ENVIRONMENT_NAME: config.terraform_env or '',
        WORKSPACE_NAME: config.terraform_workspace or '',
    }

    logger.debug(f"Built variable table with {len(variables)} variable(s)")
    return VariableTable(variables, metadata)


def _as_config_files(items: Iterable, wrap: Callable[[str, Any], ConfigFile]):
    """Yield (name, ConfigFile) pairs, raising on files that failed to parse."""
    for name, item in items:
        if isinstance(item, ConfigFile):
            config_file = item
        else:
            config_file = wrap(name, item)
        if config_file.errors:
            raise MalformedDeclarationError(config_file.errors)
        yield name, config_file
