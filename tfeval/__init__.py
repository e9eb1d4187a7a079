"""
Static evaluator for ${...} interpolations in infrastructure-as-code configuration.
"""

from .classifier import is_evaluable
from .config import Config, load_config
from .evaluator import Evaluator
from .exceptions import (
    ConfigValidationError,
    DepthExceededError,
    EvaluationError,
    EvaluationIndexError,
    MalformedDeclarationError,
    UnsupportedSyntaxError,
    ValidationError,
)
from .loader import ConfigFile, ConfigLoader
from .table import VariableEntry, VariableTable, build_variable_table
from .values import ABSENT, ListValue, MapValue, Num, Str, Value

__all__ = [
    'ABSENT', 'Config', 'ConfigFile', 'ConfigLoader', 'ConfigValidationError',
    'DepthExceededError', 'EvaluationError', 'EvaluationIndexError', 'Evaluator',
    'ListValue', 'MalformedDeclarationError', 'MapValue', 'Num', 'Str',
    'UnsupportedSyntaxError', 'ValidationError', 'Value', 'VariableEntry',
    'VariableTable', 'build_variable_table', 'is_evaluable', 'load_config',
]
