"""Evaluator exceptions."""

from typing import List
from dataclasses import dataclass


@dataclass
class ValidationError:
    """Single validation error."""
    message: str
    path: str = ""
    exit_code: int = 2


class _ValidationFailure(Exception):
    """Collects validation errors into one raisable exception."""

    label = "Validation error"

    def __init__(self, errors: List[ValidationError]):
        self.errors = errors
        self.exit_code = 2

        messages = []
        for error in errors:
            where = f" ({error.path})" if error.path else ""
            messages.append(f"{self.label}: {error.message}{where}")

        super().__init__("\n".join(messages))


class MalformedDeclarationError(_ValidationFailure):
    """Raised when a configuration file handed to the table builder failed to parse.

    The builder does not try to recover a partial table; the errors collected
    by the loader are carried through so the CLI can report all of them.
    """

    label = "Malformed declaration"


class ConfigValidationError(_ValidationFailure):
    """Raised when the evaluator configuration file is invalid."""

    label = "Config error"


class EvaluationError(Exception):
    """Base class for failures while evaluating an interpolation string."""


class UnsupportedSyntaxError(EvaluationError):
    """Raised when eval is called on a string that is not evaluable."""

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        self.reason = reason
        message = f"Unsupported interpolation syntax: {source!r}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class EvaluationIndexError(EvaluationError, IndexError):
    """Raised when a list is indexed out of range."""

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"List index {index} out of range for list of length {length}")


class DepthExceededError(EvaluationError):
    """Raised when an expression nests deeper than the configured limit."""

    def __init__(self, max_depth: int):
        self.max_depth = max_depth
        super().__init__(f"Expression nesting exceeds maximum depth of {max_depth}")


class TemplateSyntaxError(ValueError):
    """Raised by the template and expression parsers on malformed input."""

    def __init__(self, message: str, position: int = -1):
        self.position = position
        if position >= 0:
            message = f"{message} at offset {position}"
        super().__init__(message)
