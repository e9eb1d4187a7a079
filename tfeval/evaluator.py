"""
Interpolation evaluation.

Resolves ${...} segments against a VariableTable:
- var.<name>, optionally indexed by integer (lists) or string (maps) literals
- terraform.env / terraform.workspace
- literals and tuple/object constructors
- <lhs> == <rhs> ? <then> : <else>, comparing both sides as strings
"""

import logging
from typing import Any, Mapping, Optional, Sequence

from .classifier import is_evaluable, unsupported_reason
from .config import Config
from .exceptions import EvaluationIndexError, TemplateSyntaxError, UnsupportedSyntaxError
from .expressions import (
    Conditional, Expression, Index, Literal, MetaRef, ObjectLiteral, Segment,
    TupleLiteral, VarRef, parse_template,
)
from .table import FileInput, VariableTable, build_variable_table
from .values import ABSENT, ListValue, MapValue, Num, Str, Value


logger = logging.getLogger(__name__)


class Evaluator:
    """
    Evaluates interpolation strings against the variables of a configuration.

    The table is built once in the constructor and never mutated, so one
    Evaluator can serve any number of eval calls.
    """

    def __init__(
        self,
        files: Mapping[str, FileInput],
        schemas: Sequence[Any] = (),
        overrides: Sequence[FileInput] = (),
        config: Optional[Config] = None
    ):
        """
        Initialize the evaluator.

        Args:
            files: File identifier to parsed configuration file
            schemas: Module schema descriptors (accepted, not consulted)
            overrides: Variable-value files applied over declared defaults
            config: Environment/workspace names and parser limits

        Raises:
            MalformedDeclarationError: If any supplied file failed to parse
        """
        self.config = config or Config.init()
        self.table = build_variable_table(files, schemas, overrides, self.config)

    @classmethod
    def from_table(cls, table: VariableTable, config: Optional[Config] = None) -> 'Evaluator':
        """Create an evaluator over an existing table."""
        evaluator = cls.__new__(cls)
        evaluator.config = config or Config.init()
        evaluator.table = table
        return evaluator

    def is_evaluable(self, raw: str) -> bool:
        return is_evaluable(raw, self.config.max_depth)

    def eval(self, raw: str) -> Value:
        """
        Evaluate an interpolation string.

        Returns:
            The segment's own Value when raw is exactly one ${...} segment
            (ABSENT included), otherwise a Str of the concatenated text

        Raises:
            UnsupportedSyntaxError: If raw is not evaluable
            EvaluationIndexError: If a list is indexed out of range
            DepthExceededError: If an expression nests too deeply
        """
        try:
            template = parse_template(raw, self.config.max_depth)
        except TemplateSyntaxError as e:
            raise UnsupportedSyntaxError(raw, str(e))

        reason = unsupported_reason(template)
        if reason:
            raise UnsupportedSyntaxError(raw, reason)

        if template.is_single_segment:
            return self._evaluate(template.parts[0].expression)

        pieces = []
        for part in template.parts:
            if isinstance(part, Segment):
                pieces.append(self._evaluate(part.expression).to_string())
            else:
                pieces.append(part)
        return Str(''.join(pieces))

    def eval_native(self, raw: str) -> Any:
        """
        Evaluate and convert to plain Python values.

        Strings and numbers come back as str, lists as list, maps as dict and
        absent data as None.
        """
        return self.eval(raw).to_native()

    def _evaluate(self, node: Expression) -> Value:
        if isinstance(node, Literal):
            return node.value

        if isinstance(node, VarRef):
            value = self.table.lookup(node.name)
            if value is ABSENT:
                logger.debug(f"var.{node.name} has no value")
            return value

        if isinstance(node, MetaRef):
            return Str(self.table.metadata_value(node.slot))

        if isinstance(node, Index):
            return self._evaluate_index(self._evaluate(node.base), self._evaluate(node.key))

        if isinstance(node, Conditional):
            lhs = self._evaluate(node.condition.lhs).to_string()
            rhs = self._evaluate(node.condition.rhs).to_string()
            # Only the chosen branch is evaluated
            if lhs == rhs:
                return self._evaluate(node.then_expr)
            return self._evaluate(node.else_expr)

        if isinstance(node, TupleLiteral):
            return ListValue(self._evaluate(item) for item in node.items)

        if isinstance(node, ObjectLiteral):
            entries = {}
            for key, value in node.items:
                entries[self._evaluate(key).to_string()] = self._evaluate(value)
            return MapValue(entries)

        # Unreachable for classified input
        raise UnsupportedSyntaxError(repr(node), "node kind not evaluable")

    def _evaluate_index(self, base: Value, key: Value) -> Value:
        if isinstance(base, ListValue):
            position = _as_list_index(key)
            if position is None:
                return ABSENT
            if position < 0 or position >= len(base.items):
                raise EvaluationIndexError(position, len(base.items))
            return base.items[position]

        if isinstance(base, MapValue):
            return base.get(key.to_string())

        return ABSENT


def _as_list_index(key: Value) -> Optional[int]:
    """Convert an index key to a list position, or None if it is not integral."""
    if isinstance(key, Num):
        if isinstance(key.value, float) and not key.value.is_integer():
            return None
        return int(key.value)
    if isinstance(key, Str):
        try:
            return int(key.value)
        except ValueError:
            return None
    return None
