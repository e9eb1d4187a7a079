"""
Expression tree for one ${...} interpolation segment.

Supported node kinds: Literal, TupleLiteral, ObjectLiteral, VarRef, MetaRef,
Index, Equals (only as a conditional's test) and Conditional.

The remaining kinds (ScopeRef, GetAttr, Call, Operation, Splat) are parsed so
that the classifier can reject them by shape; the evaluator never sees them.
"""

from dataclasses import dataclass
from typing import Tuple, Union

from ..values import Value


class Expression:
    """Base class for expression nodes."""

    def children(self) -> Tuple['Expression', ...]:
        return ()


@dataclass(frozen=True)
class Literal(Expression):
    value: Value


@dataclass(frozen=True)
class TupleLiteral(Expression):
    items: Tuple[Expression, ...]

    def children(self):
        return self.items


@dataclass(frozen=True)
class ObjectLiteral(Expression):
    """Object constructor; keys are expressions, normally string literals."""
    items: Tuple[Tuple[Expression, Expression], ...]

    def children(self):
        return tuple(node for pair in self.items for node in pair)


@dataclass(frozen=True)
class VarRef(Expression):
    name: str


@dataclass(frozen=True)
class MetaRef(Expression):
    """Reference to terraform.env or terraform.workspace."""
    slot: str


@dataclass(frozen=True)
class Index(Expression):
    base: Expression
    key: Expression

    def children(self):
        return (self.base, self.key)


@dataclass(frozen=True)
class Equals(Expression):
    lhs: Expression
    rhs: Expression

    def children(self):
        return (self.lhs, self.rhs)


@dataclass(frozen=True)
class Conditional(Expression):
    condition: Expression
    then_expr: Expression
    else_expr: Expression

    def children(self):
        return (self.condition, self.then_expr, self.else_expr)


@dataclass(frozen=True)
class ScopeRef(Expression):
    """Dotted reference outside the var/terraform namespaces (module.x, aws_subnet.app.id)."""
    path: Tuple[str, ...]


@dataclass(frozen=True)
class GetAttr(Expression):
    base: Expression
    name: str

    def children(self):
        return (self.base,)


@dataclass(frozen=True)
class Call(Expression):
    name: str
    args: Tuple[Expression, ...]

    def children(self):
        return self.args


@dataclass(frozen=True)
class Operation(Expression):
    operator: str
    operands: Tuple[Expression, ...]

    def children(self):
        return self.operands


@dataclass(frozen=True)
class Splat(Expression):
    base: Expression

    def children(self):
        return (self.base,)


@dataclass(frozen=True)
class Segment:
    """One ${...} segment of a template, with its offsets in the raw string."""
    source: str
    expression: Expression
    start: int
    end: int


TemplatePart = Union[str, Segment]


@dataclass(frozen=True)
class Template:
    """A raw string split into literal text and interpolation segments."""
    parts: Tuple[TemplatePart, ...]

    @property
    def segments(self) -> Tuple[Segment, ...]:
        return tuple(part for part in self.parts if isinstance(part, Segment))

    @property
    def is_single_segment(self) -> bool:
        """True when the whole string is exactly one ${...} segment."""
        return len(self.parts) == 1 and isinstance(self.parts[0], Segment)
