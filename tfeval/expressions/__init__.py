"""
Interpolation expression grammar.
Shared by the evaluability classifier and the evaluator.
"""

from .nodes import (
    Call, Conditional, Equals, Expression, GetAttr, Index, Literal, MetaRef,
    ObjectLiteral, Operation, ScopeRef, Segment, Splat, Template, TupleLiteral,
    VarRef,
)
from .parser import parse_expression, parse_template

__all__ = [
    'Call', 'Conditional', 'Equals', 'Expression', 'GetAttr', 'Index',
    'Literal', 'MetaRef', 'ObjectLiteral', 'Operation', 'ScopeRef', 'Segment',
    'Splat', 'Template', 'TupleLiteral', 'VarRef',
    'parse_expression', 'parse_template',
]
