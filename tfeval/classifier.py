"""
Evaluability classification for interpolation strings.

A string is evaluable when every ${...} segment parses and every leaf is a
var reference, a terraform.env/terraform.workspace reference or a literal,
combined only through literal indexing and equality-tested conditionals.
One unsupported leaf anywhere disqualifies the whole string.
"""

import logging
from typing import List, Optional

from .config import DEFAULT_MAX_DEPTH
from .exceptions import DepthExceededError, TemplateSyntaxError
from .expressions import (
    Conditional, Equals, Expression, Index, Literal, MetaRef, ObjectLiteral,
    Template, TupleLiteral, VarRef, parse_template,
)
from .values import Num, Str


logger = logging.getLogger(__name__)


def is_evaluable(raw: str, max_depth: int = DEFAULT_MAX_DEPTH) -> bool:
    """
    Return True if the evaluator can statically resolve every reference in raw.

    Never raises: malformed templates and over-deep nesting classify as False.
    """
    try:
        template = parse_template(raw, max_depth)
    except (TemplateSyntaxError, DepthExceededError) as e:
        logger.debug(f"Not evaluable, parse failed for {raw!r}: {e}")
        return False
    return unsupported_reason(template) is None


def unsupported_reason(template: Template) -> Optional[str]:
    """Describe the first unsupported construct in a parsed template, or None."""
    for segment in template.segments:
        problems = find_unsupported(segment.expression)
        if problems:
            return f"unsupported {problems[0]} in '${{{segment.source}}}'"
    return None


def find_unsupported(expression: Expression) -> List[str]:
    """Return a description of every unsupported node in an expression tree."""
    problems: List[str] = []
    _check(expression, problems)
    return problems


def _check(node: Expression, problems: List[str]):
    if isinstance(node, (Literal, VarRef, MetaRef)):
        return

    if isinstance(node, Index):
        _check(node.base, problems)
        if not _is_literal_key(node.key):
            problems.append(f"index key {_describe(node.key)}")
        return

    if isinstance(node, Conditional):
        if isinstance(node.condition, Equals):
            _check(node.condition.lhs, problems)
            _check(node.condition.rhs, problems)
        else:
            problems.append(f"condition {_describe(node.condition)}")
        _check(node.then_expr, problems)
        _check(node.else_expr, problems)
        return

    if isinstance(node, (TupleLiteral, ObjectLiteral)):
        for child in node.children():
            _check(child, problems)
        return

    # Equals outside a conditional test, calls, operations, splats and foreign references
    problems.append(_describe(node))


def _is_literal_key(key: Expression) -> bool:
    if not isinstance(key, Literal):
        return False
    return isinstance(key.value, (Str, Num))


def _describe(node: Expression) -> str:
    kind = type(node).__name__
    name = getattr(node, 'name', None) or '.'.join(getattr(node, 'path', ()))
    if name:
        return f"{kind} '{name}'"
    return kind
