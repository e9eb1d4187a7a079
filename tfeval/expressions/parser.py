"""
Recursive-descent parser for interpolation expressions and templates.

The grammar is wider than what the evaluator supports: function calls,
arithmetic, logical operators and arbitrary dotted references are parsed into
their own node kinds so the classifier can reject a segment by its shape.
"""

import logging
from typing import List, Tuple

from ..config import DEFAULT_MAX_DEPTH
from ..exceptions import DepthExceededError, TemplateSyntaxError
from ..values import Num, Str
from .lexer import EOF, IDENT, NUMBER, STRING, Token, tokenize
from .nodes import (
    Call, Conditional, Equals, Expression, GetAttr, Index, Literal, MetaRef,
    ObjectLiteral, Operation, ScopeRef, Segment, Splat, Template, TupleLiteral,
    VarRef,
)


logger = logging.getLogger(__name__)

METADATA_SLOTS = {'env', 'workspace'}

# Binary operator precedence, lowest first
BINARY_PRECEDENCE = [
    ('||',),
    ('&&',),
    ('==', '!='),
    ('<', '>', '<=', '>='),
    ('+', '-'),
    ('*', '/', '%'),
]


class ExpressionParser:
    """Parses the text between ${ and } into an Expression tree."""

    def __init__(self, text: str, max_depth: int = DEFAULT_MAX_DEPTH):
        self.text = text
        self.tokens = tokenize(text)
        self.pos = 0
        self.max_depth = max_depth
        self._depth = 0

    def parse(self) -> Expression:
        try:
            expression = self._parse_expression()
        except RecursionError:
            # max_depth passed directly can outrun the interpreter stack
            raise DepthExceededError(self.max_depth)
        token = self._peek()
        if token.kind != EOF:
            raise TemplateSyntaxError(f"Unexpected token {token.value!r}", token.position)
        return expression

    # Token helpers

    def _peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != EOF:
            self.pos += 1
        return token

    def _expect_op(self, op: str) -> Token:
        token = self._peek()
        if not token.is_op(op):
            found = 'end of expression' if token.kind == EOF else repr(token.value)
            raise TemplateSyntaxError(f"Expected '{op}', found {found}", token.position)
        return self._advance()

    def _enter(self):
        self._depth += 1
        if self._depth > self.max_depth:
            raise DepthExceededError(self.max_depth)

    def _leave(self, levels: int = 1):
        self._depth -= levels

    # Grammar

    def _parse_expression(self) -> Expression:
        self._enter()
        try:
            condition = self._parse_binary(0)
            if not self._peek().is_op('?'):
                return condition
            self._advance()
            then_expr = self._parse_expression()
            self._expect_op(':')
            else_expr = self._parse_expression()
            return Conditional(condition, then_expr, else_expr)
        finally:
            self._leave()

    def _parse_binary(self, level: int) -> Expression:
        if level >= len(BINARY_PRECEDENCE):
            return self._parse_unary()

        operators = BINARY_PRECEDENCE[level]
        left = self._parse_binary(level + 1)
        while self._peek().is_op(*operators):
            operator = self._advance().value
            right = self._parse_binary(level + 1)
            if operator == '==':
                left = Equals(left, right)
            else:
                left = Operation(operator, (left, right))
        return left

    def _parse_unary(self) -> Expression:
        if self._peek().is_op('!', '-'):
            operator = self._advance().value
            self._enter()
            try:
                operand = self._parse_unary()
            finally:
                self._leave()
            return Operation(operator, (operand,))
        return self._parse_postfix()

    def _parse_postfix(self) -> Expression:
        node = self._parse_primary()
        levels = 0
        try:
            while True:
                token = self._peek()
                if token.is_op('['):
                    self._advance()
                    self._enter()
                    levels += 1
                    if self._peek().is_op('*'):
                        self._advance()
                        self._expect_op(']')
                        node = Splat(node)
                        continue
                    key = self._parse_expression()
                    self._expect_op(']')
                    node = Index(node, key)
                elif token.is_op('.'):
                    self._advance()
                    self._enter()
                    levels += 1
                    attr = self._advance()
                    if attr.is_op('*'):
                        node = Splat(node)
                    elif attr.kind in (IDENT, NUMBER):
                        node = GetAttr(node, str(attr.value))
                    else:
                        raise TemplateSyntaxError("Expected attribute name after '.'", attr.position)
                else:
                    return node
        finally:
            self._leave(levels)

    def _parse_primary(self) -> Expression:
        token = self._advance()

        if token.kind == STRING:
            return Literal(Str(token.value))
        if token.kind == NUMBER:
            return Literal(Num(token.value))
        if token.kind == IDENT:
            if self._peek().is_op('('):
                return self._parse_call(token.value)
            return self._parse_reference(token.value)
        if token.is_op('('):
            expression = self._parse_expression()
            self._expect_op(')')
            return expression
        if token.is_op('['):
            return self._parse_tuple()
        if token.is_op('{'):
            return self._parse_object()

        found = 'end of expression' if token.kind == EOF else repr(token.value)
        raise TemplateSyntaxError(f"Unexpected {found}", token.position)

    def _parse_reference(self, root: str) -> Expression:
        """Collect a dotted path and map it onto the reference node kinds."""
        path = [root]
        while self._peek().is_op('.') and self._peek(1).kind == IDENT:
            self._advance()
            path.append(self._advance().value)

        if root == 'var' and len(path) >= 2:
            node = VarRef(path[1])
            for name in path[2:]:
                node = GetAttr(node, name)
            return node
        if root == 'terraform' and len(path) == 2 and path[1] in METADATA_SLOTS:
            return MetaRef(path[1])
        return ScopeRef(tuple(path))

    def _parse_call(self, name: str) -> Expression:
        self._expect_op('(')
        args = []
        self._enter()
        try:
            while not self._peek().is_op(')'):
                args.append(self._parse_expression())
                if self._peek().is_op('...'):
                    self._advance()
                if not self._peek().is_op(','):
                    break
                self._advance()
            self._expect_op(')')
        finally:
            self._leave()
        return Call(name, tuple(args))

    def _parse_tuple(self) -> Expression:
        items = []
        self._enter()
        try:
            while not self._peek().is_op(']'):
                items.append(self._parse_expression())
                if not self._peek().is_op(','):
                    break
                self._advance()
            self._expect_op(']')
        finally:
            self._leave()
        return TupleLiteral(tuple(items))

    def _parse_object(self) -> Expression:
        items: List[Tuple[Expression, Expression]] = []
        self._enter()
        try:
            while not self._peek().is_op('}'):
                key_token = self._peek()
                if key_token.kind == IDENT and self._peek(1).is_op('=', ':'):
                    # Bare identifier keys are names, not references
                    self._advance()
                    key = Literal(Str(key_token.value))
                else:
                    key = self._parse_expression()
                if not self._peek().is_op('=', ':'):
                    raise TemplateSyntaxError("Expected '=' or ':' in object", self._peek().position)
                self._advance()
                items.append((key, self._parse_expression()))
                if self._peek().is_op(','):
                    self._advance()
            self._expect_op('}')
        finally:
            self._leave()
        return ObjectLiteral(tuple(items))


def parse_expression(text: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Expression:
    """
    Parse the inner text of one interpolation segment.

    Raises:
        TemplateSyntaxError: If the text is not a well-formed expression
        DepthExceededError: If nesting exceeds max_depth
    """
    return ExpressionParser(text, max_depth).parse()


def parse_template(raw: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Template:
    """
    Split a raw string into literal text and parsed ${...} segments.

    '$${' is an escape for a literal '${'. A segment ends at the first '}'
    not balanced by an inner '{'; braces inside quoted strings are ignored.

    Raises:
        TemplateSyntaxError: On an unterminated segment or a malformed expression
        DepthExceededError: If any segment nests deeper than max_depth
    """
    parts = []
    text = []
    i = 0
    n = len(raw)

    while i < n:
        if raw.startswith('$${', i):
            text.append('${')
            i += 3
        elif raw.startswith('${', i):
            if text:
                parts.append(''.join(text))
                text = []
            end = find_segment_end(raw, i + 2)
            source = raw[i + 2:end]
            parts.append(Segment(source, parse_expression(source, max_depth), i, end + 1))
            i = end + 1
        else:
            text.append(raw[i])
            i += 1

    if text:
        parts.append(''.join(text))

    logger.debug(f"Parsed template {raw!r} into {len(parts)} part(s)")
    return Template(tuple(parts))


def find_segment_end(raw: str, start: int) -> int:
    """Return the offset of the '}' closing the segment whose body starts at start."""
    depth = 0
    in_string = False
    i = start

    while i < len(raw):
        c = raw[i]
        if in_string:
            if c == '\\':
                i += 2
                continue
            if c == '"':
                in_string = False
        elif c == '"':
            in_string = True
        elif c == '{':
            depth += 1
        elif c == '}':
            if depth == 0:
                return i
            depth -= 1
        i += 1

    raise TemplateSyntaxError("Unterminated interpolation", start - 2)
