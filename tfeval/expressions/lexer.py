"""Tokenizer for the inner text of an interpolation segment."""

import re
from dataclasses import dataclass
from typing import List, Union

from ..exceptions import TemplateSyntaxError


STRING = 'STRING'
NUMBER = 'NUMBER'
IDENT = 'IDENT'
OP = 'OP'
EOF = 'EOF'

# Longest operators first so '==' wins over '='
OPERATORS = (
    '...', '==', '!=', '<=', '>=', '&&', '||',
    '.', '[', ']', '(', ')', '{', '}', ',', '?', ':', '=',
    '!', '+', '-', '*', '/', '%', '<', '>',
)

IDENT_PATTERN = re.compile(r'[A-Za-z_][A-Za-z0-9_-]*')
NUMBER_PATTERN = re.compile(r'\d+(\.\d+)?([eE][+-]?\d+)?')

ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '"': '"', '\\': '\\'}
# \uNNNN and \UNNNNNNNN
UNICODE_ESCAPES = {'u': 4, 'U': 8}
HEX_PATTERN = re.compile(r'[0-9A-Fa-f]+')


@dataclass(frozen=True)
class Token:
    kind: str
    value: Union[str, int, float, None]
    position: int

    def is_op(self, *values: str) -> bool:
        return self.kind == OP and self.value in values


def tokenize(text: str) -> List[Token]:
    """
    Split expression text into tokens.

    Raises:
        TemplateSyntaxError: On unknown characters, unterminated strings or
            nested ${...} templates inside string literals
    """
    tokens = []
    i = 0
    n = len(text)

    while i < n:
        c = text[i]

        if c.isspace():
            i += 1
            continue

        if c == '"':
            value, end = _read_string(text, i)
            tokens.append(Token(STRING, value, i))
            i = end
            continue

        match = NUMBER_PATTERN.match(text, i)
        if match:
            literal = match.group(0)
            if match.group(1) or match.group(2):
                number = float(literal)
            else:
                number = int(literal)
            tokens.append(Token(NUMBER, number, i))
            i = match.end()
            continue

        match = IDENT_PATTERN.match(text, i)
        if match:
            tokens.append(Token(IDENT, match.group(0), i))
            i = match.end()
            continue

        for op in OPERATORS:
            if text.startswith(op, i):
                tokens.append(Token(OP, op, i))
                i += len(op)
                break
        else:
            raise TemplateSyntaxError(f"Unexpected character {c!r}", i)

    tokens.append(Token(EOF, None, n))
    return tokens


def _read_string(text: str, start: int):
    """Read a double-quoted string starting at text[start]; return (value, next offset)."""
    chars = []
    i = start + 1
    n = len(text)

    while i < n:
        c = text[i]
        if c == '\\':
            if i + 1 >= n:
                break
            escaped = text[i + 1]
            if escaped in UNICODE_ESCAPES:
                width = UNICODE_ESCAPES[escaped]
                digits = text[i + 2:i + 2 + width]
                if len(digits) != width or not HEX_PATTERN.fullmatch(digits):
                    raise TemplateSyntaxError(f"Invalid unicode escape '\\{escaped}{digits}'", i)
                code_point = int(digits, 16)
                if code_point > 0x10FFFF:
                    raise TemplateSyntaxError(f"Unicode escape out of range '\\{escaped}{digits}'", i)
                chars.append(chr(code_point))
                i += 2 + width
                continue
            if escaped not in ESCAPES:
                raise TemplateSyntaxError(f"Invalid escape sequence '\\{escaped}'", i)
            chars.append(ESCAPES[escaped])
            i += 2
            continue
        if c == '"':
            return ''.join(chars), i + 1
        if text.startswith('$${', i):
            chars.append('${')
            i += 3
            continue
        if text.startswith('${', i):
            raise TemplateSyntaxError("Nested interpolation in string literal", i)
        chars.append(c)
        i += 1

    raise TemplateSyntaxError("Unterminated string literal", start)
