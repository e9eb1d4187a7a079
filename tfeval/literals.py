"""Decode literal nodes from parsed configuration files into Values."""

from typing import Any

from .values import Value, Str, Num, ListValue, MapValue


def is_literal(node: Any) -> bool:
    """Return True if the node is a literal form the decoder accepts."""
    if isinstance(node, bool):
        return False
    if isinstance(node, (str, int, float)):
        return True
    if isinstance(node, list):
        return all(is_literal(item) for item in node)
    if isinstance(node, dict):
        return all(isinstance(k, str) and is_literal(v) for k, v in node.items())
    return False


def decode_literal(node: Any) -> Value:
    """
    Convert a literal node to a Value.

    Strings and numbers decode as-is (numbers are only formatted when
    stringified). Sequences keep declaration order; for blocks the last
    duplicate key wins.

    Raises:
        ValueError: If the node is not a string, number, sequence or block.
            Loaders reject such defaults before they reach the decoder.
    """
    # bool is an int subclass; it is not a number literal here
    if isinstance(node, bool):
        raise ValueError(f"Unsupported literal type: {type(node).__name__}")
    if isinstance(node, str):
        return Str(node)
    if isinstance(node, (int, float)):
        return Num(node)
    if isinstance(node, list):
        return ListValue(decode_literal(item) for item in node)
    if isinstance(node, dict):
        entries = {}
        for key, value in node.items():
            entries[str(key)] = decode_literal(value)
        return MapValue(entries)
    raise ValueError(f"Unsupported literal type: {type(node).__name__}")
