"""
Value model for evaluated interpolations.

A Value is one of:
- Str: plain string
- Num: integer or float, rendered without a fractional part when integral
- ListValue: ordered sequence of Values
- MapValue: string-keyed mapping of Values
- ABSENT: no data (undeclared variable, missing default, missing map key)
"""

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Tuple, Union


class Value:
    """Base class for every evaluated value."""

    def to_string(self) -> str:
        """Render the value the way it appears inside a composite string."""
        raise NotImplementedError

    def to_native(self) -> Any:
        """Convert to the caller-facing Python form (numbers as strings, absent as None)."""
        raise NotImplementedError

    def to_json(self) -> Any:
        """Convert to a JSON-serialisable Python object."""
        raise NotImplementedError


@dataclass(frozen=True)
class Str(Value):
    value: str

    def to_string(self) -> str:
        return self.value

    def to_native(self) -> Any:
        return self.value

    def to_json(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Num(Value):
    value: Union[int, float]

    def to_string(self) -> str:
        return format_number(self.value)

    def to_native(self) -> Any:
        return self.to_string()

    def to_json(self) -> Any:
        if isinstance(self.value, float) and self.value.is_integer():
            return int(self.value)
        return self.value


@dataclass(frozen=True)
class ListValue(Value):
    items: Tuple[Value, ...] = ()

    def __post_init__(self):
        # Accept any iterable but store an immutable tuple
        object.__setattr__(self, 'items', tuple(self.items))

    def __len__(self) -> int:
        return len(self.items)

    def to_string(self) -> str:
        return json.dumps(self.to_json(), sort_keys=True)

    def to_native(self) -> Any:
        return [item.to_native() for item in self.items]

    def to_json(self) -> Any:
        return [item.to_json() for item in self.items]


@dataclass(frozen=True)
class MapValue(Value):
    entries: Mapping[str, Value] = field(default_factory=dict)

    def __post_init__(self):
        # Read-only view over a private copy
        object.__setattr__(self, 'entries', MappingProxyType(dict(self.entries)))

    def get(self, key: str) -> Value:
        return self.entries.get(key, ABSENT)

    def to_string(self) -> str:
        return json.dumps(self.to_json(), sort_keys=True)

    def to_native(self) -> Any:
        return {key: value.to_native() for key, value in self.entries.items()}

    def to_json(self) -> Any:
        return {key: value.to_json() for key, value in self.entries.items()}


class _Absent(Value):
    """Singleton marker for 'no data available'."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'ABSENT'

    def __bool__(self) -> bool:
        return False

    def to_string(self) -> str:
        return ''

    def to_native(self) -> Any:
        return None

    def to_json(self) -> Any:
        return None


ABSENT = _Absent()


def format_number(number: Union[int, float]) -> str:
    """
    Render a number as canonical decimal text.

    Integral values drop the fractional part (1.0 -> "1"); other floats use
    Python's shortest round-trip repr.
    """
    if isinstance(number, float):
        if number.is_integer():
            return str(int(number))
        return repr(number)
    return str(number)
