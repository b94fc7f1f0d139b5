"""
Type models for datastore operations.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from .core.ordering import StreamID


class ItemType(Enum):
    """Kinds of items stored in the table, kept in the ``type`` attribute."""

    STRING = "string"
    HASH = "hash"
    SET = "set"
    ZSET = "zset"
    LIST = "list"
    STREAM = "stream"
    META = "meta"


class ValueKind(Enum):
    """Which attribute slot a value occupies."""

    BYTES = "B"
    TEXT = "S"
    NUMERIC = "N"
    ABSENT = "absent"


@dataclass(frozen=True)
class Value:
    """
    Scalar value stored in or read from the table.

    Exactly one of bytes, text or an arbitrary precision number. A read miss
    is represented by the absent value rather than ``None``.
    """

    kind: ValueKind
    data: bytes | str | Decimal | None = None

    @classmethod
    def of_bytes(cls, data: bytes) -> "Value":
        return cls(ValueKind.BYTES, bytes(data))

    @classmethod
    def of_text(cls, text: str) -> "Value":
        return cls(ValueKind.TEXT, text)

    @classmethod
    def of_number(cls, number: int | float | str | Decimal) -> "Value":
        if isinstance(number, bool):
            raise TypeError("Booleans are not numeric values")
        if isinstance(number, float):
            # repr() gives the shortest string that round-trips the float
            number = repr(number)
        try:
            decimal = Decimal(number)
        except InvalidOperation as e:
            raise ValueError(f"Not a number: {number!r}") from e
        if not decimal.is_finite():
            raise ValueError(f"Numeric values must be finite: {number!r}")
        return cls(ValueKind.NUMERIC, decimal)

    @classmethod
    def absent(cls) -> "Value":
        return cls(ValueKind.ABSENT)

    @property
    def present(self) -> bool:
        return self.kind is not ValueKind.ABSENT

    def as_text(self) -> str | None:
        """Text payload, or the UTF-8 decoding of a bytes payload."""
        if self.kind is ValueKind.TEXT:
            return self.data  # type: ignore[return-value]
        if self.kind is ValueKind.BYTES:
            return self.data.decode("utf-8")  # type: ignore[union-attr]
        if self.kind is ValueKind.NUMERIC:
            return str(self.data)
        return None

    def as_bytes(self) -> bytes | None:
        if self.kind is ValueKind.BYTES:
            return self.data  # type: ignore[return-value]
        if self.kind is ValueKind.TEXT:
            return self.data.encode("utf-8")  # type: ignore[union-attr]
        if self.kind is ValueKind.NUMERIC:
            return str(self.data).encode("utf-8")
        return None

    def as_number(self) -> Decimal | None:
        if self.kind is ValueKind.NUMERIC:
            return self.data  # type: ignore[return-value]
        return None

    def as_int(self) -> int | None:
        number = self.as_number()
        return int(number) if number is not None else None


def to_value(obj: Any) -> Value:
    """
    Coerce a native Python object into a Value.

    Args:
        obj: str, bytes, int, float, Decimal or an existing Value

    Returns:
        Matching Value variant

    Raises:
        TypeError: If the object has no scalar representation
    """
    if isinstance(obj, Value):
        return obj
    if isinstance(obj, str):
        return Value.of_text(obj)
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return Value.of_bytes(bytes(obj))
    if isinstance(obj, bool):
        raise TypeError("Booleans cannot be stored as values")
    if isinstance(obj, (int, float, Decimal)):
        return Value.of_number(obj)
    raise TypeError(f"Cannot store value of type {type(obj).__name__}")


class Flag(Enum):
    """Preconditions and modifiers for conditional writes."""

    IF_NOT_EXISTS = "NX"
    IF_EXISTS = "XX"
    KEEP_TTL = "KEEPTTL"


@dataclass
class WriteOutcome:
    """Result of a single-item conditional write."""

    applied: bool
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass
class StreamItem:
    """Stream entry: its ID and field/value pairs."""

    id: StreamID
    fields: dict[str, str]
