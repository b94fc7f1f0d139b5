"""
Mapping between Value and DynamoDB typed attribute values.
"""

from decimal import Decimal
from typing import Any

from ..models import Value, ValueKind


def encode_value(value: Value) -> dict[str, Any]:
    """
    Encode a value as a DynamoDB attribute value.

    Numbers are sent in their text form so no precision is lost.

    Args:
        value: Value to encode

    Returns:
        Attribute value with exactly one of the B, S or N slots

    Raises:
        ValueError: If value is the absent value
    """
    if value.kind is ValueKind.BYTES:
        return {"B": value.data}
    if value.kind is ValueKind.TEXT:
        return {"S": value.data}
    if value.kind is ValueKind.NUMERIC:
        return {"N": format_number(value.data)}  # type: ignore[arg-type]
    raise ValueError("The absent value cannot be stored")


def decode_value(attribute: dict[str, Any] | None) -> Value:
    """
    Decode a DynamoDB attribute value.

    Args:
        attribute: Attribute value as returned by the low-level client, or None

    Returns:
        Matching Value, or the absent value if no scalar slot is populated
    """
    if not attribute:
        return Value.absent()
    if "N" in attribute:
        return Value(ValueKind.NUMERIC, Decimal(attribute["N"]))
    if "S" in attribute:
        return Value(ValueKind.TEXT, attribute["S"])
    if "B" in attribute:
        return Value(ValueKind.BYTES, bytes(attribute["B"]))
    return Value.absent()


def format_number(number: Decimal | int | float) -> str:
    """Text form of a number for an N attribute."""
    if isinstance(number, float):
        number = Decimal(repr(number))
    return str(number)


def number_attribute(number: Decimal | int | float) -> dict[str, str]:
    return {"N": format_number(number)}


def string_attribute(text: str) -> dict[str, str]:
    return {"S": text}
