"""
Utility functions for datastore operations.
"""

import base64
import json
from typing import Any

from .constants import MAX_KEY_LENGTH
from .models import Value, ValueKind


def value_to_json(value: Value) -> Any:
    """
    Convert a value into something json.dumps() accepts.

    Text is returned as is. Numbers become strings so no precision is lost.
    Bytes are base64 encoded. The absent value becomes None.
    """
    if value.kind is ValueKind.TEXT:
        return value.data
    if value.kind is ValueKind.NUMERIC:
        return str(value.data)
    if value.kind is ValueKind.BYTES:
        return base64.b64encode(value.data).decode("ascii")  # type: ignore[arg-type]
    return None


def output_json(data: dict[str, Any], quiet: bool = False) -> None:
    """
    Output JSON to stdout.

    Args:
        data: Data to output as JSON
        quiet: If True, suppress output
    """
    if not quiet:
        print(json.dumps(data))


def output_text(message: str, quiet: bool = False) -> None:
    """
    Output text to stdout.

    Args:
        message: Message to output
        quiet: If True, suppress output
    """
    if not quiet:
        print(message)


def error_json(error: str, solution: str, exit_code: int) -> dict[str, Any]:
    """
    Format error as JSON.

    Args:
        error: Error message
        solution: Solution suggestion
        exit_code: Exit code

    Returns:
        Error dictionary
    """
    return {"error": error, "solution": solution, "exit_code": exit_code}


def error_text(error: str, solution: str) -> str:
    """
    Format error as human-readable text.

    Args:
        error: Error message
        solution: Solution suggestion

    Returns:
        Formatted error message
    """
    return f"Error: {error}\n\nSolution: {solution}"


def validate_table_name(table_name: str) -> bool:
    """
    Validate DynamoDB table name.

    Args:
        table_name: Table name to validate

    Returns:
        True if valid

    Raises:
        ValueError: If table name is invalid
    """
    if not table_name:
        raise ValueError("Table name cannot be empty")
    if len(table_name) < 3 or len(table_name) > 255:
        raise ValueError("Table name must be between 3 and 255 characters")
    if not all(c.isalnum() or c in "-_." for c in table_name):
        raise ValueError(
            "Table name can only contain alphanumeric characters, hyphens, underscores, and periods"
        )
    return True


def validate_key(key: str) -> bool:
    """
    Validate key name.

    Args:
        key: Key to validate

    Returns:
        True if valid

    Raises:
        ValueError: If key is invalid
    """
    if not key:
        raise ValueError("Key cannot be empty")
    if len(key) > MAX_KEY_LENGTH:
        raise ValueError(f"Key cannot exceed {MAX_KEY_LENGTH} characters")
    return True


def redis_slice(items: list[Any], start: int, stop: int) -> list[Any]:
    """
    Slice with Redis range semantics.

    Both indices are inclusive and may be negative, counting from the end.
    Out of range indices are clamped rather than raising.

    Args:
        items: Full sequence in order
        start: First index
        stop: Last index (inclusive)

    Returns:
        The selected items, empty if the range is empty
    """
    length = len(items)
    if start < 0:
        start = max(length + start, 0)
    if stop < 0:
        stop = length + stop
    if start > stop or start >= length:
        return []
    return items[start : stop + 1]
