"""
Composite key construction for datastore items.

Every item is addressed by a partition key (the Redis key) and a sort key
(member, field, stream ID, list position or a reserved sentinel). Sentinels
share the RESERVED_PREFIX, which user supplied names are not allowed to use.
"""

from dataclasses import dataclass
from typing import Any

from ..constants import (
    ATTR_PK,
    ATTR_SK,
    MAX_KEY_LENGTH,
    RESERVED_PREFIX,
    SCALAR_SORT_KEY,
    STREAM_LAST_ID_SORT_KEY,
    STREAM_SEQUENCE_PREFIX,
)
from ..utils import validate_key


@dataclass(frozen=True)
class ItemKey:
    """Two-part address of an item."""

    partition: str
    sort: str

    def to_attributes(self) -> dict[str, Any]:
        """Key as DynamoDB typed attribute values."""
        return {ATTR_PK: {"S": self.partition}, ATTR_SK: {"S": self.sort}}

    @classmethod
    def from_attributes(cls, attributes: dict[str, Any]) -> "ItemKey":
        return cls(attributes[ATTR_PK]["S"], attributes[ATTR_SK]["S"])


def validate_member(member: str) -> bool:
    """
    Validate a user supplied field or member name.

    Args:
        member: Field or member name

    Returns:
        True if valid

    Raises:
        ValueError: If the name is empty, too long or uses the reserved prefix
    """
    if not member:
        raise ValueError("Member cannot be empty")
    if len(member) > MAX_KEY_LENGTH:
        raise ValueError(f"Member cannot exceed {MAX_KEY_LENGTH} characters")
    if is_reserved(member):
        raise ValueError(f"Member cannot start with reserved prefix '{RESERVED_PREFIX}'")
    return True


def scalar_key(key: str) -> ItemKey:
    """Key of the single item holding a string value."""
    validate_key(key)
    return ItemKey(key, SCALAR_SORT_KEY)


def member_key(key: str, member: str) -> ItemKey:
    """Key of a hash field, set member or sorted-set member."""
    validate_key(key)
    validate_member(member)
    return ItemKey(key, member)


def stream_last_id_key(key: str) -> ItemKey:
    return ItemKey(key, STREAM_LAST_ID_SORT_KEY)


def stream_sequence_key(key: str, timestamp: int) -> ItemKey:
    return ItemKey(key, f"{STREAM_SEQUENCE_PREFIX}{timestamp:020d}")


def is_reserved(sort: str) -> bool:
    """True for sort keys of bookkeeping items, which users may not write."""
    return sort.startswith(RESERVED_PREFIX)
