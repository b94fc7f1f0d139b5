"""
List operations for the datastore.

Each element is its own item: PK is the list key, SK is a 20 digit position.
Positions are laid out around LIST_OFFSET:

- lpush uses LIST_OFFSET - time_ns, so a more recent lpush sorts first
- rpush uses LIST_OFFSET + time_ns, so a more recent rpush sorts last

An ascending query therefore returns the list from head to tail.
"""

import time
from typing import Any

from ..constants import (
    ATTR_PK,
    ATTR_SK,
    ATTR_TYPE,
    ATTR_VALUE,
    LIST_OFFSET,
    LIST_SORT_KEY_WIDTH,
    LIST_WRITE_MAX_ATTEMPTS,
)
from ..exceptions import KVStoreError
from ..logging_config import get_logger
from ..models import Flag, ItemType, Value, to_value
from ..utils import redis_slice, validate_key
from .atomic import conditional_delete, conditional_put
from .client import DynamoDBClient
from .expressions import ExpressionBuilder
from .keys import ItemKey
from .pagination import PaginatedScan
from .transactions import TransactionalGroup
from .values import decode_value, encode_value, string_attribute

logger = get_logger(__name__)

_LIST_TYPE = string_attribute(ItemType.LIST.value)


def _position(head: bool) -> str:
    timestamp_ns = time.time_ns()
    position = LIST_OFFSET - timestamp_ns if head else LIST_OFFSET + timestamp_ns
    return f"{position:0{LIST_SORT_KEY_WIDTH}d}"


def _elements_query(key: str) -> ExpressionBuilder:
    validate_key(key)
    builder = ExpressionBuilder()
    builder.condition_equals(ATTR_PK, string_attribute(key))
    builder.filter_equals(ATTR_TYPE, _LIST_TYPE)
    return builder


def _push_one(client: DynamoDBClient, key: str, value: Value, head: bool) -> None:
    attributes = {ATTR_VALUE: encode_value(value), ATTR_TYPE: _LIST_TYPE}
    for attempt in range(LIST_WRITE_MAX_ATTEMPTS):
        # Two pushes in the same nanosecond would share a position
        item_key = ItemKey(key, _position(head))
        if conditional_put(client, item_key, attributes, flags=[Flag.IF_NOT_EXISTS]).applied:
            return
        logger.debug(f"List position {item_key.sort} in '{key}' taken (attempt {attempt + 1})")

    raise KVStoreError(f"Could not find a free position in list '{key}'")


def _push(client: DynamoDBClient, key: str, values: tuple[Any, ...], head: bool) -> int:
    validate_key(key)
    if not values:
        raise ValueError("At least one value is required")
    for value in values:
        _push_one(client, key, to_value(value), head)
    return llen(client, key)


def lpush(client: DynamoDBClient, key: str, *values: Any) -> int:
    """
    Insert values at the head of a list.

    Values are inserted one after the other, so lpush(k, "a", "b") leaves
    "b" at the head, as in Redis.

    Args:
        client: DynamoDB client
        key: List key
        *values: Values to insert

    Returns:
        Length of the list after the push

    Raises:
        KVStoreError: If no free position was found after repeated collisions
    """
    return _push(client, key, values, head=True)


def rpush(client: DynamoDBClient, key: str, *values: Any) -> int:
    """
    Append values at the tail of a list.

    Returns:
        Length of the list after the push
    """
    return _push(client, key, values, head=False)


def _push_existing_one(client: DynamoDBClient, key: str, value: Value, head: bool) -> bool:
    attributes = {ATTR_VALUE: encode_value(value), ATTR_TYPE: _LIST_TYPE}
    for attempt in range(LIST_WRITE_MAX_ATTEMPTS):
        items = PaginatedScan(client, _elements_query(key), limit=1).items()
        if not items:
            return False

        # The element that was read must still be there when the new one lands
        existing = ItemKey(key, items[0][ATTR_SK]["S"])
        item_key = ItemKey(key, _position(head))
        if item_key != existing:
            group = TransactionalGroup(client)
            group.check(existing, flags=[Flag.IF_EXISTS])
            group.put(item_key, attributes, flags=[Flag.IF_NOT_EXISTS])
            if group.execute():
                return True
        logger.debug(f"List '{key}' changed during push (attempt {attempt + 1})")

    raise KVStoreError(f"List '{key}' kept changing while pushing")


def _pushx(client: DynamoDBClient, key: str, values: tuple[Any, ...], head: bool) -> int:
    validate_key(key)
    if not values:
        raise ValueError("At least one value is required")
    for value in values:
        if not _push_existing_one(client, key, to_value(value), head):
            break
    return llen(client, key)


def lpushx(client: DynamoDBClient, key: str, *values: Any) -> int:
    """
    Insert values at the head of a list, only if the list already exists.

    Each value is pushed in a transaction that also checks an existing
    element is still present, so nothing is pushed onto a list that was
    emptied in the meantime.

    Args:
        client: DynamoDB client
        key: List key
        *values: Values to insert

    Returns:
        Length of the list after the push, 0 if the list does not exist
    """
    return _pushx(client, key, values, head=True)


def rpushx(client: DynamoDBClient, key: str, *values: Any) -> int:
    """Append values at the tail of a list, only if the list already exists."""
    return _pushx(client, key, values, head=False)


def lrange(client: DynamoDBClient, key: str, start: int, stop: int) -> list[Value]:
    """
    Get a range of elements.

    Uses Redis semantics: start and stop are inclusive, negative indices count
    from the tail (-1 is the last element), out of range indices are clamped.

    Examples:
        lrange(client, "mylist", 0, -1)   # Whole list
        lrange(client, "mylist", 0, 4)    # First 5 elements
        lrange(client, "mylist", -3, -1)  # Last 3 elements

    Returns:
        Elements from head to tail
    """
    # Non-negative bounds only need the first stop + 1 elements
    limit = stop + 1 if start >= 0 and stop >= 0 else None
    items = PaginatedScan(client, _elements_query(key), limit=limit).items()
    return [decode_value(item.get(ATTR_VALUE)) for item in redis_slice(items, start, stop)]


def lindex(client: DynamoDBClient, key: str, index: int) -> Value:
    """
    Get the element at index; negative indices count from the tail.

    Returns:
        Element, or the absent value if index is out of range
    """
    forward = index >= 0
    wanted = index if forward else -index - 1
    scan = PaginatedScan(client, _elements_query(key), forward=forward, limit=wanted + 1)
    items = scan.items()
    if len(items) <= wanted:
        return Value.absent()
    return decode_value(items[wanted].get(ATTR_VALUE))


def llen(client: DynamoDBClient, key: str) -> int:
    """Length of a list, 0 if it does not exist."""
    return PaginatedScan(client, _elements_query(key)).count()


def _pop(client: DynamoDBClient, key: str, head: bool) -> Value:
    for attempt in range(LIST_WRITE_MAX_ATTEMPTS):
        items = PaginatedScan(client, _elements_query(key), forward=head, limit=1).items()
        if not items:
            return Value.absent()

        item_key = ItemKey(key, items[0][ATTR_SK]["S"])
        outcome = conditional_delete(
            client, item_key, flags=[Flag.IF_EXISTS], return_values="ALL_OLD"
        )
        if outcome.applied:
            return decode_value(outcome.attributes.get(ATTR_VALUE))
        logger.debug(f"Element {item_key.sort} of '{key}' already popped (attempt {attempt + 1})")

    raise KVStoreError(f"List '{key}' kept changing while popping")


def lpop(client: DynamoDBClient, key: str) -> Value:
    """
    Remove and return the head element.

    The element that was read is deleted on condition that it still exists;
    if another client popped it first, the read is repeated.

    Returns:
        Element, or the absent value if the list is empty

    Raises:
        KVStoreError: If other clients won the race on every attempt
    """
    return _pop(client, key, head=True)


def rpop(client: DynamoDBClient, key: str) -> Value:
    """
    Remove and return the tail element.

    Returns:
        Element, or the absent value if the list is empty
    """
    return _pop(client, key, head=False)
