"""
String operations for the datastore (GET, SET, MSET, INCR and friends).

A string key is a single item: PK is the key, SK is the scalar sentinel.
"""

import time
from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from ..constants import ATTR_TTL, ATTR_TYPE, ATTR_VALUE
from ..models import Flag, ItemType, Value, to_value
from .atomic import conditional_delete, conditional_update
from .client import DynamoDBClient
from .expressions import ExpressionBuilder
from .keys import scalar_key
from .transactions import TransactionalGroup, transact_get
from .values import decode_value, encode_value, number_attribute, string_attribute


def _ttl_attribute(ttl: int) -> dict[str, str]:
    return number_attribute(int(time.time()) + ttl)


def get_value(client: DynamoDBClient, key: str) -> Value:
    """
    Get the value of a key.

    Args:
        client: DynamoDB client
        key: Key name

    Returns:
        Stored value, or the absent value if the key does not exist
    """
    builder = ExpressionBuilder().project(ATTR_VALUE)
    item = client.get_item(scalar_key(key).to_attributes(), **builder.projection_kwargs())
    if not item:
        return Value.absent()
    return decode_value(item.get(ATTR_VALUE))


def set_value(
    client: DynamoDBClient,
    key: str,
    value: Any,
    ttl: int | None = None,
    flags: Iterable[Flag] = (),
) -> bool:
    """
    Set a key to a value.

    Args:
        client: DynamoDB client
        key: Key name
        value: Value (or str/bytes/number) to store
        ttl: TTL in seconds (optional)
        flags: IF_NOT_EXISTS, IF_EXISTS and/or KEEP_TTL

    Returns:
        True if the value was written, False if a flag's condition failed
    """
    flags = set(flags)
    builder = ExpressionBuilder()
    builder.update_set(ATTR_VALUE, encode_value(to_value(value)))
    builder.update_set(ATTR_TYPE, string_attribute(ItemType.STRING.value))

    if ttl:
        builder.update_set(ATTR_TTL, _ttl_attribute(ttl))
    elif Flag.KEEP_TTL not in flags:
        builder.update_remove(ATTR_TTL)

    return conditional_update(client, scalar_key(key), builder, flags).applied


def setnx(client: DynamoDBClient, key: str, value: Any) -> bool:
    """Set a key only if it does not exist yet."""
    return set_value(client, key, value, flags=[Flag.IF_NOT_EXISTS])


def setex(client: DynamoDBClient, key: str, value: Any, ttl: int) -> bool:
    """Set a key with an expiry in seconds."""
    if ttl <= 0:
        raise ValueError("TTL must be positive")
    return set_value(client, key, value, ttl=ttl)


def getset(client: DynamoDBClient, key: str, value: Any) -> Value:
    """
    Set a key and return its previous value.

    Any TTL on the key is discarded.

    Returns:
        Previous value, or the absent value if the key did not exist
    """
    builder = ExpressionBuilder()
    builder.update_set(ATTR_VALUE, encode_value(to_value(value)))
    builder.update_set(ATTR_TYPE, string_attribute(ItemType.STRING.value))
    builder.update_remove(ATTR_TTL)

    outcome = conditional_update(client, scalar_key(key), builder, return_values="ALL_OLD")
    return decode_value(outcome.attributes.get(ATTR_VALUE))


def mget(client: DynamoDBClient, keys: list[str]) -> list[Value]:
    """
    Get the values of several keys in one consistent read.

    Returns:
        One value per key, absent for missing keys
    """
    builder = ExpressionBuilder().project(ATTR_VALUE)
    items = transact_get(client, [scalar_key(key) for key in keys], builder)
    return [decode_value(item.get(ATTR_VALUE)) if item else Value.absent() for item in items]


def _mset(client: DynamoDBClient, data: dict[str, Any], flags: Iterable[Flag]) -> bool:
    group = TransactionalGroup(client)
    for key, value in data.items():
        attributes = {
            ATTR_VALUE: encode_value(to_value(value)),
            ATTR_TYPE: string_attribute(ItemType.STRING.value),
        }
        group.put(scalar_key(key), attributes, flags=flags)
    return group.execute()


def mset(client: DynamoDBClient, data: dict[str, Any]) -> bool:
    """
    Set several keys atomically.

    Returns:
        True if all keys were written, False if the transaction conflicted
    """
    return _mset(client, data, ())


def msetnx(client: DynamoDBClient, data: dict[str, Any]) -> bool:
    """
    Set several keys atomically, only if none of them exists.

    Returns:
        True if all keys were written, False if any key already existed
    """
    return _mset(client, data, [Flag.IF_NOT_EXISTS])


def incr_by_float(client: DynamoDBClient, key: str, delta: Decimal | float | int) -> Decimal:
    """
    Atomically add delta to a numeric key, creating it at 0 if missing.

    This uses DynamoDB's ADD, so concurrent increments never lose updates.

    Args:
        client: DynamoDB client
        key: Key name
        delta: Amount to add (may be negative)

    Returns:
        Value after the increment

    Raises:
        KVStoreError: If the key holds a non-numeric value
    """
    builder = ExpressionBuilder()
    builder.update_add(ATTR_VALUE, number_attribute(delta))
    builder.update_set(ATTR_TYPE, string_attribute(ItemType.STRING.value))

    outcome = conditional_update(client, scalar_key(key), builder, return_values="ALL_NEW")
    return Decimal(outcome.attributes[ATTR_VALUE]["N"])


def incr_by(client: DynamoDBClient, key: str, delta: int) -> int:
    return int(incr_by_float(client, key, delta))


def decr_by(client: DynamoDBClient, key: str, delta: int) -> int:
    return int(incr_by_float(client, key, -delta))


def incr(client: DynamoDBClient, key: str) -> int:
    return incr_by(client, key, 1)


def decr(client: DynamoDBClient, key: str) -> int:
    return decr_by(client, key, 1)


def strlen(client: DynamoDBClient, key: str) -> int:
    """Length of the stored value, 0 if the key does not exist."""
    value = get_value(client, key)
    if not value.present:
        return 0
    if isinstance(value.data, bytes):
        return len(value.data)
    return len(value.as_text() or "")


def exists_value(client: DynamoDBClient, key: str) -> bool:
    """
    Check if a key exists.

    Args:
        client: DynamoDB client
        key: Key name

    Returns:
        True if key exists, False otherwise
    """
    return get_value(client, key).present


def delete_value(client: DynamoDBClient, key: str) -> bool:
    """
    Delete a key.

    Deletion is idempotent - deleting a missing key is not an error.

    Returns:
        True if the key existed
    """
    outcome = conditional_delete(client, scalar_key(key), return_values="ALL_OLD")
    return bool(outcome.attributes)
