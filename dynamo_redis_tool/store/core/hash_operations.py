"""
Hash operations for the datastore.

Each field of a hash is its own item: PK is the hash key, SK is the field.
"""

from decimal import Decimal
from typing import Any

from ..constants import ATTR_PK, ATTR_SK, ATTR_TYPE, ATTR_VALUE
from ..models import Flag, ItemType, Value, to_value
from .atomic import conditional_update
from .batch import BatchWriter, delete_request, put_request
from .client import DynamoDBClient
from .expressions import ExpressionBuilder
from .keys import member_key
from .pagination import PaginatedScan
from .transactions import TransactionalGroup, transact_get
from .values import decode_value, encode_value, number_attribute, string_attribute

_HASH_TYPE = string_attribute(ItemType.HASH.value)


def _fields_query(key: str) -> ExpressionBuilder:
    builder = ExpressionBuilder()
    builder.condition_equals(ATTR_PK, string_attribute(key))
    builder.filter_equals(ATTR_TYPE, _HASH_TYPE)
    return builder


def hget(client: DynamoDBClient, key: str, field: str) -> Value:
    """
    Get the value of a hash field.

    Returns:
        Field value, or the absent value if the field does not exist
    """
    builder = ExpressionBuilder().project(ATTR_VALUE)
    item = client.get_item(member_key(key, field).to_attributes(), **builder.projection_kwargs())
    return decode_value(item.get(ATTR_VALUE) if item else None)


def hset(client: DynamoDBClient, key: str, field_values: dict[str, Any]) -> int:
    """
    Set hash fields, overwriting existing ones.

    The fields are written with BatchWriteItem: no atomicity across fields.
    Use hmset() when the fields must be written all-or-nothing.

    Args:
        client: DynamoDB client
        key: Hash key
        field_values: Field to value mapping

    Returns:
        Number of fields written
    """
    requests = [
        put_request(
            member_key(key, field),
            {ATTR_VALUE: encode_value(to_value(value)), ATTR_TYPE: _HASH_TYPE},
        )
        for field, value in field_values.items()
    ]
    return BatchWriter(client).write(requests)


def hmset(client: DynamoDBClient, key: str, field_values: dict[str, Any]) -> bool:
    """
    Set hash fields atomically.

    Returns:
        True if every field was written, False if the transaction conflicted
    """
    group = TransactionalGroup(client)
    for field, value in field_values.items():
        builder = ExpressionBuilder()
        builder.update_set(ATTR_VALUE, encode_value(to_value(value)))
        builder.update_set(ATTR_TYPE, _HASH_TYPE)
        group.update(member_key(key, field), builder)
    return group.execute()


def hmget(client: DynamoDBClient, key: str, *fields: str) -> list[Value]:
    """
    Get several hash fields in one consistent read.

    Returns:
        One value per field, absent for missing fields
    """
    builder = ExpressionBuilder().project(ATTR_VALUE)
    items = transact_get(client, [member_key(key, field) for field in fields], builder)
    return [decode_value(item.get(ATTR_VALUE) if item else None) for item in items]


def hdel(client: DynamoDBClient, key: str, *fields: str) -> int:
    """
    Delete hash fields.

    Missing fields are not an error. BatchWriteItem does not report whether
    an item existed, so the count is of processed deletions.

    Returns:
        Number of deletions processed
    """
    requests = [delete_request(member_key(key, field)) for field in dict.fromkeys(fields)]
    return BatchWriter(client).write(requests)


def hexists(client: DynamoDBClient, key: str, field: str) -> bool:
    builder = ExpressionBuilder().project(ATTR_PK)
    item = client.get_item(member_key(key, field).to_attributes(), **builder.projection_kwargs())
    return item is not None


def hgetall(client: DynamoDBClient, key: str) -> dict[str, Value]:
    """
    Get every field and value of a hash.

    Returns:
        Field to value mapping, empty if the hash does not exist
    """
    items = PaginatedScan(client, _fields_query(key)).items()
    return {item[ATTR_SK]["S"]: decode_value(item.get(ATTR_VALUE)) for item in items}


def hkeys(client: DynamoDBClient, key: str) -> list[str]:
    builder = _fields_query(key).project(ATTR_SK)
    return [item[ATTR_SK]["S"] for item in PaginatedScan(client, builder).items()]


def hvals(client: DynamoDBClient, key: str) -> list[Value]:
    return list(hgetall(client, key).values())


def hlen(client: DynamoDBClient, key: str) -> int:
    return PaginatedScan(client, _fields_query(key)).count()


def hincrbyfloat(
    client: DynamoDBClient, key: str, field: str, delta: Decimal | float | int
) -> Decimal:
    """
    Atomically add delta to a numeric hash field, creating it at 0 if missing.

    Returns:
        Field value after the increment
    """
    builder = ExpressionBuilder()
    builder.update_add(ATTR_VALUE, number_attribute(delta))
    builder.update_set(ATTR_TYPE, _HASH_TYPE)

    outcome = conditional_update(
        client, member_key(key, field), builder, return_values="ALL_NEW"
    )
    return Decimal(outcome.attributes[ATTR_VALUE]["N"])


def hincrby(client: DynamoDBClient, key: str, field: str, delta: int) -> int:
    return int(hincrbyfloat(client, key, field, delta))


def hsetnx(client: DynamoDBClient, key: str, field: str, value: Any) -> bool:
    """
    Set a hash field only if it does not exist yet.

    Returns:
        True if the field was written, False if it already existed
    """
    builder = ExpressionBuilder()
    builder.update_set(ATTR_VALUE, encode_value(to_value(value)))
    builder.update_set(ATTR_TYPE, _HASH_TYPE)
    return conditional_update(
        client, member_key(key, field), builder, flags=[Flag.IF_NOT_EXISTS]
    ).applied
