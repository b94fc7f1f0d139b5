"""
Stream operations for the datastore.

Each entry is its own item: PK is the stream key, SK is the fixed-width
StreamID and the field/value pairs are kept in a map attribute. Two kinds of
bookkeeping items live under the reserved prefix of the same partition:

- the last-ID sentinel, holding the highest ID ever appended
- per-second sequence counters, used to allocate auto IDs

Reserved sort keys start with "_", which sorts after every digit, so a range
over [STREAM_START, STREAM_END] never returns them.
"""

import time
from typing import Any

from ..constants import (
    ATTR_FIELDS,
    ATTR_PK,
    ATTR_SK,
    ATTR_TTL,
    ATTR_TYPE,
    ATTR_VALUE,
    STREAM_APPEND_MAX_ATTEMPTS,
    STREAM_SEQUENCE_TTL,
)
from ..exceptions import StreamAppendError
from ..logging_config import get_logger
from ..models import Flag, ItemType, StreamItem
from ..utils import validate_key
from .atomic import conditional_delete, conditional_update
from .batch import BatchWriter, delete_request
from .client import DynamoDBClient
from .expressions import ExpressionBuilder
from .keys import ItemKey, stream_last_id_key, stream_sequence_key
from .ordering import AUTO_ID, STREAM_END, STREAM_START, StreamID
from .pagination import PaginatedScan
from .transactions import TransactionalGroup
from .values import number_attribute, string_attribute

logger = get_logger(__name__)

_STREAM_TYPE = string_attribute(ItemType.STREAM.value)
_META_TYPE = string_attribute(ItemType.META.value)


def _as_stream_id(stream_id: StreamID | str) -> StreamID:
    if isinstance(stream_id, StreamID):
        return stream_id
    return StreamID.parse(stream_id)


def _entry_key(key: str, stream_id: StreamID) -> ItemKey:
    return ItemKey(key, str(stream_id))


def _stream_item(item: dict[str, Any]) -> StreamItem:
    fields = item.get(ATTR_FIELDS, {}).get("M", {})
    return StreamItem(
        id=StreamID.parse(item[ATTR_SK]["S"]),
        fields={name: attribute["S"] for name, attribute in fields.items()},
    )


def _range_query(key: str, start: StreamID, end: StreamID) -> ExpressionBuilder:
    validate_key(key)
    builder = ExpressionBuilder()
    builder.condition_equals(ATTR_PK, string_attribute(key))
    builder.condition_between(ATTR_SK, string_attribute(str(start)), string_attribute(str(end)))
    return builder


def _next_sequence(client: DynamoDBClient, key: str, timestamp: int) -> int:
    """Allocate the next sequence number for timestamp, starting at 0."""
    builder = ExpressionBuilder()
    builder.update_add(ATTR_VALUE, number_attribute(1))
    builder.update_set(ATTR_TTL, number_attribute(timestamp + STREAM_SEQUENCE_TTL))
    builder.update_set(ATTR_TYPE, _META_TYPE)

    outcome = conditional_update(
        client, stream_sequence_key(key, timestamp), builder, return_values="UPDATED_NEW"
    )
    return int(outcome.attributes[ATTR_VALUE]["N"]) - 1


def _append(
    client: DynamoDBClient, key: str, stream_id: StreamID, fields: dict[str, str]
) -> bool:
    """Write the entry and advance the last-ID sentinel in one transaction."""
    encoded_id = string_attribute(str(stream_id))
    entry = {
        ATTR_TYPE: _STREAM_TYPE,
        ATTR_FIELDS: {"M": {name: string_attribute(value) for name, value in fields.items()}},
    }

    sentinel = ExpressionBuilder()
    value_name = sentinel.name(ATTR_VALUE)
    new_id = sentinel.value("value", encoded_id)
    sentinel.condition(f"(attribute_not_exists({value_name}) OR {value_name} < {new_id})")
    sentinel.update_set(ATTR_VALUE, encoded_id)
    sentinel.update_set(ATTR_TYPE, _META_TYPE)

    group = TransactionalGroup(client)
    group.put(_entry_key(key, stream_id), entry, flags=[Flag.IF_NOT_EXISTS])
    group.update(stream_last_id_key(key), sentinel)
    return group.execute()


def xadd(
    client: DynamoDBClient,
    key: str,
    fields: dict[str, Any],
    stream_id: StreamID | str = AUTO_ID,
) -> tuple[StreamID, bool]:
    """
    Append an entry to a stream.

    IDs must be strictly increasing. With AUTO_ID the ID is the current unix
    second plus a sequence number allocated from a per-second counter; a
    rejected append is retried with a fresh ID. An explicit ID is tried once.

    Args:
        client: DynamoDB client
        key: Stream key
        fields: Field/value pairs (values are stored as strings)
        stream_id: AUTO_ID, a StreamID or its string form

    Returns:
        (ID, True) if appended, (ID, False) if an explicit ID was not greater
        than the last appended ID

    Raises:
        ValueError: If fields is empty or the ID is malformed
        StreamAppendError: If auto ID appends kept being rejected
    """
    validate_key(key)
    if not fields:
        raise ValueError("Stream entry needs at least one field")
    entry_fields = {str(name): str(value) for name, value in fields.items()}

    if stream_id != AUTO_ID:
        explicit_id = _as_stream_id(stream_id)
        return explicit_id, _append(client, key, explicit_id, entry_fields)

    for attempt in range(STREAM_APPEND_MAX_ATTEMPTS):
        timestamp = int(time.time())
        auto_id = StreamID(timestamp, _next_sequence(client, key, timestamp))
        if _append(client, key, auto_id, entry_fields):
            return auto_id, True
        logger.debug(f"Append of {auto_id} to '{key}' rejected (attempt {attempt + 1})")

    raise StreamAppendError(
        f"Could not append to stream '{key}' after {STREAM_APPEND_MAX_ATTEMPTS} attempts"
    )


def xrange(
    client: DynamoDBClient,
    key: str,
    start: StreamID | str = STREAM_START,
    end: StreamID | str = STREAM_END,
    count: int | None = None,
) -> list[StreamItem]:
    """
    Entries with start <= ID <= end, oldest first.

    Args:
        client: DynamoDB client
        key: Stream key
        start: Lowest ID (inclusive)
        end: Highest ID (inclusive)
        count: Maximum number of entries (optional)

    Returns:
        Stream entries
    """
    start, end = _as_stream_id(start), _as_stream_id(end)
    if start > end:
        return []
    scan = PaginatedScan(client, _range_query(key, start, end), limit=count)
    return [_stream_item(item) for item in scan.items()]


def xrevrange(
    client: DynamoDBClient,
    key: str,
    end: StreamID | str = STREAM_END,
    start: StreamID | str = STREAM_START,
    count: int | None = None,
) -> list[StreamItem]:
    """Entries with start <= ID <= end, newest first."""
    start, end = _as_stream_id(start), _as_stream_id(end)
    if start > end:
        return []
    scan = PaginatedScan(client, _range_query(key, start, end), forward=False, limit=count)
    return [_stream_item(item) for item in scan.items()]


def xlen(client: DynamoDBClient, key: str) -> int:
    """Number of entries in a stream."""
    return PaginatedScan(client, _range_query(key, STREAM_START, STREAM_END)).count()


def xdel(client: DynamoDBClient, key: str, *stream_ids: StreamID | str) -> int:
    """
    Delete entries by ID.

    The last-ID sentinel is left alone, so deleted IDs are never reused.

    Returns:
        Number of entries that existed and were deleted
    """
    validate_key(key)
    deleted = 0
    for stream_id in dict.fromkeys(_as_stream_id(s) for s in stream_ids):
        outcome = conditional_delete(client, _entry_key(key, stream_id), return_values="ALL_OLD")
        if outcome.attributes:
            deleted += 1
    return deleted


def xread(
    client: DynamoDBClient, key: str, after: StreamID | str, count: int | None = None
) -> list[StreamItem]:
    """
    Entries with an ID strictly greater than after, oldest first.

    This is a non-blocking read; callers poll with the last ID they saw.
    """
    after = _as_stream_id(after)
    if after == STREAM_END:
        return []
    return xrange(client, key, after.next(), STREAM_END, count)


def xtrim(client: DynamoDBClient, key: str, maxlen: int) -> int:
    """
    Trim a stream to its maxlen newest entries.

    Returns:
        Number of entries deleted
    """
    if maxlen < 0:
        raise ValueError("maxlen cannot be negative")

    builder = _range_query(key, STREAM_START, STREAM_END).project(ATTR_SK)
    items = PaginatedScan(client, builder, forward=False).items()
    requests = [delete_request(ItemKey(key, item[ATTR_SK]["S"])) for item in items[maxlen:]]
    if not requests:
        return 0
    return BatchWriter(client).write(requests)
