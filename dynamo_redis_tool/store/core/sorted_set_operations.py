"""
Sorted set operations for the datastore.

Each member is its own item: PK is the set key, SK is the member. The score
lives only in ``score_key`` (encoded score, "/", member), an order-preserving
string that covers the whole double range, which a DynamoDB number does not.
``score_key`` is the range key of the LSI-score index, so an index query
returns members in score order with ties broken by member name.
"""

import math
from collections.abc import Iterable
from typing import Any

from ..constants import (
    ATTR_PK,
    ATTR_SCORE_KEY,
    ATTR_SK,
    ATTR_TYPE,
    INDEX_SCORE,
    ZSET_INCR_MAX_ATTEMPTS,
    ZSET_RANGE_END,
    ZSET_SCORE_SEPARATOR,
)
from ..exceptions import KVStoreError
from ..logging_config import get_logger
from ..models import Flag, ItemType
from ..utils import redis_slice
from .atomic import conditional_delete, conditional_update
from .client import DynamoDBClient
from .expressions import ExpressionBuilder
from .keys import member_key
from .ordering import SCORE_KEY_WIDTH, decode_score, encode_score
from .pagination import PaginatedScan
from .values import string_attribute

logger = get_logger(__name__)

_ZSET_TYPE = string_attribute(ItemType.ZSET.value)

ScoredMember = tuple[str, float]


def score_key(score: float, member: str) -> str:
    """Ordering key of a member: encoded score, separator, member."""
    return f"{encode_score(score)}{ZSET_SCORE_SEPARATOR}{member}"


def _scored_member(item: dict[str, Any]) -> ScoredMember:
    encoded = item[ATTR_SCORE_KEY]["S"]
    return item[ATTR_SK]["S"], decode_score(encoded[:SCORE_KEY_WIDTH])


def _score_update(builder: ExpressionBuilder, member: str, score: float) -> ExpressionBuilder:
    if not math.isfinite(score):
        raise ValueError(f"Scores must be finite, got {score}")
    builder.update_set(ATTR_SCORE_KEY, string_attribute(score_key(score, member)))
    builder.update_set(ATTR_TYPE, _ZSET_TYPE)
    return builder


def _index_query(key: str, low: str | None = None, high: str | None = None) -> ExpressionBuilder:
    builder = ExpressionBuilder()
    builder.condition_equals(ATTR_PK, string_attribute(key))
    if low is not None and high is not None:
        builder.condition_between(ATTR_SCORE_KEY, string_attribute(low), string_attribute(high))
    return builder


def _score_range(key: str, min_score: float, max_score: float) -> ExpressionBuilder:
    return _index_query(key, encode_score(min_score), encode_score(max_score) + ZSET_RANGE_END)


def zadd(
    client: DynamoDBClient,
    key: str,
    scored_members: dict[str, float],
    flags: Iterable[Flag] = (),
) -> int:
    """
    Add members with scores, or update the scores of existing members.

    Each member is written with its own conditional update; IF_NOT_EXISTS
    and IF_EXISTS apply per member.

    Args:
        client: DynamoDB client
        key: Sorted set key
        scored_members: Member to score mapping
        flags: IF_NOT_EXISTS (only add new) or IF_EXISTS (only update)

    Returns:
        Number of members that did not exist before
    """
    flags = list(flags)
    added = 0
    for member, score in scored_members.items():
        builder = _score_update(ExpressionBuilder(), member, score)
        outcome = conditional_update(
            client, member_key(key, member), builder, flags, return_values="ALL_OLD"
        )
        if outcome.applied and not outcome.attributes:
            added += 1
    return added


def zscore(client: DynamoDBClient, key: str, member: str) -> float | None:
    """
    Get the score of a member.

    Returns:
        Score, or None if the member does not exist
    """
    builder = ExpressionBuilder().project(ATTR_SK, ATTR_SCORE_KEY)
    item = client.get_item(member_key(key, member).to_attributes(), **builder.projection_kwargs())
    if not item or ATTR_SCORE_KEY not in item:
        return None
    return _scored_member(item)[1]


def zincrby(client: DynamoDBClient, key: str, delta: float, member: str) -> float:
    """
    Add delta to the score of a member, creating it with score delta if missing.

    The score and its ordering key must change together, so this is an
    optimistic read-modify-write conditioned on the score that was read.

    Returns:
        New score

    Raises:
        KVStoreError: If concurrent writers kept changing the score
    """
    item_key = member_key(key, member)
    for attempt in range(ZSET_INCR_MAX_ATTEMPTS):
        item = client.get_item(item_key.to_attributes())
        builder = ExpressionBuilder()
        if item and ATTR_SCORE_KEY in item:
            current = item[ATTR_SCORE_KEY]
            new_score = _scored_member(item)[1] + delta
            builder.condition_equals(ATTR_SCORE_KEY, current, label="current_score_key")
        else:
            new_score = float(delta)
            builder.condition_not_exists(ATTR_PK)

        _score_update(builder, member, new_score)
        if conditional_update(client, item_key, builder).applied:
            return new_score
        logger.debug(f"Score of '{member}' in '{key}' changed concurrently (attempt {attempt + 1})")

    raise KVStoreError(
        f"Score of '{member}' in '{key}' changed concurrently {ZSET_INCR_MAX_ATTEMPTS} times"
    )


def zrem(client: DynamoDBClient, key: str, *members: str) -> int:
    """
    Remove members.

    Returns:
        Number of members that existed and were removed
    """
    removed = 0
    for member in dict.fromkeys(members):
        outcome = conditional_delete(client, member_key(key, member), return_values="ALL_OLD")
        if outcome.attributes:
            removed += 1
    return removed


def zcard(client: DynamoDBClient, key: str) -> int:
    """Number of members of a sorted set."""
    builder = _index_query(key)
    builder.filter_equals(ATTR_TYPE, _ZSET_TYPE)
    return PaginatedScan(client, builder).count()


def zcount(client: DynamoDBClient, key: str, min_score: float, max_score: float) -> int:
    """Number of members with min_score <= score <= max_score."""
    if min_score > max_score:
        return 0
    builder = _score_range(key, min_score, max_score)
    return PaginatedScan(client, builder, index_name=INDEX_SCORE).count()


def zrangebyscore(
    client: DynamoDBClient,
    key: str,
    min_score: float,
    max_score: float,
    offset: int = 0,
    count: int | None = None,
) -> list[ScoredMember]:
    """
    Members with min_score <= score <= max_score, lowest score first.

    Args:
        client: DynamoDB client
        key: Sorted set key
        min_score: Lower bound (inclusive)
        max_score: Upper bound (inclusive)
        offset: Number of matching members to skip
        count: Maximum number of members to return (optional)

    Returns:
        (member, score) pairs
    """
    if min_score > max_score:
        return []
    limit = offset + count if count is not None else None
    scan = PaginatedScan(
        client, _score_range(key, min_score, max_score), index_name=INDEX_SCORE, limit=limit
    )
    return [_scored_member(item) for item in scan.items()[offset:]]


def zrevrangebyscore(
    client: DynamoDBClient,
    key: str,
    max_score: float,
    min_score: float,
    offset: int = 0,
    count: int | None = None,
) -> list[ScoredMember]:
    """Members with min_score <= score <= max_score, highest score first."""
    if min_score > max_score:
        return []
    limit = offset + count if count is not None else None
    scan = PaginatedScan(
        client,
        _score_range(key, min_score, max_score),
        index_name=INDEX_SCORE,
        forward=False,
        limit=limit,
    )
    return [_scored_member(item) for item in scan.items()[offset:]]


def _range_by_rank(
    client: DynamoDBClient, key: str, start: int, stop: int, forward: bool
) -> list[ScoredMember]:
    # Non-negative bounds only need the first stop + 1 members
    limit = stop + 1 if start >= 0 and stop >= 0 else None
    scan = PaginatedScan(
        client, _index_query(key), index_name=INDEX_SCORE, forward=forward, limit=limit
    )
    return [_scored_member(item) for item in redis_slice(scan.items(), start, stop)]


def zrange(client: DynamoDBClient, key: str, start: int, stop: int) -> list[ScoredMember]:
    """Members by rank, lowest score first; start and stop are inclusive and may be negative."""
    return _range_by_rank(client, key, start, stop, forward=True)


def zrevrange(client: DynamoDBClient, key: str, start: int, stop: int) -> list[ScoredMember]:
    """Members by rank, highest score first."""
    return _range_by_rank(client, key, start, stop, forward=False)


def _rank(client: DynamoDBClient, key: str, member: str, operator: str) -> int | None:
    builder = ExpressionBuilder().project(ATTR_SCORE_KEY)
    item = client.get_item(member_key(key, member).to_attributes(), **builder.projection_kwargs())
    if not item or ATTR_SCORE_KEY not in item:
        return None

    query = ExpressionBuilder()
    query.condition_equals(ATTR_PK, string_attribute(key))
    query.condition_compare(ATTR_SCORE_KEY, operator, item[ATTR_SCORE_KEY])
    return PaginatedScan(client, query, index_name=INDEX_SCORE).count()


def zrank(client: DynamoDBClient, key: str, member: str) -> int | None:
    """0-based rank of member by ascending score, None if it does not exist."""
    return _rank(client, key, member, "<")


def zrevrank(client: DynamoDBClient, key: str, member: str) -> int | None:
    """0-based rank of member by descending score, None if it does not exist."""
    return _rank(client, key, member, ">")


def _pop(client: DynamoDBClient, key: str, count: int, forward: bool) -> list[ScoredMember]:
    scan = PaginatedScan(
        client, _index_query(key), index_name=INDEX_SCORE, forward=forward, limit=count
    )
    popped = []
    for item in scan.items():
        # Only remove the member if its score was not changed since the read
        builder = ExpressionBuilder()
        builder.condition_equals(ATTR_SCORE_KEY, item[ATTR_SCORE_KEY])
        member = item[ATTR_SK]["S"]
        if conditional_delete(client, member_key(key, member), builder).applied:
            popped.append(_scored_member(item))
    return popped


def zpopmin(client: DynamoDBClient, key: str, count: int = 1) -> list[ScoredMember]:
    """
    Remove and return up to count members with the lowest scores.

    Members changed or removed by another writer between the read and the
    delete are skipped, so fewer than count members may be returned.
    """
    return _pop(client, key, count, forward=True)


def zpopmax(client: DynamoDBClient, key: str, count: int = 1) -> list[ScoredMember]:
    """Remove and return up to count members with the highest scores."""
    return _pop(client, key, count, forward=False)
