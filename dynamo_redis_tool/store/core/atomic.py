"""
Single-item conditional writes.

A failed precondition is a normal outcome here: it is reported as
``WriteOutcome(applied=False)`` instead of an exception. Any other backend
error propagates and the write should be treated as not applied.
"""

from collections.abc import Iterable
from typing import Any

from ..constants import ATTR_PK
from ..exceptions import ConditionFailedError
from ..logging_config import get_logger
from ..models import Flag, WriteOutcome
from .client import DynamoDBClient
from .expressions import ExpressionBuilder
from .keys import ItemKey

logger = get_logger(__name__)


def apply_flags(builder: ExpressionBuilder, flags: Iterable[Flag]) -> ExpressionBuilder:
    """
    Add the existence preconditions named by flags to builder.

    KEEP_TTL is not a precondition and is left to the caller.
    """
    flags = set(flags)
    if Flag.IF_NOT_EXISTS in flags:
        builder.condition_not_exists(ATTR_PK)
    if Flag.IF_EXISTS in flags:
        builder.condition_exists(ATTR_PK)
    return builder


def conditional_put(
    client: DynamoDBClient,
    key: ItemKey,
    attributes: dict[str, Any],
    flags: Iterable[Flag] = (),
    builder: ExpressionBuilder | None = None,
) -> WriteOutcome:
    """
    Replace an item if its precondition holds.

    Args:
        client: DynamoDB client
        key: Item key
        attributes: Non-key attributes as typed attribute values
        flags: Existence preconditions
        builder: Builder carrying additional conditions (optional)

    Returns:
        WriteOutcome with applied=False if the condition failed
    """
    builder = apply_flags(builder or ExpressionBuilder(), flags)
    item = {**attributes, **key.to_attributes()}

    try:
        client.put_item(item, **builder.write_kwargs())
    except ConditionFailedError:
        logger.debug(f"Put on {key} rejected by condition")
        return WriteOutcome(applied=False)
    return WriteOutcome(applied=True)


def conditional_update(
    client: DynamoDBClient,
    key: ItemKey,
    builder: ExpressionBuilder,
    flags: Iterable[Flag] = (),
    return_values: str | None = None,
) -> WriteOutcome:
    """
    Update an item in place if its precondition holds.

    Args:
        client: DynamoDB client
        key: Item key
        builder: Builder carrying the update clauses and any conditions
        flags: Existence preconditions
        return_values: DynamoDB ReturnValues (e.g. "ALL_NEW", "ALL_OLD")

    Returns:
        WriteOutcome with the returned attributes, or applied=False if the
        condition failed
    """
    apply_flags(builder, flags)
    kwargs = builder.write_kwargs()
    if return_values:
        kwargs["ReturnValues"] = return_values

    try:
        response = client.update_item(key.to_attributes(), **kwargs)
    except ConditionFailedError:
        logger.debug(f"Update on {key} rejected by condition")
        return WriteOutcome(applied=False)
    return WriteOutcome(applied=True, attributes=response.get("Attributes", {}))


def conditional_delete(
    client: DynamoDBClient,
    key: ItemKey,
    builder: ExpressionBuilder | None = None,
    flags: Iterable[Flag] = (),
    return_values: str | None = None,
) -> WriteOutcome:
    """
    Delete an item if its precondition holds.

    Args:
        client: DynamoDB client
        key: Item key
        builder: Builder carrying conditions (optional)
        flags: Existence preconditions
        return_values: "ALL_OLD" to get the deleted item back

    Returns:
        WriteOutcome with the deleted attributes when requested, or
        applied=False if the condition failed
    """
    builder = apply_flags(builder or ExpressionBuilder(), flags)
    kwargs = builder.write_kwargs()
    if return_values:
        kwargs["ReturnValues"] = return_values

    try:
        response = client.delete_item(key.to_attributes(), **kwargs)
    except ConditionFailedError:
        logger.debug(f"Delete on {key} rejected by condition")
        return WriteOutcome(applied=False)
    return WriteOutcome(applied=True, attributes=response.get("Attributes", {}))
