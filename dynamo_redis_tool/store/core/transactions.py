"""
Transactional groups using DynamoDB TransactWriteItems and TransactGetItems.
"""

from collections.abc import Iterable
from typing import Any

from ..constants import TRANSACT_GET_MAX_KEYS, TRANSACTION_MAX_ACTIONS
from ..exceptions import ConditionFailedError, KVStoreError, TransactionConflictError
from ..logging_config import get_logger
from ..models import Flag
from .atomic import apply_flags
from .client import DynamoDBClient
from .expressions import ExpressionBuilder
from .keys import ItemKey

logger = get_logger(__name__)


class TransactionalGroup:
    """
    All-or-nothing group of conditional actions across one or more keys.

    Actions are collected in order and submitted by execute(). Either every
    condition holds and every action applies, or nothing changes.

    Example:
        group = TransactionalGroup(client)
        group.put(ItemKey("a", "x"), {...}, flags=[Flag.IF_NOT_EXISTS])
        group.update(ItemKey("b", "y"), builder)
        applied = group.execute()
    """

    def __init__(self, client: DynamoDBClient):
        self.client = client
        self.actions: list[dict[str, Any]] = []

    def __len__(self) -> int:
        return len(self.actions)

    def put(
        self,
        key: ItemKey,
        attributes: dict[str, Any],
        flags: Iterable[Flag] = (),
        builder: ExpressionBuilder | None = None,
    ) -> "TransactionalGroup":
        """Replace an item, subject to flags and builder conditions."""
        builder = apply_flags(builder or ExpressionBuilder(), flags)
        action = {
            "TableName": self.client.table_name,
            "Item": {**attributes, **key.to_attributes()},
            **builder.write_kwargs(),
        }
        return self._add("Put", action)

    def update(
        self, key: ItemKey, builder: ExpressionBuilder, flags: Iterable[Flag] = ()
    ) -> "TransactionalGroup":
        """Update an item in place, subject to flags and builder conditions."""
        apply_flags(builder, flags)
        action = {
            "TableName": self.client.table_name,
            "Key": key.to_attributes(),
            **builder.write_kwargs(),
        }
        return self._add("Update", action)

    def delete(
        self,
        key: ItemKey,
        builder: ExpressionBuilder | None = None,
        flags: Iterable[Flag] = (),
    ) -> "TransactionalGroup":
        """Delete an item, subject to flags and builder conditions."""
        builder = apply_flags(builder or ExpressionBuilder(), flags)
        action = {
            "TableName": self.client.table_name,
            "Key": key.to_attributes(),
            **builder.write_kwargs(),
        }
        return self._add("Delete", action)

    def check(
        self,
        key: ItemKey,
        builder: ExpressionBuilder | None = None,
        flags: Iterable[Flag] = (),
    ) -> "TransactionalGroup":
        """Require a condition on an item without writing it."""
        builder = apply_flags(builder or ExpressionBuilder(), flags)
        if builder.condition_expression() is None:
            raise KVStoreError("Condition check requires a condition")
        action = {
            "TableName": self.client.table_name,
            "Key": key.to_attributes(),
            **builder.write_kwargs(),
        }
        return self._add("ConditionCheck", action)

    def _add(self, verb: str, action: dict[str, Any]) -> "TransactionalGroup":
        if len(self.actions) >= TRANSACTION_MAX_ACTIONS:
            raise KVStoreError(f"Transaction cannot exceed {TRANSACTION_MAX_ACTIONS} operations")
        self.actions.append({verb: action})
        return self

    def execute(self) -> bool:
        """
        Submit all actions as one transaction.

        Returns:
            True if every action applied, False if a condition failed or the
            transaction conflicted with another one

        Raises:
            KVStoreError: If the group is empty or DynamoDB reports another error
        """
        if not self.actions:
            raise KVStoreError("Transaction requires at least one operation")

        try:
            self.client.transact_write_items(self.actions)
        except (ConditionFailedError, TransactionConflictError) as e:
            logger.debug(f"Transaction of {len(self.actions)} actions not applied: {e}")
            return False
        return True


def transact_get(
    client: DynamoDBClient,
    keys: list[ItemKey],
    builder: ExpressionBuilder | None = None,
) -> list[dict[str, Any] | None]:
    """
    Read several items atomically.

    Keys beyond the per-request limit are read in further transactions, so
    atomicity holds per chunk of 100 keys.

    Args:
        client: DynamoDB client
        keys: Keys to read
        builder: Builder carrying a projection (optional)

    Returns:
        One item (or None if missing) per key, in the order given
    """
    projection = builder.projection_kwargs() if builder else {}
    items: list[dict[str, Any] | None] = []

    for start in range(0, len(keys), TRANSACT_GET_MAX_KEYS):
        chunk = keys[start : start + TRANSACT_GET_MAX_KEYS]
        requests = [
            {
                "Get": {
                    "TableName": client.table_name,
                    "Key": key.to_attributes(),
                    **projection,
                }
            }
            for key in chunk
        ]
        responses = client.transact_get_items(requests)
        items.extend(response.get("Item") or None for response in responses)

    return items
