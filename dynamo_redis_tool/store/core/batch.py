"""
Best-effort bulk writes using DynamoDB BatchWriteItem.

No atomicity across items: DynamoDB may apply any subset of a batch and hand
back the rest as unprocessed. Only the unprocessed subset is resubmitted.
"""

import time
from typing import Any

from ..constants import (
    BATCH_BACKOFF_BASE,
    BATCH_BACKOFF_FACTOR,
    BATCH_BACKOFF_MAX,
    BATCH_MAX_STALLED_ROUNDS,
    BATCH_WRITE_MAX_ITEMS,
)
from ..exceptions import BatchWriteError
from ..logging_config import get_logger
from .client import DynamoDBClient
from .keys import ItemKey

logger = get_logger(__name__)


def put_request(key: ItemKey, attributes: dict[str, Any]) -> dict[str, Any]:
    """Unconditional put entry for a batch."""
    return {"PutRequest": {"Item": {**attributes, **key.to_attributes()}}}


def delete_request(key: ItemKey) -> dict[str, Any]:
    """Unconditional delete entry for a batch."""
    return {"DeleteRequest": {"Key": key.to_attributes()}}


class BatchWriter:
    """
    Submit unconditional writes until DynamoDB has processed all of them.

    Args:
        client: DynamoDB client
        max_stalled_rounds: Consecutive rounds without progress before giving up
        backoff_base: First backoff delay in seconds after a stalled round
    """

    def __init__(
        self,
        client: DynamoDBClient,
        max_stalled_rounds: int = BATCH_MAX_STALLED_ROUNDS,
        backoff_base: float = BATCH_BACKOFF_BASE,
    ):
        self.client = client
        self.max_stalled_rounds = max_stalled_rounds
        self.backoff_base = backoff_base

    def write(self, requests: list[dict[str, Any]]) -> int:
        """
        Write all requests.

        Args:
            requests: PutRequest/DeleteRequest entries, any number

        Returns:
            Number of requests DynamoDB reported as processed

        Raises:
            BatchWriteError: If unprocessed items stop draining
            KVStoreError: For DynamoDB errors (items written so far are unknown)
        """
        written = 0
        for start in range(0, len(requests), BATCH_WRITE_MAX_ITEMS):
            chunk = requests[start : start + BATCH_WRITE_MAX_ITEMS]
            written += self._write_chunk(chunk, written)
        return written

    def _write_chunk(self, pending: list[dict[str, Any]], written_before: int) -> int:
        written = 0
        stalled = 0

        while pending:
            attempting = len(pending)
            unprocessed = self.client.batch_write_item(pending)
            written += attempting - len(unprocessed)

            if unprocessed and len(unprocessed) >= attempting:
                stalled += 1
                if stalled >= self.max_stalled_rounds:
                    raise BatchWriteError(
                        f"{len(unprocessed)} items still unprocessed after "
                        f"{stalled} rounds without progress",
                        written=written_before + written,
                        pending=unprocessed,
                    )
                delay = min(
                    self.backoff_base * (BATCH_BACKOFF_FACTOR ** (stalled - 1)), BATCH_BACKOFF_MAX
                )
                logger.warning(
                    f"Batch write made no progress ({len(unprocessed)} unprocessed), "
                    f"retrying in {delay:.2f}s"
                )
                if delay > 0:
                    time.sleep(delay)
            else:
                stalled = 0
                if unprocessed:
                    logger.debug(f"Resubmitting {len(unprocessed)} unprocessed items")

            pending = unprocessed

        return written
