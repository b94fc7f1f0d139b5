"""
Custom exceptions for datastore operations.
"""

from typing import Any


class KVStoreError(Exception):
    """Base exception for datastore operations."""

    pass


class ConditionFailedError(KVStoreError):
    """Conditional write failed."""

    pass


class TransactionConflictError(KVStoreError):
    """Transaction was cancelled by a failed condition or a concurrent transaction."""

    pass


class BatchWriteError(KVStoreError):
    """Batch write stopped making progress on unprocessed items."""

    def __init__(self, message: str, written: int, pending: list[dict[str, Any]]):
        super().__init__(message)
        self.written = written
        self.pending = pending


class StreamAppendError(KVStoreError):
    """Stream entry could not be appended after retrying."""

    pass


class AWSThrottlingError(KVStoreError):
    """DynamoDB throttling occurred."""

    pass


class AWSPermissionError(KVStoreError):
    """AWS permission denied."""

    pass


class TableNotFoundError(KVStoreError):
    """DynamoDB table does not exist."""

    pass


class TableAlreadyExistsError(KVStoreError):
    """DynamoDB table already exists."""

    pass
