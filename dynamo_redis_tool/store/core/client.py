"""
DynamoDB client wrapper with error handling.
"""

from typing import Any

import boto3
from botocore.exceptions import ClientError

from ..exceptions import (
    AWSPermissionError,
    AWSThrottlingError,
    ConditionFailedError,
    KVStoreError,
    TableNotFoundError,
    TransactionConflictError,
)
from ..logging_config import get_logger

logger = get_logger(__name__)

THROTTLING_CODES = {
    "ProvisionedThroughputExceededException",
    "ThrottlingException",
    "RequestLimitExceeded",
}

TRANSACTION_CONFLICT_CODES = {
    "TransactionCanceledException",
    "TransactionConflictException",
    "TransactionInProgressException",
}

# Cancellation reasons that mean "nothing was applied, try again if you want"
ABSORBED_CANCELLATION_REASONS = {"None", "ConditionalCheckFailed", "TransactionConflict"}


class DynamoDBClient:
    """DynamoDB client wrapper with error handling."""

    def __init__(
        self,
        table_name: str,
        region: str | None = None,
        profile: str | None = None,
        endpoint_url: str | None = None,
        consistent_reads: bool = False,
    ):
        """
        Initialize DynamoDB client.

        Args:
            table_name: DynamoDB table name
            region: AWS region (optional, uses SDK default)
            profile: AWS profile (optional, uses SDK default)
            endpoint_url: Endpoint override, e.g. DynamoDB Local (optional)
            consistent_reads: Use strongly consistent reads for gets and queries
        """
        session = boto3.Session(profile_name=profile, region_name=region)
        self.client = session.client("dynamodb", endpoint_url=endpoint_url)
        self.table_name = table_name
        self.consistent_reads = consistent_reads

    def get_item(self, key: dict[str, Any], **kwargs: Any) -> dict[str, Any] | None:
        """
        Get item by key.

        Args:
            key: Key attributes
            **kwargs: Extra request arguments (projection, placeholder names)

        Returns:
            Item if found, None otherwise

        Raises:
            KVStoreError: For DynamoDB errors
        """
        try:
            response = self.client.get_item(
                TableName=self.table_name,
                Key=key,
                ConsistentRead=self.consistent_reads,
                **kwargs,
            )
            return response.get("Item") or None
        except ClientError as e:
            self._handle_error(e)
            raise  # For type checker

    def put_item(self, item: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        """
        Put item with optional condition.

        Args:
            item: Item attributes
            **kwargs: Condition expression and placeholders

        Returns:
            Response from DynamoDB

        Raises:
            ConditionFailedError: If condition fails
            KVStoreError: For other DynamoDB errors
        """
        try:
            return self.client.put_item(TableName=self.table_name, Item=item, **kwargs)
        except ClientError as e:
            self._handle_error(e)
            raise  # For type checker

    def update_item(self, key: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        """
        Update item with optional condition.

        Args:
            key: Key attributes
            **kwargs: Update/condition expressions, placeholders, ReturnValues

        Returns:
            Response from DynamoDB

        Raises:
            ConditionFailedError: If condition fails
            KVStoreError: For other DynamoDB errors
        """
        try:
            return self.client.update_item(TableName=self.table_name, Key=key, **kwargs)
        except ClientError as e:
            self._handle_error(e)
            raise  # For type checker

    def delete_item(self, key: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        """
        Delete item with optional condition.

        Args:
            key: Key attributes
            **kwargs: Condition expression, placeholders, ReturnValues

        Returns:
            Response from DynamoDB

        Raises:
            ConditionFailedError: If condition fails
            KVStoreError: For other DynamoDB errors
        """
        try:
            return self.client.delete_item(TableName=self.table_name, Key=key, **kwargs)
        except ClientError as e:
            self._handle_error(e)
            raise  # For type checker

    def query(self, **kwargs: Any) -> dict[str, Any]:
        """
        Run a single query page.

        Args:
            **kwargs: Query arguments (key condition, cursor, limit, index, ...)

        Returns:
            Raw query response including LastEvaluatedKey when more pages remain

        Raises:
            KVStoreError: For DynamoDB errors
        """
        try:
            return self.client.query(
                TableName=self.table_name, ConsistentRead=self.consistent_reads, **kwargs
            )
        except ClientError as e:
            self._handle_error(e)
            raise  # For type checker

    def batch_write_item(self, requests: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Submit one batch of write requests.

        Args:
            requests: Up to 25 PutRequest/DeleteRequest entries

        Returns:
            Requests DynamoDB did not process

        Raises:
            KVStoreError: For DynamoDB errors
        """
        try:
            response = self.client.batch_write_item(RequestItems={self.table_name: requests})
            return response.get("UnprocessedItems", {}).get(self.table_name, [])
        except ClientError as e:
            self._handle_error(e)
            raise  # For type checker

    def transact_write_items(self, items: list[dict[str, Any]]) -> dict[str, Any]:
        """
        Apply several write actions atomically.

        Raises:
            TransactionConflictError: If the transaction was cancelled or conflicted
            KVStoreError: For other DynamoDB errors
        """
        try:
            return self.client.transact_write_items(TransactItems=items)
        except ClientError as e:
            self._handle_error(e)
            raise  # For type checker

    def transact_get_items(self, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Read several items atomically.

        Returns:
            One response per requested item, in request order

        Raises:
            KVStoreError: For DynamoDB errors
        """
        try:
            response = self.client.transact_get_items(TransactItems=items)
            return response.get("Responses", [])
        except ClientError as e:
            self._handle_error(e)
            raise  # For type checker

    def _handle_error(self, error: ClientError) -> None:
        """
        Convert boto3 errors to datastore exceptions.

        Args:
            error: ClientError from boto3

        Raises:
            ConditionFailedError: If condition check failed
            TransactionConflictError: If a transaction was cancelled by conditions or conflicts
            TableNotFoundError: If table not found
            AWSThrottlingError: If throttled
            AWSPermissionError: If permission denied
            KVStoreError: For other errors
        """
        code = error.response["Error"]["Code"]
        logger.debug(f"DynamoDB error {code} on table '{self.table_name}'")

        if code == "ConditionalCheckFailedException":
            raise ConditionFailedError(f"Condition failed: {error}")
        elif code in TRANSACTION_CONFLICT_CODES:
            reasons = {
                reason.get("Code", "None")
                for reason in error.response.get("CancellationReasons", [])
            }
            if reasons <= ABSORBED_CANCELLATION_REASONS:
                raise TransactionConflictError(f"Transaction cancelled: {error}")
            raise KVStoreError(f"Transaction failed: {error}")
        elif code == "ResourceNotFoundException":
            raise TableNotFoundError(f"Table '{self.table_name}' not found")
        elif code in THROTTLING_CODES:
            raise AWSThrottlingError("DynamoDB throttling - retry with backoff")
        elif code == "AccessDeniedException":
            raise AWSPermissionError("AWS permission denied")
        else:
            raise KVStoreError(f"DynamoDB error: {error}")
