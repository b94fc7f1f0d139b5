"""
Table management operations for the datastore.
"""

from typing import Any, Literal

import boto3
from botocore.exceptions import ClientError

from ..constants import ATTR_PK, ATTR_SCORE_KEY, ATTR_SK, ATTR_TTL, INDEX_SCORE
from ..exceptions import KVStoreError, TableAlreadyExistsError, TableNotFoundError
from ..logging_config import get_logger

logger = get_logger(__name__)


def _dynamodb(region: str | None, profile: str | None, endpoint_url: str | None) -> Any:
    session = boto3.Session(profile_name=profile, region_name=region)
    return session.client("dynamodb", endpoint_url=endpoint_url)


def create_table(
    table_name: str,
    region: str | None = None,
    profile: str | None = None,
    endpoint_url: str | None = None,
    billing_mode: Literal["PAY_PER_REQUEST", "PROVISIONED"] = "PAY_PER_REQUEST",
) -> dict[str, Any]:
    """
    Create DynamoDB table for the datastore.

    The table has a string partition key and sort key, a local secondary
    index ordering sorted-set members by their encoded score, and TTL enabled
    on the ttl attribute.

    Args:
        table_name: Table name
        region: AWS region (optional)
        profile: AWS profile (optional)
        endpoint_url: Endpoint override (optional)
        billing_mode: Billing mode (PAY_PER_REQUEST or PROVISIONED)

    Returns:
        Table description

    Raises:
        TableAlreadyExistsError: If table already exists
    """
    dynamodb = _dynamodb(region, profile, endpoint_url)

    kwargs: dict[str, Any] = {}
    if billing_mode == "PROVISIONED":
        kwargs["ProvisionedThroughput"] = {"ReadCapacityUnits": 5, "WriteCapacityUnits": 5}

    try:
        response = dynamodb.create_table(
            TableName=table_name,
            KeySchema=[
                {"AttributeName": ATTR_PK, "KeyType": "HASH"},  # Partition key
                {"AttributeName": ATTR_SK, "KeyType": "RANGE"},  # Sort key
            ],
            AttributeDefinitions=[
                {"AttributeName": ATTR_PK, "AttributeType": "S"},
                {"AttributeName": ATTR_SK, "AttributeType": "S"},
                {"AttributeName": ATTR_SCORE_KEY, "AttributeType": "S"},
            ],
            BillingMode=billing_mode,
            LocalSecondaryIndexes=[
                {
                    "IndexName": INDEX_SCORE,
                    "KeySchema": [
                        {"AttributeName": ATTR_PK, "KeyType": "HASH"},
                        {"AttributeName": ATTR_SCORE_KEY, "KeyType": "RANGE"},
                    ],
                    "Projection": {"ProjectionType": "ALL"},
                }
            ],
            Tags=[
                {"Key": "ManagedBy", "Value": "dynamo-redis-tool"},
                {"Key": "Purpose", "Value": "redis-datastore"},
            ],
            **kwargs,
        )

        dynamodb.get_waiter("table_exists").wait(TableName=table_name)

        # Enable TTL
        dynamodb.update_time_to_live(
            TableName=table_name,
            TimeToLiveSpecification={"Enabled": True, "AttributeName": ATTR_TTL},
        )
        logger.info(f"Created table '{table_name}'")

        return response["TableDescription"]  # type: ignore[no-any-return]

    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            raise TableAlreadyExistsError(f"Table '{table_name}' already exists")
        raise KVStoreError(f"DynamoDB error: {e}") from e


def drop_table(
    table_name: str,
    region: str | None = None,
    profile: str | None = None,
    endpoint_url: str | None = None,
) -> dict[str, Any]:
    """
    Drop DynamoDB table.

    Args:
        table_name: Table name
        region: AWS region (optional)
        profile: AWS profile (optional)
        endpoint_url: Endpoint override (optional)

    Returns:
        Table description

    Raises:
        TableNotFoundError: If table does not exist
    """
    dynamodb = _dynamodb(region, profile, endpoint_url)

    try:
        response = dynamodb.delete_table(TableName=table_name)
        logger.info(f"Dropped table '{table_name}'")
        return response["TableDescription"]  # type: ignore[no-any-return]
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceNotFoundException":
            raise TableNotFoundError(f"Table '{table_name}' not found")
        raise KVStoreError(f"DynamoDB error: {e}") from e


def check_table_exists(
    table_name: str,
    region: str | None = None,
    profile: str | None = None,
    endpoint_url: str | None = None,
) -> bool:
    """
    Check if table exists.

    Args:
        table_name: Table name
        region: AWS region (optional)
        profile: AWS profile (optional)
        endpoint_url: Endpoint override (optional)

    Returns:
        True if table exists, False otherwise
    """
    dynamodb = _dynamodb(region, profile, endpoint_url)

    try:
        dynamodb.describe_table(TableName=table_name)
        return True
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceNotFoundException":
            return False
        raise KVStoreError(f"DynamoDB error: {e}") from e
