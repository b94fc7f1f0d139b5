"""Pytest configuration: a mocked DynamoDB table per test."""

import pytest
from moto import mock_aws

from dynamo_redis_tool.store.core.client import DynamoDBClient
from dynamo_redis_tool.store.core.table_operations import create_table

TABLE_NAME = "dynamo-redis-tool-test"
REGION = "us-east-1"


@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so nothing can reach a real AWS account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    monkeypatch.setenv("AWS_REGION", REGION)
    for name in ("AWS_PROFILE", "REDIS_TABLE", "DYNAMODB_ENDPOINT_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mocked_aws(aws_credentials):
    with mock_aws():
        yield


@pytest.fixture
def table(mocked_aws):
    create_table(TABLE_NAME, region=REGION)
    return TABLE_NAME


@pytest.fixture
def client(table) -> DynamoDBClient:
    return DynamoDBClient(table, REGION, consistent_reads=True)
