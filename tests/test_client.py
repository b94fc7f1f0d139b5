"""Tests for the mapping of DynamoDB errors onto datastore exceptions."""

import pytest
from botocore.exceptions import ClientError

from dynamo_redis_tool.store.constants import ATTR_VALUE
from dynamo_redis_tool.store.core import string_operations as strings
from dynamo_redis_tool.store.core.expressions import ExpressionBuilder
from dynamo_redis_tool.store.core.keys import scalar_key
from dynamo_redis_tool.store.core.transactions import TransactionalGroup
from dynamo_redis_tool.store.core.values import number_attribute
from dynamo_redis_tool.store.exceptions import (
    AWSPermissionError,
    AWSThrottlingError,
    ConditionFailedError,
    KVStoreError,
    TableNotFoundError,
    TransactionConflictError,
)


def client_error(code: str, reasons: list[str] | None = None) -> ClientError:
    response = {"Error": {"Code": code, "Message": code}}
    if reasons is not None:
        response["CancellationReasons"] = [{"Code": reason} for reason in reasons]
    return ClientError(response, "TransactWriteItems")


class TestHandleError:
    @pytest.mark.parametrize(
        "code, reasons, expected",
        [
            ("ConditionalCheckFailedException", None, ConditionFailedError),
            ("TransactionCanceledException", [], TransactionConflictError),
            (
                "TransactionCanceledException",
                ["None", "ConditionalCheckFailed"],
                TransactionConflictError,
            ),
            ("TransactionCanceledException", ["TransactionConflict"], TransactionConflictError),
            ("TransactionConflictException", None, TransactionConflictError),
            ("TransactionInProgressException", None, TransactionConflictError),
            ("TransactionCanceledException", ["None", "ValidationError"], KVStoreError),
            ("TransactionCanceledException", ["ThrottlingError"], KVStoreError),
            ("TransactionCanceledException", ["ItemCollectionSizeLimitExceeded"], KVStoreError),
            ("ResourceNotFoundException", None, TableNotFoundError),
            ("ProvisionedThroughputExceededException", None, AWSThrottlingError),
            ("ThrottlingException", None, AWSThrottlingError),
            ("RequestLimitExceeded", None, AWSThrottlingError),
            ("AccessDeniedException", None, AWSPermissionError),
            ("ValidationException", None, KVStoreError),
            ("InternalServerError", None, KVStoreError),
        ],
    )
    def test_error_codes(self, client, code, reasons, expected):
        with pytest.raises(KVStoreError) as excinfo:
            client._handle_error(client_error(code, reasons))
        assert type(excinfo.value) is expected


class TestTransactionFaults:
    def test_type_mismatch_is_raised_not_absorbed(self, client):
        strings.set_value(client, "greeting", "hello")

        builder = ExpressionBuilder().update_add(ATTR_VALUE, number_attribute(1))
        group = TransactionalGroup(client).update(scalar_key("greeting"), builder)

        with pytest.raises(KVStoreError) as excinfo:
            group.execute()
        assert not isinstance(excinfo.value, TransactionConflictError)
        assert strings.get_value(client, "greeting").as_text() == "hello"

    def test_condition_failure_is_absorbed(self, client):
        strings.set_value(client, "greeting", "hello")

        builder = ExpressionBuilder().update_add(ATTR_VALUE, number_attribute(1))
        builder.condition_not_exists()
        group = TransactionalGroup(client).update(scalar_key("greeting"), builder)

        assert group.execute() is False
