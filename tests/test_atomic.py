"""Tests for single-item conditional writes."""

from dynamo_redis_tool.store.core.atomic import (
    conditional_delete,
    conditional_put,
    conditional_update,
)
from dynamo_redis_tool.store.core.expressions import ExpressionBuilder
from dynamo_redis_tool.store.core.keys import ItemKey
from dynamo_redis_tool.store.models import Flag

KEY = ItemKey("atomic", "item")


def set_value(text: str) -> ExpressionBuilder:
    return ExpressionBuilder().update_set("value", {"S": text})


class TestConditionalPut:
    def test_if_not_exists(self, client):
        assert conditional_put(client, KEY, {"value": {"S": "a"}}, [Flag.IF_NOT_EXISTS]).applied
        outcome = conditional_put(client, KEY, {"value": {"S": "b"}}, [Flag.IF_NOT_EXISTS])
        assert not outcome.applied
        assert client.get_item(KEY.to_attributes())["value"] == {"S": "a"}

    def test_if_exists_on_missing_item(self, client):
        assert not conditional_put(client, KEY, {"value": {"S": "a"}}, [Flag.IF_EXISTS]).applied
        assert client.get_item(KEY.to_attributes()) is None


class TestConditionalUpdate:
    def test_unconditional_update_creates_item(self, client):
        outcome = conditional_update(client, KEY, set_value("a"), return_values="ALL_OLD")
        assert outcome.applied
        assert outcome.attributes == {}

    def test_returns_old_attributes(self, client):
        conditional_update(client, KEY, set_value("a"))
        outcome = conditional_update(client, KEY, set_value("b"), return_values="ALL_OLD")
        assert outcome.attributes["value"] == {"S": "a"}

    def test_if_exists(self, client):
        assert not conditional_update(client, KEY, set_value("a"), [Flag.IF_EXISTS]).applied
        conditional_update(client, KEY, set_value("a"))
        assert conditional_update(client, KEY, set_value("b"), [Flag.IF_EXISTS]).applied

    def test_compare_condition(self, client):
        conditional_update(client, KEY, set_value("b"))
        builder = set_value("c").condition_compare("value", "<", {"S": "a"}, label="bound")
        assert not conditional_update(client, KEY, builder).applied
        builder = set_value("c").condition_compare("value", "<", {"S": "z"}, label="bound")
        assert conditional_update(client, KEY, builder).applied


class TestConditionalDelete:
    def test_delete_returns_old_item(self, client):
        conditional_update(client, KEY, set_value("a"))
        outcome = conditional_delete(client, KEY, return_values="ALL_OLD")
        assert outcome.applied
        assert outcome.attributes["value"] == {"S": "a"}

    def test_delete_missing_is_not_an_error(self, client):
        outcome = conditional_delete(client, KEY, return_values="ALL_OLD")
        assert outcome.applied
        assert outcome.attributes == {}

    def test_if_exists_on_missing_item(self, client):
        assert not conditional_delete(client, KEY, flags=[Flag.IF_EXISTS]).applied
