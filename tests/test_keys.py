"""Tests for composite key construction."""

import pytest

from dynamo_redis_tool.store.constants import RESERVED_PREFIX, SCALAR_SORT_KEY
from dynamo_redis_tool.store.core.keys import (
    ItemKey,
    is_reserved,
    member_key,
    scalar_key,
    stream_last_id_key,
    stream_sequence_key,
)


class TestKeys:
    def test_scalar_key(self):
        assert scalar_key("greeting") == ItemKey("greeting", SCALAR_SORT_KEY)

    def test_member_key(self):
        assert member_key("user:1", "name") == ItemKey("user:1", "name")

    def test_attributes_round_trip(self):
        key = ItemKey("k", "m")
        assert key.to_attributes() == {"PK": {"S": "k"}, "SK": {"S": "m"}}
        assert ItemKey.from_attributes(key.to_attributes()) == key

    def test_reserved_prefix_rejected_for_members(self):
        with pytest.raises(ValueError):
            member_key("k", RESERVED_PREFIX + "value")

    @pytest.mark.parametrize("key", ["", "x" * 1025])
    def test_invalid_keys(self, key):
        with pytest.raises(ValueError):
            scalar_key(key)

    def test_empty_member_rejected(self):
        with pytest.raises(ValueError):
            member_key("k", "")

    def test_sentinels_are_reserved(self):
        assert is_reserved(scalar_key("k").sort)
        assert is_reserved(stream_last_id_key("k").sort)
        assert is_reserved(stream_sequence_key("k", 1760000000).sort)
        assert not is_reserved(member_key("k", "m").sort)

    def test_sequence_key_is_fixed_width(self):
        assert stream_sequence_key("k", 5).sort.endswith("0" * 19 + "5")
