"""
Set operations for the datastore.

Each member is its own item: PK is the set key, SK is the member. The item
carries no value, so membership checks and scans are cheap.
"""

from ..constants import ATTR_PK, ATTR_SK, ATTR_TYPE
from ..models import ItemType
from .batch import BatchWriter, delete_request, put_request
from .client import DynamoDBClient
from .expressions import ExpressionBuilder
from .keys import member_key
from .pagination import PaginatedScan
from .values import string_attribute

_SET_TYPE = string_attribute(ItemType.SET.value)


def _members_query(key: str) -> ExpressionBuilder:
    builder = ExpressionBuilder()
    builder.condition_equals(ATTR_PK, string_attribute(key))
    builder.filter_equals(ATTR_TYPE, _SET_TYPE)
    return builder


def sadd(client: DynamoDBClient, key: str, *members: str) -> int:
    """
    Add members to a set.

    This operation is idempotent: adding an existing member has no effect.
    Members are written with BatchWriteItem, so there is no atomicity
    across members.

    Args:
        client: DynamoDB client
        key: Set key
        *members: Members to add

    Returns:
        Number of distinct members written
    """
    requests = [
        put_request(member_key(key, member), {ATTR_TYPE: _SET_TYPE})
        for member in dict.fromkeys(members)
    ]
    return BatchWriter(client).write(requests)


def srem(client: DynamoDBClient, key: str, *members: str) -> int:
    """
    Remove members from a set.

    Operation is idempotent - no error if a member doesn't exist.

    Returns:
        Number of deletions processed
    """
    requests = [delete_request(member_key(key, member)) for member in dict.fromkeys(members)]
    return BatchWriter(client).write(requests)


def sismember(client: DynamoDBClient, key: str, member: str) -> bool:
    """
    Check if member exists in set.

    Returns:
        True if member exists in set, False otherwise
    """
    builder = ExpressionBuilder().project(ATTR_PK)
    item = client.get_item(member_key(key, member).to_attributes(), **builder.projection_kwargs())
    return item is not None


def smembers(client: DynamoDBClient, key: str) -> set[str]:
    """
    Get all members of a set.

    Returns:
        Members, empty if the set does not exist
    """
    builder = _members_query(key).project(ATTR_SK)
    return {item[ATTR_SK]["S"] for item in PaginatedScan(client, builder).items()}


def scard(client: DynamoDBClient, key: str) -> int:
    """Get the number of members of a set."""
    return PaginatedScan(client, _members_query(key)).count()
