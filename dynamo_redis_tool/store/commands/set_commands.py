"""
Set commands: sadd, srem, smembers, scard.
"""

import click

from ..core.set_operations import sadd, scard, smembers, srem
from ..exceptions import KVStoreError
from ..logging_config import get_logger, setup_logging
from ..utils import output_json, output_text
from .options import BACKEND_SOLUTION, fail, open_client, store_options

logger = get_logger(__name__)


@click.command("sadd")
@click.argument("key")
@click.argument("members", nargs=-1, required=True)
@store_options
@click.pass_context
def sadd_command(
    ctx: click.Context,
    key: str,
    members: tuple[str, ...],
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Add members to a set.

    This operation is idempotent: adding an existing member has no effect.

    Examples:

    \b
        # Add members to a set
        dynamo-redis-tool store sadd active-agents agent-001 agent-002

    \b
        # Use in registration script
        AGENT_ID="agent-$(uuidgen)"
        dynamo-redis-tool store sadd active-agents "$AGENT_ID"

    \b
    Output Format:
        Returns JSON:
        {"key": "active-agents", "added": 2}
    """
    setup_logging(verbose)

    try:
        logger.info(f"Adding {len(members)} members to set '{key}'")
        client = open_client(table, region, profile, endpoint_url)
        added = sadd(client, key, *members)

        if text:
            output_text(f"Added {added} members to set '{key}'")
        else:
            output_json({"key": key, "added": added})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key and member names", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)


@click.command("srem")
@click.argument("key")
@click.argument("members", nargs=-1, required=True)
@store_options
@click.pass_context
def srem_command(
    ctx: click.Context,
    key: str,
    members: tuple[str, ...],
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Remove members from a set.

    Operation is idempotent - no error if a member doesn't exist.

    \b
    Output Format:
        Returns JSON:
        {"key": "active-agents", "removed": 1}
    """
    setup_logging(verbose)

    try:
        logger.info(f"Removing {len(members)} members from set '{key}'")
        client = open_client(table, region, profile, endpoint_url)
        removed = srem(client, key, *members)

        if text:
            output_text(f"Removed {removed} members from set '{key}'")
        else:
            output_json({"key": key, "removed": removed})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key and member names", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)


@click.command("smembers")
@click.argument("key")
@store_options
@click.pass_context
def smembers_command(
    ctx: click.Context,
    key: str,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """List all members of a set.

    Examples:

    \b
        # Iterate over members
        dynamo-redis-tool store smembers active-agents | jq -r '.members[]'

    \b
    Output Format:
        Returns JSON (members sorted):
        {"key": "active-agents", "members": ["agent-001", "agent-002"], "count": 2}
    """
    setup_logging(verbose)

    try:
        client = open_client(table, region, profile, endpoint_url)
        members = sorted(smembers(client, key))

        if text:
            for member in members:
                output_text(member)
        else:
            output_json({"key": key, "members": members, "count": len(members)})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)


@click.command("scard")
@click.argument("key")
@store_options
@click.pass_context
def scard_command(
    ctx: click.Context,
    key: str,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Count the members of a set."""
    setup_logging(verbose)

    try:
        client = open_client(table, region, profile, endpoint_url)
        count = scard(client, key)

        if text:
            output_text(str(count))
        else:
            output_json({"key": key, "count": count})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)
