"""
List commands: lpush, rpush, lrange, lpop, rpop.
"""

import click

from ..core.list_operations import lpop, lpush, lrange, rpop, rpush
from ..exceptions import KVStoreError
from ..logging_config import get_logger, setup_logging
from ..utils import output_json, output_text, value_to_json
from .options import BACKEND_SOLUTION, fail, open_client, store_options

logger = get_logger(__name__)


@click.command("lpush")
@click.argument("key")
@click.argument("values", nargs=-1, required=True)
@store_options
@click.pass_context
def lpush_command(
    ctx: click.Context,
    key: str,
    values: tuple[str, ...],
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Insert values at the head of a list.

    Values are inserted one after the other, so the last one ends up first.

    Examples:

    \b
        # Build a stack
        dynamo-redis-tool store lpush tasks task3 task2 task1

    \b
        # Push JSON data
        dynamo-redis-tool store lpush events '{"type":"login","user":"alice"}'

    \b
    Output Format:
        Returns JSON:
        {"key": "tasks", "length": 3}
    """
    setup_logging(verbose)

    try:
        logger.info(f"Pushing {len(values)} values to head of list '{key}'")
        client = open_client(table, region, profile, endpoint_url)
        length = lpush(client, key, *values)

        if text:
            output_text(f"Pushed to {key}, length {length}")
        else:
            output_json({"key": key, "length": length})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)


@click.command("rpush")
@click.argument("key")
@click.argument("values", nargs=-1, required=True)
@store_options
@click.pass_context
def rpush_command(
    ctx: click.Context,
    key: str,
    values: tuple[str, ...],
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Append values at the tail of a list.

    Examples:

    \b
        # Build a FIFO queue
        dynamo-redis-tool store rpush queue first second third

    \b
    Output Format:
        Returns JSON:
        {"key": "queue", "length": 3}
    """
    setup_logging(verbose)

    try:
        logger.info(f"Pushing {len(values)} values to tail of list '{key}'")
        client = open_client(table, region, profile, endpoint_url)
        length = rpush(client, key, *values)

        if text:
            output_text(f"Pushed to {key}, length {length}")
        else:
            output_json({"key": key, "length": length})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)


@click.command("lrange")
@click.argument("key")
@click.option("--start", type=int, default=0, help="First index (default: 0)")
@click.option("--stop", type=int, default=-1, help="Last index, inclusive (default: -1)")
@store_options
@click.pass_context
def lrange_command(
    ctx: click.Context,
    key: str,
    start: int,
    stop: int,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Get a range of elements, head first.

    Indices are inclusive and may be negative (-1 is the last element).

    Examples:

    \b
        # Whole list
        dynamo-redis-tool store lrange tasks

    \b
        # Last three elements
        dynamo-redis-tool store lrange tasks --start -3 --stop -1

    \b
    Output Format:
        Returns JSON:
        {"key": "tasks", "items": ["task1", "task2"], "count": 2}
    """
    setup_logging(verbose)

    try:
        client = open_client(table, region, profile, endpoint_url)
        items = [value_to_json(value) for value in lrange(client, key, start, stop)]

        if text:
            for item in items:
                output_text(str(item))
        else:
            output_json({"key": key, "items": items, "count": len(items)})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)


def _pop_command(
    ctx: click.Context,
    key: str,
    head: bool,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    setup_logging(verbose)

    try:
        client = open_client(table, region, profile, endpoint_url)
        value = lpop(client, key) if head else rpop(client, key)
    except ValueError as e:
        fail(ctx, text, str(e), "Check the key", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)

    if not value.present:
        fail(ctx, text, f"List '{key}' is empty", "Push values with lpush or rpush", 1)

    if text:
        output_text(str(value_to_json(value)))
    else:
        output_json({"key": key, "value": value_to_json(value)})


@click.command("lpop")
@click.argument("key")
@store_options
@click.pass_context
def lpop_command(
    ctx: click.Context,
    key: str,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Remove and return the head element. Exits with code 1 if the list is empty.

    Examples:

    \b
        # Drain a queue
        while value=$(dynamo-redis-tool store lpop queue 2>/dev/null); do
            echo "$value" | jq -r '.value'
        done
    """
    _pop_command(ctx, key, True, table, region, profile, endpoint_url, text, verbose)


@click.command("rpop")
@click.argument("key")
@store_options
@click.pass_context
def rpop_command(
    ctx: click.Context,
    key: str,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Remove and return the tail element. Exits with code 1 if the list is empty."""
    _pop_command(ctx, key, False, table, region, profile, endpoint_url, text, verbose)
