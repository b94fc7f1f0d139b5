"""
String commands: set, get, del, incr, mset.
"""

import click

from ..core.string_operations import delete_value, get_value, incr_by, mset, msetnx, set_value
from ..exceptions import KVStoreError
from ..logging_config import get_logger, setup_logging
from ..models import Flag, Value
from ..utils import output_json, output_text, value_to_json
from .options import BACKEND_SOLUTION, fail, open_client, pairs, store_options

logger = get_logger(__name__)


@click.command("set")
@click.argument("key")
@click.argument("value")
@click.option("--ttl", type=int, help="TTL in seconds")
@click.option("--nx", is_flag=True, help="Only set if key doesn't exist")
@click.option("--xx", is_flag=True, help="Only set if key already exists")
@click.option("--keep-ttl", is_flag=True, help="Keep the existing TTL of the key")
@click.option("--number", is_flag=True, help="Store the value as a number")
@store_options
@click.pass_context
def set_command(
    ctx: click.Context,
    key: str,
    value: str,
    ttl: int | None,
    nx: bool,
    xx: bool,
    keep_ttl: bool,
    number: bool,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Store a value under a key.

    Use --ttl to auto-expire keys, --nx to prevent overwriting and --xx to
    only overwrite. Use --number so that incr works on the stored value.

    Examples:

    \b
        # Set a simple key-value
        dynamo-redis-tool store set mykey "hello world"

    \b
        # Set with TTL (auto-expire in 1 hour)
        dynamo-redis-tool store set session-token "abc123" --ttl 3600

    \b
        # Set a counter that incr can work on
        dynamo-redis-tool store set visits 10 --number

    \b
    Output Format:
        Returns JSON:
        {"key": "mykey", "value": "hello world", "applied": true}
    """
    setup_logging(verbose)

    if nx and xx:
        fail(ctx, text, "--nx and --xx are mutually exclusive", "Use only one of them", 2)

    flags = []
    if nx:
        flags.append(Flag.IF_NOT_EXISTS)
    if xx:
        flags.append(Flag.IF_EXISTS)
    if keep_ttl:
        flags.append(Flag.KEEP_TTL)

    try:
        stored = Value.of_number(value) if number else Value.of_text(value)
        logger.info(f"Setting key '{key}'")
        logger.debug(f"Table: {table}, TTL: {ttl}, Flags: {flags}")

        client = open_client(table, region, profile, endpoint_url)
        applied = set_value(client, key, stored, ttl, flags)

        if text:
            output_text(f"Set {key} = {value}" if applied else f"Not set: {key} (condition failed)")
        else:
            output_json({"key": key, "value": value_to_json(stored), "applied": applied})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key and value", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)


@click.command("get")
@click.argument("key")
@store_options
@click.pass_context
def get_command(
    ctx: click.Context,
    key: str,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Retrieve the value of a key.

    Exits with code 1 if the key does not exist.

    Examples:

    \b
        # Get and extract value with jq
        dynamo-redis-tool store get mykey | jq -r '.value'

    \b
    Output Format:
        Returns JSON:
        {"key": "mykey", "value": "hello world"}
    """
    setup_logging(verbose)

    try:
        logger.info(f"Getting key '{key}'")
        client = open_client(table, region, profile, endpoint_url)
        value = get_value(client, key)
    except ValueError as e:
        fail(ctx, text, str(e), "Check the key", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)

    if not value.present:
        fail(ctx, text, f"Key '{key}' not found", f"Use 'dynamo-redis-tool store set {key}'", 1)

    if text:
        output_text(f"{key} = {value_to_json(value)}")
    else:
        output_json({"key": key, "value": value_to_json(value)})


@click.command("del")
@click.argument("key")
@store_options
@click.pass_context
def del_command(
    ctx: click.Context,
    key: str,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Delete a key.

    Deleting a missing key is not an error.

    \b
    Output Format:
        Returns JSON:
        {"key": "mykey", "deleted": true}
    """
    setup_logging(verbose)

    try:
        logger.info(f"Deleting key '{key}'")
        client = open_client(table, region, profile, endpoint_url)
        deleted = delete_value(client, key)

        if text:
            output_text(f"Deleted {key}" if deleted else f"{key} did not exist")
        else:
            output_json({"key": key, "deleted": deleted})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)


@click.command("incr")
@click.argument("key")
@click.option("--by", "delta", type=int, default=1, help="Amount to add (default: 1)")
@store_options
@click.pass_context
def incr_command(
    ctx: click.Context,
    key: str,
    delta: int,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Atomically increment a numeric key.

    A missing key starts at 0. Concurrent increments never lose updates.

    Examples:

    \b
        # Increment by one
        dynamo-redis-tool store incr page-views

    \b
        # Decrement by five
        dynamo-redis-tool store incr stock --by -5

    \b
    Output Format:
        Returns JSON:
        {"key": "page-views", "value": 42}
    """
    setup_logging(verbose)

    try:
        logger.info(f"Incrementing key '{key}' by {delta}")
        client = open_client(table, region, profile, endpoint_url)
        value = incr_by(client, key, delta)

        if text:
            output_text(f"{key} = {value}")
        else:
            output_json({"key": key, "value": value})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), "Make sure the key holds a number (set it with --number)", 3)


@click.command("mset")
@click.argument("key_values", nargs=-1)
@click.option("--nx", is_flag=True, help="Only set if none of the keys exist")
@store_options
@click.pass_context
def mset_command(
    ctx: click.Context,
    key_values: tuple[str, ...],
    nx: bool,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Set several keys in one all-or-nothing transaction.

    Examples:

    \b
        # Set two keys atomically
        dynamo-redis-tool store mset user:1 alice user:2 bob

    \b
    Output Format:
        Returns JSON:
        {"keys": ["user:1", "user:2"], "applied": true}
    """
    setup_logging(verbose)
    data = dict(pairs(ctx, text, key_values, "KEY VALUE"))

    try:
        logger.info(f"Setting {len(data)} keys")
        client = open_client(table, region, profile, endpoint_url)
        applied = msetnx(client, data) if nx else mset(client, data)

        if text:
            output_text(f"Set {len(data)} keys" if applied else "Not set (condition failed)")
        else:
            output_json({"keys": list(data), "applied": applied})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the keys", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)
