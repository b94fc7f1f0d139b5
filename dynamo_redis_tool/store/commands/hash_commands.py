"""
Hash commands: hset, hget, hgetall, hdel.
"""

import click

from ..core.hash_operations import hdel, hget, hgetall, hset
from ..exceptions import KVStoreError
from ..logging_config import get_logger, setup_logging
from ..utils import output_json, output_text, value_to_json
from .options import BACKEND_SOLUTION, fail, open_client, pairs, store_options

logger = get_logger(__name__)


@click.command("hset")
@click.argument("key")
@click.argument("field_values", nargs=-1)
@store_options
@click.pass_context
def hset_command(
    ctx: click.Context,
    key: str,
    field_values: tuple[str, ...],
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Set one or more hash fields.

    Examples:

    \b
        # Set two fields of a hash
        dynamo-redis-tool store hset user:1 name alice email alice@example.com

    \b
    Output Format:
        Returns JSON:
        {"key": "user:1", "written": 2}
    """
    setup_logging(verbose)
    fields = dict(pairs(ctx, text, field_values, "FIELD VALUE"))

    try:
        logger.info(f"Setting {len(fields)} fields of hash '{key}'")
        client = open_client(table, region, profile, endpoint_url)
        written = hset(client, key, fields)

        if text:
            output_text(f"Wrote {written} fields to {key}")
        else:
            output_json({"key": key, "written": written})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key and field names", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)


@click.command("hget")
@click.argument("key")
@click.argument("field")
@store_options
@click.pass_context
def hget_command(
    ctx: click.Context,
    key: str,
    field: str,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Get the value of a hash field. Exits with code 1 if it does not exist."""
    setup_logging(verbose)

    try:
        client = open_client(table, region, profile, endpoint_url)
        value = hget(client, key, field)
    except ValueError as e:
        fail(ctx, text, str(e), "Check the key and field name", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)

    if not value.present:
        fail(ctx, text, f"Field '{field}' not found in '{key}'", "Set it with hset", 1)

    if text:
        output_text(f"{field} = {value_to_json(value)}")
    else:
        output_json({"key": key, "field": field, "value": value_to_json(value)})


@click.command("hgetall")
@click.argument("key")
@store_options
@click.pass_context
def hgetall_command(
    ctx: click.Context,
    key: str,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Get every field and value of a hash.

    \b
    Output Format:
        Returns JSON:
        {"key": "user:1", "fields": {"name": "alice"}}
    """
    setup_logging(verbose)

    try:
        client = open_client(table, region, profile, endpoint_url)
        fields = {name: value_to_json(value) for name, value in hgetall(client, key).items()}

        if text:
            for name, value in fields.items():
                output_text(f"{name} = {value}")
        else:
            output_json({"key": key, "fields": fields})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)


@click.command("hdel")
@click.argument("key")
@click.argument("fields", nargs=-1, required=True)
@store_options
@click.pass_context
def hdel_command(
    ctx: click.Context,
    key: str,
    fields: tuple[str, ...],
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Delete hash fields. Missing fields are not an error."""
    setup_logging(verbose)

    try:
        client = open_client(table, region, profile, endpoint_url)
        deleted = hdel(client, key, *fields)

        if text:
            output_text(f"Processed {deleted} deletions in {key}")
        else:
            output_json({"key": key, "deleted": deleted})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key and field names", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)
