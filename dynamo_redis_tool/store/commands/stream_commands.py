"""
Stream commands: xadd, xrange, xlen.
"""

import click

from ..core.ordering import AUTO_ID, STREAM_END, STREAM_START, StreamID
from ..core.stream_operations import xadd, xlen, xrange
from ..exceptions import KVStoreError
from ..logging_config import get_logger, setup_logging
from ..models import StreamItem
from ..utils import output_json, output_text
from .options import BACKEND_SOLUTION, fail, open_client, pairs, store_options

logger = get_logger(__name__)


def _parse_bound(bound: str, default: StreamID) -> StreamID:
    """'-' and '+' stand for the lowest and highest possible IDs."""
    if bound in ("-", "+"):
        return default
    return StreamID.parse(bound)


def _entry_json(item: StreamItem) -> dict[str, object]:
    return {"id": str(item.id), "fields": item.fields}


@click.command("xadd")
@click.argument("key")
@click.argument("field_values", nargs=-1)
@click.option("--id", "stream_id", default=AUTO_ID, help="Entry ID (default: * for auto)")
@store_options
@click.pass_context
def xadd_command(
    ctx: click.Context,
    key: str,
    field_values: tuple[str, ...],
    stream_id: str,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Append an entry to a stream.

    IDs are strictly increasing. Exits with code 1 if an explicit --id is not
    greater than the last entry ID.

    Examples:

    \b
        # Append with an auto ID
        dynamo-redis-tool store xadd events type login user alice

    \b
    Output Format:
        Returns JSON:
        {"key": "events", "id": "00000000001760000000-00000000000000000000", "appended": true}
    """
    setup_logging(verbose)
    fields = dict(pairs(ctx, text, field_values, "FIELD VALUE"))

    try:
        logger.info(f"Appending entry to stream '{key}'")
        client = open_client(table, region, profile, endpoint_url)
        entry_id, appended = xadd(client, key, fields, stream_id)
    except ValueError as e:
        fail(ctx, text, str(e), "Check the key and --id", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)

    if not appended:
        fail(
            ctx,
            text,
            f"ID {entry_id} is not greater than the last ID of '{key}'",
            "Use a greater --id or let the ID be generated with --id '*'",
            1,
        )

    if text:
        output_text(str(entry_id))
    else:
        output_json({"key": key, "id": str(entry_id), "appended": appended})


@click.command("xrange")
@click.argument("key")
@click.option("--start", default="-", help="Lowest ID, inclusive (default: - for the first)")
@click.option("--end", default="+", help="Highest ID, inclusive (default: + for the last)")
@click.option("--count", type=int, help="Maximum number of entries")
@store_options
@click.pass_context
def xrange_command(
    ctx: click.Context,
    key: str,
    start: str,
    end: str,
    count: int | None,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """List stream entries, oldest first.

    \b
    Output Format:
        Returns JSON:
        {"key": "events", "entries": [{"id": "...", "fields": {"type": "login"}}]}
    """
    setup_logging(verbose)

    try:
        low, high = _parse_bound(start, STREAM_START), _parse_bound(end, STREAM_END)
        client = open_client(table, region, profile, endpoint_url)
        entries = xrange(client, key, low, high, count)

        if text:
            for entry in entries:
                pairs_text = " ".join(f"{name}={value}" for name, value in entry.fields.items())
                output_text(f"{entry.id} {pairs_text}")
        else:
            output_json({"key": key, "entries": [_entry_json(entry) for entry in entries]})

    except ValueError as e:
        fail(ctx, text, str(e), "IDs look like 00000000001760000000-00000000000000000000", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)


@click.command("xlen")
@click.argument("key")
@store_options
@click.pass_context
def xlen_command(
    ctx: click.Context,
    key: str,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Count the entries of a stream."""
    setup_logging(verbose)

    try:
        client = open_client(table, region, profile, endpoint_url)
        length = xlen(client, key)

        if text:
            output_text(str(length))
        else:
            output_json({"key": key, "length": length})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)
