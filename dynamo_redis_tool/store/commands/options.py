"""
Options and error reporting shared by every store command.
"""

import json
from collections.abc import Callable
from typing import Any, NoReturn

import click

from ..constants import DEFAULT_TABLE_NAME
from ..core.client import DynamoDBClient
from ..utils import error_json, error_text, validate_table_name

BACKEND_SOLUTION = (
    "Check the table exists ('dynamo-redis-tool store create-table') and AWS credentials"
)


def store_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the table, connection, output and verbosity options."""
    options = [
        click.option(
            "--table",
            envvar="REDIS_TABLE",
            default=DEFAULT_TABLE_NAME,
            help="DynamoDB table name",
        ),
        click.option("--region", envvar="AWS_REGION", help="AWS region"),
        click.option("--profile", envvar="AWS_PROFILE", help="AWS profile"),
        click.option(
            "--endpoint-url",
            envvar="DYNAMODB_ENDPOINT_URL",
            help="DynamoDB endpoint URL (e.g. DynamoDB Local)",
        ),
        click.option("--text", is_flag=True, help="Output as human-readable text"),
        click.option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v INFO, -vv DEBUG, -vvv TRACE)",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def open_client(
    table: str, region: str | None, profile: str | None, endpoint_url: str | None
) -> DynamoDBClient:
    validate_table_name(table)
    return DynamoDBClient(table, region, profile, endpoint_url)


def fail(ctx: click.Context, text: bool, error: str, solution: str, exit_code: int) -> NoReturn:
    """
    Report an error on stderr and exit.

    Args:
        ctx: Click context
        text: Human-readable output instead of JSON
        error: Error message
        solution: Solution suggestion
        exit_code: 1 (not found), 2 (usage) or 3 (backend)
    """
    if text:
        click.echo(error_text(error, solution), err=True)
    else:
        click.echo(json.dumps(error_json(error, solution, exit_code)), err=True)
    ctx.exit(exit_code)


def pairs(
    ctx: click.Context, text: bool, values: tuple[str, ...], usage: str
) -> list[tuple[str, str]]:
    """Split alternating arguments into pairs, failing with exit code 2 on an odd count."""
    if not values or len(values) % 2:
        fail(ctx, text, f"Expected {usage} pairs", f"Pass arguments as {usage} [{usage} ...]", 2)
    return list(zip(values[::2], values[1::2]))
