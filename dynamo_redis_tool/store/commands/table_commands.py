"""
Table management commands.
"""

from typing import Literal

import click

from ..core.table_operations import check_table_exists, create_table, drop_table
from ..exceptions import KVStoreError, TableAlreadyExistsError, TableNotFoundError
from ..logging_config import get_logger, setup_logging
from ..utils import output_json, output_text, validate_table_name
from .options import fail, store_options

logger = get_logger(__name__)


@click.command("create-table")
@click.option(
    "--billing",
    type=click.Choice(["on-demand", "provisioned"]),
    default="on-demand",
    help="Billing mode (default: on-demand)",
)
@store_options
@click.pass_context
def create_table_command(
    ctx: click.Context,
    billing: str,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Create the DynamoDB table.

    Creates a table with partition key (PK), sort key (SK), the LSI-score
    local secondary index used for sorted-set ranges, and TTL on "ttl".

    Examples:

    \b
        # Create table with default name
        dynamo-redis-tool store create-table

    \b
        # Create table against DynamoDB Local
        dynamo-redis-tool store create-table --endpoint-url http://localhost:8000

    \b
    Output Format:
        Returns JSON with table details:
        {"table": "...", "status": "ACTIVE", "arn": "..."}
    """
    setup_logging(verbose)

    try:
        validate_table_name(table)
        if check_table_exists(table, region, profile, endpoint_url):
            raise TableAlreadyExistsError(f"Table '{table}' already exists")

        logger.info(f"Creating table '{table}'")
        logger.debug(f"Region: {region}, Billing: {billing}, Endpoint: {endpoint_url}")

        billing_mode: Literal["PAY_PER_REQUEST", "PROVISIONED"] = (
            "PAY_PER_REQUEST" if billing == "on-demand" else "PROVISIONED"
        )
        table_desc = create_table(table, region, profile, endpoint_url, billing_mode)

        if text:
            output_text(f"Table '{table}' created")
            output_text(f"Status: {table_desc['TableStatus']}")
            output_text(f"ARN: {table_desc['TableArn']}")
        else:
            output_json(
                {
                    "table": table,
                    "status": table_desc["TableStatus"],
                    "arn": table_desc["TableArn"],
                }
            )

    except ValueError as e:
        fail(ctx, text, str(e), "Use 3-255 letters, digits, '-', '_' or '.'", 2)
    except TableAlreadyExistsError as e:
        fail(ctx, text, str(e), "Use a different table name or drop the existing table", 1)
    except KVStoreError as e:
        fail(ctx, text, str(e), "Check AWS credentials and permissions", 3)


@click.command("drop-table")
@click.option("--approve", is_flag=True, help="Required flag to confirm table deletion")
@store_options
@click.pass_context
def drop_table_command(
    ctx: click.Context,
    approve: bool,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Drop the DynamoDB table.

    WARNING: This permanently deletes the table and ALL data.

    Examples:

    \b
        # Drop with approval
        dynamo-redis-tool store drop-table --approve

    \b
    Output Format:
        Returns JSON with confirmation:
        {"table": "...", "status": "DELETING"}
    """
    setup_logging(verbose)

    if not approve:
        solution = (
            f"Add --approve flag to confirm: "
            f"dynamo-redis-tool store drop-table --table {table} --approve"
        )
        fail(ctx, text, "Table deletion requires approval", solution, 2)

    try:
        validate_table_name(table)
        logger.info(f"Dropping table '{table}'")
        table_desc = drop_table(table, region, profile, endpoint_url)

        if text:
            output_text(f"Table '{table}' deletion initiated")
            output_text(f"Status: {table_desc['TableStatus']}")
        else:
            output_json({"table": table, "status": table_desc["TableStatus"]})

    except ValueError as e:
        fail(ctx, text, str(e), "Use 3-255 letters, digits, '-', '_' or '.'", 2)
    except TableNotFoundError as e:
        fail(ctx, text, str(e), "Check the table name", 1)
    except KVStoreError as e:
        fail(ctx, text, str(e), "Check AWS credentials and permissions", 3)
