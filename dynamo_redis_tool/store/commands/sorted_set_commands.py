"""
Sorted set commands: zadd, zscore, zrangebyscore.
"""

import click

from ..core.sorted_set_operations import zadd, zrangebyscore, zscore
from ..exceptions import KVStoreError
from ..logging_config import get_logger, setup_logging
from ..models import Flag
from ..utils import output_json, output_text
from .options import BACKEND_SOLUTION, fail, open_client, pairs, store_options

logger = get_logger(__name__)


@click.command("zadd")
@click.argument("key")
@click.argument("score_members", nargs=-1)
@click.option("--nx", is_flag=True, help="Only add new members")
@click.option("--xx", is_flag=True, help="Only update existing members")
@store_options
@click.pass_context
def zadd_command(
    ctx: click.Context,
    key: str,
    score_members: tuple[str, ...],
    nx: bool,
    xx: bool,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Add members with scores to a sorted set.

    Arguments alternate SCORE MEMBER, as in Redis.

    Examples:

    \b
        # Add two players to a leaderboard
        dynamo-redis-tool store zadd leaderboard 100 alice 85.5 bob

    \b
        # Only update players that are already on the board
        dynamo-redis-tool store zadd leaderboard 120 alice --xx

    \b
    Output Format:
        Returns JSON:
        {"key": "leaderboard", "added": 2}
    """
    setup_logging(verbose)

    if nx and xx:
        fail(ctx, text, "--nx and --xx are mutually exclusive", "Use only one of them", 2)

    score_pairs = pairs(ctx, text, score_members, "SCORE MEMBER")
    try:
        scored = {member: float(score) for score, member in score_pairs}
    except ValueError as e:
        fail(ctx, text, str(e), "Scores must be numbers", 2)

    flags = [Flag.IF_NOT_EXISTS] if nx else [Flag.IF_EXISTS] if xx else []

    try:
        logger.info(f"Adding {len(scored)} members to sorted set '{key}'")
        client = open_client(table, region, profile, endpoint_url)
        added = zadd(client, key, scored, flags)

        if text:
            output_text(f"Added {added} new members to {key}")
        else:
            output_json({"key": key, "added": added})

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key, member names and scores", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)


@click.command("zscore")
@click.argument("key")
@click.argument("member")
@store_options
@click.pass_context
def zscore_command(
    ctx: click.Context,
    key: str,
    member: str,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """Get the score of a member. Exits with code 1 if it does not exist."""
    setup_logging(verbose)

    try:
        client = open_client(table, region, profile, endpoint_url)
        score = zscore(client, key, member)
    except ValueError as e:
        fail(ctx, text, str(e), "Check the key and member name", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)

    if score is None:
        fail(ctx, text, f"Member '{member}' not found in '{key}'", "Add it with zadd", 1)

    if text:
        output_text(f"{member} = {score}")
    else:
        output_json({"key": key, "member": member, "score": score})


@click.command("zrangebyscore")
@click.argument("key")
@click.argument("min_score", type=float)
@click.argument("max_score", type=float)
@click.option("--offset", type=int, default=0, help="Number of matching members to skip")
@click.option("--count", type=int, help="Maximum number of members to return")
@store_options
@click.pass_context
def zrangebyscore_command(
    ctx: click.Context,
    key: str,
    min_score: float,
    max_score: float,
    offset: int,
    count: int | None,
    table: str,
    region: str | None,
    profile: str | None,
    endpoint_url: str | None,
    text: bool,
    verbose: int,
) -> None:
    """List members with MIN <= score <= MAX, lowest score first.

    Bounds accept "inf" and "+inf"; pass "--" before a negative bound.

    Examples:

    \b
        # Top of the range
        dynamo-redis-tool store zrangebyscore leaderboard 90 inf

    \b
        # Negative lower bound
        dynamo-redis-tool store zrangebyscore temperatures -- -10 10

    \b
    Output Format:
        Returns JSON:
        {"key": "leaderboard", "members": [{"member": "alice", "score": 100.0}]}
    """
    setup_logging(verbose)

    try:
        client = open_client(table, region, profile, endpoint_url)
        members = zrangebyscore(client, key, min_score, max_score, offset, count)

        if text:
            for member, score in members:
                output_text(f"{member} {score}")
        else:
            output_json(
                {
                    "key": key,
                    "members": [{"member": member, "score": score} for member, score in members],
                }
            )

    except ValueError as e:
        fail(ctx, text, str(e), "Check the key and bounds", 2)
    except KVStoreError as e:
        fail(ctx, text, str(e), BACKEND_SOLUTION, 3)
