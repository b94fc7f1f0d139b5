"""CLI entry point for dynamo-redis-tool."""

import click

from dynamo_redis_tool.store.commands.hash_commands import (
    hdel_command,
    hget_command,
    hgetall_command,
    hset_command,
)
from dynamo_redis_tool.store.commands.list_commands import (
    lpop_command,
    lpush_command,
    lrange_command,
    rpop_command,
    rpush_command,
)
from dynamo_redis_tool.store.commands.set_commands import (
    sadd_command,
    scard_command,
    smembers_command,
    srem_command,
)
from dynamo_redis_tool.store.commands.sorted_set_commands import (
    zadd_command,
    zrangebyscore_command,
    zscore_command,
)
from dynamo_redis_tool.store.commands.stream_commands import (
    xadd_command,
    xlen_command,
    xrange_command,
)
from dynamo_redis_tool.store.commands.string_commands import (
    del_command,
    get_command,
    incr_command,
    mset_command,
    set_command,
)
from dynamo_redis_tool.store.commands.table_commands import (
    create_table_command,
    drop_table_command,
)


@click.group()
@click.version_option(version="0.1.0")
def main() -> None:
    """A CLI that exposes Redis-style data structures on a DynamoDB table"""
    pass


@main.group("store")
def store() -> None:
    """Redis-style strings, hashes, sets, sorted sets, lists and streams"""
    pass


# Register table commands
store.add_command(create_table_command)
store.add_command(drop_table_command)

# Register string commands
store.add_command(set_command)
store.add_command(get_command)
store.add_command(del_command)
store.add_command(incr_command)
store.add_command(mset_command)

# Register hash commands
store.add_command(hset_command)
store.add_command(hget_command)
store.add_command(hgetall_command)
store.add_command(hdel_command)

# Register set commands
store.add_command(sadd_command)
store.add_command(srem_command)
store.add_command(smembers_command)
store.add_command(scard_command)

# Register sorted set commands
store.add_command(zadd_command)
store.add_command(zscore_command)
store.add_command(zrangebyscore_command)

# Register list commands
store.add_command(lpush_command)
store.add_command(rpush_command)
store.add_command(lrange_command)
store.add_command(lpop_command)
store.add_command(rpop_command)

# Register stream commands
store.add_command(xadd_command)
store.add_command(xrange_command)
store.add_command(xlen_command)

if __name__ == "__main__":
    main()
