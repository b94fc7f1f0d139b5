"""
Constants for datastore operations.
"""

# Default table name
DEFAULT_TABLE_NAME = "dynamo-redis-tool"

# DynamoDB attribute names
ATTR_PK = "PK"
ATTR_SK = "SK"
ATTR_VALUE = "value"
ATTR_TYPE = "type"
ATTR_TTL = "ttl"
ATTR_SCORE_KEY = "score_key"
ATTR_FIELDS = "fields"

# Local secondary index ordering sorted-set members by score
INDEX_SCORE = "LSI-score"

# Reserved sort keys. User supplied fields and members may not use the prefix.
RESERVED_PREFIX = "_sys/"
SCALAR_SORT_KEY = RESERVED_PREFIX + "value"
STREAM_LAST_ID_SORT_KEY = RESERVED_PREFIX + "stream/last"
STREAM_SEQUENCE_PREFIX = RESERVED_PREFIX + "stream/seq/"

# Key limits
MAX_KEY_LENGTH = 1024

# DynamoDB request limits
TRANSACTION_MAX_ACTIONS = 100
TRANSACT_GET_MAX_KEYS = 100
BATCH_WRITE_MAX_ITEMS = 25

# Batch write behavior
BATCH_MAX_STALLED_ROUNDS = 5
BATCH_BACKOFF_BASE = 0.05  # seconds
BATCH_BACKOFF_MAX = 2.0
BATCH_BACKOFF_FACTOR = 2.0

# Streams
STREAM_APPEND_MAX_ATTEMPTS = 3
STREAM_SEQUENCE_TTL = 86400  # 1 day, sequence counters are only hot for one second

# Lists
LIST_OFFSET = 2**62
LIST_SORT_KEY_WIDTH = 20
LIST_WRITE_MAX_ATTEMPTS = 5

# Sorted sets
ZSET_SCORE_SEPARATOR = "/"
ZSET_RANGE_END = "~"
ZSET_INCR_MAX_ATTEMPTS = 5
