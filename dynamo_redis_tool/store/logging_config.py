"""
Logging configuration for datastore commands.

Verbosity follows the ``-v`` count given on the command line:

    0  WARNING
    1  INFO
    2  DEBUG
    3  DEBUG, including boto3/botocore request logging
"""

import logging
import sys

TRACE_LOGGERS = ("boto3", "botocore", "urllib3")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(verbosity: int = 0) -> None:
    """
    Configure the root logger for the requested verbosity.

    Args:
        verbosity: Number of -v flags given (0-3)
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)

    # AWS SDK logging is very chatty, only show it at trace level
    trace_level = logging.DEBUG if verbosity >= 3 else logging.WARNING
    for name in TRACE_LOGGERS:
        logging.getLogger(name).setLevel(trace_level)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)
