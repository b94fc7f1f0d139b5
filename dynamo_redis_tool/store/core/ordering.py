"""
Order-preserving string encodings for sort keys.

DynamoDB compares string sort keys byte by byte. Sorted-set scores and
stream IDs are encoded so that this comparison agrees with numeric and
chronological order.
"""

import math
import string
import struct
from dataclasses import dataclass

SCORE_KEY_WIDTH = 16
_SIGN_BIT = 1 << 63
_ALL_BITS = (1 << 64) - 1
_HEX_DIGITS = frozenset(string.hexdigits.lower())


def encode_score(score: float) -> str:
    """
    Encode a float as a fixed-width string that sorts like the number.

    The IEEE-754 bits are taken big-endian. Non-negative values get their
    sign bit set, negative values get every bit flipped, so all negatives sort
    before zero and larger magnitudes of a negative sort first.

    Args:
        score: Any finite or infinite float

    Returns:
        16 lowercase hex digits

    Raises:
        ValueError: If score is NaN
    """
    score = float(score)
    if math.isnan(score):
        raise ValueError("NaN is not a valid score")
    if score == 0:
        score = 0.0  # -0.0 and 0.0 share one key

    (bits,) = struct.unpack(">Q", struct.pack(">d", score))
    if bits & _SIGN_BIT:
        bits ^= _ALL_BITS
    else:
        bits |= _SIGN_BIT
    return f"{bits:016x}"


def decode_score(encoded: str) -> float:
    """
    Decode a string produced by encode_score().

    Raises:
        ValueError: If the input is not 16 lowercase hex digits
    """
    if len(encoded) != SCORE_KEY_WIDTH or not set(encoded) <= _HEX_DIGITS:
        raise ValueError(f"Malformed score key: {encoded!r}")

    bits = int(encoded, 16)
    if bits & _SIGN_BIT:
        bits &= ~_SIGN_BIT
    else:
        bits ^= _ALL_BITS
    (score,) = struct.unpack(">d", struct.pack(">Q", bits))
    return float(score)


STREAM_ID_PART_WIDTH = 20
STREAM_ID_SEPARATOR = "-"
_STREAM_ID_PART_MAX = 10**STREAM_ID_PART_WIDTH - 1

AUTO_ID = "*"


@dataclass(frozen=True, order=True)
class StreamID:
    """Stream entry identifier: unix timestamp in seconds plus a sequence number."""

    timestamp: int
    sequence: int = 0

    def __post_init__(self) -> None:
        for part in (self.timestamp, self.sequence):
            if not 0 <= part <= _STREAM_ID_PART_MAX:
                raise ValueError(f"Stream ID part out of range: {part}")

    def __str__(self) -> str:
        return (
            f"{self.timestamp:0{STREAM_ID_PART_WIDTH}d}"
            f"{STREAM_ID_SEPARATOR}"
            f"{self.sequence:0{STREAM_ID_PART_WIDTH}d}"
        )

    @classmethod
    def parse(cls, encoded: str) -> "StreamID":
        """
        Parse the fixed-width form produced by str().

        Raises:
            ValueError: If the string is not two 20-digit parts joined by '-'
        """
        parts = encoded.split(STREAM_ID_SEPARATOR)
        if len(parts) != 2 or not all(
            len(part) == STREAM_ID_PART_WIDTH and part.isdigit() and part.isascii()
            for part in parts
        ):
            raise ValueError(f"Malformed stream ID: {encoded!r}")
        return cls(int(parts[0]), int(parts[1]))

    def next(self) -> "StreamID":
        """Smallest ID strictly greater than this one."""
        if self.sequence == _STREAM_ID_PART_MAX:
            return StreamID(self.timestamp + 1, 0)
        return StreamID(self.timestamp, self.sequence + 1)


STREAM_START = StreamID(0, 0)
STREAM_END = StreamID(_STREAM_ID_PART_MAX, _STREAM_ID_PART_MAX)
