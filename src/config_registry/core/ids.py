"""
Sortable identifier generation.

Identifiers are ULID-formatted strings: a 48-bit millisecond timestamp
followed by 80 random bits, rendered as 26 Crockford base32 characters.
Lexical order of two ids matches their creation order.
"""

import os
import re
import threading
import time
from datetime import datetime, timezone
from typing import Callable

CROCKFORD_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
ID_LENGTH = 26

_RANDOM_BITS = 80
_RANDOM_MAX = (1 << _RANDOM_BITS) - 1
_TIMESTAMP_MAX = (1 << 48) - 1
_ID_PATTERN = re.compile(rf"^[0-7][{CROCKFORD_ALPHABET}]{{{ID_LENGTH - 1}}}$")


def _encode(timestamp_ms: int, randomness: int) -> str:
    value = (timestamp_ms << _RANDOM_BITS) | randomness
    chars = []
    for _ in range(ID_LENGTH):
        chars.append(CROCKFORD_ALPHABET[value & 0x1F])
        value >>= 5
    return "".join(reversed(chars))


def is_valid_id(value: str) -> bool:
    """Check whether a string is a well-formed identifier."""
    return bool(_ID_PATTERN.match(value))


def id_timestamp(value: str) -> datetime:
    """
    Recover the creation time embedded in an identifier.

    Raises:
        ValueError: If value is not a well-formed identifier
    """
    if not is_valid_id(value):
        raise ValueError(f"Not a valid identifier: {value!r}")

    decoded = 0
    for char in value:
        decoded = (decoded << 5) | CROCKFORD_ALPHABET.index(char)
    timestamp_ms = decoded >> _RANDOM_BITS
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)


class IdGenerator:
    """
    Thread-safe generator of monotonically sortable identifiers.

    Ids produced within the same millisecond (or after the wall clock
    stepped backwards) reuse the last timestamp and increment the random
    part, so every id is strictly greater than the previous one.
    """

    def __init__(
        self,
        clock: Callable[[], float] | None = None,
        randbytes: Callable[[int], bytes] | None = None,
    ):
        self._clock = clock or time.time
        self._randbytes = randbytes or os.urandom
        self._lock = threading.Lock()
        self._last_ms = -1
        self._last_random = 0

    def _fresh_random(self) -> int:
        return int.from_bytes(self._randbytes(_RANDOM_BITS // 8), "big")

    def new_id(self) -> str:
        """Return a new identifier greater than any previously returned."""
        with self._lock:
            now_ms = int(self._clock() * 1000)
            if now_ms > self._last_ms:
                timestamp_ms, randomness = now_ms, self._fresh_random()
            elif self._last_random < _RANDOM_MAX:
                timestamp_ms, randomness = self._last_ms, self._last_random + 1
            else:
                # random space for this millisecond is spent, borrow the next one
                timestamp_ms, randomness = self._last_ms + 1, self._fresh_random()

            if timestamp_ms > _TIMESTAMP_MAX:
                raise OverflowError("Timestamp does not fit in 48 bits")

            self._last_ms, self._last_random = timestamp_ms, randomness

        return _encode(timestamp_ms, randomness)
