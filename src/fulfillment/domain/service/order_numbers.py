"""Order number generation strategies.

Order numbers are human-readable and globally unique.  The generator is
injected into the checkout handlers so tests can use a deterministic
sequence while production uses ULID-style numbers.
"""

from __future__ import annotations

import itertools
import secrets
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable

_CROCKFORD = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"
_RANDOM_BITS = 80
_RANDOM_MAX = (1 << _RANDOM_BITS) - 1


class OrderNumberGenerator(ABC):

    @abstractmethod
    def next(self) -> str:
        """Return a new order number."""


class UlidOrderNumberGenerator(OrderNumberGenerator):
    """``ORD`` followed by a 26-character ULID.

    48 bits of millisecond timestamp then 80 random bits, Crockford base32
    encoded, so numbers sort by creation time.  Within one millisecond the
    random part is incremented instead of redrawn, which keeps numbers
    from one process strictly increasing.
    """

    def __init__(
        self,
        prefix: str = "ORD",
        clock: Callable[[], int] = time.time_ns,
        randbits: Callable[[int], int] = secrets.randbits,
    ) -> None:
        self._prefix = prefix
        self._clock = clock
        self._randbits = randbits
        self._lock = threading.Lock()
        self._last_ms = -1
        self._last_random = 0

    def next(self) -> str:
        with self._lock:
            ms = self._clock() // 1_000_000
            if ms <= self._last_ms:
                ms = self._last_ms
                if self._last_random == _RANDOM_MAX:
                    ms += 1
                    self._last_random = self._randbits(_RANDOM_BITS)
                else:
                    self._last_random += 1
            else:
                self._last_random = self._randbits(_RANDOM_BITS)
            self._last_ms = ms
            value = (ms << _RANDOM_BITS) | self._last_random
        return self._prefix + _encode(value)


class SequentialOrderNumberGenerator(OrderNumberGenerator):
    """Deterministic numbers (``ORD00000001``, ``ORD00000002``, ...)."""

    def __init__(self, prefix: str = "ORD", start: int = 1, width: int = 8) -> None:
        self._prefix = prefix
        self._width = width
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next(self) -> str:
        with self._lock:
            n = next(self._counter)
        return f"{self._prefix}{n:0{self._width}d}"


def _encode(value: int) -> str:
    chars = []
    for _ in range(26):
        value, index = divmod(value, 32)
        chars.append(_CROCKFORD[index])
    return "".join(reversed(chars))
