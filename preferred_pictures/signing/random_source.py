"""Random correlation ids (the `uid` request field)."""

import random
import threading
from typing import Protocol

ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ-"
DEFAULT_UID_LENGTH = 30


class RandomSource(Protocol):
    def randbelow(self, n: int) -> int:
        """Return a uniformly chosen int in [0, n)."""
        ...


class SystemRandomSource:
    """OS entropy backed source. Holds no state, safe to share across threads."""

    def __init__(self):
        self._rng = random.SystemRandom()

    def randbelow(self, n: int) -> int:
        return self._rng.randrange(n)


class SeededRandomSource:
    """Deterministic source for tests and reproducible fixtures."""

    def __init__(self, seed: int | str | bytes):
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def randbelow(self, n: int) -> int:
        with self._lock:
            return self._rng.randrange(n)


_default_source = SystemRandomSource()


def generate_correlation_id(
    length: int = DEFAULT_UID_LENGTH, source: RandomSource | None = None
) -> str:
    """Build a random id of `length` characters drawn from ALPHABET."""
    rng = source or _default_source
    return "".join(ALPHABET[rng.randbelow(len(ALPHABET))] for _ in range(length))
