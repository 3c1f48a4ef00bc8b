"""Uniform random integers for prime and key search."""
from __future__ import annotations

import logging
import random
from typing import Optional

from Crypto.Random import get_random_bytes

__all__ = ["RandomSource", "secure_source_available"]

logger = logging.getLogger(__name__)


def secure_source_available() -> bool:
    """Return ``True`` when pycryptodome can read from the OS CSPRNG."""

    try:
        get_random_bytes(1)
    except (OSError, NotImplementedError):
        return False
    return True


class RandomSource:
    """Bit source for the search loops.

    The secure/fallback choice is made once, when the instance is built. The
    fallback is a seedable ``random.Random`` so tests can replay a search.
    """

    def __init__(self, secure: Optional[bool] = None, *, seed: Optional[int] = None):
        if secure is None:
            secure = secure_source_available()
            if not secure:
                logger.warning("Secure random source unavailable; using random.Random fallback")
        self.secure = bool(secure)
        self._fallback = None if self.secure else random.Random(seed)

    def __repr__(self) -> str:
        mode = "secure" if self.secure else "fallback"
        return f"RandomSource({mode})"

    def random_bytes(self, count: int) -> bytes:
        if count < 0:
            raise ValueError("count must be non-negative")
        if self.secure:
            return get_random_bytes(count)
        return self._fallback.getrandbits(8 * count).to_bytes(count, "big") if count else b""

    def random_bits(self, k: int) -> int:
        """Uniform integer in ``[0, 2**k)``."""

        if k < 0:
            raise ValueError("bit count must be non-negative")
        if k == 0:
            return 0
        if not self.secure:
            return self._fallback.getrandbits(k)
        nbytes = (k + 7) // 8
        value = int.from_bytes(get_random_bytes(nbytes), "big")
        return value >> (8 * nbytes - k)

    def next_uniform_int(self, max_value: int) -> int:
        """Uniform integer in ``[0, max_value]`` by rejection sampling."""

        if max_value < 0:
            raise ValueError("max_value must be non-negative")
        k = max_value.bit_length()
        while True:
            candidate = self.random_bits(k)
            if candidate <= max_value:
                return candidate

    def random_top_bit_int(self, bit_length: int) -> int:
        """A *bit_length*-bit integer with the most significant bit set."""

        if bit_length < 1:
            raise ValueError("bit_length must be at least 1")
        return (1 << (bit_length - 1)) | self.random_bits(bit_length - 1)

    def random_bit_string(self, bit_length: int) -> str:
        return format(self.random_top_bit_int(bit_length), f"0{bit_length}b")
