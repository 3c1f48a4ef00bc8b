"""Sanity statistics for the bits a RandomSource produces."""
from __future__ import annotations

import math
from collections import Counter
from typing import Dict, Iterable, List


def shannon_entropy(data: bytes) -> float:
    """Return bits/byte Shannon entropy of data."""
    if not data:
        return 0.0
    counts = Counter(data)
    n = len(data)
    if n < 2:
        return 0.0
    entropy = -sum((count / n) * math.log2(count / n) for count in counts.values())
    if n < 256:
        entropy *= math.log2(256) / math.log2(n)
    return max(0.0, min(entropy, 8.0))


def bit_balance(values: Iterable[int], bits: int, *, skip_top_bit: bool = True) -> float:
    """Fraction of set bits across *values*, each read as a *bits*-wide integer.

    The forced top bit of a search candidate is excluded by default, so a
    healthy source scores close to 0.5.
    """
    width = bits - 1 if skip_top_bit else bits
    if width <= 0:
        return 0.0
    mask = (1 << width) - 1
    ones = total = 0
    for value in values:
        ones += bin(value & mask).count("1")
        total += width
    return ones / total if total else 0.0


def sample_source(source, samples: int = 32, bits: int = 256) -> Dict[str, object]:
    """Draw *samples* top-bit candidates from *source* and summarise them."""
    values: List[int] = [source.random_top_bit_int(bits) for _ in range(samples)]
    nbytes = (bits + 7) // 8
    pooled = b"".join(value.to_bytes(nbytes, "big")[1:] for value in values)
    balance = bit_balance(values, bits)
    entropy = shannon_entropy(pooled)
    return {
        "secure": source.secure,
        "samples": samples,
        "bits": bits,
        "bit_balance": balance,
        "byte_entropy": entropy,
        "distinct": len(set(values)),
        "balance_warn": abs(balance - 0.5) > 0.05,
        "entropy_warn": entropy < 7.5,
    }
