"""Quadratic residues modulo an odd prime via Euler's criterion.

For an odd prime ``p`` and ``v`` not divisible by ``p``::

    v ** ((p - 1) // 2) % p == 1        # v is a quadratic residue
    v ** ((p - 1) // 2) % p == p - 1    # v is a non-residue

Mental-poker protocols encode cards as residues so that SRA encryption
(which preserves residuosity) does not leak a card's class.
"""
from __future__ import annotations

import logging
import threading
from typing import Iterable, List, Optional

from sra.config import EngineConfig
from sra.errors import InvalidParameter, InvalidPrime, NonTerminatingSearch
from sra.sra_from_scratch import check_cancel, require_prime

__all__ = [
    "euler_exponent",
    "residue_class",
    "is_quadratic_residue",
    "generate_quad_residues",
    "check_residues",
]

logger = logging.getLogger(__name__)


def _odd_prime(prime: int, config: EngineConfig) -> int:
    if prime < 3 or prime % 2 == 0:
        raise InvalidPrime("Euler's criterion needs an odd prime")
    if config.verify_primes:
        require_prime(prime, odd=True)
    return prime


def euler_exponent(prime: int) -> int:
    return (prime - 1) // 2


def residue_class(value: int, prime: int) -> int:
    """``value ** ((prime - 1) // 2) mod prime``: 1, ``prime - 1`` or 0."""

    return pow(value, euler_exponent(prime), prime)


def is_quadratic_residue(value: int, prime: int) -> bool:
    return residue_class(value, prime) == 1


def generate_quad_residues(
    prime: int,
    count: int,
    *,
    config: Optional[EngineConfig] = None,
    cancel: Optional[threading.Event] = None,
) -> List[int]:
    """Return *count* consecutive quadratic residues mod *prime*.

    The scan starts just below half of ``prime - 1`` and moves upward, so the
    result is deterministic for a given ``(prime, count)`` and strictly
    increasing.  Values at or past ``prime`` are accepted like any other; they
    repeat the classes of ``value % prime``.  Scanning more than
    ``config.max_search_steps`` candidates raises :class:`NonTerminatingSearch`.
    """

    config = config or EngineConfig()
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidParameter("count must be an integer")
    if count < 0:
        raise InvalidParameter("count must be non-negative")
    _odd_prime(prime, config)

    exp = euler_exponent(prime)
    residues: List[int] = []
    candidate = exp - 1
    scanned = 0
    while len(residues) < count:
        check_cancel(cancel)
        if scanned >= config.max_search_steps:
            raise NonTerminatingSearch(
                f"Found {len(residues)} of {count} residue(s) within {config.max_search_steps} candidates"
            )
        if pow(candidate, exp, prime) == 1:
            residues.append(candidate)
        candidate += 1
        scanned += 1

    logger.debug("Generated %d residue(s) from %d candidate(s) starting at %d", len(residues), scanned, exp - 1)
    return residues


def check_residues(
    values: Iterable[int],
    prime: int,
    *,
    config: Optional[EngineConfig] = None,
) -> List[int]:
    """Classify each value; see :func:`residue_class`."""

    config = config or EngineConfig()
    _odd_prime(prime, config)
    exp = euler_exponent(prime)
    return [pow(value, exp, prime) for value in values]
