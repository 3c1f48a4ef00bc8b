"""SRA (Shamir–Rivest–Adleman) commutative cryptosystem over a prime field.

Both players share one prime ``p``.  Each holds exponents ``e, d`` with
``e * d ≡ 1 (mod p - 1)``, so ``(m**e)**d ≡ m (mod p)`` by Fermat, and
encryptions by different players commute:
``E_a(E_b(m)) == E_b(E_a(m))``.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from Crypto.Util.number import isPrime

from sra.config import EngineConfig
from sra.errors import (
    InvalidPrime,
    NoModularInverse,
    NonTerminatingSearch,
    SearchCancelled,
    ValueOutOfRange,
)
from sra.radix import format_int
from sra.randomness import RandomSource

__all__ = [
    "Keypair",
    "egcd",
    "inv_mod",
    "check_prime",
    "require_prime",
    "check_cancel",
    "generate_random_prime",
    "generate_random_keypair",
    "encrypt_int",
    "decrypt_int",
    "sra_roundtrip",
    "commutative_roundtrip",
]

logger = logging.getLogger(__name__)

# isPrime() turns this into the number of Miller-Rabin rounds.
_FALSE_POSITIVE_PROB = 2.0 ** -100


@dataclass(frozen=True)
class Keypair:
    enc_key: int
    dec_key: int
    prime: int

    def swapped(self) -> "Keypair":
        """Return the pair with the encryption and decryption roles exchanged."""

        return Keypair(enc_key=self.dec_key, dec_key=self.enc_key, prime=self.prime)

    def is_consistent(self) -> bool:
        return (self.enc_key * self.dec_key) % (self.prime - 1) == 1

    def to_params(self, radix: int = 16) -> Dict[str, str]:
        return {
            "encKey": format_int(self.enc_key, radix),
            "decKey": format_int(self.dec_key, radix),
            "prime": format_int(self.prime, radix),
        }


def egcd(a: int, b: int):
    """Iterative extended Euclid returning ``(g, x, y)`` with ``a*x + b*y == g``."""

    old_r, r = a, b
    old_s, s = 1, 0
    old_t, t = 0, 1

    while r != 0:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_s, s = s, old_s - q * s
        old_t, t = t, old_t - q * t

    return old_r, old_s, old_t


def inv_mod(a: int, m: int) -> int:
    g, x, _ = egcd(a, m)
    if g != 1:
        raise NoModularInverse(f"No modular inverse (gcd={g})")
    return x % m


def check_prime(value: int) -> bool:
    """Probabilistic primality test delegated to pycryptodome."""

    return bool(isPrime(value, false_positive_prob=_FALSE_POSITIVE_PROB))


def require_prime(value: int, *, odd: bool = False, field: str = "prime") -> int:
    """Fail fast with :class:`InvalidPrime` unless *value* is a usable prime."""

    minimum = 3 if odd else 2
    if value < minimum:
        raise InvalidPrime(f"{field} must be at least {minimum}")
    if not check_prime(value):
        raise InvalidPrime(f"{field} is not prime")
    return value


def check_cancel(cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise SearchCancelled("Search cancelled by caller")


def _resolve(source: Optional[RandomSource], config: Optional[EngineConfig]):
    config = config or EngineConfig()
    if source is None:
        source = RandomSource(config.use_secure_source)
    return source, config


def generate_random_prime(
    bit_length: int,
    *,
    source: Optional[RandomSource] = None,
    config: Optional[EngineConfig] = None,
    cancel: Optional[threading.Event] = None,
) -> int:
    """Return a random probable prime of *bit_length* bits.

    The search starts from a random integer with its top bit set and, with
    the ``decrement`` strategy, walks downward one integer at a time until a
    prime is found.  With ``preserve_bit_length`` a walk that drops below
    ``2**(bit_length - 1)`` restarts from a fresh random candidate.
    """

    source, config = _resolve(source, config)
    if bit_length < 2:
        raise NonTerminatingSearch("No primes exist below 2 bits")

    floor = 1 << (bit_length - 1)
    candidate = source.random_top_bit_int(bit_length)
    restarts = 0
    logger.debug("Prime search: %d bits, strategy=%s", bit_length, config.search_strategy)

    for step in range(1, config.max_search_steps + 1):
        check_cancel(cancel)
        if check_prime(candidate):
            logger.info(
                "Found %d-bit prime after %d test(s), %d restart(s)",
                candidate.bit_length(),
                step,
                restarts,
            )
            return candidate
        if config.search_strategy == "rerandomize":
            candidate = source.random_top_bit_int(bit_length)
            continue
        candidate -= 1
        if candidate < 2 or (config.preserve_bit_length and candidate < floor):
            restarts += 1
            logger.debug("Prime search crossed 2**%d; restarting", bit_length - 1)
            candidate = source.random_top_bit_int(bit_length)

    raise NonTerminatingSearch(
        f"No {bit_length}-bit prime found within {config.max_search_steps} candidates"
    )


def _exponent_inverse(enc_key: int, phi: int) -> Optional[int]:
    """Inverse of *enc_key* mod *phi*, or ``None`` for a non-invertible or trivial exponent."""

    if phi > 2 and enc_key % phi == 1:
        return None
    try:
        return inv_mod(enc_key, phi)
    except NoModularInverse:
        return None


def generate_random_keypair(
    prime: int,
    *,
    source: Optional[RandomSource] = None,
    config: Optional[EngineConfig] = None,
    cancel: Optional[threading.Event] = None,
) -> Keypair:
    """Derive ``(enc_key, dec_key)`` with ``enc_key * dec_key ≡ 1 (mod prime - 1)``.

    ``enc_key`` starts as a random integer as wide as ``prime - 1``.  While it
    shares a factor with ``prime - 1`` it is stepped (downward by default) and
    the inverse retried.  The downward walk is not uniform over the valid
    exponents.  Exponents congruent to 1 are skipped because both transforms
    would be the identity; ``prime == 3`` has no other choice and keeps them.
    """

    source, config = _resolve(source, config)
    if prime < 3:
        raise InvalidPrime("prime must be at least 3")
    if config.verify_primes:
        require_prime(prime)

    phi = prime - 1
    bits = phi.bit_length()
    enc_key = source.random_top_bit_int(bits)

    for step in range(1, config.max_search_steps + 1):
        check_cancel(cancel)
        dec_key = _exponent_inverse(enc_key, phi)
        if dec_key is not None:
            logger.info("Keypair found after %d attempt(s) for %d-bit prime", step, prime.bit_length())
            return Keypair(enc_key=enc_key, dec_key=dec_key, prime=prime)
        if config.search_strategy == "rerandomize" or enc_key <= 1:
            enc_key = source.random_top_bit_int(bits)
        else:
            enc_key -= 1

    raise NonTerminatingSearch(
        f"No invertible exponent found within {config.max_search_steps} attempts"
    )


def _check_range(value: int, prime: int) -> None:
    if not (0 <= value < prime):
        raise ValueOutOfRange("Value must satisfy 0 <= value < prime")


def encrypt_int(value: int, keypair: Keypair) -> int:
    _check_range(value, keypair.prime)
    return pow(value, keypair.enc_key, keypair.prime)


def decrypt_int(value: int, keypair: Keypair) -> int:
    _check_range(value, keypair.prime)
    return pow(value, keypair.dec_key, keypair.prime)


def sra_roundtrip(
    bits: int = 64,
    *,
    source: Optional[RandomSource] = None,
) -> Tuple[int, Keypair, bool]:
    """Generate a prime and keypair and check encrypt/decrypt in both orders.

    Returns the prime, the keypair and whether both round-trips recovered the
    message.
    """

    source, config = _resolve(source, None)
    prime = generate_random_prime(bits, source=source, config=config)
    keypair = generate_random_keypair(prime, source=source, config=config)
    message = source.next_uniform_int(prime - 3) + 2  # 2 <= m <= p-1
    forward = decrypt_int(encrypt_int(message, keypair), keypair)
    backward = encrypt_int(decrypt_int(message, keypair), keypair)
    return prime, keypair, forward == message and backward == message


def commutative_roundtrip(
    bits: int = 64,
    *,
    source: Optional[RandomSource] = None,
) -> Dict[str, int | bool]:
    """Two players lock a card value in opposite orders and unlock it."""

    source, config = _resolve(source, None)
    prime = generate_random_prime(bits, source=source, config=config)
    alice = generate_random_keypair(prime, source=source, config=config)
    bob = generate_random_keypair(prime, source=source, config=config)
    card = source.next_uniform_int(prime - 3) + 2

    alice_then_bob = encrypt_int(encrypt_int(card, alice), bob)
    bob_then_alice = encrypt_int(encrypt_int(card, bob), alice)
    # Alice removes her lock first even though Bob's was applied last.
    unlocked = decrypt_int(decrypt_int(alice_then_bob, alice), bob)
    return {
        "prime": prime,
        "card": card,
        "alice_then_bob": alice_then_bob,
        "bob_then_alice": bob_then_alice,
        "unlocked": unlocked,
        "commutes": alice_then_bob == bob_then_alice,
        "ok": unlocked == card,
    }


if __name__ == "__main__":
    print("== SRA from scratch ==")
    p, kp, ok = sra_roundtrip(256)
    assert ok, "Roundtrip failed"
    print(f"p bits: {p.bit_length()}, e*d mod (p-1) = {(kp.enc_key * kp.dec_key) % (p - 1)}, ok = {ok}")
