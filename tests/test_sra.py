import pathlib
import sys
import threading
from math import gcd

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sra.config import EngineConfig
from sra.errors import (
    InvalidPrime,
    NoModularInverse,
    NonTerminatingSearch,
    SearchCancelled,
    ValueOutOfRange,
)
from sra.randomness import RandomSource
from sra.sra_from_scratch import (
    Keypair,
    check_prime,
    decrypt_int,
    encrypt_int,
    generate_random_keypair,
    generate_random_prime,
    inv_mod,
)


class FixedSource:
    """Always proposes the same starting candidate."""

    secure = False

    def __init__(self, value):
        self.value = value

    def random_top_bit_int(self, bit_length):
        return self.value


def _trial_division(n):
    if n < 2:
        return False
    i = 2
    while i * i <= n:
        if n % i == 0:
            return False
        i += 1
    return True


def test_paper_example_p23():
    keypair = Keypair(enc_key=7, dec_key=19, prime=23)
    assert keypair.is_consistent()
    assert encrypt_int(5, keypair) == 17
    assert decrypt_int(17, keypair) == 5


def test_inv_mod():
    assert inv_mod(7, 22) == 19
    with pytest.raises(NoModularInverse):
        inv_mod(4, 22)


@pytest.mark.parametrize("bits", [2, 3, 8, 16, 24])
def test_small_primes_have_exact_bit_length(bits):
    source = RandomSource(secure=False, seed=bits)
    for _ in range(10):
        prime = generate_random_prime(bits, source=source)
        assert prime.bit_length() == bits
        assert _trial_division(prime)


@pytest.mark.parametrize("strategy", ["decrement", "rerandomize"])
def test_large_prime_both_strategies(strategy):
    prime = generate_random_prime(256, config=EngineConfig(search_strategy=strategy))
    assert prime.bit_length() == 256
    assert check_prime(prime)
    assert pow(2, prime - 1, prime) == 1


def test_decrement_walks_down_to_next_prime():
    assert generate_random_prime(8, source=FixedSource(200)) == 199


def test_restart_keeps_bit_length_or_drops_it_when_allowed():
    # 128 is composite and 127 has only 7 bits.
    strict = EngineConfig(max_search_steps=20)
    with pytest.raises(NonTerminatingSearch):
        generate_random_prime(8, source=FixedSource(128), config=strict)

    loose = EngineConfig(preserve_bit_length=False)
    assert generate_random_prime(8, source=FixedSource(128), config=loose) == 127


def test_prime_search_is_bounded():
    with pytest.raises(NonTerminatingSearch):
        generate_random_prime(1)
    config = EngineConfig(search_strategy="rerandomize", max_search_steps=5)
    with pytest.raises(NonTerminatingSearch):
        generate_random_prime(8, source=FixedSource(200), config=config)


def test_prime_search_cancelled():
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(SearchCancelled):
        generate_random_prime(64, cancel=cancel)


def test_seeded_fallback_is_reproducible():
    a = generate_random_prime(64, source=RandomSource(secure=False, seed=99))
    b = generate_random_prime(64, source=RandomSource(secure=False, seed=99))
    assert a == b


def test_keypair_decrement_search():
    # gcd(22, 22) != 1, then 21 is invertible (21 * 21 = 441 = 20 * 22 + 1).
    assert generate_random_keypair(23, source=FixedSource(22)) == Keypair(21, 21, 23)
    # 16 shares 2 with 22; 15 * 3 = 45 = 2 * 22 + 1.
    assert generate_random_keypair(23, source=FixedSource(16)) == Keypair(15, 3, 23)


@pytest.mark.parametrize("start", [23, 24])
def test_keypair_skips_identity_exponent(start):
    # 23 = 22 + 1 would pair with dec_key 1; the walk moves on to 21.
    keypair = generate_random_keypair(23, source=FixedSource(start))
    assert keypair == Keypair(21, 21, 23)
    assert encrypt_int(5, keypair) != 5


def test_keypair_for_smallest_odd_prime():
    keypair = generate_random_keypair(3, source=FixedSource(3))
    assert keypair == Keypair(3, 1, 3)


@pytest.mark.parametrize("bits", [16, 64, 128])
def test_keypair_invariant(bits):
    source = RandomSource(secure=False, seed=bits)
    prime = generate_random_prime(bits, source=source)
    keypair = generate_random_keypair(prime, source=source)
    assert (keypair.enc_key * keypair.dec_key) % (prime - 1) == 1
    assert gcd(keypair.enc_key, prime - 1) == 1
    assert keypair.swapped().is_consistent()


def test_keypair_rejects_non_prime():
    with pytest.raises(InvalidPrime):
        generate_random_keypair(21)
    with pytest.raises(InvalidPrime):
        generate_random_keypair(2)


def test_keypair_skips_verification_when_disabled():
    keypair = generate_random_keypair(21, config=EngineConfig(verify_primes=False))
    assert (keypair.enc_key * keypair.dec_key) % 20 == 1


def test_roundtrip_and_commutativity():
    source = RandomSource(secure=False, seed=7)
    prime = generate_random_prime(64, source=source)
    alice = generate_random_keypair(prime, source=source)
    bob = generate_random_keypair(prime, source=source)
    for m in (1, 2, prime - 1, source.next_uniform_int(prime - 2) + 1):
        assert decrypt_int(encrypt_int(m, alice), alice) == m
        assert encrypt_int(decrypt_int(m, alice), alice) == m
        locked = encrypt_int(encrypt_int(m, alice), bob)
        assert locked == encrypt_int(encrypt_int(m, bob), alice)
        assert decrypt_int(decrypt_int(locked, alice), bob) == m


def test_transform_range_checked():
    keypair = Keypair(enc_key=7, dec_key=19, prime=23)
    with pytest.raises(ValueOutOfRange):
        encrypt_int(23, keypair)
    with pytest.raises(ValueOutOfRange):
        decrypt_int(-1, keypair)
