import pathlib
import sys
import threading

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sra.config import EngineConfig
from sra.errors import InvalidParameter, InvalidPrime, NonTerminatingSearch, SearchCancelled
from sra.quad_residues import (
    check_residues,
    generate_quad_residues,
    is_quadratic_residue,
    residue_class,
)
from sra.sra_from_scratch import generate_random_keypair, encrypt_int


def _squares(p):
    return {(x * x) % p for x in range(1, p)}


def test_euler_criterion_p23():
    assert check_residues([4], 23) == [1]
    assert check_residues([5], 23) == [22]
    assert residue_class(46, 23) == 0


@pytest.mark.parametrize("p", [3, 5, 7, 11, 23, 101, 257])
def test_classification_matches_squares(p):
    squares = _squares(p)
    values = list(range(1, p))
    classes = check_residues(values, p)
    for v, cls in zip(values, classes):
        assert cls == (1 if v in squares else p - 1)
        assert is_quadratic_residue(v, p) == (v in squares)


def test_generation_is_deterministic_and_increasing():
    assert generate_quad_residues(23, 4) == [12, 13, 16, 18]
    series = generate_quad_residues(1009, 20)
    assert series == generate_quad_residues(1009, 20)
    assert all(a < b for a, b in zip(series, series[1:]))
    assert series[0] >= (1009 - 1) // 2 - 1
    assert check_residues(series, 1009) == [1] * 20


def test_generation_on_large_prime():
    p = 2**127 - 1
    series = generate_quad_residues(p, 5)
    assert len(series) == 5
    assert all(pow(v, (p - 1) // 2, p) == 1 for v in series)


def test_generation_scans_past_prime():
    assert generate_quad_residues(23, 6) == [12, 13, 16, 18, 24, 25]
    assert check_residues([24, 25], 23) == [1, 1]
    assert generate_quad_residues(23, 0) == []
    with pytest.raises(InvalidParameter):
        generate_quad_residues(23, -1)


def test_generation_step_cap():
    assert generate_quad_residues(23, 1, config=EngineConfig(max_search_steps=3)) == [12]
    with pytest.raises(NonTerminatingSearch):
        generate_quad_residues(23, 1, config=EngineConfig(max_search_steps=2))


def test_generation_cancelled():
    cancel = threading.Event()
    cancel.set()
    with pytest.raises(SearchCancelled):
        generate_quad_residues(1009, 3, cancel=cancel)


@pytest.mark.parametrize("bad", [2, 21, 24, 1])
def test_non_odd_prime_rejected(bad):
    with pytest.raises(InvalidPrime):
        generate_quad_residues(bad, 1)
    with pytest.raises(InvalidPrime):
        check_residues([4], bad)


def test_unverified_composite_still_computes():
    config = EngineConfig(verify_primes=False)
    assert check_residues([4], 21, config=config) == [pow(4, 10, 21)]


def test_encryption_preserves_residuosity():
    p = 1009
    keypair = generate_random_keypair(p)
    for v in range(2, 40):
        assert is_quadratic_residue(encrypt_int(v, keypair), p) == is_quadratic_residue(v, p)
