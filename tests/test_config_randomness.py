import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sra.config import EngineConfig
from sra.errors import InvalidParameter
from sra.randomness import RandomSource, secure_source_available


def test_config_defaults_and_env():
    default = EngineConfig()
    assert default.verify_primes and default.search_strategy == "decrement"

    config = EngineConfig.from_env(
        {
            "SRA_SECURE_RANDOM": "false",
            "SRA_VERIFY_PRIMES": "0",
            "SRA_SEARCH_STRATEGY": "Rerandomize",
            "SRA_MAX_SEARCH_STEPS": "500",
            "SRA_WORKERS": "2",
        }
    )
    assert config.use_secure_source is False
    assert config.verify_primes is False
    assert config.search_strategy == "rerandomize"
    assert config.max_search_steps == 500
    assert config.max_workers == 2
    assert EngineConfig.from_env({}) == EngineConfig()


@pytest.mark.parametrize(
    "env",
    [
        {"SRA_SECURE_RANDOM": "maybe"},
        {"SRA_SEARCH_STRATEGY": "sideways"},
        {"SRA_MAX_SEARCH_STEPS": "0"},
        {"SRA_WORKERS": "many"},
    ],
)
def test_config_rejects_bad_env(env):
    with pytest.raises(InvalidParameter):
        EngineConfig.from_env(env)


def test_with_overrides_ignores_none():
    config = EngineConfig().with_overrides(search_strategy=None, max_workers=8)
    assert config.search_strategy == "decrement" and config.max_workers == 8


def test_secure_source_detection():
    assert secure_source_available() is True
    assert RandomSource().secure is True


@pytest.mark.parametrize("secure", [True, False])
def test_uniform_int_stays_in_range(secure):
    source = RandomSource(secure=secure, seed=5)
    for bound in (0, 1, 2, 7, 1000, 2**130 + 17):
        draws = [source.next_uniform_int(bound) for _ in range(50)]
        assert all(0 <= d <= bound for d in draws)
    assert {source.next_uniform_int(1) for _ in range(200)} == {0, 1}
    with pytest.raises(ValueError):
        source.next_uniform_int(-1)


@pytest.mark.parametrize("secure", [True, False])
def test_top_bit_forced(secure):
    source = RandomSource(secure=secure, seed=6)
    for bits in (1, 2, 9, 64, 257):
        assert source.random_top_bit_int(bits).bit_length() == bits
    text = source.random_bit_string(12)
    assert len(text) == 12 and text[0] == "1" and set(text) <= {"0", "1"}
    assert len(source.random_bytes(10)) == 10


def test_fallback_is_seedable():
    a = RandomSource(secure=False, seed=42)
    b = RandomSource(secure=False, seed=42)
    assert [a.random_bits(100) for _ in range(5)] == [b.random_bits(100) for _ in range(5)]
