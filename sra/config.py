"""Engine configuration, with environment overrides."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from sra.errors import InvalidParameter

__all__ = ["EngineConfig", "STRATEGIES"]

STRATEGIES = ("decrement", "rerandomize")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _parse_bool(name: str, raw: str) -> bool:
    text = raw.strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise InvalidParameter(f"{name} must be a boolean flag, got {raw!r}")


def _parse_positive(name: str, raw: str) -> int:
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise InvalidParameter(f"{name} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise InvalidParameter(f"{name} must be at least 1")
    return value


@dataclass(frozen=True)
class EngineConfig:
    """Knobs for the search loops and the randomness source.

    ``use_secure_source=None`` means "probe for the secure generator when the
    :class:`~sra.randomness.RandomSource` is built".
    """

    use_secure_source: Optional[bool] = None
    verify_primes: bool = True
    search_strategy: str = "decrement"
    preserve_bit_length: bool = True
    max_search_steps: int = 100_000
    max_workers: int = 4

    def __post_init__(self) -> None:
        if self.search_strategy not in STRATEGIES:
            raise InvalidParameter(
                f"search_strategy must be one of {', '.join(STRATEGIES)}"
            )
        if self.max_search_steps < 1:
            raise InvalidParameter("max_search_steps must be at least 1")
        if self.max_workers < 1:
            raise InvalidParameter("max_workers must be at least 1")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EngineConfig":
        """Build a config from ``SRA_*`` environment variables."""

        env = os.environ if environ is None else environ
        kwargs: dict = {}
        if env.get("SRA_SECURE_RANDOM"):
            kwargs["use_secure_source"] = _parse_bool("SRA_SECURE_RANDOM", env["SRA_SECURE_RANDOM"])
        if env.get("SRA_VERIFY_PRIMES"):
            kwargs["verify_primes"] = _parse_bool("SRA_VERIFY_PRIMES", env["SRA_VERIFY_PRIMES"])
        if env.get("SRA_PRESERVE_BIT_LENGTH"):
            kwargs["preserve_bit_length"] = _parse_bool(
                "SRA_PRESERVE_BIT_LENGTH", env["SRA_PRESERVE_BIT_LENGTH"]
            )
        if env.get("SRA_SEARCH_STRATEGY"):
            kwargs["search_strategy"] = env["SRA_SEARCH_STRATEGY"].strip().lower()
        if env.get("SRA_MAX_SEARCH_STEPS"):
            kwargs["max_search_steps"] = _parse_positive(
                "SRA_MAX_SEARCH_STEPS", env["SRA_MAX_SEARCH_STEPS"]
            )
        if env.get("SRA_WORKERS"):
            kwargs["max_workers"] = _parse_positive("SRA_WORKERS", env["SRA_WORKERS"])
        return cls(**kwargs)

    def with_overrides(self, **changes) -> "EngineConfig":
        """Return a copy with the non-``None`` entries of *changes* applied."""

        return replace(self, **{k: v for k, v in changes.items() if v is not None})
