"""Measured prime/keypair generation cost by bit length."""
from __future__ import annotations

import time
from pathlib import Path
from statistics import mean
from typing import Dict, List, Optional, Sequence

from sra.config import EngineConfig
from sra.randomness import RandomSource
from sra.sra_from_scratch import generate_random_keypair, generate_random_prime
from utils.plotting import nice_axes, save, wide_grid

_DEFAULT_BITS: Sequence[int] = (32, 64, 128, 256)


def measure_generation(
    bit_lengths: Sequence[int] = _DEFAULT_BITS,
    *,
    trials: int = 3,
    source: Optional[RandomSource] = None,
) -> Dict[str, Dict[int, List[float]]]:
    """Time prime search under both strategies, plus keypair derivation."""

    source = source or RandomSource()
    timings: Dict[str, Dict[int, List[float]]] = {
        "decrement": {},
        "rerandomize": {},
        "keypair": {},
    }
    for strategy in ("decrement", "rerandomize"):
        config = EngineConfig(search_strategy=strategy)
        for bits in bit_lengths:
            samples = []
            for _ in range(trials):
                start = time.perf_counter()
                prime = generate_random_prime(bits, source=source, config=config)
                samples.append(time.perf_counter() - start)
                if strategy == "decrement":
                    start = time.perf_counter()
                    generate_random_keypair(prime, source=source, config=config)
                    timings["keypair"].setdefault(bits, []).append(time.perf_counter() - start)
            timings[strategy][bits] = samples
    return timings


def make_performance_dashboard(
    save_path: str | Path,
    *,
    bit_lengths: Sequence[int] = _DEFAULT_BITS,
    trials: int = 3,
) -> Path:
    """Time generation at several sizes and save the charts to *save_path*."""
    timings = measure_generation(bit_lengths, trials=trials)

    fig, axes = wide_grid(1, 2)
    fig.suptitle("SRA Generation Cost (measured on this machine)")

    ax = nice_axes(axes[0][0], "Prime search", xlabel="Bit length", ylabel="Mean time (ms)")
    for strategy, marker in (("decrement", "o"), ("rerandomize", "s")):
        ax.plot(
            list(bit_lengths),
            [mean(timings[strategy][bits]) * 1000 for bits in bit_lengths],
            marker=marker,
            label=strategy,
        )
    ax.set_yscale("log")
    ax.legend()

    ax = nice_axes(axes[0][1], "Keypair derivation", xlabel="Prime bit length", ylabel="Mean time (ms)")
    ax.bar(
        [str(bits) for bits in bit_lengths],
        [mean(timings["keypair"][bits]) * 1000 for bits in bit_lengths],
        color="#4c72b0",
    )

    fig.tight_layout(rect=(0, 0, 1, 0.93))
    return save(fig, Path(save_path))


__all__ = ["measure_generation", "make_performance_dashboard"]
