from __future__ import annotations

from pathlib import Path

from sra.quad_residues import check_residues, euler_exponent, generate_quad_residues
from utils.plotting import nice_axes, save, wide_grid

_TITLE = "Quadratic Residues via Euler's Criterion"
_DEFAULT_PRIME = 101


def make_residue_dashboard(save_path: str | Path, prime: int = _DEFAULT_PRIME) -> Path:
    """Plot the residue map of a small odd prime with the generated series marked."""
    values = list(range(1, prime))
    classes = check_residues(values, prime)
    residues = [v for v, c in zip(values, classes) if c == 1]
    non_residues = [v for v, c in zip(values, classes) if c == prime - 1]

    start = euler_exponent(prime) - 1
    available = sum(1 for v in residues if v >= start)
    series = generate_quad_residues(prime, min(8, available))

    fig, axes = wide_grid(1, 2)
    fig.suptitle(f"{_TITLE} (p = {prime})", fontsize=14)

    ax = nice_axes(axes[0][0], "v^((p-1)/2) mod p", xlabel="v", ylabel="class")
    ax.scatter(residues, [1] * len(residues), s=12, color="#55a868", label="residue (1)")
    ax.scatter(non_residues, [-1] * len(non_residues), s=12, color="#c44e52", label="non-residue (p-1)")
    ax.scatter(series, [1] * len(series), s=60, facecolors="none", edgecolors="black", label="generated series")
    ax.axvline(start, color="gray", linestyle="--", linewidth=1, label="scan start")
    ax.set_yticks([-1, 1])
    ax.set_yticklabels(["p-1", "1"])
    ax.legend(loc="center right")

    ax = nice_axes(axes[0][1], "Residue count", ylabel="values in [1, p-1]")
    ax.bar(["residues", "non-residues"], [len(residues), len(non_residues)], color=["#55a868", "#c44e52"])

    fig.tight_layout(rect=(0, 0, 1, 0.92))
    return save(fig, Path(save_path))


__all__ = ["make_residue_dashboard"]
