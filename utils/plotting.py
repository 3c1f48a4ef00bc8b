from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.axes import Axes  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402


def ensure_out_dir(pathlike) -> Path:
    """Ensure the given directory exists and return it as a Path."""
    path = Path(pathlike)
    path.mkdir(parents=True, exist_ok=True)
    return path


def save(fig: Figure, path) -> Path:
    """Save the figure to *path* (parent directories created automatically)."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(str(target), bbox_inches="tight")
    plt.close(fig)
    return target


def wide_grid(rows: int, cols: int) -> Tuple[Figure, "list[list[Axes]]"]:
    fig, axes = plt.subplots(rows, cols, figsize=(cols * 5.5, rows * 3.5), squeeze=False)
    return fig, axes


def nice_axes(
    ax: Axes,
    title: str,
    xlabel: Optional[str] = None,
    ylabel: Optional[str] = None,
) -> Axes:
    ax.set_title(title)
    if xlabel:
        ax.set_xlabel(xlabel)
    if ylabel:
        ax.set_ylabel(ylabel)
    ax.grid(True, alpha=0.3)
    return ax


__all__ = [
    "ensure_out_dir",
    "save",
    "wide_grid",
    "nice_axes",
]
