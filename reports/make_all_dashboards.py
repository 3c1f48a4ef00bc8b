from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import import_module
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from utils.plotting import ensure_out_dir

logger = logging.getLogger(__name__)

_DASHBOARD_SPECS: Sequence[Tuple[str, str, str]] = (
    ("reports.performance_dashboard", "make_performance_dashboard", "generation_performance.png"),
    ("reports.residue_dashboard", "make_residue_dashboard", "quadratic_residues.png"),
)


@dataclass
class DashboardResult:
    """Outcome of a single dashboard export attempt."""

    module: str
    attr: str
    target: Path
    status: str
    reason: str = ""
    output: Optional[Path] = None


def _load_callable(module_name: str, attr: str) -> Tuple[Optional[Callable[[Path], Path]], str]:
    try:
        module = import_module(module_name)
    except ImportError as exc:
        return None, f"import failed: {exc}"

    func = getattr(module, attr, None)
    if func is None:
        return None, f"callable '{attr}' not found in {module_name}"
    return func, ""


def make_all_dashboards(out_dir: str | Path = "Visualizations") -> List[DashboardResult]:
    """Render every dashboard into *out_dir* and describe each attempt."""

    directory = ensure_out_dir(out_dir)
    results: List[DashboardResult] = []

    for module_name, attr, filename in _DASHBOARD_SPECS:
        target = directory / filename
        func, reason = _load_callable(module_name, attr)
        if func is None:
            logger.warning("Skipped %s.%s (%s)", module_name, attr, reason)
            results.append(DashboardResult(module_name, attr, target, "skipped", reason))
            continue
        try:
            output = Path(func(target))
        except Exception as exc:  # pragma: no cover - runtime safeguard
            logger.exception("Dashboard %s.%s failed", module_name, attr)
            results.append(DashboardResult(module_name, attr, target, "skipped", f"error: {exc}"))
            continue
        results.append(DashboardResult(module_name, attr, target, "saved", output=output))
    return results


def main() -> None:
    for result in make_all_dashboards():
        if result.status == "saved" and result.output is not None:
            print(result.output.resolve())
        else:
            print(f"skipped {result.module}.{result.attr} ({result.reason})")


if __name__ == "__main__":
    main()
