from __future__ import annotations

from .performance_dashboard import make_performance_dashboard
from .residue_dashboard import make_residue_dashboard

__all__ = ["make_performance_dashboard", "make_residue_dashboard"]
