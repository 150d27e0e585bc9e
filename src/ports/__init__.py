"""Puzzle-first port facades."""

from __future__ import annotations

from .printer_port import export_schedule
from .solver_port import solve

__all__ = [
    "export_schedule",
    "solve",
]
