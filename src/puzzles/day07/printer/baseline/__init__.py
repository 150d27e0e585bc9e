"""Baseline printer rendering the worker timeline as a Gantt chart."""

from __future__ import annotations

from . import _impl as _baseline_module
from ._impl import DESCRIPTOR, assign_lanes, port_export

BASELINE_PRINTER_MODULE = _baseline_module

__all__ = ["BASELINE_PRINTER_MODULE", "DESCRIPTOR", "assign_lanes", "port_export"]
