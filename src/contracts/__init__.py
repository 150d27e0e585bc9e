"""Error types, canonical JSON and payload contracts for the puzzle harness."""

from __future__ import annotations

from .errors import (
    MalformedInputError,
    ManagedValidationError,
    SchedulerInvariantError,
    ValidationIssue,
    ValidationReport,
)
from .validator import assert_valid, validate

__all__ = [
    "MalformedInputError",
    "ManagedValidationError",
    "SchedulerInvariantError",
    "ValidationIssue",
    "ValidationReport",
    "assert_valid",
    "validate",
]
