"""Shared error types for the puzzle harness."""

from __future__ import annotations


from dataclasses import dataclass, field
from typing import List

SEVERITY_ERROR = "ERROR"
SEVERITY_WARN = "WARN"


@dataclass(frozen=True)
class ValidationIssue:
    """Single finding produced by input decoding or a schema check."""

    code: str
    msg: str
    path: str
    severity: str


@dataclass(frozen=True)
class ValidationReport:
    """Aggregate result of validating a payload."""

    ok: bool
    errors: List[ValidationIssue]
    warnings: List[ValidationIssue] = field(default_factory=list)
    timings_ms: dict[str, int] = field(default_factory=dict)


class MalformedInputError(ValueError):
    """Raised when puzzle input cannot be decoded.

    The simulation never starts once this is raised.  ``issue`` points at the
    offending line so the CLI can report it without a traceback.
    """

    def __init__(self, message: str, issue: ValidationIssue | None = None) -> None:
        super().__init__(message)
        self.issue = issue


class ManagedValidationError(ValueError):
    """Raised when a payload fails schema validation."""

    def __init__(self, message: str, report: ValidationReport) -> None:
        super().__init__(message)
        self.report = report


class SchedulerInvariantError(RuntimeError):
    """Internal invariant of the scheduler was violated.

    Only reachable through incorrect use of the worker pool or completion
    state; callers are not expected to recover from it.
    """


def make_error(code: str, msg: str, path: str) -> ValidationIssue:
    """Construct an error-level :class:`ValidationIssue`."""

    return ValidationIssue(code=code, msg=msg, path=path, severity=SEVERITY_ERROR)


def make_warning(code: str, msg: str, path: str) -> ValidationIssue:
    """Construct a warning-level :class:`ValidationIssue`."""

    return ValidationIssue(code=code, msg=msg, path=path, severity=SEVERITY_WARN)


__all__ = [
    "SEVERITY_ERROR",
    "SEVERITY_WARN",
    "MalformedInputError",
    "ManagedValidationError",
    "SchedulerInvariantError",
    "ValidationIssue",
    "ValidationReport",
    "make_error",
    "make_warning",
]
