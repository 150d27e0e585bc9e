"""Schema and invariant validation for solver and printer payloads."""

from __future__ import annotations

import time
from typing import Any, Dict, List

from . import loader
from .errors import (
    ManagedValidationError,
    ValidationIssue,
    ValidationReport,
    make_error,
)


def _jsonschema_path(exc: Any) -> str:
    path = getattr(exc, "absolute_path", [])
    if not path:
        return "$"
    components: List[str] = ["$"]
    for part in path:
        if isinstance(part, int):
            components.append(f"[{part}]")
        else:
            components.append(f".{part}")
    return "".join(components)


def _schema_stage(payload: Any, expect_type: str) -> List[ValidationIssue]:
    if not isinstance(payload, dict):
        return [make_error("type.mismatch", "Payload must be a JSON object", "$")]

    try:
        descriptor = loader.get_descriptor(expect_type)
    except KeyError:
        return [make_error("schema.not_found", f"Unknown payload type {expect_type}", "$")]

    try:
        schema_dict = loader.load_schema(descriptor.schema_id, descriptor.schema_path)
    except (OSError, ValueError) as exc:
        return [make_error("schema.not_found", str(exc), "$")]

    validator = loader.compile_schema(schema_dict)
    issues: List[ValidationIssue] = []
    for error in sorted(validator.iter_errors(payload), key=lambda e: list(e.absolute_path)):
        issues.append(make_error("schema.violation", error.message, _jsonschema_path(error)))
    return issues


def _solve_result_invariants(payload: Dict[str, Any]) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    part1 = payload["part1"]
    part2 = payload["part2"]
    order = part2["order"]
    timeline = part2["timeline"]

    if sorted(part1) != sorted(order):
        issues.append(
            make_error("invariant.task_set", "part1 and part2 must complete the same tasks", "$.part2.order")
        )
    if len(set(order)) != len(order):
        issues.append(make_error("invariant.duplicate_task", "a task completed twice", "$.part2.order"))
    if "".join(entry["task"] for entry in timeline) != order:
        issues.append(
            make_error("invariant.timeline_order", "timeline must follow completion order", "$.part2.timeline")
        )

    previous_end = 0
    for index, entry in enumerate(timeline):
        if entry["end"] <= entry["start"]:
            issues.append(
                make_error("invariant.interval", "assignment must end after it starts", f"$.part2.timeline[{index}]")
            )
        if entry["end"] < previous_end:
            issues.append(
                make_error("invariant.elapsed", "elapsed time must not decrease", f"$.part2.timeline[{index}].end")
            )
        previous_end = entry["end"]

    if timeline and part2["elapsed"] != timeline[-1]["end"]:
        issues.append(make_error("invariant.makespan", "elapsed must equal the last retirement", "$.part2.elapsed"))
    if not timeline and part2["elapsed"] != 0:
        issues.append(make_error("invariant.makespan", "an empty schedule takes no time", "$.part2.elapsed"))
    return issues


_INVARIANTS = {
    "SolveResult": _solve_result_invariants,
}


def validate(payload: Dict[str, Any], expect_type: str) -> ValidationReport:
    timings = {"schema": 0, "invariants": 0}

    schema_start = time.perf_counter()
    issues = _schema_stage(payload, expect_type)
    timings["schema"] = int((time.perf_counter() - schema_start) * 1000)

    rule = _INVARIANTS.get(expect_type)
    if not issues and rule is not None:
        invariants_start = time.perf_counter()
        issues.extend(rule(payload))
        timings["invariants"] = int((time.perf_counter() - invariants_start) * 1000)

    errors = [issue for issue in issues if issue.severity != "WARN"]
    warnings = [issue for issue in issues if issue.severity == "WARN"]
    return ValidationReport(ok=not errors, errors=errors, warnings=warnings, timings_ms=timings)


def assert_valid(payload: Dict[str, Any], expect_type: str) -> ValidationReport:
    report = validate(payload, expect_type)
    if report.ok:
        return report
    codes = ", ".join(issue.code for issue in report.errors[:5])
    if len(report.errors) > 5:
        codes += ", …"
    raise ManagedValidationError(f"Validation failed for {expect_type}: {codes}", report)


__all__ = [
    "ManagedValidationError",
    "assert_valid",
    "validate",
]
