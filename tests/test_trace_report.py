from __future__ import annotations

import json

from orchestrator import log as trace_log
from orchestrator.log import TraceLog, read_events
from tools.reports.trace_report import aggregate


def _write(path, events):
    path.write_text("\n".join(json.dumps(event) for event in events) + "\n", encoding="utf-8")


def test_append_event_writes_jsonl_under_dated_directory(tmp_path):
    trace_log.configure(tmp_path)
    path = trace_log.append_event({"event": "scheduler.assign", "task": "C"})
    trace_log.append_event({"event": "scheduler.retire", "task": "C", "at": 3})

    assert path == trace_log.current_log_path()
    assert path.parent.parent == tmp_path
    assert path.name == "trace_00.jsonl"
    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [line["event"] for line in lines] == ["scheduler.assign", "scheduler.retire"]
    assert all("ts" in line for line in lines)


def test_log_rotates_when_file_is_full(tmp_path):
    trace_log.configure(tmp_path, max_bytes=10)
    first = trace_log.append_event({"event": "scheduler.assign", "task": "A"})
    second = trace_log.append_event({"event": "scheduler.assign", "task": "B"})
    assert first.name == "trace_00.jsonl"
    assert second.name == "trace_01.jsonl"


def test_aggregate_summarises_runs(tmp_path):
    log_path = tmp_path / "trace.jsonl"
    _write(
        log_path,
        [
            {"event": "scheduler.assign", "run_id": "r1", "task": "C", "at": 0, "duration": 3},
            {"event": "scheduler.retire", "run_id": "r1", "task": "C", "at": 3},
            {"event": "scheduler.assign", "run_id": "r1", "task": "F", "at": 3, "duration": 6},
            {"event": "scheduler.retire", "run_id": "r1", "task": "F", "at": 9},
            {"event": "scheduler.assign", "run_id": "r2", "task": "A", "at": 0, "duration": 61},
            {"event": "scheduler.retire", "run_id": "r2", "task": "A", "at": 61},
            {"event": "other.event", "run_id": "r2"},
        ],
    )
    summary = aggregate([log_path], top=2)
    assert summary["total_events"] == 6
    assert summary["events"] == {"scheduler.assign": 3, "scheduler.retire": 3}
    assert summary["runs"] == 2
    assert summary["makespan"] == {"r1": 9, "r2": 61}
    assert summary["busiest_tasks"] == [("A", 61), ("F", 6)]
    assert json.loads(summary["canonical"])["runs"] == 2


def test_aggregate_skips_blank_lines(tmp_path):
    log_path = tmp_path / "trace.jsonl"
    log_path.write_text('\n{"event": "scheduler.retire", "at": 4}\n\n', encoding="utf-8")
    summary = aggregate([log_path])
    assert summary["makespan"] == {"unknown": 4}


def test_trace_log_instances_are_independent(tmp_path):
    first = TraceLog(tmp_path / "a")
    second = TraceLog(tmp_path / "b")
    first.append({"event": "scheduler.assign", "task": "A", "ts": "fixed"})
    second.append({"event": "scheduler.assign", "task": "B"})

    events = list(read_events(first.current))
    assert events == [{"event": "scheduler.assign", "task": "A", "ts": "fixed"}]
    assert second.current.parents[1] == tmp_path / "b"
