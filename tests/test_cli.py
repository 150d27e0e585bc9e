from __future__ import annotations

import json
from pathlib import Path

import project_config
from orchestrator import orchestrator
from tools.cli import puzzle

EXAMPLE_PATH = Path(__file__).resolve().parents[1] / "src" / "puzzles" / "day07" / "examples" / "part1_1.txt"


def test_run_prints_json_summary(capsys):
    assert puzzle.main(["run", str(EXAMPLE_PATH), "--profile", "example"]) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["part1"] == "CABDFE"
    assert summary["part2"] == {"order": "CABFDE", "elapsed": 15}


def test_run_accepts_worker_flags(capsys):
    argv = ["run", str(EXAMPLE_PATH), "--workers", "1", "--base-offset", "0"]
    assert puzzle.main(argv) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["part2"]["elapsed"] == 21


def test_malformed_input_exits_with_status_two(tmp_path, capsys):
    bad = tmp_path / "bad.txt"
    bad.write_text("Step C must be finished before step A can begin.\nnot a step\n", encoding="utf-8")
    assert puzzle.main(["run", str(bad)]) == 2
    assert "line 2" in capsys.readouterr().err
    assert orchestrator.main([str(bad)]) == 2


def test_bench_reports_timings(capsys):
    argv = ["bench", str(EXAMPLE_PATH), "--repeats", "3", "--profile", "example"]
    assert puzzle.main(argv) == 0
    report = json.loads(capsys.readouterr().out)
    assert report["repeats"] == 3
    assert (report["workers"], report["base_offset"]) == (2, 0)
    assert set(report["part2"]) == {"p50_ms", "p95_ms", "max_ms"}


def test_report_trace_aggregates_logs(tmp_path, capsys):
    log = tmp_path / "20240101" / "trace_00.jsonl"
    log.parent.mkdir()
    log.write_text(
        json.dumps({"event": "scheduler.retire", "run_id": "r1", "task": "C", "at": 3}) + "\n",
        encoding="utf-8",
    )
    assert puzzle.main(["report-trace", str(tmp_path)]) == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["makespan"] == {"r1": 3}


def test_orchestrator_main_prints_both_answers(capsys):
    assert orchestrator.main([str(EXAMPLE_PATH), "--profile", "example"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["CABDFE", "CABFDE 15"]


def test_bench_without_a_configured_puzzle_exits_with_status_two(tmp_path, monkeypatch, capsys):
    config = tmp_path / "config.toml"
    config.write_text("[bench]\nrepeats = 1\n", encoding="utf-8")
    monkeypatch.setenv("PUZZLE_CONFIG_PATH", str(config))
    monkeypatch.delenv("PUZZLE_KIND", raising=False)
    project_config.reload()
    try:
        assert puzzle.main(["bench", str(EXAMPLE_PATH)]) == 2
    finally:
        monkeypatch.delenv("PUZZLE_CONFIG_PATH")
        project_config.reload()
    assert "run.puzzle_kind" in capsys.readouterr().err
