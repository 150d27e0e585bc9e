"""Decoding and solving through the baseline day07 solver package."""

from __future__ import annotations

from pathlib import Path

import pytest

from contracts.errors import MalformedInputError
from orchestrator.router import resolve
from ports._loader import load_module

EXAMPLE_PATH = Path(__file__).resolve().parents[1] / "src" / "puzzles" / "day07" / "examples" / "part1_1.txt"


def _solver():
    resolved = resolve("day07", "solver", "dev", {})
    return load_module(resolved)


def test_descriptor_identifies_baseline_impl():
    module = _solver()
    assert module.DESCRIPTOR["impl_id"] == "baseline"
    assert module.DESCRIPTOR["title"] == "The Sum of Its Parts"


def test_parse_example_input():
    module = _solver()
    registry = module.parse(EXAMPLE_PATH.read_text(encoding="utf-8"))
    assert [task.label for task in registry.used()] == list("ABCDEF")
    assert module.part1(registry) == "CABDFE"

    schedule = module.part2(registry, 2, 0)
    assert (schedule.order, schedule.elapsed) == ("CABFDE", 15)


def test_blank_lines_and_surrounding_whitespace_are_ignored():
    module = _solver()
    text = "\n  Step A must be finished before step B can begin.  \n\n"
    assert list(module.iter_edges(text)) == [("A", "B")]


@pytest.mark.parametrize(
    "line",
    [
        "Step a must be finished before step B can begin.",
        "Step A must be finished before step B can begin",
        "Step AA must be finished before step B can begin.",
        "Step A must finish before step B can begin.",
        "garbage",
    ],
)
def test_malformed_lines_are_rejected_with_line_number(line):
    module = _solver()
    text = "Step C must be finished before step A can begin.\n" + line + "\n"
    with pytest.raises(MalformedInputError) as excinfo:
        module.parse(text)
    issue = excinfo.value.issue
    assert issue.code == "input.malformed_line"
    assert issue.path == "line[2]"


def test_port_solve_payload_shape():
    module = _solver()
    payload = module.port_solve(
        EXAMPLE_PATH.read_text(encoding="utf-8"),
        options={"workers": 2, "base_offset": 0},
    )
    assert payload["puzzle"] == "day07"
    assert payload["part1"] == "CABDFE"
    assert payload["part2"]["order"] == "CABFDE"
    assert payload["part2"]["elapsed"] == 15
    assert payload["part2"]["timeline"][0] == {"task": "C", "start": 0, "end": 3}


def test_port_solve_defaults_to_five_workers_and_sixty_seconds():
    module = _solver()
    payload = module.port_solve(EXAMPLE_PATH.read_text(encoding="utf-8"))
    assert payload["part2"]["workers"] == 5
    assert payload["part2"]["base_offset"] == 60
    # critical path C -> A -> D -> E
    assert payload["part2"]["elapsed"] == 63 + 61 + 64 + 65
