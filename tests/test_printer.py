from __future__ import annotations

from orchestrator.router import resolve
from ports import printer_port
from ports._loader import load_module

EXAMPLE_TIMELINE = [
    {"task": "C", "start": 0, "end": 3},
    {"task": "A", "start": 3, "end": 4},
    {"task": "B", "start": 4, "end": 6},
    {"task": "F", "start": 3, "end": 9},
    {"task": "D", "start": 6, "end": 10},
    {"task": "E", "start": 10, "end": 15},
]


def _printer():
    return load_module(resolve("day07", "printer", "dev", {}))


def _payload(timeline=EXAMPLE_TIMELINE, order="CABFDE", elapsed=15) -> dict:
    return {
        "puzzle": "day07",
        "impl": "baseline",
        "part1": "CABDFE" if order else "",
        "part2": {
            "order": order,
            "elapsed": elapsed,
            "workers": 2,
            "base_offset": 0,
            "timeline": list(timeline),
        },
    }


def test_assign_lanes_uses_lowest_idle_lane():
    lanes = _printer().assign_lanes(EXAMPLE_TIMELINE)
    assert lanes == [0, 0, 0, 1, 0, 0]


def test_assign_lanes_reuses_lane_freed_at_start_time():
    timeline = [
        {"task": "A", "start": 0, "end": 2},
        {"task": "B", "start": 0, "end": 3},
        {"task": "C", "start": 2, "end": 5},
    ]
    assert _printer().assign_lanes(timeline) == [0, 1, 0]


def test_export_writes_pdf(tmp_path):
    result, resolved = printer_port.export_schedule("day07", _payload(), output_dir=tmp_path, env={})
    assert resolved.module_id == "day07:printer/baseline"
    assert result["lanes"] == 2
    pdf = tmp_path / result["pdf_path"].rsplit("/", 1)[-1]
    assert pdf.exists()
    assert pdf.read_bytes().startswith(b"%PDF")


def test_export_of_empty_schedule(tmp_path):
    result, _ = printer_port.export_schedule(
        "day07", _payload(timeline=[], order="", elapsed=0), output_dir=tmp_path, env={}
    )
    assert result["lanes"] == 0


def test_same_payload_maps_to_same_file(tmp_path):
    first, _ = printer_port.export_schedule("day07", _payload(), output_dir=tmp_path, env={})
    second, _ = printer_port.export_schedule("day07", _payload(), output_dir=tmp_path, env={})
    assert first["pdf_path"] == second["pdf_path"]
