"""Render a solved step schedule as a PDF Gantt chart."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from contracts.jsoncanon import jcs_sha256

DESCRIPTOR = {
    "puzzle": "day07",
    "title": "The Sum of Its Parts",
    "role": "printer",
    "impl_id": "baseline",
}

INCH_PER_CM = 0.3937007874
PAGE_WIDTH_CM = 29.7
LANE_HEIGHT_CM = 1.2
MIN_HEIGHT_CM = 6.0
BAR_COLOR = "#4c72b0"


def assign_lanes(timeline: Sequence[Mapping[str, Any]]) -> List[int]:
    """Return a worker lane for each timeline entry.

    Entries are placed on the lowest-numbered lane that is idle at their start
    time.  Lanes are a rendering concern; the scheduler itself does not track
    which worker ran a task.
    """

    order = sorted(range(len(timeline)), key=lambda idx: (timeline[idx]["start"], timeline[idx]["task"]))
    lane_free_at: List[int] = []
    lanes = [0] * len(timeline)
    for idx in order:
        entry = timeline[idx]
        for lane, free_at in enumerate(lane_free_at):
            if free_at <= entry["start"]:
                lanes[idx] = lane
                lane_free_at[lane] = entry["end"]
                break
        else:
            lanes[idx] = len(lane_free_at)
            lane_free_at.append(entry["end"])
    return lanes


def _render(pdf_path: Path, part2: Mapping[str, Any], lanes: Sequence[int], title: str) -> None:
    from matplotlib.backends.backend_pdf import PdfPages
    from matplotlib.figure import Figure

    timeline = part2["timeline"]
    lane_count = max(lanes, default=-1) + 1
    page_w_in = PAGE_WIDTH_CM * INCH_PER_CM
    page_h_in = max(MIN_HEIGHT_CM, LANE_HEIGHT_CM * (lane_count + 2)) * INCH_PER_CM

    with PdfPages(pdf_path) as pdf:
        fig = Figure(figsize=(page_w_in, page_h_in))
        ax = fig.subplots()
        for entry, lane in zip(timeline, lanes):
            width = entry["end"] - entry["start"]
            ax.broken_barh([(entry["start"], width)], (lane - 0.4, 0.8), facecolors=BAR_COLOR)
            ax.text(
                entry["start"] + width / 2,
                lane,
                entry["task"],
                ha="center",
                va="center",
                color="white",
                fontsize=8,
            )
        ax.set_yticks(range(lane_count))
        ax.set_yticklabels([f"Worker {lane + 1}" for lane in range(lane_count)])
        ax.invert_yaxis()
        ax.set_xlim(0, max(part2["elapsed"], 1))
        ax.set_xlabel("Elapsed seconds")
        ax.set_title(
            f"{title}: order {part2['order'] or 'none'}, "
            f"{part2['elapsed']}s on {part2['workers']} workers (offset {part2['base_offset']})"
        )
        fig.subplots_adjust(left=0.12, right=0.98, bottom=0.2, top=0.85)
        pdf.savefig(fig)


def port_export(payload: Dict[str, Any], *, output_dir: str | Path) -> Dict[str, Any]:
    """Write the Gantt chart for ``payload`` and return output metadata.

    The file name is derived from the canonical payload digest, so exporting
    the same result twice reuses the existing file.
    """

    if not isinstance(payload, dict):
        raise TypeError("payload must be a mapping")
    part2 = payload.get("part2")
    if not isinstance(part2, dict) or not isinstance(part2.get("timeline"), list):
        raise ValueError("payload must include part2 with a timeline")

    started = time.perf_counter()
    lanes = assign_lanes(part2["timeline"])

    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    digest = jcs_sha256(payload)
    pdf_path = out_dir / f"{payload.get('puzzle', DESCRIPTOR['puzzle'])}-{digest[7:15]}.pdf"
    if not pdf_path.exists():
        _render(pdf_path, part2, lanes, DESCRIPTOR["title"])

    return {
        "pdf_path": pdf_path.as_posix(),
        "time_ms": int((time.perf_counter() - started) * 1000),
        "lanes": max(lanes, default=-1) + 1,
    }


__all__ = ["DESCRIPTOR", "assign_lanes", "port_export"]
