"""CSV export utilities for event logs, sweeps, and random-mask runs.

Filenames carry an optional run tag / date suffix according to
``ncameras.analysis.settings`` so repeated runs do not overwrite each other.
"""
from __future__ import annotations

import csv
import os
from typing import Dict, Iterable, List

from ncameras.search import EventType, SearchEvent

from . import settings
from .stats import MaskRunRecord, SearchSummary, compute_grouped_statistics, search_bounds


def _suffix() -> str:
    """Return ``_<tag>_<run id>`` per settings, or an empty string."""
    parts: List[str] = []
    if settings.RUN_TAG:
        parts.append(str(settings.RUN_TAG))
    if settings.DATE_IN_FILENAMES and settings.RUN_ID:
        parts.append(str(settings.RUN_ID))
    return ("_" + "_".join(parts)) if parts else ""


EVENT_FIELDS = ["step", "kind", "row", "col", "placed", "culprit", "reason"]


def save_event_log_to_csv(events: Iterable[SearchEvent], filename: str) -> str:
    """Write one row per event, in emission order. Returns the path."""
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(filename, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=EVENT_FIELDS)
        writer.writeheader()
        for step, event in enumerate(events, start=1):
            row = event.as_dict()
            row["step"] = step
            writer.writerow(row)
    return filename


def save_sweep_to_csv(results: Dict[int, SearchSummary], out_dir: str) -> str:
    """Write per-N event counts for the open-board sweep."""
    os.makedirs(out_dir, exist_ok=True)
    filename = os.path.join(out_dir, f"sweep_open_board{_suffix()}.csv")
    kinds = [kind.value for kind in EventType]
    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(
            ["n", "solved", "events"]
            + [f"{kind.lower()}_events" for kind in kinds]
            + ["worst_case_nodes", "placement", "time_seconds"]
        )
        for n in sorted(results):
            summary = results[n]
            placement = " ".join(f"{r}:{c}" for r, c in summary["placement"])
            writer.writerow(
                [n, summary["solved"], summary["events"]]
                + [summary["counts"][kind] for kind in kinds]  # type: ignore[literal-required]
                + [search_bounds(n)["nodes"], placement, f"{summary['time']:.6f}"]
            )
    print(f"Saved sweep summary: {filename}")
    return filename


MASK_FIELDS = ["n", "run", "blocked_cells", "solved", "events", "tries", "conflicts", "removes", "time"]


def save_mask_runs_to_csv(results: Dict[int, List[MaskRunRecord]], out_dir: str) -> str:
    """Write every random-mask run as a raw row."""
    os.makedirs(out_dir, exist_ok=True)
    filename = os.path.join(out_dir, f"raw_random_masks{_suffix()}.csv")
    with open(filename, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=MASK_FIELDS)
        writer.writeheader()
        for n in sorted(results):
            for record in results[n]:
                writer.writerow(record)
    print(f"Saved raw random-mask runs: {filename}")
    return filename


def save_mask_summary_to_csv(results: Dict[int, List[MaskRunRecord]], out_dir: str) -> str:
    """Write per-N aggregates (solve rate, mean/std of events) for random masks."""
    os.makedirs(out_dir, exist_ok=True)
    filename = os.path.join(out_dir, f"summary_random_masks{_suffix()}.csv")
    with open(filename, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(
            [
                "n",
                "total_runs",
                "solved_rate",
                "events_mean",
                "events_std",
                "events_max",
                "solved_events_mean",
                "failed_events_mean",
                "blocked_cells_mean",
            ]
        )
        for n in sorted(results):
            stats = compute_grouped_statistics([dict(r) for r in results[n]])
            all_events = stats.get("all_events", {})
            writer.writerow(
                [
                    n,
                    stats["total_runs"],
                    f"{stats['solved_rate']:.4f}",
                    all_events.get("mean"),
                    all_events.get("std"),
                    all_events.get("max"),
                    stats.get("solved_events", {}).get("mean"),
                    stats.get("failed_events", {}).get("mean"),
                    stats.get("all_blocked_cells", {}).get("mean"),
                ]
            )
    print(f"Saved random-mask summary: {filename}")
    return filename
