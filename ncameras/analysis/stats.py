"""Typed result shapes and statistics helpers for the analysis pipeline.

Defines ``TypedDict`` structures for search summaries and provides utilities
to count events and aggregate statistics across runs.
"""
from __future__ import annotations

import math
import statistics
from typing import Any, Dict, Iterable, List, Optional, TypedDict

from ncameras.search import EventType, SearchEvent


class StatsSummary(TypedDict, total=False):
    count: int
    mean: Optional[float]
    median: Optional[float]
    std: Optional[float]
    min: Optional[float]
    max: Optional[float]
    q25: Optional[float]
    q75: Optional[float]
    range: Optional[float]


class EventCounts(TypedDict):
    TRY: int
    BLOCKED: int
    CONFLICT: int
    PLACE: int
    REMOVE: int
    FAIL: int
    SOLVED: int


class SearchSummary(TypedDict):
    n: int
    solved: bool
    events: int
    counts: EventCounts
    placement: List[List[int]]
    time: float


class MaskRunRecord(TypedDict):
    n: int
    run: int
    blocked_cells: int
    solved: bool
    events: int
    tries: int
    conflicts: int
    removes: int
    time: float


class SearchBounds(TypedDict):
    nodes: int
    checks: int


class ProgressPrinter:
    """Minimal, stdout-only progress reporter for long-running loops.

    Parameters
    ----------
    total : int
        Total number of steps expected. Values <= 0 are coerced to 1.
    label : str
        Short label printed in front of the progress counters.
    """

    def __init__(self, total: int, label: str):
        self.total = max(1, total)
        self.label = label

    def update(self, index: int, detail: str = "") -> None:
        percent = (index / self.total) * 100
        suffix = f" - {detail}" if detail else ""
        print(f"[{self.label}] {index}/{self.total} ({percent:.0f}%)" + suffix)


def count_events(events: Iterable[SearchEvent]) -> EventCounts:
    """Tally events by kind; every kind is present, possibly with 0."""
    counts: Dict[str, int] = {kind.value: 0 for kind in EventType}
    for event in events:
        counts[event.kind.value] += 1
    return counts  # type: ignore[return-value]


def search_bounds(n: int) -> SearchBounds:
    """Worst-case size of the search tree for an open ``n×n`` board.

    Row ``i`` offers at most ``n - i`` columns, so at most ``n!`` nodes are
    visited; each conflict check scans up to ``n`` placements, giving
    ``n * n!`` elementary checks.
    """
    nodes = math.factorial(max(n, 0))
    return {"nodes": nodes, "checks": max(n, 0) * nodes}


def compute_detailed_statistics(values: List[float]) -> StatsSummary:
    """Compute summary statistics for a numeric sequence.

    Returns a ``None``-filled structure with ``count`` 0 on empty input so
    that CSV writers always see the same keys. Uses population standard
    deviation.
    """
    if not values:
        return {
            "count": 0,
            "mean": None,
            "median": None,
            "std": None,
            "min": None,
            "max": None,
            "q25": None,
            "q75": None,
            "range": None,
        }

    sorted_vals = sorted(values)
    n = len(values)

    mean_val = statistics.mean(values)
    median_val = statistics.median(values)
    min_val = min(values)
    max_val = max(values)
    range_val = max_val - min_val
    std_val = statistics.pstdev(values) if n > 1 else 0

    q25 = sorted_vals[n // 4] if n >= 4 else min_val
    q75 = sorted_vals[3 * n // 4] if n >= 4 else max_val

    return {
        "count": n,
        "mean": mean_val,
        "median": median_val,
        "std": std_val,
        "min": min_val,
        "max": max_val,
        "q25": q25,
        "q75": q75,
        "range": range_val,
    }


METRICS = ["time", "events", "tries", "conflicts", "removes", "blocked_cells"]


def compute_grouped_statistics(
    results_list: List[Dict[str, Any]], success_key: str = "solved"
) -> Dict[str, Any]:
    """Aggregate metrics over all runs and by outcome (solved / failed).

    Returns rates (``solved_rate``, ``failed_rate``), counters
    (``total_runs``, ``solved``, ``failed``), and ``all_<metric>``,
    ``solved_<metric>``, ``failed_<metric>`` summaries for every metric in
    ``METRICS`` present in the records.
    """
    solved = [r for r in results_list if r.get(success_key, False)]
    failed = [r for r in results_list if not r.get(success_key, False)]
    total = len(results_list)

    stats: Dict[str, Any] = {
        "total_runs": total,
        "solved": len(solved),
        "failed": len(failed),
        "solved_rate": len(solved) / total if total else 0,
        "failed_rate": len(failed) / total if total else 0,
    }

    for prefix, group in (("all", results_list), ("solved", solved), ("failed", failed)):
        for metric in METRICS:
            if any(metric in r for r in group):
                values = [r[metric] for r in group if metric in r]
                stats[f"{prefix}_{metric}"] = compute_detailed_statistics(values)

    return stats
