"""Experiment runners: drain searches and shape the results.

Runners never render anything; they produce ``SearchSummary`` and
``MaskRunRecord`` dictionaries that the reporting and plotting modules
consume.
"""
from __future__ import annotations

from time import perf_counter
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ncameras.board import create_grid
from ncameras.search import CameraSearch, SearchEvent

from .stats import MaskRunRecord, ProgressPrinter, SearchSummary, count_events


def collect_events(n: int, blocked: Sequence[Sequence[bool]]) -> Tuple[List[SearchEvent], bool]:
    """Run a search to the end and return ``(events, solved)``."""
    search = CameraSearch(n, blocked)
    events = list(search)
    return events, bool(search.solved)


def summarize_search(n: int, blocked: Optional[Sequence[Sequence[bool]]] = None) -> SearchSummary:
    """Run one search and summarize its event counts and outcome."""
    if blocked is None:
        blocked = create_grid(n)
    start = perf_counter()
    events, solved = collect_events(n, blocked)
    elapsed = perf_counter() - start
    placement = [list(cell) for cell in events[-1].placed] if solved else []
    return {
        "n": n,
        "solved": solved,
        "events": len(events),
        "counts": count_events(events),
        "placement": placement,
        "time": elapsed,
    }


def run_open_board_sweep(N_values: List[int], progress_label: str = "Open-board sweep") -> Dict[int, SearchSummary]:
    """Summarize the search on a fully open board for every N."""
    results: Dict[int, SearchSummary] = {}
    progress = ProgressPrinter(len(N_values), progress_label)
    for index, n in enumerate(N_values, start=1):
        summary = summarize_search(n)
        results[n] = summary
        outcome = "solved" if summary["solved"] else "no placement"
        progress.update(index, f"N={n}: {outcome}, {summary['events']} events")
    return results


def random_mask(n: int, density: float, rng: np.random.Generator) -> np.ndarray:
    """Draw an ``n×n`` mask where each cell is blocked with probability ``density``."""
    if not 0.0 <= density <= 1.0:
        raise ValueError(f"Block density must be within [0, 1], got {density}")
    return rng.random((n, n)) < density


def run_random_mask_experiments(
    N_values: List[int],
    runs: int,
    density: float,
    seed: Optional[int] = None,
    progress_label: str = "Random masks",
) -> Dict[int, List[MaskRunRecord]]:
    """Run ``runs`` searches per N, each on a freshly drawn blocked mask.

    A single seeded generator is shared across all N so the whole batch is
    reproducible for a fixed ``seed``.
    """
    rng = np.random.default_rng(seed)
    results: Dict[int, List[MaskRunRecord]] = {}
    progress = ProgressPrinter(len(N_values), progress_label)
    for index, n in enumerate(N_values, start=1):
        records: List[MaskRunRecord] = []
        for run in range(runs):
            mask = random_mask(n, density, rng)
            start = perf_counter()
            events, solved = collect_events(n, mask)
            elapsed = perf_counter() - start
            counts = count_events(events)
            records.append(
                {
                    "n": n,
                    "run": run,
                    "blocked_cells": int(mask.sum()),
                    "solved": solved,
                    "events": len(events),
                    "tries": counts["TRY"],
                    "conflicts": counts["CONFLICT"],
                    "removes": counts["REMOVE"],
                    "time": elapsed,
                }
            )
        results[n] = records
        solved_count = sum(1 for r in records if r["solved"])
        progress.update(index, f"N={n}: {solved_count}/{runs} solved")
    return results

