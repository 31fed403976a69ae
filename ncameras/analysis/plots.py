"""Visualization utilities for analysis outputs.

Overview
--------
Plotting helpers that turn sweep summaries, random-mask runs, and single
event logs into PNG charts. Data is shaped with pandas, drawn with
matplotlib/seaborn, and written into ``out_dir``.

Chart map
---------
- 01_event_counts_vs_N.png — stacked bars of events per kind vs N
    - X: N (board size). Y: number of events (TRY, CONFLICT, PLACE, ...).
- 02_events_vs_worst_case.png — emitted events vs the n! node bound (log)
    - What: how far pruning keeps the real search below the worst case.
- 03_random_mask_events_N.png — distribution of events per N on random masks
    - Boxes split by outcome (solved / no placement).
- 04_random_mask_solved_rate.png — share of random masks admitting a placement
- visits_heatmap.png — how often each cell was tried in one search
    - Blocked cells are masked out; the final placement is outlined.

All functions return the path(s) written and print a short confirmation.
"""
from __future__ import annotations

import os
from typing import Dict, List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from ncameras.search import EventType, SearchEvent

from . import settings
from .stats import MaskRunRecord, SearchSummary, search_bounds

EVENT_COLORS = {
    "TRY": "#5599ff",
    "BLOCKED": "#777777",
    "CONFLICT": "#ff5555",
    "PLACE": "#22dd88",
    "REMOVE": "#ffaa33",
    "FAIL": "#aa2222",
    "SOLVED": "#ffdd44",
}


def _date_suffix() -> str:
    parts: List[str] = []
    if settings.RUN_TAG:
        parts.append(str(settings.RUN_TAG))
    if settings.DATE_IN_FILENAMES and settings.RUN_ID:
        parts.append(str(settings.RUN_ID))
    return ("_" + "_".join(parts)) if parts else ""


def sweep_to_frame(results: Dict[int, SearchSummary]) -> pd.DataFrame:
    """Wide frame: one row per N, one column per event kind."""
    rows = []
    for n in sorted(results):
        row = {"n": n, "solved": results[n]["solved"], "events": results[n]["events"]}
        row.update(results[n]["counts"])
        rows.append(row)
    return pd.DataFrame(rows).set_index("n")


def plot_sweep(results: Dict[int, SearchSummary], out_dir: str) -> List[str]:
    """Charts 01 and 02 for an open-board sweep."""
    os.makedirs(out_dir, exist_ok=True)
    suffix = _date_suffix()
    frame = sweep_to_frame(results)
    kinds = [kind.value for kind in EventType]
    written: List[str] = []

    fig, ax = plt.subplots(figsize=(12, 8))
    frame[kinds].plot(kind="bar", stacked=True, ax=ax, color=[EVENT_COLORS[k] for k in kinds])
    ax.set_xlabel("N (board size)", fontsize=12)
    ax.set_ylabel("Events emitted", fontsize=12)
    ax.set_title("Search Events vs Board Size\n(open board, first placement)", fontsize=14)
    ax.grid(True, axis="y", alpha=0.7)
    for i, (n, solved) in enumerate(frame["solved"].items()):
        label = "ok" if solved else "none"
        ax.annotate(label, (i, frame.loc[n, "events"]), textcoords="offset points", xytext=(0, 5), ha="center", fontsize=9)
    fname = os.path.join(out_dir, f"01_event_counts_vs_N{suffix}.png")
    fig.savefig(fname, bbox_inches="tight", dpi=150)
    plt.close(fig)
    print(f"Saved event-count chart: {fname}")
    written.append(fname)

    n_values = list(frame.index)
    bound = [max(search_bounds(n)["nodes"], 1) for n in n_values]
    fig, ax = plt.subplots(figsize=(12, 8))
    ax.semilogy(n_values, np.maximum(frame["events"].to_numpy(), 1), marker="o", linewidth=2, label="Events emitted")
    ax.semilogy(n_values, np.maximum(frame["TRY"].to_numpy(), 1), marker="s", linewidth=2, label="TRY events")
    ax.semilogy(n_values, bound, linestyle="--", linewidth=2, label="n! worst-case nodes")
    ax.set_xlabel("N (board size)", fontsize=12)
    ax.set_ylabel("Count (log scale)", fontsize=12)
    ax.set_title("Observed Search Effort vs Worst-Case Bound", fontsize=14)
    ax.set_xticks(n_values)
    ax.legend(fontsize=11)
    ax.grid(True, alpha=0.7)
    fname = os.path.join(out_dir, f"02_events_vs_worst_case{suffix}.png")
    fig.savefig(fname, bbox_inches="tight", dpi=150)
    plt.close(fig)
    print(f"Saved worst-case comparison chart: {fname}")
    written.append(fname)
    return written


def plot_mask_runs(results: Dict[int, List[MaskRunRecord]], out_dir: str) -> List[str]:
    """Charts 03 and 04 for random-mask experiments."""
    os.makedirs(out_dir, exist_ok=True)
    suffix = _date_suffix()
    frame = pd.DataFrame([record for n in sorted(results) for record in results[n]])
    written: List[str] = []
    if frame.empty:
        print("Random-mask plots skipped: no runs recorded.")
        return written
    frame["outcome"] = np.where(frame["solved"], "solved", "no placement")

    fig, ax = plt.subplots(figsize=(12, 8))
    sns.boxplot(data=frame, x="n", y="events", hue="outcome", ax=ax)
    ax.set_yscale("log")
    ax.set_xlabel("N (board size)", fontsize=12)
    ax.set_ylabel("Events emitted (log scale)", fontsize=12)
    ax.set_title(f"Search Events on Random Masks\n(density {settings.BLOCK_DENSITY:.2f})", fontsize=14)
    fname = os.path.join(out_dir, f"03_random_mask_events_N{suffix}.png")
    fig.savefig(fname, bbox_inches="tight", dpi=150)
    plt.close(fig)
    print(f"Saved random-mask events chart: {fname}")
    written.append(fname)

    rates = frame.groupby("n")["solved"].mean().reset_index()
    fig, ax = plt.subplots(figsize=(12, 8))
    sns.barplot(data=rates, x="n", y="solved", ax=ax, color=EVENT_COLORS["PLACE"])
    ax.set_ylim(0, 1.05)
    ax.set_xlabel("N (board size)", fontsize=12)
    ax.set_ylabel("Solved rate", fontsize=12)
    ax.set_title("Share of Random Masks with a Valid Placement", fontsize=14)
    fname = os.path.join(out_dir, f"04_random_mask_solved_rate{suffix}.png")
    fig.savefig(fname, bbox_inches="tight", dpi=150)
    plt.close(fig)
    print(f"Saved solved-rate chart: {fname}")
    written.append(fname)
    return written


def visit_counts(events: Sequence[SearchEvent], n: int) -> np.ndarray:
    """Number of TRY events per cell."""
    counts = np.zeros((n, n), dtype=int)
    for event in events:
        if event.kind is EventType.TRY:
            counts[event.row, event.col] += 1
    return counts


def plot_visit_heatmap(
    events: Sequence[SearchEvent],
    n: int,
    blocked: Sequence[Sequence[bool]],
    filename: str,
    title: Optional[str] = None,
) -> str:
    """Heatmap of TRY visits per cell, with blocked cells masked out."""
    directory = os.path.dirname(filename)
    if directory:
        os.makedirs(directory, exist_ok=True)
    counts = visit_counts(events, n)
    mask = np.asarray(blocked, dtype=bool).reshape(n, n)

    fig, ax = plt.subplots(figsize=(max(4, n), max(4, n)))
    sns.heatmap(counts, mask=mask, annot=True, fmt="d", cmap="Blues", cbar=False, linewidths=0.5, square=True, ax=ax)
    final = events[-1] if events else None
    if final is not None and final.kind is EventType.SOLVED:
        for r, c in final.placed:
            ax.add_patch(plt.Rectangle((c, r), 1, 1, fill=False, edgecolor=EVENT_COLORS["SOLVED"], linewidth=3))
    ax.set_xlabel("col")
    ax.set_ylabel("row")
    ax.set_title(title or f"Cells tried (N={n}, {len(events)} events)")
    fig.savefig(filename, bbox_inches="tight", dpi=150)
    plt.close(fig)
    print(f"Saved visit heatmap: {filename}")
    return filename
