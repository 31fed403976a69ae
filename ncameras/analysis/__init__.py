"""
Analysis and orchestration package for the N-camera visualizer.

This package contains:
- settings: global knobs (board defaults, playback pacing, experiment sizes)
- stats: typed summaries, event counting, and aggregation helpers
- experiments: runners for open-board sweeps and random-mask batches
- reporting: CSV exports for event logs and experiment results
- plots: all visualization utilities
- cli: console replay, pipeline entry points, and argument parser
"""

from . import settings as settings  # re-export for convenience
from .stats import (
    EventCounts,
    MaskRunRecord,
    ProgressPrinter,
    SearchSummary,
    StatsSummary,
    compute_detailed_statistics,
    compute_grouped_statistics,
    count_events,
    search_bounds,
)

__all__ = [
    # types
    "StatsSummary",
    "EventCounts",
    "SearchSummary",
    "MaskRunRecord",
    # utils
    "compute_detailed_statistics",
    "compute_grouped_statistics",
    "count_events",
    "search_bounds",
    "ProgressPrinter",
    # settings module
    "settings",
]
