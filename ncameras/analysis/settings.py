"""Global settings for the N-camera playback and analysis pipeline.

This module centralizes tunable constants used across the orchestration code.
Values can be overridden at runtime via the configuration loader in
`ncameras.analysis.cli.apply_configuration`.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from ncameras.board import MAX_BOARD_SIZE as _MAX_BOARD_SIZE
from ncameras.driver import DEFAULT_HISTORY_LIMIT, SPEED_MAP

# Board sizes swept by the analysis (the board itself allows at most 8)
N_VALUES: List[int] = list(range(1, _MAX_BOARD_SIZE + 1))

MAX_BOARD_SIZE: int = _MAX_BOARD_SIZE

# Board used by the interactive replay when none is given on the command line
DEFAULT_N: int = 4
DEFAULT_BLOCKED_CELLS: List[List[int]] = []

# Playback pacing ("slow" | "medium" | "fast") and event-log window
DEFAULT_SPEED: str = "slow"
HISTORY_LIMIT: int = DEFAULT_HISTORY_LIMIT

# Random-mask experiments
RUNS_RANDOM_MASKS: int = 30       # masks per N
BLOCK_DENSITY: float = 0.15       # probability that a cell is blocked
RANDOM_SEED: Optional[int] = 42   # None = nondeterministic masks

# Output directory for CSV and charts
OUT_DIR: str = "results_ncameras"

# When True, artifacts include a datestamp suffix (e.g., _20251113-142530)
DATE_IN_FILENAMES: bool = True

# Unique run identifier used for filename stamping; set once at import time.
RUN_ID: str = datetime.now().strftime("%Y%m%d-%H%M%S")

# Optional run label appended to filenames
RUN_TAG: Optional[str] = None


def set_playback(speed: str = "slow", history_limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        """Configure playback pacing and the retained event-log length.

        Parameters
        - speed: one of the ``SPEED_MAP`` keys.
        - history_limit: number of most recent events kept by the driver
            (values below 1 are coerced to 1).

        Side effects
        - Updates module-level globals and prints a concise summary.
        """
        global DEFAULT_SPEED, HISTORY_LIMIT
        if speed not in SPEED_MAP:
                raise ValueError(f"Unknown speed '{speed}'. Allowed: {', '.join(SPEED_MAP)}")
        DEFAULT_SPEED = speed
        HISTORY_LIMIT = max(1, int(history_limit))

        print("Playback settings configured:")
        print(f"   - Speed: {DEFAULT_SPEED} ({SPEED_MAP[DEFAULT_SPEED]} ms/step)")
        print(f"   - History: last {HISTORY_LIMIT} events")
