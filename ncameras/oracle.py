"""Conflict oracle for the N-camera placement problem.

Placements are encoded as a sequence of ``(row, col)`` pairs, one per committed
row. A candidate cell is rejected when it shares a column or a diagonal with a
placement already on the board; rows never collide because the search commits
exactly one camera per row.

The oracle reports *which* camera is responsible (the culprit) so that callers
can highlight it, not just whether the candidate is safe.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

REASON_COLUMN = "column"
REASON_DIAGONAL = "diagonal"

Cell = Tuple[int, int]


@dataclass(frozen=True)
class Conflict:
    """A rejected candidate: the placement that blocks it and why."""

    culprit: Cell
    reason: str


def find_conflict(placed: Sequence[Cell], row: int, col: int) -> Optional[Conflict]:
    """Return the first placement that attacks ``(row, col)``, or None.

    Entries are scanned in stored order. For each entry the column test runs
    before the diagonal test, so when several placements conflict the earliest
    inserted one is reported.
    """
    for r, c in placed:
        if c == col:
            return Conflict((r, c), REASON_COLUMN)
        if abs(r - row) == abs(c - col):
            return Conflict((r, c), REASON_DIAGONAL)
    return None


def is_safe(placed: Sequence[Cell], row: int, col: int) -> bool:
    return find_conflict(placed, row, col) is None
