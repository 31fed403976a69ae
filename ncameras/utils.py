"""Utility helpers for checking camera placements.

Placements are sequences of ``(row, col)`` pairs. These helpers are used to
verify search output independently of the oracle that produced it.
"""

from __future__ import annotations

from collections import Counter
from typing import Optional, Sequence

from .oracle import Cell


def conflicts(placed: Sequence[Cell]) -> int:
    """Count attacking camera pairs (shared row, column or diagonal) in O(N).

    Uses counters per row, column and both diagonal directions instead of
    comparing every pair.
    """
    row_count: Counter[int] = Counter()
    col_count: Counter[int] = Counter()
    diag1: Counter[int] = Counter()
    diag2: Counter[int] = Counter()

    for row, col in placed:
        row_count[row] += 1
        col_count[col] += 1
        diag1[row - col] += 1
        diag2[row + col] += 1

    def _pairs(counter: Counter[int]) -> int:
        total = 0
        for count in counter.values():
            if count > 1:
                total += count * (count - 1) // 2
        return total

    return _pairs(row_count) + _pairs(col_count) + _pairs(diag1) + _pairs(diag2)


def conflicts_on2(placed: Sequence[Cell]) -> int:
    """Reference O(N^2) pair count, for cross-checking ``conflicts``."""
    count = 0
    for i in range(len(placed)):
        r1, c1 = placed[i]
        for j in range(i + 1, len(placed)):
            r2, c2 = placed[j]
            if r1 == r2 or c1 == c2 or abs(r1 - r2) == abs(c1 - c2):
                count += 1
    return count


def is_valid_placement(
    placed: Sequence[Cell],
    n: int,
    blocked: Optional[Sequence[Sequence[bool]]] = None,
) -> bool:
    """Return True if ``placed`` is a complete, conflict-free placement.

    Contract
    - Exactly ``n`` cameras, all inside the board
    - No camera on a blocked cell (when ``blocked`` is given)
    - Zero attacking pairs
    """
    if len(placed) != n:
        return False
    for row, col in placed:
        if not (0 <= row < n and 0 <= col < n):
            return False
        if blocked is not None and blocked[row][col]:
            return False
    return conflicts(placed) == 0
