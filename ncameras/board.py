"""Board state: size and blocked (skylight) cells.

The board is the only place the blocked mask is edited. A running search
receives a plain nested-list snapshot, and while a driver holds the board lock
every edit is refused, so the mask a search sees never changes under it.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .oracle import Cell

MAX_BOARD_SIZE = 8


class BoardError(ValueError):
    """Raised for out-of-range sizes, coordinates, or mismatched masks."""


class BoardLockedError(RuntimeError):
    """Raised when the board is edited while a search is in flight."""


def create_grid(n: int) -> np.ndarray:
    """Return an all-open ``n×n`` boolean mask."""
    return np.zeros((n, n), dtype=bool)


class Board:
    """Square board with an editable mask of blocked cells.

    Parameters
    ----------
    n : int
        Side length, ``1 <= n <= MAX_BOARD_SIZE``.
    blocked : array-like, optional
        Initial ``n×n`` mask; truthy entries are blocked. Defaults to open.
    """

    def __init__(self, n: int, blocked: Optional[Sequence[Sequence[bool]]] = None):
        _check_size(n)
        self.n = n
        if blocked is None:
            self._blocked = create_grid(n)
        else:
            mask = np.asarray(blocked, dtype=bool)
            if mask.shape != (n, n):
                raise BoardError(f"Blocked mask has shape {mask.shape}, expected ({n}, {n})")
            self._blocked = mask.copy()
        self._locked = False

    @classmethod
    def from_cells(cls, n: int, cells: Iterable[Sequence[int]]) -> "Board":
        board = cls(n)
        for row, col in cells:
            board.block(row, col)
        return board

    # ------------------------------------------------------------------ state

    @property
    def locked(self) -> bool:
        return self._locked

    def lock(self) -> None:
        self._locked = True

    def unlock(self) -> None:
        self._locked = False

    @property
    def blocked(self) -> np.ndarray:
        """Read-only view of the mask."""
        view = self._blocked.view()
        view.flags.writeable = False
        return view

    def is_blocked(self, row: int, col: int) -> bool:
        self._check_cell(row, col)
        return bool(self._blocked[row, col])

    def blocked_cells(self) -> List[Cell]:
        rows, cols = np.nonzero(self._blocked)
        return [(int(r), int(c)) for r, c in zip(rows, cols)]

    def snapshot(self) -> List[List[bool]]:
        """Nested-list copy of the mask for handing to a search."""
        return [[bool(cell) for cell in line] for line in self._blocked]

    # -------------------------------------------------------------- mutation

    def toggle(self, row: int, col: int) -> bool:
        """Flip a cell and return its new blocked state."""
        self._check_editable()
        self._check_cell(row, col)
        self._blocked[row, col] = not self._blocked[row, col]
        return bool(self._blocked[row, col])

    def block(self, row: int, col: int) -> None:
        self._check_editable()
        self._check_cell(row, col)
        self._blocked[row, col] = True

    def unblock(self, row: int, col: int) -> None:
        self._check_editable()
        self._check_cell(row, col)
        self._blocked[row, col] = False

    def clear(self) -> None:
        self._check_editable()
        self._blocked[:, :] = False

    def resize(self, n: int) -> None:
        """Change the side length; the new board starts fully open."""
        self._check_editable()
        _check_size(n)
        self.n = n
        self._blocked = create_grid(n)

    # ------------------------------------------------------------- rendering

    def render_text(self, placed: Sequence[Cell] = ()) -> str:
        """Plain-text grid: ``C`` camera, ``#`` blocked, ``.`` open."""
        cameras = set(placed)
        lines = []
        for r in range(self.n):
            cells = []
            for c in range(self.n):
                if (r, c) in cameras:
                    cells.append("C")
                elif self._blocked[r, c]:
                    cells.append("#")
                else:
                    cells.append(".")
            lines.append(" ".join(cells))
        return "\n".join(lines)

    # -------------------------------------------------------------- helpers

    def _check_editable(self) -> None:
        if self._locked:
            raise BoardLockedError("Board cannot be edited while a search is running")

    def _check_cell(self, row: int, col: int) -> None:
        if not (0 <= row < self.n and 0 <= col < self.n):
            raise BoardError(f"Cell ({row}, {col}) is outside a {self.n}x{self.n} board")


def _check_size(n: int) -> None:
    if not isinstance(n, (int, np.integer)) or isinstance(n, bool):
        raise BoardError(f"Board size must be an integer, got {n!r}")
    if not 1 <= n <= MAX_BOARD_SIZE:
        raise BoardError(f"Board size must be between 1 and {MAX_BOARD_SIZE}, got {n}")


def parse_cell(token: str) -> Tuple[int, int]:
    """Parse ``"r,c"`` (or ``"r:c"``) into a cell tuple."""
    parts = token.replace(":", ",").split(",")
    if len(parts) != 2:
        raise BoardError(f"Invalid cell '{token}'; expected ROW,COL")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError as exc:
        raise BoardError(f"Invalid cell '{token}'; expected integers") from exc
