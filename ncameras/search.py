"""Instrumented backtracking search for the N-camera placement problem.

The search places one camera per row, scanning columns left to right, and
backtracks when a row runs out of safe columns. Unlike a plain solver it does
not only return an answer: every decision is reported as a ``SearchEvent`` so
that a driver can animate, pause, or log the search.

Implementation overview
-----------------------
- ``iter_search_events`` is a generator. Each ``next()`` resumes the search
  until exactly one more event is ready. When the search ends, the generator
  returns the success flag (available as ``StopIteration.value``).
- Recursion is replaced by an explicit stack of ``_Frame`` records, one per
  row currently being scanned, mirroring the depth of the recursive
  formulation. A frame remembers the next column to try and whether it
  currently holds a committed placement.
- ``placed`` is a stack: entries are only appended and popped at the tail, so
  ``placed[i]`` always belongs to row ``i``.

Event contract
--------------
- TRY(row, col): (row, col) is about to be checked against ``placed``.
- BLOCKED(row, col): the cell is statically blocked; skipped without a check.
- CONFLICT(row, col, culprit, reason): the cell is attacked by ``culprit``.
- PLACE(row, col): the cell was accepted; the snapshot includes it.
- REMOVE(row, col): backtracking; the snapshot no longer includes it.
- SOLVED: terminal success; the snapshot holds ``n`` placements.
- FAIL(row): terminal failure; emitted once when row 0 is exhausted.

Every event carries ``placed`` as an immutable tuple copy, so snapshots never
change after they are handed out.

Determinism
-----------
Columns are tried in increasing order and the oracle reports the earliest
inserted culprit, so equal ``(n, blocked)`` inputs always produce identical
event sequences.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from time import perf_counter
from typing import Any, Dict, Generator, Iterator, List, Optional, Sequence, Tuple

from .oracle import Cell, find_conflict

Placement = Tuple[Cell, ...]


class EventType(str, Enum):
    TRY = "TRY"
    BLOCKED = "BLOCKED"
    CONFLICT = "CONFLICT"
    PLACE = "PLACE"
    REMOVE = "REMOVE"
    FAIL = "FAIL"
    SOLVED = "SOLVED"


@dataclass(frozen=True)
class SearchEvent:
    """One atomic search decision together with a copy of the placement."""

    kind: EventType
    row: Optional[int]
    col: Optional[int]
    placed: Placement
    culprit: Optional[Cell] = None
    reason: Optional[str] = None

    @property
    def cell(self) -> Optional[Cell]:
        if self.row is None or self.col is None:
            return None
        return (self.row, self.col)

    def as_dict(self) -> Dict[str, Any]:
        """Flatten the event into a dict suitable for CSV rows."""
        return {
            "kind": self.kind.value,
            "row": self.row,
            "col": self.col,
            "placed": " ".join(f"{r}:{c}" for r, c in self.placed),
            "culprit": f"{self.culprit[0]}:{self.culprit[1]}" if self.culprit else "",
            "reason": self.reason or "",
        }


@dataclass
class _Frame:
    """Mutable stack frame for one row of the search."""

    row: int
    next_col: int = 0
    committed: bool = False


def iter_search_events(
    n: int, blocked: Sequence[Sequence[bool]]
) -> Generator[SearchEvent, None, bool]:
    """Yield the search events for an ``n``-row board and return success.

    Parameters
    ----------
    n : int
        Board dimension (number of rows and columns).
    blocked : n×n boolean mask
        ``blocked[row][col]`` truthy means no camera may be placed there. The
        mask must not change while the generator is alive.

    Returns
    -------
    bool
        Via ``StopIteration.value``: True after SOLVED, False after FAIL.
    """
    placed: List[Cell] = []
    stack: List[_Frame] = []
    entering: Optional[int] = 0

    while True:
        if entering is not None:
            row = entering
            entering = None
            if len(placed) == n:
                yield SearchEvent(EventType.SOLVED, None, None, tuple(placed))
                return True
            if row >= n:
                # placed holds one entry per row above, so this needs n < 0
                yield SearchEvent(EventType.FAIL, row, None, tuple(placed))
                return False
            stack.append(_Frame(row))
            continue

        if not stack:
            break

        frame = stack[-1]
        row = frame.row

        if frame.committed:
            # The row below was exhausted; undo this row's choice.
            _, col = placed.pop()
            frame.committed = False
            yield SearchEvent(EventType.REMOVE, row, col, tuple(placed))
            continue

        if frame.next_col >= n:
            stack.pop()
            continue

        col = frame.next_col
        frame.next_col += 1

        if blocked[row][col]:
            yield SearchEvent(EventType.BLOCKED, row, col, tuple(placed))
            continue

        yield SearchEvent(EventType.TRY, row, col, tuple(placed))

        conflict = find_conflict(placed, row, col)
        if conflict is not None:
            yield SearchEvent(
                EventType.CONFLICT,
                row,
                col,
                tuple(placed),
                culprit=conflict.culprit,
                reason=conflict.reason,
            )
            continue

        placed.append((row, col))
        frame.committed = True
        yield SearchEvent(EventType.PLACE, row, col, tuple(placed))
        entering = row + 1

    yield SearchEvent(EventType.FAIL, 0, None, tuple(placed))
    return False


class CameraSearch:
    """Pull-based stepper over ``iter_search_events``.

    Each ``step()`` advances the search by exactly one event. ``solved`` is
    set as soon as the terminal SOLVED or FAIL event is handed out; after that
    ``step()`` returns None.
    Instances are single-use: to run again, build a new one.
    """

    def __init__(self, n: int, blocked: Sequence[Sequence[bool]]):
        self.n = n
        # Private copy: edits to the caller's mask cannot reach a live search.
        self.blocked = [[bool(cell) for cell in line] for line in blocked]
        self._events = iter_search_events(n, self.blocked)
        self.solved: Optional[bool] = None
        self.last_event: Optional[SearchEvent] = None
        self.steps = 0

    @property
    def done(self) -> bool:
        return self.solved is not None

    @property
    def placed(self) -> Placement:
        """Current partial placement as of the last emitted event."""
        if self.last_event is None:
            return ()
        return self.last_event.placed

    def step(self) -> Optional[SearchEvent]:
        if self.done:
            return None
        try:
            event = next(self._events)
        except StopIteration as stop:
            self.solved = bool(stop.value)
            return None
        self.last_event = event
        self.steps += 1
        if event.kind is EventType.SOLVED:
            self.solved = True
        elif event.kind is EventType.FAIL and event.row == 0:
            # Row 0 exhausted: nothing is left to resume.
            self.solved = False
        return event

    def __iter__(self) -> Iterator[SearchEvent]:
        while True:
            event = self.step()
            if event is None:
                return
            yield event


def find_first_placement(
    n: int, blocked: Sequence[Sequence[bool]]
) -> Tuple[Optional[Placement], int, float]:
    """Run a search to completion.

    Returns
    -------
    (placement, events_emitted, elapsed_seconds)
        ``placement`` is the SOLVED snapshot, or None when no placement exists.
    """
    start = perf_counter()
    search = CameraSearch(n, blocked)
    for _ in search:
        pass
    placement = search.placed if search.solved else None
    return placement, search.steps, perf_counter() - start
