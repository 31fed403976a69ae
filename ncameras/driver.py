"""Step driver: paces a search, keeps a short history, tracks what to show.

The driver owns everything the search deliberately leaves out: timing between
steps, the bounded event history, the "current view" (which cell is being
tried, which camera is the culprit, ...), and the board lock that keeps the
mask frozen while a search runs.
"""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, List, Optional

from .board import Board
from .oracle import REASON_COLUMN, Cell
from .search import CameraSearch, EventType, Placement, SearchEvent

# Delay between steps, in milliseconds.
SPEED_MAP = {"slow": 1000, "medium": 350, "fast": 80}

DEFAULT_HISTORY_LIMIT = 25

STATUS_IDLE = "idle"
STATUS_TRYING = "trying"
STATUS_PLACED = "placed"
STATUS_CONFLICT = "conflict"
STATUS_BACKTRACK = "backtrack"
STATUS_BLOCKED = "blocked"
STATUS_SOLVED = "solved"
STATUS_FAILED = "failed"


@dataclass
class PlaybackView:
    """What a renderer needs to draw the board after the latest event."""

    placed: Placement = ()
    try_cell: Optional[Cell] = None
    conflict_cell: Optional[Cell] = None
    culprit: Optional[Cell] = None
    reason: Optional[str] = None
    current_row: Optional[int] = None
    status: str = STATUS_IDLE
    step: Optional[SearchEvent] = field(default=None, repr=False)

    def apply(self, event: SearchEvent) -> None:
        kind = event.kind
        if kind is EventType.BLOCKED:
            # Keep the placement and highlights; only move the cursor.
            self.try_cell = event.cell
            self.current_row = event.row
            self.status = STATUS_BLOCKED
            self.step = event
            return
        if kind is EventType.FAIL:
            # The last board stays on screen; only the status changes.
            self.status = STATUS_FAILED
            self.step = event
            return

        self.placed = event.placed
        self.try_cell = None
        self.conflict_cell = None
        self.culprit = None
        self.reason = None
        self.current_row = event.row
        self.step = event

        if kind is EventType.TRY:
            self.try_cell = event.cell
            self.status = STATUS_TRYING
        elif kind is EventType.PLACE:
            self.status = STATUS_PLACED
        elif kind is EventType.CONFLICT:
            self.conflict_cell = event.cell
            self.culprit = event.culprit
            self.reason = event.reason
            self.status = STATUS_CONFLICT
        elif kind is EventType.REMOVE:
            self.status = STATUS_BACKTRACK
        elif kind is EventType.SOLVED:
            self.current_row = None
            self.status = STATUS_SOLVED


def describe_event(event: SearchEvent) -> str:
    """One-line, fixed-width description for event logs."""
    kind = event.kind
    cell = f"[{event.row},{event.col}]"
    if kind is EventType.TRY:
        return f"-> Try      {cell}"
    if kind is EventType.PLACE:
        return f"+  Place    {cell} -> row {event.row + 1}"
    if kind is EventType.CONFLICT:
        what = "same col" if event.reason == REASON_COLUMN else "diagonal"
        culprit = f"[{event.culprit[0]},{event.culprit[1]}]" if event.culprit else "[]"
        return f"x  Conflict {cell} {what} <- {culprit}"
    if kind is EventType.REMOVE:
        return f"<- Remove   {cell} backtrack"
    if kind is EventType.BLOCKED:
        return f"/  Blocked  {cell}"
    if kind is EventType.SOLVED:
        return f"*  SOLVED   {len(event.placed)} cameras placed"
    return f"x  Failed   row {event.row}"


class StepDriver:
    """Drive a ``CameraSearch`` over a ``Board`` one event at a time.

    Parameters
    ----------
    board : Board
        Board to search; it is locked from ``start()`` until the search ends
        or the driver is stopped.
    speed : str
        Key of ``SPEED_MAP`` used by ``run()`` to pace steps.
    history_limit : int
        Number of most recent events retained (newest first).
    """

    def __init__(self, board: Board, speed: str = "slow", history_limit: int = DEFAULT_HISTORY_LIMIT):
        self.board = board
        self.set_speed(speed)
        self.history_limit = max(1, history_limit)
        self.history: Deque[SearchEvent] = deque(maxlen=self.history_limit)
        self.view = PlaybackView()
        self.search: Optional[CameraSearch] = None
        self.paused = False

    @property
    def running(self) -> bool:
        return self.search is not None and not self.paused

    @property
    def delay_seconds(self) -> float:
        return SPEED_MAP[self.speed] / 1000.0

    def set_speed(self, speed: str) -> None:
        if speed not in SPEED_MAP:
            raise ValueError(f"Unknown speed '{speed}'. Allowed: {', '.join(SPEED_MAP)}")
        self.speed = speed

    def start(self) -> None:
        """Discard any previous run and begin a fresh search."""
        self.reset()
        self.search = CameraSearch(self.board.n, self.board.snapshot())
        self.board.lock()

    def reset(self) -> None:
        """Abandon the current search (if any) and return to idle."""
        self.search = None
        self.paused = False
        self.board.unlock()
        self.history.clear()
        self.view = PlaybackView()

    stop = reset

    def pause(self) -> None:
        """Suspend stepping; the search keeps its place until ``resume()``."""
        if self.search is not None:
            self.paused = True

    def resume(self) -> None:
        self.paused = False

    def tick(self) -> Optional[SearchEvent]:
        """Advance one event.

        Returns None without stepping while paused, and None once the search
        has finished.
        """
        if self.search is None:
            raise RuntimeError("No search in progress; call start() first")
        if self.paused:
            return None
        event = self.search.step()
        if event is None:
            self._finish()
            return None
        self.history.appendleft(event)
        self.view.apply(event)
        if self.search.done:
            self._finish()
        return event

    def run(
        self,
        max_steps: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_event: Optional[Callable[[SearchEvent], None]] = None,
    ) -> Optional[bool]:
        """Play the search to the end, sleeping between steps.

        A fresh search is started unless one is already in progress, in which
        case it is resumed where it stopped. Returns the outcome (True solved,
        False failed), or None when ``max_steps`` or ``pause()`` stopped the
        run first.
        """
        if self.search is None:
            self.start()
        else:
            self.resume()
        search = self.search
        taken = 0
        while self.search is not None:
            if self.paused:
                return None
            if max_steps is not None and taken >= max_steps:
                return None
            event = self.tick()
            if event is None:
                break
            taken += 1
            if on_event is not None:
                on_event(event)
            if self.search is not None and not self.paused:
                sleep(self.delay_seconds)
        return search.solved if search is not None else None

    def recent_events(self) -> List[SearchEvent]:
        return list(self.history)

    def _finish(self) -> None:
        search = self.search
        if search is not None and search.solved is False:
            self.view.status = STATUS_FAILED
        self.search = None
        self.paused = False
        self.board.unlock()
