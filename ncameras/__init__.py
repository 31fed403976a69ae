"""N-camera placement: instrumented backtracking search and its collaborators."""

from .board import MAX_BOARD_SIZE, Board, BoardError, BoardLockedError, create_grid
from .driver import SPEED_MAP, PlaybackView, StepDriver, describe_event
from .oracle import REASON_COLUMN, REASON_DIAGONAL, Conflict, find_conflict, is_safe
from .search import CameraSearch, EventType, SearchEvent, find_first_placement, iter_search_events
from .utils import conflicts, conflicts_on2, is_valid_placement

__all__ = [
    "Board",
    "BoardError",
    "BoardLockedError",
    "MAX_BOARD_SIZE",
    "create_grid",
    "SPEED_MAP",
    "PlaybackView",
    "StepDriver",
    "describe_event",
    "Conflict",
    "REASON_COLUMN",
    "REASON_DIAGONAL",
    "find_conflict",
    "is_safe",
    "CameraSearch",
    "EventType",
    "SearchEvent",
    "find_first_placement",
    "iter_search_events",
    "conflicts",
    "conflicts_on2",
    "is_valid_placement",
]
