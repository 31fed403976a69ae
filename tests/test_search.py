"""Tests for the event-emitting backtracking search."""

from pathlib import Path
import sys
import unittest

import numpy as np

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from ncameras.search import (
    CameraSearch,
    EventType,
    SearchEvent,
    find_first_placement,
    iter_search_events,
)
from ncameras.utils import conflicts, is_valid_placement


def open_board(n):
    return [[False] * n for _ in range(n)]


def drain(n, blocked):
    """Return (events, returned_flag) straight from the generator."""
    events = []
    gen = iter_search_events(n, blocked)
    while True:
        try:
            events.append(next(gen))
        except StopIteration as stop:
            return events, stop.value


def brief(events):
    out = []
    for e in events:
        if e.kind is EventType.CONFLICT:
            out.append((e.kind.value, e.row, e.col, e.culprit, e.reason))
        else:
            out.append((e.kind.value, e.row, e.col))
    return out


class ScenarioTests(unittest.TestCase):
    def test_single_cell_board(self):
        events, solved = drain(1, [[False]])
        self.assertTrue(solved)
        self.assertEqual(brief(events), [("TRY", 0, 0), ("PLACE", 0, 0), ("SOLVED", None, None)])
        self.assertEqual(events[-1].placed, ((0, 0),))

    def test_two_by_two_exhausts_and_fails_once(self):
        events, solved = drain(2, open_board(2))
        self.assertFalse(solved)
        self.assertEqual(
            brief(events),
            [
                ("TRY", 0, 0),
                ("PLACE", 0, 0),
                ("TRY", 1, 0),
                ("CONFLICT", 1, 0, (0, 0), "column"),
                ("TRY", 1, 1),
                ("CONFLICT", 1, 1, (0, 0), "diagonal"),
                ("REMOVE", 0, 0),
                ("TRY", 0, 1),
                ("PLACE", 0, 1),
                ("TRY", 1, 0),
                ("CONFLICT", 1, 0, (0, 1), "diagonal"),
                ("TRY", 1, 1),
                ("CONFLICT", 1, 1, (0, 1), "column"),
                ("REMOVE", 0, 1),
                ("FAIL", 0, None),
            ],
        )
        self.assertEqual(events[-1].placed, ())

    def test_four_by_four_first_solution(self):
        events, solved = drain(4, open_board(4))
        self.assertTrue(solved)
        self.assertIs(events[-1].kind, EventType.SOLVED)
        self.assertEqual(events[-1].placed, ((0, 1), (1, 3), (2, 0), (3, 2)))

    def test_blocked_cell_reported_before_first_try(self):
        blocked = [[True, False, False], [False, False, False], [False, False, False]]
        events, solved = drain(3, blocked)
        self.assertEqual(brief(events[:2]), [("BLOCKED", 0, 0), ("TRY", 0, 1)])
        self.assertFalse(solved)
        self.assertIs(events[-1].kind, EventType.FAIL)

    def test_rerun_after_toggle_starts_fresh(self):
        blocked = open_board(4)
        first = CameraSearch(4, blocked)
        list(first)
        self.assertTrue(first.solved)

        blocked[0][0] = True
        second = CameraSearch(4, blocked)
        event = second.step()
        self.assertEqual((event.kind, event.row, event.col), (EventType.BLOCKED, 0, 0))
        self.assertEqual(event.placed, ())

        blocked[0][0] = False
        third = CameraSearch(4, blocked)
        event = third.step()
        self.assertEqual((event.kind, event.row, event.col), (EventType.TRY, 0, 0))

    def test_empty_board_is_solved_immediately(self):
        events, solved = drain(0, [])
        self.assertTrue(solved)
        self.assertEqual(len(events), 1)
        self.assertIs(events[0].kind, EventType.SOLVED)
        self.assertEqual(events[0].placed, ())

    def test_fully_blocked_board_only_reports_row_zero(self):
        n = 3
        events, solved = drain(n, [[True] * n for _ in range(n)])
        self.assertFalse(solved)
        self.assertEqual(
            brief(events),
            [("BLOCKED", 0, 0), ("BLOCKED", 0, 1), ("BLOCKED", 0, 2), ("FAIL", 0, None)],
        )

    def test_blocked_last_row_forces_full_exhaustion(self):
        n = 5
        blocked = open_board(n)
        blocked[n - 1] = [True] * n
        events, solved = drain(n, blocked)
        self.assertFalse(solved)
        self.assertEqual(sum(1 for e in events if e.kind is EventType.FAIL), 1)
        places = sum(1 for e in events if e.kind is EventType.PLACE)
        removes = sum(1 for e in events if e.kind is EventType.REMOVE)
        self.assertEqual(places, removes)


class InvariantTests(unittest.TestCase):
    """Properties that must hold for any board and mask."""

    def masks(self):
        rng = np.random.default_rng(7)
        for n in range(0, 8):
            yield n, open_board(n)
            for density in (0.1, 0.25, 0.5):
                for _ in range(4):
                    yield n, (rng.random((n, n)) < density).tolist()
        yield 8, open_board(8)
        blocked = open_board(8)
        blocked[3][4] = True
        blocked[6][1] = True
        yield 8, blocked

    def test_place_and_remove_snapshots_are_conflict_free(self):
        for n, blocked in self.masks():
            events, _ = drain(n, blocked)
            for i, event in enumerate(events):
                if event.kind is EventType.PLACE:
                    self.assertEqual(conflicts(event.placed), 0, (n, event))
                    self.assertEqual(event.placed[-1], (event.row, event.col))
                if event.kind is EventType.REMOVE:
                    before = event.placed + ((event.row, event.col),)
                    self.assertEqual(conflicts(before), 0, (n, event))

    def test_terminates_with_exactly_one_terminal_event(self):
        for n, blocked in self.masks():
            events, solved = drain(n, blocked)
            terminal = [e for e in events if e.kind in (EventType.SOLVED, EventType.FAIL)]
            self.assertEqual(len(terminal), 1, n)
            self.assertIs(events[-1], terminal[0])
            if solved:
                self.assertIs(terminal[0].kind, EventType.SOLVED)
                self.assertTrue(is_valid_placement(terminal[0].placed, n, blocked))
            else:
                self.assertIs(terminal[0].kind, EventType.FAIL)
                self.assertEqual(terminal[0].row, 0)

    def test_replay_is_identical(self):
        for n, blocked in self.masks():
            first, _ = drain(n, blocked)
            second, _ = drain(n, blocked)
            self.assertEqual(first, second)

    def test_no_placement_on_rejected_cell_within_a_scan(self):
        for n, blocked in self.masks():
            events, _ = drain(n, blocked)
            rejected = {0: set()}
            for event in events:
                if event.kind in (EventType.CONFLICT, EventType.BLOCKED):
                    rejected.setdefault(event.row, set()).add(event.col)
                elif event.kind is EventType.PLACE:
                    self.assertNotIn(event.col, rejected.get(event.row, set()))
                    # A new scan of the next row begins.
                    rejected[event.row + 1] = set()

    def test_place_and_conflict_follow_a_try_of_the_same_cell(self):
        for n, blocked in self.masks():
            events, _ = drain(n, blocked)
            for prev, event in zip(events, events[1:]):
                if event.kind in (EventType.PLACE, EventType.CONFLICT):
                    self.assertIs(prev.kind, EventType.TRY)
                    self.assertEqual(prev.cell, event.cell)

    def test_columns_scanned_in_increasing_order(self):
        events, _ = drain(6, open_board(6))
        last_col = {}
        for event in events:
            if event.kind in (EventType.TRY, EventType.BLOCKED):
                previous = last_col.get(event.row)
                if previous is not None:
                    self.assertGreater(event.col, previous)
                last_col[event.row] = event.col
            elif event.kind is EventType.PLACE:
                last_col.pop(event.row + 1, None)

    def test_nested_fail_is_never_emitted(self):
        for n, blocked in self.masks():
            events, _ = drain(n, blocked)
            for event in events[:-1]:
                self.assertIsNot(event.kind, EventType.FAIL)

    def test_negative_size_fails_immediately(self):
        events, solved = drain(-1, [])
        self.assertEqual([(e.kind, e.row, e.placed) for e in events], [(EventType.FAIL, 0, ())])
        self.assertFalse(solved)

    def test_placed_grows_one_row_at_a_time(self):
        events, _ = drain(6, open_board(6))
        for event in events:
            self.assertEqual([r for r, _ in event.placed], list(range(len(event.placed))))
            if event.kind in (EventType.TRY, EventType.BLOCKED, EventType.CONFLICT):
                self.assertEqual(len(event.placed), event.row)


class CameraSearchTests(unittest.TestCase):
    def test_step_until_done(self):
        search = CameraSearch(1, [[False]])
        self.assertFalse(search.done)
        self.assertIsNone(search.solved)
        self.assertEqual(search.placed, ())
        kinds = []
        while True:
            event = search.step()
            if event is None:
                break
            kinds.append(event.kind)
        self.assertEqual(kinds, [EventType.TRY, EventType.PLACE, EventType.SOLVED])
        self.assertTrue(search.done)
        self.assertTrue(search.solved)
        self.assertEqual(search.steps, 3)
        self.assertIsNone(search.step())

    def test_done_as_soon_as_fail_is_emitted(self):
        search = CameraSearch(2, open_board(2))
        events = list(search)
        self.assertIs(events[-1].kind, EventType.FAIL)
        self.assertTrue(search.done)
        self.assertFalse(search.solved)

    def test_placed_tracks_latest_snapshot(self):
        search = CameraSearch(4, open_board(4))
        search.step()  # TRY (0,0)
        search.step()  # PLACE (0,0)
        self.assertEqual(search.placed, ((0, 0),))

    def test_mask_is_copied_at_construction(self):
        blocked = open_board(2)
        search = CameraSearch(2, blocked)
        blocked[0][0] = True
        first = search.step()
        self.assertIs(first.kind, EventType.TRY)

    def test_snapshots_do_not_change_later(self):
        search = CameraSearch(4, open_board(4))
        events = list(search)
        place = next(e for e in events if e.kind is EventType.PLACE)
        self.assertIsInstance(place.placed, tuple)
        self.assertEqual(place.placed, ((0, 0),))

    def test_accepts_numpy_mask(self):
        mask = np.zeros((4, 4), dtype=bool)
        mask[0, 1] = True
        search = CameraSearch(4, mask)
        events = list(search)
        self.assertTrue(search.solved)
        self.assertNotIn((0, 1), events[-1].placed)

    def test_find_first_placement(self):
        placement, steps, elapsed = find_first_placement(4, open_board(4))
        self.assertEqual(placement, ((0, 1), (1, 3), (2, 0), (3, 2)))
        self.assertGreater(steps, 0)
        self.assertGreaterEqual(elapsed, 0.0)

        placement, steps, _ = find_first_placement(3, open_board(3))
        self.assertIsNone(placement)
        self.assertGreater(steps, 0)

    def test_eight_by_eight_solves(self):
        placement, _, _ = find_first_placement(8, open_board(8))
        self.assertEqual(placement, ((0, 0), (1, 4), (2, 7), (3, 5), (4, 2), (5, 6), (6, 1), (7, 3)))


class SearchEventTests(unittest.TestCase):
    def test_as_dict(self):
        event = SearchEvent(EventType.CONFLICT, 1, 0, ((0, 0),), culprit=(0, 0), reason="column")
        self.assertEqual(
            event.as_dict(),
            {"kind": "CONFLICT", "row": 1, "col": 0, "placed": "0:0", "culprit": "0:0", "reason": "column"},
        )

    def test_cell_is_none_without_column(self):
        event = SearchEvent(EventType.SOLVED, None, None, ())
        self.assertIsNone(event.cell)


if __name__ == "__main__":
    unittest.main()
