"""Command-line interface and high-level pipelines for the N-camera visualizer.

This module wires together configuration loading, the console replay of a
single search, and the analysis pipelines (open-board sweep and random-mask
experiments). It isolates I/O, argument parsing, and progress reporting from
the core search modules so that the rest of the codebase remains easy to test
programmatically.
"""
from __future__ import annotations

import argparse
import tempfile
from pathlib import Path
from time import perf_counter
from typing import Any, Dict, List, Optional, Tuple

from config_manager import ConfigManager
from ncameras.board import Board, parse_cell
from ncameras.driver import SPEED_MAP, StepDriver, describe_event
from ncameras.search import EventType, SearchEvent
from ncameras.utils import conflicts, is_valid_placement

from . import settings
from .experiments import collect_events, run_open_board_sweep, run_random_mask_experiments
from .plots import plot_mask_runs, plot_sweep, plot_visit_heatmap
from .reporting import (
    save_event_log_to_csv,
    save_mask_runs_to_csv,
    save_mask_summary_to_csv,
    save_sweep_to_csv,
)


# ------------- Utils --------------------------------------------------------

def parse_block_filters(block_args: Optional[List[str]]) -> List[Tuple[int, int]]:
    """Normalize ``--block`` inputs into a list of ``(row, col)`` cells.

    Accepts repeated flags (``--block 0,0 --block 1,2``) and semicolon- or
    space-separated lists (``--block "0,0;1,2"``). Duplicates are dropped
    while preserving order.
    """
    if not block_args:
        return []
    cells: List[Tuple[int, int]] = []
    for entry in block_args:
        for token in entry.replace(";", " ").split():
            cells.append(parse_cell(token))
    return list(dict.fromkeys(cells))


def apply_configuration(config_path: str) -> Tuple[ConfigManager, Dict[str, Any]]:
    """Load configuration and copy its values into ``settings``.

    Returns the ``ConfigManager`` used and the board settings section so the
    caller can build the default board.
    """
    config_mgr = ConfigManager(config_path)

    board_settings = config_mgr.get_board_settings()
    if board_settings:
        settings.DEFAULT_N = int(board_settings.get("n", settings.DEFAULT_N))
        settings.DEFAULT_BLOCKED_CELLS = [
            [int(r), int(c)] for r, c in board_settings.get("blocked_cells", settings.DEFAULT_BLOCKED_CELLS)
        ]

    playback_settings = config_mgr.get_playback_settings()
    if playback_settings:
        settings.set_playback(
            speed=playback_settings.get("speed", settings.DEFAULT_SPEED),
            history_limit=playback_settings.get("history_limit", settings.HISTORY_LIMIT),
        )

    experiment_settings = config_mgr.get_experiment_settings()
    if experiment_settings:
        n_values = [int(n) for n in experiment_settings.get("N_values", settings.N_VALUES)]
        too_large = [n for n in n_values if not 1 <= n <= settings.MAX_BOARD_SIZE]
        if too_large:
            raise ValueError(
                f"N values must be between 1 and {settings.MAX_BOARD_SIZE}; got "
                + ", ".join(str(n) for n in too_large)
            )
        settings.N_VALUES = n_values
        settings.RUNS_RANDOM_MASKS = int(experiment_settings.get("runs_random_masks", settings.RUNS_RANDOM_MASKS))
        settings.BLOCK_DENSITY = float(experiment_settings.get("block_density", settings.BLOCK_DENSITY))
        settings.RANDOM_SEED = experiment_settings.get("seed", settings.RANDOM_SEED)
        settings.OUT_DIR = experiment_settings.get("output_dir", settings.OUT_DIR)

    return config_mgr, board_settings


# ------------- Pipeline: console replay ------------------------------------

def replay_search(
    board: Board,
    speed: str,
    no_delay: bool = False,
    max_steps: Optional[int] = None,
    show_board: bool = False,
    log_csv: Optional[str] = None,
    heatmap: Optional[str] = None,
) -> Optional[bool]:
    """Replay one search on the console, one event per line.

    Returns True/False for solved/failed, or None when ``max_steps`` stopped
    the replay first.
    """
    print(f"Board N={board.n}, blocked cells: {board.blocked_cells() or 'none'}")
    print(board.render_text())
    print("-" * 70)

    events: List[SearchEvent] = []

    def _on_event(event: SearchEvent) -> None:
        events.append(event)
        print(f"{len(events):>6}  {describe_event(event)}")
        if show_board and event.kind in (EventType.PLACE, EventType.REMOVE):
            print(board.render_text(event.placed))

    driver = StepDriver(board, speed=speed, history_limit=settings.HISTORY_LIMIT)
    if no_delay:
        outcome = driver.run(max_steps=max_steps, sleep=lambda _seconds: None, on_event=_on_event)
    else:
        outcome = driver.run(max_steps=max_steps, on_event=_on_event)
    driver.reset()

    print("-" * 70)
    if outcome is None:
        print(f"Replay stopped after {len(events)} events (search not finished).")
    elif outcome:
        placed = events[-1].placed
        print(f"SOLVED: all {board.n} cameras placed in {len(events)} events")
        print(board.render_text(placed))
        for r, c in placed:
            print(f"  camera: row {r} -> col {c}")
    else:
        print(f"No valid placement exists for this configuration ({len(events)} events).")

    if log_csv:
        save_event_log_to_csv(events, log_csv)
        print(f"Saved event log: {log_csv}")
    if heatmap:
        plot_visit_heatmap(events, board.n, board.snapshot(), heatmap)
    return outcome


# ------------- Pipeline: analysis ------------------------------------------

def main_sweep(out_dir: Optional[str] = None, plots: bool = True) -> None:
    """Open-board sweep over ``settings.N_VALUES`` with CSV and charts."""
    out_dir = out_dir or settings.OUT_DIR
    start = perf_counter()
    print("=" * 70)
    print("OPEN-BOARD SWEEP")
    print("=" * 70)
    results = run_open_board_sweep(settings.N_VALUES)
    save_sweep_to_csv(results, out_dir)
    if plots:
        plot_sweep(results, out_dir)
    print(f"\nSweep completed in {perf_counter() - start:.1f}s")


def main_experiments(out_dir: Optional[str] = None, plots: bool = True) -> None:
    """Random-mask experiments over ``settings.N_VALUES`` with CSV and charts."""
    out_dir = out_dir or settings.OUT_DIR
    start = perf_counter()
    print("=" * 70)
    print(
        f"RANDOM-MASK EXPERIMENTS ({settings.RUNS_RANDOM_MASKS} runs/N, "
        f"density {settings.BLOCK_DENSITY:.2f}, seed {settings.RANDOM_SEED})"
    )
    print("=" * 70)
    results = run_random_mask_experiments(
        settings.N_VALUES,
        runs=settings.RUNS_RANDOM_MASKS,
        density=settings.BLOCK_DENSITY,
        seed=settings.RANDOM_SEED,
    )
    save_mask_runs_to_csv(results, out_dir)
    save_mask_summary_to_csv(results, out_dir)
    if plots:
        plot_mask_runs(results, out_dir)
    print(f"\nExperiments completed in {perf_counter() - start:.1f}s")


# ------------- Quick regression -------------------------------------------

def run_quick_regression_tests() -> None:
    """Execute a fast, deterministic smoke test of the search and exports.

    Verifies that:
    - Open boards 1..8 solve exactly when a placement exists (N=2, 3 fail).
    - Every PLACE snapshot is conflict-free and SOLVED placements are valid.
    - N=4 finds the classic first placement.
    - The sweep CSV is produced in a temporary folder.
    """
    print("Running quick regression tests (N=1..8)...")

    for n in range(1, settings.MAX_BOARD_SIZE + 1):
        board = Board(n)
        events, solved = collect_events(n, board.snapshot())
        if solved != (n not in (2, 3)):
            raise AssertionError(f"Unexpected outcome for N={n}: solved={solved}")
        for event in events:
            if event.kind is EventType.PLACE and conflicts(event.placed) != 0:
                raise AssertionError(f"Conflicting PLACE snapshot for N={n}: {event.placed}")
        terminal = events[-1]
        if solved and not is_valid_placement(terminal.placed, n):
            raise AssertionError(f"Invalid placement for N={n}: {terminal.placed}")
        if not solved and terminal.kind is not EventType.FAIL:
            raise AssertionError(f"N={n} did not end with FAIL")
        print(f"  N={n}: {'solved' if solved else 'no placement'}, events={len(events)}")

    events, _ = collect_events(4, Board(4).snapshot())
    if events[-1].placed != ((0, 1), (1, 3), (2, 0), (3, 2)):
        raise AssertionError(f"Unexpected first placement for N=4: {events[-1].placed}")

    results = run_open_board_sweep([4, 5], progress_label="Quick regression sweep")
    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(save_sweep_to_csv(results, tmpdir))
        if not csv_path.exists() or csv_path.stat().st_size == 0:
            raise AssertionError("Sweep CSV was not generated successfully during quick tests.")

    print("Quick regression tests passed.")


# ------------- CLI wiring --------------------------------------------------

def build_arg_parser():
    """Construct the argument parser for the CLI entry point."""
    parser = argparse.ArgumentParser(description="Replay and analyse the N-camera backtracking search.")
    parser.add_argument("--n", type=int, help="Board size (1..8). Default: from config.")
    parser.add_argument(
        "--block",
        "-b",
        action="append",
        help="Blocked cell ROW,COL (repeat the flag or separate cells with ';'). Overrides config cells.",
    )
    parser.add_argument("--speed", choices=list(SPEED_MAP), help="Playback speed. Default: from config.")
    parser.add_argument("--no-delay", action="store_true", help="Print events without pausing between steps.")
    parser.add_argument("--max-steps", type=int, help="Stop the replay after this many events.")
    parser.add_argument("--show-board", action="store_true", help="Print the board after every PLACE/REMOVE.")
    parser.add_argument("--log-csv", help="Write the full event log to this CSV file.")
    parser.add_argument("--heatmap", help="Write a cell-visit heatmap PNG to this path.")
    parser.add_argument("--save-board", action="store_true", help="Store the board used as the config default.")
    parser.add_argument("--sweep", action="store_true", help="Run the open-board sweep over configured N values.")
    parser.add_argument("--experiments", action="store_true", help="Run random-mask experiments over configured N values.")
    parser.add_argument("--no-plots", action="store_true", help="Skip chart generation for --sweep/--experiments.")
    parser.add_argument("--out-dir", help="Output directory for CSV and charts. Default: from config.")
    parser.add_argument("--config", default="config.json", help="Path to configuration file (default: config.json).")
    parser.add_argument("--quick-test", action="store_true", help="Run quick regression tests and exit.")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point: parse arguments and dispatch to the chosen pipeline."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.quick_test:
        run_quick_regression_tests()
        return

    try:
        config_mgr, _ = apply_configuration(args.config)
        cells = parse_block_filters(args.block) if args.block else settings.DEFAULT_BLOCKED_CELLS
        n = args.n if args.n is not None else settings.DEFAULT_N
        board = Board.from_cells(n, cells)
    except FileNotFoundError as exc:
        print(f"Configuration file not found: {exc}")
        raise SystemExit(1) from exc
    except ValueError as exc:
        print(f"Configuration error: {exc}")
        raise SystemExit(1) from exc

    if args.out_dir:
        settings.OUT_DIR = args.out_dir

    try:
        if args.sweep or args.experiments:
            if args.sweep:
                main_sweep(plots=not args.no_plots)
            if args.experiments:
                main_experiments(plots=not args.no_plots)
            return

        if args.save_board:
            config_mgr.save_board(board.n, board.blocked_cells())

        speed = args.speed or settings.DEFAULT_SPEED
        replay_search(
            board,
            speed,
            no_delay=args.no_delay,
            max_steps=args.max_steps,
            show_board=args.show_board,
            log_csv=args.log_csv,
            heatmap=args.heatmap,
        )
    except KeyboardInterrupt:
        print("\nReplay interrupted by user.")
        raise SystemExit(130) from None
    except ValueError as exc:
        print(f"Execution error: {exc}")
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
