"""Configuration management for the N-camera visualizer.

This module provides a thin, explicit wrapper around a JSON configuration file
to centralize the default board, playback pacing, and experiment settings.

File format (high-level)
------------------------
- board_settings: board size ``n`` and a list of ``[row, col]`` blocked cells.
- playback_settings: step ``speed`` ("slow" | "medium" | "fast") and
  ``history_limit`` (events retained in the log).
- experiment_settings: N values, random-mask runs, block density, seed, and
  output directory.

All methods return Python native types; the class does not validate semantics
beyond presence of keys to keep responsibilities minimal.
"""
import json
from pathlib import Path


class ConfigManager:
    """Load, query, and persist configuration.

    Parameters
    ----------
    config_path : str | os.PathLike, default "config.json"
        Path to the configuration file.
    """

    def __init__(self, config_path="config.json"):
        self.config_path = Path(config_path)
        self.config = self.load_config()

    def load_config(self):
        """Load and parse the JSON configuration file."""
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {self.config_path}\n"
                f"Create it or use the default config.json template"
            )

        with open(self.config_path, 'r') as f:
            return json.load(f)

    def save_config(self):
        """Persist the current in-memory configuration to disk."""
        with open(self.config_path, 'w') as f:
            json.dump(self.config, f, indent=2)

    def get_board_settings(self):
        """Return the default board (``n`` and ``blocked_cells``)."""
        return self.config.get("board_settings", {})

    def get_playback_settings(self):
        """Return playback pacing and history settings."""
        return self.config.get("playback_settings", {})

    def get_experiment_settings(self):
        """Return sweep and random-mask experiment settings."""
        return self.config.get("experiment_settings", {})

    def save_board(self, n, blocked_cells):
        """Persist a board layout as the new default.

        Parameters
        ----------
        n : int
            Board size.
        blocked_cells : iterable of (row, col)
            Cells to store as blocked.
        """
        self.config["board_settings"] = {
            "n": int(n),
            "blocked_cells": [[int(r), int(c)] for r, c in blocked_cells],
        }
        self.save_config()
        print(f"Board layout (N={n}) saved to {self.config_path}")

    def update_setting(self, section, key, value):
        """Update a specific setting and persist the change immediately."""
        if section not in self.config:
            self.config[section] = {}
        self.config[section][key] = value
        self.save_config()
