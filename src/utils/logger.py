"""
Logging setup and shape-switch event logging.
"""

import os
import logging
import logging.handlers
import time
from typing import List, Optional


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure the root logger: console output plus an optional rotating file."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-28s | %(message)s"
    date_format = "%H:%M:%S"

    level_value = getattr(logging, str(level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level_value)
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(level_value)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


class ShapeEventLogger:
    """Logs shape switches and keeps a short history for the HUD and tests."""

    def __init__(self, max_history: int = 100):
        self.logger = logging.getLogger("shape_events")
        self.max_history = max_history
        self._history: List[dict] = []

    def log_switch(self, gesture_name: str, shape_name: str, previous: Optional[str] = None,
                   confidence: Optional[float] = None):
        """Log that the active shape changed."""
        entry = {
            "timestamp": time.time(),
            "gesture": gesture_name,
            "shape": shape_name,
            "previous": previous,
            "confidence": confidence,
        }
        self._history.append(entry)
        if len(self._history) > self.max_history:
            del self._history[0]

        self.logger.info(
            "Gesture: %-14s | Shape: %-14s | From: %s",
            gesture_name,
            shape_name,
            previous or "-",
        )

    def get_history(self, last_n=None):
        """Recent switches, oldest first."""
        if last_n:
            return self._history[-last_n:]
        return self._history.copy()

    @property
    def total_switches(self):
        return len(self._history)
