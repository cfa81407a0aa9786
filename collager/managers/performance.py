# managers/performance.py
"""
PerformanceMonitor: checks memory usage and trims undo history when thresholds are exceeded.
"""
import gc
import logging

import psutil
from PySide6.QtCore import QDateTime, QTimer

from .. import config
from ..controllers.history import HistoryStore

LOGGER = logging.getLogger(__name__)


class PerformanceMonitor:
    """Monitors memory usage and drops old history entries under pressure."""
    def __init__(self, parent, history_source, *, start: bool = True):
        self.parent = parent
        self._history_source = history_source
        self.timer = QTimer(parent)
        self.timer.timeout.connect(self.check_memory)
        if start:
            self.timer.start(config.MEMORY_CLEANUP_INTERVAL_SECS * 1000)
        self.last_cleanup = None

    def _history(self) -> HistoryStore:
        return self._history_source()

    def check_memory(self) -> bool:
        """Return True when a cleanup ran."""
        try:
            mem = psutil.Process().memory_info().rss
        except psutil.Error as e:
            LOGGER.warning("Memory check failed: %s", e)
            return False
        if mem <= config.MEMORY_THRESHOLD_BYTES:
            return False
        now = QDateTime.currentDateTime()
        if self.last_cleanup is not None and \
                self.last_cleanup.secsTo(now) < config.MEMORY_CLEANUP_INTERVAL_SECS:
            return False
        self._optimize(mem)
        self.last_cleanup = now
        return True

    def _optimize(self, rss: int) -> None:
        dropped = self._history().trim(config.MEMORY_TRIM_KEEP)
        gc.collect()
        LOGGER.info(
            "PerformanceMonitor: rss=%d MiB, dropped %d history entr%s",
            rss >> 20, dropped, "y" if dropped == 1 else "ies",
        )
