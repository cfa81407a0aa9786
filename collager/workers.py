# workers.py
"""
Background task execution for Techo Collager.
Defines a Worker that runs a callable on a QThreadPool and reports back through signals.
"""
import logging
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

LOGGER = logging.getLogger(__name__)


class WorkerSignals(QObject):
    started = Signal()
    finished = Signal()
    error = Signal(str)
    result = Signal(object)


class Worker(QRunnable):
    """Wraps any function to run in a QThreadPool."""
    def __init__(self, fn: Callable, *args, **kwargs):
        super().__init__()
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.signals = WorkerSignals()

    def run(self) -> None:
        try:
            self.signals.started.emit()
            result = self.fn(*self.args, **self.kwargs)
            self.signals.result.emit(result)
        except Exception as e:
            LOGGER.error("Worker error: %s", e)
            self.signals.error.emit(str(e))
        finally:
            self.signals.finished.emit()


def start_worker(
    worker: Worker,
    *,
    on_result: Optional[Callable[[Any], None]] = None,
    on_error: Optional[Callable[[str], None]] = None,
    pool: Optional[QThreadPool] = None,
) -> Worker:
    """Connect the callbacks and schedule ``worker`` on ``pool``."""
    if on_result is not None:
        worker.signals.result.connect(on_result)
    if on_error is not None:
        worker.signals.error.connect(on_error)
    (pool or QThreadPool.globalInstance()).start(worker)
    return worker
