# workers.py
"""
Background task execution for PhotoGrid.
Defines a Worker that runs a callable on the Qt thread pool and reports
back through signals delivered on the GUI thread.
"""
import logging
from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QRunnable, Signal

logger = logging.getLogger("photogrid.workers")


class WorkerSignals(QObject):
    started = Signal()
    finished = Signal()
    error = Signal(object)
    result = Signal(object)


class Worker(QRunnable):
    """Wraps any function to run in a QThreadPool.

    Exceptions are forwarded unchanged through ``signals.error`` so callers
    can tell decode failures from unexpected errors.
    """
    def __init__(
        self,
        fn: Callable[..., Any],
        *args,
        on_result: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[BaseException], None]] = None,
        **kwargs
    ):
        super().__init__()
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.signals = WorkerSignals()
        if on_result:
            self.signals.result.connect(on_result)
        if on_error:
            self.signals.error.connect(on_error)

    def run(self) -> None:
        try:
            self.signals.started.emit()
            result = self.fn(*self.args, **self.kwargs)
        except Exception as e:
            logger.error("Worker error: %s", e)
            self.signals.error.emit(e)
        else:
            self.signals.result.emit(result)
        finally:
            self.signals.finished.emit()
