"""Async logging using QueueHandler to keep log I/O out of the sampling loop."""

import logging
import queue
from logging.handlers import QueueHandler, QueueListener


class AsyncLogHandler:
    """Route one logger's records through a queue drained by a listener thread.

    The handlers that would have received the records (the logger's own, or
    the first ancestor's that has some) are moved behind a QueueListener.
    """

    def __init__(self, logger_name: str = "pathsampler"):
        self._queue: queue.Queue[logging.LogRecord] = queue.Queue(-1)
        self._listener: QueueListener | None = None
        self._logger = logging.getLogger(logger_name)
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def _find_handlers(self) -> list[logging.Handler]:
        current: logging.Logger | None = self._logger
        while current is not None:
            if current.handlers:
                return current.handlers[:]
            if not current.propagate:
                break
            current = current.parent
        return []

    def start(self) -> None:
        """Install the queue handler. No-op if nothing would be written anyway."""
        if self._started:
            return

        target_handlers = self._find_handlers()
        if not target_handlers:
            return

        self._logger.handlers = [QueueHandler(self._queue)]
        self._logger.propagate = False
        self._listener = QueueListener(
            self._queue, *target_handlers, respect_handler_level=True
        )
        self._listener.start()
        self._started = True

    def stop(self) -> None:
        """Flush queued records and restore propagation."""
        if not self._started:
            return

        if self._listener:
            self._listener.stop()
            self._listener = None

        self._logger.handlers = []
        self._logger.propagate = True
        self._started = False

    def __enter__(self) -> "AsyncLogHandler":
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()
