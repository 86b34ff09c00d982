"""
In-process transport: synchronous fan-out to subscriber callbacks.

Keeps the last payload per topic and a bounded history per topic, which makes
it the transport of choice for consumers living in the same process.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict, deque
from collections.abc import Callable

from pathsampler import config as cfg
from pathsampler.publishing.base import Payload, Sink, Transport

logger = logging.getLogger(__name__)

Callback = Callable[[str, Payload], None]


class InProcessSink(Sink):
    def __init__(self, topic: str, transport: InProcessTransport) -> None:
        super().__init__(topic)
        self._transport = transport

    def publish(self, payload: Payload) -> None:
        if self._shutdown:
            logger.debug("Dropping message on shut down sink %s", self.topic)
            return
        self._transport._deliver(self.topic, payload)


class InProcessTransport(Transport):
    """Delivers every publish to the callbacks subscribed to its topic."""

    def __init__(self, name: str = "pathsampler", history: int = cfg.QUEUE_SIZE) -> None:
        super().__init__(name)
        self._lock = threading.RLock()
        self._history_len = history
        self._history: dict[str, deque[Payload]] = {}
        self._subscribers: dict[str, list[Callback]] = defaultdict(list)
        self._advertised: dict[str, int] = defaultdict(int)
        self._closed = False

    def advertise(self, topic: str, queue_size: int = cfg.QUEUE_SIZE) -> InProcessSink:
        with self._lock:
            self._advertised[topic] += 1
            self._history.setdefault(topic, deque(maxlen=self._history_len))
        logger.debug("[%s] advertised %s", self.name, topic)
        return InProcessSink(topic, self)

    def subscribe(self, topic: str, callback: Callback) -> None:
        with self._lock:
            self._subscribers[topic].append(callback)

    def _deliver(self, topic: str, payload: Payload) -> None:
        with self._lock:
            if self._closed:
                return
            self._history.setdefault(topic, deque(maxlen=self._history_len)).append(
                payload
            )
            callbacks = list(self._subscribers.get(topic, ()))
        for callback in callbacks:
            try:
                callback(topic, payload)
            except Exception:
                logger.exception("Subscriber of %s raised", topic)

    @property
    def topics(self) -> list[str]:
        with self._lock:
            return sorted(self._advertised)

    def last(self, topic: str) -> Payload | None:
        with self._lock:
            messages = self._history.get(topic)
            return messages[-1] if messages else None

    def messages(self, topic: str) -> list[Payload]:
        with self._lock:
            return list(self._history.get(topic, ()))

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._subscribers.clear()
        logger.debug("[%s] closed", self.name)
