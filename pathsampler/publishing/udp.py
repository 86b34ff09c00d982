from __future__ import annotations

import logging
import socket
import threading
import time

from pathsampler import config as cfg
from pathsampler.publishing.base import Payload, Sink, Transport, encode_frame

logger = logging.getLogger(__name__)


class UdpSink(Sink):
    def __init__(self, topic: str, transport: UdpTransport) -> None:
        super().__init__(topic)
        self._transport = transport

    def publish(self, payload: Payload) -> None:
        if self._shutdown:
            return
        self._transport._send(encode_frame(self.topic, payload))


class UdpTransport(Transport):
    """
    Sends msgpack ``[topic, payload]`` datagrams to a single UDP destination.

    Sends are non-blocking and fire-and-forget. Failures are counted and logged
    at most once every ``fail_log_interval_s`` seconds.

    Config:
      - cfg.UDP_HOST (default "127.0.0.1")
      - cfg.UDP_PORT (default 50610)
    """

    def __init__(
        self,
        name: str = "pathsampler",
        host: str = cfg.UDP_HOST,
        port: int = cfg.UDP_PORT,
        fail_log_interval_s: float = 5.0,
    ) -> None:
        super().__init__(name)
        self.dest = (host, port)
        self._lock = threading.Lock()
        self._fail_log_interval_s = fail_log_interval_s
        self._last_fail_log_time = 0.0
        self.send_failures = 0
        self.sent_count = 0

        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, 1 << 20)
        sock.setblocking(False)
        self._sock: socket.socket | None = sock
        logger.info("UdpTransport[%s] -> dest=%s:%d", name, host, port)

    def advertise(self, topic: str, queue_size: int = cfg.QUEUE_SIZE) -> UdpSink:
        return UdpSink(topic, self)

    def _send(self, data: bytes) -> None:
        with self._lock:
            sock = self._sock
            if sock is None:
                return
            try:
                sock.sendto(data, self.dest)
                self.sent_count += 1
            except OSError as e:
                self._handle_send_failure(e)

    def _handle_send_failure(self, e: OSError) -> None:
        self.send_failures += 1
        now = time.monotonic()
        if now - self._last_fail_log_time >= self._fail_log_interval_s:
            logger.warning(
                "UdpTransport send failed (%d so far): %s", self.send_failures, e
            )
            self._last_fail_log_time = now

    def close(self) -> None:
        with self._lock:
            if self._sock:
                try:
                    self._sock.close()
                except OSError as e:
                    logger.debug("Error closing UDP socket: %s", e)
                self._sock = None
