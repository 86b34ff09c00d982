"""
Central configuration for pathsampler tunables and shared constants.
"""

from __future__ import annotations

import logging
import os

TRACE: int = 5
logging.addLevelName(TRACE, "TRACE")
# Add Logger.trace if missing
if not hasattr(logging.Logger, "trace"):

    def _trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self._log(TRACE, msg, args, **kwargs)

    logging.Logger.trace = _trace  # type: ignore[attr-defined]
    logging.TRACE = TRACE  # type: ignore[attr-defined]

TRACE_ENABLED = str(os.getenv("PATHSAMPLER_TRACE", "0")).lower() in (
    "1",
    "true",
    "yes",
    "on",
)

logger = logging.getLogger(__name__)


def apply_trace_level(enabled: bool | None = None) -> None:
    """Put the package logger at TRACE when enabled (default: TRACE_ENABLED)."""
    if enabled is None:
        enabled = TRACE_ENABLED
    if enabled:
        logging.getLogger("pathsampler").setLevel(TRACE)


apply_trace_level()

# Sampling rate of the periodic scheduler (Hz)
SAMPLE_RATE_HZ: float = float(os.getenv("PATHSAMPLER_RATE_HZ", "100"))

# Time before a deadline at which the scheduler stops sleeping and spins
BUSY_THRESHOLD_MS: float = float(os.getenv("PATHSAMPLER_BUSY_THRESHOLD_MS", "2.0"))

# Topic layout. Every sink address is TOPIC_PREFIX + relative name.
TOPIC_PREFIX: str = os.getenv("PATHSAMPLER_TOPIC_PREFIX", "/pathsampler/")
QUEUE_SIZE: int = int(os.getenv("PATHSAMPLER_QUEUE_SIZE", "1000"))

# UDP transport destination
UDP_HOST: str = os.getenv("PATHSAMPLER_UDP_HOST", "127.0.0.1")
UDP_PORT: int = int(os.getenv("PATHSAMPLER_UDP_PORT", "50610"))


def _env_bool_optional(name: str) -> bool | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    s = raw.strip().lower()
    if s in ("1", "true", "yes", "on"):
        return True
    if s in ("0", "false", "no", "off"):
        return False
    return None


# Loop the path when the scheduler reaches its end (None -> stop at the end)
LOOP_PATH: bool | None = _env_bool_optional("PATHSAMPLER_LOOP_PATH")


def topic(relative: str, prefix: str | None = None) -> str:
    """Join a relative sink name onto the topic prefix."""
    base = TOPIC_PREFIX if prefix is None else prefix
    return base + relative
