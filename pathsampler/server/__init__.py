"""Periodic scheduling of a Sampler and its loop utilities."""

from pathsampler.server.async_logging import AsyncLogHandler
from pathsampler.server.loop_timer import LoopMetrics, LoopTimer, format_hz_summary
from pathsampler.server.sampler_loop import SamplerLoop

__all__ = [
    "AsyncLogHandler",
    "LoopMetrics",
    "LoopTimer",
    "format_hz_summary",
    "SamplerLoop",
]
