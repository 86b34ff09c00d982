"""Paths sampled by the sampler: the Path contract and joint-space implementations."""

from pathsampler.path.base import Path
from pathsampler.path.joint_path import QuinticPath, SplinePath

__all__ = ["Path", "QuinticPath", "SplinePath"]
