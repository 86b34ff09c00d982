"""Exception types raised by the sampler and its collaborators."""


class SamplerError(Exception):
    """Base class for every error raised by pathsampler."""


class NotReadyError(SamplerError):
    """compute() was called before a path was set."""


class NotInitializedError(SamplerError):
    """Publishing is not active, so no sink can be acquired or written."""


class UnknownFrameError(SamplerError):
    """The kinematic model has no frame with the requested name."""


class UnknownJointError(SamplerError, KeyError):
    """The kinematic model has no joint with the requested name."""


class EvaluationFailedError(SamplerError):
    """The path could not be evaluated at the requested time."""


class InvalidRangeError(SamplerError, ValueError):
    """A malformed (offset, length) row was given to an IndexView."""


class FailFastError(SamplerError, RuntimeError):
    """API misuse, such as projecting through a view that is not finalized."""
