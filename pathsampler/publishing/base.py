"""
Sink/transport contract and the message payloads published by the sampler.

Payloads are msgspec structs so every transport shares one wire encoding:
a msgpack array ``[topic, payload]`` where payload is a tagged array.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Union

import msgspec
import numpy as np
from numpy.typing import ArrayLike

from pathsampler import config as cfg


class VectorMsg(msgspec.Struct, tag="vector", array_like=True, frozen=True):
    """Flat numeric vector."""

    data: list[float]

    @classmethod
    def from_array(cls, values: ArrayLike) -> VectorMsg:
        return cls(np.asarray(values, dtype=np.float64).tolist())


class Vector3Msg(msgspec.Struct, tag="vector3", array_like=True, frozen=True):
    x: float
    y: float
    z: float

    @classmethod
    def from_array(cls, values: ArrayLike) -> Vector3Msg:
        x, y, z = np.asarray(values, dtype=np.float64).reshape(3).tolist()
        return cls(x, y, z)

    def to_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])


class QuaternionMsg(msgspec.Struct, array_like=True, frozen=True):
    x: float
    y: float
    z: float
    w: float


class TransformMsg(msgspec.Struct, tag="transform", array_like=True, frozen=True):
    """Rigid transform: translation + unit quaternion."""

    translation: Vector3Msg
    rotation: QuaternionMsg


Payload = Union[VectorMsg, Vector3Msg, TransformMsg]

# Module-level codec (thread-safe, reusable)
_encoder = msgspec.msgpack.Encoder()
_frame_decoder = msgspec.msgpack.Decoder(tuple[str, Payload])


def encode_frame(topic: str, payload: Payload) -> bytes:
    return _encoder.encode((topic, payload))


def decode_frame(data: bytes) -> tuple[str, Payload]:
    return _frame_decoder.decode(data)


def make_node_name(name: str, anonymous: bool = False) -> str:
    """Node name, with a unique suffix when ``anonymous``."""
    if anonymous:
        return f"{name}_{uuid.uuid4().hex[:8]}"
    return name


class Sink(ABC):
    """One-way, fire-and-forget delivery channel for a single topic."""

    def __init__(self, topic: str) -> None:
        self.topic = topic
        self._shutdown = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.topic!r})"

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    @abstractmethod
    def publish(self, payload: Payload) -> None:
        """Deliver ``payload``. Never raises for delivery failures."""

    def shutdown(self) -> None:
        self._shutdown = True


class Transport(ABC):
    """Creates sinks for topics; owns whatever resource backs them."""

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def advertise(self, topic: str, queue_size: int = cfg.QUEUE_SIZE) -> Sink: ...

    @abstractmethod
    def close(self) -> None: ...
