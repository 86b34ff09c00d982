"""
Publishing layer: the Sink/Transport contract, payload messages and transports.
"""

from pathsampler.publishing.base import (
    Payload,
    QuaternionMsg,
    Sink,
    TransformMsg,
    Transport,
    Vector3Msg,
    VectorMsg,
    decode_frame,
    encode_frame,
    make_node_name,
)
from pathsampler.publishing.inprocess import InProcessSink, InProcessTransport
from pathsampler.publishing.udp import UdpSink, UdpTransport

__all__ = [
    "Payload",
    "QuaternionMsg",
    "Sink",
    "TransformMsg",
    "Transport",
    "Vector3Msg",
    "VectorMsg",
    "decode_frame",
    "encode_frame",
    "make_node_name",
    "InProcessSink",
    "InProcessTransport",
    "UdpSink",
    "UdpTransport",
]
