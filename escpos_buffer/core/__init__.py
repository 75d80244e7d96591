"""Core primitives for escpos-buffer."""

from .protocols import CloseListener, SerialTransport, TransportFactory

__all__ = [
    "CloseListener",
    "SerialTransport",
    "TransportFactory",
]
