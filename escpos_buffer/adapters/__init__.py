"""Adapters for the transports escpos-buffer talks through."""

from .serial import AsyncSerialTransport

__all__ = ["AsyncSerialTransport"]
