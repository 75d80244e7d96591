"""Buffered ESC/POS printing over a serial port."""

from .commands import Alignment, Commands, TextSize
from .config import PrinterConfig
from .connection import ConnectionState, SerialConnection
from .errors import (
    CloseFailure,
    CommandError,
    DrainFailure,
    OpenFailure,
    PrinterError,
    PrintStage,
    TransmissionError,
    UnsolicitedDisconnect,
    WriteFailure,
)
from .printer import PrinterBuffer
from .version import __version__

__all__ = [
    "Alignment",
    "CloseFailure",
    "CommandError",
    "Commands",
    "ConnectionState",
    "DrainFailure",
    "OpenFailure",
    "PrintStage",
    "PrinterBuffer",
    "PrinterConfig",
    "PrinterError",
    "SerialConnection",
    "TextSize",
    "TransmissionError",
    "UnsolicitedDisconnect",
    "WriteFailure",
    "__version__",
]
