"""Exceptions raised by the printer session and its transport."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class PrintStage(str, Enum):
    """Transmission stage at which a failure occurred."""

    OPEN = "open"
    WRITE = "write"
    DRAIN = "drain"
    CLOSE = "close"


class PrinterError(RuntimeError):
    """Base class for all escpos-buffer errors."""


class CommandError(PrinterError, ValueError):
    """Raised when a builder call receives a parameter it cannot encode."""


class TransmissionError(PrinterError):
    """Raised when the transport fails while talking to the printer.

    Carries the stage that failed and the underlying transport error so the
    caller can decide whether to retry.
    """

    stage: PrintStage

    def __init__(
        self, port_path: str, cause: Optional[BaseException] = None
    ) -> None:
        self.port_path = port_path
        self.cause = cause
        detail = str(cause) if cause is not None and str(cause) else "Unknown error"
        super().__init__(f"Failed to {self.stage.value} port {port_path}: {detail}")


class OpenFailure(TransmissionError):
    """The serial port could not be opened."""

    stage = PrintStage.OPEN


class WriteFailure(TransmissionError):
    """The transport rejected the payload or failed mid-write."""

    stage = PrintStage.WRITE


class DrainFailure(TransmissionError):
    """The payload was accepted but could not be flushed to the device."""

    stage = PrintStage.DRAIN


class CloseFailure(TransmissionError):
    """The transport could not close cleanly."""

    stage = PrintStage.CLOSE


class UnsolicitedDisconnect(PrinterError):
    """Describes a port closure the session did not request.

    Handed to disconnect listeners; never raised to a caller.
    """

    def __init__(
        self, port_path: str, cause: Optional[BaseException] = None
    ) -> None:
        self.port_path = port_path
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Port {port_path} closed unexpectedly{detail}")
