"""Serial connection lifecycle management.

This module owns the single transport a printer session talks through. It
opens the port lazily, collapses concurrent open requests onto one in-flight
attempt, and throws the transport away on any failure so the next request
starts from a clean open.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import Enum
from functools import partial
from typing import Callable, List, Optional

from . import constants
from .core.protocols import SerialTransport, TransportFactory
from .errors import (
    CloseFailure,
    DrainFailure,
    OpenFailure,
    UnsolicitedDisconnect,
    WriteFailure,
)

LOGGER = logging.getLogger(__name__)

DisconnectCallback = Callable[[UnsolicitedDisconnect], None]


class ConnectionState(str, Enum):
    """Current state of the serial connection."""

    CLOSED = "closed"
    """No transport exists and no open is in flight."""

    OPENING = "opening"
    """A transport was created and its open request is pending."""

    OPEN = "open"
    """The transport is open and accepts writes."""


def _default_transport_factory(port_path: str, baud_rate: int) -> SerialTransport:
    from .adapters.serial import AsyncSerialTransport

    return AsyncSerialTransport(port_path, baud_rate)


class SerialConnection:
    """Coordinates the open/write/drain/close lifecycle of one serial port.

    Key responsibilities:
    - Open the port at most once at a time; concurrent callers share the
      in-flight attempt
    - Write and drain payloads, tagging failures with the stage they hit
    - Discard the transport on any failure or transport-reported closure
    """

    def __init__(
        self,
        port_path: str,
        baud_rate: int = constants.DEFAULT_BAUD_RATE,
        *,
        transport_factory: Optional[TransportFactory] = None,
    ) -> None:
        self.port_path = port_path
        self.baud_rate = baud_rate
        self._transport_factory = transport_factory or _default_transport_factory

        self._state = ConnectionState.CLOSED
        self._transport: Optional[SerialTransport] = None
        self._opening: Optional[asyncio.Task[None]] = None
        self._remove_close_listener: Optional[Callable[[], None]] = None
        self._sending = False
        self._disconnected_callbacks: List[DisconnectCallback] = []

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == ConnectionState.OPEN

    def register_disconnected_callback(
        self, callback: DisconnectCallback
    ) -> Callable[[], None]:
        """Register callback invoked when the port closes unexpectedly.

        Returns a callable that unregisters it again.
        """
        self._disconnected_callbacks.append(callback)

        def _remove() -> None:
            try:
                self._disconnected_callbacks.remove(callback)
            except ValueError:
                pass

        return _remove

    async def ensure_open(self) -> None:
        """Open the port unless it already is.

        Callers arriving while an open is in flight wait on that same attempt
        instead of starting another one.

        Raises:
            OpenFailure: If the transport could not open the port.
        """
        if self._state == ConnectionState.OPEN:
            return

        if self._opening is None:
            self._opening = asyncio.create_task(self._open())

        await asyncio.shield(self._opening)

    async def send(self, payload: bytes) -> None:
        """Write ``payload`` as one chunk and wait until it is drained.

        Raises:
            OpenFailure, WriteFailure, DrainFailure: Depending on the stage
                that failed. The transport is discarded in every case.
        """
        await self.ensure_open()

        transport = self._transport
        if transport is None or self._state != ConnectionState.OPEN:
            raise WriteFailure(
                self.port_path, ConnectionResetError("Port closed before write")
            )

        self._sending = True
        try:
            try:
                await transport.write(payload)
            except Exception as exc:
                await self._abandon(transport)
                raise WriteFailure(self.port_path, exc) from exc

            LOGGER.debug(
                "Wrote %d bytes to %s, draining", len(payload), self.port_path
            )

            try:
                await transport.drain()
            except Exception as exc:
                await self._abandon(transport)
                raise DrainFailure(self.port_path, exc) from exc
        finally:
            self._sending = False

    async def close(self) -> None:
        """Close the port.

        Safe to call repeatedly. An open still in flight is allowed to
        settle first. The connection always ends up closed.

        Raises:
            CloseFailure: If the transport reported an error while closing.
        """
        if self._opening is not None:
            with contextlib.suppress(OpenFailure):
                await asyncio.shield(self._opening)

        transport = self._transport
        if transport is None:
            return

        self._discard(transport)
        LOGGER.info("Closing serial port %s", self.port_path)

        try:
            await transport.close()
        except Exception as exc:
            raise CloseFailure(self.port_path, exc) from exc

    async def _open(self) -> None:
        transport: Optional[SerialTransport] = None
        try:
            transport = self._transport_factory(self.port_path, self.baud_rate)
            self._transport = transport
            self._state = ConnectionState.OPENING
            self._remove_close_listener = transport.add_close_listener(
                partial(self._handle_transport_closed, transport)
            )

            LOGGER.info(
                "Opening serial port %s at %d baud", self.port_path, self.baud_rate
            )
            await transport.open()
        except BaseException as exc:
            if transport is not None:
                self._discard(transport)
            if isinstance(exc, Exception):
                raise OpenFailure(self.port_path, exc) from exc
            raise
        finally:
            self._opening = None

        if self._transport is not transport:
            # Closed by the device while the open was completing.
            raise OpenFailure(
                self.port_path, ConnectionResetError("Port closed while opening")
            )

        self._state = ConnectionState.OPEN
        LOGGER.info("Serial port %s open", self.port_path)

    def _discard(self, transport: SerialTransport) -> None:
        if self._transport is not transport:
            return
        if self._remove_close_listener is not None:
            self._remove_close_listener()
            self._remove_close_listener = None
        self._transport = None
        self._state = ConnectionState.CLOSED

    async def _abandon(self, transport: SerialTransport) -> None:
        self._discard(transport)
        try:
            await transport.close()
        except Exception:
            LOGGER.debug(
                "Error closing abandoned transport for %s", self.port_path, exc_info=True
            )

    def _handle_transport_closed(
        self, transport: SerialTransport, exc: Optional[BaseException]
    ) -> None:
        if transport is not self._transport:
            return

        previous_state = self._state
        self._discard(transport)

        if previous_state != ConnectionState.OPEN:
            # The pending open reports this failure itself.
            return

        if self._sending:
            # The pending send fails with a stage error instead.
            LOGGER.debug("Port %s closed during send: %s", self.port_path, exc)
            return

        error = UnsolicitedDisconnect(self.port_path, exc)
        LOGGER.warning("%s", error)

        for callback in list(self._disconnected_callbacks):
            try:
                callback(error)
            except Exception:
                LOGGER.warning("Disconnected callback failed", exc_info=True)
