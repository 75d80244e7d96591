"""Serial adapter wrapping pyserial-asyncio for the printer session."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Callable, List, Optional

import serial
import serial_asyncio

from ..core.protocols import CloseListener

LOGGER = logging.getLogger(__name__)


class _PrinterProtocol(asyncio.Protocol):
    """asyncio protocol tracking connection and flow-control state.

    The write buffer high-water mark is set to zero, so the transport pauses
    the protocol as soon as any byte is queued and resumes it once the queue
    is empty again. ``wait_drained`` waits for that resume.
    """

    def __init__(self, on_lost: Callable[[Optional[BaseException]], None]) -> None:
        loop = asyncio.get_running_loop()
        self.transport: Optional[asyncio.BaseTransport] = None
        self._on_lost = on_lost
        self._connected: asyncio.Future[None] = loop.create_future()
        self._closed: asyncio.Future[None] = loop.create_future()
        self._paused = False
        self._drain_waiters: List[asyncio.Future[None]] = []

    @property
    def closed(self) -> bool:
        return self._closed.done()

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = transport
        transport.set_write_buffer_limits(high=0)  # type: ignore[attr-defined]
        if not self._connected.done():
            self._connected.set_result(None)

    def data_received(self, data: bytes) -> None:
        LOGGER.debug("Ignoring %d bytes received from printer", len(data))

    def pause_writing(self) -> None:
        self._paused = True

    def resume_writing(self) -> None:
        self._paused = False
        self._wake_drain_waiters(None)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        if not self._connected.done():
            self._connected.set_exception(
                exc or ConnectionResetError("Port closed while opening")
            )
        if not self._closed.done():
            self._closed.set_result(None)
        self._paused = False
        self._wake_drain_waiters(exc or ConnectionResetError("Port closed"))
        self._on_lost(exc)

    async def wait_connected(self) -> None:
        await self._connected

    async def wait_closed(self) -> None:
        await self._closed

    async def wait_drained(self) -> None:
        if self.closed:
            raise ConnectionResetError("Port closed")
        if not self._paused:
            return
        waiter = asyncio.get_running_loop().create_future()
        self._drain_waiters.append(waiter)
        await waiter

    def _wake_drain_waiters(self, exc: Optional[BaseException]) -> None:
        waiters, self._drain_waiters = self._drain_waiters, []
        for waiter in waiters:
            if waiter.done():
                continue
            if exc is None:
                waiter.set_result(None)
            else:
                waiter.set_exception(exc)


class AsyncSerialTransport:
    """One serial connection to a printer, opened through pyserial-asyncio."""

    def __init__(self, port_path: str, baud_rate: int) -> None:
        self.port_path = port_path
        self.baud_rate = baud_rate
        self._serial: Optional[serial.SerialBase] = None
        self._transport: Optional[asyncio.Transport] = None
        self._protocol: Optional[_PrinterProtocol] = None
        self._close_listeners: List[CloseListener] = []

    @property
    def is_open(self) -> bool:
        return (
            self._transport is not None
            and self._protocol is not None
            and not self._protocol.closed
            and not self._transport.is_closing()
        )

    async def open(self) -> None:
        if self._serial is not None:
            raise RuntimeError(f"Transport for {self.port_path} was already opened")

        loop = asyncio.get_running_loop()
        # Opening the device and configuring termios blocks; keep it off the loop.
        serial_instance = await loop.run_in_executor(
            None,
            partial(serial.serial_for_url, self.port_path, baudrate=self.baud_rate),
        )
        self._serial = serial_instance

        try:
            transport, protocol = await serial_asyncio.connection_for_serial(
                loop,
                lambda: _PrinterProtocol(self._handle_connection_lost),
                serial_instance,
            )
        except Exception:
            await loop.run_in_executor(None, serial_instance.close)
            raise

        self._transport = transport
        self._protocol = protocol
        await protocol.wait_connected()

    async def write(self, data: bytes) -> None:
        transport = self._require_open()
        transport.write(data)
        LOGGER.debug("Queued %d bytes for %s", len(data), self.port_path)

    async def drain(self) -> None:
        self._require_open()
        assert self._protocol is not None and self._serial is not None
        await self._protocol.wait_drained()
        # The event loop buffer is empty; wait for the UART to finish as well.
        await asyncio.get_running_loop().run_in_executor(None, self._serial.flush)

    async def close(self) -> None:
        if self._transport is None or self._protocol is None:
            return
        if not self._transport.is_closing():
            self._transport.close()
        await self._protocol.wait_closed()

        # pyserial-asyncio closes the device after connection_lost and reports
        # a failure to the loop's exception handler; retry here so it surfaces.
        if self._serial is not None and self._serial.is_open:
            await asyncio.get_running_loop().run_in_executor(None, self._serial.close)

    def add_close_listener(self, listener: CloseListener) -> Callable[[], None]:
        self._close_listeners.append(listener)

        def _remove() -> None:
            try:
                self._close_listeners.remove(listener)
            except ValueError:
                pass

        return _remove

    def _require_open(self) -> asyncio.Transport:
        if not self.is_open:
            raise ConnectionResetError(f"Port {self.port_path} is not open")
        assert self._transport is not None
        return self._transport

    def _handle_connection_lost(self, exc: Optional[BaseException]) -> None:
        if exc is not None:
            LOGGER.debug("Serial connection %s lost: %s", self.port_path, exc)
        for listener in list(self._close_listeners):
            try:
                listener(exc)
            except Exception:
                LOGGER.warning("Close listener failed", exc_info=True)
