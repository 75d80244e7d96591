"""Buffered ESC/POS print session."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional, Union

from . import constants
from .commands import Alignment, Commands, TextSize
from .config import PrinterConfig
from .connection import ConnectionState, DisconnectCallback, SerialConnection
from .core.protocols import TransportFactory
from .errors import OpenFailure

LOGGER = logging.getLogger(__name__)


class PrinterBuffer:
    """Accumulates ESC/POS commands and sends them to a serial printer.

    Builder methods append to a pending buffer and return the session so
    calls can be chained::

        printer = PrinterBuffer("/dev/ttyUSB0")
        printer.init().align(Alignment.CENTER).bold("RECEIPT").feed(3)
        await printer.print()
        await printer.close()

    ``print()`` sends the whole buffer as a single write and clears it only
    once the port has drained. On failure the buffer is kept so the same job
    can be retried. A session must not run two ``print()`` calls at once.
    """

    def __init__(
        self,
        port_path: str,
        baud_rate: int = constants.DEFAULT_BAUD_RATE,
        auto_open: bool = True,
        encoding: str = constants.DEFAULT_ENCODING,
        *,
        transport_factory: Optional[TransportFactory] = None,
    ) -> None:
        self._buffer: List[bytes] = []
        self._config = PrinterConfig(
            port_path=port_path,
            baud_rate=baud_rate,
            auto_open=auto_open,
            encoding=encoding,
        )
        self._connection = SerialConnection(
            port_path, baud_rate, transport_factory=transport_factory
        )
        self._auto_open_task: Optional[asyncio.Task[None]] = None

        if auto_open:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                self._auto_open_task = loop.create_task(self._auto_open())

    @classmethod
    def from_config(
        cls,
        config: PrinterConfig,
        *,
        transport_factory: Optional[TransportFactory] = None,
    ) -> "PrinterBuffer":
        return cls(
            config.port_path,
            baud_rate=config.baud_rate,
            auto_open=config.auto_open,
            encoding=config.encoding,
            transport_factory=transport_factory,
        )

    @property
    def config(self) -> PrinterConfig:
        return self._config

    @property
    def buffer(self) -> tuple[bytes, ...]:
        """Pending fragments in print order."""
        return tuple(self._buffer)

    @property
    def payload(self) -> bytes:
        return b"".join(self._buffer)

    @property
    def state(self) -> ConnectionState:
        return self._connection.state

    @property
    def is_open(self) -> bool:
        return self._connection.is_open

    def add_disconnect_listener(
        self, callback: DisconnectCallback
    ) -> Callable[[], None]:
        """Be told when the printer goes away without being closed."""
        return self._connection.register_disconnected_callback(callback)

    # Builder API

    def init(self) -> "PrinterBuffer":
        self._buffer.append(Commands.INIT)
        return self

    def align(self, alignment: Union[Alignment, str]) -> "PrinterBuffer":
        self._buffer.append(Commands.align(alignment))
        return self

    def text(self, text: str) -> "PrinterBuffer":
        self._buffer.append(self._line(text))
        return self

    def bold(self, text: str) -> "PrinterBuffer":
        line = self._line(text)
        self._buffer.extend((Commands.BOLD_ON, line, Commands.BOLD_OFF))
        return self

    def bold_on(self) -> "PrinterBuffer":
        self._buffer.append(Commands.BOLD_ON)
        return self

    def bold_off(self) -> "PrinterBuffer":
        self._buffer.append(Commands.BOLD_OFF)
        return self

    def size(
        self, size: Union[TextSize, str], text: Optional[str] = None
    ) -> "PrinterBuffer":
        """Select a character size.

        With ``text`` the line is printed at that size and normal size is
        restored afterwards; without it the size stays in effect.
        """
        mode = Commands.set_text_size(size)
        if text is None:
            self._buffer.append(mode)
        else:
            line = self._line(text)
            self._buffer.extend(
                (mode, line, Commands.set_text_size(TextSize.NORMAL))
            )
        return self

    def feed(self, n: int = constants.DEFAULT_FEED_LINES) -> "PrinterBuffer":
        self._buffer.append(Commands.feed_lines(n))
        return self

    def clear(self) -> "PrinterBuffer":
        self._buffer = []
        return self

    # Transmission

    async def print(self) -> None:
        """Send the pending buffer to the printer.

        Returns immediately when nothing is pending. Otherwise opens the port
        if needed, writes the buffer and waits for the drain before clearing
        it.

        Raises:
            OpenFailure, WriteFailure, DrainFailure: The buffer is left as it
                was and the connection is reset, so calling ``print()`` again
                retries the same job.
        """
        if not self._buffer:
            return

        payload = self.payload
        await self._connection.send(payload)
        self._buffer = []
        LOGGER.debug("Printed %d bytes on %s", len(payload), self._config.port_path)

    async def close(self) -> None:
        """Close the port if open; the session can be printed on again later.

        A pending automatic open is cancelled first, so it cannot reopen the
        port after this returns.

        Raises:
            CloseFailure: If the transport reported an error while closing.
                The session is closed regardless.
        """
        task, self._auto_open_task = self._auto_open_task, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.wait({task})
        await self._connection.close()

    async def __aenter__(self) -> "PrinterBuffer":
        if self._config.auto_open:
            await self._connection.ensure_open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _line(self, text: str) -> bytes:
        return Commands.line(text, self._config.encoding)

    async def _auto_open(self) -> None:
        try:
            await self._connection.ensure_open()
        except OpenFailure as exc:
            LOGGER.warning("Automatic open failed, will retry on print: %s", exc)
