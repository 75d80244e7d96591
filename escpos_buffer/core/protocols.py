"""Protocol definitions for serial transports and callbacks."""

from __future__ import annotations

from typing import Callable, Optional, Protocol


CloseListener = Callable[[Optional[BaseException]], None]


class SerialTransport(Protocol):
    """Minimal contract for a serial port the printer session can drive.

    A transport instance represents one connection attempt. Once it has been
    closed, either on request or by the device going away, it is discarded
    and a fresh instance is created for the next open.
    """

    @property
    def is_open(self) -> bool:
        """Whether the port is currently open and writable."""
        ...

    async def open(self) -> None:
        """Open the port.

        Raises:
            Exception: Whatever the platform reports (missing device, busy
                port, permission denied).
        """
        ...

    async def write(self, data: bytes) -> None:
        """Hand ``data`` to the port for transmission."""
        ...

    async def drain(self) -> None:
        """Wait until every written byte has left the local send buffer."""
        ...

    async def close(self) -> None:
        """Close the port and release the device."""
        ...

    def add_close_listener(self, listener: CloseListener) -> Callable[[], None]:
        """Call ``listener`` once the port closes, for whatever reason.

        The listener receives the error that caused the closure, or ``None``
        for an orderly close. Returns a callable that removes the listener.
        """
        ...


TransportFactory = Callable[[str, int], SerialTransport]
"""Builds an unopened transport for ``(port_path, baud_rate)``."""
