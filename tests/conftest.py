import asyncio
from typing import Callable, List, Optional

import pytest


class FakeSerialTransport:
    """In-memory stand-in for a serial port."""

    def __init__(
        self,
        port_path: str,
        baud_rate: int,
        *,
        open_error: Optional[Exception] = None,
        write_error: Optional[Exception] = None,
        drain_error: Optional[Exception] = None,
        close_error: Optional[Exception] = None,
        open_gate: Optional[asyncio.Event] = None,
        hold_drain: bool = False,
    ) -> None:
        self.port_path = port_path
        self.baud_rate = baud_rate
        self.open_error = open_error
        self.write_error = write_error
        self.drain_error = drain_error
        self.close_error = close_error
        self.open_gate = open_gate
        self.hold_drain = hold_drain

        self.open_calls = 0
        self.close_calls = 0
        self.drain_calls = 0
        self.writes: List[bytes] = []
        self.listeners: List[Callable[[Optional[BaseException]], None]] = []
        self._open = False
        self._drain_waiter: Optional[asyncio.Future[None]] = None

    @property
    def is_open(self) -> bool:
        return self._open

    async def open(self) -> None:
        self.open_calls += 1
        if self.open_gate is not None:
            await self.open_gate.wait()
        if self.open_error is not None:
            raise self.open_error
        self._open = True

    async def write(self, data: bytes) -> None:
        self.writes.append(data)
        if self.write_error is not None:
            raise self.write_error

    async def drain(self) -> None:
        self.drain_calls += 1
        if self.hold_drain:
            self._drain_waiter = asyncio.get_running_loop().create_future()
            await self._drain_waiter
        if self.drain_error is not None:
            raise self.drain_error

    async def close(self) -> None:
        self.close_calls += 1
        self._open = False
        for listener in list(self.listeners):
            listener(None)
        if self.close_error is not None:
            raise self.close_error

    def add_close_listener(self, listener):
        self.listeners.append(listener)

        def _remove() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return _remove

    def simulate_disconnect(self, exc: Optional[BaseException] = None) -> None:
        self._open = False
        if self._drain_waiter is not None and not self._drain_waiter.done():
            self._drain_waiter.set_exception(exc or ConnectionResetError("gone"))
        for listener in list(self.listeners):
            listener(exc)


class FakeTransportFactory:
    """Creates FakeSerialTransport instances and records them.

    Keyword arguments given at construction, or assigned to ``options``
    later, apply to every transport created afterwards.
    """

    def __init__(self, **options) -> None:
        self.options = dict(options)
        self.created: List[FakeSerialTransport] = []

    def __call__(self, port_path: str, baud_rate: int) -> FakeSerialTransport:
        transport = FakeSerialTransport(port_path, baud_rate, **self.options)
        self.created.append(transport)
        return transport

    @property
    def last(self) -> FakeSerialTransport:
        return self.created[-1]


@pytest.fixture
def transport_factory():
    """Factory producing fake serial transports."""
    return FakeTransportFactory()
