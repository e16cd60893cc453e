from __future__ import annotations

import asyncio
import logging
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Final

from notifications.decoder import Decoder
from notifications.dispatch import Dispatcher, deliver
from notifications.errors import DecodeError, TransportError

LOGGER = logging.getLogger(__name__)


MAX_DATAGRAM_SIZE: Final[int] = 65536


class ReceiverState(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    TERMINATED = "terminated"


@dataclass(slots=True)
class ReceiverStats:
    datagrams: int = 0
    delivered: int = 0
    decode_failures: int = 0
    dispatch_failures: int = 0
    idle_timeouts: int = 0


class EventReceiver:
    """UDP listener for OpenSIPS event datagrams (event_datagram module).

    One datagram is read, decoded and handed to `dispatcher` at a time; the
    next read starts only after the dispatcher returns. Bad datagrams and
    failing dispatchers are logged and skipped. The loop ends only when the
    socket fails (`TransportError`) or the hosting task is cancelled.
    """

    def __init__(
        self,
        host: str,
        port: int,
        dispatcher: Dispatcher,
        *,
        decoder: Decoder | None = None,
        buffer_size: int = MAX_DATAGRAM_SIZE,
        receive_timeout: float | None = None,
    ) -> None:
        if not isinstance(dispatcher, Dispatcher):
            raise TypeError(f"dispatcher must be callable, got {type(dispatcher).__name__}")
        self._host = host
        self._port = port
        self._dispatcher = dispatcher
        self._decoder = decoder or Decoder()
        self._buffer = bytearray(buffer_size)
        self._receive_timeout = receive_timeout
        self._sock: socket.socket | None = None
        self.state = ReceiverState.IDLE
        self.stats = ReceiverStats()

    @property
    def address(self) -> tuple[str, int]:
        if self._sock is None:
            return (self._host, self._port)
        host, port = self._sock.getsockname()[:2]
        return (host, port)

    def bind(self) -> tuple[str, int]:
        """Create and bind the socket; returns the bound address."""

        if self.state is ReceiverState.TERMINATED:
            raise TransportError("Receiver already terminated")
        if self._sock is not None:
            return self.address

        family = socket.AF_INET6 if ":" in self._host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_DGRAM)
        try:
            sock.bind((self._host, self._port))
        except OSError as exc:
            sock.close()
            raise TransportError(f"Failed to bind UDP socket to {self._host}:{self._port}: {exc}") from exc
        sock.setblocking(False)

        self._sock = sock
        self.state = ReceiverState.LISTENING
        LOGGER.info("Event receiver listening on %s:%s", *self.address)
        return self.address

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None
        self.state = ReceiverState.TERMINATED

    async def run_forever(self) -> None:
        self.bind()
        sock = self._sock
        try:
            while True:
                await self._receive_once(sock)
        except OSError as exc:
            LOGGER.error("Event socket failed: %s", exc)
            raise TransportError(f"Event socket failed: {exc}") from exc
        finally:
            self.close()

    async def _receive_once(self, sock: socket.socket) -> None:
        loop = asyncio.get_running_loop()
        recv = loop.sock_recvfrom_into(sock, self._buffer)
        if self._receive_timeout is None:
            size, addr = await recv
        else:
            try:
                size, addr = await asyncio.wait_for(recv, self._receive_timeout)
            except asyncio.TimeoutError:
                self.stats.idle_timeouts += 1
                LOGGER.debug("No event received in %.1fs", self._receive_timeout)
                return

        self.stats.datagrams += 1
        try:
            notification = self._decoder.decode(memoryview(self._buffer)[:size])
        except DecodeError as exc:
            self.stats.decode_failures += 1
            LOGGER.debug("Dropping datagram from %s (event=%s): %s", addr, exc.event, exc.detail)
            return

        try:
            await deliver(self._dispatcher, notification)
        except Exception:
            self.stats.dispatch_failures += 1
            LOGGER.exception("Dispatcher failed for %s", notification.event.value)
            return
        self.stats.delivered += 1
