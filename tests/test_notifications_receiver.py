from __future__ import annotations

import asyncio
import logging
import socket

import pytest

from conftest import contact_payload, message
from notifications.errors import TransportError
from notifications.models import ContactInserted, Notification
from notifications.receiver import EventReceiver, ReceiverState


def _run(coro):
    return asyncio.run(asyncio.wait_for(coro, timeout=5))


def _send(address: tuple[str, int], datagrams: list[bytes]) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sender:
        for datagram in datagrams:
            sender.sendto(datagram, address)


class Collector:
    def __init__(self, expected: int) -> None:
        self.received: list[Notification] = []
        self._expected = expected
        self.done = asyncio.Event()

    async def __call__(self, notification: Notification) -> None:
        self.received.append(notification)
        if len(self.received) >= self._expected:
            self.done.set()


async def _stop(task: asyncio.Task) -> None:
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


def test_receiver_skips_one_malformed_datagram_and_keeps_order(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="notifications.receiver")
    datagrams = [message("E_UL_CONTACT_INSERT", contact_payload(cseq=i)) for i in range(5)]
    datagrams[2] = b'{"jsonrpc":"2.0","method":"E_UL_CONTACT_INSERT","params":{"dom'

    async def scenario() -> EventReceiver:
        collector = Collector(expected=4)
        receiver = EventReceiver("127.0.0.1", 0, collector)
        address = receiver.bind()
        task = asyncio.create_task(receiver.run_forever())

        _send(address, datagrams)
        await collector.done.wait()
        await _stop(task)

        assert [n.params.cseq for n in collector.received] == [0, 1, 3, 4]
        assert all(isinstance(n, ContactInserted) for n in collector.received)
        return receiver

    receiver = _run(scenario())

    assert receiver.stats.datagrams == 5
    assert receiver.stats.delivered == 4
    assert receiver.stats.decode_failures == 1
    dropped = [r for r in caplog.records if r.getMessage().startswith("Dropping datagram")]
    assert len(dropped) == 1


def test_receiver_survives_failing_dispatcher(caplog: pytest.LogCaptureFixture) -> None:
    async def scenario() -> None:
        seen: list[int] = []
        done = asyncio.Event()

        async def dispatcher(notification: Notification) -> None:
            seen.append(notification.params.cseq)
            if len(seen) == 1:
                raise RuntimeError("consumer blew up")
            done.set()

        receiver = EventReceiver("127.0.0.1", 0, dispatcher)
        address = receiver.bind()
        task = asyncio.create_task(receiver.run_forever())

        _send(address, [message("E_UL_CONTACT_INSERT", contact_payload(cseq=i)) for i in (1, 2)])
        await done.wait()
        await _stop(task)

        assert seen == [1, 2]
        assert receiver.stats.dispatch_failures == 1
        assert receiver.stats.delivered == 1

    _run(scenario())
    assert any("Dispatcher failed" in r.getMessage() for r in caplog.records)


def test_receiver_accepts_sync_dispatcher() -> None:
    async def scenario() -> None:
        received: list[Notification] = []
        done = asyncio.Event()

        def dispatcher(notification: Notification) -> None:
            received.append(notification)
            done.set()

        receiver = EventReceiver("127.0.0.1", 0, dispatcher)
        address = receiver.bind()
        task = asyncio.create_task(receiver.run_forever())
        _send(address, [message("E_CLUSTERER_NODE_STATE_CHANGE", {"cluster_id": 1, "node_id": 2, "new_state": 0})])
        await done.wait()
        await _stop(task)

        assert received[0].params.node_id == 2

    _run(scenario())


def test_cancellation_releases_socket() -> None:
    async def scenario() -> tuple[EventReceiver, tuple[str, int]]:
        receiver = EventReceiver("127.0.0.1", 0, lambda n: None)
        address = receiver.bind()
        assert receiver.state is ReceiverState.LISTENING

        task = asyncio.create_task(receiver.run_forever())
        await asyncio.sleep(0.01)
        await _stop(task)
        return receiver, address

    receiver, address = _run(scenario())

    assert receiver.state is ReceiverState.TERMINATED
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(address)


def test_bind_conflict_is_transport_error() -> None:
    first = EventReceiver("127.0.0.1", 0, lambda n: None)
    address = first.bind()
    try:
        second = EventReceiver(*address, lambda n: None)
        with pytest.raises(TransportError):
            second.bind()
    finally:
        first.close()


def test_socket_failure_ends_loop_with_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    async def scenario() -> EventReceiver:
        loop = asyncio.get_running_loop()

        async def broken_recv(sock, buf):
            raise ConnectionResetError("socket gone")

        monkeypatch.setattr(loop, "sock_recvfrom_into", broken_recv)
        receiver = EventReceiver("127.0.0.1", 0, lambda n: None)
        with pytest.raises(TransportError) as excinfo:
            await receiver.run_forever()
        assert isinstance(excinfo.value.__cause__, ConnectionResetError)
        return receiver

    receiver = _run(scenario())
    assert receiver.state is ReceiverState.TERMINATED


def test_receive_timeout_is_not_fatal() -> None:
    async def scenario() -> None:
        done = asyncio.Event()
        receiver = EventReceiver("127.0.0.1", 0, lambda n: done.set(), receive_timeout=0.01)
        address = receiver.bind()
        task = asyncio.create_task(receiver.run_forever())

        while receiver.stats.idle_timeouts < 2:
            await asyncio.sleep(0.01)
        _send(address, [message("E_UL_CONTACT_DELETE", contact_payload())])
        await done.wait()
        await _stop(task)

        assert receiver.stats.delivered == 1

    _run(scenario())


def test_oversized_datagram_is_dropped() -> None:
    async def scenario() -> None:
        collector = Collector(expected=1)
        receiver = EventReceiver("127.0.0.1", 0, collector, buffer_size=256)
        address = receiver.bind()
        task = asyncio.create_task(receiver.run_forever())

        _send(address, [message("E_UL_CONTACT_INSERT", contact_payload())])
        _send(address, [message("E_CLUSTERER_NODE_STATE_CHANGE", {"cluster_id": 1, "node_id": 2, "new_state": 1})])
        await collector.done.wait()
        await _stop(task)

        assert receiver.stats.decode_failures == 1
        assert collector.received[0].params.cluster_id == 1

    _run(scenario())


def test_non_callable_dispatcher_is_rejected() -> None:
    with pytest.raises(TypeError, match="dispatcher must be callable"):
        EventReceiver("127.0.0.1", 0, object())
