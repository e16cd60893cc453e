from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging

from config.settings import get_settings
from mi.client import MIClient, subscription_socket
from notifications.decoder import Decoder
from notifications.dispatch import QueueDispatcher
from notifications.models import EventName, Notification
from notifications.receiver import EventReceiver

LOGGER = logging.getLogger(__name__)


def describe(notification: Notification) -> str:
    return f"{notification.event.value} {notification.params.to_wire()}"


async def subscribe_all(client: MIClient, events: list[str], socket: str, expire: int | None) -> None:
    for event in events:
        reply = await client.event_subscribe(event, socket, expire=expire)
        LOGGER.info("event_subscribe %s: %s", event, reply)


async def consume(queue: QueueDispatcher) -> None:
    async for notification in queue:
        LOGGER.info("%s", describe(notification))


async def serve(receiver: EventReceiver, queue: QueueDispatcher) -> None:
    """Run the receiver with a queue consumer task until the receiver stops.

    The consumer is cancelled and awaited on every exit path, so no task
    outlives the call.
    """

    consumer = asyncio.create_task(consume(queue))
    try:
        await receiver.run_forever()
    finally:
        consumer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await consumer


def _parse_args() -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Listen for OpenSIPS event datagrams")
    parser.add_argument("--host", default=settings.event_host)
    parser.add_argument("--port", type=int, default=settings.event_port)
    parser.add_argument(
        "--advertise-host",
        default=settings.event_advertise_host,
        help="Address OpenSIPS should send events to.",
    )
    parser.add_argument(
        "--event",
        action="append",
        dest="events",
        choices=[name.value for name in EventName],
        help="Event to subscribe to (repeatable). Defaults to all known events.",
    )
    parser.add_argument("--mi-url", default=settings.mi_url)
    parser.add_argument("--no-subscribe", action="store_true", help="Only listen; subscribe elsewhere.")
    return parser.parse_args()


async def _amain() -> None:
    args = _parse_args()
    settings = get_settings()

    queue = QueueDispatcher(maxsize=settings.event_queue_size)
    receiver = EventReceiver(
        args.host,
        args.port,
        queue,
        decoder=Decoder(settings.event_schema_version),
        receive_timeout=settings.event_receive_timeout,
    )
    _host, port = receiver.bind()

    if not args.no_subscribe:
        events = args.events or [name.value for name in EventName]
        socket = subscription_socket(args.advertise_host, port)
        try:
            async with MIClient(args.mi_url) as client:
                await subscribe_all(client, events, socket, settings.event_subscribe_expire)
        except Exception:
            receiver.close()
            raise

    await serve(receiver, queue)


def main() -> None:
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    asyncio.run(_amain())


if __name__ == "__main__":
    main()
