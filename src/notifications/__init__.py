"""OpenSIPS event notifications delivered over UDP (event_datagram).

Datagram socket -> `Decoder` -> typed `Notification` -> dispatcher callback.
Subscriptions are made through the management interface (see `mi`).
"""

from notifications.decoder import Decoder, decode, decode_batch
from notifications.dispatch import EventRouter, QueueDispatcher
from notifications.errors import (
    DecodeError,
    InvalidPayloadError,
    MalformedMessageError,
    TransportError,
    UnknownEventError,
)
from notifications.models import (
    ClusterNodeState,
    ClusterNodeStateChanged,
    ContactDeleted,
    ContactInserted,
    ContactUpdated,
    DialogState,
    DialogStateChanged,
    DispatcherStatusChanged,
    EventName,
    Notification,
    UASessionEvent,
)
from notifications.receiver import EventReceiver, ReceiverState

__all__ = [
    "ClusterNodeState",
    "ClusterNodeStateChanged",
    "ContactDeleted",
    "ContactInserted",
    "ContactUpdated",
    "DecodeError",
    "Decoder",
    "DialogState",
    "DialogStateChanged",
    "DispatcherStatusChanged",
    "EventName",
    "EventReceiver",
    "EventRouter",
    "InvalidPayloadError",
    "MalformedMessageError",
    "Notification",
    "QueueDispatcher",
    "ReceiverState",
    "TransportError",
    "UASessionEvent",
    "UnknownEventError",
    "decode",
    "decode_batch",
]
