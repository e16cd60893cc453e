"""Exceptions raised while decoding and receiving event notifications.

Decode errors are always recoverable: the receiver logs them and keeps
listening. Only `TransportError` ends a receiver.
"""

from __future__ import annotations

from typing import Any


class NotificationError(Exception):
    default_detail: str = "Notification error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail


class DecodeError(NotificationError):
    """A datagram could not be turned into a notification."""

    default_detail = "Could not decode notification."

    def __init__(self, detail: str | None = None, *, event: str | None = None, raw: bytes = b"") -> None:
        super().__init__(detail)
        self.event = event
        self.raw = raw


class MalformedMessageError(DecodeError):
    default_detail = "Datagram is not a JSON object."


class UnknownEventError(DecodeError):
    default_detail = "Unrecognized event."


class InvalidPayloadError(DecodeError):
    default_detail = "Event payload failed validation."

    def __init__(
        self,
        detail: str | None = None,
        *,
        event: str | None = None,
        raw: bytes = b"",
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(detail, event=event, raw=raw)
        self.errors = errors or []


class TransportError(NotificationError):
    """The datagram socket failed; the receiver cannot continue."""

    default_detail = "Event socket failed."
