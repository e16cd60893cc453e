"""Decode raw event datagrams into typed notifications.

Decoding happens in two steps: the datagram is parsed as JSON and its
`method` discriminator extracted, then the matching variant validates the
`params` payload. Any input, however broken, ends in either a notification
or a `DecodeError`.

Payloads are validated strictly against their JSON types: a number sent as
a string, a bool where an integer is expected or a float where an integer
is expected is an `InvalidPayloadError`, not a silent coercion.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from notifications.errors import (
    DecodeError,
    InvalidPayloadError,
    MalformedMessageError,
    UnknownEventError,
)
from notifications.models import Notification, notification_types

Buffer = bytes | bytearray | memoryview


def _unique_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    obj: dict[str, Any] = {}
    for key, value in pairs:
        if key in obj:
            raise ValueError(f"Duplicate key {key!r}")
        obj[key] = value
    return obj


def _load_json(raw: bytes) -> Any:
    try:
        return json.loads(raw, object_pairs_hook=_unique_keys)
    except UnicodeDecodeError as exc:
        raise MalformedMessageError(f"Datagram is not valid UTF-8: {exc.reason}", raw=raw) from exc
    except ValueError as exc:
        # JSONDecodeError, a duplicate key, or an integer literal over the int digit limit.
        raise MalformedMessageError(f"Invalid JSON: {exc}", raw=raw) from exc
    except RecursionError as exc:
        raise MalformedMessageError("JSON nesting too deep", raw=raw) from exc


class Decoder:
    """Turns datagrams into `Notification` instances for one schema version."""

    def __init__(self, schema_version: int = 2) -> None:
        self.schema_version = schema_version
        self._types = notification_types(schema_version)

    @property
    def events(self) -> frozenset[str]:
        return frozenset(self._types)

    def decode(self, data: Buffer) -> Notification:
        """Decode one datagram.

        Raises:
            MalformedMessageError: the bytes are not a JSON object.
            UnknownEventError: `method` is missing or not a known event.
            InvalidPayloadError: `params` does not match the event schema.
        """

        raw = bytes(data)
        return self._decode_message(_load_json(raw), raw)

    def decode_batch(self, data: Buffer) -> list[Notification | DecodeError]:
        """Decode a JSON array of messages, each element on its own.

        Elements that fail are returned as their `DecodeError` in place, so a
        single bad entry does not hide the rest. Only a top-level value that
        is not an array raises.
        """

        raw = bytes(data)
        messages = _load_json(raw)
        if not isinstance(messages, list):
            raise MalformedMessageError("Expected a JSON array of messages", raw=raw)

        results: list[Notification | DecodeError] = []
        for message in messages:
            try:
                results.append(self._decode_message(message, raw))
            except DecodeError as exc:
                results.append(exc)
        return results

    def _decode_message(self, message: Any, raw: bytes) -> Notification:
        if not isinstance(message, dict):
            raise MalformedMessageError(
                f"Expected a JSON object, got {type(message).__name__}", raw=raw
            )

        event = message.get("method")
        if not isinstance(event, str):
            raise UnknownEventError("Message has no event name in 'method'", raw=raw)

        variant = self._types.get(event)
        if variant is None:
            raise UnknownEventError(f"Unrecognized event {event!r}", event=event, raw=raw)

        if "params" not in message:
            raise InvalidPayloadError(f"{event} has no 'params'", event=event, raw=raw)

        # JSON-mode strict validation: enums still accept their wire values,
        # but "1" / true / 1.0 are rejected where an integer is declared.
        payload = json.dumps({"params": message["params"]})
        try:
            return variant.model_validate_json(payload, strict=True)
        except ValidationError as exc:
            raise InvalidPayloadError(
                f"Invalid {event} payload: {exc.error_count()} error(s)",
                event=event,
                raw=raw,
                errors=exc.errors(include_url=False),
            ) from exc


_default_decoder = Decoder()


def decode(data: Buffer) -> Notification:
    return _default_decoder.decode(data)


def decode_batch(data: Buffer) -> list[Notification | DecodeError]:
    return _default_decoder.decode_batch(data)
