"""Exceptions raised by the management interface client."""

from __future__ import annotations


class MIError(Exception):
    default_detail: str = "MI command failed"

    def __init__(self, detail: str | None = None, *, command: str | None = None) -> None:
        super().__init__(detail or self.default_detail)
        self.detail = detail or self.default_detail
        self.command = command


class MIRequestError(MIError):
    """The HTTP request did not complete or returned an error status."""

    default_detail = "MI request failed."


class MIResponseError(MIError):
    """OpenSIPS answered with a JSON-RPC error object."""

    default_detail = "MI command returned an error."

    def __init__(self, code: int, message: str, *, command: str | None = None) -> None:
        super().__init__(f"{code}: {message}", command=command)
        self.code = code
        self.message = message


class MIProtocolError(MIError):
    """The response was not a JSON-RPC reply or did not match the expected schema."""

    default_detail = "Unexpected MI response."
