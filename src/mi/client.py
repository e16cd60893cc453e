"""JSON-RPC client for the OpenSIPS management interface (mi_http)."""

from __future__ import annotations

import itertools
import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from config.settings import get_settings
from mi.errors import MIProtocolError, MIRequestError, MIResponseError
from mi.schemas import (
    CacheResponse,
    ClustererListResponse,
    DialogListRecordResponse,
    DialogListResponse,
    DispatcherListResponse,
    DumpResponse,
    EventsListResponse,
    LogLevel,
    LogLevelResponse,
    RegListRecordResponse,
    RegListResponse,
    SharedTagStatus,
    TUacDlgResponse,
    UASessionInfo,
    VersionResponse,
    XLogLevelResponse,
)

LOGGER = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_SHTAG_LIST = TypeAdapter(list[SharedTagStatus])
_UA_SESSION_LIST = TypeAdapter(list[UASessionInfo])


def subscription_socket(host: str, port: int, scheme: str = "udp") -> str:
    """Build the `socket` argument of event_subscribe, e.g. ``udp:10.0.0.5:9000``."""

    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    return f"{scheme}:{host}:{port}"


class MIClient:
    """Calls MI commands over HTTP and validates their results.

    Each command maps to one JSON-RPC request with named params. Optional
    arguments left as None are not sent: OpenSIPS rejects null params.

    Used bare, every call opens a short-lived `httpx.AsyncClient`. Used as an
    async context manager, one client is opened on entry and shared until
    exit. A caller-supplied `client` is used as is and never closed here.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings()
        self._url = url or settings.mi_url
        self._timeout = timeout if timeout is not None else settings.mi_timeout
        self._transport = transport
        self._ids = itertools.count(1)
        self._client = client
        self._owns_client = False

    async def __aenter__(self) -> MIClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
            self._owns_client = True
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
        self._owns_client = False

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(self._url, json=payload)
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            return await client.post(self._url, json=payload)

    async def call(self, command: str, /, **params: Any) -> Any:
        """Run one MI command and return its raw `result`."""

        payload: dict[str, Any] = {"jsonrpc": "2.0", "id": next(self._ids), "method": command}
        named = {name: value for name, value in params.items() if value is not None}
        if named:
            payload["params"] = named

        try:
            response = await self._post(payload)
        except httpx.HTTPError as exc:
            LOGGER.error("MI %s request failed: %s", command, exc)
            raise MIRequestError(f"MI {command} request failed: {exc}", command=command) from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            error = data["error"]
            try:
                code = int(error.get("code", 0))
            except (TypeError, ValueError) as exc:
                raise MIProtocolError(
                    f"MI {command} error has a non-numeric code: {error.get('code')!r}", command=command
                ) from exc
            raise MIResponseError(code, str(error.get("message", "")), command=command)

        if response.is_error:
            raise MIRequestError(f"MI {command} returned HTTP {response.status_code}", command=command)
        if not isinstance(data, dict) or "result" not in data:
            raise MIProtocolError(f"MI {command} response is not a JSON-RPC reply", command=command)
        return data["result"]

    async def _call_as(self, model: type[ModelT], command: str, /, **params: Any) -> ModelT:
        result = await self.call(command, **params)
        try:
            return model.model_validate(result)
        except ValidationError as exc:
            raise MIProtocolError(f"MI {command} result does not match {model.__name__}: {exc}", command=command) from exc

    async def _call_list(self, adapter: TypeAdapter, command: str, /, **params: Any) -> list:
        result = await self.call(command, **params)
        try:
            return adapter.validate_python(result)
        except ValidationError as exc:
            raise MIProtocolError(f"MI {command} result is not a valid list: {exc}", command=command) from exc

    async def _call_text(self, command: str, /, **params: Any) -> str:
        return str(await self.call(command, **params))

    # core

    async def version(self) -> VersionResponse:
        return await self._call_as(VersionResponse, "version")

    async def get_log_level(self) -> LogLevelResponse:
        return await self._call_as(LogLevelResponse, "log_level")

    async def set_log_level(self, level: LogLevel, pid: int | None = None) -> LogLevelResponse:
        return await self._call_as(LogLevelResponse, "log_level", level=int(level), pid=pid)

    async def get_xlog_level(self) -> XLogLevelResponse:
        return await self._call_as(XLogLevelResponse, "xlog_level")

    async def set_xlog_level(self, level: LogLevel) -> XLogLevelResponse:
        return await self._call_as(XLogLevelResponse, "xlog_level", level=int(level))

    async def reload_routes(self) -> str:
        return await self._call_text("reload_routes")

    async def cache_fetch(self, system: str, attr: str) -> CacheResponse:
        return await self._call_as(CacheResponse, "cache_fetch", system=system, attr=attr)

    async def cache_store(self, system: str, attr: str, value: str, expires: int | None = None) -> str:
        return await self._call_text("cache_store", system=system, attr=attr, value=value, expires=expires)

    async def cache_remove(self, system: str, attr: str) -> str:
        return await self._call_text("cache_remove", system=system, attr=attr)

    # events

    async def events_list(self) -> EventsListResponse:
        return await self._call_as(EventsListResponse, "events_list")

    async def event_subscribe(self, event: str, socket: str, expire: int | None = None) -> str:
        """Ask OpenSIPS to send `event` to `socket` (see `subscription_socket`)."""

        LOGGER.info("Subscribing %s -> %s", event, socket)
        return await self._call_text("event_subscribe", event=event, socket=socket, expire=expire)

    # dispatcher

    async def ds_reload(self) -> str:
        return await self._call_text("ds_reload")

    async def ds_list(self, full: bool = False) -> DispatcherListResponse:
        return await self._call_as(DispatcherListResponse, "ds_list", full=int(full))

    # clusterer

    async def clusterer_list(self) -> ClustererListResponse:
        return await self._call_as(ClustererListResponse, "clusterer_list")

    async def clusterer_list_shtags(self) -> list[SharedTagStatus]:
        return await self._call_list(_SHTAG_LIST, "clusterer_list_shtags")

    async def clusterer_shtag_set_active(self, tag: str) -> str:
        return await self._call_text("clusterer_shtag_set_active", tag=tag)

    # usrloc

    async def ul_dump(self) -> DumpResponse:
        return await self._call_as(DumpResponse, "ul_dump")

    async def ul_rm(self, table_name: str, aor: str) -> str:
        return await self._call_text("ul_rm", table_name=table_name, aor=aor)

    async def ul_rm_contact(self, table_name: str, aor: str, contact: str) -> str:
        return await self._call_text("ul_rm_contact", table_name=table_name, aor=aor, contact=contact)

    async def ul_flush(self) -> str:
        return await self._call_text("ul_flush")

    async def ul_cluster_sync(self) -> str:
        return await self._call_text("ul_cluster_sync")

    # tm

    async def t_uac_dlg(
        self,
        method: str,
        ruri: str,
        headers: str,
        next_hop: str = ".",
        socket: str = ".",
        body: str | None = None,
    ) -> TUacDlgResponse:
        return await self._call_as(
            TUacDlgResponse,
            "t_uac_dlg",
            method=method,
            ruri=ruri,
            headers=headers,
            next_hop=next_hop,
            socket=socket,
            body=body,
        )

    # uac_registrant

    async def reg_list(self) -> RegListResponse:
        return await self._call_as(RegListResponse, "reg_list")

    async def reg_list_record(self, aor: str, contact: str, registrar: str) -> RegListRecordResponse:
        return await self._call_as(
            RegListRecordResponse, "reg_list", aor=aor, contact=contact, registrar=registrar
        )

    async def reg_reload(
        self, aor: str | None = None, contact: str | None = None, registrar: str | None = None
    ) -> str:
        return await self._call_text("reg_reload", aor=aor, contact=contact, registrar=registrar)

    async def reg_enable(self, aor: str, contact: str, registrar: str) -> str:
        return await self._call_text("reg_enable", aor=aor, contact=contact, registrar=registrar)

    async def reg_disable(self, aor: str, contact: str, registrar: str) -> str:
        return await self._call_text("reg_disable", aor=aor, contact=contact, registrar=registrar)

    # dialog

    async def dlg_list(self) -> DialogListResponse:
        return await self._call_as(DialogListResponse, "dlg_list")

    async def dlg_list_record(self, callid: str, from_tag: str) -> DialogListRecordResponse:
        return await self._call_as(DialogListRecordResponse, "dlg_list", callid=callid, from_tag=from_tag)

    # b2b_entities

    async def b2be_list(self) -> Any:
        return await self.call("b2be_list")

    async def ua_session_client_start(
        self,
        ruri: str,
        to: str,
        from_: str,
        *,
        proxy: str | None = None,
        body: str | None = None,
        extra_headers: list[str] | None = None,
        content_type: str | None = None,
        flags: str | None = None,
    ) -> str:
        return await self._call_text(
            "ua_session_client_start",
            ruri=ruri,
            to=to,
            **{"from": from_},
            proxy=proxy,
            body=body,
            extra_headers=extra_headers,
            content_type=content_type,
            flags=flags,
        )

    async def ua_session_reply(
        self,
        key: str,
        method: str,
        code: int,
        *,
        reason: str | None = None,
        body: str | None = None,
        extra_headers: list[str] | None = None,
        content_type: str | None = None,
    ) -> str:
        return await self._call_text(
            "ua_session_reply",
            key=key,
            method=method,
            code=code,
            reason=reason,
            body=body,
            extra_headers=extra_headers,
            content_type=content_type,
        )

    async def ua_session_update(
        self,
        key: str,
        method: str,
        *,
        body: str | None = None,
        extra_headers: list[str] | None = None,
        content_type: str | None = None,
    ) -> str:
        return await self._call_text(
            "ua_session_update",
            key=key,
            method=method,
            body=body,
            extra_headers=extra_headers,
            content_type=content_type,
        )

    async def ua_session_terminate(self, key: str, extra_headers: list[str] | None = None) -> str:
        return await self._call_text("ua_session_terminate", key=key, extra_headers=extra_headers)

    async def ua_session_list(self) -> list[UASessionInfo]:
        return await self._call_list(_UA_SESSION_LIST, "ua_session_list")

    async def ua_session_list_key(self, key: str) -> UASessionInfo:
        return await self._call_as(UASessionInfo, "ua_session_list", key=key)
