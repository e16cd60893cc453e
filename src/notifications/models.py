"""Pydantic schemas for OpenSIPS event notifications.

Every notification arrives as a JSON-RPC style message::

    {"jsonrpc": "2.0", "method": "E_UL_CONTACT_INSERT", "params": {...}}

`method` selects the variant, `params` holds its payload. Enumerations keep
the wire style OpenSIPS uses for each field (integers for dialog and node
states, lowercase words for dispatcher status, upper case for UA session
kinds), so each enum declares its own values instead of sharing one rule.
"""

from __future__ import annotations

import json
from enum import Enum, IntEnum
from typing import Annotated, Any, ClassVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

JSONRPC_VERSION = "2.0"


def _none_as_empty(value: Any) -> Any:
    return "" if value is None else value


# Missing or null on the wire decodes to "".
DefaultStr = Annotated[str, BeforeValidator(_none_as_empty)]


class EventName(str, Enum):
    UL_CONTACT_INSERT = "E_UL_CONTACT_INSERT"
    UL_CONTACT_DELETE = "E_UL_CONTACT_DELETE"
    UL_CONTACT_UPDATE = "E_UL_CONTACT_UPDATE"
    DLG_STATE_CHANGED = "E_DLG_STATE_CHANGED"
    DISPATCHER_STATUS = "E_DISPATCHER_STATUS"
    CLUSTERER_NODE_STATE_CHANGE = "E_CLUSTERER_NODE_STATE_CHANGE"
    UA_SESSION = "E_UA_SESSION"


class DialogState(IntEnum):
    UNCONFIRMED = 1
    EARLY = 2
    CONFIRMED_NO_ACK = 3
    CONFIRMED = 4
    DELETED = 5

    @property
    def label(self) -> str:
        return _DIALOG_STATE_LABELS[self]


_DIALOG_STATE_LABELS = {
    DialogState.UNCONFIRMED: "Unconfirmed",
    DialogState.EARLY: "Early",
    DialogState.CONFIRMED_NO_ACK: "Confirmed NoAck",
    DialogState.CONFIRMED: "Confirmed",
    DialogState.DELETED: "Deleted",
}


class ClusterNodeState(IntEnum):
    DOWN = 0
    UP = 1


class DispatcherState(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class UAEntityType(str, Enum):
    UAC = "UAC"
    UAS = "UAS"


class UAEventType(str, Enum):
    NEW = "NEW"
    EARLY = "EARLY"
    ANSWERED = "ANSWERED"
    REJECTED = "REJECTED"
    UPDATED = "UPDATED"
    TERMINATED = "TERMINATED"


class WireModel(BaseModel):
    """Immutable record parsed from the wire; unknown keys are ignored."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class UlContact(WireModel):
    """A usrloc binding as reported by the E_UL_CONTACT_* events."""

    domain: str
    aor: str
    uri: str
    received: DefaultStr = ""
    path: str | None = None
    qval: int = Field(description="q-value * 1000; negative when unset.")
    user_agent: str
    socket: str
    bflags: int
    expires: int = Field(ge=0, description="Absolute expiry, epoch seconds.")
    callid: str
    cseq: int = Field(ge=0)
    attr: str
    latency: int = Field(description="Ping latency in microseconds; negative when unknown.")
    shtag: str


class UlContactV1(UlContact):
    """Older usrloc event schema: unsigned qval, path always a string."""

    path: DefaultStr = ""
    qval: int = Field(ge=0)


class DialogChange(WireModel):
    id: str
    call_id: str = Field(alias="callid")
    from_tag: str
    to_tag: DefaultStr = ""
    old_state: DialogState
    new_state: DialogState


class DispatcherStatus(WireModel):
    partition: str
    group: str
    address: str
    status: DispatcherState


class ClustererNodeStateChange(WireModel):
    cluster_id: int = Field(ge=0)
    node_id: int = Field(ge=0)
    new_state: ClusterNodeState


class UASession(WireModel):
    """A b2b_entities UA session event (E_UA_SESSION)."""

    key: str
    entity_type: UAEntityType
    event_type: UAEventType
    status: int = 0
    reason: DefaultStr = ""
    method: DefaultStr = ""
    body: DefaultStr = ""
    headers: DefaultStr = ""


class Notification(WireModel):
    """Base class for a decoded event; `event` is the wire discriminator."""

    event: ClassVar[EventName]
    params: WireModel

    def encode(self) -> bytes:
        message = {
            "jsonrpc": JSONRPC_VERSION,
            "method": self.event.value,
            "params": self.params.to_wire(),
        }
        return json.dumps(message, separators=(",", ":")).encode("utf-8")


class ContactInserted(Notification):
    event = EventName.UL_CONTACT_INSERT
    params: UlContact


class ContactDeleted(Notification):
    event = EventName.UL_CONTACT_DELETE
    params: UlContact


class ContactUpdated(Notification):
    event = EventName.UL_CONTACT_UPDATE
    params: UlContact


class DialogStateChanged(Notification):
    event = EventName.DLG_STATE_CHANGED
    params: DialogChange


class DispatcherStatusChanged(Notification):
    event = EventName.DISPATCHER_STATUS
    params: DispatcherStatus


class ClusterNodeStateChanged(Notification):
    event = EventName.CLUSTERER_NODE_STATE_CHANGE
    params: ClustererNodeStateChange


class UASessionEvent(Notification):
    event = EventName.UA_SESSION
    params: UASession


class ContactInsertedV1(ContactInserted):
    params: UlContactV1


class ContactDeletedV1(ContactDeleted):
    params: UlContactV1


class ContactUpdatedV1(ContactUpdated):
    params: UlContactV1


NOTIFICATION_VARIANTS: tuple[type[Notification], ...] = (
    ContactInserted,
    ContactDeleted,
    ContactUpdated,
    DialogStateChanged,
    DispatcherStatusChanged,
    ClusterNodeStateChanged,
    UASessionEvent,
)

_LEGACY_VARIANTS: tuple[type[Notification], ...] = (
    ContactInsertedV1,
    ContactDeletedV1,
    ContactUpdatedV1,
)

SCHEMA_VERSIONS = (1, 2)


def notification_types(schema_version: int = 2) -> dict[str, type[Notification]]:
    """Map each wire discriminator to the variant that parses it."""

    if schema_version not in SCHEMA_VERSIONS:
        raise ValueError(f"Unsupported event schema version: {schema_version}")

    registry = {cls.event.value: cls for cls in NOTIFICATION_VARIANTS}
    if schema_version == 1:
        registry.update({cls.event.value: cls for cls in _LEGACY_VARIANTS})
    return registry
