"""Pydantic schemas for management interface (MI) command results.

These share the enums and base model of `notifications.models`, so a
dialog listed by `dlg_list` and a dialog seen in an E_DLG_STATE_CHANGED
event carry the same `DialogState`.
"""

from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_pascal

from notifications.models import DefaultStr, DialogState, WireModel


class PascalModel(WireModel):
    model_config = ConfigDict(alias_generator=to_pascal)


class VersionResponse(WireModel):
    server: str = Field(alias="Server")


class LogLevel(IntEnum):
    ALERT = -3
    CRITICAL = -2
    ERROR = -1
    WARNING = 1
    NOTICE = 2
    INFO = 3
    DEBUG = 4


class LogLevelProcess(WireModel):
    pid: int = Field(alias="PID")
    log_level: LogLevel = Field(alias="Log level")
    process_type: str = Field(alias="Type")


class LogLevelResponse(WireModel):
    """`log_level` answers with exactly one of these keys, depending on the call."""

    processes: list[LogLevelProcess] | None = Field(default=None, alias="Processes")
    log_level: int | None = Field(default=None, alias="Log level")
    new_global_log_level: int | None = Field(default=None, alias="New global log level")


class XLogLevelResponse(WireModel):
    log_level: int | None = Field(default=None, alias="xLog Level")
    new_log_level: int | None = Field(default=None, alias="New xLog Level")


class CacheResponse(WireModel):
    key: str
    value: str


class EventsListItem(WireModel):
    name: str
    id: int


class EventsListResponse(WireModel):
    events: list[EventsListItem] = Field(alias="Events")


class TUacDlgResponse(PascalModel):
    status: str
    message: DefaultStr = ""


class RegEnabled(str, Enum):
    YES = "yes"
    NO = "no"


class RegState(str, Enum):
    NOT_REGISTERED_STATE = "NOT_REGISTERED_STATE"
    REGISTERING_STATE = "REGISTERING_STATE"
    AUTHENTICATING_STATE = "AUTHENTICATING_STATE"
    REGISTERED_STATE = "REGISTERED_STATE"
    REGISTER_TIMEOUT_STATE = "REGISTER_TIMEOUT_STATE"
    INTERNAL_ERROR_STATE = "INTERNAL_ERROR_STATE"
    WRONG_CREDENTIALS_STATE = "WRONG_CREDENTIALS_STATE"
    REGISTRAR_ERROR_STATE = "REGISTRAR_ERROR_STATE"
    UNREGISTERING_STATE = "UNREGISTERING_STATE"
    AUTHENTICATING_UNREGISTER_STATE = "AUTHENTICATING_UNREGISTER_STATE"


class RegListRecord(WireModel):
    aor: str = Field(alias="AOR")
    expires: int = Field(ge=0)
    state: RegState = RegState.NOT_REGISTERED_STATE
    enabled: RegEnabled = RegEnabled.YES
    last_register_sent: str
    registration_t_out: str
    registrar: str
    binding: str
    dst_ip: DefaultStr = Field(default="", alias="dst_IP")
    ip: DefaultStr = ""
    shtag: DefaultStr = ""
    cluster_id: int = 0
    binding_params: DefaultStr = ""
    third_party_registrant: DefaultStr = ""
    proxy: DefaultStr = ""


class RegListResponse(PascalModel):
    records: list[RegListRecord]


class RegListRecordResponse(PascalModel):
    registrant: RegListRecord


# dispatcher


class DestinationState(str, Enum):
    ACTIVE = "Active"
    PROBING = "Probing"
    INACTIVE = "Inactive"


class Destination(WireModel):
    uri: str = Field(alias="URI")
    state: DestinationState
    resolved_addresses: list[str] = Field(default_factory=list)
    description: DefaultStr = ""
    weight: int = 0
    priority: int = 0
    first_hit_counter: int = 0


class DestinationSet(WireModel):
    id: int
    destinations: list[Destination] = Field(alias="Destinations")


class Partition(WireModel):
    name: str
    sets: list[DestinationSet] = Field(default_factory=list, alias="SETS")


class DispatcherListResponse(WireModel):
    partitions: list[Partition] = Field(alias="PARTITIONS")


# clusterer


class LinkState(str, Enum):
    UP = "Up"
    DOWN = "Down"
    PROBE = "Probe"


class NodeState(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


class TagState(str, Enum):
    ACTIVE = "active"
    BACKUP = "backup"


class ClusterNode(WireModel):
    node_id: int
    db_id: int
    url: str
    link_state: LinkState = LinkState.UP
    state: NodeState = NodeState.ENABLED
    next_hop: DefaultStr = ""
    description: DefaultStr = ""


class Cluster(WireModel):
    cluster_id: int
    nodes: list[ClusterNode] = Field(alias="Nodes")


class ClustererListResponse(WireModel):
    clusters: list[Cluster] = Field(alias="Clusters")


class SharedTagStatus(PascalModel):
    tag: str
    cluster: int
    state: TagState = TagState.ACTIVE


# usrloc


class DumpContact(WireModel):
    contact: str = Field(alias="Contact")
    contact_id: str = Field(alias="ContactID")
    # Seconds left, or a word such as "permanent".
    expires: int | str = Field(alias="Expires")
    q: str = Field(alias="Q")
    call_id: str = Field(alias="Callid")
    cseq: int = Field(alias="Cseq")
    user_agent: str | None = Field(default=None, alias="User-agent")
    received: str | None = Field(default=None, alias="Received")
    path: str | None = Field(default=None, alias="Path")
    state: str = Field(alias="State")
    flags: int = Field(alias="Flags")
    cflags: str = Field(alias="Cflags")
    socket: str | None = Field(default=None, alias="Socket")
    methods: int = Field(alias="Methods")
    attr: str | None = Field(default=None, alias="Attr")


class DumpAOR(WireModel):
    aor: str = Field(alias="AOR")
    contacts: list[DumpContact] = Field(alias="Contacts")


class DumpDomain(WireModel):
    name: DefaultStr = ""
    aors: list[DumpAOR] = Field(alias="AORs")


class DumpResponse(WireModel):
    domains: list[DumpDomain] = Field(alias="Domains")


# dialog


class DialogInfo(WireModel):
    id: str = Field(alias="ID")
    call_id: str = Field(alias="callid")
    state: DialogState
    time_start: int = Field(alias="timestart")
    from_uri: str
    to_uri: str
    caller_tag: DefaultStr = ""


class DialogListResponse(PascalModel):
    dialogs: list[DialogInfo]


class DialogListRecordResponse(PascalModel):
    dialog: DialogInfo


# b2b_entities


class LegPair(WireModel):
    caller: str
    callee: str


class CseqPair(WireModel):
    caller: int
    callee: int


class DBFlag(IntEnum):
    NO_UPDATE_DB = 0
    UPDATE_DB = 1
    INSERT_DB = 2


class B2BState(IntEnum):
    UNDEFINED = 0
    NEW = 1
    NEW_AUTH = 2
    EARLY = 3
    CONFIRMED = 4
    ESTABLISHED = 5
    MODIFIED = 6
    TERMINATED = 7


class UASessionInfo(WireModel):
    """One entry of `ua_session_list`."""

    dlg: int
    logic_key: str
    mod_name: str
    state: B2BState
    last_invite_cseq: int
    last_method: int
    last_reply_code: int
    db_flag: DBFlag
    ruri: str
    callid: str
    from_: str = Field(alias="from")
    from_uri: str
    from_tag: str
    to: str
    to_uri: str
    to_tag: str
    cseq: CseqPair
    contact: LegPair
    send_sock: str
    tm_tran: str
