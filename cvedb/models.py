"""Data types exchanged with the API and their JSON encodings."""

from __future__ import annotations

import dataclasses
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable

NIL_UUID = uuid.UUID(int=0)
ZERO_TIME = "0001-01-01T00:00:00Z"

_TIME_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


def _parse_time(value: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp; the zero time and empty values become None."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    match = _TIME_RE.match(value)
    if match is None:
        raise ValueError(f"invalid timestamp: {value!r}")
    date, clock, frac, zone = match.groups()
    micro = int((frac[1:] + "000000")[:6]) if frac else 0
    if date == "0001-01-01" and clock == "00:00:00" and micro == 0 and zone in ("Z", "z"):
        return None
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = 1 if zone[0] == "+" else -1
        hours, minutes = zone[1:].split(":")
        tz = timezone(sign * timedelta(hours=int(hours), minutes=int(minutes)))
    parsed = datetime.strptime(f"{date}T{clock}", "%Y-%m-%dT%H:%M:%S")
    return parsed.replace(microsecond=micro, tzinfo=tz)


def _format_time(value: datetime | None) -> str:
    if value is None:
        return ZERO_TIME
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if not offset:
        return text + "Z"
    total = int(offset.total_seconds() // 60)
    sign = "+" if total >= 0 else "-"
    total = abs(total)
    return f"{text}{sign}{total // 60:02d}:{total % 60:02d}"


def _opt_time(value: datetime | None) -> str | None:
    return None if value is None else _format_time(value)


def _uuid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(value) if value else NIL_UUID


def _opt_uuid(value: Any) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(value) if value else None


def _uuid_str(value: uuid.UUID | None) -> str | None:
    return None if value is None else str(value)


def _is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (str, list, dict)):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    return False


def _pack(
    fields: dict[str, Any],
    *,
    keep: Iterable[str] = (),
    unset: Iterable[str] = (),
    drop_empty: bool = True,
) -> dict[str, Any]:
    """Drop fields the way the wire format omits them.

    Keys in ``keep`` are always written, keys in ``unset`` are dropped only
    when None, and the rest are dropped when empty if ``drop_empty`` is set.
    """
    keep = set(keep)
    unset = set(unset)
    out: dict[str, Any] = {}
    for key, value in fields.items():
        if key in keep:
            out[key] = value
        elif key in unset:
            if value is not None:
                out[key] = value
        elif not drop_empty or not _is_empty(value):
            out[key] = value
    return out


def duration_json(delta: timedelta) -> str:
    """Render a duration as "Xh Ym" from one hour up, otherwise as "Xm Ys"."""
    seconds = int(delta.total_seconds())
    if seconds >= 3600:
        return f"{seconds // 3600}h {(seconds % 3600) // 60}m"
    minutes = abs(seconds) // 60
    if seconds < 0:
        minutes = -minutes
    return f"{minutes}m {seconds - minutes * 60}s"


@dataclass
class Machines:
    default: int | None = None
    self_hosted: int | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> Machines:
        data = data or {}
        return cls(default=data.get("default"), self_hosted=data.get("self_hosted"))

    def to_dict(self) -> dict:
        return _pack(
            {"default": self.default, "self_hosted": self.self_hosted},
            unset=("default", "self_hosted"),
        )


@dataclass
class ScheduleInfo:
    id: str = ""
    vault: str = ""
    date: datetime | None = None
    workflow: str = ""
    repeat_period: int = 0
    machines: Machines | None = None


def _schedule_from_dict(data: dict) -> ScheduleInfo:
    machines = data.get("machines")
    return ScheduleInfo(
        id=data.get("id") or "",
        vault=data.get("vault") or "",
        date=_parse_time(data.get("date")),
        workflow=data.get("workflow") or "",
        repeat_period=data.get("repeat_period") or 0,
        machines=Machines.from_dict(machines) if machines is not None else None,
    )


def _schedule_to_dict(info: ScheduleInfo) -> dict:
    return _pack(
        {
            "id": info.id,
            "vault": info.vault,
            "date": _opt_time(info.date),
            "workflow": info.workflow,
            "repeat_period": info.repeat_period,
            "machines": info.machines.to_dict() if info.machines is not None else None,
        },
        unset=("date", "machines"),
    )


@dataclass
class Workflow:
    id: uuid.UUID = NIL_UUID
    name: str = ""
    description: str = ""
    long_description: str = ""
    space_info: uuid.UUID | None = None
    space_name: str = ""
    project_info: uuid.UUID | None = None
    project_name: str = ""
    modified_date: datetime | None = None
    created_date: datetime | None = None
    schedule_info: ScheduleInfo | None = None
    workflow_category: str = ""
    author: str = ""
    executing: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> Workflow:
        schedule = data.get("schedule_info")
        return cls(
            id=_uuid(data.get("id")),
            name=data.get("name") or "",
            description=data.get("description") or "",
            long_description=data.get("long_description") or "",
            space_info=_opt_uuid(data.get("space_info")),
            space_name=data.get("space_name") or "",
            project_info=_opt_uuid(data.get("project_info")),
            project_name=data.get("project_name") or "",
            modified_date=_parse_time(data.get("modified_date")),
            created_date=_parse_time(data.get("created_date")),
            schedule_info=_schedule_from_dict(schedule) if schedule is not None else None,
            workflow_category=data.get("workflow_category") or "",
            author=data.get("author") or "",
            executing=bool(data.get("executing")),
        )

    def to_dict(self) -> dict:
        schedule = self.schedule_info
        return _pack(
            {
                "id": str(self.id),
                "name": self.name,
                "description": self.description,
                "long_description": self.long_description,
                "space_info": _uuid_str(self.space_info),
                "space_name": self.space_name,
                "project_info": _uuid_str(self.project_info),
                "project_name": self.project_name,
                "modified_date": _opt_time(self.modified_date),
                "created_date": _format_time(self.created_date),
                "schedule_info": _schedule_to_dict(schedule) if schedule is not None else None,
                "workflow_category": self.workflow_category,
                "author": self.author,
                "executing": self.executing,
            },
            keep=("id", "created_date"),
            unset=("schedule_info",),
        )


@dataclass
class NodeInput:
    type: str = ""
    order: int = 0
    name: str = ""
    value: Any = None
    command: str | None = None
    description: str | None = None
    worker_connected: bool | None = None
    multi: bool | None = None
    visible: bool | None = None

    @classmethod
    def from_dict(cls, data: dict) -> NodeInput:
        return cls(
            type=data.get("type") or "",
            order=data.get("order") or 0,
            name=data.get("name") or "",
            value=data.get("value"),
            command=data.get("command"),
            description=data.get("description"),
            worker_connected=data.get("workerConnected"),
            multi=data.get("multi"),
            visible=data.get("visible"),
        )

    def to_dict(self) -> dict:
        return _pack(
            {
                "type": self.type,
                "order": self.order,
                "name": self.name,
                "value": self.value,
                "command": self.command,
                "description": self.description,
                "workerConnected": self.worker_connected,
                "multi": self.multi,
                "visible": self.visible,
            },
            keep=("type", "order"),
            unset=("value", "command", "description", "workerConnected", "multi", "visible"),
        )


@dataclass
class NodeOutput:
    type: str = ""
    order: int = 0
    parameter_name: str | None = None
    visible: bool | None = None

    @classmethod
    def from_dict(cls, data: dict) -> NodeOutput:
        return cls(
            type=data.get("type") or "",
            order=data.get("order") or 0,
            parameter_name=data.get("parameter_name"),
            visible=data.get("visible"),
        )

    def to_dict(self) -> dict:
        return _pack(
            {
                "type": self.type,
                "order": self.order,
                "parameter_name": self.parameter_name,
                "visible": self.visible,
            },
            keep=("type", "order"),
            unset=("parameter_name", "visible"),
        )


def _inputs_from_dict(data: dict | None) -> dict[str, NodeInput]:
    return {k: NodeInput.from_dict(v) for k, v in (data or {}).items() if v is not None}


def _outputs_from_dict(data: dict | None) -> dict[str, NodeOutput]:
    return {k: NodeOutput.from_dict(v) for k, v in (data or {}).items() if v is not None}


@dataclass
class Node:
    id: uuid.UUID = NIL_UUID
    name: str = ""
    label: str = ""
    x: float = 0.0
    y: float = 0.0
    type: str = ""
    inputs: dict[str, NodeInput] = field(default_factory=dict)
    script: dict | None = None
    outputs: dict[str, NodeOutput] = field(default_factory=dict)
    bee_type: str = ""
    container: dict | None = None
    output_command: str | None = None
    worker_connected: str | None = None
    workflow: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Node:
        meta = data.get("meta") or {}
        coordinates = meta.get("coordinates") or {}
        return cls(
            id=_uuid(data.get("id")),
            name=data.get("name") or "",
            label=meta.get("label") or "",
            x=coordinates.get("x") or 0.0,
            y=coordinates.get("y") or 0.0,
            type=data.get("type") or "",
            inputs=_inputs_from_dict(data.get("inputs")),
            script=data.get("script"),
            outputs=_outputs_from_dict(data.get("outputs")),
            bee_type=data.get("bee_type") or "",
            container=data.get("container"),
            output_command=data.get("output_command"),
            worker_connected=data.get("workerConnected"),
            workflow=data.get("workflow"),
        )

    def to_dict(self) -> dict:
        return _pack(
            {
                "id": str(self.id),
                "name": self.name,
                "meta": {"label": self.label, "coordinates": {"x": self.x, "y": self.y}},
                "type": self.type,
                "inputs": {k: v.to_dict() for k, v in self.inputs.items()},
                "script": self.script,
                "outputs": {k: v.to_dict() for k, v in self.outputs.items()},
                "bee_type": self.bee_type,
                "container": self.container,
                "output_command": self.output_command,
                "workerConnected": self.worker_connected,
                "workflow": self.workflow,
            },
            unset=("script", "container", "output_command", "workerConnected", "workflow"),
            drop_empty=False,
        )


@dataclass
class Connection:
    source: str = ""
    destination: str = ""


def _connection_from_dict(data: dict) -> Connection:
    return Connection(
        source=(data.get("source") or {}).get("id") or "",
        destination=(data.get("destination") or {}).get("id") or "",
    )


def _connection_to_dict(connection: Connection) -> dict:
    return {"source": {"id": connection.source}, "destination": {"id": connection.destination}}


@dataclass
class PrimitiveNode:
    name: str = ""
    type: str = ""
    label: str = ""
    value: Any = None
    type_name: str = ""
    x: float = 0.0
    y: float = 0.0
    param_name: str | None = None
    update_file: bool | None = None

    @classmethod
    def from_dict(cls, data: dict) -> PrimitiveNode:
        coordinates = data.get("coordinates") or {}
        return cls(
            name=data.get("name") or "",
            type=data.get("type") or "",
            label=data.get("label") or "",
            value=data.get("value"),
            type_name=data.get("type_name") or "",
            x=coordinates.get("x") or 0.0,
            y=coordinates.get("y") or 0.0,
            param_name=data.get("ParamName"),
            update_file=data.get("UpdateFile"),
        )

    def to_dict(self) -> dict:
        return _pack(
            {
                "name": self.name,
                "type": self.type,
                "label": self.label,
                "value": self.value,
                "type_name": self.type_name,
                "coordinates": {"x": self.x, "y": self.y},
                "ParamName": self.param_name,
                "UpdateFile": self.update_file,
            },
            unset=("ParamName", "UpdateFile"),
            drop_empty=False,
        )


@dataclass
class Annotation:
    content: str = ""
    width: float = 0.0
    height: float = 0.0
    name: str = ""
    x: float = 0.0
    y: float = 0.0


def _annotation_from_dict(data: dict) -> Annotation:
    coordinates = data.get("coordinates") or {}
    return Annotation(
        content=data.get("content") or "",
        width=data.get("width") or 0.0,
        height=data.get("height") or 0.0,
        name=data.get("name") or "",
        x=coordinates.get("x") or 0.0,
        y=coordinates.get("y") or 0.0,
    )


def _annotation_to_dict(annotation: Annotation) -> dict:
    return {
        "content": annotation.content,
        "width": annotation.width,
        "height": annotation.height,
        "name": annotation.name,
        "coordinates": {"x": annotation.x, "y": annotation.y},
    }


@dataclass
class WorkflowVersionData:
    nodes: dict[str, Node] = field(default_factory=dict)
    connections: list[Connection] = field(default_factory=list)
    primitive_nodes: dict[str, PrimitiveNode] = field(default_factory=dict)
    annotations: dict[str, Annotation] = field(default_factory=dict)


def _version_data_from_dict(data: dict | None) -> WorkflowVersionData:
    data = data or {}
    return WorkflowVersionData(
        nodes={k: Node.from_dict(v) for k, v in (data.get("nodes") or {}).items() if v is not None},
        connections=[_connection_from_dict(c) for c in data.get("connections") or []],
        primitive_nodes={
            k: PrimitiveNode.from_dict(v)
            for k, v in (data.get("primitiveNodes") or {}).items()
            if v is not None
        },
        annotations={
            k: _annotation_from_dict(v)
            for k, v in (data.get("annotation") or {}).items()
            if v is not None
        },
    )


def _version_data_to_dict(data: WorkflowVersionData) -> dict:
    return _pack(
        {
            "nodes": {k: v.to_dict() for k, v in data.nodes.items()},
            "connections": [_connection_to_dict(c) for c in data.connections],
            "primitiveNodes": {k: v.to_dict() for k, v in data.primitive_nodes.items()},
            "annotation": {k: _annotation_to_dict(v) for k, v in data.annotations.items()},
        },
        keep=("nodes", "connections", "primitiveNodes"),
    )


@dataclass
class WorkflowVersion:
    id: uuid.UUID = NIL_UUID
    version: int = 0
    workflow_info: uuid.UUID = NIL_UUID
    name: str | None = None
    description: str = ""
    public: bool = False
    created_date: datetime | None = None
    run_count: int = 0
    max_machines: Machines = field(default_factory=Machines)
    snapshot: bool = False
    data: WorkflowVersionData = field(default_factory=WorkflowVersionData)

    @classmethod
    def from_dict(cls, data: dict) -> WorkflowVersion:
        return cls(
            id=_uuid(data.get("id")),
            version=data.get("version") or 0,
            workflow_info=_uuid(data.get("workflow_info")),
            name=data.get("name"),
            description=data.get("description") or "",
            public=bool(data.get("public")),
            created_date=_parse_time(data.get("created_date")),
            run_count=data.get("run_count") or 0,
            max_machines=Machines.from_dict(data.get("max_machines")),
            snapshot=bool(data.get("snapshot")),
            data=_version_data_from_dict(data.get("data")),
        )

    def to_dict(self) -> dict:
        return _pack(
            {
                "id": str(self.id),
                "version": self.version,
                "workflow_info": str(self.workflow_info),
                "name": self.name,
                "description": self.description,
                "public": self.public,
                "created_date": _format_time(self.created_date),
                "run_count": self.run_count,
                "max_machines": self.max_machines.to_dict(),
                "snapshot": self.snapshot,
                "data": _version_data_to_dict(self.data),
            },
            unset=("name",),
            drop_empty=False,
        )


@dataclass
class RunSubJobInsights:
    total: int = 0
    pending: int = 0
    running: int = 0
    succeeded: int = 0
    failed: int = 0
    stopping: int = 0
    stopped: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> RunSubJobInsights:
        names = [f.name for f in dataclasses.fields(cls)]
        return cls(**{name: data.get(name) or 0 for name in names})


@dataclass
class Run:
    id: uuid.UUID | None = None
    name: str = ""
    status: str = ""
    machines: Machines = field(default_factory=Machines)
    workflow_version_info: uuid.UUID | None = None
    workflow_info: uuid.UUID | None = None
    workflow_name: str = ""
    space_info: uuid.UUID | None = None
    space_name: str = ""
    project_info: uuid.UUID | None = None
    project_name: str = ""
    creation_type: str = ""
    created_date: datetime | None = None
    started_date: datetime | None = None
    completed_date: datetime | None = None
    finished: bool = False
    author: str = ""
    fleet: uuid.UUID | None = None
    fleet_name: str = ""
    vault: uuid.UUID | None = None
    use_static_ips: bool | None = None
    ip_addresses: list[str] = field(default_factory=list)
    run_insights: RunSubJobInsights | None = None
    duration: timedelta | None = None
    average_duration: timedelta | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Run:
        insights = data.get("run_insights")
        return cls(
            id=_opt_uuid(data.get("id")),
            name=data.get("name") or "",
            status=data.get("status") or "",
            machines=Machines.from_dict(data.get("machines")),
            workflow_version_info=_opt_uuid(data.get("workflow_version_info")),
            workflow_info=_opt_uuid(data.get("workflow_info")),
            workflow_name=data.get("workflow_name") or "",
            space_info=_opt_uuid(data.get("space_info")),
            space_name=data.get("space_name") or "",
            project_info=_opt_uuid(data.get("project_info")),
            project_name=data.get("project_name") or "",
            creation_type=data.get("creation_type") or "",
            created_date=_parse_time(data.get("created_date")),
            started_date=_parse_time(data.get("started_date")),
            completed_date=_parse_time(data.get("completed_date")),
            finished=bool(data.get("finished")),
            author=data.get("author") or "",
            fleet=_opt_uuid(data.get("fleet")),
            fleet_name=data.get("fleet_name") or "",
            vault=_opt_uuid(data.get("vault")),
            use_static_ips=data.get("use_static_ips"),
            ip_addresses=list(data.get("ip_addresses") or []),
            run_insights=RunSubJobInsights.from_dict(insights) if insights is not None else None,
        )

    def to_dict(self) -> dict:
        return _pack(
            {
                "id": _uuid_str(self.id),
                "name": self.name,
                "status": self.status,
                "machines": self.machines.to_dict(),
                "workflow_version_info": _uuid_str(self.workflow_version_info),
                "workflow_info": _uuid_str(self.workflow_info),
                "workflow_name": self.workflow_name,
                "space_info": _uuid_str(self.space_info),
                "space_name": self.space_name,
                "project_info": _uuid_str(self.project_info),
                "project_name": self.project_name,
                "creation_type": self.creation_type,
                "created_date": _opt_time(self.created_date),
                "started_date": _opt_time(self.started_date),
                "completed_date": _opt_time(self.completed_date),
                "finished": self.finished,
                "author": self.author,
                "fleet": _uuid_str(self.fleet),
                "fleet_name": self.fleet_name,
                "vault": _uuid_str(self.vault),
                "use_static_ips": self.use_static_ips,
                "ip_addresses": list(self.ip_addresses),
                "run_insights": (
                    dataclasses.asdict(self.run_insights) if self.run_insights is not None else None
                ),
                "duration": duration_json(self.duration) if self.duration is not None else None,
                "average_duration": (
                    duration_json(self.average_duration)
                    if self.average_duration is not None
                    else None
                ),
            },
            keep=("machines",),
            unset=("use_static_ips", "run_insights", "duration", "average_duration"),
        )


@dataclass
class SubJob:
    id: uuid.UUID = NIL_UUID
    status: str = ""
    name: str = ""
    outputs_status: str = ""
    finished: bool = False
    started_date: datetime | None = None
    finished_date: datetime | None = None
    params: dict[str, Any] = field(default_factory=dict)
    message: str = ""
    task_group: bool = False
    task_index: int = 0
    ip_address: str = ""
    twe_id: uuid.UUID = NIL_UUID
    label: str = ""
    children: list[SubJob] = field(default_factory=list)
    task_count: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> SubJob:
        return cls(
            id=_uuid(data.get("id")),
            status=data.get("status") or "",
            name=data.get("name") or "",
            outputs_status=data.get("outputs_status") or "",
            finished=bool(data.get("finished")),
            started_date=_parse_time(data.get("started_at")),
            finished_date=_parse_time(data.get("finished_at")),
            params=dict(data.get("params") or {}),
            message=data.get("message") or "",
            task_group=bool(data.get("task_group")),
            task_index=data.get("task_index") or 0,
            ip_address=data.get("ip_address") or "",
            twe_id=_uuid(data.get("twe_id")),
        )


@dataclass
class SubJobOutput:
    id: uuid.UUID = NIL_UUID
    name: str = ""
    size: int = 0
    pretty_size: str = ""
    format: str = ""
    path: str = ""
    signed_url: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> SubJobOutput:
        return cls(
            id=_uuid(data.get("id")),
            name=data.get("name") or "",
            size=data.get("size") or 0,
            pretty_size=data.get("pretty_size") or "",
            format=data.get("format") or "",
            path=data.get("path") or "",
            signed_url=data.get("signed_url") or "",
        )


@dataclass
class SignedURL:
    url: str = ""
    size: int = 0
    pretty_size: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> SignedURL:
        return cls(
            url=data.get("url") or "",
            size=data.get("size") or 0,
            pretty_size=data.get("pretty_size") or "",
        )


@dataclass
class VaultInfo:
    id: uuid.UUID = NIL_UUID
    name: str = ""
    type: int = 0
    metadata: str = ""
    created_date: datetime | None = None
    modified_date: datetime | None = None


def _vault_from_dict(data: dict | None) -> VaultInfo:
    data = data or {}
    return VaultInfo(
        id=_uuid(data.get("id")),
        name=data.get("name") or "",
        type=data.get("type") or 0,
        metadata=data.get("metadata") or "",
        created_date=_parse_time(data.get("created_date")),
        modified_date=_parse_time(data.get("modified_date")),
    )


@dataclass
class Profile:
    vault_info: VaultInfo = field(default_factory=VaultInfo)
    bio: str = ""
    type: int = 0
    username: str = ""
    entity_type: str = ""


def _profile_from_dict(data: dict | None) -> Profile:
    data = data or {}
    return Profile(
        vault_info=_vault_from_dict(data.get("vault_info")),
        bio=data.get("bio") or "",
        type=data.get("type") or 0,
        username=data.get("username") or "",
        entity_type=data.get("entity_type") or "",
    )


@dataclass
class User:
    id: int = 0
    is_active: bool = False
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    onboarding: bool = False
    profile: Profile = field(default_factory=Profile)
    initial_credit: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> User:
        return cls(
            id=data.get("id") or 0,
            is_active=bool(data.get("is_active")),
            email=data.get("email") or "",
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            onboarding=bool(data.get("onboarding")),
            profile=_profile_from_dict(data.get("profile")),
            initial_credit=data.get("initial_credit") or 0,
        )


@dataclass
class FleetMachine:
    name: str = ""
    description: str = ""
    mem: str = ""
    cpu: str = ""
    total: int = 0
    running: int = 0
    up: int = 0
    down: int = 0


def _fleet_machine_from_dict(data: dict) -> FleetMachine:
    return FleetMachine(
        name=data.get("name") or "",
        description=data.get("description") or "",
        mem=data.get("mem") or "",
        cpu=data.get("cpu") or "",
        total=data.get("total") or 0,
        running=data.get("running") or 0,
        up=data.get("up") or 0,
        down=data.get("down") or 0,
    )


@dataclass
class Fleet:
    id: uuid.UUID = NIL_UUID
    name: str = ""
    vault: uuid.UUID = NIL_UUID
    cluster: str = ""
    state: str = ""
    machines: list[FleetMachine] = field(default_factory=list)
    created_date: datetime | None = None
    modified_date: datetime | None = None
    type: str = ""
    default: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> Fleet:
        return cls(
            id=_uuid(data.get("id")),
            name=data.get("name") or "",
            vault=_uuid(data.get("vault")),
            cluster=data.get("cluster") or "",
            state=data.get("state") or "",
            machines=[_fleet_machine_from_dict(m) for m in data.get("machines") or []],
            created_date=_parse_time(data.get("created_date")),
            modified_date=_parse_time(data.get("modified_date")),
            type=data.get("type") or "",
            default=bool(data.get("default")),
        )


@dataclass
class IPAddress:
    ip_address: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> IPAddress:
        return cls(ip_address=data.get("ip_address") or "")


@dataclass
class Project:
    id: uuid.UUID | None = None
    name: str = ""
    description: str = ""
    space_id: uuid.UUID | None = None
    space_name: str = ""
    workflow_count: int = 0
    created_date: datetime | None = None
    modified_date: datetime | None = None
    author: str = ""
    workflows: list[Workflow] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> Project:
        return cls(
            id=_opt_uuid(data.get("id")),
            name=data.get("name") or "",
            description=data.get("description") or "",
            space_id=_opt_uuid(data.get("space_info")),
            space_name=data.get("space_name") or "",
            workflow_count=data.get("workflow_count") or 0,
            created_date=_parse_time(data.get("created_date")),
            modified_date=_parse_time(data.get("modified_date")),
            author=data.get("author") or "",
            workflows=[Workflow.from_dict(w) for w in data.get("workflows") or []],
        )

    def to_dict(self) -> dict:
        return _pack(
            {
                "id": _uuid_str(self.id),
                "name": self.name,
                "description": self.description,
                "space_info": _uuid_str(self.space_id),
                "space_name": self.space_name,
                "workflow_count": self.workflow_count,
                "created_date": _opt_time(self.created_date),
                "modified_date": _opt_time(self.modified_date),
                "author": self.author,
                "workflows": [w.to_dict() for w in self.workflows],
            }
        )


@dataclass
class Space:
    id: uuid.UUID | None = None
    name: str = ""
    description: str = ""
    vault_id: uuid.UUID | None = None
    playground: bool = False
    projects: list[Project] = field(default_factory=list)
    projects_count: int = 0
    workflows: list[Workflow] = field(default_factory=list)
    workflows_count: int = 0
    created_date: datetime | None = None
    modified_date: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Space:
        return cls(
            id=_opt_uuid(data.get("id")),
            name=data.get("name") or "",
            description=data.get("description") or "",
            vault_id=_opt_uuid(data.get("vault_info")),
            playground=bool(data.get("playground")),
            projects=[Project.from_dict(p) for p in data.get("projects") or []],
            projects_count=data.get("projects_count") or 0,
            workflows=[Workflow.from_dict(w) for w in data.get("workflows") or []],
            workflows_count=data.get("workflows_count") or 0,
            created_date=_parse_time(data.get("created_date")),
            modified_date=_parse_time(data.get("modified_date")),
        )

    def to_dict(self) -> dict:
        return _pack(
            {
                "id": _uuid_str(self.id),
                "name": self.name,
                "description": self.description,
                "vault_info": _uuid_str(self.vault_id),
                "playground": self.playground,
                "projects": [p.to_dict() for p in self.projects],
                "projects_count": self.projects_count,
                "workflows": [w.to_dict() for w in self.workflows],
                "workflows_count": self.workflows_count,
                "created_date": _opt_time(self.created_date),
                "modified_date": _opt_time(self.modified_date),
            }
        )

    def get_project_by_name(self, name: str) -> Project:
        """Return the project of this space with exactly the given name."""
        for project in self.projects:
            if project.name == name:
                return project
        raise LookupError(f'project "{name}" not found in space "{self.name}"')


@dataclass
class Category:
    id: uuid.UUID = NIL_UUID
    name: str = ""
    description: str = ""
    workflow_count: int = 0
    tool_count: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> Category:
        return cls(
            id=_uuid(data.get("id")),
            name=data.get("name") or "",
            description=data.get("description") or "",
            workflow_count=data.get("workflow_count") or 0,
            tool_count=data.get("tool_count") or 0,
        )


@dataclass
class Module:
    id: uuid.UUID | None = None
    name: str = ""
    complexity: int = 0
    description: str = ""
    author: str = ""
    created_date: datetime | None = None
    community: bool = False
    verified: bool = False
    node_id: str = ""
    node_name: str = ""
    inputs: dict[str, NodeInput] = field(default_factory=dict)
    outputs: dict[str, NodeOutput] = field(default_factory=dict)
    node_type: str = ""
    workflow: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Module:
        library = data.get("library_info") or {}
        node = data.get("data") or {}
        return cls(
            id=_opt_uuid(data.get("id")),
            name=data.get("name") or "",
            complexity=data.get("complexity") or 0,
            description=data.get("description") or "",
            author=data.get("author") or "",
            created_date=_parse_time(data.get("created_date")),
            community=bool(library.get("community")),
            verified=bool(library.get("verified")),
            node_id=node.get("id") or "",
            node_name=node.get("name") or "",
            inputs=_inputs_from_dict(node.get("inputs")),
            outputs=_outputs_from_dict(node.get("outputs")),
            node_type=node.get("type") or "",
            workflow=data.get("workflow") or "",
        )


@dataclass
class Tool:
    id: uuid.UUID | None = None
    name: str = ""
    description: str = ""
    vault_info: uuid.UUID | None = None
    author: str = ""
    author_info: int = 0
    tool_category: str = ""
    tool_category_name: str = ""
    type: str = ""
    inputs: dict[str, NodeInput] = field(default_factory=dict)
    container: dict | None = None
    outputs: dict[str, NodeOutput] = field(default_factory=dict)
    source_url: str = ""
    created_date: datetime | None = None
    modified_date: datetime | None = None
    output_command: str = ""
    license_name: str = ""
    license_url: str = ""
    doc_link: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Tool:
        licence = data.get("license_info") or {}
        return cls(
            id=_opt_uuid(data.get("id")),
            name=data.get("name") or "",
            description=data.get("description") or "",
            vault_info=_opt_uuid(data.get("vault_info")),
            author=data.get("author") or "",
            author_info=data.get("author_info") or 0,
            tool_category=data.get("tool_category") or "",
            tool_category_name=data.get("tool_category_name") or "",
            type=data.get("type") or "",
            inputs=_inputs_from_dict(data.get("inputs")),
            container=data.get("container"),
            outputs=_outputs_from_dict(data.get("outputs")),
            source_url=data.get("source_url") or "",
            created_date=_parse_time(data.get("created_date")),
            modified_date=_parse_time(data.get("modified_date")),
            output_command=data.get("output_command") or "",
            license_name=licence.get("name") or "",
            license_url=licence.get("url") or "",
            doc_link=data.get("doc_link") or "",
        )


@dataclass
class ToolImport:
    vault_info: uuid.UUID | None = None
    name: str = ""
    description: str = ""
    category: str = ""
    category_id: uuid.UUID | None = None
    output_command: str = ""
    source_url: str = ""
    docker_image: str = ""
    command: str = ""
    output_type: str = ""
    inputs: dict[str, NodeInput] = field(default_factory=dict)
    license_name: str = ""
    license_url: str = ""
    doc_link: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> ToolImport:
        licence = data.get("license_info") or {}
        return cls(
            vault_info=_opt_uuid(data.get("vault_info")),
            name=data.get("name") or "",
            description=data.get("description") or "",
            category=data.get("tool_category_name") or "",
            category_id=_opt_uuid(data.get("tool_category")),
            output_command=data.get("output_command") or "",
            source_url=data.get("source_url") or "",
            docker_image=data.get("docker_image") or "",
            command=data.get("command") or "",
            output_type=data.get("output_type") or "",
            inputs=_inputs_from_dict(data.get("inputs")),
            license_name=licence.get("name") or "",
            license_url=licence.get("url") or "",
            doc_link=data.get("doc_link") or "",
        )

    def to_dict(self) -> dict:
        return {
            "vault_info": _uuid_str(self.vault_info),
            "name": self.name,
            "description": self.description,
            "tool_category_name": self.category,
            "tool_category": _uuid_str(self.category_id),
            "output_command": self.output_command,
            "source_url": self.source_url,
            "docker_image": self.docker_image,
            "command": self.command,
            "output_type": self.output_type,
            "inputs": {k: v.to_dict() for k, v in self.inputs.items()},
            "license_info": {"name": self.license_name, "url": self.license_url},
            "doc_link": self.doc_link,
        }