"""Editing the node graph of a workflow version: connections and primitive nodes."""

from __future__ import annotations

import re
from typing import Any

from cvedb.models import Connection, Node, PrimitiveNode, WorkflowVersion

_INTEGER = re.compile(r"[+-]?[0-9]+")

_PRIMITIVE_PREFIXES = {
    "STRING": "string-input-",
    "BOOLEAN": "boolean-input-",
    "FILE": "http-input-",
    "FOLDER": "git-input-",
}

_PRIMITIVE_TYPE_NAMES = {
    "STRING": "STRING",
    "BOOLEAN": "BOOLEAN",
    "FILE": "URL",
    "FOLDER": "GIT",
}

_FILE_SCHEMES = ("https://", "http://", "cvedb://file/", "cvedb://output/")
_FOLDER_SCHEMES = ("http://", "https://")


class WorkflowBuildError(Exception):
    """Raised when a workflow version cannot be changed as asked."""


def _require(version: WorkflowVersion | None) -> WorkflowVersion:
    if version is None:
        raise WorkflowBuildError("workflow version is nil")
    return version


def _atoi(text: str) -> int | None:
    return int(text) if _INTEGER.fullmatch(text) else None


def _connection_ids(
    source_name: str, source_port: str, destination_name: str, destination_port: str
) -> tuple[str, str]:
    return (
        f"output/{source_name}/{source_port}",
        f"input/{destination_name}/{destination_port}/{source_name}",
    )


def add_connection(
    version: WorkflowVersion | None,
    source_name: str,
    source_port: str,
    destination_name: str,
    destination_port: str,
) -> None:
    """Connect a node's output port to another node's input port."""
    version = _require(version)
    source, destination = _connection_ids(
        source_name, source_port, destination_name, destination_port
    )
    version.data.connections.append(Connection(source=source, destination=destination))


def remove_connection(
    version: WorkflowVersion | None,
    source_name: str,
    source_port: str,
    destination_name: str,
    destination_port: str,
) -> None:
    """Remove the first connection between the given ports."""
    version = _require(version)
    source, destination = _connection_ids(
        source_name, source_port, destination_name, destination_port
    )
    for position, connection in enumerate(version.data.connections):
        if connection.source == source and connection.destination == destination:
            del version.data.connections[position]
            return
    raise WorkflowBuildError("connection not found")


def find_primitive_nodes_connected_to_param(
    version: WorkflowVersion | None, node_id: str, param_name: str
) -> list[str]:
    """Return the names of primitive nodes feeding a node's parameter."""
    version = _require(version)
    found: list[str] = []
    for connection in version.data.connections:
        tokens = connection.destination.removeprefix("input/").split("/")
        if len(tokens) < 2:
            continue
        if tokens[0] != node_id or tokens[1] != param_name:
            continue
        source_id = connection.source.removeprefix("output/").removesuffix("/output")
        if source_id.startswith(tuple(_PRIMITIVE_PREFIXES.values())):
            found.append(source_id)
    return found


def is_default_label(label: str, name: str) -> bool:
    """Tell whether a label is the one derived from a node name like "tool-3"."""
    parts = name.split("-")
    if len(parts) < 2 or _atoi(parts[-1]) is None:
        return False
    return label == "-".join(parts[:-1])


def get_labeled_nodes(version: WorkflowVersion | None) -> list[Node]:
    """Return the nodes whose label was changed from the default."""
    version = _require(version)
    return [
        node for node in version.data.nodes.values() if not is_default_label(node.label, node.name)
    ]


def get_labeled_primitive_nodes(version: WorkflowVersion | None) -> list[PrimitiveNode]:
    """Return the primitive nodes whose label differs from their value."""
    version = _require(version)
    return [node for node in version.data.primitive_nodes.values() if node.label != node.value]


def add_primitive_node(version: WorkflowVersion | None, node_type: str, value: Any) -> PrimitiveNode:
    """Create a primitive node and add it to the workflow version."""
    version = _require(version)
    try:
        node = create_primitive_node(version, node_type, value)
    except WorkflowBuildError as exc:
        raise WorkflowBuildError(f"failed to create primitive node: {exc}") from exc
    version.data.primitive_nodes[node.name] = node
    return node


def create_primitive_node(
    version: WorkflowVersion | None, node_type: str, value: Any
) -> PrimitiveNode:
    """Build a primitive node of a type with the next free name; it is not added."""
    if node_type not in _PRIMITIVE_PREFIXES:
        raise WorkflowBuildError(f"unsupported node type: {node_type}")
    name = f"{_PRIMITIVE_PREFIXES[node_type]}{get_available_primitive_node_id(node_type, version)}"
    normalized, label = process_primitive_node_value(node_type, value)
    return PrimitiveNode(
        name=name,
        type=node_type,
        type_name=_PRIMITIVE_TYPE_NAMES[node_type],
        value=normalized,
        label=label,
    )


def set_primitive_node_value(primitive_node: PrimitiveNode | None, value: Any) -> None:
    """Change a primitive node's value, keeping a label that was set by hand."""
    if primitive_node is None:
        raise WorkflowBuildError("primitive node cannot be nil")
    normalized, implied_label = process_primitive_node_value(primitive_node.type, value)
    if primitive_node.label == primitive_node.value:
        primitive_node.label = implied_label
    primitive_node.value = normalized


def process_primitive_node_value(node_type: str, value: Any) -> tuple[Any, str]:
    """Validate a value for a primitive node type; return it normalised with its label."""
    if isinstance(value, bool):
        normalized: Any = value
    elif isinstance(value, int):
        normalized = str(value)
    elif isinstance(value, str):
        if node_type == "FILE" and not value.startswith(_FILE_SCHEMES):
            raise WorkflowBuildError(
                "file input must be a valid URL (http:// or https://) for a remote file, "
                "cvedb://file/path for stored files, or cvedb://output/id for workflow outputs"
            )
        if node_type == "FOLDER" and not value.startswith(_FOLDER_SCHEMES):
            raise WorkflowBuildError("folder input must be a valid git repository URL")
        if node_type not in _PRIMITIVE_PREFIXES:
            raise WorkflowBuildError(f"unsupported node type: {node_type}")
        normalized = value
    else:
        raise WorkflowBuildError(
            f"unsupported value type: {type(value).__name__}; "
            "only string, int, and bool are valid for primitive nodes"
        )

    if node_type == "BOOLEAN":
        if not isinstance(normalized, bool):
            raise WorkflowBuildError(f"boolean input requires a bool value, got {value!r}")
        return normalized, "true" if normalized else "false"
    if not isinstance(normalized, str):
        raise WorkflowBuildError(f"{node_type.lower()} input requires a text value, got {value!r}")
    return normalized, normalized


def get_available_primitive_node_id(node_type: str, version: WorkflowVersion | None) -> int:
    """Return the number following the highest one used by primitive nodes of a type."""
    available = 1
    if version is None or not version.data.primitive_nodes:
        return available
    prefix = _PRIMITIVE_PREFIXES.get(node_type, "")
    for name in version.data.primitive_nodes:
        if name.startswith(prefix):
            current = _atoi(name.removeprefix(prefix)) or 0
            if current >= available:
                available = current + 1
    return available


def remove_primitive_node(version: WorkflowVersion | None, primitive_node_id: str) -> None:
    """Remove a primitive node; a missing one is ignored."""
    version = _require(version)
    version.data.primitive_nodes.pop(primitive_node_id, None)