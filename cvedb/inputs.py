"""Applying user-supplied values to the nodes and primitive nodes of a workflow version."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from cvedb.graph import (
    WorkflowBuildError,
    add_connection,
    add_primitive_node,
    find_primitive_nodes_connected_to_param,
    remove_connection,
    remove_primitive_node,
    set_primitive_node_value,
)
from cvedb.models import Node, PrimitiveNode, WorkflowVersion


def _require(version: WorkflowVersion | None) -> WorkflowVersion:
    if version is None:
        raise WorkflowBuildError("workflow version is nil")
    return version


def update_primitive_node_references(
    version: WorkflowVersion | None, primitive_node: PrimitiveNode | None
) -> None:
    """Refresh the inputs that every node fed by a primitive node holds for it."""
    if version is None or primitive_node is None:
        raise WorkflowBuildError("workflow version and primitive node cannot be nil")

    for connection in version.data.connections:
        source_id = connection.source.removeprefix("output/")
        if not source_id.startswith(primitive_node.name):
            continue

        tokens = connection.destination.removeprefix("input/").split("/")
        if len(tokens) < 2:
            raise WorkflowBuildError(
                f"connection destination is not formatted correctly: {connection.destination}"
            )
        dest_node_id, dest_param = tokens[0], tokens[1]

        dest_node = version.data.nodes.get(dest_node_id)
        if dest_node is None:
            raise WorkflowBuildError(f"destination node {dest_node_id} does not exist")
        if dest_node.inputs is None:
            raise WorkflowBuildError(f"destination node {dest_node_id} inputs are nil")

        add_node_input_primitive_reference(dest_node, primitive_node, dest_param)


def add_node_input_primitive_reference(
    node: Node, primitive_node: PrimitiveNode, input_name: str
) -> None:
    """Add to a node the input entry that carries a primitive node's value."""
    original = node.inputs.get(input_name)
    if original is None:
        raise WorkflowBuildError(f"input {input_name} not found in node {node.name}")

    # Both the original input and the reference must be visible for the workflow to render.
    original.visible = True

    reference = copy.copy(original)
    reference.name = ""
    reference.visible = True

    if primitive_node.type == "FILE":
        file_name = str(primitive_node.value).split("/")[-1]
        reference.value = f"in/{primitive_node.name}/{file_name}"
    elif primitive_node.type == "FOLDER":
        reference.value = f"in/{primitive_node.name}/"
    else:
        reference.value = primitive_node.value

    node.inputs[f"{input_name}/{primitive_node.name}"] = reference


def remove_node_input_primitive_reference(
    version: WorkflowVersion | None, node_id: str, primitive_node_id: str, input_name: str
) -> None:
    """Drop the input entry a node holds for a primitive node."""
    version = _require(version)
    node = version.data.nodes.get(node_id)
    if node is None:
        raise WorkflowBuildError(f"node {node_id} not found")
    if node.inputs is None:
        raise WorkflowBuildError(f"node {node_id} inputs are nil")
    node.inputs.pop(f"{input_name}/{primitive_node_id}", None)


def setup_node_param(
    version: WorkflowVersion | None,
    node_id: str,
    param_name: str,
    param_type: str,
    value: Any,
) -> None:
    """Create a primitive node for a value and wire it into a node's parameter."""
    version = _require(version)
    node = version.data.nodes.get(node_id)
    if node is None:
        raise WorkflowBuildError(f"node {node_id} not found")
    if param_name not in (node.inputs or {}):
        raise WorkflowBuildError(f"parameter {param_name} not found for node {node_id}")

    try:
        primitive = add_primitive_node(version, param_type, value)
    except WorkflowBuildError as exc:
        raise WorkflowBuildError(f"failed to add primitive node: {exc}") from exc

    try:
        add_connection(version, primitive.name, "output", node_id, param_name)
    except WorkflowBuildError as exc:
        remove_primitive_node(version, primitive.name)
        raise WorkflowBuildError(f"failed to add connection: {exc}") from exc

    try:
        add_node_input_primitive_reference(node, primitive, param_name)
    except WorkflowBuildError as exc:
        try:
            remove_connection(version, primitive.name, "output", node_id, param_name)
        except WorkflowBuildError:
            pass
        remove_primitive_node(version, primitive.name)
        raise WorkflowBuildError(f"failed to add input reference: {exc}") from exc


def cleanup_node_param(version: WorkflowVersion | None, node_id: str, param_name: str) -> None:
    """Remove every primitive node feeding a parameter, with its connection and reference."""
    version = _require(version)
    try:
        primitive_ids = find_primitive_nodes_connected_to_param(version, node_id, param_name)
    except WorkflowBuildError as exc:
        raise WorkflowBuildError(f"failed to find primitive nodes: {exc}") from exc

    for primitive_id in primitive_ids:
        try:
            remove_primitive_node(version, primitive_id)
        except WorkflowBuildError as exc:
            raise WorkflowBuildError(
                f"failed to remove primitive node {primitive_id}: {exc}"
            ) from exc
        try:
            remove_connection(version, primitive_id, "output", node_id, param_name)
        except WorkflowBuildError as exc:
            raise WorkflowBuildError(
                f"failed to remove connection for primitive node {primitive_id}: {exc}"
            ) from exc
        try:
            remove_node_input_primitive_reference(version, node_id, primitive_id, param_name)
        except WorkflowBuildError as exc:
            raise WorkflowBuildError(
                f"failed to remove input reference for primitive node {primitive_id}: {exc}"
            ) from exc


@dataclass
class PrimitiveNodeInput:
    """A new value for a primitive node (string, boolean, file or folder)."""

    primitive_node_id: str
    value: Any

    def apply_to_workflow_version(self, version: WorkflowVersion | None) -> None:
        """Set the primitive node's value and refresh the nodes it feeds."""
        version = _require(version)
        primitive = version.data.primitive_nodes.get(self.primitive_node_id)
        if primitive is None:
            raise WorkflowBuildError(f"primitive node {self.primitive_node_id} not found")
        try:
            set_primitive_node_value(primitive, self.value)
        except WorkflowBuildError as exc:
            raise WorkflowBuildError(f"failed to set primitive node value: {exc}") from exc
        try:
            update_primitive_node_references(version, primitive)
        except WorkflowBuildError as exc:
            raise WorkflowBuildError(
                f"failed to update primitive node references: {exc}"
            ) from exc


@dataclass
class NodeParameterInput:
    """Values for the parameters of a node (tool, script, module or splitter)."""

    node_id: str
    param_values: dict[str, list[Any]] = field(default_factory=dict)

    def apply_to_workflow_version(self, version: WorkflowVersion | None) -> None:
        """Replace the primitive nodes feeding each parameter with ones for the new values."""
        version = _require(version)
        node = version.data.nodes.get(self.node_id)
        if node is None:
            raise WorkflowBuildError(f"node {self.node_id} not found")

        for param_name, values in self.param_values.items():
            param = (node.inputs or {}).get(param_name)
            if param is None:
                raise WorkflowBuildError(
                    f"parameter {param_name} not found for node {self.node_id}"
                )
            try:
                cleanup_node_param(version, self.node_id, param_name)
            except WorkflowBuildError as exc:
                raise WorkflowBuildError(
                    f"failed to clean up existing primitive nodes: {exc}"
                ) from exc
            for value in values:
                try:
                    setup_node_param(version, self.node_id, param_name, param.type, value)
                except WorkflowBuildError as exc:
                    raise WorkflowBuildError(
                        f"failed to set up new primitive node: {exc}"
                    ) from exc


@dataclass
class Inputs:
    """The primitive node and node inputs to apply to a workflow version."""

    primitive_node_inputs: list[PrimitiveNodeInput] = field(default_factory=list)
    node_inputs: list[NodeParameterInput] = field(default_factory=list)


@dataclass
class NodeLookupTable:
    """Nodes and primitive nodes of a workflow version, keyed by both ID and label."""

    nodes: dict[str, Node] = field(default_factory=dict)
    primitive_nodes: dict[str, PrimitiveNode] = field(default_factory=dict)

    @classmethod
    def build(cls, version: WorkflowVersion) -> NodeLookupTable:
        table = cls()
        for node_id, node in version.data.nodes.items():
            table.nodes[node_id] = node
            table.nodes[node.label] = node
        for node_id, primitive in version.data.primitive_nodes.items():
            table.primitive_nodes[node_id] = primitive
            table.primitive_nodes[primitive.label] = primitive
        return table

    def node_id_from_reference(self, ref: str) -> str:
        """Return the ID of the node named or labelled ref."""
        node = self.nodes.get(ref)
        if node is None:
            raise WorkflowBuildError(f'node "{ref}" was not found in the workflow')
        return node.name

    def primitive_node_id_from_reference(self, ref: str) -> str:
        """Return the ID of the primitive node named or labelled ref."""
        primitive = self.primitive_nodes.get(ref)
        if primitive is None:
            raise WorkflowBuildError(f'primitive node "{ref}" was not found in the workflow')
        return primitive.name

    def resolve_inputs(self, inputs: Inputs) -> None:
        """Replace labels in the inputs with node IDs, in place."""
        for node_input in inputs.node_inputs:
            try:
                node_input.node_id = self.node_id_from_reference(node_input.node_id)
            except WorkflowBuildError as exc:
                raise WorkflowBuildError(
                    f'failed to resolve node reference "{node_input.node_id}": {exc}'
                ) from exc
        for primitive_input in inputs.primitive_node_inputs:
            ref = primitive_input.primitive_node_id
            try:
                primitive_input.primitive_node_id = self.primitive_node_id_from_reference(ref)
            except WorkflowBuildError as exc:
                raise WorkflowBuildError(
                    f'failed to resolve primitive node reference "{ref}": {exc}'
                ) from exc

    def get_node_input_type(self, node_id: str, param_name: str) -> str:
        """Return the type of a node's parameter."""
        node = self.nodes.get(node_id)
        if node is None:
            raise WorkflowBuildError(f'node "{node_id}" was not found')
        param = (node.inputs or {}).get(param_name)
        if param is None:
            raise WorkflowBuildError(
                f'parameter "{param_name}" not found for node "{node_id}"'
            )
        return param.type

    def get_primitive_node_input_type(self, node_id: str) -> str:
        """Return the type of a primitive node."""
        primitive = self.primitive_nodes.get(node_id)
        if primitive is None:
            raise WorkflowBuildError(f'primitive node "{node_id}" was not found')
        return primitive.type