import pytest

from cvedb.graph import (
    WorkflowBuildError,
    add_connection,
    add_primitive_node,
    create_primitive_node,
    find_primitive_nodes_connected_to_param,
    get_available_primitive_node_id,
    get_labeled_nodes,
    get_labeled_primitive_nodes,
    is_default_label,
    process_primitive_node_value,
    remove_connection,
    remove_primitive_node,
    set_primitive_node_value,
)
from cvedb.models import Node, PrimitiveNode, WorkflowVersion


def test_add_connection_builds_ids():
    version = WorkflowVersion()
    add_connection(version, "string-input-1", "output", "tool-1", "target")
    (connection,) = version.data.connections
    assert connection.source == "output/string-input-1/output"
    assert connection.destination == "input/tool-1/target/string-input-1"


def test_remove_connection_removes_only_matching():
    version = WorkflowVersion()
    add_connection(version, "a", "output", "b", "p")
    add_connection(version, "c", "output", "b", "p")
    remove_connection(version, "a", "output", "b", "p")
    assert [c.source for c in version.data.connections] == ["output/c/output"]


def test_remove_missing_connection_raises():
    with pytest.raises(WorkflowBuildError, match="connection not found"):
        remove_connection(WorkflowVersion(), "a", "output", "b", "p")


def test_none_version_raises():
    with pytest.raises(WorkflowBuildError):
        add_connection(None, "a", "output", "b", "p")
    with pytest.raises(WorkflowBuildError):
        remove_primitive_node(None, "string-input-1")


def test_find_primitive_nodes_connected_to_param():
    version = WorkflowVersion()
    add_connection(version, "string-input-1", "output", "tool-1", "target")
    add_connection(version, "git-input-2", "output", "tool-1", "target")
    add_connection(version, "tool-2", "output", "tool-1", "target")
    add_connection(version, "string-input-3", "output", "tool-1", "other")
    found = find_primitive_nodes_connected_to_param(version, "tool-1", "target")
    assert found == ["string-input-1", "git-input-2"]


@pytest.mark.parametrize(
    "label, name, expected",
    [
        ("tool", "tool-1", True),
        ("my-tool", "my-tool-12", True),
        ("custom", "tool-1", False),
        ("tool", "tool", False),
        ("tool", "tool-x", False),
    ],
)
def test_is_default_label(label, name, expected):
    assert is_default_label(label, name) is expected


def test_get_labeled_nodes():
    version = WorkflowVersion()
    version.data.nodes["tool-1"] = Node(name="tool-1", label="tool")
    version.data.nodes["tool-2"] = Node(name="tool-2", label="Scanner")
    assert [n.name for n in get_labeled_nodes(version)] == ["tool-2"]


def test_get_labeled_primitive_nodes():
    version = WorkflowVersion()
    version.data.primitive_nodes["string-input-1"] = PrimitiveNode(
        name="string-input-1", label="abc", value="abc"
    )
    version.data.primitive_nodes["string-input-2"] = PrimitiveNode(
        name="string-input-2", label="Targets", value="abc"
    )
    assert [n.name for n in get_labeled_primitive_nodes(version)] == ["string-input-2"]


@pytest.mark.parametrize(
    "node_type, value, name, type_name",
    [
        ("STRING", "abc", "string-input-1", "STRING"),
        ("BOOLEAN", True, "boolean-input-1", "BOOLEAN"),
        ("FILE", "https://files.example.com/list.txt", "http-input-1", "URL"),
        ("FOLDER", "https://git.example.com/repo", "git-input-1", "GIT"),
    ],
)
def test_create_primitive_node_names(node_type, value, name, type_name):
    node = create_primitive_node(WorkflowVersion(), node_type, value)
    assert node.name == name
    assert node.type_name == type_name
    assert node.type == node_type
    assert node.value == value


def test_create_primitive_node_unsupported_type():
    with pytest.raises(WorkflowBuildError, match="unsupported node type"):
        create_primitive_node(WorkflowVersion(), "NUMBER", "1")


def test_available_id_follows_highest():
    version = WorkflowVersion()
    version.data.primitive_nodes["string-input-3"] = PrimitiveNode(name="string-input-3")
    version.data.primitive_nodes["string-input-1"] = PrimitiveNode(name="string-input-1")
    version.data.primitive_nodes["git-input-9"] = PrimitiveNode(name="git-input-9")
    assert get_available_primitive_node_id("STRING", version) == 4
    assert get_available_primitive_node_id("BOOLEAN", version) == 1
    assert get_available_primitive_node_id("STRING", None) == 1


def test_add_primitive_node_stores_and_numbers():
    version = WorkflowVersion()
    first = add_primitive_node(version, "STRING", "a")
    second = add_primitive_node(version, "STRING", "b")
    assert version.data.primitive_nodes[first.name] is first
    assert version.data.primitive_nodes[second.name] is second
    assert second.name == "string-input-2"


def test_add_primitive_node_wraps_error():
    with pytest.raises(WorkflowBuildError, match="failed to create primitive node"):
        add_primitive_node(WorkflowVersion(), "FILE", "ftp://nowhere")


def test_remove_primitive_node():
    version = WorkflowVersion()
    node = add_primitive_node(version, "STRING", "a")
    remove_primitive_node(version, node.name)
    remove_primitive_node(version, node.name)
    assert node.name not in version.data.primitive_nodes


def test_process_int_becomes_text():
    assert process_primitive_node_value("STRING", 5) == ("5", "5")


def test_process_boolean_label():
    assert process_primitive_node_value("BOOLEAN", False) == (False, "false")


@pytest.mark.parametrize(
    "node_type, value",
    [
        ("FILE", "ftp://host/file"),
        ("FOLDER", "cvedb://file/x"),
        ("STRING", 1.5),
        ("STRING", True),
        ("BOOLEAN", "yes"),
    ],
)
def test_process_rejects_bad_values(node_type, value):
    with pytest.raises(WorkflowBuildError):
        process_primitive_node_value(node_type, value)


def test_process_accepts_stored_file_reference():
    value, label = process_primitive_node_value("FILE", "cvedb://file/list.txt")
    assert value == label == "cvedb://file/list.txt"


def test_set_value_updates_default_label():
    node = PrimitiveNode(name="string-input-1", type="STRING", label="old", value="old")
    set_primitive_node_value(node, "new")
    assert (node.value, node.label) == ("new", "new")


def test_set_value_keeps_custom_label():
    node = PrimitiveNode(name="string-input-1", type="STRING", label="Targets", value="old")
    set_primitive_node_value(node, "new")
    assert (node.value, node.label) == ("new", "Targets")


def test_set_value_on_none_raises():
    with pytest.raises(WorkflowBuildError):
        set_primitive_node_value(None, "x")