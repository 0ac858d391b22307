import uuid
from datetime import datetime, timedelta, timezone

import pytest

from cvedb.models import (
    NIL_UUID,
    ZERO_TIME,
    Category,
    Connection,
    Fleet,
    IPAddress,
    Machines,
    Module,
    Node,
    NodeInput,
    NodeOutput,
    PrimitiveNode,
    Project,
    Run,
    RunSubJobInsights,
    SignedURL,
    Space,
    SubJob,
    SubJobOutput,
    Tool,
    ToolImport,
    User,
    Workflow,
    WorkflowVersion,
    duration_json,
)

SPACE_ID = uuid.UUID("11111111-2222-3333-4444-555555555555")
PROJECT_ID = uuid.UUID("66666666-7777-8888-9999-aaaaaaaaaaaa")
WORKFLOW_ID = uuid.UUID("bbbbbbbb-cccc-dddd-eeee-ffffffffffff")


def test_duration_json_minutes_form():
    assert duration_json(timedelta(seconds=90)) == "1m 30s"


def test_duration_json_hours_form():
    assert duration_json(timedelta(hours=2, minutes=1, seconds=59)) == "2h 1m"


def test_machines_keeps_zero_pointer_and_drops_unset():
    assert Machines(default=0).to_dict() == {"default": 0}
    assert Machines().to_dict() == {}
    assert Machines.from_dict({"self_hosted": 3}) == Machines(self_hosted=3)


def test_workflow_round_trip():
    wf = Workflow(
        id=WORKFLOW_ID,
        name="scan",
        description="desc",
        space_info=SPACE_ID,
        project_info=PROJECT_ID,
        created_date=datetime(2024, 3, 1, 12, 30, 15, 250000, tzinfo=timezone.utc),
        modified_date=datetime(2024, 3, 2, tzinfo=timezone.utc),
        author="someone",
        executing=True,
    )
    assert Workflow.from_dict(wf.to_dict()) == wf


def test_workflow_default_keeps_id_and_created_date():
    data = Workflow(name="renamed").to_dict()
    assert data["id"] == str(NIL_UUID)
    assert data["created_date"] == ZERO_TIME
    assert data["name"] == "renamed"
    assert "description" not in data
    assert "executing" not in data


def test_zero_time_parses_as_none():
    sub_job = SubJob.from_dict({"name": "a-1", "started_at": ZERO_TIME, "finished_at": None})
    assert sub_job.started_date is None
    assert sub_job.finished_date is None


def test_nanosecond_timestamp_truncated_to_microseconds():
    run = Run.from_dict({"started_date": "2024-05-01T10:00:00.123456789Z"})
    assert run.started_date == datetime(2024, 5, 1, 10, 0, 0, 123456, tzinfo=timezone.utc)


def test_timestamp_with_offset():
    run = Run.from_dict({"created_date": "2024-05-01T12:00:00+02:00"})
    assert run.created_date == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)


def test_invalid_timestamp_raises():
    with pytest.raises(ValueError):
        Run.from_dict({"created_date": "yesterday"})


def test_run_to_dict_omits_empty_and_keeps_pointers():
    run = Run(
        workflow_version_info=WORKFLOW_ID,
        fleet=SPACE_ID,
        use_static_ips=False,
        machines=Machines(default=2),
        duration=timedelta(minutes=5, seconds=3),
        run_insights=RunSubJobInsights(total=4, succeeded=4),
    )
    data = run.to_dict()
    assert data["use_static_ips"] is False
    assert data["machines"] == {"default": 2}
    assert data["workflow_version_info"] == str(WORKFLOW_ID)
    assert data["duration"] == duration_json(timedelta(minutes=5, seconds=3))
    assert data["run_insights"]["succeeded"] == 4
    assert "id" not in data
    assert "status" not in data
    assert "finished" not in data


def test_run_empty_machines_still_written():
    assert Run().to_dict()["machines"] == {}


def test_run_from_dict_fields():
    run = Run.from_dict(
        {
            "id": str(WORKFLOW_ID),
            "status": "RUNNING",
            "machines": {"self_hosted": 5},
            "ip_addresses": ["10.0.0.1"],
            "run_insights": {"total": 3, "failed": 1},
            "finished": False,
        }
    )
    assert run.id == WORKFLOW_ID
    assert run.machines.self_hosted == 5
    assert run.ip_addresses == ["10.0.0.1"]
    assert run.run_insights == RunSubJobInsights(total=3, failed=1)


def test_node_input_pointer_fields():
    data = NodeInput(type="STRING", visible=False, value="").to_dict()
    assert data["visible"] is False
    assert data["value"] == ""
    assert data["order"] == 0
    assert "command" not in data
    assert "name" not in data
    assert NodeInput.from_dict(data) == NodeInput(type="STRING", visible=False, value="")


def test_node_output_round_trip():
    out = NodeOutput(type="FILE", order=1, parameter_name="-o")
    assert NodeOutput.from_dict(out.to_dict()) == out


def test_primitive_node_uses_field_name_keys():
    pnode = PrimitiveNode(name="string-input-1", type="STRING", value="x", label="x", param_name="p")
    data = pnode.to_dict()
    assert data["ParamName"] == "p"
    assert "UpdateFile" not in data
    assert PrimitiveNode.from_dict(data) == pnode


def test_workflow_version_round_trip():
    node = Node(
        id=WORKFLOW_ID,
        name="nmap-1",
        label="nmap",
        x=1.5,
        y=-2.0,
        type="TOOL",
        inputs={"target": NodeInput(type="STRING", order=0, visible=True)},
        outputs={"file": NodeOutput(type="FILE", parameter_name="-o")},
        container={"image": "nmap", "command": ["nmap"]},
        worker_connected="yes",
    )
    pnode = PrimitiveNode(name="string-input-1", type="STRING", value="a", label="a")
    version = WorkflowVersion(
        id=SPACE_ID,
        version=3,
        workflow_info=WORKFLOW_ID,
        name="v3",
        created_date=datetime(2023, 1, 1, tzinfo=timezone.utc),
        max_machines=Machines(default=10),
    )
    version.data.nodes["nmap-1"] = node
    version.data.primitive_nodes["string-input-1"] = pnode
    version.data.connections.append(
        Connection(source="output/string-input-1/output", destination="input/nmap-1/target/string-input-1")
    )
    data = version.to_dict()
    assert data["data"]["connections"][0]["source"]["id"] == "output/string-input-1/output"
    assert "annotation" not in data["data"]
    assert data["data"]["nodes"]["nmap-1"]["meta"]["label"] == "nmap"
    assert WorkflowVersion.from_dict(data) == version


def test_space_project_lookup():
    space = Space(name="main", projects=[Project(name="alpha"), Project(name="beta", id=PROJECT_ID)])
    assert space.get_project_by_name("beta").id == PROJECT_ID
    with pytest.raises(LookupError, match="gamma"):
        space.get_project_by_name("gamma")


def test_space_round_trip_and_wire_keys():
    space = Space(
        id=SPACE_ID,
        name="main",
        vault_id=PROJECT_ID,
        projects=[Project(id=PROJECT_ID, name="p", space_id=SPACE_ID)],
        workflows=[Workflow(id=WORKFLOW_ID, name="w")],
    )
    data = space.to_dict()
    assert data["vault_info"] == str(PROJECT_ID)
    assert data["projects"][0]["space_info"] == str(SPACE_ID)
    assert Space.from_dict(data) == space


def test_project_to_dict_drops_empty():
    data = Project(name="p", space_id=SPACE_ID).to_dict()
    assert set(data) == {"name", "space_info"}


def test_tool_import_round_trip_and_nulls():
    tool = ToolImport(
        name="tool",
        category="Discovery",
        output_type="2",
        inputs={"url": NodeInput(type="STRING", visible=False)},
        license_name="MIT",
    )
    data = tool.to_dict()
    assert data["vault_info"] is None
    assert data["tool_category"] is None
    assert data["tool_category_name"] == "Discovery"
    assert data["license_info"]["name"] == "MIT"
    assert ToolImport.from_dict(data) == tool


def test_user_nested_vault():
    user = User.from_dict(
        {
            "id": 7,
            "email": "someone@example.com",
            "profile": {"username": "someone", "vault_info": {"id": str(SPACE_ID), "name": "v"}},
        }
    )
    assert user.profile.vault_info.id == SPACE_ID
    assert user.profile.username == "someone"
    assert user.email == "someone@example.com"


def test_fleet_machines():
    fleet = Fleet.from_dict(
        {"id": str(SPACE_ID), "name": "Managed", "vault": str(PROJECT_ID), "machines": [{"name": "self_hosted", "total": 2}]}
    )
    assert fleet.machines[0].name == "self_hosted"
    assert fleet.machines[0].total == 2
    assert fleet.vault == PROJECT_ID


def test_library_types_from_dict():
    module = Module.from_dict(
        {
            "name": "mod",
            "library_info": {"verified": True},
            "data": {"inputs": {"a": {"type": "FILE", "name": "a"}}, "outputs": {"o": {"type": "FILE", "parameter_name": "out"}}},
        }
    )
    assert module.verified is True
    assert module.inputs["a"].name == "a"
    assert module.outputs["o"].parameter_name == "out"

    tool = Tool.from_dict({"name": "t", "source_url": "https://example.com/t", "license_info": {"url": "https://example.com/l"}})
    assert tool.source_url == "https://example.com/t"
    assert tool.license_url == "https://example.com/l"
    assert tool.container is None

    category = Category.from_dict({"id": str(SPACE_ID), "name": "Recon", "tool_count": 4})
    assert category.id == SPACE_ID
    assert category.tool_count == 4


def test_small_records_from_dict():
    assert IPAddress.from_dict({"ip_address": "10.0.0.2"}).ip_address == "10.0.0.2"
    signed = SignedURL.from_dict({"url": "https://example.com/f", "size": 12})
    assert signed.size == 12
    output = SubJobOutput.from_dict({"id": str(WORKFLOW_ID), "name": "out.txt", "signed_url": "https://example.com/s"})
    assert output.id == WORKFLOW_ID
    assert output.name == "out.txt"


def test_subjob_defaults_for_local_fields():
    sub_job = SubJob.from_dict({"name": "nmap-1", "task_group": True, "task_index": 2, "params": {"k": "v"}})
    assert sub_job.label == ""
    assert sub_job.children == []
    assert sub_job.task_index == 2
    assert sub_job.params == {"k": "v"}
    assert sub_job.id == NIL_UUID