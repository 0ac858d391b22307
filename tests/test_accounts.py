import json
import uuid

import pytest
import responses

from cvedb.accounts import AccountsApi
from cvedb.transport import ApiError

BASE = "https://api.example.com"
HIVE = BASE + "/hive/v1"
VAULT = uuid.UUID("11111111-2222-3333-4444-555555555555")


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def make_api():
    return AccountsApi(token="token", base_url=BASE, vault_id=VAULT)


def page(results, next_url=None):
    return {"count": len(results), "next": next_url, "previous": None, "results": results}


def fleet_dict(fleet_id, name):
    return {
        "id": str(fleet_id),
        "name": name,
        "vault": str(VAULT),
        "cluster": "c",
        "state": "ACTIVE",
        "machines": [{"name": "default", "description": "", "mem": "", "cpu": "", "total": 1}],
        "type": "MANAGED",
        "default": True,
    }


def space_dict(space_id, name, projects=None):
    return {"id": str(space_id), "name": name, "description": "", "projects": projects or []}


def test_get_current_user(mocked):
    mocked.add(
        responses.GET,
        HIVE + "/users/me/",
        json={
            "id": 7,
            "email": "user@example.com",
            "profile": {"vault_info": {"id": str(VAULT), "name": "vault"}, "username": "user"},
        },
    )
    user = make_api().get_current_user()
    assert user.profile.vault_info.id == VAULT
    assert mocked.calls[0].request.headers["Authorization"] == "Token token"


def test_get_fleets_follows_pages(mocked):
    first, second = uuid.uuid4(), uuid.uuid4()
    mocked.add(responses.GET, HIVE + "/fleet/", json=page([fleet_dict(first, "a")], "more"))
    mocked.add(responses.GET, HIVE + "/fleet/", json=page([fleet_dict(second, "b")]))
    fleets = make_api().get_fleets()
    assert [f.id for f in fleets] == [first, second]
    assert f"vault={VAULT}" in mocked.calls[0].request.url
    assert "page=2" in mocked.calls[1].request.url


def test_get_fleet_by_id_and_missing(mocked):
    wanted = uuid.uuid4()
    mocked.add(
        responses.GET,
        HIVE + "/fleet/",
        json=page([fleet_dict(uuid.uuid4(), "a"), fleet_dict(wanted, "b")]),
    )
    api = make_api()
    assert api.get_fleet(wanted).name == "b"
    with pytest.raises(LookupError, match="not found"):
        api.get_fleet(uuid.uuid4())


def test_get_fleet_by_name(mocked):
    mocked.add(responses.GET, HIVE + "/fleet/", json=page([fleet_dict(uuid.uuid4(), "main")]))
    api = make_api()
    assert api.get_fleet_by_name("main").name == "main"
    with pytest.raises(LookupError, match='fleet "other" not found'):
        api.get_fleet_by_name("other")


def test_get_fleet_by_name_without_fleets(mocked):
    mocked.add(responses.GET, HIVE + "/fleet/", json=page([]))
    with pytest.raises(LookupError, match="no fleets found"):
        make_api().get_fleet_by_name("main")


def test_get_vault_ip_addresses(mocked):
    mocked.add(responses.GET, HIVE + "/ip/", json=page([{"ip_address": "192.0.2.1"}]))
    addresses = make_api().get_vault_ip_addresses()
    assert [a.ip_address for a in addresses] == ["192.0.2.1"]


def test_get_space_by_name_fetches_exact_match(mocked):
    wanted = uuid.uuid4()
    mocked.add(
        responses.GET,
        HIVE + "/spaces/",
        json=page([space_dict(uuid.uuid4(), "recon old"), space_dict(wanted, "recon")]),
    )
    mocked.add(
        responses.GET,
        f"{HIVE}/spaces/{wanted}/",
        json=space_dict(wanted, "recon", [{"id": str(uuid.uuid4()), "name": "proj"}]),
    )
    space = make_api().get_space_by_name("recon")
    assert space.id == wanted
    assert space.get_project_by_name("proj").name == "proj"
    assert "name=recon" in mocked.calls[0].request.url


def test_get_space_by_name_not_found(mocked):
    mocked.add(responses.GET, HIVE + "/spaces/", json=page([space_dict(uuid.uuid4(), "x")]))
    with pytest.raises(LookupError, match='space "recon" not found'):
        make_api().get_space_by_name("recon")


def test_get_space_error_is_wrapped(mocked):
    space_id = uuid.uuid4()
    mocked.add(responses.GET, f"{HIVE}/spaces/{space_id}/", status=404)
    with pytest.raises(ApiError, match="failed to get space: resource not found"):
        make_api().get_space(space_id)


def test_create_space_sends_vault(mocked):
    new_id = uuid.uuid4()
    mocked.add(responses.POST, HIVE + "/spaces/", json=space_dict(new_id, "recon"))
    space = make_api().create_space("recon", "desc")
    assert space.id == new_id
    body = json.loads(mocked.calls[0].request.body)
    assert body == {"name": "recon", "description": "desc", "vault_info": str(VAULT)}


def test_create_project(mocked):
    space_id, project_id = uuid.uuid4(), uuid.uuid4()
    mocked.add(responses.POST, HIVE + "/projects/", json={"id": str(project_id), "name": "proj"})
    project = make_api().create_project("proj", "", space_id)
    assert project.id == project_id
    request = mocked.calls[0].request
    assert f"vault={VAULT}" in request.url
    assert json.loads(request.body) == {"name": "proj", "space_info": str(space_id)}


def test_delete_space_and_project(mocked):
    space_id, project_id = uuid.uuid4(), uuid.uuid4()
    mocked.add(responses.DELETE, f"{HIVE}/spaces/{space_id}/", status=204)
    mocked.add(
        responses.DELETE, f"{HIVE}/projects/{project_id}/", status=400, json={"details": "busy"}
    )
    api = make_api()
    api.delete_space(space_id)
    assert mocked.calls[0].request.method == "DELETE"
    with pytest.raises(ApiError, match="failed to delete project: API error: busy"):
        api.delete_project(project_id)