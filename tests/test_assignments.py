from __future__ import annotations

from fastapi.testclient import TestClient


def _create_unit(client: TestClient, organization_id: str, name: str) -> str:
    response = client.post(f"/organizations/{organization_id}/units/", json={"name": name})
    assert response.status_code == 201, response.text
    return response.json()["id"]


def _create_role(client: TestClient, organization_id: str, name: str) -> str:
    response = client.post(f"/organizations/{organization_id}/roles/", json={"name": name})
    assert response.status_code == 201, response.text
    return response.json()["id"]


def _create_user(client: TestClient, email: str) -> str:
    response = client.post("/users/", json={"email": email, "first_name": "Dana", "last_name": "Lee"})
    assert response.status_code == 201, response.text
    return response.json()["id"]


def _assign(client: TestClient, user_id: str, unit_id: str, role_id: str, notes: str | None = None):
    return client.post(
        f"/users/{user_id}/assignments",
        json={"unit_id": unit_id, "role_id": role_id, "notes": notes},
    )


def test_assigning_twice_keeps_one_record(client: TestClient, organization_id: str) -> None:
    unit_id = _create_unit(client, organization_id, "Finance")
    analyst = _create_role(client, organization_id, "Analyst")
    manager = _create_role(client, organization_id, "Manager")
    user_id = _create_user(client, "dana@example.com")

    first = _assign(client, user_id, unit_id, analyst, "joined")
    assert first.status_code == 200, first.text
    second = _assign(client, user_id, unit_id, manager, "promoted")
    assert second.status_code == 200, second.text

    assignments = client.get(f"/users/{user_id}/assignments").json()
    assert len(assignments) == 1
    assert assignments[0]["id"] == first.json()["id"]
    assert assignments[0]["role_id"] == manager
    assert assignments[0]["notes"] == "promoted"
    assert assignments[0]["role"]["name"] == "Manager"
    assert assignments[0]["unit"]["name"] == "Finance"


def test_user_can_hold_roles_in_several_units(client: TestClient, organization_id: str) -> None:
    finance = _create_unit(client, organization_id, "Finance")
    legal = _create_unit(client, organization_id, "Legal")
    analyst = _create_role(client, organization_id, "Analyst")
    user_id = _create_user(client, "dana@example.com")

    _assign(client, user_id, finance, analyst)
    _assign(client, user_id, legal, analyst)

    user = client.get(f"/users/{user_id}").json()
    assert {item["unit_id"] for item in user["unit_assignments"]} == {finance, legal}


def test_assignment_references_must_exist(client: TestClient, organization_id: str) -> None:
    unit_id = _create_unit(client, organization_id, "Finance")
    role_id = _create_role(client, organization_id, "Analyst")
    user_id = _create_user(client, "dana@example.com")
    missing = "01HZZZZZZZZZZZZZZZZZZZZZZZ"

    assert _assign(client, missing, unit_id, role_id).json() == {"error": "User not found", "category": "not_found"}
    assert _assign(client, user_id, missing, role_id).json()["error"] == "Unit not found"
    assert _assign(client, user_id, unit_id, missing).json()["error"] == "Role not found"
    assert client.get(f"/users/{missing}/assignments").status_code == 404


def test_remove_assignment(client: TestClient, organization_id: str) -> None:
    unit_id = _create_unit(client, organization_id, "Finance")
    role_id = _create_role(client, organization_id, "Analyst")
    user_id = _create_user(client, "dana@example.com")
    _assign(client, user_id, unit_id, role_id)

    response = client.delete(f"/users/{user_id}/assignments", params={"unit_id": unit_id})
    assert response.status_code == 204
    assert client.get(f"/users/{user_id}/assignments").json() == []

    response = client.delete(f"/users/{user_id}/assignments", params={"unit_id": unit_id})
    assert response.status_code == 404


def test_unit_delete_removes_placements(client: TestClient, organization_id: str) -> None:
    unit_id = _create_unit(client, organization_id, "Finance")
    role_id = _create_role(client, organization_id, "Analyst")
    user_id = _create_user(client, "dana@example.com")
    _assign(client, user_id, unit_id, role_id)

    assert client.delete(f"/units/{unit_id}").status_code == 200

    assert client.get(f"/users/{user_id}/assignments").json() == []


def test_role_delete_removes_placements_and_links(client: TestClient, organization_id: str) -> None:
    unit_id = _create_unit(client, organization_id, "Finance")
    role_id = _create_role(client, organization_id, "Analyst")
    user_id = _create_user(client, "dana@example.com")
    _assign(client, user_id, unit_id, role_id)
    client.post(f"/units/{unit_id}/roles", json={"role_id": role_id})

    assert client.delete(f"/roles/{role_id}").status_code == 200

    unit = client.get(f"/units/{unit_id}").json()
    assert unit["assigned_roles"] == []
    assert unit["assigned_users"] == []
