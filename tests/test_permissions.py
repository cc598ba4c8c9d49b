from __future__ import annotations

from fastapi.testclient import TestClient


def _create_permission(client: TestClient, organization_id: str, name: str, category: str) -> dict:
    response = client.post(
        f"/organizations/{organization_id}/permissions/",
        json={"name": name, "category": category, "resource": "reports", "description": f"{name} permission"},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_catalogue_is_ordered_by_category_then_name(client: TestClient, organization_id: str) -> None:
    _create_permission(client, organization_id, "export", "write")
    _create_permission(client, organization_id, "view", "read")
    _create_permission(client, organization_id, "archive", "read")
    _create_permission(client, organization_id, "manage", "admin")

    response = client.get(f"/organizations/{organization_id}/permissions/")
    assert response.status_code == 200

    assert [(item["category"], item["name"]) for item in response.json()] == [
        ("admin", "manage"),
        ("read", "archive"),
        ("read", "view"),
        ("write", "export"),
    ]


def test_invalid_category_is_rejected(client: TestClient, organization_id: str) -> None:
    response = client.post(
        f"/organizations/{organization_id}/permissions/",
        json={"name": "x", "category": "superuser", "resource": "reports"},
    )

    assert response.status_code == 400
    assert "category" in response.json()["fields"]


def test_deactivate_and_filter(client: TestClient, organization_id: str) -> None:
    permission = _create_permission(client, organization_id, "view", "read")
    _create_permission(client, organization_id, "export", "write")

    response = client.patch(f"/permissions/{permission['id']}", json={"is_active": False})
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    active = client.get(
        f"/organizations/{organization_id}/permissions/", params={"include_inactive": False}
    ).json()
    assert [item["name"] for item in active] == ["export"]


def test_delete_permission_drops_grants(client: TestClient, organization_id: str) -> None:
    permission = _create_permission(client, organization_id, "view", "read")
    role = client.post(f"/organizations/{organization_id}/roles/", json={"name": "Analyst"}).json()
    client.put(f"/roles/{role['id']}/permissions/{permission['id']}", json={"can_delegate": False})

    assert client.delete(f"/permissions/{permission['id']}").status_code == 204

    assert client.get(f"/permissions/{permission['id']}").status_code == 404
    assert client.get(f"/roles/{role['id']}").json()["role_permissions"] == []


def test_grant_across_organizations_is_rejected(client: TestClient, organization_id: str) -> None:
    other = client.post("/organizations/ensure", json={"name": "Globex"}).json()
    permission = _create_permission(client, other["id"], "view", "read")
    role = client.post(f"/organizations/{organization_id}/roles/", json={"name": "Analyst"}).json()

    response = client.put(f"/roles/{role['id']}/permissions/{permission['id']}", json={})

    assert response.status_code == 400
    assert response.json()["category"] == "validation"
