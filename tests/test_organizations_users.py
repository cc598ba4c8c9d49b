from __future__ import annotations

from fastapi.testclient import TestClient


def test_health_and_root(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").json()["status"] == "online"


def test_ensure_organization_is_idempotent(client: TestClient) -> None:
    first = client.post("/organizations/ensure", json={"name": "Acme"})
    second = client.post("/organizations/ensure", json={"name": "Acme"})

    assert first.status_code == 201
    assert second.status_code == 200
    assert first.json()["id"] == second.json()["id"]
    assert len(client.get("/organizations/").json()) == 1


def test_ensure_without_name_uses_default(client: TestClient) -> None:
    response = client.post("/organizations/ensure", json={})

    assert response.status_code == 201
    assert response.json()["name"] == "Default Organization"


def test_get_organization(client: TestClient, organization_id: str) -> None:
    assert client.get(f"/organizations/{organization_id}").json()["name"] == "Acme"

    response = client.get("/organizations/01HZZZZZZZZZZZZZZZZZZZZZZZ")
    assert response.status_code == 404
    assert response.json() == {"error": "Organization not found", "category": "not_found"}


def test_create_and_list_users(client: TestClient, organization_id: str) -> None:
    response = client.post(
        "/users/",
        json={
            "email": "Ada@Example.com",
            "first_name": "Ada",
            "last_name": "Lovelace",
            "department": "Engineering",
            "organization_id": organization_id,
        },
    )
    assert response.status_code == 201, response.text
    user = response.json()
    assert user["email"] == "ada@example.com"
    assert user["unit_assignments"] == []

    client.post("/users/", json={"email": "grace@example.com"})

    assert len(client.get("/users/").json()) == 2
    members = client.get("/users/", params={"organization_id": organization_id}).json()
    assert [member["id"] for member in members] == [user["id"]]
    assert client.get(f"/users/{user['id']}").json()["department"] == "Engineering"


def test_user_validation(client: TestClient) -> None:
    client.post("/users/", json={"email": "ada@example.com"})

    duplicate = client.post("/users/", json={"email": "ada@example.com"})
    assert duplicate.status_code == 409
    assert duplicate.json()["category"] == "conflict"

    invalid = client.post("/users/", json={"email": "not-an-email"})
    assert invalid.status_code == 400
    assert "email" in invalid.json()["fields"]

    unknown_org = client.post(
        "/users/", json={"email": "grace@example.com", "organization_id": "01HZZZZZZZZZZZZZZZZZZZZZZZ"}
    )
    assert unknown_org.status_code == 404

    assert client.get("/users/01HZZZZZZZZZZZZZZZZZZZZZZZ").status_code == 404
