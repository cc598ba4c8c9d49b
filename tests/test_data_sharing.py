from __future__ import annotations

from fastapi.testclient import TestClient


def _create_unit(client: TestClient, organization_id: str, name: str) -> str:
    response = client.post(f"/organizations/{organization_id}/units/", json={"name": name})
    assert response.status_code == 201, response.text
    return response.json()["id"]


def _create_rule(client: TestClient, organization_id: str, **fields: object) -> dict:
    response = client.post(f"/organizations/{organization_id}/data-sharing/", json=fields)
    assert response.status_code == 201, response.text
    return response.json()


def _list(client: TestClient, organization_id: str, **params: object) -> list[str]:
    response = client.get(f"/organizations/{organization_id}/data-sharing/", params=params)
    assert response.status_code == 200, response.text
    return sorted(rule["name"] for rule in response.json())


def _seed(client: TestClient, organization_id: str) -> dict[str, str]:
    units = {name: _create_unit(client, organization_id, name) for name in ("Finance", "Executive", "R&D", "Product")}
    _create_rule(
        client,
        organization_id,
        name="Budget to executives",
        description="Quarterly budget figures",
        source_unit_id=units["Finance"],
        target_unit_id=units["Executive"],
        data_types=["financial-reports", "budget-data"],
        access_level="read",
    )
    _create_rule(
        client,
        organization_id,
        name="Research handoff",
        source_unit_id=units["R&D"],
        target_unit_id=units["Product"],
        data_types=["research-data", "budget-data"],
        conditions=["after review"],
        access_level="full",
        is_active=False,
    )
    return units


def test_create_rule_returns_units(client: TestClient, organization_id: str) -> None:
    finance = _create_unit(client, organization_id, "Finance")
    executive = _create_unit(client, organization_id, "Executive")

    rule = _create_rule(
        client,
        organization_id,
        name="Budget",
        source_unit_id=finance,
        target_unit_id=executive,
        data_types=[" budget-data ", "budget-data", ""],
    )

    assert rule["source_unit"]["name"] == "Finance"
    assert rule["target_unit"]["name"] == "Executive"
    assert rule["data_types"] == ["budget-data"]
    assert rule["access_level"] == "read"
    assert rule["is_active"] is True


def test_rule_needs_two_different_existing_units(client: TestClient, organization_id: str) -> None:
    finance = _create_unit(client, organization_id, "Finance")
    url = f"/organizations/{organization_id}/data-sharing/"

    response = client.post(url, json={"name": "Loop", "source_unit_id": finance, "target_unit_id": finance})
    assert response.status_code == 400
    assert response.json()["category"] == "validation"

    response = client.post(
        url, json={"name": "Gone", "source_unit_id": finance, "target_unit_id": "01HZZZZZZZZZZZZZZZZZZZZZZZ"}
    )
    assert response.status_code == 404


def test_filters(client: TestClient, organization_id: str) -> None:
    _seed(client, organization_id)

    assert _list(client, organization_id) == ["Budget to executives", "Research handoff"]
    assert _list(client, organization_id, search="quarterly") == ["Budget to executives"]
    assert _list(client, organization_id, access_level="full") == ["Research handoff"]
    assert _list(client, organization_id, status="active") == ["Budget to executives"]
    assert _list(client, organization_id, status="inactive") == ["Research handoff"]


def test_statistics(client: TestClient, organization_id: str) -> None:
    _seed(client, organization_id)

    stats = client.get(f"/organizations/{organization_id}/data-sharing/statistics").json()

    assert stats == {"total_rules": 2, "active_rules": 1, "total_data_types": 3, "units_involved": 4}


def test_toggle_update_and_delete(client: TestClient, organization_id: str) -> None:
    finance = _create_unit(client, organization_id, "Finance")
    executive = _create_unit(client, organization_id, "Executive")
    rule = _create_rule(client, organization_id, name="Budget", source_unit_id=finance, target_unit_id=executive)

    toggled = client.post(f"/data-sharing/{rule['id']}/toggle").json()
    assert toggled["is_active"] is False

    response = client.patch(f"/data-sharing/{rule['id']}", json={"access_level": "write", "conditions": ["audited"]})
    assert response.status_code == 200
    assert response.json()["access_level"] == "write"
    assert response.json()["conditions"] == ["audited"]

    response = client.patch(f"/data-sharing/{rule['id']}", json={"target_unit_id": finance})
    assert response.status_code == 400

    assert client.delete(f"/data-sharing/{rule['id']}").status_code == 204
    assert client.get(f"/data-sharing/{rule['id']}").status_code == 404


def test_unit_delete_removes_its_rules(client: TestClient, organization_id: str) -> None:
    units = _seed(client, organization_id)

    client.delete(f"/units/{units['Finance']}")

    assert _list(client, organization_id) == ["Research handoff"]
