"""
Integration tests for parties, suppliers and vehicles.
"""

import pytest


async def test_create_and_list_parties(client):
    response = await client.post("/v1/parties", json={"name": "  Acme Traders ", "email": "Ops@Acme.IN"})
    assert response.status_code == 201
    party = response.json()
    assert party["name"] == "Acme Traders"
    assert party["email"] == "ops@acme.in"

    await client.post("/v1/parties", json={"name": "Bharat Cement"})
    listing = (await client.get("/v1/parties", params={"search": "acme"})).json()
    assert listing["total"] == 1
    assert listing["parties"][0]["id"] == party["id"]


async def test_duplicate_party_name_rejected(client):
    await client.post("/v1/parties", json={"name": "Acme Traders"})
    response = await client.post("/v1/parties", json={"name": "Acme Traders"})
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_DUPLICATE_001"


async def test_party_not_found(client):
    response = await client.get("/v1/parties/999")
    assert response.status_code == 404
    assert response.json()["details"]["id"] == 999


async def test_update_and_delete_supplier(client):
    supplier = (await client.post("/v1/suppliers", json={"name": "Sharma Roadlines"})).json()

    response = await client.put(f"/v1/suppliers/{supplier['id']}", json={"phone": "9800000000"})
    assert response.status_code == 200
    assert response.json()["phone"] == "9800000000"

    response = await client.delete(f"/v1/suppliers/{supplier['id']}")
    assert response.status_code == 200
    assert (await client.get(f"/v1/suppliers/{supplier['id']}")).status_code == 404


async def test_vehicle_number_normalized_and_unique(client):
    response = await client.post("/v1/vehicles", json={"vehicle_no": " mh12ab1234 ", "ownership_type": "own"})
    assert response.status_code == 201
    vehicle = response.json()
    assert vehicle["vehicle_no"] == "MH12AB1234"
    assert vehicle["vehicle_type"] == "Truck"

    response = await client.post("/v1/vehicles", json={"vehicle_no": "MH12AB1234"})
    assert response.status_code == 400


async def test_vehicle_ownership_filter(client):
    await client.post("/v1/vehicles", json={"vehicle_no": "MH12AB1234", "ownership_type": "own"})
    await client.post("/v1/vehicles", json={"vehicle_no": "GJ01XY9999"})

    own = (await client.get("/v1/vehicles", params={"ownership_type": "own"})).json()
    market = (await client.get("/v1/vehicles", params={"ownership_type": "market"})).json()
    assert [v["vehicle_no"] for v in own["vehicles"]] == ["MH12AB1234"]
    assert [v["vehicle_no"] for v in market["vehicles"]] == ["GJ01XY9999"]


@pytest.mark.parametrize("payload", [{"name": ""}, {"name": "   "}, {}])
async def test_party_validation(client, payload):
    response = await client.post("/v1/parties", json=payload)
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"
