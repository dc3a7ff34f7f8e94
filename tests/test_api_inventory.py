from decimal import Decimal


def test_catalog_can_be_seeded_through_the_api(client, auth_headers):
    headers = auth_headers()

    depot = client.post("/inventory/depots", json={"code": "hub-1", "name": "Hub One"}, headers=headers)
    assert depot.status_code == 201
    assert depot.json()["code"] == "HUB-1"

    product = client.post("/inventory/products", json={"name": "Buffalo Milk", "unit": "litre"}, headers=headers)
    assert product.status_code == 201

    variant = client.post(
        "/inventory/variants",
        json={
            "depot_id": depot.json()["id"],
            "product_id": product.json()["id"],
            "name": "Buffalo 1L pouch",
            "closing_qty": "12.5",
        },
        headers=headers,
    )
    assert variant.status_code == 201
    assert variant.json()["version"] == 1
    assert Decimal(variant.json()["closing_qty"]) == Decimal("12.5")

    listed = client.get("/inventory/variants", params={"depot_id": depot.json()["id"]}, headers=headers).json()
    assert [v["name"] for v in listed] == ["Buffalo 1L pouch"]


def test_duplicate_depot_code_conflicts(client, auth_headers):
    headers = auth_headers()
    client.post("/inventory/depots", json={"code": "D9", "name": "Depot Nine"}, headers=headers)

    response = client.post("/inventory/depots", json={"code": "d9", "name": "Another"}, headers=headers)

    assert response.status_code == 409


def test_operators_cannot_manage_catalog(client, auth_headers):
    response = client.post(
        "/inventory/depots",
        json={"code": "D7", "name": "Depot Seven"},
        headers=auth_headers(role="depot_operator"),
    )

    assert response.status_code == 403
