"""
Mushroom Hunter Backend — Taxonomy API Tests
==============================================

What we test:
    ✅ Any user may read, only admins may write
    ✅ Parent required / unknown parent → 400, duplicate → 409
    ✅ parent_id filter and name ordering
    ✅ Delete with children → 409, without → 204
"""

import uuid

import pytest


@pytest.mark.asyncio
async def test_user_can_read_but_not_write(client, user_headers, taxonomy):
    listing = await client.get("/api/taxonomy/divisions", headers=user_headers)
    assert listing.status_code == 200
    assert [d["name"] for d in listing.json()] == ["Basidiomycota"]

    response = await client.post("/api/taxonomy/divisions", json={"name": "Ascomycota"}, headers=user_headers)
    assert response.status_code == 403
    assert response.json()["message"] == "Admin access required"


@pytest.mark.asyncio
async def test_admin_creates_chain(client, admin_headers):
    division = await client.post("/api/taxonomy/divisions", json={"name": "Ascomycota"}, headers=admin_headers)
    assert division.status_code == 201
    division_id = division.json()["id"]

    missing_parent = await client.post("/api/taxonomy/classes", json={"name": "Pezizomycetes"}, headers=admin_headers)
    assert missing_parent.status_code == 400

    unknown_parent = await client.post(
        "/api/taxonomy/classes",
        json={"name": "Pezizomycetes", "division_id": str(uuid.uuid4())},
        headers=admin_headers,
    )
    assert unknown_parent.status_code == 400
    assert unknown_parent.json()["error"] == "invalid_reference"

    taxon_class = await client.post(
        "/api/taxonomy/classes",
        json={"name": "Pezizomycetes", "division_id": division_id},
        headers=admin_headers,
    )
    assert taxon_class.status_code == 201
    assert taxon_class.json()["division_id"] == division_id

    duplicate = await client.post(
        "/api/taxonomy/classes",
        json={"name": "Pezizomycetes", "division_id": division_id},
        headers=admin_headers,
    )
    assert duplicate.status_code == 409


@pytest.mark.asyncio
async def test_parent_filter_and_order(client, admin_headers, taxonomy):
    for name in ("Russulaceae", "Boletaceae"):
        response = await client.post(
            "/api/taxonomy/families",
            json={"name": name, "order_id": str(taxonomy.order.id)},
            headers=admin_headers,
        )
        assert response.status_code == 201

    other_order = await client.post(
        "/api/taxonomy/orders",
        json={"name": "Polyporales", "class_id": str(taxonomy.taxon_class.id)},
        headers=admin_headers,
    )
    await client.post(
        "/api/taxonomy/families",
        json={"name": "Polyporaceae", "order_id": other_order.json()["id"]},
        headers=admin_headers,
    )

    response = await client.get(
        "/api/taxonomy/families",
        params={"parent_id": str(taxonomy.order.id)},
        headers=admin_headers,
    )
    assert [f["name"] for f in response.json()] == ["Amanitaceae", "Boletaceae", "Russulaceae"]

    everything = await client.get("/api/taxonomy/families", headers=admin_headers)
    assert len(everything.json()) == 4


@pytest.mark.asyncio
async def test_update_and_delete(client, admin_headers, taxonomy):
    renamed = await client.put(
        f"/api/taxonomy/genera/{taxonomy.genus.id}",
        json={"common_name": "Knollenblätterpilze"},
        headers=admin_headers,
    )
    assert renamed.status_code == 200
    assert renamed.json()["common_name"] == "Knollenblätterpilze"
    assert renamed.json()["name"] == "Amanita"

    in_use = await client.delete(f"/api/taxonomy/families/{taxonomy.family.id}", headers=admin_headers)
    assert in_use.status_code == 409

    deleted = await client.delete(f"/api/taxonomy/genera/{taxonomy.genus.id}", headers=admin_headers)
    assert deleted.status_code == 204

    gone = await client.get(f"/api/taxonomy/genera/{taxonomy.genus.id}", headers=admin_headers)
    assert gone.status_code == 404
