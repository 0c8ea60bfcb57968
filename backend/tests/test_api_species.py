"""
Mushroom Hunter Backend — Species API Tests
=============================================

What we test:
    ✅ Full taxonomy chain in responses ("class" key)
    ✅ search / edibility / taxonomy / season filters, combined with AND
    ✅ Season wrapping over the new year
    ✅ Pagination block and X-Total-Count
    ✅ Admin CRUD and its error mapping
"""

import uuid
from types import SimpleNamespace

import pytest
import pytest_asyncio

from mushroom_hunter.database import async_session_factory
from mushroom_hunter.models import Edibility, Family, Finding, Genus, Species


@pytest_asyncio.fixture
async def catalog(taxonomy):
    """
    Three Amanitas plus two species from other families:
        Flammulina velutipes   season Nov → Mar (wraps)
        Hygrophorus marzuolus  season Feb → May
    """
    async with async_session_factory() as session:
        physalacriaceae = Family(name="Physalacriaceae", order_id=taxonomy.order.id)
        hygrophoraceae = Family(name="Hygrophoraceae", order_id=taxonomy.order.id)
        session.add_all([physalacriaceae, hygrophoraceae])
        await session.flush()
        flammulina = Genus(name="Flammulina", family_id=physalacriaceae.id)
        hygrophorus = Genus(name="Hygrophorus", family_id=hygrophoraceae.id)
        session.add_all([flammulina, hygrophorus])
        await session.flush()

        species = {
            "muscaria": Species(
                scientific_name="Amanita muscaria", common_name_de="Fliegenpilz",
                edibility=Edibility.POISONOUS, season_start=7, season_end=11, genus_id=taxonomy.genus.id,
            ),
            "caesarea": Species(
                scientific_name="Amanita caesarea", common_name="Caesar's mushroom",
                edibility=Edibility.EDIBLE, season_start=6, season_end=10, genus_id=taxonomy.genus.id,
            ),
            "phalloides": Species(
                scientific_name="Amanita phalloides", common_name_de="Grüner Knollenblätterpilz",
                edibility=Edibility.POISONOUS, season_start=7, season_end=11, genus_id=taxonomy.genus.id,
            ),
            "velutipes": Species(
                scientific_name="Flammulina velutipes", common_name_de="Samtfussrübling",
                edibility=Edibility.EDIBLE, season_start=11, season_end=3, genus_id=flammulina.id,
            ),
            "marzuolus": Species(
                scientific_name="Hygrophorus marzuolus", common_name_de="März-Schneckling",
                edibility=Edibility.EDIBLE, season_start=2, season_end=5, genus_id=hygrophorus.id,
            ),
        }
        session.add_all(species.values())
        await session.commit()

        return SimpleNamespace(taxonomy=taxonomy, flammulina=flammulina, **species)


async def _names(client, headers, **params):
    response = await client.get("/api/species", params=params, headers=headers)
    assert response.status_code == 200
    return [s["scientific_name"] for s in response.json()["species"]]


class TestListSpecies:

    @pytest.mark.asyncio
    async def test_requires_authentication(self, client, catalog):
        response = await client.get("/api/species")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_ordered_with_chain(self, client, user_headers, catalog):
        response = await client.get("/api/species", headers=user_headers)
        body = response.json()

        assert [s["scientific_name"] for s in body["species"]] == [
            "Amanita caesarea",
            "Amanita muscaria",
            "Amanita phalloides",
            "Flammulina velutipes",
            "Hygrophorus marzuolus",
        ]
        genus = body["species"][0]["genus"]
        assert genus["name"] == "Amanita"
        assert genus["family"]["order"]["class"]["division"]["name"] == "Basidiomycota"

    @pytest.mark.asyncio
    async def test_pagination(self, client, user_headers, catalog):
        response = await client.get("/api/species", params={"page": 2, "limit": 2}, headers=user_headers)
        body = response.json()

        assert response.headers["X-Total-Count"] == "5"
        assert body["pagination"] == {
            "total": 5,
            "page": 2,
            "limit": 2,
            "total_pages": 3,
            "has_next": True,
            "has_prev": True,
        }
        assert [s["scientific_name"] for s in body["species"]] == [
            "Amanita phalloides",
            "Flammulina velutipes",
        ]

    @pytest.mark.asyncio
    async def test_invalid_paging_falls_back(self, client, user_headers, catalog):
        response = await client.get("/api/species", params={"page": "x", "limit": "0"}, headers=user_headers)
        assert response.json()["pagination"]["page"] == 1
        assert response.json()["pagination"]["limit"] == 50

    @pytest.mark.asyncio
    async def test_search_covers_common_names(self, client, user_headers, catalog):
        assert await _names(client, user_headers, search="fliegen") == ["Amanita muscaria"]
        assert await _names(client, user_headers, search="CAESAR") == ["Amanita caesarea"]
        assert await _names(client, user_headers, search="velut") == ["Flammulina velutipes"]

    @pytest.mark.asyncio
    async def test_filters_combine(self, client, user_headers, catalog):
        names = await _names(client, user_headers, search="amanita", edibility="poisonous")
        assert names == ["Amanita muscaria", "Amanita phalloides"]

        names = await _names(client, user_headers, search="amanita", season=1)
        assert names == []

    @pytest.mark.asyncio
    async def test_taxonomy_filters(self, client, user_headers, catalog):
        taxonomy = catalog.taxonomy
        assert len(await _names(client, user_headers, family_id=str(taxonomy.family.id))) == 3
        assert len(await _names(client, user_headers, order_id=str(taxonomy.order.id))) == 5
        assert len(await _names(client, user_headers, division_id=str(taxonomy.division.id))) == 5
        assert await _names(client, user_headers, genus_id=str(catalog.flammulina.id)) == ["Flammulina velutipes"]
        assert await _names(client, user_headers, class_id=str(uuid.uuid4())) == []

    @pytest.mark.asyncio
    async def test_season_wraps_over_new_year(self, client, user_headers, catalog):
        assert await _names(client, user_headers, season=1) == ["Flammulina velutipes"]
        assert await _names(client, user_headers, season=4) == ["Hygrophorus marzuolus"]
        assert await _names(client, user_headers, season=11) == [
            "Amanita muscaria",
            "Amanita phalloides",
            "Flammulina velutipes",
        ]

    @pytest.mark.asyncio
    async def test_season_out_of_range(self, client, user_headers, catalog):
        response = await client.get("/api/species", params={"season": 13}, headers=user_headers)
        assert response.status_code == 422


class TestSpeciesCrud:

    @pytest.mark.asyncio
    async def test_get(self, client, user_headers, catalog):
        response = await client.get(f"/api/species/{catalog.muscaria.id}", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["genus"]["family"]["name"] == "Amanitaceae"

        missing = await client.get(f"/api/species/{uuid.uuid4()}", headers=user_headers)
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_only_admin_creates(self, client, user_headers, admin_headers, taxonomy):
        payload = {"scientific_name": "Amanita pantherina", "genus_id": str(taxonomy.genus.id)}

        forbidden = await client.post("/api/species", json=payload, headers=user_headers)
        assert forbidden.status_code == 403

        created = await client.post("/api/species", json=payload, headers=admin_headers)
        assert created.status_code == 201
        body = created.json()
        assert body["edibility"] == "unknown"
        assert body["occurrence"] == "occasional"
        assert body["genus"]["family"]["order"]["class"]["name"] == "Agaricomycetes"

        duplicate = await client.post("/api/species", json=payload, headers=admin_headers)
        assert duplicate.status_code == 409

    @pytest.mark.asyncio
    async def test_create_with_unknown_genus(self, client, admin_headers, taxonomy):
        response = await client.post(
            "/api/species",
            json={"scientific_name": "Nusquam fungus", "genus_id": str(uuid.uuid4())},
            headers=admin_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_reference"

    @pytest.mark.asyncio
    async def test_update(self, client, admin_headers, catalog):
        response = await client.put(
            f"/api/species/{catalog.velutipes.id}",
            json={"genus_id": str(catalog.taxonomy.genus.id), "habitat": "dead wood"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["genus"]["name"] == "Amanita"
        assert response.json()["habitat"] == "dead wood"

        null_edibility = await client.put(
            f"/api/species/{catalog.velutipes.id}", json={"edibility": None}, headers=admin_headers
        )
        assert null_edibility.status_code == 422

    @pytest.mark.asyncio
    async def test_delete(self, client, admin_headers, regular_user, catalog):
        async with async_session_factory() as session:
            session.add(Finding(user_id=regular_user.id, species_id=catalog.muscaria.id, latitude=46.9, longitude=7.4))
            await session.commit()

        in_use = await client.delete(f"/api/species/{catalog.muscaria.id}", headers=admin_headers)
        assert in_use.status_code == 409

        deleted = await client.delete(f"/api/species/{catalog.caesarea.id}", headers=admin_headers)
        assert deleted.status_code == 204
