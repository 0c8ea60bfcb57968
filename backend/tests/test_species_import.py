"""
Mushroom Hunter Backend — Species Import Tests
================================================

What:  Row parsing (pure) and reconciliation against a real SQLite schema.

What we test:
    ✅ parse_row skip rules (validity marker, names, Incertae sedis)
    ✅ Synonym clean-up and abbreviation expansion
    ✅ Edibility mapping
    ✅ read_csv_rows drops the header lines
    ✅ Taxa are shared between rows (cache + DB lookup), species upserted
    ✅ Existing genus without German name is adopted
    ✅ clear_taxonomy refuses while findings exist, unless forced
"""

import uuid

import pytest
from sqlalchemy import func, select

from mushroom_hunter.database import async_session_factory
from mushroom_hunter.exceptions import ConflictError
from mushroom_hunter.importer.species_import import (
    SpeciesImporter,
    clear_taxonomy,
    expand_synonyms,
    map_edibility,
    parse_row,
    read_csv_rows,
    run_import,
)
from mushroom_hunter.models import Division, Edibility, Family, Finding, Genus, Species

from conftest import create_user


def make_row(
    validity="r",
    genus="Boletus",
    species="edulis",
    synonyms="",
    names="Gemeiner Stein-Pilz, Herrenpilz",
    edibility="essbar",
    family="Boletaceae",
    order="Boletales",
    taxon_class="Agaricomycetes",
    division="Basidiomycota",
):
    row = [""] * 45
    row[0] = validity
    row[1] = genus
    row[2] = species
    row[34] = synonyms
    row[35] = names
    row[39] = edibility
    row[41] = family
    row[42] = order
    row[43] = taxon_class
    row[44] = division
    return row


# ══════════════════════════════════════════════════════════════════════════
# Row parsing
# ══════════════════════════════════════════════════════════════════════════

class TestParseRow:

    def test_valid_row(self):
        record = parse_row(make_row())

        assert record.scientific_name == "Boletus edulis"
        assert record.common_name == "Gemeiner Stein-Pilz"
        assert record.genus_common_name == "Pilze"
        assert record.edibility == Edibility.EDIBLE
        assert record.family == "Boletaceae"
        assert record.division == "Basidiomycota"

    def test_asterisks_and_quotes_are_stripped(self):
        record = parse_row(make_row(validity='"k*"', genus="*Boletus", names='"Steinpilz*"'))

        assert record is not None
        assert record.genus == "Boletus"
        assert record.common_name == "Steinpilz"
        assert record.genus_common_name == ""

    @pytest.mark.parametrize("validity", ["", "x", "r (alt)", "(k)"])
    def test_invalid_marker_is_skipped(self, validity):
        assert parse_row(make_row(validity=validity)) is None

    def test_marker_is_case_insensitive(self):
        assert parse_row(make_row(validity="K")) is not None

    @pytest.mark.parametrize("names", ["", "-", " , "])
    def test_missing_name_is_skipped(self, names):
        assert parse_row(make_row(names=names)) is None

    def test_missing_genus_or_species_is_skipped(self):
        assert parse_row(make_row(genus="")) is None
        assert parse_row(make_row(species="")) is None

    @pytest.mark.parametrize("level", ["family", "order", "taxon_class", "division"])
    def test_incertae_sedis_is_skipped(self, level):
        assert parse_row(make_row(**{level: "Incertae sedis"})) is None

    def test_short_row_is_skipped(self):
        assert parse_row(["r", "Boletus"]) is None


class TestSynonymsAndEdibility:

    def test_expand_synonyms(self):
        result = expand_synonyms("= B. aestivalis var. e.?", "Boletus", "edulis")
        assert result == "Boletus aestivalis var. edulis"

    def test_abbreviation_needs_word_boundary(self):
        # "var." must not become "vaRussula"
        assert expand_synonyms("R. var.", "Russula", "rosea") == "Russula var."

    def test_empty_synonyms(self):
        assert expand_synonyms("=?", "Boletus", "edulis") == ""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("essbar", Edibility.EDIBLE),
            ("Giftig", Edibility.POISONOUS),
            ("ungeniessbar", Edibility.INEDIBLE),
            ("ungeniessbar/schwach giftig", Edibility.INEDIBLE),
            ("tödlich", Edibility.UNKNOWN),
            ("", Edibility.UNKNOWN),
        ],
    )
    def test_map_edibility(self, raw, expected):
        assert map_edibility(raw) == expected


@pytest.mark.asyncio
async def test_read_csv_rows_skips_headers(tmp_path):
    path = tmp_path / "import.csv"
    lines = ["header one", "header two", ";".join(make_row()), ";".join(make_row(species="regius"))]
    path.write_text("\n".join(lines), encoding="latin-1")

    rows = await read_csv_rows(str(path), encoding="latin-1")

    assert len(rows) == 2
    assert rows[0][1] == "Boletus"
    assert rows[1][2] == "regius"


# ══════════════════════════════════════════════════════════════════════════
# Reconciliation
# ══════════════════════════════════════════════════════════════════════════

async def _count(session, model):
    return (await session.execute(select(func.count()).select_from(model))).scalar()


class TestSpeciesImporter:

    @pytest.mark.asyncio
    async def test_rows_share_taxa(self, db_session):
        rows = [
            make_row(),
            make_row(species="regius", names="Königs-Röhrling"),
            make_row(validity="x"),
        ]

        stats = await SpeciesImporter(db_session).import_rows(rows)
        await db_session.commit()

        assert stats.rows_read == 3
        assert stats.skipped == 1
        assert stats.failed == 0
        assert stats.species_created == 2
        assert stats.created == {
            "divisions": 1,
            "classes": 1,
            "orders": 1,
            "families": 1,
            "genera": 1,
        }
        assert await _count(db_session, Species) == 2

        genus = (await db_session.execute(select(Genus))).scalar_one()
        assert genus.name == "Boletus"
        assert genus.common_name == "Pilze"

    @pytest.mark.asyncio
    async def test_second_run_updates_and_reuses_database_rows(self, db_session):
        await SpeciesImporter(db_session).import_rows([make_row()])
        await db_session.commit()

        # A new importer has empty caches and must find the taxa in the DB
        stats = await SpeciesImporter(db_session).import_rows(
            [make_row(edibility="giftig", synonyms="= B. bulbosus")]
        )
        await db_session.commit()

        assert stats.species_created == 0
        assert stats.species_updated == 1
        assert sum(stats.created.values()) == 0

        species = (await db_session.execute(select(Species))).scalar_one()
        assert species.edibility == Edibility.POISONOUS
        assert species.synonyms == "Boletus bulbosus"
        assert species.common_name_de == "Gemeiner Stein-Pilz"

    @pytest.mark.asyncio
    async def test_same_name_under_different_parent_is_separate(self, db_session):
        rows = [
            make_row(),
            make_row(genus="Amanita", species="muscaria", names="Fliegen-Pilz", family="Amanitaceae", order="Agaricales"),
        ]
        stats = await SpeciesImporter(db_session).import_rows(rows)
        await db_session.commit()

        assert stats.created["orders"] == 2
        assert stats.created["classes"] == 1
        assert await _count(db_session, Division) == 1
        assert await _count(db_session, Family) == 2

    @pytest.mark.asyncio
    async def test_genus_without_german_name_is_adopted(self, db_session):
        await SpeciesImporter(db_session).import_rows([make_row()])
        await db_session.commit()
        genus = (await db_session.execute(select(Genus))).scalar_one()
        genus.common_name = None
        await db_session.commit()

        await SpeciesImporter(db_session).import_rows([make_row(species="regius", names="Königs-Röhrling")])
        await db_session.commit()

        await db_session.refresh(genus)
        assert genus.common_name == "Röhrlinge"
        assert await _count(db_session, Genus) == 1

    @pytest.mark.asyncio
    async def test_genus_created_this_run_is_not_moved(self, db_session):
        # "Geweihpilz" has no hyphen, so the first Xylaria gets no German name
        xylariales = dict(order="Xylariales", taxon_class="Sordariomycetes", division="Ascomycota")
        rows = [
            make_row(genus="Xylaria", species="hypoxylon", names="Geweihpilz", family="Xylariaceae", **xylariales),
            make_row(
                genus="Xylaria",
                species="polymorpha",
                names="Vielgestaltige Holz-Keule",
                family="Hypoxylaceae",
                **xylariales,
            ),
            make_row(
                genus="Xylaria",
                species="longipes",
                names="Langstielige Holz-Keule",
                family="Xylariaceae",
                **xylariales,
            ),
        ]

        stats = await SpeciesImporter(db_session).import_rows(rows)
        await db_session.commit()

        assert stats.created["genera"] == 2
        result = await db_session.execute(
            select(Species.scientific_name, Family.name)
            .join(Genus, Species.genus_id == Genus.id)
            .join(Family, Genus.family_id == Family.id)
        )
        assert dict(result.all()) == {
            "Xylaria hypoxylon": "Xylariaceae",
            "Xylaria polymorpha": "Hypoxylaceae",
            "Xylaria longipes": "Xylariaceae",
        }

    @pytest.mark.asyncio
    async def test_failing_row_is_rolled_back(self, db_session):
        importer = SpeciesImporter(db_session)
        upsert_species = importer.upsert_species

        async def failing_upsert(record, genus_id):
            if record.species == "broken":
                raise RuntimeError("constraint violated")
            return await upsert_species(record, genus_id)

        importer.upsert_species = failing_upsert
        morels = dict(
            genus="Morchella",
            family="Morchellaceae",
            order="Pezizales",
            taxon_class="Pezizomycetes",
            division="Ascomycota",
        )
        rows = [
            make_row(species="broken", names="Speise-Morchel", **morels),
            make_row(),
            make_row(species="esculenta", names="Speise-Morchel", **morels),
        ]

        stats = await importer.import_rows(rows)
        await db_session.commit()

        assert stats.rows_read == 3
        assert stats.failed == 1
        assert stats.species_created == 2
        # The failed row's taxa were rolled back and re-created by the last row
        assert stats.created == {
            "divisions": 2,
            "classes": 2,
            "orders": 2,
            "families": 2,
            "genera": 2,
        }
        assert await _count(db_session, Division) == 2
        names = (await db_session.execute(select(Species.scientific_name))).scalars().all()
        assert sorted(names) == ["Boletus edulis", "Morchella esculenta"]


class TestClearTaxonomy:

    @pytest.mark.asyncio
    async def test_refuses_while_findings_exist(self, db_session, taxonomy):
        user = await create_user("importer")
        species = Species(scientific_name="Amanita muscaria", genus_id=taxonomy.genus.id)
        db_session.add(species)
        await db_session.flush()
        db_session.add(Finding(user_id=user.id, species_id=species.id, latitude=46.9, longitude=7.4))
        await db_session.commit()

        with pytest.raises(ConflictError):
            await clear_taxonomy(db_session)

        deleted = await clear_taxonomy(db_session, force=True)
        await db_session.commit()

        assert deleted == 1
        assert await _count(db_session, Species) == 0
        assert await _count(db_session, Division) == 0

    @pytest.mark.asyncio
    async def test_run_import_clears_then_imports(self, db_engine, taxonomy, tmp_path):
        path = tmp_path / "import.csv"
        path.write_text("h1\nh2\n" + ";".join(make_row()) + "\n", encoding="utf-8")

        stats = await run_import(str(path), clear=True)

        assert stats.species_created == 1
        async with async_session_factory() as session:
            names = (await session.execute(select(Division.name))).scalars().all()
            assert names == ["Basidiomycota"]
            # The fixture's Amanita chain was cleared
            assert await _count(session, Genus) == 1
            genus_id = (await session.execute(select(Genus.id))).scalar()
            assert genus_id != taxonomy.genus.id
            assert isinstance(genus_id, uuid.UUID)
