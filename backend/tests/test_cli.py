"""
Mushroom Hunter Backend — Maintenance Tool Tests
==================================================

What we test:
    ✅ Orphaned findings are found and deleted (SQLite does not enforce
       foreign keys here, so an orphan can be inserted directly)
    ✅ The import command reports a missing CSV as a usage error
"""

import uuid

import pytest
from click.testing import CliRunner

from mushroom_hunter.cli import import_species
from mushroom_hunter.importer.orphans import delete_orphaned_findings, find_orphaned_findings
from mushroom_hunter.models import Finding, Species

from conftest import create_user


class TestOrphanedFindings:

    @pytest.mark.asyncio
    async def test_find_and_delete(self, db_session, taxonomy):
        user = await create_user("collector")
        species = Species(scientific_name="Amanita muscaria", genus_id=taxonomy.genus.id)
        db_session.add(species)
        await db_session.flush()
        kept = Finding(user_id=user.id, species_id=species.id, latitude=46.9, longitude=7.4)
        orphan = Finding(user_id=user.id, species_id=uuid.uuid4(), latitude=47.0, longitude=8.3)
        db_session.add_all([kept, orphan])
        await db_session.commit()

        orphans = await find_orphaned_findings(db_session)
        assert [f.id for f in orphans] == [orphan.id]

        deleted = await delete_orphaned_findings(db_session, [orphan.id])
        await db_session.commit()

        assert deleted == 1
        assert await find_orphaned_findings(db_session) == []

    @pytest.mark.asyncio
    async def test_delete_nothing(self, db_session):
        assert await delete_orphaned_findings(db_session, []) == 0


def test_import_missing_csv(tmp_path):
    missing = tmp_path / "missing.csv"

    result = CliRunner().invoke(import_species, ["--csv", str(missing)])

    assert result.exit_code == 1
    assert "CSV file not found" in result.output
