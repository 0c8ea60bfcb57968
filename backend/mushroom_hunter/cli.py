"""
Mushroom Hunter Backend — Command Line Tools
==============================================

Console scripts (see pyproject.toml):

    mushroom-hunter-import  [--csv PATH] [--encoding ENC] [--no-clear] [--force]
    mushroom-hunter-orphans [--delete]

Both wait for the database with the same retry policy as the API server
and log through the same logging configuration.
"""

import asyncio
import logging

import click

from mushroom_hunter.config import settings
from mushroom_hunter.database import async_session_factory, dispose_engine, wait_for_database
from mushroom_hunter.exceptions import MushroomHunterError
from mushroom_hunter.importer.orphans import delete_orphaned_findings, find_orphaned_findings
from mushroom_hunter.importer.species_import import ImportStats, run_import
from mushroom_hunter.logging_config import setup_logging

logger = logging.getLogger(__name__)


async def _import(csv_path: str, encoding: str, clear: bool, force: bool) -> ImportStats:
    try:
        await wait_for_database()
        return await run_import(csv_path, encoding=encoding, clear=clear, force=force)
    finally:
        await dispose_engine()


@click.command()
@click.option(
    "--csv",
    "csv_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Checklist CSV to import (default: IMPORT_CSV_PATH).",
)
@click.option(
    "--encoding",
    default=None,
    help="File encoding (default: IMPORT_CSV_ENCODING).",
)
@click.option(
    "--clear/--no-clear",
    default=True,
    show_default=True,
    help="Delete all species and taxa before importing.",
)
@click.option(
    "--force",
    is_flag=True,
    default=False,
    help="When clearing, also delete existing findings instead of refusing.",
)
def import_species(csv_path: str, encoding: str, clear: bool, force: bool) -> None:
    """Import the species checklist into the taxonomy tables."""
    setup_logging()
    csv_path = csv_path or settings.import_csv_path
    encoding = encoding or settings.import_csv_encoding

    try:
        stats = asyncio.run(_import(csv_path, encoding, clear, force))
    except FileNotFoundError:
        raise click.ClickException(f"CSV file not found: {csv_path}")
    except MushroomHunterError as e:
        raise click.ClickException(e.message)

    click.echo(f"Import completed: {stats.summary()}")


async def _orphans(delete: bool) -> None:
    try:
        await wait_for_database()
        async with async_session_factory() as db:
            orphans = await find_orphaned_findings(db)

            if not orphans:
                click.echo("No orphaned findings found. All findings have valid species.")
                return

            click.echo(f"Found {len(orphans)} finding(s) with missing species:\n")
            for index, finding in enumerate(orphans, start=1):
                click.echo(f"{index}. Finding ID: {finding.id}")
                click.echo(f"   Species ID: {finding.species_id} (MISSING)")
                click.echo(f"   Location: {finding.location or 'N/A'}")
                click.echo(f"   Found at: {finding.found_at}")

            if delete:
                deleted = await delete_orphaned_findings(db, [f.id for f in orphans])
                await db.commit()
                click.echo(f"\nDeleted {deleted} orphaned finding(s).")
            else:
                click.echo("\nRun again with --delete to remove them.")
    finally:
        await dispose_engine()


@click.command()
@click.option("--delete", is_flag=True, default=False, help="Delete the orphaned findings.")
def check_orphaned_findings(delete: bool) -> None:
    """List findings that point at a species which no longer exists."""
    setup_logging()
    asyncio.run(_orphans(delete))
