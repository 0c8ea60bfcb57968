"""
Mushroom Hunter Backend — Species Checklist Import
====================================================

What:  Reads the `;`-separated species checklist and reconciles it with the
       taxonomy tables (division → class → order → family → genus →
       species).
How:   1. `read_csv_rows` loads the file with aiofiles and drops the two
          header lines.
       2. `parse_row` turns a raw row into a `SpeciesRecord`, or None for
          rows that are not importable (invalid names, "Incertae sedis", …).
       3. `SpeciesImporter` walks each record top-down. Every level is
          get-or-create, memoized per (name, parent id), and species are
          upserted by scientific name.
       4. Each row runs in its own SAVEPOINT, so a bad row is rolled back
          and counted without aborting the run.
Who:   The `mushroom-hunter-import` CLI command and the importer tests.

Column layout (0-based):
    0 validity marker ("r"/"k" = valid), 1 genus, 2 species epithet,
    34 synonyms, 35 German names, 39 edibility, 41 family, 42 order,
    43 class, 44 division
"""

import csv
import io
import logging
import re
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

import aiofiles
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mushroom_hunter.database import async_session_factory
from mushroom_hunter.exceptions import ConflictError
from mushroom_hunter.importer.german_names import genus_name_from_common_name
from mushroom_hunter.models.finding import Finding
from mushroom_hunter.models.species import Edibility, Species
from mushroom_hunter.models.taxonomy import Division, Family, Genus, Order, TaxonClass

logger = logging.getLogger(__name__)

HEADER_LINES = 2
DELIMITER = ";"

COL_VALIDITY = 0
COL_GENUS = 1
COL_SPECIES = 2
COL_SYNONYMS = 34
COL_NAMES = 35
COL_EDIBILITY = 39
COL_FAMILY = 41
COL_ORDER = 42
COL_CLASS = 43
COL_DIVISION = 44

VALID_MARKERS = ("r", "k")
INCERTAE_SEDIS = "Incertae sedis"

EDIBILITY_MAP = {
    "essbar": Edibility.EDIBLE,
    "giftig": Edibility.POISONOUS,
    "ungeniessbar": Edibility.INEDIBLE,
    "ungeniessbar/schwach giftig": Edibility.INEDIBLE,
}


@dataclass
class SpeciesRecord:
    """One importable checklist row."""
    genus: str
    species: str
    common_name: str
    genus_common_name: str
    synonyms: str
    edibility: Edibility
    family: str
    order: str
    taxon_class: str
    division: str

    @property
    def scientific_name(self) -> str:
        return f"{self.genus} {self.species}"


@dataclass
class ImportStats:
    rows_read: int = 0
    skipped: int = 0
    failed: int = 0
    species_created: int = 0
    species_updated: int = 0
    created: Dict[str, int] = field(default_factory=dict)

    def summary(self) -> str:
        levels = ", ".join(f"{count} {label}" for label, count in self.created.items()) or "no new taxa"
        return (
            f"{self.rows_read} rows read, {self.skipped} skipped, {self.failed} failed; "
            f"species: {self.species_created} created, {self.species_updated} updated; {levels}"
        )


# ── Row parsing ───────────────────────────────────────────────────────────


def _cell(row: Sequence[str], index: int, strip_chars: str = "*") -> str:
    if index >= len(row) or row[index] is None:
        return ""
    value = row[index]
    for char in strip_chars:
        value = value.replace(char, "")
    return value.strip()


def map_edibility(raw: str) -> Edibility:
    return EDIBILITY_MAP.get(raw.strip().lower(), Edibility.UNKNOWN)


def expand_synonyms(raw: str, genus: str, species: str) -> str:
    """
    Clean the synonym column: drop the leading "=" and a trailing "?", then
    expand "A." abbreviations of the genus and species initials.

    >>> expand_synonyms("= A. campestris var. c.?", "Agaricus", "campestris")
    'Agaricus campestris var. campestris'
    """
    synonyms = re.sub(r"^=\s*", "", raw)
    synonyms = re.sub(r"\?$", "", synonyms).strip()
    if not synonyms:
        return ""

    # \b keeps e.g. "var." from being read as an abbreviation of "r…"
    synonyms = re.sub(rf"\b{re.escape(genus[0])}\.", lambda _: genus, synonyms)
    if species:
        synonyms = re.sub(rf"\b{re.escape(species[0])}\.", lambda _: species, synonyms)
    return synonyms


def parse_row(row: Sequence[str]) -> Optional[SpeciesRecord]:
    """Turn one raw CSV row into a SpeciesRecord, or None if it must be skipped."""
    validity = _cell(row, COL_VALIDITY, '*"')
    genus = _cell(row, COL_GENUS)
    species = _cell(row, COL_SPECIES)
    names = _cell(row, COL_NAMES, '*"')
    family = _cell(row, COL_FAMILY, "")
    order = _cell(row, COL_ORDER, "")
    taxon_class = _cell(row, COL_CLASS, "")
    division = _cell(row, COL_DIVISION, "")

    if not genus or not species:
        return None

    if any(INCERTAE_SEDIS in level for level in (family, order, taxon_class, division)):
        return None

    name = next((n.strip() for n in names.split(",") if n.strip()), "")

    if not name or name == "-":
        return None
    if "(" in validity or validity.lower() not in VALID_MARKERS:
        return None

    return SpeciesRecord(
        genus=genus,
        species=species,
        common_name=name,
        genus_common_name=genus_name_from_common_name(name),
        synonyms=expand_synonyms(_cell(row, COL_SYNONYMS), genus, species),
        edibility=map_edibility(_cell(row, COL_EDIBILITY, "")),
        family=family,
        order=order,
        taxon_class=taxon_class,
        division=division,
    )


async def read_csv_rows(path: str, encoding: str = "utf-8") -> List[List[str]]:
    """All data rows of the checklist (header lines dropped)."""
    async with aiofiles.open(path, mode="r", encoding=encoding, newline="") as f:
        content = await f.read()

    rows = list(csv.reader(io.StringIO(content), delimiter=DELIMITER))
    return rows[HEADER_LINES:]


# ── Reconciliation ────────────────────────────────────────────────────────

CacheKey = Tuple[str, Optional[uuid.UUID]]


class SpeciesImporter:
    """
    Get-or-create for every taxonomy level plus the species upsert.

    Caches survive across rows (one importer per run). Keys created inside a
    row that later fails are dropped again, since the savepoint rollback
    removes the rows they point to.
    """

    LEVEL_LABELS = {
        Division: "divisions",
        TaxonClass: "classes",
        Order: "orders",
        Family: "families",
        Genus: "genera",
    }

    def __init__(self, db: AsyncSession):
        self.db = db
        self.stats = ImportStats(created={label: 0 for label in self.LEVEL_LABELS.values()})
        self._cache: Dict[Type[Any], Dict[CacheKey, uuid.UUID]] = {model: {} for model in self.LEVEL_LABELS}
        self._row_keys: List[Tuple[Type[Any], CacheKey]] = []
        self._row_created: Dict[str, int] = {}

    async def import_rows(self, rows: Sequence[Sequence[str]]) -> ImportStats:
        for row in rows:
            self.stats.rows_read += 1
            record = parse_row(row)
            if record is None:
                self.stats.skipped += 1
                continue
            await self.import_record(record)

        logger.info("Import finished: %s", self.stats.summary())
        return self.stats

    async def import_record(self, record: SpeciesRecord) -> Optional[bool]:
        """
        Import one record in its own SAVEPOINT.

        Returns True (species created), False (updated), or None when the
        row was skipped or failed.
        """
        self._row_keys = []
        self._row_created = {}
        try:
            async with self.db.begin_nested():
                result = await self._import(record)
        except Exception as e:
            self.stats.failed += 1
            for model, key in self._row_keys:
                self._cache[model].pop(key, None)
            logger.error("Error processing row %s: %s", record.scientific_name, e)
            return None

        for label, count in self._row_created.items():
            self.stats.created[label] += count
        if result is None:
            self.stats.skipped += 1
        elif result:
            self.stats.species_created += 1
        else:
            self.stats.species_updated += 1
        return result

    async def _import(self, record: SpeciesRecord) -> Optional[bool]:
        division_id = await self.get_or_create(Division, record.division, None)
        if division_id is None:
            return None
        class_id = await self.get_or_create(TaxonClass, record.taxon_class, division_id)
        if class_id is None:
            return None
        order_id = await self.get_or_create(Order, record.order, class_id)
        if order_id is None:
            return None
        family_id = await self.get_or_create(Family, record.family, order_id)
        if family_id is None:
            return None
        genus_id = await self.get_or_create_genus(record.genus, record.genus_common_name, family_id)
        if genus_id is None:
            return None

        return await self.upsert_species(record, genus_id)

    async def get_or_create(
        self,
        model: Type[Any],
        name: str,
        parent_id: Optional[uuid.UUID],
    ) -> Optional[uuid.UUID]:
        """Id of the (name, parent) taxon at this level, inserting it if needed."""
        if not name:
            return None

        key = (name, parent_id)
        cached = self._cache[model].get(key)
        if cached is not None:
            return cached

        query = select(model.id).where(model.name == name)
        if model.PARENT_FIELD:
            query = query.where(getattr(model, model.PARENT_FIELD) == parent_id)
        item_id = (await self.db.execute(query)).scalar()

        if item_id is None:
            values = {"name": name}
            if model.PARENT_FIELD:
                values[model.PARENT_FIELD] = parent_id
            item = model(**values)
            self.db.add(item)
            await self.db.flush()
            item_id = item.id
            self._count_created(model)
            logger.debug("Imported %s: %s (%s)", self.LEVEL_LABELS[model], name, item_id)

        self._remember(model, key, item_id)
        return item_id

    async def get_or_create_genus(
        self,
        name: str,
        common_name: str,
        family_id: uuid.UUID,
    ) -> Optional[uuid.UUID]:
        """
        Genus get-or-create with the German plural.

        A genus that exists without a German name (e.g. created by hand) is
        adopted: it gets the plural and is moved under the current family.
        Genera already resolved during this run are never adopted, so their
        (name, family) cache entries stay valid.
        """
        if not name:
            return None

        key = (name, family_id)
        cached = self._cache[Genus].get(key)
        if cached is not None:
            return cached

        result = await self.db.execute(
            select(Genus).where(Genus.name == name, Genus.family_id == family_id)
        )
        genus = result.scalar_one_or_none()

        if genus is None:
            query = select(Genus).where(Genus.name == name, Genus.common_name.is_(None))
            resolved = set(self._cache[Genus].values())
            if resolved:
                query = query.where(Genus.id.not_in(resolved))
            result = await self.db.execute(query.limit(1))
            genus = result.scalar_one_or_none()

        if genus is None:
            genus = Genus(name=name, common_name=common_name or None, family_id=family_id)
            self.db.add(genus)
            await self.db.flush()
            self._count_created(Genus)
        elif not genus.common_name:
            genus.common_name = common_name or None
            genus.family_id = family_id
            await self.db.flush()

        self._remember(Genus, key, genus.id)
        return genus.id

    async def upsert_species(self, record: SpeciesRecord, genus_id: uuid.UUID) -> bool:
        """Insert or update by scientific name; True when a new row was created."""
        result = await self.db.execute(
            select(Species).where(Species.scientific_name == record.scientific_name)
        )
        species = result.scalar_one_or_none()
        created = species is None

        if created:
            species = Species(scientific_name=record.scientific_name)
            self.db.add(species)

        species.common_name = record.common_name
        species.common_name_de = record.common_name
        species.edibility = record.edibility
        species.synonyms = record.synonyms or None
        species.genus_id = genus_id
        await self.db.flush()

        logger.debug("%s species %s", "Imported" if created else "Updated", record.scientific_name)
        return created

    def _remember(self, model: Type[Any], key: CacheKey, item_id: uuid.UUID) -> None:
        self._cache[model][key] = item_id
        self._row_keys.append((model, key))

    def _count_created(self, model: Type[Any]) -> None:
        label = self.LEVEL_LABELS[model]
        self._row_created[label] = self._row_created.get(label, 0) + 1


# ── Run ───────────────────────────────────────────────────────────────────


async def clear_taxonomy(db: AsyncSession, force: bool = False) -> int:
    """
    Delete all species and taxa before a fresh import.

    Findings reference species, so clearing is refused while any exist
    unless `force` is set, in which case the findings are deleted first.
    Returns the number of findings deleted.
    """
    finding_count = (await db.execute(select(func.count()).select_from(Finding))).scalar() or 0
    if finding_count and not force:
        raise ConflictError(
            message=(
                f"{finding_count} finding(s) reference the species table; "
                "import without clearing or force to delete them"
            ),
            context={"findings": finding_count},
        )

    deleted_findings = 0
    if finding_count:
        deleted_findings = (await db.execute(delete(Finding))).rowcount or 0
        logger.warning("Deleted %d finding(s) before clearing the species tables", deleted_findings)

    for model in (Species, Genus, Family, Order, TaxonClass, Division):
        await db.execute(delete(model))
    logger.info("Cleared species and taxonomy tables")
    return deleted_findings


async def run_import(
    csv_path: str,
    encoding: str = "utf-8",
    clear: bool = True,
    force: bool = False,
    session_factory: async_sessionmaker = async_session_factory,
) -> ImportStats:
    """Read the checklist and import it in a single transaction."""
    rows = await read_csv_rows(csv_path, encoding)
    logger.info("Processing %d rows from %s", len(rows), csv_path)

    async with session_factory() as db:
        try:
            if clear:
                await clear_taxonomy(db, force=force)
            stats = await SpeciesImporter(db).import_rows(rows)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    return stats
