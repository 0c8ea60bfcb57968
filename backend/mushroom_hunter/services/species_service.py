"""
Mushroom Hunter Backend — Species Service
===========================================

What:  Filtered, paginated species listing and admin CRUD.
Who:   /api/species route handlers.

Filter semantics (all combined with AND):
    search       ILIKE '%term%' on scientific name and every common name
    edibility    exact
    occurrence   exact
    genus_id     exact
    family_id …  division_id
                 through the taxonomy chain (sub-selects on genus ids, so
                 the page query never needs joins that could duplicate rows)
    season       month inside [season_start, season_end]; when start > end
                 the season wraps over the new year (e.g. Nov → Feb)
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mushroom_hunter.exceptions import ConflictError, InvalidReferenceError, NotFoundError
from mushroom_hunter.models.finding import Finding
from mushroom_hunter.models.species import Edibility, Occurrence, Species
from mushroom_hunter.models.taxonomy import Family, Genus, Order, TaxonClass
from mushroom_hunter.schemas.species import (
    SpeciesCreate,
    SpeciesListResponse,
    SpeciesResponse,
    SpeciesUpdate,
)
from mushroom_hunter.utils.pagination import FULL_TAXONOMY, paginate

logger = logging.getLogger(__name__)


def season_contains(month: int):
    """SQL condition: the species' season includes `month`."""
    start, end = Species.season_start, Species.season_end
    return and_(
        start.is_not(None),
        end.is_not(None),
        or_(
            and_(start <= end, start <= month, end >= month),
            and_(start > end, or_(start <= month, end >= month)),
        ),
    )


def genus_ids_under(family_id=None, order_id=None, class_id=None, division_id=None):
    """Sub-select of genus ids below the given ancestors (None = no constraint)."""
    query = select(Genus.id)
    if order_id is not None or class_id is not None or division_id is not None:
        query = query.join(Family, Genus.family_id == Family.id)
    if class_id is not None or division_id is not None:
        query = query.join(Order, Family.order_id == Order.id)
    if division_id is not None:
        query = query.join(TaxonClass, Order.class_id == TaxonClass.id)

    if family_id is not None:
        query = query.where(Genus.family_id == family_id)
    if order_id is not None:
        query = query.where(Family.order_id == order_id)
    if class_id is not None:
        query = query.where(Order.class_id == class_id)
    if division_id is not None:
        query = query.where(TaxonClass.division_id == division_id)
    return query


class SpeciesService:

    async def list_species(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        edibility: Optional[Edibility] = None,
        occurrence: Optional[Occurrence] = None,
        genus_id: Optional[uuid.UUID] = None,
        family_id: Optional[uuid.UUID] = None,
        order_id: Optional[uuid.UUID] = None,
        class_id: Optional[uuid.UUID] = None,
        division_id: Optional[uuid.UUID] = None,
        season: Optional[int] = None,
    ) -> SpeciesListResponse:
        query = select(Species)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Species.scientific_name.ilike(pattern),
                    Species.common_name.ilike(pattern),
                    Species.common_name_de.ilike(pattern),
                    Species.common_name_fr.ilike(pattern),
                    Species.common_name_it.ilike(pattern),
                )
            )
        if edibility is not None:
            query = query.where(Species.edibility == edibility)
        if occurrence is not None:
            query = query.where(Species.occurrence == occurrence)
        if genus_id is not None:
            query = query.where(Species.genus_id == genus_id)

        if any(x is not None for x in (family_id, order_id, class_id, division_id)):
            query = query.where(
                Species.genus_id.in_(
                    genus_ids_under(family_id, order_id, class_id, division_id)
                )
            )

        if season is not None:
            query = query.where(season_contains(season))

        query = query.order_by(Species.scientific_name)
        items, pagination = await paginate(db, query, page, limit, options=FULL_TAXONOMY)

        return SpeciesListResponse(
            species=[SpeciesResponse.model_validate(item) for item in items],
            pagination=pagination,
        )

    async def get_species(self, db: AsyncSession, species_id: uuid.UUID) -> SpeciesResponse:
        species = await self._load(db, species_id)
        if species is None:
            raise NotFoundError(resource="species", resource_id=str(species_id))
        return SpeciesResponse.model_validate(species)

    async def create_species(self, db: AsyncSession, payload: SpeciesCreate) -> SpeciesResponse:
        await self._ensure_genus(db, payload.genus_id)
        await self._ensure_unique_name(db, payload.scientific_name)

        species = Species(**payload.model_dump())
        db.add(species)
        await self._flush(db)
        logger.info("Created species '%s' (%s)", species.scientific_name, species.id)

        return SpeciesResponse.model_validate(await self._load(db, species.id))

    async def update_species(
        self,
        db: AsyncSession,
        species_id: uuid.UUID,
        payload: SpeciesUpdate,
    ) -> SpeciesResponse:
        species = await db.get(Species, species_id)
        if species is None:
            raise NotFoundError(resource="species", resource_id=str(species_id))

        changes = payload.model_dump(exclude_unset=True)
        if "genus_id" in changes:
            await self._ensure_genus(db, changes["genus_id"])
        if "scientific_name" in changes:
            await self._ensure_unique_name(db, changes["scientific_name"], exclude_id=species.id)

        for key, value in changes.items():
            setattr(species, key, value)
        await self._flush(db)

        return SpeciesResponse.model_validate(await self._load(db, species.id))

    async def delete_species(self, db: AsyncSession, species_id: uuid.UUID) -> None:
        species = await db.get(Species, species_id)
        if species is None:
            raise NotFoundError(resource="species", resource_id=str(species_id))

        finding_count = (
            await db.execute(
                select(func.count()).select_from(Finding).where(Finding.species_id == species_id)
            )
        ).scalar() or 0
        if finding_count:
            raise ConflictError(
                message=f"Cannot delete species '{species.scientific_name}': it has {finding_count} finding(s)",
                context={"resource": "species", "findings": finding_count},
            )

        await db.delete(species)
        await self._flush(db)
        logger.info("Deleted species '%s' (%s)", species.scientific_name, species_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _load(self, db: AsyncSession, species_id: uuid.UUID) -> Optional[Species]:
        # populate_existing: the identity map may hold a stale genus after an update
        result = await db.execute(
            select(Species)
            .options(*FULL_TAXONOMY)
            .where(Species.id == species_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _ensure_genus(self, db: AsyncSession, genus_id: uuid.UUID) -> None:
        if await db.get(Genus, genus_id) is None:
            raise InvalidReferenceError(resource="genus", resource_id=str(genus_id), field="genus_id")

    async def _ensure_unique_name(
        self,
        db: AsyncSession,
        scientific_name: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        query = select(Species.id).where(Species.scientific_name == scientific_name)
        if exclude_id is not None:
            query = query.where(Species.id != exclude_id)
        if (await db.execute(query)).first() is not None:
            raise ConflictError(message=f"Species '{scientific_name}' already exists")

    async def _flush(self, db: AsyncSession) -> None:
        try:
            await db.flush()
        except IntegrityError as e:
            logger.warning("Integrity error writing species: %s", e.orig)
            raise ConflictError(message="The species conflicts with an existing record")


species_service = SpeciesService()
