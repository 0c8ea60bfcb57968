"""
Mushroom Hunter Backend — Taxonomy Service
============================================

What:  Generic CRUD for the five taxonomy levels above species.
How:   Every level is described once in `TAXONOMY_LEVELS` (model, parent
       model, child model). The service methods take a `TaxonLevel` and do
       the same thing for each one:

           list    → ORDER BY name, optional filter on the parent key
           create  → parent must exist (400), (name, parent) unique (409)
           update  → partial, same checks for whatever changed
           delete  → refused while children still reference the row (409)

Who:   The /api/taxonomy/<level> routers (one per slug) and the tests.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from mushroom_hunter.exceptions import (
    ConflictError,
    InvalidReferenceError,
    NotFoundError,
    ValidationError,
)
from mushroom_hunter.models.species import Species
from mushroom_hunter.models.taxonomy import Division, Family, Genus, Order, TaxonClass
from mushroom_hunter.schemas.taxonomy import TaxonCreate, TaxonResponse, TaxonUpdate

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "common_name", "description")


@dataclass(frozen=True)
class TaxonLevel:
    slug: str
    label: str
    model: Type[Any]
    parent_model: Optional[Type[Any]]
    parent_label: Optional[str]
    child_model: Type[Any]
    child_field: str

    @property
    def parent_field(self) -> Optional[str]:
        return self.model.PARENT_FIELD


TAXONOMY_LEVELS: Dict[str, TaxonLevel] = {
    "divisions": TaxonLevel("divisions", "division", Division, None, None, TaxonClass, "division_id"),
    "classes": TaxonLevel("classes", "class", TaxonClass, Division, "division", Order, "class_id"),
    "orders": TaxonLevel("orders", "order", Order, TaxonClass, "class", Family, "order_id"),
    "families": TaxonLevel("families", "family", Family, Order, "order", Genus, "family_id"),
    "genera": TaxonLevel("genera", "genus", Genus, Family, "family", Species, "genus_id"),
}


class TaxonomyService:

    async def list_items(
        self,
        db: AsyncSession,
        level: TaxonLevel,
        parent_id: Optional[uuid.UUID] = None,
    ) -> List[TaxonResponse]:
        model = level.model
        query = select(model).order_by(model.name)
        if parent_id is not None and level.parent_field:
            query = query.where(getattr(model, level.parent_field) == parent_id)

        result = await db.execute(query)
        return [TaxonResponse.model_validate(item) for item in result.scalars().all()]

    async def get_item(self, db: AsyncSession, level: TaxonLevel, item_id: uuid.UUID) -> TaxonResponse:
        item = await self._get_or_404(db, level, item_id)
        return TaxonResponse.model_validate(item)

    async def create_item(self, db: AsyncSession, level: TaxonLevel, payload: TaxonCreate) -> TaxonResponse:
        """
        Insert a new taxon.

        Raises:
            ValidationError:       parent key missing on a non-division level
            InvalidReferenceError: parent key points nowhere
            ConflictError:         same name already exists under that parent
        """
        values = {field: getattr(payload, field) for field in EDITABLE_FIELDS}

        parent_id = None
        if level.parent_field:
            parent_id = getattr(payload, level.parent_field)
            if parent_id is None:
                raise ValidationError(
                    message=f"'{level.parent_field}' is required",
                    field=level.parent_field,
                )
            await self._ensure_parent(db, level, parent_id)
            values[level.parent_field] = parent_id

        await self._ensure_unique(db, level, payload.name, parent_id)

        item = level.model(**values)
        db.add(item)
        await self._flush(db, level)
        logger.info("Created %s '%s' (%s)", level.label, item.name, item.id)
        return TaxonResponse.model_validate(item)

    async def update_item(
        self,
        db: AsyncSession,
        level: TaxonLevel,
        item_id: uuid.UUID,
        payload: TaxonUpdate,
    ) -> TaxonResponse:
        item = await self._get_or_404(db, level, item_id)
        changes = payload.model_dump(exclude_unset=True)

        allowed = set(EDITABLE_FIELDS)
        if level.parent_field:
            allowed.add(level.parent_field)
        changes = {key: value for key, value in changes.items() if key in allowed}

        if "name" in changes and changes["name"] is None:
            raise ValidationError(message="'name' cannot be null", field="name")

        if level.parent_field and level.parent_field in changes:
            new_parent = changes[level.parent_field]
            if new_parent is None:
                raise ValidationError(
                    message=f"'{level.parent_field}' cannot be null",
                    field=level.parent_field,
                )
            await self._ensure_parent(db, level, new_parent)

        name = changes.get("name", item.name)
        parent_id = getattr(item, level.parent_field) if level.parent_field else None
        if level.parent_field:
            parent_id = changes.get(level.parent_field, parent_id)
        await self._ensure_unique(db, level, name, parent_id, exclude_id=item.id)

        for key, value in changes.items():
            setattr(item, key, value)
        await self._flush(db, level)
        return TaxonResponse.model_validate(item)

    async def delete_item(self, db: AsyncSession, level: TaxonLevel, item_id: uuid.UUID) -> None:
        item = await self._get_or_404(db, level, item_id)

        child_count = (
            await db.execute(
                select(func.count())
                .select_from(level.child_model)
                .where(getattr(level.child_model, level.child_field) == item_id)
            )
        ).scalar() or 0
        if child_count:
            raise ConflictError(
                message=f"Cannot delete {level.label} '{item.name}': it is still referenced by {child_count} record(s)",
                context={"resource": level.label, "children": child_count},
            )

        await db.delete(item)
        await self._flush(db, level)
        logger.info("Deleted %s '%s' (%s)", level.label, item.name, item_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _get_or_404(self, db: AsyncSession, level: TaxonLevel, item_id: uuid.UUID) -> Any:
        item = await db.get(level.model, item_id)
        if item is None:
            raise NotFoundError(resource=level.label, resource_id=str(item_id))
        return item

    async def _ensure_parent(self, db: AsyncSession, level: TaxonLevel, parent_id: uuid.UUID) -> None:
        if await db.get(level.parent_model, parent_id) is None:
            raise InvalidReferenceError(
                resource=level.parent_label,
                resource_id=str(parent_id),
                field=level.parent_field,
            )

    async def _ensure_unique(
        self,
        db: AsyncSession,
        level: TaxonLevel,
        name: str,
        parent_id: Optional[uuid.UUID],
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        model = level.model
        query = select(model.id).where(model.name == name)
        if level.parent_field:
            query = query.where(getattr(model, level.parent_field) == parent_id)
        if exclude_id is not None:
            query = query.where(model.id != exclude_id)

        if (await db.execute(query)).first() is not None:
            raise ConflictError(message=f"A {level.label} named '{name}' already exists here")

    async def _flush(self, db: AsyncSession, level: TaxonLevel) -> None:
        # Concurrent writers can still race past the pre-checks
        try:
            await db.flush()
        except IntegrityError as e:
            logger.warning("Integrity error writing %s: %s", level.label, e.orig)
            raise ConflictError(message=f"The {level.label} conflicts with an existing record")


taxonomy_service = TaxonomyService()
