"""
Mushroom Hunter Backend — Finding Service
===========================================

What:  CRUD, paginated listing and the map feed for findings.
How:   Reads are scoped with `scope_to_user` (regular users see their own
       findings, admins see everything unless they ask for "my findings");
       single-row access goes through `require_ownership_or_admin`.
Who:   /api/findings route handlers.
"""

import logging
import uuid
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mushroom_hunter.exceptions import InvalidReferenceError, NotFoundError
from mushroom_hunter.models.finding import Finding
from mushroom_hunter.models.species import Species
from mushroom_hunter.models.user import User
from mushroom_hunter.schemas.finding import (
    FindingCreate,
    FindingListResponse,
    FindingMapItem,
    FindingResponse,
    FindingUpdate,
)
from mushroom_hunter.utils.authorization import require_ownership_or_admin, scope_to_user
from mushroom_hunter.utils.pagination import FINDING_DETAIL, paginate

logger = logging.getLogger(__name__)


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class FindingService:

    async def list_findings(
        self,
        db: AsyncSession,
        user: User,
        page: int = 1,
        limit: Optional[int] = None,
        species_id: Optional[uuid.UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        my_findings: bool = False,
    ) -> FindingListResponse:
        """
        Newest findings first.

        Date bounds are whole days (UTC), both inclusive: `end_date` covers
        everything up to the following midnight.
        """
        query = scope_to_user(select(Finding), Finding, user, force_user_scope=my_findings)

        if species_id is not None:
            query = query.where(Finding.species_id == species_id)
        if start_date is not None:
            query = query.where(Finding.found_at >= _start_of_day(start_date))
        if end_date is not None:
            query = query.where(Finding.found_at < _start_of_day(end_date + timedelta(days=1)))

        query = query.order_by(Finding.found_at.desc(), Finding.id)
        items, pagination = await paginate(db, query, page, limit, options=FINDING_DETAIL)

        return FindingListResponse(
            findings=[FindingResponse.model_validate(item) for item in items],
            pagination=pagination,
        )

    async def map_findings(self, db: AsyncSession, user: User) -> List[FindingMapItem]:
        """Every finding in the caller's scope as a map marker (not paginated)."""
        query = (
            scope_to_user(select(Finding), Finding, user)
            .options(selectinload(Finding.species))
            .order_by(Finding.found_at.desc())
        )
        result = await db.execute(query)
        return [FindingMapItem.model_validate(item) for item in result.scalars().all()]

    async def get_finding(self, db: AsyncSession, user: User, finding_id: uuid.UUID) -> FindingResponse:
        finding = await self._load(db, finding_id)
        require_ownership_or_admin(finding, user)
        return FindingResponse.model_validate(finding)

    async def create_finding(self, db: AsyncSession, user: User, payload: FindingCreate) -> FindingResponse:
        await self._ensure_species(db, payload.species_id)

        values = payload.model_dump()
        if values.get("found_at") is None:
            values.pop("found_at", None)

        finding = Finding(user_id=user.id, **values)
        db.add(finding)
        await db.flush()
        logger.info("User %s recorded finding %s", user.id, finding.id)

        return FindingResponse.model_validate(await self._load(db, finding.id))

    async def update_finding(
        self,
        db: AsyncSession,
        user: User,
        finding_id: uuid.UUID,
        payload: FindingUpdate,
    ) -> FindingResponse:
        finding = await db.get(Finding, finding_id)
        require_ownership_or_admin(finding, user)

        changes = payload.model_dump(exclude_unset=True)
        if "species_id" in changes:
            await self._ensure_species(db, changes["species_id"])

        for key, value in changes.items():
            setattr(finding, key, value)
        await db.flush()

        return FindingResponse.model_validate(await self._load(db, finding.id))

    async def delete_finding(self, db: AsyncSession, user: User, finding_id: uuid.UUID) -> None:
        finding = await db.get(Finding, finding_id)
        require_ownership_or_admin(finding, user)

        await db.delete(finding)
        await db.flush()
        logger.info("Deleted finding %s", finding_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _load(self, db: AsyncSession, finding_id: uuid.UUID) -> Optional[Finding]:
        result = await db.execute(
            select(Finding)
            .options(*FINDING_DETAIL)
            .where(Finding.id == finding_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _ensure_species(self, db: AsyncSession, species_id: uuid.UUID) -> None:
        if await db.get(Species, species_id) is None:
            raise InvalidReferenceError(resource="species", resource_id=str(species_id), field="species_id")


finding_service = FindingService()
