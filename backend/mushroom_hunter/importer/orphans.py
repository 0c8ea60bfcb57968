"""
Findings whose species row is gone.

The foreign key normally prevents this, but a forced re-import or manual
SQL can leave findings pointing at deleted species. The check is a LEFT
JOIN on species; `delete_orphaned_findings` removes what it finds.
"""

import logging
import uuid
from typing import List, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from mushroom_hunter.models.finding import Finding
from mushroom_hunter.models.species import Species

logger = logging.getLogger(__name__)


async def find_orphaned_findings(db: AsyncSession) -> List[Finding]:
    result = await db.execute(
        select(Finding)
        .outerjoin(Species, Finding.species_id == Species.id)
        .where(Species.id.is_(None))
        .order_by(Finding.found_at)
    )
    return list(result.scalars().all())


async def delete_orphaned_findings(db: AsyncSession, finding_ids: Sequence[uuid.UUID]) -> int:
    if not finding_ids:
        return 0
    result = await db.execute(delete(Finding).where(Finding.id.in_(list(finding_ids))))
    deleted = result.rowcount or 0
    logger.warning("Deleted %d orphaned finding(s)", deleted)
    return deleted
