"""
Mushroom Hunter Backend — Pagination & Eager-Load Helpers
===========================================================

What:  Offset pagination shared by the species and findings lists, plus the
       reusable relationship-loading chains for taxonomy-aware queries.
How:   `paginate()` counts the filtered query once (distinct primary keys,
       so joins used for filtering cannot inflate the total) and then
       fetches one page with OFFSET/LIMIT.

Example:
    query = select(Species).where(...).order_by(Species.scientific_name)
    items, pagination = await paginate(db, query, page=2, limit=20, options=FULL_TAXONOMY)
    # pagination.total_pages, pagination.has_next, ...
"""

import math
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mushroom_hunter.config import settings
from mushroom_hunter.models.finding import Finding
from mushroom_hunter.models.species import Species
from mushroom_hunter.models.taxonomy import Family, Genus, Order, TaxonClass
from mushroom_hunter.schemas.common import Pagination

# ── Eager-load chains ─────────────────────────────────────────────────────
# Species → genus → family → order → class → division (detail pages, explorer)
FULL_TAXONOMY = (
    selectinload(Species.genus)
    .selectinload(Genus.family)
    .selectinload(Family.order)
    .selectinload(Order.taxon_class)
    .selectinload(TaxonClass.division),
)

# Species → genus → family (compact lists)
BASIC_TAXONOMY = (
    selectinload(Species.genus).selectinload(Genus.family),
)

GENUS_ONLY = (selectinload(Species.genus),)

# Finding → species → genus, plus the owner
FINDING_DETAIL = (
    selectinload(Finding.species).selectinload(Species.genus),
    selectinload(Finding.user),
)


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_page(page: Any = 1, limit: Any = None) -> Tuple[int, int]:
    """
    Coerce raw page/limit values into a valid pair.

    - page: anything not parseable, or below 1, becomes 1
    - limit: unparseable or missing becomes the default page size, then is
      clamped to [1, max_page_size]
    """
    valid_page = max(1, _to_int(page) or 1)

    parsed_limit = _to_int(limit)
    if parsed_limit is None or parsed_limit == 0:
        parsed_limit = settings.default_page_size
    valid_limit = min(settings.max_page_size, max(1, parsed_limit))

    return valid_page, valid_limit


def build_pagination(total: int, page: int, limit: int) -> Pagination:
    total_pages = math.ceil(total / limit) if limit else 0
    return Pagination(
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


async def paginate(
    db: AsyncSession,
    query: Select,
    page: Any = 1,
    limit: Any = None,
    options: Sequence[Any] = (),
) -> Tuple[List[Any], Pagination]:
    """
    Execute `query` for one page and return (items, pagination).

    `query` must select a single mapped entity and carry the filters and
    ordering. Eager-load `options` are applied to the page fetch only, so
    the COUNT stays a plain id query.
    """
    valid_page, valid_limit = normalize_page(page, limit)

    entity = query.column_descriptions[0]["entity"]
    count_query = select(func.count()).select_from(
        query.with_only_columns(entity.id).distinct().order_by(None).subquery()
    )
    total = (await db.execute(count_query)).scalar() or 0

    offset = (valid_page - 1) * valid_limit
    result = await db.execute(query.options(*options).limit(valid_limit).offset(offset))
    items: Sequence[Any] = result.scalars().unique().all()

    return list(items), build_pagination(total, valid_page, valid_limit)
