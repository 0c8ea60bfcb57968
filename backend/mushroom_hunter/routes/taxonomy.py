"""
Mushroom Hunter Backend — Taxonomy Route Handlers
===================================================

What:  /api/taxonomy/<level> for divisions, classes, orders, families and
       genera.
How:   `build_taxonomy_router()` creates the same five endpoints for one
       level; `routers` holds one router per entry in TAXONOMY_LEVELS.
       Reads need a logged-in user, writes need an admin.

Example:
    GET  /api/taxonomy/genera?parent_id=<family uuid>
    POST /api/taxonomy/classes {"name": "Agaricomycetes", "division_id": "..."}
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Query, Response, status

from mushroom_hunter.dependencies import AdminUser, CurrentUser, DbSession
from mushroom_hunter.schemas.common import ErrorResponse
from mushroom_hunter.schemas.taxonomy import TaxonCreate, TaxonResponse, TaxonUpdate
from mushroom_hunter.services.taxonomy_service import TAXONOMY_LEVELS, TaxonLevel, taxonomy_service

WRITE_ERRORS = {
    400: {"description": "Missing or invalid parent reference", "model": ErrorResponse},
    403: {"description": "Admin access required", "model": ErrorResponse},
    409: {"description": "Duplicate name or item still referenced", "model": ErrorResponse},
}


def build_taxonomy_router(level: TaxonLevel) -> APIRouter:
    router = APIRouter(prefix=f"/api/taxonomy/{level.slug}", tags=["Taxonomy"])

    @router.get(
        "",
        response_model=List[TaxonResponse],
        summary=f"List {level.slug}",
        name=f"list_{level.slug}",
    )
    async def list_items(
        db: DbSession,
        user: CurrentUser,
        parent_id: Optional[uuid.UUID] = Query(
            default=None,
            description="Only items below this parent (ignored for divisions)",
        ),
    ) -> List[TaxonResponse]:
        return await taxonomy_service.list_items(db, level, parent_id)

    @router.get(
        "/{item_id}",
        response_model=TaxonResponse,
        responses={404: {"model": ErrorResponse}},
        name=f"get_{level.label}",
    )
    async def get_item(item_id: uuid.UUID, db: DbSession, user: CurrentUser) -> TaxonResponse:
        return await taxonomy_service.get_item(db, level, item_id)

    @router.post(
        "",
        response_model=TaxonResponse,
        status_code=status.HTTP_201_CREATED,
        responses=WRITE_ERRORS,
        name=f"create_{level.label}",
    )
    async def create_item(payload: TaxonCreate, db: DbSession, admin: AdminUser) -> TaxonResponse:
        return await taxonomy_service.create_item(db, level, payload)

    @router.put(
        "/{item_id}",
        response_model=TaxonResponse,
        responses={**WRITE_ERRORS, 404: {"model": ErrorResponse}},
        name=f"update_{level.label}",
    )
    async def update_item(
        item_id: uuid.UUID,
        payload: TaxonUpdate,
        db: DbSession,
        admin: AdminUser,
    ) -> TaxonResponse:
        return await taxonomy_service.update_item(db, level, item_id, payload)

    @router.delete(
        "/{item_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        responses={**WRITE_ERRORS, 404: {"model": ErrorResponse}},
        name=f"delete_{level.label}",
    )
    async def delete_item(item_id: uuid.UUID, db: DbSession, admin: AdminUser) -> Response:
        await taxonomy_service.delete_item(db, level, item_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


routers = [build_taxonomy_router(level) for level in TAXONOMY_LEVELS.values()]
