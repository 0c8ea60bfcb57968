"""
Mushroom Hunter Backend — Findings Route Handlers
===================================================

What:  A user's findings: list, map feed, detail and CRUD.
How:   `/map` is declared before `/{finding_id}` so it is not captured as
       an id. Ownership checks happen in the service.
"""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Query, Response, status

from mushroom_hunter.dependencies import CurrentUser, DbSession
from mushroom_hunter.schemas.common import ErrorResponse
from mushroom_hunter.schemas.finding import (
    FindingCreate,
    FindingListResponse,
    FindingMapItem,
    FindingResponse,
    FindingUpdate,
)
from mushroom_hunter.services.finding_service import finding_service

router = APIRouter(prefix="/api/findings", tags=["Findings"])

OWNER_ERRORS = {
    403: {"description": "Not the owner", "model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.get("", response_model=FindingListResponse, summary="List findings (newest first)")
async def list_findings(
    response: Response,
    db: DbSession,
    user: CurrentUser,
    page: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    species_id: Optional[uuid.UUID] = None,
    start_date: Optional[date] = Query(default=None, description="Inclusive, YYYY-MM-DD"),
    end_date: Optional[date] = Query(default=None, description="Inclusive, YYYY-MM-DD"),
    my_findings: bool = Query(default=False, description="Admins only: restrict to own findings"),
) -> FindingListResponse:
    result = await finding_service.list_findings(
        db,
        user,
        page=page,
        limit=limit,
        species_id=species_id,
        start_date=start_date,
        end_date=end_date,
        my_findings=my_findings,
    )
    response.headers["X-Total-Count"] = str(result.pagination.total)
    return result


@router.get("/map", response_model=List[FindingMapItem], summary="All visible findings as map markers")
async def map_findings(db: DbSession, user: CurrentUser) -> List[FindingMapItem]:
    return await finding_service.map_findings(db, user)


@router.get("/{finding_id}", response_model=FindingResponse, responses=OWNER_ERRORS)
async def get_finding(finding_id: uuid.UUID, db: DbSession, user: CurrentUser) -> FindingResponse:
    return await finding_service.get_finding(db, user, finding_id)


@router.post(
    "",
    response_model=FindingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Unknown species", "model": ErrorResponse}},
)
async def create_finding(payload: FindingCreate, db: DbSession, user: CurrentUser) -> FindingResponse:
    return await finding_service.create_finding(db, user, payload)


@router.put("/{finding_id}", response_model=FindingResponse, responses={**OWNER_ERRORS, 400: {"model": ErrorResponse}})
async def update_finding(
    finding_id: uuid.UUID,
    payload: FindingUpdate,
    db: DbSession,
    user: CurrentUser,
) -> FindingResponse:
    return await finding_service.update_finding(db, user, finding_id, payload)


@router.delete(
    "/{finding_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=OWNER_ERRORS,
)
async def delete_finding(finding_id: uuid.UUID, db: DbSession, user: CurrentUser) -> Response:
    await finding_service.delete_finding(db, user, finding_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
