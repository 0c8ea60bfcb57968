"""
Mushroom Hunter Backend — Species Route Handlers
==================================================

What:  The species explorer (filtered, paginated list), species detail and
       admin CRUD.
How:   Pagination metadata is returned in the body and the total also in
       the `X-Total-Count` header.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Query, Response, status

from mushroom_hunter.dependencies import AdminUser, CurrentUser, DbSession
from mushroom_hunter.models.species import Edibility, Occurrence
from mushroom_hunter.schemas.common import ErrorResponse
from mushroom_hunter.schemas.species import (
    SpeciesCreate,
    SpeciesListResponse,
    SpeciesResponse,
    SpeciesUpdate,
)
from mushroom_hunter.services.species_service import species_service

router = APIRouter(prefix="/api/species", tags=["Species"])


@router.get(
    "",
    response_model=SpeciesListResponse,
    summary="List species with filters",
)
async def list_species(
    response: Response,
    db: DbSession,
    user: CurrentUser,
    page: Optional[str] = Query(default=None, description="Page number (1-based)"),
    limit: Optional[str] = Query(default=None, description="Items per page (max 100)"),
    search: Optional[str] = Query(default=None, description="Substring of the scientific or any common name"),
    edibility: Optional[Edibility] = None,
    occurrence: Optional[Occurrence] = None,
    genus_id: Optional[uuid.UUID] = None,
    family_id: Optional[uuid.UUID] = None,
    order_id: Optional[uuid.UUID] = None,
    class_id: Optional[uuid.UUID] = None,
    division_id: Optional[uuid.UUID] = None,
    season: Optional[int] = Query(default=None, ge=1, le=12, description="Month that must fall in the season"),
) -> SpeciesListResponse:
    result = await species_service.list_species(
        db,
        page=page,
        limit=limit,
        search=search,
        edibility=edibility,
        occurrence=occurrence,
        genus_id=genus_id,
        family_id=family_id,
        order_id=order_id,
        class_id=class_id,
        division_id=division_id,
        season=season,
    )
    response.headers["X-Total-Count"] = str(result.pagination.total)
    return result


@router.get(
    "/{species_id}",
    response_model=SpeciesResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Species with its full taxonomy",
)
async def get_species(species_id: uuid.UUID, db: DbSession, user: CurrentUser) -> SpeciesResponse:
    return await species_service.get_species(db, species_id)


@router.post(
    "",
    response_model=SpeciesResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Unknown genus", "model": ErrorResponse},
        403: {"model": ErrorResponse},
        409: {"description": "Scientific name already exists", "model": ErrorResponse},
    },
)
async def create_species(payload: SpeciesCreate, db: DbSession, admin: AdminUser) -> SpeciesResponse:
    return await species_service.create_species(db, payload)


@router.put(
    "/{species_id}",
    response_model=SpeciesResponse,
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def update_species(
    species_id: uuid.UUID,
    payload: SpeciesUpdate,
    db: DbSession,
    admin: AdminUser,
) -> SpeciesResponse:
    return await species_service.update_species(db, species_id, payload)


@router.delete(
    "/{species_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"description": "Species still has findings", "model": ErrorResponse},
    },
)
async def delete_species(species_id: uuid.UUID, db: DbSession, admin: AdminUser) -> Response:
    await species_service.delete_species(db, species_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
