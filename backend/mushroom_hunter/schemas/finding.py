"""
Mushroom Hunter Backend — Finding Schemas
===========================================

What:  Contracts for /api/findings: create/update payloads, the full
       finding representation, the paginated list and the map markers.
How:   Coordinates are range-validated here (lat -90..90, lon -180..180)
       so bad input is rejected with 422 before touching the database.
       `user_id` is never accepted from the client; the service always uses
       the authenticated caller.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from mushroom_hunter.models.species import Edibility
from mushroom_hunter.schemas.common import Pagination
from mushroom_hunter.schemas.taxonomy import GenusSummary


class FindingFields(BaseModel):
    location: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None
    weather: Optional[str] = Field(default=None, max_length=100)
    temperature: Optional[float] = Field(default=None, ge=-99.9, le=99.9)
    photo_url: Optional[str] = Field(default=None, max_length=512)


class FindingCreate(FindingFields):
    species_id: uuid.UUID
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    found_at: Optional[datetime] = Field(default=None, description="Defaults to now")
    quantity: int = Field(default=1, ge=1)
    is_public: bool = False


class FindingUpdate(FindingFields):
    species_id: Optional[uuid.UUID] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    found_at: Optional[datetime] = None
    quantity: Optional[int] = Field(default=None, ge=1)
    is_public: Optional[bool] = None

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        for name in ("species_id", "latitude", "longitude", "found_at", "quantity", "is_public"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"'{name}' cannot be null")
        return self


class FindingSpecies(BaseModel):
    id: uuid.UUID
    scientific_name: str
    common_name: Optional[str] = None
    edibility: Edibility
    genus: Optional[GenusSummary] = None

    model_config = {"from_attributes": True}


class FindingOwner(BaseModel):
    id: uuid.UUID
    username: str

    model_config = {"from_attributes": True}


class FindingResponse(FindingFields):
    id: uuid.UUID
    user_id: uuid.UUID
    species_id: uuid.UUID
    found_at: datetime
    latitude: float
    longitude: float
    quantity: int
    is_public: bool
    species: Optional[FindingSpecies] = None
    user: Optional[FindingOwner] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class FindingListResponse(BaseModel):
    findings: List[FindingResponse]
    pagination: Pagination


class MapSpecies(BaseModel):
    id: uuid.UUID
    scientific_name: str
    common_name: Optional[str] = None
    edibility: Edibility

    model_config = {"from_attributes": True}


class FindingMapItem(BaseModel):
    """Lightweight marker payload for the findings map."""
    id: uuid.UUID
    latitude: float
    longitude: float
    found_at: datetime
    location: Optional[str] = None
    species: Optional[MapSpecies] = None

    model_config = {"from_attributes": True}
