"""
Mushroom Hunter Backend — Species Schemas
===========================================

What:  Contracts for /api/species: create/update payloads, the species
       representation (with its taxonomy chain) and the paginated list.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from mushroom_hunter.models.species import Edibility, Occurrence
from mushroom_hunter.schemas.common import Pagination
from mushroom_hunter.schemas.taxonomy import GenusDetail


class SpeciesFields(BaseModel):
    common_name: Optional[str] = Field(default=None, max_length=255)
    common_name_de: Optional[str] = Field(default=None, max_length=255)
    common_name_fr: Optional[str] = Field(default=None, max_length=255)
    common_name_it: Optional[str] = Field(default=None, max_length=255)
    synonyms: Optional[str] = None
    description: Optional[str] = None
    habitat: Optional[str] = None
    toxicity: Optional[str] = Field(default=None, max_length=255)
    season_start: Optional[int] = Field(default=None, ge=1, le=12, description="Month (1-12)")
    season_end: Optional[int] = Field(default=None, ge=1, le=12, description="Month (1-12)")
    cap_shape: Optional[str] = Field(default=None, max_length=255)
    cap_color: Optional[str] = Field(default=None, max_length=255)
    gill_attachment: Optional[str] = Field(default=None, max_length=255)
    spore_print_color: Optional[str] = Field(default=None, max_length=255)
    image_url: Optional[str] = Field(default=None, max_length=512)


class SpeciesCreate(SpeciesFields):
    scientific_name: str = Field(min_length=1, max_length=255)
    genus_id: uuid.UUID
    edibility: Edibility = Edibility.UNKNOWN
    occurrence: Occurrence = Occurrence.OCCASIONAL


class SpeciesUpdate(SpeciesFields):
    """Partial update; only fields present in the body are applied."""
    scientific_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    genus_id: Optional[uuid.UUID] = None
    edibility: Optional[Edibility] = None
    occurrence: Optional[Occurrence] = None

    @model_validator(mode="after")
    def reject_explicit_nulls(self):
        # These columns are NOT NULL; `{"edibility": null}` is a client error
        for name in ("scientific_name", "genus_id", "edibility", "occurrence"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"'{name}' cannot be null")
        return self


class SpeciesResponse(SpeciesFields):
    id: uuid.UUID
    scientific_name: str
    edibility: Edibility
    occurrence: Occurrence
    genus_id: uuid.UUID
    genus: Optional[GenusDetail] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SpeciesListResponse(BaseModel):
    species: List[SpeciesResponse]
    pagination: Pagination
