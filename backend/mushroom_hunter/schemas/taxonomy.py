"""
Mushroom Hunter Backend — Taxonomy Schemas
============================================

What:  Contracts for the generic taxonomy CRUD (/api/taxonomy/<level>) and
       the nested taxonomy chains embedded in species responses.

Nested chains:
    Species responses carry genus → family → order → class → division.
    Each summary model only declares relationships that the query actually
    eager-loads; touching an unloaded relationship on an async session
    raises instead of lazily querying.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TaxonCreate(BaseModel):
    """
    Payload for creating any taxonomy level.

    Exactly one parent key is meaningful per level (classes need
    division_id, orders need class_id, families need order_id, genera need
    family_id; divisions have none). The service enforces which one.
    """
    name: str = Field(min_length=1, max_length=255)
    common_name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    division_id: Optional[uuid.UUID] = None
    class_id: Optional[uuid.UUID] = None
    order_id: Optional[uuid.UUID] = None
    family_id: Optional[uuid.UUID] = None


class TaxonUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied."""
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    common_name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    division_id: Optional[uuid.UUID] = None
    class_id: Optional[uuid.UUID] = None
    order_id: Optional[uuid.UUID] = None
    family_id: Optional[uuid.UUID] = None


class TaxonResponse(BaseModel):
    id: uuid.UUID
    name: str
    common_name: Optional[str] = None
    description: Optional[str] = None
    division_id: Optional[uuid.UUID] = None
    class_id: Optional[uuid.UUID] = None
    order_id: Optional[uuid.UUID] = None
    family_id: Optional[uuid.UUID] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ── Nested chains ─────────────────────────────────────────────────────────


class DivisionSummary(BaseModel):
    id: uuid.UUID
    name: str
    common_name: Optional[str] = None

    model_config = {"from_attributes": True}


class ClassSummary(BaseModel):
    id: uuid.UUID
    name: str
    common_name: Optional[str] = None
    division: Optional[DivisionSummary] = None

    model_config = {"from_attributes": True}


class OrderSummary(BaseModel):
    id: uuid.UUID
    name: str
    common_name: Optional[str] = None
    # Serialized as "class"; read from Order.taxon_class
    taxon_class: Optional[ClassSummary] = Field(
        default=None,
        serialization_alias="class",
    )

    model_config = {"from_attributes": True}


class FamilySummary(BaseModel):
    id: uuid.UUID
    name: str
    common_name: Optional[str] = None
    order: Optional[OrderSummary] = None

    model_config = {"from_attributes": True}


class GenusSummary(BaseModel):
    """Genus without its ancestors (finding lists)."""
    id: uuid.UUID
    name: str
    common_name: Optional[str] = None
    family_id: uuid.UUID

    model_config = {"from_attributes": True}


class GenusDetail(GenusSummary):
    """Genus with the full chain up to the division (species views)."""
    family: Optional[FamilySummary] = None
