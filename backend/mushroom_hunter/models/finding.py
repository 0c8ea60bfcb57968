"""
Mushroom Hunter Backend — Finding SQLAlchemy Model
====================================================

What:  ORM model for the `findings` table: one observation of a species by
       a user, at a point on the map.
Who:   FindingService (CRUD, list, map) and the orphaned-findings check.

Indexes:
    user_id              → "my findings" scoping
    species_id           → species detail page and orphan checks
    found_at             → default sort (newest first) and date filters
    (latitude, longitude)→ map bounding-box queries
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mushroom_hunter.database import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from mushroom_hunter.models.species import Species
    from mushroom_hunter.models.user import User


class Finding(TimestampMixin, Base):
    __tablename__ = "findings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    species_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("species.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    found_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )

    # DECIMAL(10, 8) / DECIMAL(11, 8): ~1mm precision, returned as float
    latitude: Mapped[float] = mapped_column(Numeric(10, 8, asdecimal=False), nullable=False)
    longitude: Mapped[float] = mapped_column(Numeric(11, 8, asdecimal=False), nullable=False)

    location: Mapped[Optional[str]] = mapped_column(String(255), comment="Location name or description")
    notes: Mapped[Optional[str]] = mapped_column(Text)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default=text("1"))
    weather: Mapped[Optional[str]] = mapped_column(String(100))
    temperature: Mapped[Optional[float]] = mapped_column(Numeric(4, 1, asdecimal=False))
    photo_url: Mapped[Optional[str]] = mapped_column(String(512))
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    user: Mapped["User"] = relationship(back_populates="findings")
    species: Mapped["Species"] = relationship(back_populates="findings")

    __table_args__ = (
        CheckConstraint("latitude BETWEEN -90 AND 90", name="ck_findings_latitude"),
        CheckConstraint("longitude BETWEEN -180 AND 180", name="ck_findings_longitude"),
        Index("idx_findings_lat_lon", "latitude", "longitude"),
    )

    def __repr__(self) -> str:
        return f"<Finding(id={self.id}, species_id={self.species_id}, found_at='{self.found_at}')>"
