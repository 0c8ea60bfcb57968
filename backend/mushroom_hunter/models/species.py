"""
Mushroom Hunter Backend — Species SQLAlchemy Model
====================================================

What:  ORM model for the `species` table, the leaf of the taxonomy tree.
Who:   SpeciesService (CRUD + filtered listing), FindingService (references),
       and the CSV importer (upsert by scientific name).

Query Patterns:
    - Explorer list: filter by edibility / occurrence / genus, ORDER BY
      scientific_name → indexes on edibility, occurrence, genus_id
    - Importer upsert: WHERE scientific_name = :name → unique index
"""

import enum
import uuid
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mushroom_hunter.database import Base, TimestampMixin

if TYPE_CHECKING:
    from mushroom_hunter.models.finding import Finding
    from mushroom_hunter.models.taxonomy import Genus


class Edibility(str, enum.Enum):
    EDIBLE = "edible"
    POISONOUS = "poisonous"
    INEDIBLE = "inedible"
    MEDICINAL = "medicinal"
    PSYCHOACTIVE = "psychoactive"
    UNKNOWN = "unknown"


class Occurrence(str, enum.Enum):
    COMMON = "common"
    FREQUENT = "frequent"
    OCCASIONAL = "occasional"
    RARE = "rare"
    VERY_RARE = "very_rare"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Species(TimestampMixin, Base):
    """A fungus species with its field-guide attributes."""

    __tablename__ = "species"
    __table_args__ = (
        CheckConstraint("season_start BETWEEN 1 AND 12", name="ck_species_season_start"),
        CheckConstraint("season_end BETWEEN 1 AND 12", name="ck_species_season_end"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    scientific_name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    common_name: Mapped[Optional[str]] = mapped_column(String(255))
    common_name_de: Mapped[Optional[str]] = mapped_column(String(255), comment="German common name")
    common_name_fr: Mapped[Optional[str]] = mapped_column(String(255), comment="French common name")
    common_name_it: Mapped[Optional[str]] = mapped_column(String(255), comment="Italian common name")
    synonyms: Mapped[Optional[str]] = mapped_column(Text, comment="Expanded synonym list from the import")

    description: Mapped[Optional[str]] = mapped_column(Text)
    habitat: Mapped[Optional[str]] = mapped_column(Text)

    edibility: Mapped[Edibility] = mapped_column(
        Enum(Edibility, name="edibility", native_enum=False, length=20, values_callable=_enum_values),
        nullable=False,
        default=Edibility.UNKNOWN,
        index=True,
    )
    toxicity: Mapped[Optional[str]] = mapped_column(String(255))

    # Months 1-12; a season with start > end wraps over the new year
    season_start: Mapped[Optional[int]] = mapped_column(Integer)
    season_end: Mapped[Optional[int]] = mapped_column(Integer)

    cap_shape: Mapped[Optional[str]] = mapped_column(String(255))
    cap_color: Mapped[Optional[str]] = mapped_column(String(255))
    gill_attachment: Mapped[Optional[str]] = mapped_column(String(255))
    spore_print_color: Mapped[Optional[str]] = mapped_column(String(255))

    occurrence: Mapped[Occurrence] = mapped_column(
        Enum(Occurrence, name="occurrence", native_enum=False, length=20, values_callable=_enum_values),
        nullable=False,
        default=Occurrence.OCCASIONAL,
        index=True,
    )

    image_url: Mapped[Optional[str]] = mapped_column(String(512))

    genus_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("genera.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    genus: Mapped["Genus"] = relationship(back_populates="species")
    findings: Mapped[List["Finding"]] = relationship(back_populates="species")

    def __repr__(self) -> str:
        return f"<Species(id={self.id}, scientific_name='{self.scientific_name}')>"
