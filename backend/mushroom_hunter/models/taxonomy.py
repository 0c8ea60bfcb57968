"""
Mushroom Hunter Backend — Taxonomy SQLAlchemy Models
======================================================

What:  ORM models for the five taxonomy levels above species:

           Division → Class → Order → Family → Genus

How:   Every level shares the same columns (TaxonMixin). Each level below
       Division points at its parent and is unique by (name, parent).
       `PARENT_FIELD` names the parent foreign key column so generic code
       (taxonomy CRUD, the importer) can treat all levels alike.

Note:  `class` is a Python keyword, so the Class level is `TaxonClass`
       (table `classes`).
"""

import uuid
from typing import TYPE_CHECKING, ClassVar, List, Optional

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mushroom_hunter.database import Base, TimestampMixin

if TYPE_CHECKING:
    from mushroom_hunter.models.species import Species


class TaxonMixin(TimestampMixin):
    """Columns shared by every taxonomy level."""

    PARENT_FIELD: ClassVar[Optional[str]] = None

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    common_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, name='{self.name}')>"


class Division(TaxonMixin, Base):
    __tablename__ = "divisions"
    __table_args__ = (UniqueConstraint("name", name="uq_divisions_name"),)

    classes: Mapped[List["TaxonClass"]] = relationship(back_populates="division")


class TaxonClass(TaxonMixin, Base):
    __tablename__ = "classes"
    __table_args__ = (UniqueConstraint("name", "division_id", name="uq_classes_name_division"),)

    PARENT_FIELD = "division_id"

    division_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("divisions.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    division: Mapped[Division] = relationship(back_populates="classes")
    orders: Mapped[List["Order"]] = relationship(back_populates="taxon_class")


class Order(TaxonMixin, Base):
    __tablename__ = "orders"
    __table_args__ = (UniqueConstraint("name", "class_id", name="uq_orders_name_class"),)

    PARENT_FIELD = "class_id"

    class_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("classes.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    taxon_class: Mapped[TaxonClass] = relationship(back_populates="orders")
    families: Mapped[List["Family"]] = relationship(back_populates="order")


class Family(TaxonMixin, Base):
    __tablename__ = "families"
    __table_args__ = (UniqueConstraint("name", "order_id", name="uq_families_name_order"),)

    PARENT_FIELD = "order_id"

    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("orders.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    order: Mapped[Order] = relationship(back_populates="families")
    genera: Mapped[List["Genus"]] = relationship(back_populates="family")


class Genus(TaxonMixin, Base):
    __tablename__ = "genera"
    __table_args__ = (UniqueConstraint("name", "family_id", name="uq_genera_name_family"),)

    PARENT_FIELD = "family_id"

    family_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("families.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    family: Mapped[Family] = relationship(back_populates="genera")
    species: Mapped[List["Species"]] = relationship(back_populates="genus")
