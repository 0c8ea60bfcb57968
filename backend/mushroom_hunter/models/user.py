"""
Mushroom Hunter Backend — User SQLAlchemy Model
=================================================

What:  ORM model for the `users` table.
Who:   AuthService (register/login), the auth dependency and Finding ownership.

Roles:
    'user'  → may manage their own findings, read species and taxonomy
    'admin' → additionally manages species/taxonomy and sees every finding
"""

import uuid
from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mushroom_hunter.database import Base, TimestampMixin

if TYPE_CHECKING:
    from mushroom_hunter.models.finding import Finding

ROLE_USER = "user"
ROLE_ADMIN = "admin"


class User(TimestampMixin, Base):
    """An account that records findings."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    username: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)

    # bcrypt hash; the plain password never reaches the database
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ROLE_USER,
        server_default=text("'user'"),
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=text("true"),
    )

    findings: Mapped[List["Finding"]] = relationship(back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
