"""Create users, taxonomy, species and findings tables

Revision ID: 001
Revises: None
Create Date: 2025-01-10 00:00:00.000000+00:00

What:  Initial schema: users, the five taxonomy levels, species, findings.
How:   UUID primary keys, TIMESTAMP WITH TIME ZONE audit columns, RESTRICT
       foreign keys along the taxonomy chain, CASCADE from users to findings.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TAXON_LEVELS = (
    # (table, parent column, parent table)
    ("divisions", None, None),
    ("classes", "division_id", "divisions"),
    ("orders", "class_id", "classes"),
    ("families", "order_id", "orders"),
    ("genera", "family_id", "families"),
)


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("gen_random_uuid()"),
        nullable=False,
    )


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        _id_column(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(30), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )

    for table, parent_column, parent_table in TAXON_LEVELS:
        columns = [
            _id_column(),
            sa.Column("name", sa.String(255), nullable=False),
            sa.Column("common_name", sa.String(255), nullable=True),
            sa.Column("description", sa.Text(), nullable=True),
        ]
        constraints = [sa.PrimaryKeyConstraint("id")]
        if parent_column:
            columns.append(sa.Column(parent_column, postgresql.UUID(as_uuid=True), nullable=False))
            constraints.append(
                sa.ForeignKeyConstraint([parent_column], [f"{parent_table}.id"], ondelete="RESTRICT")
            )
            constraints.append(
                sa.UniqueConstraint("name", parent_column, name=f"uq_{table}_name_{parent_column[:-3]}")
            )
        else:
            constraints.append(sa.UniqueConstraint("name", name=f"uq_{table}_name"))

        op.create_table(table, *columns, *_timestamps(), *constraints)
        if parent_column:
            op.create_index(f"ix_{table}_{parent_column}", table, [parent_column])

    op.create_table(
        "species",
        _id_column(),
        sa.Column("scientific_name", sa.String(255), nullable=False),
        sa.Column("common_name", sa.String(255), nullable=True),
        sa.Column("common_name_de", sa.String(255), nullable=True, comment="German common name"),
        sa.Column("common_name_fr", sa.String(255), nullable=True, comment="French common name"),
        sa.Column("common_name_it", sa.String(255), nullable=True, comment="Italian common name"),
        sa.Column("synonyms", sa.Text(), nullable=True, comment="Expanded synonym list from the import"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("habitat", sa.Text(), nullable=True),
        sa.Column("edibility", sa.String(20), nullable=False, server_default=sa.text("'unknown'")),
        sa.Column("toxicity", sa.String(255), nullable=True),
        sa.Column("season_start", sa.Integer(), nullable=True),
        sa.Column("season_end", sa.Integer(), nullable=True),
        sa.Column("cap_shape", sa.String(255), nullable=True),
        sa.Column("cap_color", sa.String(255), nullable=True),
        sa.Column("gill_attachment", sa.String(255), nullable=True),
        sa.Column("spore_print_color", sa.String(255), nullable=True),
        sa.Column("occurrence", sa.String(20), nullable=False, server_default=sa.text("'occasional'")),
        sa.Column("image_url", sa.String(512), nullable=True),
        sa.Column("genus_id", postgresql.UUID(as_uuid=True), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("scientific_name", name="uq_species_scientific_name"),
        sa.ForeignKeyConstraint(["genus_id"], ["genera.id"], ondelete="RESTRICT"),
        sa.CheckConstraint("season_start BETWEEN 1 AND 12", name="ck_species_season_start"),
        sa.CheckConstraint("season_end BETWEEN 1 AND 12", name="ck_species_season_end"),
    )
    op.create_index("ix_species_genus_id", "species", ["genus_id"])
    op.create_index("ix_species_edibility", "species", ["edibility"])
    op.create_index("ix_species_occurrence", "species", ["occurrence"])

    op.create_table(
        "findings",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("species_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("found_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("latitude", sa.Numeric(10, 8), nullable=False),
        sa.Column("longitude", sa.Numeric(11, 8), nullable=False),
        sa.Column("location", sa.String(255), nullable=True, comment="Location name or description"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("weather", sa.String(100), nullable=True),
        sa.Column("temperature", sa.Numeric(4, 1), nullable=True),
        sa.Column("photo_url", sa.String(512), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["species_id"], ["species.id"], ondelete="RESTRICT"),
        sa.CheckConstraint("latitude BETWEEN -90 AND 90", name="ck_findings_latitude"),
        sa.CheckConstraint("longitude BETWEEN -180 AND 180", name="ck_findings_longitude"),
    )
    op.create_index("ix_findings_user_id", "findings", ["user_id"])
    op.create_index("ix_findings_species_id", "findings", ["species_id"])
    # Newest-first is the default listing order
    op.create_index("ix_findings_found_at", "findings", [sa.text("found_at DESC")])
    op.create_index("idx_findings_lat_lon", "findings", ["latitude", "longitude"])


def downgrade() -> None:
    op.drop_table("findings")
    op.drop_table("species")
    for table, _, _ in reversed(TAXON_LEVELS):
        op.drop_table(table)
    op.drop_table("users")
