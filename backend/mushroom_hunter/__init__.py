"""
Mushroom Hunter Backend — Application Package Initializer
==========================================================

What:  Marks the `mushroom_hunter` directory as a Python package.
Who:   Used by uvicorn (`mushroom_hunter.main:app`), Alembic, the CLI and pytest.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Taxonomy, species, findings, auth
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    The importer package sits beside the services and talks to the database
    directly through the same session factory.
"""

__version__ = "1.0.0"
