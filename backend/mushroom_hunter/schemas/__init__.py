"""
Pydantic request/response schemas. Kept separate from the ORM models so the
API contract can evolve independently of the table layout.
"""
