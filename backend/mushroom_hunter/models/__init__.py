"""
ORM models. Importing this package registers every table with
`Base.metadata` (Alembic autogenerate and `create_all` rely on it).
"""

from mushroom_hunter.models.finding import Finding
from mushroom_hunter.models.species import Edibility, Occurrence, Species
from mushroom_hunter.models.taxonomy import Division, Family, Genus, Order, TaxonClass
from mushroom_hunter.models.user import ROLE_ADMIN, ROLE_USER, User

__all__ = [
    "Division",
    "Edibility",
    "Family",
    "Finding",
    "Genus",
    "Occurrence",
    "Order",
    "ROLE_ADMIN",
    "ROLE_USER",
    "Species",
    "TaxonClass",
    "User",
]
