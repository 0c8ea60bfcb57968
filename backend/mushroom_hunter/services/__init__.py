"""
Mushroom Hunter Backend — Services Layer
==========================================

What:  Business logic between the routes (HTTP) and the database.
How:   Services take an AsyncSession plus validated schemas, enforce the
       business rules by raising application exceptions, and return
       response schemas. Each module exposes a stateless singleton.

Service Inventory:
    - auth_service:     register / login
    - taxonomy_service: generic CRUD for division … genus
    - species_service:  filtered species listing and admin CRUD
    - finding_service:  user-scoped findings, map feed, owner-or-admin CRUD
"""
