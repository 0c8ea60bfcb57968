"""
Mushroom Hunter Backend — API Routes Package
==============================================

Route Inventory:
    - auth.py:      POST /api/auth/register, POST /api/auth/login, GET /api/auth/me
    - taxonomy.py:  /api/taxonomy/{divisions,classes,orders,families,genera}
    - species.py:   /api/species
    - findings.py:  /api/findings, /api/findings/map
    - health.py:    GET /health

Routes stay thin: read the request, call a service, set status code and
headers. Business rules live in the services.
"""
