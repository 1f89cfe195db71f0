"""
Jojárts API — API Routes Package
==================================

Route Inventory:
    - health.py:  GET  /api/health
    - auth.py:    POST /api/auth/login, GET /api/auth/me
    - images.py:  GET/POST /api/images, PUT/DELETE /api/images/{id}

Routes handle HTTP details only and delegate to services.
"""
