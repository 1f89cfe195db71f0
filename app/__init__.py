"""
Jojárts API — Application Package
===================================

What: Backend for the electrician's marketing site: admin login and the
      photo gallery catalog.
Who:  Imported by uvicorn (`app.main:app`), Alembic and pytest.

Layering:

    ┌─────────────────────────────────────┐
    │     Routes + auth dependency        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (tokens, credentials,     │  ← Business rules
    │            image catalog)           │
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

Routes never touch the ORM; they call services, which raise domain
exceptions that the global handlers in `app.main` turn into responses.
"""

__version__ = "1.0.0"
