"""
Jojárts API — Services Layer
==============================

Service Inventory:
    - TokenService:     signs and verifies bearer tokens (python-jose)
    - CredentialStore:  administrator lookup, bcrypt hashing, bootstrap
    - ImageCatalog:     CRUD over gallery photo records

TokenService and CredentialStore are built by create_app() from Settings
and live on app.state. ImageCatalog is a stateless module singleton.
Every service receives its AsyncSession per call.
"""
