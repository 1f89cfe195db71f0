"""
Jojárts API — Middleware Package
==================================

What:  Cross-cutting request handling.

Middleware Chain (outermost first):
    Request → [CORS] → [Login rate limit] → [Request ID] → [Logging] → [GZip] → Route

auth.py is the exception: it is a FastAPI dependency, attached only to the
routes that require an administrator.
"""
