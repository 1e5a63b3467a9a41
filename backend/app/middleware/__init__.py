# Middleware package init
"""
Natours Backend — Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging, development only] → [GZip] → [CORS] → Route

    Request ID runs first so the access log and the error handler can tag
    their lines with it. Responses pass back through the chain in reverse.
"""
