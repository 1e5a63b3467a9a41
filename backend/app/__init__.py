"""
Natours Backend — Application Package
=======================================

What: The tour-booking REST API (tours, users, reviews).

Architecture Note:
    ┌─────────────────────────────────────┐
    │   Routes + auth dependencies (API)  │  ← HTTP concerns, catch_async
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← rules, response envelopes
    ├─────────────────────────────────────┤
    │   Repositories (+ interceptors)     │  ← queries, document hooks
    ├─────────────────────────────────────┤
    │     Models & Schemas (Data)         │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    Errors from every layer end in app.error_handlers.
"""

__version__ = "1.0.0"
