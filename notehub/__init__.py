"""
NoteHub Backend: Application Package Initializer
=================================================

What: Marks the `notehub` directory as a Python package.
Who:  Used by uvicorn, pytest, and the `notehub` console script.

Architecture Note:
    The service keeps a layered structure:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (Note Store, Registry)   │  ← State and business rules
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Only two components hold state: the in-memory number registry and the
    SQL-backed note store. Everything else is request/response glue.
"""

__version__ = "1.0.0"
