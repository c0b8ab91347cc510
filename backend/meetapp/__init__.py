"""
Meetapp Backend: Application Package
=====================================

What:  REST backend for scheduling meetups, subscribing to them and attaching
       banner images.
Who:   Imported by uvicorn (`meetapp.main:app`), Alembic and pytest.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Validation, orchestration
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
                      │
              Jobs (background)              ← Notification e-mail delivery
"""

__version__ = "1.0.0"
