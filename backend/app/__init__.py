"""
Employee Dashboard Backend — Application Package
=================================================

Layered layout:

    ┌─────────────────────────────────────┐
    │   Routes + Auth Middleware (HTTP)   │  ← status codes, envelopes, bearer gate
    ├─────────────────────────────────────┤
    │      EmployeeService (Business)     │  ← validation, uniqueness, soft delete
    ├─────────────────────────────────────┤
    │      Models & Schemas (Data)        │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │       Database (Persistence)        │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

Services never touch HTTP objects, so they can be tested with a mocked session.
"""

__version__ = "1.0.0"
