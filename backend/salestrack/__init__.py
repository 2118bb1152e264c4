"""
SalesTrack Backend — Application Package Initializer
====================================================

What: Marks the `salestrack` directory as a Python package.
Who:  Imported by uvicorn (`salestrack.main:app`), pytest and the route modules.

Architecture Note:
    The backend is a thin REST layer over a single JSON document that lives
    in a versioned blob store (a GitHub repository by default).

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Entity services (business rules)  │  ← sellers, products, categories
    ├─────────────────────────────────────┤
    │     Document session (per request)  │  ← working copy + commit
    ├─────────────────────────────────────┤
    │  Synchronizer (cache, merge, retry) │  ← owns the in-process copy
    ├─────────────────────────────────────┤
    │   Document store (GitHub / file)    │  ← versioned GET / conditional PUT
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
