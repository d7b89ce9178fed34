"""API Layer — FastAPI routes and error handlers.

Invariants:
    - Routes registered explicitly in create_app (no auto-discovery)
    - Routes hold no business logic; every rule lives in services/ or core/
"""
