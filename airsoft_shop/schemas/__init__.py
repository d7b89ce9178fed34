"""Pydantic Schemas — request validation for API endpoints.

Invariants:
    - Schemas check shape at the system boundary; domain rules stay in core/
"""
