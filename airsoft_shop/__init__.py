"""Airsoft Shop Package — catalog and cart domain layer.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
