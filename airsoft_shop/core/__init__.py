"""Core Layer — pure domain logic, no IO, no async, no storage.

Invariants:
    - No module in core/ imports from services/, api/ or infrastructure/
    - All functions are pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell: validation, listing and
      cart rules here; gateways and orchestration outside
"""
