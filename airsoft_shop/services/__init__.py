"""Services Layer — catalog and cart use cases over injected gateways.

Invariants:
    - Services hold Protocol-typed gateways only; no backend-specific branches
    - Order within a call: read/validate, then write, then notify
"""
