"""Infrastructure Layer — storage backends, notifiers and cross-cutting concerns.

Invariants:
    - Gateways implement the Protocols in core/repository_protocols.py
    - All storage failures mapped to core/errors.py types before leaving this layer
"""
