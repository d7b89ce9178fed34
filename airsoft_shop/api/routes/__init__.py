"""Route Modules — one file per resource.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Handlers translate HTTP input into one service call and return its result
"""
