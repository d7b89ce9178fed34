"""Cart Schemas — request bodies for cart routes.

Invariants:
    - Field types only; stock, availability and quantity rules live in the Cart Service
"""

from pydantic import BaseModel, Field


class QuantityIn(BaseModel):
    """Body for add-item; quantity defaults to 1."""
    quantity: int = 1


class QuantitySet(BaseModel):
    """Body for set-quantity; quantity <= 0 removes the item."""
    quantity: int


class CartItemIn(BaseModel):
    """One entry of a replace-all body."""
    product_id: str = Field(min_length=1)
    quantity: int
