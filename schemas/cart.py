# schemas/cart.py
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_SIZE = "M"

class CartItem(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    size: str = DEFAULT_SIZE

class CartUpdate(CartItem):
    pass
