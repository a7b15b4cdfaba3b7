from pydantic import BaseModel, Field

class WishlistToggle(BaseModel):
    productId: str = Field(..., min_length=1)
