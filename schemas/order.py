from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Literal

ORDER_STATUSES = ("Order Placed", "Processing", "Shipped", "Delivered", "Cancelled")
TERMINAL_STATUSES = {"Delivered", "Cancelled"}
OrderStatus = Literal["Order Placed", "Processing", "Shipped", "Delivered", "Cancelled"]
PaymentMethod = Literal["COD", "Stripe"]

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class ShippingAddress(CamelModel):
    first_name: str
    last_name: str
    email: str
    street: str
    city: str
    state: str
    zipcode: str
    country: str
    phone: str

class OrderItem(CamelModel):
    product_id: str
    name: str
    price: float = Field(..., ge=0)
    image: List[str] = Field(default_factory=list)
    size: str = "M"
    quantity: int = Field(..., ge=1)

class OrderCreate(CamelModel):
    address: ShippingAddress
    items: List[OrderItem]
    amount: float = Field(..., ge=0)

class OrderStatusUpdate(BaseModel):
    status: OrderStatus
