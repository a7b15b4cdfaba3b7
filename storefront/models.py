from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_SIZE = "M"

# {productId: {size: quantity}}, the shape older cached carts were stored in
LegacyCart = Mapping[str, Mapping[str, int]]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class Product(CamelModel):
    id: str = Field(..., alias="_id")
    name: str
    description: str = ""
    price: float = Field(0.0, ge=0)
    category: str = ""
    sub_category: str = ""
    image: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    bestseller: bool = False
    date: Optional[datetime] = None


class CartItem(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True)

    product_id: str
    quantity: int = Field(..., ge=1)
    size: str = DEFAULT_SIZE

    @property
    def key(self):
        return self.product_id, self.size


class OrderLine(CamelModel):
    product_id: str
    name: str
    price: float
    image: List[str] = Field(default_factory=list)
    size: str = DEFAULT_SIZE
    quantity: int


def _coerce_item(raw: Mapping[str, Any]) -> Optional[CartItem]:
    product = raw.get("productId") or raw.get("product")
    if isinstance(product, Mapping):
        # populated references carry the whole product
        product = product.get("_id")
    if not product or int(raw.get("quantity") or 0) < 1:
        return None
    return CartItem(product_id=str(product), quantity=int(raw["quantity"]), size=raw.get("size") or DEFAULT_SIZE)


def items_from_legacy(cart: LegacyCart) -> List[CartItem]:
    items = []
    for product_id, sizes in cart.items():
        for size, quantity in sizes.items():
            if quantity and quantity > 0:
                items.append(CartItem(product_id=product_id, quantity=quantity, size=size))
    return items


def parse_items(raw: Union[None, list, LegacyCart]) -> List[CartItem]:
    """Normalise any cart shape the API or cache hands back into CartItems."""
    if not raw:
        return []
    if isinstance(raw, Mapping):
        return items_from_legacy(raw)
    items = []
    for entry in raw:
        if isinstance(entry, CartItem):
            items.append(entry)
        elif isinstance(entry, Mapping):
            try:
                item = _coerce_item(entry)
            except (TypeError, ValueError):
                continue
            if item is not None:
                items.append(item)
    return items


def dump_items(items: Iterable[CartItem]) -> List[dict]:
    return [item.model_dump(by_alias=True) for item in items]
