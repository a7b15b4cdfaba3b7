from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List

class BaseProduct(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    sub_category: Optional[str] = None
    sizes: Optional[List[str]] = None
    image: Optional[List[str]] = None
    bestseller: Optional[bool] = None

class ProductCreate(BaseProduct):
    name: str = Field(..., min_length=1)
    description: str
    price: float = Field(..., ge=0)
    category: str
    sub_category: str
    sizes: List[str] = Field(default_factory=lambda: ["S", "M", "L"])
    image: List[str] = Field(default_factory=list)
    bestseller: bool = False

class ProductRemove(BaseModel):
    id: str

class ProductUpdate(BaseProduct):
    name: Optional[str] = Field(None, min_length=1)
