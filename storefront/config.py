import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class ClientConfig(BaseModel):
    backend_url: str = "http://localhost:4000"
    cache_path: Optional[str] = None
    delivery_fee: float = Field(10.0, ge=0)
    timeout: float = Field(10.0, gt=0)
    catalog_retries: int = Field(3, ge=1)
    catalog_retry_delay: float = Field(1.0, ge=0)
    verify_return_delay: float = Field(2.0, ge=0)

    @classmethod
    def from_env(cls) -> "ClientConfig":
        load_dotenv()
        values = {
            "backend_url": os.getenv("SHOP_BACKEND_URL"),
            "cache_path": os.getenv("SHOP_CACHE_PATH"),
            "delivery_fee": os.getenv("SHOP_DELIVERY_FEE"),
            "catalog_retries": os.getenv("SHOP_CATALOG_RETRIES"),
            "catalog_retry_delay": os.getenv("SHOP_CATALOG_RETRY_DELAY"),
            "verify_return_delay": os.getenv("SHOP_VERIFY_RETURN_DELAY"),
        }
        return cls(**{k: v for k, v in values.items() if v is not None})
