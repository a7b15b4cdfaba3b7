import logging
from typing import Dict, List, Optional

from pydantic import ValidationError

from storefront.api import ShopApi
from storefront.cache import LocalCache, PRODUCTS_KEY
from storefront.errors import StorefrontError
from storefront.models import Product
from storefront.notify import Notifier
from storefront.retry import RetryPolicy

logger = logging.getLogger(__name__)


def _parse_products(raw) -> List[Product]:
    products = []
    for entry in raw or []:
        try:
            products.append(Product.model_validate(entry))
        except ValidationError:
            logger.warning("Skipping malformed product %r", entry.get("_id") if isinstance(entry, dict) else entry)
    return products


class Catalog:
    """Snapshot of the product list, loaded with retry and cached for offline use."""

    def __init__(self, api: ShopApi, cache: LocalCache, notifier: Notifier, retry: Optional[RetryPolicy] = None):
        self.api = api
        self.cache = cache
        self.notifier = notifier
        self.retry = retry or RetryPolicy()
        self.products: List[Product] = []
        self._by_id: Dict[str, Product] = {}
        self.loading = False

    def _replace(self, products: List[Product]) -> None:
        self.products = products
        self._by_id = {p.id: p for p in products}

    async def load(self) -> List[Product]:
        self.loading = True
        try:
            body = await self.retry.run(self.api.list_products, label="product list")
            self._replace(_parse_products(body.get("products")))
            self.cache.save(PRODUCTS_KEY, [p.model_dump(by_alias=True, mode="json") for p in self.products])
            logger.info("Products fetched successfully: %d", len(self.products))
        except StorefrontError:
            self.load_cached()
        finally:
            self.loading = False
        return self.products

    def load_cached(self) -> List[Product]:
        cached = self.cache.load(PRODUCTS_KEY)
        if cached:
            self._replace(_parse_products(cached))
            logger.info("Loaded products from cache: %d", len(self.products))
        else:
            self._replace([])
            self.notifier.error("Failed to load products. Please check your internet connection and try again.")
        return self.products

    def get(self, product_id: str) -> Optional[Product]:
        return self._by_id.get(product_id)

    def price_of(self, product_id: str) -> float:
        product = self.get(product_id)
        return product.price if product else 0.0

    def by_category(self, category: str) -> List[Product]:
        return [p for p in self.products if p.category == category]

    def by_sub_category(self, sub_category: str) -> List[Product]:
        return [p for p in self.products if p.sub_category == sub_category]

    def bestsellers(self) -> List[Product]:
        return [p for p in self.products if p.bestseller]

    @property
    def categories(self) -> List[str]:
        return list(dict.fromkeys(p.category for p in self.products))

    @property
    def sub_categories(self) -> List[str]:
        return list(dict.fromkeys(p.sub_category for p in self.products))
