import logging
from typing import List

from storefront.cache import WISHLIST_KEY, LocalCache
from storefront.catalog import Catalog
from storefront.notify import Notifier

logger = logging.getLogger(__name__)


class Wishlist:
    """Client-authoritative wishlist: product ids kept in the local cache."""

    def __init__(self, cache: LocalCache, catalog: Catalog, notifier: Notifier):
        self.cache = cache
        self.catalog = catalog
        self.notifier = notifier
        self._ids: List[str] = []

    @property
    def items(self) -> List[str]:
        return list(self._ids)

    def load_cached(self) -> List[str]:
        raw = self.cache.load(WISHLIST_KEY, [])
        self._ids = [str(i) for i in raw] if isinstance(raw, list) else []
        return self.items

    def contains(self, product_id: str) -> bool:
        return product_id in self._ids

    def toggle(self, product_id: str) -> bool:
        """Flip membership; returns True when the product is now on the list."""
        added = product_id not in self._ids
        if added:
            self._ids.append(product_id)
        else:
            self._ids.remove(product_id)
        self.cache.save(WISHLIST_KEY, self._ids)

        product = self.catalog.get(product_id)
        if product is not None:
            if added:
                self.notifier.success(f"{product.name} added to wishlist")
            else:
                self.notifier.info(f"{product.name} removed from wishlist")
        return added

    def reset(self) -> None:
        self._ids = []
        self.cache.remove(WISHLIST_KEY)
