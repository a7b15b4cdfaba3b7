"""Cart synchronisation between the local cache and the remote cart store.

Mutations are confirm-then-render: nothing visible changes until the
server answers, and then the local list is replaced wholesale with the
server's items. Mutations on one synchroniser run one at a time; a second
caller waits for the first to reconcile or fail.
"""
import asyncio
import enum
import logging
from typing import Awaitable, Callable, Iterable, List, Mapping, Optional, Union

from storefront.api import ShopApi
from storefront.cache import CART_KEY, LocalCache
from storefront.catalog import Catalog
from storefront.errors import (
    NotAuthenticatedError,
    NotFoundError,
    RequestError,
    SessionExpiredError,
    StorefrontError,
    TransientError,
)
from storefront.models import DEFAULT_SIZE, CartItem, LegacyCart, dump_items, parse_items
from storefront.notify import Notifier

logger = logging.getLogger(__name__)


class CartState(str, enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    RECONCILED = "reconciled"
    FAILED = "failed"


def _as_items(items: Union[Iterable[CartItem], LegacyCart]) -> List[CartItem]:
    return parse_items(items if isinstance(items, Mapping) else list(items))


def count_items(items: Union[Iterable[CartItem], LegacyCart]) -> int:
    """Total quantity; takes the canonical list or a legacy {id: {size: qty}} mapping."""
    return sum(item.quantity for item in _as_items(items))


def cart_amount(items: Union[Iterable[CartItem], LegacyCart], catalog: Catalog) -> float:
    # products missing from the snapshot contribute nothing
    return sum(
        catalog.price_of(item.product_id) * item.quantity
        for item in _as_items(items)
    )


class CartSynchronizer:
    def __init__(self, api: ShopApi, cache: LocalCache, catalog: Catalog, notifier: Notifier):
        self.api = api
        self.cache = cache
        self.catalog = catalog
        self.notifier = notifier
        self.state = CartState.IDLE
        self.last_error: Optional[StorefrontError] = None
        self._items: List[CartItem] = []
        self._lock = asyncio.Lock()

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    @property
    def busy(self) -> bool:
        return self.state is CartState.PENDING

    def load_cached(self) -> List[CartItem]:
        self._items = parse_items(self.cache.load(CART_KEY, []))
        return self.items

    def _reconcile(self, raw_items) -> None:
        self._items = parse_items(raw_items)
        self.cache.save(CART_KEY, dump_items(self._items))

    def clear_local(self) -> None:
        """Forget the cart locally; used once the server has already emptied it."""
        self._reconcile([])

    def reset(self) -> None:
        self._items = []
        self.cache.remove(CART_KEY)
        self.state = CartState.IDLE
        self.last_error = None

    def get_count(self) -> int:
        return count_items(self._items)

    def get_amount(self) -> float:
        return cart_amount(self._items, self.catalog)

    async def _mutate(self, label: str, call: Callable[[], Awaitable[dict]], failure_message: str) -> List[CartItem]:
        async with self._lock:
            self.state = CartState.PENDING
            try:
                body = await call()
                self._reconcile((body.get("cart") or {}).get("items", []))
            except StorefrontError as exc:
                self.state = CartState.FAILED
                self.last_error = exc
                self._report(label, exc, failure_message)
                raise
            except BaseException:
                self.state = CartState.FAILED
                raise
            self.state = CartState.RECONCILED
            self.last_error = None
            return self.items

    def _report(self, label: str, exc: StorefrontError, failure_message: str) -> None:
        logger.error("Error %s: %s", label, exc)
        if isinstance(exc, SessionExpiredError):
            return  # the session manager already told the user
        if isinstance(exc, NotAuthenticatedError):
            self.notifier.warning(exc.message)
        elif isinstance(exc, NotFoundError):
            self.notifier.error("Product not found. Please refresh and try again.")
        elif isinstance(exc, RequestError):
            self.notifier.error(exc.message)
        else:
            self.notifier.error(failure_message)

    async def add_item(self, product_id: str, quantity: int = 1, size: str = DEFAULT_SIZE) -> List[CartItem]:
        """Set the quantity of a (product, size) line, creating it if needed."""
        if not self.api.session.is_authenticated:
            self.notifier.warning("Please login to add items to cart")
            raise NotAuthenticatedError("Please login to add items to cart")
        if quantity < 1:
            self.notifier.error("Quantity must be at least 1")
            raise RequestError("Quantity must be at least 1")
        product = self.catalog.get(product_id)
        if product is None:
            self.notifier.error("Product not found")
            raise NotFoundError("Product not found")

        items = await self._mutate(
            "adding to cart",
            lambda: self.api.add_cart_item(product_id, quantity, size or DEFAULT_SIZE),
            "Failed to add item to cart. Please try again.",
        )
        self.notifier.success(f"{product.name} added to cart!")
        return items

    async def update_quantity(self, product_id: str, quantity: int, size: str = DEFAULT_SIZE) -> List[CartItem]:
        if quantity < 1:
            return await self.remove_item(product_id)
        return await self._mutate(
            "updating cart item",
            lambda: self.api.update_cart_item(product_id, quantity, size or DEFAULT_SIZE),
            "Failed to update cart. Please try again.",
        )

    async def remove_item(self, product_id: str) -> List[CartItem]:
        """Remove every size of the product."""
        items = await self._mutate(
            "removing from cart",
            lambda: self.api.remove_cart_item(product_id),
            "Failed to remove item from cart. Please try again.",
        )
        self.notifier.success("Item removed from cart")
        return items

    async def clear(self) -> List[CartItem]:
        async def call():
            await self.api.clear_cart()
            return {"cart": {"items": []}}

        items = await self._mutate("clearing cart", call, "Failed to clear cart. Please try again.")
        self.notifier.success("Cart cleared successfully")
        return items

    async def refresh(self) -> List[CartItem]:
        """Pull the server cart; on a transient failure keep showing the cached one."""
        try:
            return await self._mutate("fetching cart", self.api.fetch_cart, "Failed to load your cart.")
        except TransientError:
            logger.warning("Falling back to cached cart")
            return self.load_cached()
