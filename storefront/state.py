"""Application state: one explicit context object for the storefront.

Built once, ``init()`` on startup, ``teardown()`` on logout. Components get
what they need through their constructors instead of reaching for globals.
"""
import logging
from typing import Callable, List, Optional

import httpx

from storefront.api import ShopApi
from storefront.cache import FileCache, LocalCache
from storefront.cart import CartSynchronizer
from storefront.catalog import Catalog
from storefront.checkout import CheckoutOrchestrator
from storefront.config import ClientConfig
from storefront.errors import SessionExpiredError, StorefrontError
from storefront.notify import Notifier
from storefront.retry import RetryPolicy
from storefront.session import SessionManager
from storefront.wishlist import Wishlist

logger = logging.getLogger(__name__)


class Navigator:
    """Records where the storefront asked to go."""

    def __init__(self):
        self.history: List[str] = []

    def __call__(self, location: str) -> None:
        logger.info("navigate -> %s", location)
        self.history.append(location)

    @property
    def current(self) -> Optional[str]:
        return self.history[-1] if self.history else None


class AppState:
    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        cache: Optional[LocalCache] = None,
        navigate: Optional[Callable[[str], None]] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.config = config or ClientConfig()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(base_url=self.config.backend_url, timeout=self.config.timeout)
        if cache is None:
            cache = FileCache(self.config.cache_path) if self.config.cache_path else LocalCache()
        self.cache = cache
        self.navigate = navigate or Navigator()
        self.notifier = notifier or Notifier()

        self.session = SessionManager(self.cache, self.notifier)
        self.api = ShopApi(self.client, self.session)
        self.catalog = Catalog(
            self.api, self.cache, self.notifier,
            RetryPolicy(max_attempts=self.config.catalog_retries, delay=self.config.catalog_retry_delay),
        )
        self.cart = CartSynchronizer(self.api, self.cache, self.catalog, self.notifier)
        self.wishlist = Wishlist(self.cache, self.catalog, self.notifier)
        self.user: Optional[dict] = None
        self.session.on_teardown(self._on_session_teardown)

    def new_checkout(self) -> CheckoutOrchestrator:
        return CheckoutOrchestrator(
            self.api, self.cart, self.catalog, self.notifier, self.navigate,
            delivery_fee=self.config.delivery_fee,
            return_delay=self.config.verify_return_delay,
        )

    async def init(self) -> None:
        self.cart.load_cached()
        self.wishlist.load_cached()
        await self.catalog.load()
        if not self.session.restore():
            return
        try:
            await self.load_user()
            await self.cart.refresh()
        except SessionExpiredError:
            logger.warning("Stored session is no longer valid")
        except StorefrontError as exc:
            logger.error("Error initializing user data: %s", exc)

    async def load_user(self) -> Optional[dict]:
        body = await self.api.profile()
        self.user = body.get("user")
        return self.user

    async def login(self, email: str, password: str) -> dict:
        try:
            body = await self.api.login(email, password)
        except StorefrontError as exc:
            self.notifier.error(exc.message if exc.status_code != 401 else "Invalid credentials")
            raise
        self.session.login(body["token"])
        self.user = body.get("user")
        self.notifier.success("Login successful!")
        await self.cart.refresh()
        return body

    async def register(self, name: str, email: str, password: str) -> dict:
        try:
            body = await self.api.register(name, email, password)
        except StorefrontError as exc:
            self.notifier.error(exc.message)
            raise
        self.session.login(body["token"])
        self.user = body.get("user")
        self.notifier.success("Registration successful!")
        return body

    async def orders(self) -> List[dict]:
        body = await self.api.user_orders()
        return body.get("orders", [])

    def teardown(self) -> None:
        if not self.session.logout():
            self._on_session_teardown()

    def _on_session_teardown(self) -> None:
        self.user = None
        self.cart.reset()
        self.wishlist.reset()

    async def aclose(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "AppState":
        await self.init()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
