from storefront.api import ShopApi
from storefront.cache import FileCache, LocalCache
from storefront.cart import CartState, CartSynchronizer
from storefront.catalog import Catalog
from storefront.checkout import CheckoutOrchestrator, CheckoutState, PaymentMethod, validate_form
from storefront.config import ClientConfig
from storefront.errors import (
    EmptyCartError,
    FormValidationError,
    NotAuthenticatedError,
    NotFoundError,
    RequestError,
    SessionExpiredError,
    StorefrontError,
    TransientError,
)
from storefront.models import CartItem, Product
from storefront.notify import Notifier
from storefront.retry import RetryPolicy
from storefront.session import SessionManager
from storefront.state import AppState, Navigator
from storefront.wishlist import Wishlist

__all__ = [
    "AppState", "CartItem", "CartState", "CartSynchronizer", "Catalog", "CheckoutOrchestrator",
    "CheckoutState", "ClientConfig", "EmptyCartError", "FileCache", "FormValidationError", "LocalCache",
    "Navigator", "NotAuthenticatedError", "NotFoundError", "Notifier", "PaymentMethod", "Product",
    "RequestError", "RetryPolicy", "SessionExpiredError", "SessionManager", "ShopApi", "StorefrontError",
    "TransientError", "Wishlist", "validate_form",
]
