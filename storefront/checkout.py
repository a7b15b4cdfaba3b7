"""Checkout: shipping form validation, order assembly and the two payment paths.

Cash on delivery finishes in one request. Hosted payment hands the shopper
to an external page and finishes later, when the page's callback is passed
to :meth:`CheckoutOrchestrator.verify` (usually on a fresh orchestrator,
since the redirect leaves the process).
"""
import asyncio
import enum
import logging
import re
from typing import Callable, Dict, List, Mapping, Optional, Union

from storefront.api import ShopApi
from storefront.cart import CartSynchronizer
from storefront.catalog import Catalog
from storefront.errors import (
    EmptyCartError,
    FormValidationError,
    SessionExpiredError,
    StorefrontError,
)
from storefront.models import OrderLine
from storefront.notify import Notifier

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
PHONE_RE = re.compile(r"^\d{10,15}$")

REQUIRED_FIELDS = {
    "firstName": "First name is required",
    "lastName": "Last name is required",
    "email": "Email is required",
    "street": "Street address is required",
    "city": "City is required",
    "state": "State is required",
    "zipcode": "Zip code is required",
    "country": "Country is required",
    "phone": "Phone number is required",
}
ADDRESS_FIELDS = tuple(REQUIRED_FIELDS)


def validate_form(form: Mapping[str, Optional[str]]) -> Dict[str, str]:
    """Check every shipping field and return {field: message} for the bad ones."""
    errors: Dict[str, str] = {}
    for field, message in REQUIRED_FIELDS.items():
        if not str(form.get(field) or "").strip():
            errors[field] = message

    email = str(form.get("email") or "").strip()
    if "email" not in errors and not EMAIL_RE.search(email):
        errors["email"] = "Email is invalid"

    phone_digits = re.sub(r"[^0-9]", "", str(form.get("phone") or ""))
    if "phone" not in errors and not PHONE_RE.match(phone_digits):
        errors["phone"] = "Please enter a valid phone number"
    return errors


class PaymentMethod(str, enum.Enum):
    COD = "cod"
    HOSTED = "hosted"


class CheckoutState(str, enum.Enum):
    METHOD_SELECTED = "method_selected"
    SUBMITTED = "submitted"
    REDIRECT_PENDING = "redirect_pending"
    VERIFYING = "verifying"
    PLACED = "placed"
    FAILED = "failed"


class CheckoutOrchestrator:
    def __init__(
        self,
        api: ShopApi,
        cart: CartSynchronizer,
        catalog: Catalog,
        notifier: Notifier,
        navigate: Callable[[str], None],
        delivery_fee: float = 10.0,
        return_delay: float = 2.0,
    ):
        self.api = api
        self.cart = cart
        self.catalog = catalog
        self.notifier = notifier
        self.navigate = navigate
        self.delivery_fee = delivery_fee
        self.return_delay = return_delay

        self.method = PaymentMethod.COD
        self.state = CheckoutState.METHOD_SELECTED
        self.busy = False
        self.order: Optional[dict] = None
        self.redirect_url: Optional[str] = None
        self.error: Optional[str] = None

    def select_method(self, method: Union[PaymentMethod, str]) -> PaymentMethod:
        try:
            self.method = PaymentMethod(method)
        except ValueError:
            self.notifier.error("Please select a payment method")
            raise
        self.state = CheckoutState.METHOD_SELECTED
        self.error = None
        return self.method

    def build_order_lines(self) -> List[OrderLine]:
        lines = []
        for item in self.cart.items:
            product = self.catalog.get(item.product_id)
            if product is None:
                logger.warning("Dropping %s from the order: no longer in the catalog", item.product_id)
                continue
            # snapshot for display; the server reprices lines from its own records
            lines.append(OrderLine(
                product_id=product.id,
                name=product.name,
                price=product.price,
                image=list(product.image),
                size=item.size,
                quantity=item.quantity,
            ))
        return lines

    def build_payload(self, form: Mapping[str, Optional[str]]) -> dict:
        return {
            "address": {field: str(form.get(field) or "").strip() for field in ADDRESS_FIELDS},
            "items": [line.model_dump(by_alias=True) for line in self.build_order_lines()],
            "amount": self.cart.get_amount() + self.delivery_fee,
        }

    def check_preconditions(self, form: Mapping[str, Optional[str]]) -> None:
        if self.cart.get_count() == 0:
            self.notifier.error(EmptyCartError.message)
            self.navigate("/cart")
            raise EmptyCartError()
        errors = validate_form(form)
        if errors:
            self.notifier.error(FormValidationError.message)
            raise FormValidationError(errors)

    async def submit(self, form: Mapping[str, Optional[str]]) -> CheckoutState:
        self.check_preconditions(form)
        payload = self.build_payload(form)
        if not payload["items"]:
            self.notifier.error(EmptyCartError.message)
            self.navigate("/cart")
            raise EmptyCartError()

        self.state = CheckoutState.SUBMITTED
        self.busy = True
        try:
            if self.method is PaymentMethod.COD:
                body = await self.api.place_order(payload)
                self.order = body.get("order")
                self.cart.clear_local()
                self.state = CheckoutState.PLACED
                self.notifier.success("Order placed successfully!")
                self.navigate("/orders")
            else:
                body = await self.api.place_hosted_order(payload)
                self.redirect_url = body.get("redirectUrl")
                if not self.redirect_url:
                    raise StorefrontError("Failed to initialize payment")
                self.state = CheckoutState.REDIRECT_PENDING
                self.navigate(self.redirect_url)
        except StorefrontError as exc:
            self.state = CheckoutState.FAILED
            self.error = exc.message
            logger.error("Checkout error: %s", exc)
            if not isinstance(exc, SessionExpiredError):
                self.notifier.error(exc.message)
            raise
        finally:
            self.busy = False
        return self.state

    async def verify(self, success: Union[str, bool, None], order_id: Optional[str]) -> CheckoutState:
        """Finish a hosted payment from the payment page's callback parameters."""
        if not order_id:
            self.state = CheckoutState.FAILED
            self.error = "Invalid order information"
            self.notifier.error(self.error)
            self.navigate("/cart")
            return self.state

        if isinstance(success, bool):
            success = "true" if success else "false"
        self.state = CheckoutState.VERIFYING
        self.busy = True
        try:
            body = await self.api.verify_payment(order_id, str(success).lower())
            paid = bool(body.get("success"))
            message = body.get("message")
        except SessionExpiredError as exc:
            self.state = CheckoutState.FAILED
            self.error = exc.message
            self.navigate("/login")
            raise
        except StorefrontError as exc:
            logger.error("Error verifying payment for %s: %s", order_id, exc)
            paid, message = False, exc.message
        finally:
            self.busy = False

        if paid:
            self.cart.clear_local()
            self.state = CheckoutState.PLACED
            self.notifier.success("Payment successful! Your order has been placed.")
            self.navigate("/orders")
            return self.state

        self.state = CheckoutState.FAILED
        self.error = message or "Payment failed. Please try again."
        self.notifier.error(self.error)
        # leave the message on screen before going back
        await asyncio.sleep(self.return_delay)
        self.navigate("/cart")
        return self.state
