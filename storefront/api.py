"""Thin async client for the shop REST API.

Maps HTTP outcomes onto the storefront error taxonomy and tells the
session manager about authentication-invalid answers.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from storefront.errors import (
    NotAuthenticatedError,
    NotFoundError,
    RequestError,
    SessionExpiredError,
    TransientError,
)
from storefront.session import SessionManager

logger = logging.getLogger(__name__)


class ShopApi:
    def __init__(self, client: httpx.AsyncClient, session: SessionManager):
        self.client = client
        self.session = session

    async def request(
        self,
        method: str,
        path: str,
        *,
        auth: bool = True,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        expect_success: bool = True,
    ) -> dict:
        if auth and not self.session.is_authenticated:
            raise NotAuthenticatedError()

        generation = self.session.generation
        headers = self.session.auth_headers() if auth else {}
        try:
            response = await self.client.request(method, path, json=json, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise TransientError() from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get("message")

        if response.status_code == 401 and auth:
            self.session.expire(generation)
            raise SessionExpiredError(status_code=401)
        if response.status_code == 404:
            raise NotFoundError(message, status_code=404)
        if response.status_code in (400, 401, 403, 409, 422):
            raise RequestError(message, status_code=response.status_code)
        if response.is_error:
            logger.error("%s %s answered %d", method, path, response.status_code)
            raise TransientError(status_code=response.status_code)
        if expect_success and not body.get("success"):
            logger.error("%s %s answered success: false: %s", method, path, message)
            raise TransientError(message, status_code=response.status_code)
        return body

    # catalog
    async def list_products(self) -> dict:
        return await self.request("GET", "/api/product/list", auth=False)

    # account
    async def login(self, email: str, password: str) -> dict:
        return await self.request("POST", "/api/user/login", auth=False, json={"email": email, "password": password})

    async def register(self, name: str, email: str, password: str) -> dict:
        return await self.request(
            "POST", "/api/user/register", auth=False, json={"name": name, "email": email, "password": password}
        )

    async def profile(self) -> dict:
        return await self.request("GET", "/api/user/profile")

    # cart
    async def fetch_cart(self) -> dict:
        return await self.request("GET", "/api/cart")

    async def add_cart_item(self, product_id: str, quantity: int, size: str) -> dict:
        return await self.request(
            "POST", "/api/cart/items", json={"productId": product_id, "quantity": quantity, "size": size}
        )

    async def update_cart_item(self, product_id: str, quantity: int, size: str) -> dict:
        return await self.request("PUT", "/api/cart", json={"productId": product_id, "quantity": quantity, "size": size})

    async def remove_cart_item(self, product_id: str) -> dict:
        return await self.request("DELETE", f"/api/cart/{product_id}")

    async def clear_cart(self) -> dict:
        return await self.request("DELETE", "/api/cart")

    # orders
    async def place_order(self, payload: dict) -> dict:
        return await self.request("POST", "/api/order/place", json=payload)

    async def place_hosted_order(self, payload: dict) -> dict:
        return await self.request("POST", "/api/order/hostedpayment", json=payload)

    async def verify_payment(self, order_id: str, success: str) -> dict:
        return await self.request(
            "GET", "/api/order/verify", params={"orderId": order_id, "success": success}, expect_success=False
        )

    async def user_orders(self) -> dict:
        return await self.request("GET", "/api/order/userorders")
