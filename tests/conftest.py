import asyncio
import json
import uuid
from datetime import datetime, timezone

import httpx
import pytest
from mongomock_motor import AsyncMongoMockClient

import core.dependencies
import routers.auth.login
import routers.auth.register
import routers.cart
import routers.orders
import routers.products
import routers.users
import routers.wishlist
from core.payments import HostedPaymentGateway, get_payment_gateway
from core.security import create_access_token
from main import app
from storefront import AppState, ClientConfig

DB_MODULES = [
    core.dependencies,
    routers.auth.login,
    routers.auth.register,
    routers.cart,
    routers.orders,
    routers.products,
    routers.users,
    routers.wishlist,
]

PRODUCTS = [
    {
        "_id": "p1",
        "name": "Velvet Lip Tint",
        "description": "Long-wear tint",
        "price": 12.5,
        "category": "Lips",
        "subCategory": "Tint",
        "sizes": ["S", "M", "L"],
        "image": ["https://cdn.example.com/p1.png"],
        "bestseller": True,
    },
    {
        "_id": "p2",
        "name": "Glow Serum",
        "description": "Vitamin C serum",
        "price": 20.0,
        "category": "Face",
        "subCategory": "Serum",
        "sizes": ["M", "L"],
        "image": ["https://cdn.example.com/p2.png"],
        "bestseller": False,
    },
    {
        "_id": "p3",
        "name": "Lash Primer",
        "description": "Primer for lashes",
        "price": 8.0,
        "category": "Eyes",
        "subCategory": "Primer",
        "sizes": ["M"],
        "image": [],
        "bestseller": True,
    },
]

VALID_FORM = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@example.com",
    "street": "12 Analytical Way",
    "city": "London",
    "state": "Greater London",
    "zipcode": "NW1 6XE",
    "country": "UK",
    "phone": "+44 (20) 7946-0958",
}


# ---------- shop API against an in-memory Mongo ----------

@pytest.fixture
def mock_db(monkeypatch):
    database = AsyncMongoMockClient()["shop_test"]
    for module in DB_MODULES:
        monkeypatch.setattr(module, "db", database)
    return database


@pytest.fixture
async def seeded_db(mock_db):
    now = datetime.now(timezone.utc)
    await mock_db.products.insert_many([{**p, "date": now} for p in PRODUCTS])
    return mock_db


async def make_user(database, role: str = "user", email: str = None) -> dict:
    user_id = str(uuid.uuid4())
    doc = {
        "_id": user_id,
        "name": f"{role} tester",
        "email": email or f"{user_id[:8]}@example.com",
        "password": "unused",
        "role": role,
        "created_at": datetime.now(timezone.utc),
    }
    await database.users.insert_one(doc)
    return {**doc, "token": create_access_token({"sub": user_id})}


def bearer(user: dict) -> dict:
    return {"Authorization": f"Bearer {user['token']}"}


@pytest.fixture
async def user(seeded_db):
    return await make_user(seeded_db)


@pytest.fixture
async def admin(seeded_db):
    return await make_user(seeded_db, role="admin")


class FakeGateway:
    """Hosted payment provider served through httpx.MockTransport."""

    def __init__(self):
        self.sessions = {}
        self.down = False

    def session_for(self, order_id):
        return next(s for s in self.sessions.values() if s["order_id"] == order_id)

    def pay(self, order_id):
        self.session_for(order_id)["status"] = "paid"

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.down:
            raise httpx.ConnectError("gateway unreachable", request=request)
        if request.headers.get("Authorization") != "Bearer sk_test":
            return httpx.Response(401, json={"error": "bad key"})
        path = request.url.path
        if request.method == "POST" and path == "/v1/sessions":
            body = json.loads(request.content)
            sid = f"cs_{len(self.sessions) + 1}"
            self.sessions[sid] = {**body, "id": sid, "status": "open",
                                  "url": f"https://pay.test/checkout/{sid}?order_id={body['order_id']}"}
            return httpx.Response(200, json=self.sessions[sid])
        if request.method == "GET" and path.startswith("/v1/sessions/"):
            session = self.sessions.get(path.rsplit("/", 1)[-1])
            if session is None:
                return httpx.Response(404, json={"error": "no such session"})
            return httpx.Response(200, json=session)
        return httpx.Response(404, json={"error": "not found"})


@pytest.fixture
async def payment_gateway():
    fake = FakeGateway()
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
    gateway = HostedPaymentGateway(
        api_url="https://pay.test/v1", api_key="sk_test",
        frontend_url="http://shop.test", currency="usd", client=client,
    )
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield fake
    app.dependency_overrides.pop(get_payment_gateway, None)
    await client.aclose()


@pytest.fixture
async def http(seeded_db, payment_gateway):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


# ---------- storefront client against a scripted fake ----------

class FakeShop:
    """Scripted stand-in for the shop API, served through httpx.MockTransport."""

    def __init__(self, products=PRODUCTS):
        self.products = {p["_id"]: dict(p) for p in products}
        self.items = []
        self.orders = []
        self.token = "good-token"
        self.calls = []
        self.failures = []
        self.verify_succeeds = True
        self.in_flight = 0
        self.max_in_flight = 0

    def fail_next(self, *statuses):
        """Queue failures for the next requests: an HTTP status, "network" or "refused"."""
        self.failures.extend(statuses)

    def count(self, method, path):
        return self.calls.count((method, path))

    @staticmethod
    def ok(**payload):
        return httpx.Response(200, json={"success": True, **payload})

    @staticmethod
    def fail(status, message):
        return httpx.Response(status, json={"success": False, "message": message})

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            return self.handle(request)
        finally:
            self.in_flight -= 1

    def handle(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        self.calls.append((method, path))
        if self.failures:
            failure = self.failures.pop(0)
            if failure == "network":
                raise httpx.ConnectError("connection refused", request=request)
            if failure == "refused":
                return httpx.Response(200, json={"success": False, "message": "scripted refusal"})
            return self.fail(failure, "scripted failure")

        if (method, path) == ("GET", "/api/product/list"):
            return self.ok(products=list(self.products.values()))
        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return self.fail(401, "Not Authorized. Please log in again.")

        body = json.loads(request.content) if request.content else {}
        if (method, path) == ("GET", "/api/cart"):
            return self.ok(cart={"items": list(self.items)})
        if (method, path) == ("POST", "/api/cart/items"):
            if body["productId"] not in self.products:
                return self.fail(404, "Product not found")
            for item in self.items:
                if (item["productId"], item["size"]) == (body["productId"], body["size"]):
                    item["quantity"] = body["quantity"]
                    break
            else:
                self.items.append(dict(body))
            return self.ok(cart={"items": [dict(i) for i in self.items]})
        if (method, path) == ("PUT", "/api/cart"):
            for item in self.items:
                if (item["productId"], item["size"]) == (body["productId"], body["size"]):
                    item["quantity"] = body["quantity"]
                    return self.ok(cart={"items": [dict(i) for i in self.items]})
            return self.fail(404, "Item not found in cart")
        if (method, path) == ("DELETE", "/api/cart"):
            self.items = []
            return self.ok()
        if method == "DELETE" and path.startswith("/api/cart/"):
            product_id = path.rsplit("/", 1)[-1]
            self.items = [i for i in self.items if i["productId"] != product_id]
            return self.ok(cart={"items": [dict(i) for i in self.items]})
        if (method, path) == ("POST", "/api/order/place"):
            order = {"_id": f"o{len(self.orders) + 1}", **body, "status": "Order Placed",
                     "paymentMethod": "COD", "payment": False}
            self.orders.append(order)
            self.items = []
            return self.ok(order=order)
        if (method, path) == ("POST", "/api/order/hostedpayment"):
            order = {"_id": f"o{len(self.orders) + 1}", **body, "status": "Order Placed",
                     "paymentMethod": "Stripe", "payment": False}
            self.orders.append(order)
            return self.ok(orderId=order["_id"], redirectUrl=f"https://pay.example.com/session/{order['_id']}")
        if (method, path) == ("GET", "/api/order/verify"):
            if request.url.params.get("success") == "true" and self.verify_succeeds:
                self.items = []
                return self.ok()
            return httpx.Response(200, json={"success": False, "message": "Payment not successful"})
        if (method, path) == ("GET", "/api/user/profile"):
            return self.ok(user={"_id": "u1", "name": "Ada", "email": "ada@example.com"})
        return self.fail(404, "API endpoint not found")


@pytest.fixture
def shop():
    return FakeShop()


@pytest.fixture
def client_config():
    return ClientConfig(backend_url="http://shop.test", catalog_retry_delay=0, verify_return_delay=0)


@pytest.fixture
async def state(shop, client_config):
    client = httpx.AsyncClient(transport=httpx.MockTransport(shop), base_url="http://shop.test")
    app_state = AppState(client_config, client=client)
    await app_state.catalog.load()
    app_state.session.login(shop.token)
    yield app_state
    await client.aclose()
