from conftest import bearer


async def test_cart_requires_bearer_token(http):
    resp = await http.get("/api/cart")
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Not Authorized. Please log in again."}


async def test_garbage_token_is_rejected(http):
    resp = await http.get("/api/cart", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401
    assert resp.json()["success"] is False


async def test_empty_cart_before_first_add(http, user):
    resp = await http.get("/api/cart", headers=bearer(user))
    assert resp.status_code == 200
    assert resp.json()["cart"] == {"items": []}


async def test_add_replaces_quantity_for_same_product_and_size(http, user):
    await http.post("/api/cart/items", json={"productId": "p1", "quantity": 2, "size": "M"}, headers=bearer(user))
    resp = await http.post("/api/cart/items", json={"productId": "p1", "quantity": 5, "size": "M"}, headers=bearer(user))

    assert resp.status_code == 200
    assert resp.json()["cart"]["items"] == [{"productId": "p1", "quantity": 5, "size": "M"}]


async def test_add_keeps_sizes_apart_and_defaults_size(http, user):
    await http.post("/api/cart/items", json={"productId": "p1", "quantity": 1, "size": "S"}, headers=bearer(user))
    resp = await http.post("/api/cart/items", json={"productId": "p1", "quantity": 3}, headers=bearer(user))

    items = resp.json()["cart"]["items"]
    assert {(i["size"], i["quantity"]) for i in items} == {("S", 1), ("M", 3)}


async def test_add_unknown_product_is_404(http, user):
    resp = await http.post("/api/cart/items", json={"productId": "nope", "quantity": 1, "size": "M"}, headers=bearer(user))
    assert resp.status_code == 404
    assert resp.json()["message"] == "Product not found"


async def test_add_rejects_zero_quantity(http, user):
    resp = await http.post("/api/cart/items", json={"productId": "p1", "quantity": 0, "size": "M"}, headers=bearer(user))
    assert resp.status_code == 422
    assert resp.json()["success"] is False


async def test_update_changes_existing_line(http, user):
    await http.post("/api/cart/items", json={"productId": "p2", "quantity": 1, "size": "L"}, headers=bearer(user))
    resp = await http.put("/api/cart", json={"productId": "p2", "quantity": 4, "size": "L"}, headers=bearer(user))

    assert resp.json()["cart"]["items"] == [{"productId": "p2", "quantity": 4, "size": "L"}]


async def test_update_without_cart_or_line_is_404(http, user):
    resp = await http.put("/api/cart", json={"productId": "p2", "quantity": 4, "size": "L"}, headers=bearer(user))
    assert resp.status_code == 404
    assert resp.json()["message"] == "Cart not found"

    await http.post("/api/cart/items", json={"productId": "p1", "quantity": 1, "size": "M"}, headers=bearer(user))
    resp = await http.put("/api/cart", json={"productId": "p2", "quantity": 4, "size": "L"}, headers=bearer(user))
    assert resp.status_code == 404
    assert resp.json()["message"] == "Item not found in cart"


async def test_remove_drops_every_size_of_the_product(http, user):
    for size in ("S", "M"):
        await http.post("/api/cart/items", json={"productId": "p1", "quantity": 1, "size": size}, headers=bearer(user))
    await http.post("/api/cart/items", json={"productId": "p2", "quantity": 2, "size": "L"}, headers=bearer(user))

    resp = await http.delete("/api/cart/p1", headers=bearer(user))
    assert resp.json()["cart"]["items"] == [{"productId": "p2", "quantity": 2, "size": "L"}]


async def test_clear_empties_cart(http, user):
    await http.post("/api/cart/items", json={"productId": "p1", "quantity": 1, "size": "M"}, headers=bearer(user))
    resp = await http.delete("/api/cart", headers=bearer(user))
    assert resp.json() == {"success": True, "message": "Cart cleared successfully"}

    resp = await http.get("/api/cart", headers=bearer(user))
    assert resp.json()["cart"]["items"] == []


async def test_carts_are_per_user(http, seeded_db, user):
    from conftest import make_user

    other = await make_user(seeded_db)
    await http.post("/api/cart/items", json={"productId": "p1", "quantity": 1, "size": "M"}, headers=bearer(user))

    resp = await http.get("/api/cart", headers=bearer(other))
    assert resp.json()["cart"]["items"] == []
