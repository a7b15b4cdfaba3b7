from fastapi import APIRouter, Depends, HTTPException
from core.dependencies import get_current_user
from schemas.cart import CartItem, CartUpdate, DEFAULT_SIZE
from db import db
from datetime import datetime, timezone
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cart", tags=["Cart"])

def normalize_size(val: Optional[str]) -> str:
    """Missing sizes fall back to the default size"""
    return DEFAULT_SIZE if not val else str(val)

def find_cart_item_index(items: list, product_id: str, size: Optional[str]) -> int:
    """Find index of cart item by productId and size"""
    normalized_size = normalize_size(size)
    for i, item in enumerate(items):
        if item.get("productId") == product_id and normalize_size(item.get("size")) == normalized_size:
            return i
    return -1

def cart_out(items: list) -> dict:
    return {
        "items": [
            {
                "productId": item["productId"],
                "quantity": int(item["quantity"]),
                "size": normalize_size(item.get("size")),
            }
            for item in items
            if item.get("productId") and item.get("quantity", 0) > 0
        ]
    }

async def save_items(user_id: str, items: list) -> None:
    await db.carts.update_one(
        {"userId": user_id},
        {"$set": {"items": items, "updatedAt": datetime.now(timezone.utc)},
         "$setOnInsert": {"createdAt": datetime.now(timezone.utc)}},
        upsert=True,
    )

# GET /cart - current cart
@router.get("")
async def get_cart(current_user: dict = Depends(get_current_user)):
    cart = await db.carts.find_one({"userId": current_user["_id"]})
    if not cart:
        return {"success": True, "message": "Cart is empty", "cart": {"items": []}}
    return {"success": True, "cart": cart_out(cart.get("items", []))}

# POST /cart/items - add or replace a (product, size) line
@router.post("/items")
async def add_to_cart(item: CartItem, current_user: dict = Depends(get_current_user)):
    product = await db.products.find_one({"_id": item.product_id})
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    user_id = current_user["_id"]
    cart = await db.carts.find_one({"userId": user_id})
    items = cart.get("items", []) if cart else []

    size = normalize_size(item.size)
    existing_index = find_cart_item_index(items, item.product_id, size)
    if existing_index >= 0:
        # overwrite, not increment
        items[existing_index]["quantity"] = item.quantity
    else:
        items.append({"productId": item.product_id, "quantity": item.quantity, "size": size})

    await save_items(user_id, items)
    logger.info("cart %s: set %s/%s to %d", user_id, item.product_id, size, item.quantity)
    return {"success": True, "message": "Item added to cart successfully", "cart": cart_out(items)}

# PUT /cart - change the quantity of an existing line
@router.put("")
async def update_cart(data: CartUpdate, current_user: dict = Depends(get_current_user)):
    user_id = current_user["_id"]
    cart = await db.carts.find_one({"userId": user_id})
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")

    items = cart.get("items", [])
    idx = find_cart_item_index(items, data.product_id, data.size)
    if idx == -1:
        raise HTTPException(status_code=404, detail="Item not found in cart")

    items[idx]["quantity"] = data.quantity
    await save_items(user_id, items)
    return {"success": True, "message": "Cart item updated successfully", "cart": cart_out(items)}

# DELETE /cart - empty the cart
@router.delete("")
async def clear_cart(current_user: dict = Depends(get_current_user)):
    await save_items(current_user["_id"], [])
    return {"success": True, "message": "Cart cleared successfully"}

# DELETE /cart/{product_id} - drop every size of a product
@router.delete("/{product_id}")
async def remove_from_cart(product_id: str, current_user: dict = Depends(get_current_user)):
    user_id = current_user["_id"]
    cart = await db.carts.find_one({"userId": user_id})
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")

    items = [it for it in cart.get("items", []) if it.get("productId") != product_id]
    await save_items(user_id, items)
    return {"success": True, "message": "Item removed from cart successfully", "cart": cart_out(items)}
