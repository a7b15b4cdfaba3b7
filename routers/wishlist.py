from fastapi import APIRouter, Depends, HTTPException
from core.dependencies import get_current_user
from schemas.wishlist import WishlistToggle
from db import db
from datetime import datetime, timezone

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])

def wishlist_out(items: list) -> dict:
    return {"items": [{"product": it["product"], "addedAt": it.get("addedAt")} for it in items]}

@router.get("")
async def get_wishlist(current_user: dict = Depends(get_current_user)):
    wishlist = await db.wishlists.find_one({"userId": current_user["_id"]})
    return {"success": True, "wishlist": wishlist_out(wishlist.get("items", []) if wishlist else [])}

# POST /wishlist - membership toggle
@router.post("")
async def toggle_wishlist(data: WishlistToggle, current_user: dict = Depends(get_current_user)):
    if not await db.products.find_one({"_id": data.productId}):
        raise HTTPException(status_code=404, detail="Product not found")

    wishlist = await db.wishlists.find_one({"userId": current_user["_id"]})
    items = wishlist.get("items", []) if wishlist else []
    if any(it["product"] == data.productId for it in items):
        items = [it for it in items if it["product"] != data.productId]
    else:
        items.append({"product": data.productId, "addedAt": datetime.now(timezone.utc)})

    await db.wishlists.update_one(
        {"userId": current_user["_id"]},
        {"$set": {"items": items, "updatedAt": datetime.now(timezone.utc)}},
        upsert=True,
    )
    return {"success": True, "message": "Wishlist updated successfully", "wishlist": wishlist_out(items)}
