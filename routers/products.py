from fastapi import APIRouter, Depends, HTTPException, Query
from schemas.product import ProductCreate, ProductRemove, ProductUpdate
from core.dependencies import verify_admin
from db import db
from datetime import datetime, timezone
import uuid
from typing import Optional

router = APIRouter(prefix="/product", tags=["Products"])

def to_out(doc: dict) -> dict:
    return {**doc, "_id": str(doc["_id"])}

@router.get("/list")
async def list_products(
    category: Optional[str] = None,
    sub_category: Optional[str] = Query(None, alias="subCategory"),
    bestseller: Optional[bool] = None,
):
    match: dict = {}
    if category:
        match["category"] = category
    if sub_category:
        match["subCategory"] = sub_category
    if bestseller is not None:
        match["bestseller"] = bestseller

    products = await db.products.find(match).sort("date", -1).to_list(1000)
    return {"success": True, "products": [to_out(p) for p in products]}

@router.get("/{product_id}")
async def get_product(product_id: str):
    if not (doc := await db.products.find_one({"_id": product_id})):
        raise HTTPException(status_code=404, detail="Product not found")
    return {"success": True, "product": to_out(doc)}

@router.post("/add")
async def add_product(product: ProductCreate, current_user: dict = Depends(verify_admin)):
    doc = {
        "_id": str(uuid.uuid4()),
        **product.model_dump(by_alias=True),
        "date": datetime.now(timezone.utc),
    }
    await db.products.insert_one(doc)
    return {"success": True, "message": "Product added", "product": to_out(doc)}

@router.post("/remove")
async def remove_product(data: ProductRemove, current_user: dict = Depends(verify_admin)):
    result = await db.products.delete_one({"_id": data.id})
    if result.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"success": True, "message": "Product removed"}

@router.put("/{product_id}")
async def update_product(product_id: str, update: ProductUpdate, current_user: dict = Depends(verify_admin)):
    existing = await db.products.find_one({"_id": product_id})
    if not existing:
        raise HTTPException(status_code=404, detail="Product not found")

    update_data = update.model_dump(by_alias=True, exclude_none=True)
    if not update_data:
        return {"success": True, "message": "Nothing to update", "product": to_out(existing)}

    await db.products.update_one({"_id": product_id}, {"$set": update_data})
    return {"success": True, "message": "Product updated successfully", "product": to_out({**existing, **update_data})}
