# /routers/orders.py
from fastapi import APIRouter, Depends, HTTPException, Query
from core.config import DELIVERY_FEE
from core.dependencies import get_current_user, verify_admin
from core.payments import HostedPaymentGateway, PaymentGatewayError, get_payment_gateway
from schemas.order import OrderCreate, OrderStatusUpdate, ORDER_STATUSES, TERMINAL_STATUSES
from db import db
from datetime import datetime, timezone
from typing import Optional
import logging
import uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/order", tags=["Orders"])

def to_out(doc: dict) -> dict:
    return {**doc, "_id": str(doc["_id"])}

async def _build_order(payload: OrderCreate, user_id: str, payment_method: str) -> dict:
    if not payload.items:
        raise HTTPException(status_code=400, detail="Order has no items")

    items = []
    subtotal = 0.0
    for line in payload.items:
        product = await db.products.find_one({"_id": line.product_id})
        if not product:
            raise HTTPException(status_code=404, detail=f"Product {line.product_id} not found")

        # name and price come from the DB; the client's copy is only a hint
        unit_price = float(product["price"])
        items.append({
            "productId": line.product_id,
            "name": product.get("name", line.name),
            "price": unit_price,
            "image": list(product.get("image") or []),
            "size": line.size,
            "quantity": line.quantity,
        })
        subtotal += unit_price * line.quantity

    amount = round(subtotal + DELIVERY_FEE, 2)
    if abs(amount - payload.amount) > 0.005:
        logger.warning("order total from client %.2f replaced by %.2f", payload.amount, amount)

    return {
        "_id": str(uuid.uuid4()),
        "userId": user_id,
        "items": items,
        "address": payload.address.model_dump(by_alias=True),
        "amount": amount,
        "status": "Order Placed",
        "paymentMethod": payment_method,
        "payment": False,
        "date": datetime.now(timezone.utc),
    }

async def _empty_cart(user_id: str) -> None:
    await db.carts.update_one(
        {"userId": user_id},
        {"$set": {"items": [], "updatedAt": datetime.now(timezone.utc)}},
    )

# POST /order/place - cash on delivery
@router.post("/place")
async def place_order(payload: OrderCreate, current_user: dict = Depends(get_current_user)):
    order = await _build_order(payload, current_user["_id"], "COD")
    await db.orders.insert_one(order)
    await _empty_cart(current_user["_id"])
    logger.info("order %s placed (COD) by %s", order["_id"], current_user["_id"])
    return {"success": True, "message": "Order placed", "order": to_out(order)}

# POST /order/hostedpayment - create an unpaid order and hand back the payment page
@router.post("/hostedpayment")
async def place_order_hosted(
    payload: OrderCreate,
    current_user: dict = Depends(get_current_user),
    gateway: HostedPaymentGateway = Depends(get_payment_gateway),
):
    order = await _build_order(payload, current_user["_id"], "Stripe")
    try:
        session = await gateway.create_session(order["_id"], order["amount"])
    except PaymentGatewayError:
        raise HTTPException(status_code=502, detail="Failed to initialize payment")

    order["paymentInfo"] = {"id": session["id"], "status": "open"}
    await db.orders.insert_one(order)
    logger.info("order %s awaiting hosted payment (session %s)", order["_id"], session["id"])
    return {"success": True, "orderId": order["_id"], "redirectUrl": session["url"]}

# GET /order/verify?orderId=...&success=... - callback from the hosted payment page
@router.get("/verify")
async def verify_payment(
    order_id: str = Query(..., alias="orderId"),
    success: str = Query("false"),
    current_user: dict = Depends(get_current_user),
    gateway: HostedPaymentGateway = Depends(get_payment_gateway),
):
    order = await db.orders.find_one({"_id": order_id, "userId": current_user["_id"]})
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.get("paymentMethod") != "Stripe":
        raise HTTPException(status_code=400, detail="Order is not paid online")
    if order.get("payment"):
        return {"success": True, "message": "Payment successful"}

    paid = False
    session_id = (order.get("paymentInfo") or {}).get("id")
    if success == "true" and session_id:
        # only the provider's record marks an order paid
        try:
            paid = await gateway.is_paid(session_id)
        except PaymentGatewayError:
            raise HTTPException(status_code=502, detail="Could not reach the payment gateway")

    if paid:
        await db.orders.update_one(
            {"_id": order_id},
            {"$set": {"payment": True, "paymentInfo.status": "paid"}},
        )
        await _empty_cart(current_user["_id"])
        return {"success": True, "message": "Payment successful"}

    await db.orders.delete_one({"_id": order_id})
    logger.warning("hosted payment failed for order %s", order_id)
    return {"success": False, "message": "Payment not successful"}

# GET /order/userorders - order history of the current user
@router.get("/userorders")
async def list_user_orders(current_user: dict = Depends(get_current_user)):
    orders = await db.orders.find({"userId": current_user["_id"]}).sort("date", -1).to_list(100)
    return {"success": True, "orders": [to_out(o) for o in orders]}

# GET /order/list - every order (admin)
@router.get("/list")
async def list_all_orders(
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: dict = Depends(verify_admin),
):
    match = {"status": status} if status else {}
    skip = (page - 1) * limit
    total = await db.orders.count_documents(match)
    orders = await db.orders.find(match).sort("date", -1).skip(skip).limit(limit).to_list(limit)
    return {"success": True, "orders": [to_out(o) for o in orders], "total": total, "page": page, "limit": limit}

# PATCH /order/status/{order_id} - move an order along its lifecycle (admin)
@router.patch("/status/{order_id}")
async def update_order_status(
    order_id: str,
    data: OrderStatusUpdate,
    current_user: dict = Depends(verify_admin),
):
    order = await db.orders.find_one({"_id": order_id})
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    old_status = order.get("status", "Order Placed")
    if old_status == data.status:
        return {"success": True, "message": "Status unchanged", "order": to_out(order)}
    if old_status in TERMINAL_STATUSES:
        raise HTTPException(status_code=400, detail=f"Order is already {old_status}")
    # orders only move forward; Cancelled is reachable from any open status
    moves_back = (
        old_status in ORDER_STATUSES
        and ORDER_STATUSES.index(data.status) < ORDER_STATUSES.index(old_status)
    )
    if data.status != "Cancelled" and moves_back:
        raise HTTPException(status_code=400, detail=f"Cannot move order from {old_status} to {data.status}")

    await db.orders.update_one({"_id": order_id}, {"$set": {"status": data.status}})
    return {"success": True, "message": "Order status updated", "order": to_out({**order, "status": data.status})}
