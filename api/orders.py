from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_partner, http_error, require_roles
from database import get_db
from models import Order, Partner, Payment
from models.enums import Role
from schemas.order import OrderCreate, OrderStatusUpdate, PaymentCreate, PaymentStatusUpdate
from services import orders
from services.errors import SERVICE_ERRORS
from utils.case import iso

router = APIRouter(prefix="/api", tags=["orders"])

_admin = require_roles(Role.ADMIN)


def order_to_response(o: Order) -> dict[str, Any]:
    return {
        "id": o.id,
        "orderNumber": o.order_number,
        "ddpId": o.ddp_id,
        "customerName": o.customer_name,
        "customerPhone": o.customer_phone,
        "customerEmail": o.customer_email,
        "shippingAddress": o.shipping_address,
        "totalAmount": o.total_amount,
        "status": o.status,
        "items": [
            {
                "id": i.id,
                "productName": i.product_name,
                "quantity": i.quantity,
                "unitPrice": i.unit_price,
                "totalPrice": i.total_price,
            }
            for i in o.items
        ],
        "createdAt": iso(o.created_at),
    }


def payment_to_response(p: Payment) -> dict[str, Any]:
    return {
        "id": p.id,
        "orderId": p.order_id,
        "amount": p.amount,
        "method": p.method,
        "gatewayReference": p.gateway_reference,
        "status": p.status,
        "paidAt": iso(p.paid_at),
        "createdAt": iso(p.created_at),
    }


async def _visible_order(db: AsyncSession, order_id: str, partner: Partner) -> Order:
    try:
        order = await orders.get_order(db, order_id)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    if partner.role != Role.ADMIN.value and order.ddp_id != partner.id:
        raise HTTPException(status_code=403, detail="Access denied")
    return order


@router.get("/orders")
async def list_orders(
    status: Optional[str] = None,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    """Own orders; admins see every order."""
    stmt = select(Order).order_by(Order.created_at.desc())
    if partner.role != Role.ADMIN.value:
        stmt = stmt.where(Order.ddp_id == partner.id)
    if status:
        stmt = stmt.where(Order.status == status)
    result = await db.execute(stmt)
    return [order_to_response(o) for o in result.scalars().all()]


@router.post("/orders", status_code=201)
async def create_order(
    body: OrderCreate,
    partner: Partner = Depends(require_roles(Role.DDP)),
    db: AsyncSession = Depends(get_db),
):
    order = await orders.create_order(db, body, ddp=partner)
    return order_to_response(order)


@router.get("/orders/{order_id}")
async def get_order(
    order_id: str,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    return order_to_response(await _visible_order(db, order_id, partner))


@router.patch("/orders/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    _: Partner = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        order = await orders.update_order_status(db, order_id, body.status.value)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return order_to_response(order)


@router.post("/orders/{order_id}/payments", status_code=201)
async def create_payment(
    order_id: str,
    body: PaymentCreate,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    order = await _visible_order(db, order_id, partner)
    payment = await orders.create_payment(db, order, body)
    return payment_to_response(payment)


@router.get("/payments")
async def list_payments(
    status: Optional[str] = None,
    _: Partner = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(Payment).order_by(Payment.created_at.desc())
    if status:
        stmt = stmt.where(Payment.status == status)
    result = await db.execute(stmt)
    return [payment_to_response(p) for p in result.scalars().all()]


@router.patch("/payments/{payment_id}/status")
async def update_payment_status(
    payment_id: str,
    body: PaymentStatusUpdate,
    _: Partner = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        payment = await orders.update_payment_status(db, payment_id, body.status.value)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return payment_to_response(payment)
