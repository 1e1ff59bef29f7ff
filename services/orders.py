"""Shop orders and their payments. Gateway calls happen elsewhere; this is bookkeeping."""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Order, OrderItem, Partner, Payment
from models.enums import OrderStatus, PaymentStatus
from schemas.order import OrderCreate, PaymentCreate
from services import commissions
from services.errors import DomainError, NotFound
from services.notifications import notify

logger = logging.getLogger(__name__)


def _order_number(now: datetime) -> str:
    return f"ORD-{now:%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"


async def create_order(session: AsyncSession, body: OrderCreate, ddp: Optional[Partner] = None) -> Order:
    now = datetime.now(timezone.utc)
    order = Order(
        id=f"ord-{uuid.uuid4().hex[:12]}",
        order_number=_order_number(now),
        ddp_id=ddp.id if ddp else None,
        customer_name=body.customer_name,
        customer_phone=body.customer_phone,
        customer_email=body.customer_email,
        shipping_address=body.shipping_address,
        status=OrderStatus.PENDING.value,
        created_at=now,
        updated_at=now,
    )
    total = 0.0
    for item in body.items:
        line_total = item.unit_price * item.quantity
        total += line_total
        order.items.append(OrderItem(
            id=f"oit-{uuid.uuid4().hex[:12]}",
            product_name=item.product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=line_total,
        ))
    order.total_amount = total
    session.add(order)
    await session.flush()
    logger.info("Order %s created (%d items, Rs %s)", order.order_number, len(order.items), total)
    return order


async def get_order(session: AsyncSession, order_id: str) -> Order:
    result = await session.execute(select(Order).where(Order.id == order_id))
    order = result.scalar_one_or_none()
    if order is None:
        raise NotFound("Order")
    return order


async def update_order_status(session: AsyncSession, order_id: str, status: str) -> Order:
    """Set an order's status; the move to paid books inverter commissions."""
    order = await get_order(session, order_id)
    if order.status == OrderStatus.CANCELLED.value and status != OrderStatus.CANCELLED.value:
        raise DomainError("Cancelled orders cannot be reopened")
    order.status = OrderStatus(status).value
    order.updated_at = datetime.now(timezone.utc)
    await session.flush()
    logger.info("Order %s status -> %s", order.order_number, order.status)
    if order.status == OrderStatus.PAID.value:
        await commissions.create_inverter_commissions_for_order(session, order)
    await notify(
        session,
        order.ddp_id,
        title="Order updated",
        message=f"Order {order.order_number} is now {order.status}",
        type="order",
        link=f"/orders/{order.id}",
    )
    return order


async def create_payment(session: AsyncSession, order: Order, body: PaymentCreate) -> Payment:
    payment = Payment(
        id=f"pmt-{uuid.uuid4().hex[:12]}",
        order_id=order.id,
        amount=body.amount or order.total_amount,
        method=body.method,
        gateway_reference=body.gateway_reference,
        status=PaymentStatus.PENDING.value,
    )
    session.add(payment)
    await session.flush()
    return payment


async def update_payment_status(session: AsyncSession, payment_id: str, status: str) -> Payment:
    """A captured payment marks its pending order paid."""
    payment = await session.get(Payment, payment_id)
    if payment is None:
        raise NotFound("Payment")
    payment.status = PaymentStatus(status).value
    if payment.status == PaymentStatus.CAPTURED.value:
        payment.paid_at = datetime.now(timezone.utc)
    await session.flush()
    logger.info("Payment %s status -> %s", payment.id, payment.status)
    if payment.status == PaymentStatus.CAPTURED.value:
        order = await get_order(session, payment.order_id)
        if order.status == OrderStatus.PENDING.value:
            await update_order_status(session, order.id, OrderStatus.PAID.value)
    return payment
