"""
Commission and payout bookkeeping.

Rows are created as side effects of installation completion and paid orders; every
creator here is idempotent so repeated triggers never double-book.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Commission, Customer, Order, Partner, Payout
from models.enums import (
    COMMISSION_STATUS_FLOW,
    CommissionSource,
    CommissionStatus,
    CustomerSource,
    OrderStatus,
    PanelType,
    PartnerType,
    PayoutStatus,
    Role,
)
from schemas.commission import CommissionSummary
from services import referrals
from services.commission_rates import (
    CUSTOMER_REFERRAL_MIN_KW,
    commission_for,
    inverter_commission,
    round_capacity,
)
from services.errors import DomainError, InvalidStatusTransition, NotFound
from services.notifications import notify

logger = logging.getLogger(__name__)

INVERTER_PRODUCT_MARKER = "sunpunch"


async def _existing(
    session: AsyncSession,
    partner_id: str,
    partner_type: str,
    customer_id: Optional[str] = None,
    order_id: Optional[str] = None,
) -> Optional[Commission]:
    stmt = select(Commission).where(Commission.partner_id == partner_id, Commission.partner_type == partner_type)
    if customer_id is not None:
        stmt = stmt.where(Commission.customer_id == customer_id)
    if order_id is not None:
        stmt = stmt.where(Commission.order_id == order_id)
    result = await session.execute(stmt)
    return result.scalars().first()


async def _book(
    session: AsyncSession,
    partner_id: str,
    partner_type: str,
    amount: float,
    source: str,
    customer: Optional[Customer] = None,
    order: Optional[Order] = None,
    capacity_kw: Optional[int] = None,
    notes: Optional[str] = None,
) -> Commission:
    commission = Commission(
        id=f"com-{uuid.uuid4().hex[:12]}",
        partner_id=partner_id,
        partner_type=partner_type,
        customer_id=customer.id if customer else None,
        order_id=order.id if order else None,
        source=source,
        capacity_kw=capacity_kw,
        panel_type=customer.panel_type if customer else None,
        commission_amount=amount,
        status=CommissionStatus.PENDING.value,
        notes=notes,
    )
    session.add(commission)
    await session.flush()
    logger.info(
        "Commission %s booked: %s %s Rs %s (%s)",
        commission.id, partner_type, partner_id, amount, source,
    )
    subject = customer.name if customer else (order.order_number if order else "")
    await notify(
        session,
        partner_id,
        title="Commission earned",
        message=f"Rs {amount:,.0f} {source.replace('_', ' ')} commission for {subject}",
        type="commission",
        link="/commissions",
    )
    return commission


async def create_commissions_for_customer(session: AsyncSession, customer: Customer) -> list[Commission]:
    """
    Book installation commissions for a completed customer.

    Website sign-ups earn nothing. A customer referred by a customer partner earns
    that partner the flat referral amount instead of DDP/BDP commissions.
    """
    if customer.source == CustomerSource.WEBSITE_DIRECT.value:
        return []
    capacity = round_capacity(customer.proposed_capacity)
    if capacity <= 0:
        return []
    panel_type = customer.panel_type or PanelType.DCR.value

    if customer.referrer_customer_id:
        return await _book_customer_partner_referral(session, customer, capacity)

    if not customer.ddp_id:
        return []
    ddp = await session.get(Partner, customer.ddp_id)
    if ddp is None:
        return []

    booked: list[Commission] = []
    ddp_row = await _existing(session, ddp.id, PartnerType.DDP.value, customer_id=customer.id)
    if ddp_row is None:
        ddp_row = await _book(
            session,
            ddp.id,
            PartnerType.DDP.value,
            commission_for(capacity, panel_type, PartnerType.DDP),
            CommissionSource.INSTALLATION.value,
            customer=customer,
            capacity_kw=capacity,
        )
    booked.append(ddp_row)

    if ddp.parent_id:
        bdp_row = await _existing(session, ddp.parent_id, PartnerType.BDP.value, customer_id=customer.id)
        if bdp_row is None:
            bdp_row = await _book(
                session,
                ddp.parent_id,
                PartnerType.BDP.value,
                commission_for(capacity, panel_type, PartnerType.BDP),
                CommissionSource.INSTALLATION.value,
                customer=customer,
                capacity_kw=capacity,
            )
        booked.append(bdp_row)
    return booked


async def _book_customer_partner_referral(session: AsyncSession, customer: Customer, capacity: int) -> list[Commission]:
    result = await session.execute(
        select(Partner).where(
            Partner.linked_customer_id == customer.referrer_customer_id,
            Partner.role == Role.CUSTOMER_PARTNER.value,
        )
    )
    referrer = result.scalars().first()
    if referrer is None or capacity < CUSTOMER_REFERRAL_MIN_KW:
        return []
    row = await _existing(session, referrer.id, PartnerType.CUSTOMER_PARTNER.value, customer_id=customer.id)
    if row is None:
        row = await _book(
            session,
            referrer.id,
            PartnerType.CUSTOMER_PARTNER.value,
            commission_for(capacity, customer.panel_type, PartnerType.CUSTOMER_PARTNER),
            CommissionSource.CUSTOMER_REFERRAL.value,
            customer=customer,
            capacity_kw=capacity,
            notes=f"Referral reward for {customer.name}",
        )
        await referrals.convert_customer_partner_referral(session, referrer, customer)
    return [row]


async def create_inverter_commissions_for_order(session: AsyncSession, order: Order) -> list[Commission]:
    """Book per-unit inverter commissions for the order's DDP and their BDP once the order is paid."""
    if order.status != OrderStatus.PAID.value or not order.ddp_id:
        return []
    units = sum(item.quantity for item in order.items if INVERTER_PRODUCT_MARKER in (item.product_name or "").lower())
    if units <= 0:
        return []
    ddp = await session.get(Partner, order.ddp_id)
    if ddp is None:
        return []

    booked: list[Commission] = []
    recipients = [(ddp.id, PartnerType.DDP)]
    if ddp.parent_id:
        recipients.append((ddp.parent_id, PartnerType.BDP))
    for partner_id, partner_type in recipients:
        row = await _existing(session, partner_id, partner_type.value, order_id=order.id)
        if row is None:
            row = await _book(
                session,
                partner_id,
                partner_type.value,
                inverter_commission(partner_type, units),
                CommissionSource.INVERTER.value,
                order=order,
                notes=f"{units} inverter unit(s) on order {order.order_number}",
            )
        booked.append(row)
    return booked


async def update_commission_status(session: AsyncSession, commission_id: str, status: str) -> Commission:
    """Move a commission forward along pending -> approved -> paid."""
    commission = await session.get(Commission, commission_id)
    if commission is None:
        raise NotFound("Commission")
    current = CommissionStatus(commission.status)
    new = CommissionStatus(status)
    if COMMISSION_STATUS_FLOW.index(new) <= COMMISSION_STATUS_FLOW.index(current):
        raise InvalidStatusTransition(f"Cannot move commission from {current.value} to {new.value}")
    commission.status = new.value
    if new is CommissionStatus.PAID:
        commission.paid_at = datetime.now(timezone.utc)
    await session.flush()
    logger.info("Commission %s status -> %s", commission.id, status)
    return commission


def commission_summary(commissions: Iterable[Commission], now: Optional[datetime] = None) -> CommissionSummary:
    now = now or datetime.now(timezone.utc)
    summary = CommissionSummary()
    by_source = {
        CommissionSource.INSTALLATION.value: "installation_earnings",
        CommissionSource.INVERTER.value: "inverter_earnings",
        CommissionSource.BONUS.value: "bonus_earnings",
        CommissionSource.CUSTOMER_REFERRAL.value: "customer_referral_earnings",
    }
    for c in commissions:
        amount = c.commission_amount or 0
        summary.total_earned += amount
        if c.status in (CommissionStatus.PENDING.value, CommissionStatus.APPROVED.value):
            summary.pending_amount += amount
        elif c.status == CommissionStatus.PAID.value:
            summary.paid_amount += amount
        if c.source == CommissionSource.INSTALLATION.value:
            summary.total_installations += 1
        field = by_source.get(c.source)
        if field:
            setattr(summary, field, getattr(summary, field) + amount)
        created = c.created_at
        if created is not None:
            if created.tzinfo is None:
                created = created.replace(tzinfo=timezone.utc)
            if (created.year, created.month) == (now.year, now.month):
                summary.current_month_earnings += amount
    return summary


async def record_payout(
    session: AsyncSession,
    commission_id: str,
    mode: str,
    utr: Optional[str] = None,
) -> Payout:
    """Record a completed bank transfer for an approved commission and mark it paid."""
    commission = await session.get(Commission, commission_id)
    if commission is None:
        raise NotFound("Commission")
    if commission.status != CommissionStatus.APPROVED.value:
        raise DomainError("Only approved commissions can be paid out")
    now = datetime.now(timezone.utc)
    payout = Payout(
        id=f"pay-{uuid.uuid4().hex[:12]}",
        partner_id=commission.partner_id,
        commission_id=commission.id,
        amount=commission.commission_amount,
        mode=getattr(mode, "value", mode),
        utr=utr,
        status=PayoutStatus.COMPLETED.value,
        processed_at=now,
    )
    session.add(payout)
    commission.status = CommissionStatus.PAID.value
    commission.paid_at = now
    await session.flush()
    await notify(
        session,
        commission.partner_id,
        title="Commission paid",
        message=f"Rs {commission.commission_amount:,.0f} paid via {payout.mode}",
        type="payout",
        link="/commissions",
    )
    logger.info("Payout %s recorded for commission %s", payout.id, commission.id)
    return payout
