"""Customer lifecycle transitions: forward, one step at a time."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from models import Customer, Partner
from models.enums import CUSTOMER_STATUS_PREDECESSOR, CustomerStatus, next_customer_status
from services import commissions, referrals
from services.errors import InvalidStatusTransition
from services.notifications import notify

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    CustomerStatus.PENDING: "Pending",
    CustomerStatus.VERIFIED: "Verified",
    CustomerStatus.APPROVED: "Approved",
    CustomerStatus.INSTALLATION_SCHEDULED: "Installation Scheduled",
    CustomerStatus.COMPLETED: "Completed",
}


def validate_transition(current: str, new: str) -> CustomerStatus:
    """Return the target status if it is the immediate successor of `current`."""
    statuses = []
    for value in (current, new):
        try:
            statuses.append(CustomerStatus(value))
        except ValueError:
            raise InvalidStatusTransition(f"Unknown customer status: {value}")
    current_status, new_status = statuses
    if CUSTOMER_STATUS_PREDECESSOR.get(new_status) is not current_status:
        expected = next_customer_status(current_status)
        if expected is None:
            raise InvalidStatusTransition(f"Customer is already {current_status.value}")
        raise InvalidStatusTransition(
            f"Cannot move customer from {current_status.value} to {new_status.value}; next status is {expected.value}"
        )
    return new_status


async def update_customer_status(
    session: AsyncSession,
    customer: Customer,
    new_status: str,
    actor: Optional[Partner] = None,
) -> Customer:
    target = validate_transition(customer.status, new_status)
    old = customer.status
    customer.status = target.value
    customer.updated_at = datetime.now(timezone.utc)
    await session.flush()
    logger.info(
        "Customer %s status %s -> %s by %s",
        customer.id, old, target.value, actor.id if actor else "system",
    )

    await notify(
        session,
        customer.ddp_id,
        title="Customer status updated",
        message=f"{customer.name} is now {STATUS_LABELS[target]}",
        type="status",
        link=f"/customers/{customer.id}",
    )

    if target is CustomerStatus.COMPLETED:
        await commissions.create_commissions_for_customer(session, customer)
        await referrals.check_partner_referral_conversion(session, customer.ddp_id)
    return customer
