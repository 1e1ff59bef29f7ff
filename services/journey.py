"""
Customer installation journey: the fixed milestone checklist per customer.

Milestones are independent flags; completing a later step before an earlier one is
allowed. Progress and the "current" step are derived from template order.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Customer, Milestone, Partner
from models.enums import (
    APPLICATION_SUBMITTED,
    FILE_SUBMISSION,
    INSTALLATION_COMPLETE,
    INSTALLATION_MILESTONES,
    MILESTONE_BY_KEY,
    JourneyStage,
    MilestoneStatus,
    VendorType,
)
from services import commissions, vendors
from services.errors import Conflict, DomainError, NotFound
from services.notifications import notify

logger = logging.getLogger(__name__)

BANK_LOAN_PROCESSING = "bank_loan_processing"


@dataclass(frozen=True)
class VendorStep:
    """Milestone that may hand work to a vendor as it is completed."""
    vendor_type: str
    job_role: str
    label: str
    default_note: str
    stage: str = JourneyStage.PRE_INSTALLATION.value


VENDOR_STEPS: dict[str, VendorStep] = {
    FILE_SUBMISSION: VendorStep(
        vendor_type=VendorType.DISCOM_NET_METERING.value,
        job_role="discom_net_metering",
        label="DISCOM net metering vendor",
        default_note="File submitted to PM Surya Ghar portal",
    ),
    BANK_LOAN_PROCESSING: VendorStep(
        vendor_type=VendorType.BANK_LOAN_LIAISON.value,
        job_role="bank_loan_facilitation",
        label="bank loan vendor",
        default_note="Bank loan file submitted for processing",
    ),
}


@dataclass
class JourneyProgress:
    completed: int
    total: int
    percent: float
    current_index: Optional[int]
    current_key: Optional[str]


async def initialize_milestones(session: AsyncSession, customer_id: str) -> list[Milestone]:
    """Return the customer's milestones, seeding the full template on first call."""
    existing = await list_milestones(session, customer_id)
    if existing:
        return existing

    now = datetime.now(timezone.utc)
    created: list[Milestone] = []
    for position, step in enumerate(INSTALLATION_MILESTONES):
        done = step.key == APPLICATION_SUBMITTED
        m = Milestone(
            id=f"mst-{uuid.uuid4().hex[:12]}",
            customer_id=customer_id,
            milestone=step.key,
            position=position,
            status=MilestoneStatus.COMPLETED.value if done else MilestoneStatus.PENDING.value,
            notes="Registration received" if done else None,
            completed_at=now if done else None,
            created_at=now,
        )
        session.add(m)
        created.append(m)
    await session.flush()
    logger.info("Seeded %d milestones for customer %s", len(created), customer_id)
    return created


async def list_milestones(session: AsyncSession, customer_id: str) -> list[Milestone]:
    result = await session.execute(
        select(Milestone).where(Milestone.customer_id == customer_id).order_by(Milestone.position)
    )
    return list(result.scalars().all())


def journey_progress(milestones: Sequence[Milestone]) -> JourneyProgress:
    total = len(INSTALLATION_MILESTONES)
    done_keys = {m.milestone for m in milestones if m.status == MilestoneStatus.COMPLETED.value}
    completed = sum(1 for step in INSTALLATION_MILESTONES if step.key in done_keys)
    current_index: Optional[int] = None
    for i, step in enumerate(INSTALLATION_MILESTONES):
        if step.key not in done_keys:
            current_index = i
            break
    return JourneyProgress(
        completed=completed,
        total=total,
        percent=round(completed / total * 100, 1),
        current_index=current_index,
        current_key=INSTALLATION_MILESTONES[current_index].key if current_index is not None else None,
    )


async def _load_milestone(session: AsyncSession, milestone_id: str) -> Milestone:
    milestone = await session.get(Milestone, milestone_id)
    if milestone is None:
        raise NotFound("Milestone")
    return milestone


async def start_milestone(session: AsyncSession, milestone_id: str) -> Milestone:
    milestone = await _load_milestone(session, milestone_id)
    if milestone.status != MilestoneStatus.PENDING.value:
        raise Conflict(f"Milestone is already {milestone.status}")
    milestone.status = MilestoneStatus.IN_PROGRESS.value
    await session.flush()
    return milestone


async def complete_milestone(
    session: AsyncSession,
    milestone_id: str,
    notes: Optional[str] = None,
    vendor_id: Optional[str] = None,
    actor: Optional[Partner] = None,
) -> Milestone:
    """
    Mark a milestone completed.

    For vendor steps (file submission, bank loan processing) an optional vendor is
    assigned as part of the same unit of work; every check runs before the first
    write, and the caller's transaction rolls both back on any later failure.
    """
    milestone = await _load_milestone(session, milestone_id)
    if milestone.status == MilestoneStatus.COMPLETED.value:
        raise Conflict("Milestone is already completed")

    vendor_step = VENDOR_STEPS.get(milestone.milestone)
    if vendor_id and vendor_step is None:
        raise DomainError(f"A vendor cannot be assigned when completing {milestone.milestone}")

    customer = await session.get(Customer, milestone.customer_id)
    if customer is None:
        raise NotFound("Customer")

    if vendor_id:
        await vendors.create_assignment(
            session,
            customer_id=customer.id,
            vendor_id=vendor_id,
            journey_stage=vendor_step.stage,
            job_role=vendor_step.job_role,
            notes=f"Assigned for {vendor_step.label} - {customer.name}",
            required_type=vendor_step.vendor_type,
        )

    milestone.status = MilestoneStatus.COMPLETED.value
    milestone.completed_at = datetime.now(timezone.utc)
    milestone.notes = notes or (vendor_step.default_note if vendor_step else None)
    await session.flush()
    logger.info(
        "Milestone %s completed for customer %s by %s%s",
        milestone.milestone,
        customer.id,
        actor.id if actor else "system",
        f" (vendor {vendor_id})" if vendor_id else "",
    )

    step = MILESTONE_BY_KEY.get(milestone.milestone)
    label = step.label if step else milestone.milestone
    await notify(
        session,
        customer.ddp_id,
        title="Milestone completed",
        message=f"{label} completed for {customer.name}",
        type="milestone",
        link=f"/customers/{customer.id}",
    )

    if milestone.milestone == INSTALLATION_COMPLETE:
        await commissions.create_commissions_for_customer(session, customer)

    return milestone
