"""
Vendor registry and customer-vendor assignments.
Assignments are grouped by journey stage only when read; nothing is stored per stage.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Customer, CustomerVendorAssignment, Vendor
from models.enums import (
    ASSIGNMENT_STATUS_FLOW,
    AssignmentStatus,
    JourneyStage,
    VendorStatus,
    VendorType,
)
from schemas.vendor import VendorRegistration
from services.errors import InvalidStatusTransition, NotFound, VendorNotAssignable

logger = logging.getLogger(__name__)


async def register_vendor(session: AsyncSession, body: VendorRegistration) -> Vendor:
    vendor = Vendor(
        id=f"vnd-{uuid.uuid4().hex[:12]}",
        name=body.name,
        vendor_type=body.vendor_type.value,
        contact_person=body.contact_person,
        phone=body.phone,
        email=body.email,
        address=body.address,
        state=body.state,
        district=body.district,
        gst_number=body.gst_number,
        status=VendorStatus.PENDING.value,
    )
    session.add(vendor)
    await session.flush()
    logger.info("Vendor registered: %s (%s, %s)", vendor.id, vendor.vendor_type, vendor.state)
    return vendor


async def list_vendors(
    session: AsyncSession,
    status: Optional[str] = None,
    vendor_type: Optional[str] = None,
    state: Optional[str] = None,
) -> list[Vendor]:
    stmt = select(Vendor).order_by(Vendor.created_at.desc(), Vendor.name)
    if status:
        stmt = stmt.where(Vendor.status == status)
    if vendor_type:
        stmt = stmt.where(Vendor.vendor_type == vendor_type)
    if state:
        stmt = stmt.where(Vendor.state == state)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def update_vendor_status(session: AsyncSession, vendor_id: str, status: str, notes: Optional[str] = None) -> Vendor:
    vendor = await session.get(Vendor, vendor_id)
    if vendor is None:
        raise NotFound("Vendor")
    vendor.status = status
    if notes is not None:
        vendor.notes = notes
    if status == VendorStatus.APPROVED.value and not vendor.vendor_code:
        vendor.vendor_code = f"VND-{uuid.uuid4().hex[:6].upper()}"
    await session.flush()
    logger.info("Vendor %s status -> %s", vendor.id, status)
    return vendor


def prioritize_vendors(vendors: Sequence[Vendor], state: Optional[str]) -> list[Vendor]:
    """Same-state vendors first (case-insensitive); relative order otherwise unchanged."""
    if not state:
        return list(vendors)
    wanted = state.strip().lower()
    return sorted(vendors, key=lambda v: 0 if (v.state or "").strip().lower() == wanted else 1)


async def approved_vendors_for_customer(
    session: AsyncSession,
    vendor_type: Optional[str],
    customer_id: Optional[str] = None,
) -> list[Vendor]:
    """Approved vendors (optionally of one type), prioritised by the customer's state when given."""
    vendors = await list_vendors(session, status=VendorStatus.APPROVED.value, vendor_type=vendor_type)
    state = None
    if customer_id:
        customer = await session.get(Customer, customer_id)
        if customer is None:
            raise NotFound("Customer")
        state = customer.state
    return prioritize_vendors(vendors, state)


async def get_assignable_vendor(
    session: AsyncSession,
    vendor_id: str,
    required_type: Optional[str] = None,
) -> Vendor:
    vendor = await session.get(Vendor, vendor_id)
    if vendor is None:
        raise NotFound("Vendor")
    if vendor.status != VendorStatus.APPROVED.value:
        raise VendorNotAssignable(f"Vendor {vendor.name} is not approved")
    if required_type and vendor.vendor_type != required_type:
        raise VendorNotAssignable(f"Vendor {vendor.name} is not a {required_type.replace('_', ' ')} vendor")
    return vendor


async def create_assignment(
    session: AsyncSession,
    customer_id: str,
    vendor_id: str,
    journey_stage: str,
    job_role: Optional[str] = None,
    notes: Optional[str] = None,
    required_type: Optional[str] = None,
) -> CustomerVendorAssignment:
    """
    Link a vendor to a customer for one journey stage.
    Validates everything before adding the row, so a rejected request writes nothing.
    """
    customer = await session.get(Customer, customer_id)
    if customer is None:
        raise NotFound("Customer")
    vendor = await get_assignable_vendor(session, vendor_id, required_type)
    try:
        stage = JourneyStage(journey_stage)
    except ValueError:
        raise VendorNotAssignable(f"Unknown journey stage: {journey_stage}")

    role = job_role or vendor.vendor_type or VendorType.SOLAR_INSTALLATION.value
    assignment = CustomerVendorAssignment(
        id=f"cva-{uuid.uuid4().hex[:12]}",
        customer_id=customer.id,
        vendor_id=vendor.id,
        journey_stage=stage.value,
        job_role=role,
        status=AssignmentStatus.ASSIGNED.value,
        notes=notes,
        assigned_at=datetime.now(timezone.utc),
    )
    assignment.vendor = vendor
    session.add(assignment)
    await session.flush()
    logger.info(
        "Vendor %s assigned to customer %s (%s, %s)",
        vendor.id, customer.id, stage.value, role,
    )
    return assignment


async def update_assignment_status(session: AsyncSession, assignment_id: str, status: str) -> CustomerVendorAssignment:
    """Move an assignment forward along assigned -> in_progress -> completed."""
    assignment = await session.get(CustomerVendorAssignment, assignment_id)
    if assignment is None:
        raise NotFound("Assignment")
    current = AssignmentStatus(assignment.status)
    new = AssignmentStatus(status)
    if ASSIGNMENT_STATUS_FLOW.index(new) <= ASSIGNMENT_STATUS_FLOW.index(current):
        raise InvalidStatusTransition(f"Cannot move assignment from {current.value} to {new.value}")
    assignment.status = new.value
    if new is AssignmentStatus.COMPLETED:
        assignment.completed_at = datetime.now(timezone.utc)
    await session.flush()
    return assignment


async def delete_assignment(session: AsyncSession, assignment_id: str) -> None:
    assignment = await session.get(CustomerVendorAssignment, assignment_id)
    if assignment is None:
        raise NotFound("Assignment")
    await session.delete(assignment)
    await session.flush()
    logger.info("Assignment %s removed (customer %s)", assignment_id, assignment.customer_id)


async def list_assignments(session: AsyncSession, customer_id: str) -> list[CustomerVendorAssignment]:
    result = await session.execute(
        select(CustomerVendorAssignment)
        .where(CustomerVendorAssignment.customer_id == customer_id)
        .order_by(CustomerVendorAssignment.assigned_at)
    )
    return list(result.scalars().all())


def group_by_stage(assignments: Iterable[CustomerVendorAssignment]) -> dict[str, list[CustomerVendorAssignment]]:
    grouped: dict[str, list[CustomerVendorAssignment]] = {stage.value: [] for stage in JourneyStage}
    for a in assignments:
        grouped.setdefault(a.journey_stage, []).append(a)
    return grouped
