from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_partner, http_error, load_customer, require_roles
from database import get_db
from models import Customer, CustomerVendorAssignment, Milestone, Partner
from models.enums import JOURNEY_STAGE_LABELS, MILESTONE_BY_KEY, JourneyStage, Role
from schemas.customer import CustomerCreate, CustomerStatusUpdate
from services import customer_status, customers, journey, vendors
from services.errors import SERVICE_ERRORS
from utils.case import dict_keys_to_camel, iso

router = APIRouter(prefix="/api/customers", tags=["customers"])


def customer_to_response(c: Customer) -> dict[str, Any]:
    return {
        "id": c.id,
        "name": c.name,
        "email": c.email,
        "phone": c.phone,
        "address": c.address,
        "district": c.district,
        "state": c.state,
        "pincode": c.pincode,
        "electricityBoard": c.electricity_board,
        "consumerNumber": c.consumer_number,
        "sanctionedLoad": c.sanctioned_load,
        "avgMonthlyBill": c.avg_monthly_bill,
        "roofType": c.roof_type,
        "roofArea": c.roof_area,
        "panelType": c.panel_type,
        "proposedCapacity": c.proposed_capacity,
        "status": c.status,
        "ddpId": c.ddp_id,
        "source": c.source,
        "referrerCustomerId": c.referrer_customer_id,
        "sitePictures": c.site_pictures or [],
        "leadScore": c.lead_score,
        "leadScoreDetails": dict_keys_to_camel(c.lead_score_details) if c.lead_score_details else None,
        "leadScoreUpdatedAt": iso(c.lead_score_updated_at),
        "createdAt": iso(c.created_at),
        "updatedAt": iso(c.updated_at),
    }


def milestone_to_response(m: Milestone) -> dict[str, Any]:
    step = MILESTONE_BY_KEY.get(m.milestone)
    return {
        "id": m.id,
        "customerId": m.customer_id,
        "milestone": m.milestone,
        "label": step.label if step else m.milestone,
        "description": step.description if step else None,
        "journeyStage": step.stage.value if step else None,
        "position": m.position,
        "status": m.status,
        "notes": m.notes,
        "completedAt": iso(m.completed_at),
        "createdAt": iso(m.created_at),
    }


def assignment_to_response(a: CustomerVendorAssignment) -> dict[str, Any]:
    vendor = a.vendor
    return {
        "id": a.id,
        "customerId": a.customer_id,
        "vendorId": a.vendor_id,
        "journeyStage": a.journey_stage,
        "jobRole": a.job_role,
        "status": a.status,
        "notes": a.notes,
        "assignedAt": iso(a.assigned_at),
        "completedAt": iso(a.completed_at),
        "vendor": {
            "id": vendor.id,
            "name": vendor.name,
            "vendorCode": vendor.vendor_code,
            "vendorType": vendor.vendor_type,
            "phone": vendor.phone,
            "state": vendor.state,
        } if vendor else None,
    }


@router.get("")
async def list_customers(
    status: Optional[str] = None,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    rows = await customers.customers_for(db, partner, status)
    return [customer_to_response(c) for c in rows]


@router.post("", status_code=201)
async def create_customer(
    body: CustomerCreate,
    partner: Partner = Depends(require_roles(Role.DDP)),
    db: AsyncSession = Depends(get_db),
):
    customer = await customers.create_customer(db, body, ddp=partner)
    return customer_to_response(customer)


@router.get("/{customer_id}")
async def get_customer(
    customer_id: str,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    customer = await load_customer(db, customer_id, partner)
    return customer_to_response(customer)


@router.patch("/{customer_id}/status")
async def update_status(
    customer_id: str,
    body: CustomerStatusUpdate,
    partner: Partner = Depends(require_roles(Role.ADMIN, Role.BDP, Role.DDP)),
    db: AsyncSession = Depends(get_db),
):
    customer = await load_customer(db, customer_id, partner)
    try:
        customer = await customer_status.update_customer_status(db, customer, body.status.value, actor=partner)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return customer_to_response(customer)


@router.get("/{customer_id}/milestones")
async def list_milestones(
    customer_id: str,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    """Milestones in template order; seeds the journey for customers created before it existed."""
    await load_customer(db, customer_id, partner)
    milestones = await journey.initialize_milestones(db, customer_id)
    progress = journey.journey_progress(milestones)
    return {
        "milestones": [milestone_to_response(m) for m in milestones],
        "progress": {
            "completed": progress.completed,
            "total": progress.total,
            "percent": progress.percent,
            "currentIndex": progress.current_index,
            "currentMilestone": progress.current_key,
        },
    }


@router.get("/{customer_id}/vendor-assignments")
async def list_vendor_assignments(
    customer_id: str,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    await load_customer(db, customer_id, partner)
    assignments = await vendors.list_assignments(db, customer_id)
    grouped = vendors.group_by_stage(assignments)
    return {
        "assignments": [assignment_to_response(a) for a in assignments],
        "byStage": [
            {
                "stage": stage.value,
                "label": JOURNEY_STAGE_LABELS[stage],
                "assignments": [assignment_to_response(a) for a in grouped[stage.value]],
            }
            for stage in JourneyStage
        ],
    }
