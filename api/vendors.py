from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.customers import assignment_to_response
from api.deps import http_error, require_roles
from database import get_db
from models import Partner, Vendor
from models.enums import Role, VendorType
from schemas.vendor import AssignmentCreate, AssignmentStatusUpdate, VendorStatusUpdate
from services import vendors
from services.errors import SERVICE_ERRORS
from utils.case import row_to_camel

router = APIRouter(prefix="/api/admin", tags=["vendors"])

_admin = require_roles(Role.ADMIN)


def vendor_to_response(v: Vendor) -> dict[str, Any]:
    return row_to_camel(v)


async def _approved(db: AsyncSession, vendor_type: Optional[str], customer_id: Optional[str]):
    try:
        rows = await vendors.approved_vendors_for_customer(db, vendor_type, customer_id)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return [vendor_to_response(v) for v in rows]


@router.get("/vendors")
async def list_vendors(
    status: Optional[str] = None,
    vendor_type: Optional[VendorType] = Query(None, alias="vendorType"),
    state: Optional[str] = None,
    _: Partner = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    rows = await vendors.list_vendors(db, status=status, vendor_type=vendor_type.value if vendor_type else None, state=state)
    return [vendor_to_response(v) for v in rows]


@router.get("/vendors/approved")
async def approved_vendors(
    customer_id: Optional[str] = Query(None, alias="customerId"),
    _: Partner = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    return await _approved(db, None, customer_id)


@router.get("/vendors/discom")
async def discom_vendors(
    customer_id: Optional[str] = Query(None, alias="customerId"),
    _: Partner = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    """Approved DISCOM net-metering vendors, same-state vendors first."""
    return await _approved(db, VendorType.DISCOM_NET_METERING.value, customer_id)


@router.get("/vendors/bank-loan")
async def bank_loan_vendors(
    customer_id: Optional[str] = Query(None, alias="customerId"),
    _: Partner = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    return await _approved(db, VendorType.BANK_LOAN_LIAISON.value, customer_id)


@router.patch("/vendors/{vendor_id}/status")
async def update_vendor_status(
    vendor_id: str,
    body: VendorStatusUpdate,
    _: Partner = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        vendor = await vendors.update_vendor_status(db, vendor_id, body.status.value, body.notes)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return vendor_to_response(vendor)


@router.post("/vendor-assignments", status_code=201)
async def create_assignment(
    body: AssignmentCreate,
    _: Partner = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        assignment = await vendors.create_assignment(
            db,
            customer_id=body.customer_id,
            vendor_id=body.vendor_id,
            journey_stage=body.journey_stage.value,
            job_role=body.job_role,
            notes=body.notes,
        )
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return assignment_to_response(assignment)


@router.patch("/vendor-assignments/{assignment_id}")
async def update_assignment(
    assignment_id: str,
    body: AssignmentStatusUpdate,
    _: Partner = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        assignment = await vendors.update_assignment_status(db, assignment_id, body.status.value)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return assignment_to_response(assignment)


@router.delete("/vendor-assignments/{assignment_id}", status_code=204)
async def delete_assignment(
    assignment_id: str,
    _: Partner = Depends(_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        await vendors.delete_assignment(db, assignment_id)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return Response(status_code=204)
