from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_partner, http_error, load_customer, require_roles
from database import get_db
from models import Document, Partner
from models.enums import Role
from services import documents
from services.errors import SERVICE_ERRORS
from utils.case import iso

router = APIRouter(prefix="/api/documents", tags=["documents"])


def _document_to_response(d: Document) -> dict[str, Any]:
    return {
        "id": d.id,
        "customerId": d.customer_id,
        "partnerId": d.partner_id,
        "category": d.category,
        "name": d.name,
        "originalName": d.original_name,
        "mimeType": d.mime_type,
        "size": d.size,
        "description": d.description,
        "uploadedById": d.uploaded_by_id,
        "isVerified": d.is_verified,
        "verifiedById": d.verified_by_id,
        "verifiedAt": iso(d.verified_at),
        "expiresAt": iso(d.expires_at),
        "createdAt": iso(d.created_at),
    }


def _ensure_partner_access(partner: Partner, partner_id: str) -> None:
    if partner.role != Role.ADMIN.value and partner.id != partner_id:
        raise HTTPException(status_code=403, detail="Access denied")


@router.post("/upload", status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    category: str = Form(...),
    description: Optional[str] = Form(None),
    customer_id: Optional[str] = Form(None, alias="customerId"),
    partner_id: Optional[str] = Form(None, alias="partnerId"),
    expires_at: Optional[datetime] = Form(None, alias="expiresAt"),
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    if customer_id:
        await load_customer(db, customer_id, partner)
    if partner_id:
        _ensure_partner_access(partner, partner_id)
    content = await file.read()
    try:
        document = await documents.save_upload(
            db,
            content=content,
            filename=file.filename or "",
            mime_type=file.content_type or "",
            category=category,
            uploaded_by=partner,
            description=description,
            customer_id=customer_id,
            partner_id=partner_id,
            expires_at=expires_at,
        )
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return _document_to_response(document)


@router.get("")
async def list_my_uploads(
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    rows = await documents.list_documents(db, uploaded_by_id=partner.id)
    return [_document_to_response(d) for d in rows]


@router.get("/customer/{customer_id}")
async def list_customer_documents(
    customer_id: str,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    await load_customer(db, customer_id, partner)
    rows = await documents.list_documents(db, customer_id=customer_id)
    return [_document_to_response(d) for d in rows]


@router.get("/partner/{partner_id}")
async def list_partner_documents(
    partner_id: str,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    _ensure_partner_access(partner, partner_id)
    rows = await documents.list_documents(db, partner_id=partner_id)
    return [_document_to_response(d) for d in rows]


@router.post("/{document_id}/verify")
async def verify_document(
    document_id: str,
    partner: Partner = Depends(require_roles(Role.ADMIN, Role.BDP)),
    db: AsyncSession = Depends(get_db),
):
    try:
        document = await documents.verify_document(db, document_id, partner)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return _document_to_response(document)


@router.delete("/{document_id}", status_code=204)
async def delete_document(
    document_id: str,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    try:
        document = await documents.get_document(db, document_id)
        if partner.role != Role.ADMIN.value and document.uploaded_by_id != partner.id:
            raise HTTPException(status_code=403, detail="Access denied")
        await documents.delete_document(db, document_id)
    except SERVICE_ERRORS as e:
        raise http_error(e) from e
    return Response(status_code=204)
