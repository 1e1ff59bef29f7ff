from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from models import Customer, Document, Partner
from models.enums import DocumentCategory
from services.errors import DomainError, NotFound, PayloadTooLarge

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES: dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "application/vnd.ms-excel": ".xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": ".xlsx",
}


def _upload_root() -> Path:
    root = Path(settings.upload_dir)
    root.mkdir(parents=True, exist_ok=True)
    return root


async def save_upload(
    session: AsyncSession,
    content: bytes,
    filename: str,
    mime_type: str,
    category: str,
    uploaded_by: Partner,
    description: Optional[str] = None,
    customer_id: Optional[str] = None,
    partner_id: Optional[str] = None,
    expires_at: Optional[datetime] = None,
) -> Document:
    """Validate and store an uploaded file, then record it against a customer or partner."""
    try:
        category = DocumentCategory(category).value
    except ValueError:
        raise DomainError(f"Unknown document category: {category}")
    if mime_type not in ALLOWED_MIME_TYPES:
        raise DomainError("Only images, PDF and Office documents are accepted")
    if not content:
        raise DomainError("File is empty")
    if len(content) > settings.max_upload_bytes:
        raise PayloadTooLarge(f"File exceeds {settings.max_upload_bytes // (1024 * 1024)} MB limit")
    if not customer_id and not partner_id:
        partner_id = uploaded_by.id
    if customer_id and await session.get(Customer, customer_id) is None:
        raise NotFound("Customer")
    if partner_id and await session.get(Partner, partner_id) is None:
        raise NotFound("Partner")

    doc_id = f"doc-{uuid.uuid4().hex[:12]}"
    stored_name = f"{doc_id}{ALLOWED_MIME_TYPES[mime_type]}"
    path = _upload_root() / stored_name
    path.write_bytes(content)

    document = Document(
        id=doc_id,
        customer_id=customer_id,
        partner_id=partner_id,
        category=category,
        name=stored_name,
        original_name=filename or stored_name,
        mime_type=mime_type,
        size=len(content),
        storage_path=str(path),
        description=description,
        uploaded_by_id=uploaded_by.id,
        is_verified=False,
        expires_at=expires_at,
    )
    session.add(document)
    try:
        await session.flush()
    except Exception:
        path.unlink(missing_ok=True)
        raise
    logger.info("Document %s uploaded (%s, %d bytes) by %s", doc_id, category, len(content), uploaded_by.id)
    return document


async def get_document(session: AsyncSession, document_id: str) -> Document:
    document = await session.get(Document, document_id)
    if document is None:
        raise NotFound("Document")
    return document


async def list_documents(
    session: AsyncSession,
    customer_id: Optional[str] = None,
    partner_id: Optional[str] = None,
    uploaded_by_id: Optional[str] = None,
) -> list[Document]:
    stmt = select(Document).order_by(Document.created_at.desc())
    if customer_id:
        stmt = stmt.where(Document.customer_id == customer_id)
    if partner_id:
        stmt = stmt.where(Document.partner_id == partner_id)
    if uploaded_by_id:
        stmt = stmt.where(Document.uploaded_by_id == uploaded_by_id)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def verify_document(session: AsyncSession, document_id: str, verifier: Partner) -> Document:
    document = await get_document(session, document_id)
    document.is_verified = True
    document.verified_by_id = verifier.id
    document.verified_at = datetime.now(timezone.utc)
    await session.flush()
    logger.info("Document %s verified by %s", document.id, verifier.id)
    return document


async def delete_document(session: AsyncSession, document_id: str) -> None:
    """Delete the row and commit; the stored file is removed only after the commit succeeds."""
    document = await get_document(session, document_id)
    path = Path(document.storage_path)
    await session.delete(document)
    await session.commit()
    path.unlink(missing_ok=True)
    logger.info("Document %s deleted", document_id)
