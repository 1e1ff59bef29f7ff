"""Stored files follow the document rows that point at them."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from services import documents
from services.errors import DomainError, NotFound


async def _upload(db_session, uploader):
    document = await documents.save_upload(
        db_session,
        content=b"%PDF-1.4 bill",
        filename="bill.pdf",
        mime_type="application/pdf",
        category="electricity_bill",
        uploaded_by=uploader,
    )
    await db_session.commit()
    return document


async def test_upload_without_target_attaches_to_uploader(db_session, make_partner, upload_dir):
    ddp = await make_partner()
    document = await _upload(db_session, ddp)

    assert document.partner_id == ddp.id
    assert document.customer_id is None
    assert Path(document.storage_path).parent == upload_dir


async def test_file_survives_failed_delete_commit(db_session, make_partner, upload_dir, monkeypatch):
    ddp = await make_partner()
    document = await _upload(db_session, ddp)
    doc_id, path = document.id, Path(document.storage_path)

    monkeypatch.setattr(db_session, "commit", AsyncMock(side_effect=RuntimeError("database unavailable")))
    with pytest.raises(RuntimeError):
        await documents.delete_document(db_session, doc_id)
    await db_session.rollback()
    monkeypatch.delattr(db_session, "commit")

    assert path.exists()
    assert (await documents.get_document(db_session, doc_id)).id == doc_id

    await documents.delete_document(db_session, doc_id)

    assert not path.exists()
    with pytest.raises(NotFound):
        await documents.get_document(db_session, doc_id)


async def test_rejected_upload_writes_nothing(db_session, make_partner, upload_dir):
    ddp = await make_partner()
    with pytest.raises(DomainError):
        await documents.save_upload(
            db_session,
            content=b"echo",
            filename="run.sh",
            mime_type="text/x-shellscript",
            category="other",
            uploaded_by=ddp,
        )
    assert not upload_dir.exists() or list(upload_dir.iterdir()) == []
