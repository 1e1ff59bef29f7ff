from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_partner, load_customer, require_roles
from database import AsyncSessionLocal, get_db
from models import Customer, Partner
from models.enums import Role
from services import lead_scoring
from services.dashboards import network_customers_stmt
from services.lead_scoring import LeadScorer
from utils.case import dict_keys_to_camel, iso

router = APIRouter(prefix="/api", tags=["lead-scores"])

_scorers = require_roles(Role.ADMIN, Role.BDP, Role.DDP)


def get_lead_scorer() -> LeadScorer:
    return LeadScorer()


def _score_response(customer: Customer) -> dict:
    details = customer.lead_score_details or {}
    return {
        "customerId": customer.id,
        "score": customer.lead_score,
        "details": dict_keys_to_camel(details),
        "updatedAt": iso(customer.lead_score_updated_at),
    }


@router.post("/customers/{customer_id}/lead-score")
async def score_customer(
    customer_id: str,
    partner: Partner = Depends(_scorers),
    scorer: LeadScorer = Depends(get_lead_scorer),
    db: AsyncSession = Depends(get_db),
):
    customer = await load_customer(db, customer_id, partner)
    result = await scorer.score(customer)
    lead_scoring.store_lead_score(customer, result)
    await db.flush()
    return _score_response(customer)


@router.get("/customers/{customer_id}/lead-score")
async def get_customer_score(
    customer_id: str,
    partner: Partner = Depends(get_current_partner),
    db: AsyncSession = Depends(get_db),
):
    customer = await load_customer(db, customer_id, partner)
    if customer.lead_score is None:
        return {"customerId": customer.id, "score": None, "message": "No lead score calculated yet"}
    return _score_response(customer)


@router.post("/lead-scores/batch", status_code=202)
async def batch_score(
    background_tasks: BackgroundTasks,
    partner: Partner = Depends(require_roles(Role.ADMIN, Role.BDP)),
    scorer: LeadScorer = Depends(get_lead_scorer),
    db: AsyncSession = Depends(get_db),
):
    """Queue scoring for unscored or stale customers: all of them for admins, the network for a BDP."""
    stmt = select(Customer) if partner.role == Role.ADMIN.value else network_customers_stmt(partner.id)
    candidates = (await db.execute(stmt)).scalars().all()
    due = lead_scoring.select_for_batch(candidates)
    ids = [c.id for c in due]
    if ids:
        background_tasks.add_task(lead_scoring.run_batch, ids, AsyncSessionLocal, scorer)
    return {"queued": len(ids), "message": f"Lead scoring started for {len(ids)} customers"}
