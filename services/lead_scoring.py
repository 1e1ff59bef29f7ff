"""
Lead scoring for customers.

An OpenAI-compatible chat model scores each lead against seven weighted factors;
when the call cannot be made or its answer does not validate, the same factors are
scored by a deterministic heuristic so callers always get a result.
"""
from __future__ import annotations

import asyncio
import json
import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Optional

from openai import AsyncOpenAI
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from models import Customer
from models.enums import CustomerStatus, is_dcr_panel
from schemas.lead_score import LeadScoreFactor, LeadScoreResult

logger = logging.getLogger(__name__)

HOT_THRESHOLD = 70
WARM_THRESHOLD = 40

RECOMMENDATIONS = {
    "hot": "Priority lead - contact immediately for installation scheduling",
    "warm": "Follow up within 48 hours to address concerns",
    "cold": "Nurture with information about subsidies and benefits",
}

STATUS_SCORES = {
    CustomerStatus.PENDING.value: 2,
    CustomerStatus.VERIFIED.value: 4,
    CustomerStatus.APPROVED.value: 6,
    CustomerStatus.INSTALLATION_SCHEDULED.value: 8,
    CustomerStatus.COMPLETED.value: 10,
}

STATE_SUBSIDY_STATES = {"odisha", "up", "uttar pradesh"}

PROMPT_TEMPLATE = """You are an expert lead scoring AI for a solar panel installation company in India under PM Surya Ghar Yojana scheme.

Analyze this customer and provide a lead score from 0-100.

Customer Data:
- Name: {name}
- State: {state}
- District: {district}
- Proposed Capacity: {capacity} kW
- Panel Type: {panel_type} (DCR = subsidized, Non-DCR = no subsidy)
- Average Monthly Bill: Rs {bill}
- Sanctioned Load: {sanctioned_load} kW
- Roof Type: {roof_type}
- Roof Area: {roof_area} sq ft
- Current Status: {status}
- Has Email: {has_email}
- Has Site Pictures: {pictures} pictures uploaded
- Application Age: {age} days

Scoring Factors to Consider:
1. Capacity (higher = more revenue, 3kW+ is ideal for subsidy)
2. Panel Type (DCR is better - eligible for govt subsidy)
3. Monthly Bill (higher bill = more motivation to go solar)
4. Roof Readiness (RCC roof is best, larger area is better)
5. Engagement (email provided, pictures uploaded = more serious)
6. State (Odisha and UP have additional state subsidies)
7. Application Status (further in pipeline = more likely to convert)

Respond in this exact JSON format:
{{
  "score": <0-100>,
  "tier": "<hot|warm|cold>",
  "factors": [
    {{"name": "Capacity", "score": <0-20>, "maxScore": 20, "reason": "<explanation>"}},
    {{"name": "Panel Type", "score": <0-15>, "maxScore": 15, "reason": "<explanation>"}},
    {{"name": "Monthly Bill", "score": <0-15>, "maxScore": 15, "reason": "<explanation>"}},
    {{"name": "Roof Readiness", "score": <0-15>, "maxScore": 15, "reason": "<explanation>"}},
    {{"name": "Engagement", "score": <0-15>, "maxScore": 15, "reason": "<explanation>"}},
    {{"name": "Location", "score": <0-10>, "maxScore": 10, "reason": "<explanation>"}},
    {{"name": "Status", "score": <0-10>, "maxScore": 10, "reason": "<explanation>"}}
  ],
  "recommendation": "<brief action recommendation for the sales team>",
  "conversionProbability": <0-100>
}}"""


def tier_for(score: float) -> str:
    if score >= HOT_THRESHOLD:
        return "hot"
    if score >= WARM_THRESHOLD:
        return "warm"
    return "cold"


def _number(value: Any) -> float:
    try:
        n = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(n) or n < 0 else n


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def fallback_lead_score(customer: Any) -> LeadScoreResult:
    """Deterministic weighted-sum score over the same seven factors the model is asked to use."""
    capacity = _number(customer.proposed_capacity)
    capacity_score = min(20.0, capacity * 4)

    dcr = is_dcr_panel(customer.panel_type)
    panel_score = 15 if dcr else 5

    bill = _number(customer.avg_monthly_bill)
    bill_score = min(15.0, bill / 500 * 3)

    roof = (customer.roof_type or "").strip().lower()
    if roof.startswith("rcc"):
        roof_score = 15
    elif roof:
        roof_score = 10
    else:
        roof_score = 5

    pictures = len(customer.site_pictures or [])
    engagement_score = min(15, (5 if customer.email else 0) + pictures * 2)

    state = (customer.state or "").strip().lower()
    location_score = 10 if state in STATE_SUBSIDY_STATES else 7

    status_score = STATUS_SCORES.get(customer.status, 2)

    factors = [
        LeadScoreFactor(name="Capacity", score=_round_half_up(capacity_score), max_score=20,
                        reason="Good capacity for subsidy" if capacity >= 3 else "Lower capacity"),
        LeadScoreFactor(name="Panel Type", score=panel_score, max_score=15,
                        reason="DCR - Subsidy eligible" if dcr else "Non-DCR - No subsidy"),
        LeadScoreFactor(name="Monthly Bill", score=_round_half_up(bill_score), max_score=15,
                        reason="High bill - good motivation" if bill >= 2000 else "Lower bill"),
        LeadScoreFactor(name="Roof Readiness", score=roof_score, max_score=15,
                        reason="RCC roof - ideal" if roof_score == 15 else "Other roof type" if roof else "Roof type not specified"),
        LeadScoreFactor(name="Engagement", score=engagement_score, max_score=15,
                        reason="Good engagement" if engagement_score >= 10 else "Low engagement"),
        LeadScoreFactor(name="Location", score=location_score, max_score=10,
                        reason="State with additional subsidy" if location_score == 10 else "Standard state"),
        LeadScoreFactor(name="Status", score=status_score, max_score=10, reason=f"Status: {customer.status}"),
    ]

    raw = capacity_score + panel_score + bill_score + roof_score + engagement_score + location_score + status_score
    score = max(0, min(100, _round_half_up(raw)))
    tier = tier_for(score)
    return LeadScoreResult(
        score=score,
        tier=tier,
        factors=factors,
        recommendation=RECOMMENDATIONS[tier],
        conversion_probability=min(95, max(5, score)),
        source="fallback",
    )


def completed_lead_score() -> LeadScoreResult:
    return LeadScoreResult(
        score=100,
        tier="hot",
        factors=[],
        recommendation="Completed installation",
        conversion_probability=100,
        source="fixed",
    )


def build_prompt(customer: Any, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    created = _as_utc(customer.created_at)
    age = (now - created).days if created else "Unknown"
    return PROMPT_TEMPLATE.format(
        name=customer.name,
        state=customer.state or "Not specified",
        district=customer.district or "Not specified",
        capacity=customer.proposed_capacity or "Not specified",
        panel_type=customer.panel_type or "Not specified",
        bill=customer.avg_monthly_bill or "Not specified",
        sanctioned_load=customer.sanctioned_load or "Not specified",
        roof_type=customer.roof_type or "Not specified",
        roof_area=customer.roof_area or "Not specified",
        status=customer.status,
        has_email="Yes" if customer.email else "No",
        pictures=len(customer.site_pictures or []),
        age=age,
    )


def parse_model_output(content: Optional[str]) -> LeadScoreResult:
    """Validate the model's JSON answer; an out-of-set tier is re-derived from the score."""
    if not content:
        raise ValueError("Empty response from lead scoring model")
    data = json.loads(content)
    if not isinstance(data, dict):
        raise ValueError("Lead scoring response is not a JSON object")
    score = data.get("score")
    if isinstance(score, (int, float)) and data.get("tier") not in RECOMMENDATIONS:
        data["tier"] = tier_for(score)
    data["source"] = "ai"
    return LeadScoreResult.model_validate(data)


class LeadScorer:
    """Scores customers through the configured chat-completions endpoint, with heuristic fallback."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.lead_scoring_model

    @property
    def client(self) -> Optional[AsyncOpenAI]:
        if self._client is None and settings.lead_scoring_enabled:
            self._client = AsyncOpenAI(api_key=settings.openai_api_key, base_url=settings.openai_base_url)
        return self._client

    async def score(self, customer: Any) -> LeadScoreResult:
        client = self.client
        if client is None:
            logger.warning("Lead scoring for %s uses fallback: no API key configured", customer.id)
            return fallback_lead_score(customer)
        try:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": build_prompt(customer)}],
                response_format={"type": "json_object"},
                max_tokens=settings.lead_scoring_max_tokens,
            )
            content = response.choices[0].message.content if response.choices else None
            result = parse_model_output(content)
        except (ValueError, ValidationError) as e:
            logger.warning("Lead scoring for %s uses fallback: invalid model output (%s)", customer.id, e)
            return fallback_lead_score(customer)
        except Exception as e:
            logger.warning("Lead scoring for %s uses fallback: %s", customer.id, e)
            return fallback_lead_score(customer)
        result.model = self.model
        return result


def store_lead_score(customer: Customer, result: LeadScoreResult, now: Optional[datetime] = None) -> None:
    customer.lead_score = result.score
    customer.lead_score_details = result.model_dump(by_alias=True)
    customer.lead_score_updated_at = now or datetime.now(timezone.utc)


def needs_scoring(customer: Any, now: Optional[datetime] = None, stale_days: Optional[int] = None) -> bool:
    """True when the customer was never scored or the score is older than the staleness window."""
    if customer.lead_score is None or customer.lead_score_updated_at is None:
        return True
    now = now or datetime.now(timezone.utc)
    window = timedelta(days=stale_days if stale_days is not None else settings.lead_score_stale_days)
    return _as_utc(customer.lead_score_updated_at) < now - window


def select_for_batch(customers: Iterable[Any], now: Optional[datetime] = None) -> list[Any]:
    return [c for c in customers if needs_scoring(c, now)]


async def run_batch(
    customer_ids: list[str],
    session_factory: Callable[[], AsyncSession],
    scorer: Optional[LeadScorer] = None,
    delay_seconds: Optional[float] = None,
) -> int:
    """
    Score customers one at a time in their own sessions, pausing between model calls.
    Runs after the response is sent, so failures are logged per customer and skipped.
    """
    scorer = scorer or LeadScorer()
    delay = settings.lead_scoring_batch_delay_seconds if delay_seconds is None else delay_seconds
    scored = 0
    for i, customer_id in enumerate(customer_ids):
        try:
            async with session_factory() as session:
                customer = (await session.execute(select(Customer).where(Customer.id == customer_id))).scalar_one_or_none()
                if customer is None:
                    continue
                if customer.status == CustomerStatus.COMPLETED.value:
                    result = completed_lead_score()
                else:
                    result = await scorer.score(customer)
                store_lead_score(customer, result)
                await session.commit()
                scored += 1
        except Exception:
            logger.exception("Batch lead scoring failed for customer %s", customer_id)
        if delay and i < len(customer_ids) - 1:
            await asyncio.sleep(delay)
    logger.info("Batch lead scoring finished: %d/%d scored", scored, len(customer_ids))
    return scored
