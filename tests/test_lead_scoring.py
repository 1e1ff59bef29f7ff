"""Lead scoring: heuristic fallback, model output parsing, scorer fallbacks and batch runs."""

import json
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from services.lead_scoring import (
    LeadScorer,
    build_prompt,
    fallback_lead_score,
    needs_scoring,
    parse_model_output,
    run_batch,
    select_for_batch,
    tier_for,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _lead(**overrides):
    data = dict(
        id="cus-1",
        name="Asha Devi",
        email=None,
        state=None,
        district=None,
        proposed_capacity=None,
        panel_type="non_dcr",
        avg_monthly_bill=None,
        sanctioned_load=None,
        roof_type=None,
        roof_area=None,
        status="pending",
        site_pictures=[],
        created_at=datetime.now(timezone.utc) - timedelta(days=3),
        lead_score=None,
        lead_score_updated_at=None,
    )
    data.update(overrides)
    return SimpleNamespace(**data)


def _model_reply(content):
    client = MagicMock()
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])
    client.chat.completions.create = AsyncMock(return_value=response)
    return client


AI_ANSWER = {
    "score": 82,
    "tier": "hot",
    "factors": [{"name": "Capacity", "score": 18, "maxScore": 20, "reason": "5 kW"}],
    "recommendation": "Call today",
    "conversionProbability": 77,
}


# ===================================================================
# Fallback heuristic
# ===================================================================


class TestFallbackLeadScore:
    def test_strong_lead_is_hot(self):
        lead = _lead(
            proposed_capacity="5",
            panel_type="dcr",
            avg_monthly_bill="3000",
            roof_type="RCC",
            email="asha@example.com",
            site_pictures=["a.jpg", "b.jpg"],
            state="Odisha",
            status="approved",
        )
        result = fallback_lead_score(lead)
        # 20 + 15 + 15 + 15 + 9 + 10 + 6
        assert result.score == 90
        assert result.tier == "hot"
        assert result.conversion_probability == 90
        assert result.source == "fallback"
        assert [f.name for f in result.factors] == [
            "Capacity", "Panel Type", "Monthly Bill", "Roof Readiness", "Engagement", "Location", "Status",
        ]

    def test_empty_lead_is_cold_and_probability_floor(self):
        result = fallback_lead_score(_lead())
        # 0 + 5 + 0 + 5 + 0 + 7 + 2
        assert result.score == 19
        assert result.tier == "cold"
        assert result.conversion_probability == 19

    def test_probability_clamped_to_95(self):
        lead = _lead(
            proposed_capacity="10",
            panel_type="dcr_hybrid",
            avg_monthly_bill="10000",
            roof_type="rcc slab",
            email="x@example.com",
            site_pictures=["p"] * 10,
            state="Uttar Pradesh",
            status="completed",
        )
        result = fallback_lead_score(lead)
        assert result.score == 100
        assert result.conversion_probability == 95

    def test_garbage_numbers_are_treated_as_zero(self):
        result = fallback_lead_score(_lead(proposed_capacity="lots", avg_monthly_bill="-400"))
        assert result.factors[0].score == 0
        assert result.factors[2].score == 0

    @pytest.mark.parametrize("capacity", ["0", "1", "2.5", "3", "7", "100"])
    @pytest.mark.parametrize("panel", ["dcr", "non_dcr", "unknown"])
    @pytest.mark.parametrize("status", ["pending", "verified", "completed", "odd"])
    def test_bounds_and_tier_consistency(self, capacity, panel, status):
        result = fallback_lead_score(_lead(proposed_capacity=capacity, panel_type=panel, status=status))
        assert 0 <= result.score <= 100
        assert result.tier == tier_for(result.score)
        assert 5 <= result.conversion_probability <= 95


def test_tier_thresholds():
    assert tier_for(70) == "hot"
    assert tier_for(69.9) == "warm"
    assert tier_for(40) == "warm"
    assert tier_for(39) == "cold"


# ===================================================================
# Model output parsing
# ===================================================================


class TestParseModelOutput:
    def test_valid_answer(self):
        result = parse_model_output(json.dumps(AI_ANSWER))
        assert result.score == 82
        assert result.tier == "hot"
        assert result.source == "ai"
        assert result.factors[0].max_score == 20

    def test_invalid_tier_is_rederived(self):
        result = parse_model_output(json.dumps({**AI_ANSWER, "score": 45, "tier": "lukewarm"}))
        assert result.tier == "warm"

    @pytest.mark.parametrize("content", [None, "", "not json", "[1, 2]"])
    def test_unusable_content_raises(self, content):
        with pytest.raises(ValueError):
            parse_model_output(content)

    def test_out_of_range_score_fails_validation(self):
        with pytest.raises(ValueError):
            parse_model_output(json.dumps({**AI_ANSWER, "score": 140}))


def test_prompt_mentions_customer_details():
    prompt = build_prompt(_lead(state="Bihar", proposed_capacity="4", roof_type="RCC"))
    assert "Asha Devi" in prompt
    assert "State: Bihar" in prompt
    assert "Proposed Capacity: 4 kW" in prompt
    assert "Application Age: 3 days" in prompt


# ===================================================================
# LeadScorer
# ===================================================================


class TestLeadScorer:
    async def test_uses_model_answer(self):
        client = _model_reply(json.dumps(AI_ANSWER))
        result = await LeadScorer(client=client, model="test-model").score(_lead())
        assert result.source == "ai"
        assert result.score == 82
        assert result.model == "test-model"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["response_format"] == {"type": "json_object"}

    async def test_invalid_json_falls_back(self):
        result = await LeadScorer(client=_model_reply("{oops")).score(_lead())
        assert result.source == "fallback"
        assert result.score == 19

    async def test_api_error_falls_back(self):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(side_effect=RuntimeError("connection reset"))
        result = await LeadScorer(client=client).score(_lead())
        assert result.source == "fallback"

    async def test_no_api_key_falls_back(self):
        scorer = LeadScorer()
        assert scorer.client is None
        result = await scorer.score(_lead())
        assert result.source == "fallback"


# ===================================================================
# Staleness and batch scoring
# ===================================================================


def test_needs_scoring():
    now = datetime(2025, 6, 1, tzinfo=timezone.utc)
    assert needs_scoring(_lead(), now)
    fresh = _lead(lead_score=50, lead_score_updated_at=now - timedelta(days=2))
    stale = _lead(lead_score=50, lead_score_updated_at=(now - timedelta(days=8)).replace(tzinfo=None))
    assert not needs_scoring(fresh, now, stale_days=7)
    assert needs_scoring(stale, now, stale_days=7)
    assert select_for_batch([fresh, stale], now) == [stale]


async def test_run_batch_scores_and_fixes_completed(db_session, make_partner, make_customer):
    ddp = await make_partner()
    open_lead = await make_customer(ddp=ddp, proposed_capacity="3")
    done = await make_customer(ddp=ddp, status="completed")
    ids = [open_lead.id, done.id, "cus-missing"]

    factory = async_sessionmaker(db_session.bind, class_=AsyncSession, expire_on_commit=False)
    scored = await run_batch(ids, factory, scorer=LeadScorer(), delay_seconds=0)
    assert scored == 2

    await db_session.refresh(open_lead)
    await db_session.refresh(done)
    assert open_lead.lead_score_details["source"] == "fallback"
    assert open_lead.lead_score_updated_at is not None
    assert done.lead_score == 100
    assert done.lead_score_details["tier"] == "hot"
    assert done.lead_score_details["source"] == "fixed"
