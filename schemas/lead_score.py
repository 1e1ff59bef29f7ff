from typing import Literal, Optional

from pydantic import BaseModel, Field


class LeadScoreFactor(BaseModel):
    name: str
    score: float
    max_score: float = Field(..., alias="maxScore")
    reason: str = ""

    model_config = {"populate_by_name": True}


class LeadScoreResult(BaseModel):
    """Shape returned by both the model call and the heuristic fallback."""

    score: float = Field(..., ge=0, le=100)
    tier: Literal["hot", "warm", "cold"]
    factors: list[LeadScoreFactor] = Field(default_factory=list)
    recommendation: str = ""
    conversion_probability: float = Field(..., alias="conversionProbability", ge=0, le=100)
    source: Literal["ai", "fallback", "fixed"] = "fallback"
    model: Optional[str] = None

    model_config = {"populate_by_name": True}
