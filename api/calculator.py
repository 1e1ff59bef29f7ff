from fastapi import APIRouter, HTTPException

from schemas.calculator import SubsidyRequest
from services.commission_rates import commission_preview
from services.subsidy_calculator import calculate_subsidy

router = APIRouter(prefix="/api/calculator", tags=["calculator"])


@router.post("/subsidy")
async def subsidy(body: SubsidyRequest):
    """Subsidy and savings estimate, with the partner commission the system would earn."""
    try:
        result = calculate_subsidy(body.capacity_kw, body.state or "", body.panel_type.value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {
        **result.model_dump(by_alias=True),
        "commission": commission_preview(body.capacity_kw, body.panel_type.value).model_dump(by_alias=True),
    }
