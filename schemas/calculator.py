from typing import Optional

from pydantic import BaseModel, Field

from models.enums import PanelType


class SubsidyRequest(BaseModel):
    capacity_kw: float = Field(..., alias="capacityKw", gt=0, le=100)
    state: str = ""
    panel_type: PanelType = Field(PanelType.DCR, alias="panelType")

    model_config = {"populate_by_name": True}


class SubsidyResult(BaseModel):
    capacity_kw: float = Field(..., alias="capacityKw")
    panel_type: str = Field(..., alias="panelType")
    state: str
    cost_per_kw: int = Field(..., alias="costPerKw")
    system_cost: float = Field(..., alias="systemCost")
    central_subsidy: float = Field(..., alias="centralSubsidy")
    state_subsidy: float = Field(..., alias="stateSubsidy")
    total_subsidy: float = Field(..., alias="totalSubsidy")
    net_cost: float = Field(..., alias="netCost")
    daily_generation: float = Field(..., alias="dailyGeneration")
    monthly_generation: float = Field(..., alias="monthlyGeneration")
    monthly_savings: float = Field(..., alias="monthlySavings")
    annual_savings: float = Field(..., alias="annualSavings")
    payback_years: float = Field(..., alias="paybackYears")
    emi: int
    subsidy_eligible: bool = Field(..., alias="subsidyEligible")

    model_config = {"populate_by_name": True}


class CommissionPreview(BaseModel):
    ddp: float
    bdp: float
    total: float
    customer_partner: Optional[float] = Field(None, alias="customerPartner")

    model_config = {"populate_by_name": True}
