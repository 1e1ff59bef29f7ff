from typing import Optional

from pydantic import BaseModel, Field

from models.enums import CommissionStatus, PayoutMode


class CommissionStatusUpdate(BaseModel):
    status: CommissionStatus


class PayoutCreate(BaseModel):
    commission_id: str = Field(..., alias="commissionId")
    mode: PayoutMode = PayoutMode.IMPS
    utr: Optional[str] = None

    model_config = {"populate_by_name": True}


class CommissionSummary(BaseModel):
    total_earned: float = Field(0, alias="totalEarned")
    pending_amount: float = Field(0, alias="pendingAmount")
    paid_amount: float = Field(0, alias="paidAmount")
    total_installations: int = Field(0, alias="totalInstallations")
    installation_earnings: float = Field(0, alias="installationEarnings")
    inverter_earnings: float = Field(0, alias="inverterEarnings")
    bonus_earnings: float = Field(0, alias="bonusEarnings")
    customer_referral_earnings: float = Field(0, alias="customerReferralEarnings")
    current_month_earnings: float = Field(0, alias="currentMonthEarnings")

    model_config = {"populate_by_name": True}
