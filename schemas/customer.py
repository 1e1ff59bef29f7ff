import math
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from models.enums import CustomerStatus, PanelType


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: str = Field(..., min_length=10, max_length=15)
    address: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    electricity_board: Optional[str] = Field(None, alias="electricityBoard")
    consumer_number: Optional[str] = Field(None, alias="consumerNumber")
    sanctioned_load: Optional[str] = Field(None, alias="sanctionedLoad")
    avg_monthly_bill: Optional[str] = Field(None, alias="avgMonthlyBill")
    roof_type: Optional[str] = Field(None, alias="roofType")
    roof_area: Optional[str] = Field(None, alias="roofArea")
    panel_type: PanelType = Field(PanelType.DCR, alias="panelType")
    proposed_capacity: Optional[str] = Field(None, alias="proposedCapacity")
    site_pictures: list[str] = Field(default_factory=list, alias="sitePictures")

    model_config = {"populate_by_name": True}

    @field_validator("proposed_capacity")
    @classmethod
    def _capacity_is_numeric(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        try:
            kw = float(v)
        except ValueError:
            raise ValueError("proposedCapacity must be a number of kW")
        if not math.isfinite(kw) or kw <= 0 or kw > 100:
            raise ValueError("proposedCapacity must be between 0 and 100 kW")
        return v


class PublicCustomerRegistration(CustomerCreate):
    """Website sign-up; a customer-partner referral code routes it as a referral."""
    referral_code: Optional[str] = Field(None, alias="referralCode")


class CustomerStatusUpdate(BaseModel):
    status: CustomerStatus
