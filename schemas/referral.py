from typing import Optional

from pydantic import BaseModel, Field, model_validator

from models.enums import ReferralType


class ReferralCreate(BaseModel):
    referred_type: ReferralType = Field(..., alias="referredType")
    referred_name: Optional[str] = Field(None, alias="referredName")
    referred_phone: Optional[str] = Field(None, alias="referredPhone")
    referred_customer_id: Optional[str] = Field(None, alias="referredCustomerId")
    referred_partner_id: Optional[str] = Field(None, alias="referredPartnerId")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _needs_target(self) -> "ReferralCreate":
        if not (self.referred_phone or self.referred_customer_id or self.referred_partner_id):
            raise ValueError("referredPhone, referredCustomerId or referredPartnerId is required")
        return self
