from typing import Optional

from pydantic import BaseModel, Field

from models.enums import PartnerStatus, Role


class PartnerCreate(BaseModel):
    """A BDP registering a DDP under itself, or an admin creating any partner."""
    username: str = Field(..., min_length=3, max_length=128)
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: str = Field(..., min_length=10, max_length=15)
    role: Role = Role.DDP
    state: Optional[str] = None
    district: Optional[str] = None
    address: Optional[str] = None
    parent_id: Optional[str] = Field(None, alias="parentId")

    model_config = {"populate_by_name": True}


class PartnerStatusUpdate(BaseModel):
    status: PartnerStatus


class CustomerPartnerEnrollment(BaseModel):
    """An installed customer joining the referral programme, identified by phone."""
    phone: str = Field(..., min_length=10, max_length=15)
    username: str = Field(..., min_length=3, max_length=128)
    email: Optional[str] = None
