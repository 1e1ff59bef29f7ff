from typing import Literal, Optional

from pydantic import BaseModel, Field

from models.enums import AssignmentStatus, JourneyStage, VendorStatus, VendorType

VendorState = Literal["Bihar", "Jharkhand", "Uttar Pradesh", "Odisha"]


class VendorRegistration(BaseModel):
    name: str = Field(..., min_length=2)
    vendor_type: VendorType = Field(..., alias="vendorType")
    contact_person: Optional[str] = Field(None, alias="contactPerson")
    phone: str = Field(..., min_length=10, max_length=15)
    email: Optional[str] = None
    address: Optional[str] = None
    state: VendorState
    district: Optional[str] = None
    gst_number: Optional[str] = Field(None, alias="gstNumber")

    model_config = {"populate_by_name": True}


class VendorStatusUpdate(BaseModel):
    status: VendorStatus
    notes: Optional[str] = None


class AssignmentCreate(BaseModel):
    customer_id: str = Field(..., alias="customerId")
    vendor_id: str = Field(..., alias="vendorId")
    journey_stage: JourneyStage = Field(..., alias="journeyStage")
    job_role: Optional[str] = Field(None, alias="jobRole")
    notes: Optional[str] = None

    model_config = {"populate_by_name": True}


class AssignmentStatusUpdate(BaseModel):
    status: AssignmentStatus
