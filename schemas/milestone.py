from typing import Optional

from pydantic import BaseModel, Field


class MilestoneComplete(BaseModel):
    notes: Optional[str] = None
    # Only meaningful for the file submission milestone
    vendor_id: Optional[str] = Field(None, alias="vendorId")

    model_config = {"populate_by_name": True}
