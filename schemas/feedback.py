from typing import Optional

from pydantic import BaseModel, Field

from models.enums import FeedbackStatus, FeedbackType


class FeedbackCreate(BaseModel):
    type: FeedbackType
    subject: str = Field(..., min_length=5, max_length=256)
    message: str = Field(..., min_length=20)
    name: Optional[str] = None
    email: Optional[str] = None


class FeedbackStatusUpdate(BaseModel):
    status: FeedbackStatus
    admin_notes: Optional[str] = Field(None, alias="adminNotes")

    model_config = {"populate_by_name": True}
