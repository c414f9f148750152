from pydantic import Field

from complaint_desk.model.base import CamelModel
from complaint_desk.model.enums import ComplaintCategory, ComplaintStatus, ComplaintUrgency


class ComplaintCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, description="Short summary of the issue")
    description: str = Field(..., min_length=1)
    category: ComplaintCategory
    urgency: ComplaintUrgency = ComplaintUrgency.MEDIUM
    student_id: str = Field(..., description="Profile id of the submitter")


class StatusUpdateRequest(CamelModel):
    status: ComplaintStatus
    actor_id: str = Field(..., description="Profile id of whoever changes the status")


class CommentRequest(CamelModel):
    user_id: str
    message: str = Field(..., min_length=1)
