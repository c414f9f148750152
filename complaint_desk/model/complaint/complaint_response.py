from datetime import datetime
from typing import Optional

from complaint_desk.model.base import CamelModel
from complaint_desk.model.enums import ComplaintCategory, ComplaintStatus, ComplaintUrgency


class ComplaintResponse(CamelModel):
    id: str
    title: str
    description: str
    category: ComplaintCategory
    urgency: ComplaintUrgency
    status: ComplaintStatus
    student_id: str
    assigned_to: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    resolved_at: Optional[datetime] = None
    overdue: bool = False
    overdue_hours: float = 0.0


class CommentResponse(CamelModel):
    id: str
    complaint_id: str
    user_id: str
    message: str
    created_at: datetime
