from datetime import datetime
from typing import Dict, List

from complaint_desk.model.base import CamelModel
from complaint_desk.model.enums import ComplaintStatus, ComplaintUrgency


class SlaResponse(CamelModel):
    complaint_id: str
    overdue: bool
    overdue_hours: float
    sla_hours: int


class OverdueItem(CamelModel):
    id: str
    title: str
    status: ComplaintStatus
    urgency: ComplaintUrgency
    created_at: datetime
    overdue_hours: float


class AgeingItem(CamelModel):
    id: str
    title: str
    urgency: ComplaintUrgency
    created_at: datetime


class AgeingResponse(CamelModel):
    counts: Dict[str, int]
    buckets: Dict[str, List[AgeingItem]]
