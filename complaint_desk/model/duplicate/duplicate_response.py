from datetime import datetime
from typing import List

from complaint_desk.model.base import CamelModel


class ComplaintSummary(CamelModel):
    id: str
    title: str
    student_name: str = "Unknown"
    created_at: datetime


class DuplicateGroup(CamelModel):
    keyword: str
    label: str
    count: int
    members: List[ComplaintSummary]
