from typing import List

from complaint_desk.model.base import CamelModel


class ReaperReport(CamelModel):
    success: bool
    message: str
    closed_count: int = 0
    closed_ids: List[str] = []
    # Complaints that survived the recent-activity check
    attempted: int = 0
    failed_ids: List[str] = []
