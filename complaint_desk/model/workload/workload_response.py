from typing import List, Optional

from complaint_desk.model.base import CamelModel


class RosterEntry(CamelModel):
    id: str
    full_name: str = ""
    email: str = ""
    # Live complaints assigned to this admin, recomputed on every read
    assigned_count: int = 0
    # Subset of assigned_count with high or urgent urgency
    high_priority_count: int = 0


class Assignment(CamelModel):
    complaint_id: str
    assignee_id: str


class WorkloadPlan(CamelModel):
    assignments: List[Assignment]
    unassigned_count: int
    roster_size: int
    # no_admins_available | nothing_to_assign | None when there is work to apply
    reason: Optional[str] = None


class AssignmentReport(CamelModel):
    attempted: int
    assigned_count: int
    failed_ids: List[str] = []


class BalanceResponse(CamelModel):
    message: str
    plan: WorkloadPlan
    report: AssignmentReport
