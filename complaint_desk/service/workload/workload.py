"""
Round-robin workload balancing across the admin roster.

The planner is a single static pass: admins are ordered by their current
load (least first) and eligible complaints are dealt out in turn. It does not
re-rank admins mid-pass and does not weight by urgency beyond skipping
low-urgency work, so loads only end up within one of each other when they
started that way.
"""

import asyncio
import logging
from typing import Any, Iterable, Sequence

from sqlalchemy import func, select, update

from complaint_desk.client.db.psql import session_scope
from complaint_desk.db.models import Complaint, Profile, UserRole
from complaint_desk.model.enums import LIVE_STATUSES, AppRole, ComplaintUrgency
from complaint_desk.model.workload.workload_response import (
    Assignment,
    AssignmentReport,
    BalanceResponse,
    RosterEntry,
    WorkloadPlan,
)
from complaint_desk.service.activity.activity import log_activity

logger = logging.getLogger(__name__)

NO_ADMINS_AVAILABLE = "no_admins_available"
NOTHING_TO_ASSIGN = "nothing_to_assign"

HIGH_PRIORITY = (ComplaintUrgency.HIGH, ComplaintUrgency.URGENT)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def _urgency_value(value: Any) -> str:
    return value.value if isinstance(value, ComplaintUrgency) else str(value)


def eligible_for_auto_assign(complaint: Any) -> bool:
    if _field(complaint, "assigned_to"):
        return False
    return _urgency_value(_field(complaint, "urgency")) != ComplaintUrgency.LOW.value


def balance_workload(unassigned: Iterable[Any], roster: Sequence[RosterEntry]) -> WorkloadPlan:
    """
    Deal eligible complaints round-robin over the roster, least-loaded admin first.

    Complaints that already have an assignee or are low urgency are skipped.
    An empty roster or an empty eligible list is reported through ``reason``
    rather than raised.
    """
    eligible = [c for c in unassigned if eligible_for_auto_assign(c)]

    if not roster:
        return WorkloadPlan(
            assignments=[],
            unassigned_count=len(eligible),
            roster_size=0,
            reason=NO_ADMINS_AVAILABLE,
        )
    if not eligible:
        return WorkloadPlan(
            assignments=[],
            unassigned_count=0,
            roster_size=len(roster),
            reason=NOTHING_TO_ASSIGN,
        )

    # sorted() is stable, so ties keep roster order.
    ordered = sorted(roster, key=lambda admin: admin.assigned_count)
    assignments = [
        Assignment(complaint_id=str(_field(complaint, "id")), assignee_id=ordered[index % len(ordered)].id)
        for index, complaint in enumerate(eligible)
    ]

    return WorkloadPlan(
        assignments=assignments,
        unassigned_count=len(eligible),
        roster_size=len(ordered),
    )


def _load_roster() -> list[RosterEntry]:
    """
    Admins with their live load counted from the complaints table on every call.
    Roster order follows profile creation so ties break the same way each time.
    """
    with session_scope() as db:
        admins = db.execute(
            select(Profile)
            .join(UserRole, UserRole.user_id == Profile.id)
            .where(UserRole.role == AppRole.ADMIN)
            .order_by(Profile.created_at, Profile.id)
        ).scalars().unique().all()

        loads = dict(
            db.execute(
                select(Complaint.assigned_to, func.count(Complaint.id))
                .where(Complaint.assigned_to.is_not(None), Complaint.status.in_(LIVE_STATUSES))
                .group_by(Complaint.assigned_to)
            ).all()
        )
        high_loads = dict(
            db.execute(
                select(Complaint.assigned_to, func.count(Complaint.id))
                .where(
                    Complaint.assigned_to.is_not(None),
                    Complaint.status.in_(LIVE_STATUSES),
                    Complaint.urgency.in_(HIGH_PRIORITY),
                )
                .group_by(Complaint.assigned_to)
            ).all()
        )

        return [
            RosterEntry(
                id=admin.id,
                full_name=admin.full_name,
                email=admin.email,
                assigned_count=loads.get(admin.id, 0),
                high_priority_count=high_loads.get(admin.id, 0),
            )
            for admin in admins
        ]


def _load_unassigned() -> list[dict[str, Any]]:
    with session_scope() as db:
        rows = db.execute(
            select(Complaint.id, Complaint.urgency, Complaint.assigned_to)
            .where(Complaint.assigned_to.is_(None), Complaint.status.in_(LIVE_STATUSES))
            .order_by(Complaint.created_at, Complaint.id)
        ).all()
        return [{"id": row.id, "urgency": row.urgency, "assigned_to": row.assigned_to} for row in rows]


def _assign_one(assignment: Assignment, actor_id: str) -> bool:
    with session_scope() as db:
        # Only claim complaints that are still unassigned at write time.
        result = db.execute(
            update(Complaint)
            .where(Complaint.id == assignment.complaint_id, Complaint.assigned_to.is_(None))
            .values(assigned_to=assignment.assignee_id)
        )
        if result.rowcount != 1:
            return False
        log_activity(
            db,
            assignment.complaint_id,
            actor_id,
            "assigned",
            "Complaint was auto-assigned by the workload balancer",
            {"assigned_to": assignment.assignee_id, "source": "workload_balancer"},
        )
        return True


async def load_roster() -> list[RosterEntry]:
    return await asyncio.to_thread(_load_roster)


async def apply_assignments(plan: WorkloadPlan, actor_id: str) -> AssignmentReport:
    """
    Issue every assignment as its own write, concurrently. One failing write
    does not stop the rest; failures are logged and listed in the report.
    """
    results = await asyncio.gather(
        *(asyncio.to_thread(_assign_one, assignment, actor_id) for assignment in plan.assignments),
        return_exceptions=True,
    )

    failed_ids: list[str] = []
    for assignment, result in zip(plan.assignments, results):
        if isinstance(result, BaseException):
            logger.error(
                "assignment failed complaint=%s assignee=%s: %s",
                assignment.complaint_id,
                assignment.assignee_id,
                result,
            )
            failed_ids.append(assignment.complaint_id)
        elif result is False:
            logger.warning("complaint=%s was assigned elsewhere before the update", assignment.complaint_id)
            failed_ids.append(assignment.complaint_id)

    attempted = len(plan.assignments)
    return AssignmentReport(
        attempted=attempted,
        assigned_count=attempted - len(failed_ids),
        failed_ids=failed_ids,
    )


def _summarize(plan: WorkloadPlan, report: AssignmentReport) -> str:
    if plan.reason == NO_ADMINS_AVAILABLE:
        return "No admin users found to assign complaints"
    if plan.reason == NOTHING_TO_ASSIGN:
        return "All complaints are already assigned"
    if report.failed_ids:
        return f"{report.assigned_count} of {report.attempted} complaints assigned to {plan.roster_size} admins"
    return f"{report.assigned_count} complaints assigned to {plan.roster_size} admins"


async def auto_balance(actor_id: str) -> BalanceResponse:
    unassigned = await asyncio.to_thread(_load_unassigned)
    roster = await load_roster()
    plan = balance_workload(unassigned, roster)

    if plan.reason is None:
        report = await apply_assignments(plan, actor_id)
    else:
        report = AssignmentReport(attempted=0, assigned_count=0)

    message = _summarize(plan, report)
    logger.info("workload balance by actor=%s: %s", actor_id, message)
    return BalanceResponse(message=message, plan=plan, report=report)
