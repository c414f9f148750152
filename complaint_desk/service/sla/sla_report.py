import asyncio
from datetime import datetime
from typing import Optional

from sqlalchemy import select

import complaint_desk.config.config as configs
from complaint_desk.client.db.psql import session_scope
from complaint_desk.db.models import Complaint
from complaint_desk.model.enums import LIVE_STATUSES
from complaint_desk.model.sla.sla_response import AgeingItem, AgeingResponse, OverdueItem, SlaResponse
from complaint_desk.service.complaint.complaint import ComplaintNotFound
from complaint_desk.service.sla.sla import ageing_buckets, is_overdue, overdue_hours


def _sla_for_complaint(complaint_id: str, now: Optional[datetime]) -> SlaResponse:
    with session_scope() as db:
        complaint = db.get(Complaint, complaint_id)
        if complaint is None:
            raise ComplaintNotFound(complaint_id)
        overdue = is_overdue(complaint.created_at, complaint.status, complaint.resolved_at, now=now)
        return SlaResponse(
            complaint_id=complaint.id,
            overdue=overdue,
            overdue_hours=round(overdue_hours(complaint.created_at, now=now), 2) if overdue else 0.0,
            sla_hours=configs.SLA_HOURS,
        )


def _load_live() -> list[Complaint]:
    with session_scope() as db:
        complaints = db.execute(select(Complaint).where(Complaint.status.in_(LIVE_STATUSES))).scalars().all()
        db.expunge_all()
        return list(complaints)


def _list_overdue(now: Optional[datetime]) -> list[OverdueItem]:
    items = [
        OverdueItem(
            id=c.id,
            title=c.title,
            status=c.status,
            urgency=c.urgency,
            created_at=c.created_at,
            overdue_hours=round(overdue_hours(c.created_at, now=now), 2),
        )
        for c in _load_live()
        if is_overdue(c.created_at, c.status, c.resolved_at, now=now)
    ]
    items.sort(key=lambda item: item.overdue_hours, reverse=True)
    return items


def _ageing_report(now: Optional[datetime]) -> AgeingResponse:
    buckets = ageing_buckets(_load_live(), now=now)
    return AgeingResponse(
        counts={name: len(members) for name, members in buckets.items()},
        buckets={name: [AgeingItem.model_validate(c) for c in members] for name, members in buckets.items()},
    )


async def sla_for_complaint(complaint_id: str, now: Optional[datetime] = None) -> SlaResponse:
    return await asyncio.to_thread(_sla_for_complaint, complaint_id, now)


async def list_overdue(now: Optional[datetime] = None) -> list[OverdueItem]:
    return await asyncio.to_thread(_list_overdue, now)


async def ageing_report(now: Optional[datetime] = None) -> AgeingResponse:
    return await asyncio.to_thread(_ageing_report, now)
