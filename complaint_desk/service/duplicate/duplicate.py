import asyncio
from typing import Any, Iterable, Sequence

from sqlalchemy import select

import complaint_desk.config.config as configs
from complaint_desk.client.db.psql import session_scope
from complaint_desk.db.models import Complaint, Profile
from complaint_desk.model.duplicate.duplicate_response import ComplaintSummary, DuplicateGroup
from complaint_desk.model.enums import LIVE_STATUSES
from complaint_desk.service.sla.sla import parse_timestamp


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def detect_duplicate_groups(
    complaints: Iterable[Any],
    threshold: int = configs.DEFAULT_DUPLICATE_THRESHOLD,
    keywords: Sequence[str] = configs.ISSUE_KEYWORDS,
) -> list[DuplicateGroup]:
    """
    Bucket complaints by issue keyword and keep buckets with at least
    ``threshold`` members, largest first.

    Matching is a plain substring test on the lower-cased title and
    description, so "ac" also hits "academic". Cheap and explainable, not
    a similarity search.
    """
    if threshold < 1:
        raise ValueError("threshold must be at least 1")

    buckets: dict[str, dict[str, ComplaintSummary]] = {}
    for complaint in complaints:
        text = f"{_field(complaint, 'title') or ''} {_field(complaint, 'description') or ''}".lower()
        complaint_id = str(_field(complaint, "id"))
        for keyword in keywords:
            if keyword not in text:
                continue
            members = buckets.setdefault(keyword, {})
            if complaint_id in members:
                continue
            members[complaint_id] = ComplaintSummary(
                id=complaint_id,
                title=_field(complaint, "title") or "",
                student_name=_field(complaint, "student_name") or "Unknown",
                created_at=parse_timestamp(_field(complaint, "created_at")),
            )

    groups: list[DuplicateGroup] = []
    for keyword, members in buckets.items():
        if len(members) < threshold:
            continue
        ordered = sorted(members.values(), key=lambda summary: summary.created_at, reverse=True)
        groups.append(
            DuplicateGroup(
                keyword=keyword,
                label=keyword[:1].upper() + keyword[1:],
                count=len(ordered),
                members=ordered,
            )
        )

    # Stable sort keeps first-seen order between equal counts.
    groups.sort(key=lambda group: group.count, reverse=True)
    return groups


def _load_live_complaints() -> list[dict[str, Any]]:
    with session_scope() as db:
        rows = db.execute(
            select(
                Complaint.id,
                Complaint.title,
                Complaint.description,
                Complaint.created_at,
                Profile.full_name.label("student_name"),
            )
            .outerjoin(Profile, Profile.id == Complaint.student_id)
            .where(Complaint.status.in_(LIVE_STATUSES))
        ).all()
        return [dict(row._mapping) for row in rows]


async def find_duplicate_groups(threshold: int = configs.DEFAULT_DUPLICATE_THRESHOLD) -> list[DuplicateGroup]:
    complaints = await asyncio.to_thread(_load_live_complaints)
    return detect_duplicate_groups(complaints, threshold=threshold)
