import asyncio
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from complaint_desk.client.db.psql import session_scope
from complaint_desk.db.models import ActivityEntry
from complaint_desk.model.activity.activity_response import ActivityResponse


def log_activity(
    db: Session,
    complaint_id: Optional[str],
    user_id: str,
    action_type: str,
    description: str,
    metadata: Optional[dict[str, Any]] = None,
) -> ActivityEntry:
    """Append a feed entry inside the caller's transaction."""
    entry = ActivityEntry(
        complaint_id=complaint_id,
        user_id=user_id,
        action_type=action_type,
        description=description,
        meta=metadata or {},
    )
    db.add(entry)
    return entry


def to_response(entry: ActivityEntry) -> ActivityResponse:
    return ActivityResponse(
        id=entry.id,
        action_type=entry.action_type,
        description=entry.description,
        complaint_id=entry.complaint_id,
        user_id=entry.user_id,
        metadata=entry.meta or {},
        created_at=entry.created_at,
    )


def _list_activity(complaint_id: Optional[str], limit: int) -> list[ActivityResponse]:
    with session_scope() as db:
        stmt = select(ActivityEntry).order_by(ActivityEntry.created_at.desc()).limit(limit)
        if complaint_id:
            stmt = stmt.where(ActivityEntry.complaint_id == complaint_id)
        return [to_response(entry) for entry in db.execute(stmt).scalars()]


async def list_activity(complaint_id: Optional[str] = None, limit: int = 50) -> list[ActivityResponse]:
    return await asyncio.to_thread(_list_activity, complaint_id, limit)
