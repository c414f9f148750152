"""
Auto-close stale complaints.

A live complaint is stale when its row has not been updated for
``stale_days`` and nobody has commented on it inside the same window. Each
stale complaint is closed in its own transaction together with an
explanatory comment and an ``auto_closed`` feed entry, so one bad row never
sinks the whole run.

Usage:
    from complaint_desk.service.reaper.reaper import run_stale_reaper

    report = await run_stale_reaper(stale_days=5)
    print(f"Closed {report.closed_count} complaints")
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy import exists, select, update

import complaint_desk.config.config as configs
from complaint_desk.client.db import redis_store
from complaint_desk.client.db.psql import session_scope
from complaint_desk.db.models import Comment, Complaint
from complaint_desk.model.enums import LIVE_STATUSES, ComplaintStatus
from complaint_desk.model.reaper.reaper_response import ReaperReport
from complaint_desk.service.activity.activity import log_activity
from complaint_desk.util.clock import as_utc, utcnow

logger = logging.getLogger(__name__)

AUTO_CLOSED = "auto_closed"
STALE_REASON = "stale_complaint"


def _closure_comment(stale_days: int) -> str:
    return (
        f"This complaint was automatically closed due to {stale_days} days of inactivity. "
        "If the issue persists, please reopen or create a new complaint."
    )


def _find_closure_set(cutoff: datetime) -> list[dict[str, Any]]:
    """
    Live complaints last updated before the cutoff, minus those with a
    comment at or after the cutoff.
    """
    with session_scope() as db:
        candidates = db.execute(
            select(Complaint.id, Complaint.title, Complaint.student_id)
            .where(Complaint.status.in_(LIVE_STATUSES), Complaint.updated_at < cutoff)
            .order_by(Complaint.updated_at, Complaint.id)
        ).all()
        logger.info("found %s potentially stale complaints", len(candidates))

        closure_set: list[dict[str, Any]] = []
        for candidate in candidates:
            recent_comment = db.execute(
                select(Comment.id)
                .where(Comment.complaint_id == candidate.id, Comment.created_at >= cutoff)
                .limit(1)
            ).first()
            if recent_comment is None:
                closure_set.append(
                    {"id": candidate.id, "title": candidate.title, "student_id": candidate.student_id}
                )

        return closure_set


def _close_one(candidate: dict[str, Any], cutoff: datetime, now: datetime, stale_days: int) -> bool:
    """
    Close one complaint. The update re-checks status, staleness and recent
    comments, so a complaint touched or commented on since the scan, or
    already closed by an overlapping run, is left alone and reported as not
    closed.
    """
    actor_id = configs.SYSTEM_ACTOR_ID or candidate["student_id"]
    with session_scope() as db:
        result = db.execute(
            update(Complaint)
            .where(
                Complaint.id == candidate["id"],
                Complaint.status.in_(LIVE_STATUSES),
                Complaint.updated_at < cutoff,
                ~exists(
                    select(Comment.id).where(Comment.complaint_id == Complaint.id, Comment.created_at >= cutoff)
                ),
            )
            .values(status=ComplaintStatus.RESOLVED, resolved_at=now)
        )
        if result.rowcount != 1:
            return False

        db.add(Comment(complaint_id=candidate["id"], user_id=actor_id, message=_closure_comment(stale_days)))
        log_activity(
            db,
            candidate["id"],
            actor_id,
            AUTO_CLOSED,
            f'Complaint "{candidate["title"]}" was auto-closed due to inactivity',
            {"reason": STALE_REASON, "days_inactive": stale_days},
        )
        return True


def _acquire_lock() -> bool:
    if not configs.REAPER_LOCK_ENABLED or redis_store.redis_client is None:
        return True
    return bool(
        redis_store.redis_client.set(configs.REAPER_LOCK_KEY, "1", nx=True, ex=configs.REAPER_LOCK_TTL_SEC)
    )


def _release_lock() -> None:
    if not configs.REAPER_LOCK_ENABLED or redis_store.redis_client is None:
        return
    redis_store.redis_client.delete(configs.REAPER_LOCK_KEY)


async def run_stale_reaper(stale_days: int = configs.DEFAULT_STALE_DAYS, now: Optional[datetime] = None) -> ReaperReport:
    """
    Close every stale live complaint and report what happened.

    A failure of the initial scan propagates; failures while closing an
    individual complaint are logged and listed in ``failed_ids``.
    """
    if stale_days <= 0:
        raise ValueError("stale_days must be positive")

    current = as_utc(now) if now is not None else utcnow()
    cutoff = current - timedelta(days=stale_days)

    if not await asyncio.to_thread(_acquire_lock):
        logger.warning("auto-close skipped: another run holds the lock")
        return ReaperReport(success=False, message="Auto-close run already in progress")

    try:
        logger.info(
            "looking for stale complaints older than %s days (before %s)", stale_days, cutoff.isoformat()
        )
        closure_set = await asyncio.to_thread(_find_closure_set, cutoff)
        logger.info("%s complaints will be auto-closed", len(closure_set))

        closed_ids: list[str] = []
        failed_ids: list[str] = []
        for candidate in closure_set:
            try:
                closed = await asyncio.to_thread(_close_one, candidate, cutoff, current, stale_days)
            except Exception:
                logger.exception("failed to auto-close complaint=%s", candidate["id"])
                failed_ids.append(candidate["id"])
                continue
            if closed:
                closed_ids.append(candidate["id"])
            else:
                logger.info("complaint=%s changed since scan, left open", candidate["id"])
    finally:
        await asyncio.to_thread(_release_lock)

    return ReaperReport(
        success=True,
        message=f"Auto-closed {len(closed_ids)} stale complaints",
        closed_count=len(closed_ids),
        closed_ids=closed_ids,
        attempted=len(closure_set),
        failed_ids=failed_ids,
    )
