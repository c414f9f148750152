import asyncio
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from complaint_desk.client.db.psql import session_scope
from complaint_desk.db.models import Comment, Complaint, Profile
from complaint_desk.model.complaint.complaint_request import (
    CommentRequest,
    ComplaintCreateRequest,
    StatusUpdateRequest,
)
from complaint_desk.model.complaint.complaint_response import CommentResponse, ComplaintResponse
from complaint_desk.model.enums import ComplaintStatus
from complaint_desk.service.activity.activity import log_activity
from complaint_desk.service.sla.sla import is_overdue, overdue_hours
from complaint_desk.util.clock import utcnow

logger = logging.getLogger(__name__)


class ComplaintNotFound(Exception):
    def __init__(self, complaint_id: str):
        super().__init__(f"complaint not found: {complaint_id}")
        self.complaint_id = complaint_id


class UnknownProfile(Exception):
    def __init__(self, profile_id: str):
        super().__init__(f"profile not found: {profile_id}")
        self.profile_id = profile_id


def to_response(complaint: Complaint, now: Optional[datetime] = None) -> ComplaintResponse:
    response = ComplaintResponse.model_validate(complaint)
    response.overdue = is_overdue(complaint.created_at, complaint.status, complaint.resolved_at, now=now)
    response.overdue_hours = round(overdue_hours(complaint.created_at, now=now), 2) if response.overdue else 0.0
    return response


def _get_or_raise(db: Session, complaint_id: str) -> Complaint:
    complaint = db.get(Complaint, complaint_id)
    if complaint is None:
        raise ComplaintNotFound(complaint_id)
    return complaint


def _require_profile(db: Session, profile_id: str) -> None:
    if db.get(Profile, profile_id) is None:
        raise UnknownProfile(profile_id)


def _create_complaint(req: ComplaintCreateRequest) -> ComplaintResponse:
    with session_scope() as db:
        _require_profile(db, req.student_id)
        complaint = Complaint(
            title=req.title,
            description=req.description,
            category=req.category,
            urgency=req.urgency,
            status=ComplaintStatus.OPEN,
            student_id=req.student_id,
        )
        db.add(complaint)
        db.flush()
        log_activity(
            db,
            complaint.id,
            req.student_id,
            "created",
            f'Complaint "{complaint.title}" was submitted',
            {"category": req.category.value, "urgency": req.urgency.value},
        )
        db.flush()
        return to_response(complaint)


def _get_complaint(complaint_id: str) -> ComplaintResponse:
    with session_scope() as db:
        return to_response(_get_or_raise(db, complaint_id))


def _update_status(complaint_id: str, req: StatusUpdateRequest) -> ComplaintResponse:
    with session_scope() as db:
        complaint = _get_or_raise(db, complaint_id)
        _require_profile(db, req.actor_id)
        previous = complaint.status
        # Repeating the current status leaves resolved_at and the feed untouched.
        if previous == req.status:
            return to_response(complaint)

        complaint.status = req.status
        complaint.resolved_at = utcnow() if req.status == ComplaintStatus.RESOLVED else None
        log_activity(
            db,
            complaint.id,
            req.actor_id,
            "status_changed",
            f'Complaint "{complaint.title}" moved from {previous.value} to {req.status.value}',
            {"from": previous.value, "to": req.status.value},
        )
        db.flush()
        logger.info("complaint=%s status %s -> %s", complaint.id, previous.value, req.status.value)
        return to_response(complaint)


def _add_comment(complaint_id: str, req: CommentRequest) -> CommentResponse:
    with session_scope() as db:
        complaint = _get_or_raise(db, complaint_id)
        _require_profile(db, req.user_id)
        comment = Comment(complaint_id=complaint.id, user_id=req.user_id, message=req.message)
        db.add(comment)
        log_activity(
            db,
            complaint.id,
            req.user_id,
            "commented",
            f'New comment on "{complaint.title}"',
        )
        db.flush()
        return CommentResponse.model_validate(comment)


async def create_complaint(req: ComplaintCreateRequest) -> ComplaintResponse:
    return await asyncio.to_thread(_create_complaint, req)


async def get_complaint(complaint_id: str) -> ComplaintResponse:
    return await asyncio.to_thread(_get_complaint, complaint_id)


async def update_status(complaint_id: str, req: StatusUpdateRequest) -> ComplaintResponse:
    return await asyncio.to_thread(_update_status, complaint_id, req)


async def add_comment(complaint_id: str, req: CommentRequest) -> CommentResponse:
    return await asyncio.to_thread(_add_comment, complaint_id, req)
