import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import JSONResponse

import complaint_desk.config.config as configs
from complaint_desk.model.activity.activity_response import ActivityResponse
from complaint_desk.model.complaint.complaint_request import (
    CommentRequest,
    ComplaintCreateRequest,
    StatusUpdateRequest,
)
from complaint_desk.model.complaint.complaint_response import CommentResponse, ComplaintResponse
from complaint_desk.model.duplicate.duplicate_response import DuplicateGroup
from complaint_desk.model.reaper.reaper_request import ReaperRequest
from complaint_desk.model.reaper.reaper_response import ReaperReport
from complaint_desk.model.sla.sla_response import AgeingResponse, OverdueItem, SlaResponse
from complaint_desk.model.workload.workload_request import BalanceRequest
from complaint_desk.model.workload.workload_response import BalanceResponse, RosterEntry
from complaint_desk.service.activity.activity import list_activity
from complaint_desk.service.complaint.complaint import (
    ComplaintNotFound,
    UnknownProfile,
    add_comment,
    create_complaint,
    get_complaint,
    update_status,
)
from complaint_desk.service.duplicate.duplicate import find_duplicate_groups
from complaint_desk.service.reaper.reaper import run_stale_reaper
from complaint_desk.service.sla.sla import InvalidTimestamp
from complaint_desk.service.sla.sla_report import ageing_report, list_overdue, sla_for_complaint
from complaint_desk.service.workload.workload import auto_balance, load_roster

logger = logging.getLogger(__name__)

api_router = APIRouter()


def _not_found(exc: ComplaintNotFound) -> HTTPException:
    return HTTPException(status_code=404, detail=str(exc))


def _unknown_profile(exc: UnknownProfile) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))


@api_router.post("/complaints", response_model=ComplaintResponse, status_code=201)
async def create_complaint_endpoint(req: ComplaintCreateRequest):
    try:
        return await create_complaint(req)
    except UnknownProfile as exc:
        raise _unknown_profile(exc)


@api_router.get("/complaints/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint_endpoint(complaint_id: str):
    try:
        return await get_complaint(complaint_id)
    except ComplaintNotFound as exc:
        raise _not_found(exc)


@api_router.patch("/complaints/{complaint_id}/status", response_model=ComplaintResponse)
async def update_status_endpoint(complaint_id: str, req: StatusUpdateRequest):
    try:
        return await update_status(complaint_id, req)
    except ComplaintNotFound as exc:
        raise _not_found(exc)
    except UnknownProfile as exc:
        raise _unknown_profile(exc)


@api_router.post("/complaints/{complaint_id}/comments", response_model=CommentResponse, status_code=201)
async def add_comment_endpoint(complaint_id: str, req: CommentRequest):
    try:
        return await add_comment(complaint_id, req)
    except ComplaintNotFound as exc:
        raise _not_found(exc)
    except UnknownProfile as exc:
        raise _unknown_profile(exc)


@api_router.get("/complaints/{complaint_id}/sla", response_model=SlaResponse)
async def complaint_sla_endpoint(complaint_id: str):
    try:
        return await sla_for_complaint(complaint_id)
    except ComplaintNotFound as exc:
        raise _not_found(exc)
    except InvalidTimestamp as exc:
        raise HTTPException(status_code=422, detail=str(exc))


@api_router.get("/sla/overdue", response_model=List[OverdueItem])
async def overdue_endpoint():
    return await list_overdue()


@api_router.get("/sla/ageing", response_model=AgeingResponse)
async def ageing_endpoint():
    return await ageing_report()


@api_router.get("/duplicates", response_model=List[DuplicateGroup])
async def duplicates_endpoint(threshold: int = Query(configs.DEFAULT_DUPLICATE_THRESHOLD, ge=1)):
    return await find_duplicate_groups(threshold=threshold)


@api_router.get("/workload/roster", response_model=List[RosterEntry])
async def roster_endpoint():
    return await load_roster()


@api_router.post("/workload/balance", response_model=BalanceResponse)
async def balance_endpoint(req: BalanceRequest):
    return await auto_balance(req.actor_id)


@api_router.post("/maintenance/auto-close-stale", response_model=ReaperReport)
async def auto_close_stale_endpoint(req: Optional[ReaperRequest] = None):
    stale_days = req.stale_days if req is not None else configs.DEFAULT_STALE_DAYS
    try:
        return await run_stale_reaper(stale_days=stale_days)
    except Exception as exc:
        logger.exception("auto-close run failed")
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


@api_router.get("/activity", response_model=List[ActivityResponse])
async def activity_endpoint(
    complaint_id: Optional[str] = Query(None, alias="complaintId"),
    limit: int = Query(50, ge=1, le=500),
):
    return await list_activity(complaint_id=complaint_id, limit=limit)
