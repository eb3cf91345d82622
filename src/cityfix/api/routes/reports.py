"""Report routes: create, read, list, community feed, status/update."""

from fastapi import APIRouter

from cityfix.dependencies import CurrentUser, DBSession
from cityfix.models.report import (
    ReportCreate,
    ReportEnvelope,
    ReportResponse,
    ReportUpdate,
    report_response,
)
from cityfix.services.lifecycle import ReportLifecycleManager

router = APIRouter(tags=["Reports"])


@router.post("/reports", response_model=ReportEnvelope, status_code=201)
async def create_report(body: ReportCreate, current: CurrentUser, db: DBSession):
    manager = ReportLifecycleManager(db)
    row = await manager.create(current["sub"], body)
    return ReportEnvelope(report=report_response(row))


@router.get("/reports", response_model=list[ReportResponse])
async def list_my_reports(current: CurrentUser, db: DBSession):
    """Reports owned by the caller, newest first."""
    rows = await ReportLifecycleManager(db).list_for_user(current["sub"])
    return [report_response(r) for r in rows]


@router.get("/reports/community/feed", response_model=list[ReportResponse])
async def community_feed(current: CurrentUser, db: DBSession):
    """Most recent reports from every user."""
    rows = await ReportLifecycleManager(db).list_community_feed()
    return [report_response(r) for r in rows]


@router.get("/reports/{report_id}", response_model=ReportResponse)
async def get_report(report_id: str, current: CurrentUser, db: DBSession):
    row = await ReportLifecycleManager(db).get_by_id(report_id, current["sub"])
    return report_response(row)


@router.put("/reports/{report_id}", response_model=ReportEnvelope)
async def update_report(report_id: str, body: ReportUpdate, current: CurrentUser, db: DBSession):
    row = await ReportLifecycleManager(db).apply_update(
        report_id,
        current["sub"],
        status=body.status,
        update_text=body.update_text,
    )
    return ReportEnvelope(report=report_response(row))
