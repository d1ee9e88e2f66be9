import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlmodel import Session, select

from reporthub.context import AppContext, current_user, get_context
from reporthub.models import report as report_model
from reporthub.models.report import Report, ReportCreate, ReportRead
from reporthub.models.user import User
from reporthub.utils.clock import utcnow

logger = logging.getLogger(__name__)
router = APIRouter()


def load_owned_report(session: Session, report_id: int, user: User) -> Report:
    report = session.get(Report, report_id)
    if report is None or report.user_id != user.id:
        logger.warning("Report id=%s not found for user_id=%s", report_id, user.id)
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.post("/", response_model=ReportRead, status_code=201)
async def create_report(
    req: ReportCreate,
    background: BackgroundTasks,
    ctx: AppContext = Depends(get_context),
    user: User = Depends(current_user),
):
    """Store a report request, price it and queue content generation."""
    validation = ctx.validator.validate_report(req.model_dump())
    if not validation["ok"]:
        logger.info("Rejected report submission user_id=%s issues=%s", user.id, validation["issues"])
        raise HTTPException(status_code=422, detail=validation["issues"])

    quote = ctx.pricing.quote(req.pages, req.print_side, req.binding, req.cover)

    session = ctx.session()
    try:
        report = Report(
            user_id=user.id,
            title=req.title.strip(),
            topic=req.topic.strip(),
            pages=req.pages,
            format=req.format,
            print_side=req.print_side,
            binding=req.binding,
            cover=req.cover,
            additional_instructions=req.additional_instructions,
            status=report_model.GENERATING,
            price=quote.total,
        )
        session.add(report)
        session.commit()
        session.refresh(report)
        logger.info("Created report id=%s user_id=%s price=%s", report.id, user.id, report.price)
        result = ReportRead.model_validate(report)
    finally:
        session.close()

    background.add_task(ctx.generator.run, ctx.engine, result.id)
    return result


@router.get("/", response_model=List[ReportRead])
async def list_reports(ctx: AppContext = Depends(get_context), user: User = Depends(current_user)):
    session = ctx.session()
    try:
        rows = session.exec(
            select(Report).where(Report.user_id == user.id).order_by(Report.created_at.desc(), Report.id.desc())
        ).all()
        return [ReportRead.model_validate(r) for r in rows]
    finally:
        session.close()


@router.get("/{report_id}", response_model=ReportRead)
async def get_report(report_id: int, ctx: AppContext = Depends(get_context), user: User = Depends(current_user)):
    session = ctx.session()
    try:
        return ReportRead.model_validate(load_owned_report(session, report_id, user))
    finally:
        session.close()


@router.post("/{report_id}/generate", response_model=ReportRead, status_code=202)
async def regenerate_report(
    report_id: int,
    background: BackgroundTasks,
    ctx: AppContext = Depends(get_context),
    user: User = Depends(current_user),
):
    session = ctx.session()
    try:
        report = load_owned_report(session, report_id, user)
        if report.status == report_model.DELIVERED:
            raise HTTPException(status_code=409, detail="Report has already been delivered")
        report.status = report_model.GENERATING
        report.updated_at = utcnow()
        session.add(report)
        session.commit()
        session.refresh(report)
        result = ReportRead.model_validate(report)
    finally:
        session.close()

    logger.info("Regeneration queued report_id=%s", report_id)
    background.add_task(ctx.generator.run, ctx.engine, report_id)
    return result
