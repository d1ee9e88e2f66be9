import json
import logging
import secrets
from typing import Any, Dict, List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlmodel import Session, select

from reporthub.api.reports import load_owned_report
from reporthub.context import AppContext, current_user, get_context
from reporthub.models import report as report_model
from reporthub.models.order import Order, OrderCreate, StatusChange
from reporthub.models.report import Report
from reporthub.models.user import User
from reporthub.services import delivery

logger = logging.getLogger(__name__)
router = APIRouter()


def new_tracking_number() -> str:
    return "RH" + secrets.token_hex(5).upper()


def load_owned_order(session: Session, order_id: int, user: User) -> Order:
    order = session.get(Order, order_id)
    if order is None or order.user_id != user.id:
        logger.warning("Order id=%s not found for user_id=%s", order_id, user.id)
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.post("/", status_code=201)
async def place_order(
    req: OrderCreate,
    background: BackgroundTasks,
    ctx: AppContext = Depends(get_context),
    user: User = Depends(current_user),
) -> Dict[str, Any]:
    """Commit to printing and delivering one of the user's reports."""
    validation = ctx.validator.validate_order(req.model_dump())
    if not validation["ok"]:
        raise HTTPException(status_code=422, detail=validation["issues"])

    session = ctx.session()
    try:
        report = load_owned_report(session, req.report_id, user)
        if report.status == report_model.FAILED:
            raise HTTPException(status_code=409, detail="Report generation failed; regenerate before ordering")

        totals = ctx.pricing.order_total(report.price)
        order = Order(
            user_id=user.id,
            report_id=report.id,
            delivery_address=json.dumps({
                "address": req.address,
                "coordinates": req.coordinates.model_dump(),
                "contactInfo": req.contact.model_dump(),
                "instructions": req.instructions or req.contact.deliveryInstructions,
            }),
            total_amount=totals["total_amount"],
            delivery_status=delivery.DeliveryStatus.PENDING.value,
            tracking_number=new_tracking_number(),
        )
        session.add(order)
        session.commit()
        session.refresh(order)
        logger.info("Placed order id=%s report_id=%s total=%s", order.id, report.id, order.total_amount)
        result = delivery.describe(order, report=report)
    finally:
        session.close()

    background.add_task(ctx.notifier.order_placed, order)
    return result


@router.get("/")
async def list_orders(
    view: str = "tracking",
    ctx: AppContext = Depends(get_context),
    user: User = Depends(current_user),
) -> List[Dict[str, Any]]:
    session = ctx.session()
    try:
        rows = session.exec(
            select(Order, Report)
            .join(Report, Report.id == Order.report_id)
            .where(Order.user_id == user.id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        ).all()
        return [delivery.describe(order, view=view, report=report) for order, report in rows]
    finally:
        session.close()


@router.get("/{order_id}")
async def get_order(
    order_id: int,
    view: str = "order",
    ctx: AppContext = Depends(get_context),
    user: User = Depends(current_user),
) -> Dict[str, Any]:
    session = ctx.session()
    try:
        order = load_owned_order(session, order_id, user)
        return delivery.describe(order, view=view, report=session.get(Report, order.report_id))
    finally:
        session.close()


@router.post("/{order_id}/advance")
async def advance_order(
    order_id: int,
    change: StatusChange,
    background: BackgroundTasks,
    ctx: AppContext = Depends(get_context),
    user: User = Depends(current_user),
) -> Dict[str, Any]:
    """Request a delivery transition; rejected requests report applied=false."""
    session = ctx.session()
    try:
        order = load_owned_order(session, order_id, user)
        applied = delivery.apply_status(session, order, change.status)
        status = order.delivery_status
    finally:
        session.close()

    if applied:
        ctx.tracker.status_changed(order_id, status)
        background.add_task(ctx.notifier.status_changed, order)
    return {"order_id": order_id, "requested": change.status, "applied": applied, "delivery_status": status}


@router.post("/{order_id}/tracking")
async def start_tracking(order_id: int, ctx: AppContext = Depends(get_context), user: User = Depends(current_user)):
    session = ctx.session()
    try:
        order = load_owned_order(session, order_id, user)
        destination = order.destination()
        status = order.delivery_status
    finally:
        session.close()

    if destination is None:
        raise HTTPException(status_code=422, detail="Order has no delivery coordinates")

    tracking = ctx.tracker.watch(order_id, status, destination)
    if tracking is None:
        raise HTTPException(status_code=409, detail=f"Order is {status}; live tracking is only available out for delivery")
    return tracking.snapshot()


@router.get("/{order_id}/tracking")
async def read_tracking(order_id: int, ctx: AppContext = Depends(get_context), user: User = Depends(current_user)):
    session = ctx.session()
    try:
        load_owned_order(session, order_id, user)
    finally:
        session.close()

    tracking = ctx.tracker.get(order_id)
    if tracking is None:
        raise HTTPException(status_code=404, detail="Tracking is not active for this order")
    return tracking.snapshot()


@router.delete("/{order_id}/tracking")
async def stop_tracking(order_id: int, ctx: AppContext = Depends(get_context), user: User = Depends(current_user)):
    session = ctx.session()
    try:
        load_owned_order(session, order_id, user)
    finally:
        session.close()
    return {"order_id": order_id, "stopped": ctx.tracker.release(order_id)}
