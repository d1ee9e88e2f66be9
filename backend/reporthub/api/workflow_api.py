import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from reporthub.context import AppContext, get_context
from reporthub.models.order import Order, WorkflowUpdate
from reporthub.services import delivery

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/workflow/update")
async def update_order(
    update: WorkflowUpdate,
    x_workflow_secret: Optional[str] = Header(default=None),
    ctx: AppContext = Depends(get_context),
):
    """Status pushed by the print shop. The stored status is authoritative;
    tracking sessions follow it."""
    secret = ctx.settings.workflow_secret
    if secret and not hmac.compare_digest(secret, x_workflow_secret or ""):
        raise HTTPException(status_code=401, detail="Invalid workflow secret")

    session = ctx.session()
    try:
        order = session.get(Order, update.order_id)
        if not order:
            raise HTTPException(status_code=404, detail="Order not found")

        if update.tracking_number:
            order.tracking_number = update.tracking_number
            session.add(order)
            session.commit()
            session.refresh(order)

        applied = delivery.apply_status(session, order, update.status)
        status = order.delivery_status
    finally:
        session.close()

    if applied:
        ctx.tracker.status_changed(update.order_id, status)
    logger.info("Workflow update order_id=%s requested=%s applied=%s", update.order_id, update.status, applied)
    return {"ok": True, "order_id": update.order_id, "applied": applied, "delivery_status": status}
