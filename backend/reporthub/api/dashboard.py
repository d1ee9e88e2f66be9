import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import select
from starlette.responses import HTMLResponse

from reporthub.context import AppContext, current_user, get_context
from reporthub.models import report as report_model
from reporthub.models.order import Order
from reporthub.models.report import Report
from reporthub.models.user import User

logger = logging.getLogger(__name__)
router = APIRouter()


def _render_summary_html(stats: dict) -> str:
    return f"""
<!doctype html>
<html>
<head>
  <meta charset="utf-8" />
  <title>Dashboard Summary</title>
  <style>
    body {{ font-family: Inter, system-ui, -apple-system, 'Segoe UI', Roboto, Arial; background:#f3f4f6; padding:24px; }}
    .cards {{ display:flex; gap:16px; }}
    .card {{ background:white; padding:20px; border-radius:8px; flex:1 }}
    .title {{ color:#6b7280; font-size:13px }}
    .value {{ font-size:28px; font-weight:700; margin-top:6px }}
  </style>
</head>
<body>
  <h1>Dashboard Summary</h1>
  <div class="cards">
    <div class="card"><div class="title">Total Reports</div><div class="value">{stats['total_reports']}</div></div>
    <div class="card"><div class="title">In Progress</div><div class="value">{stats['pending_reports']}</div></div>
    <div class="card"><div class="title">Completed</div><div class="value">{stats['completed_reports']}</div></div>
    <div class="card"><div class="title">Total Spent</div><div class="value">&#8377;{stats['total_spent']:.2f}</div></div>
    <div class="card"><div class="title">Active Orders</div><div class="value">{stats['active_orders']}</div></div>
  </div>
</body>
</html>
"""


@router.get("/summary")
async def summary(request: Request, ctx: AppContext = Depends(get_context), user: User = Depends(current_user)) -> Any:
    session = ctx.session()
    try:
        reports = session.exec(select(Report).where(Report.user_id == user.id)).all()
        orders = session.exec(select(Order).where(Order.user_id == user.id)).all()
        stats = {
            "total_reports": len(reports),
            "pending_reports": sum(1 for r in reports if r.status in report_model.PENDING_STATUSES),
            "completed_reports": sum(1 for r in reports if r.status in report_model.FINISHED_STATUSES),
            "failed_reports": sum(1 for r in reports if r.status == report_model.FAILED),
            "total_spent": float(sum(r.price or 0 for r in reports)),
            "active_orders": sum(1 for o in orders if o.delivery_status not in ("delivered", "cancelled")),
        }
    except Exception as e:
        logger.exception("Failed to compute summary: %s", e)
        raise HTTPException(status_code=500, detail="Failed to compute dashboard summary")
    finally:
        session.close()

    if "text/html" in request.headers.get("accept", ""):
        return HTMLResponse(content=_render_summary_html(stats))
    return stats
