"""Delivery lifecycle of a print order.

One canonical status enum drives both the order page and the tracking page;
the pages differ only in the labels they show, which live in the lookup
tables below.
"""
import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlmodel import Session

from reporthub.models import report as report_model
from reporthub.models.order import Order
from reporthub.models.report import Report
from reporthub.utils.clock import utcnow

logger = logging.getLogger(__name__)


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PRINTING = "printing"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


STEPS = [
    DeliveryStatus.PENDING,
    DeliveryStatus.CONFIRMED,
    DeliveryStatus.PRINTING,
    DeliveryStatus.OUT_FOR_DELIVERY,
    DeliveryStatus.DELIVERED,
]

TERMINAL = {DeliveryStatus.DELIVERED, DeliveryStatus.CANCELLED}

# tracking page vocabulary
ALIASES = {
    "printed": DeliveryStatus.PRINTING,
    "shipped": DeliveryStatus.OUT_FOR_DELIVERY,
}

STEP_LABELS: Dict[str, Dict[DeliveryStatus, tuple]] = {
    "order": {
        DeliveryStatus.PENDING: ("Order Placed", "We have received your print order"),
        DeliveryStatus.CONFIRMED: ("Order Confirmed", "Your order has been confirmed by the print shop"),
        DeliveryStatus.PRINTING: ("Printing", "Your report is being printed and bound"),
        DeliveryStatus.OUT_FOR_DELIVERY: ("Out for Delivery", "Your report is on the way"),
        DeliveryStatus.DELIVERED: ("Delivered", "Your report has been delivered"),
    },
    "tracking": {
        DeliveryStatus.PENDING: ("Order Confirmed", "Your order has been received and is being processed"),
        DeliveryStatus.CONFIRMED: ("Queued for Printing", "Your order is scheduled with the print shop"),
        DeliveryStatus.PRINTING: ("Printing in Progress", "Your report is being printed with premium quality"),
        DeliveryStatus.OUT_FOR_DELIVERY: ("Out for Delivery", "Your report is on the way to your address"),
        DeliveryStatus.DELIVERED: ("Delivered", "Successfully delivered to your address"),
    },
}

BADGE_TEXT = {
    DeliveryStatus.PENDING: "Processing",
    DeliveryStatus.CONFIRMED: "Confirmed",
    DeliveryStatus.PRINTING: "Printing",
    DeliveryStatus.OUT_FOR_DELIVERY: "Shipped",
    DeliveryStatus.DELIVERED: "Delivered",
    DeliveryStatus.CANCELLED: "Cancelled",
}


@dataclass
class Step:
    status: str
    label: str
    description: str
    completed: bool
    current: bool

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def normalize_status(value: Any) -> DeliveryStatus:
    """Map a stored or incoming status string onto the canonical enum.

    Raises ValueError for unknown values.
    """
    if isinstance(value, DeliveryStatus):
        return value
    key = str(value).strip().lower()
    if key in ALIASES:
        return ALIASES[key]
    return DeliveryStatus(key)


def ordinal(status: Any) -> int:
    status = normalize_status(status)
    if status == DeliveryStatus.CANCELLED:
        return -1
    return STEPS.index(status)


def can_advance(current: Any, new: Any) -> bool:
    current = normalize_status(current)
    new = normalize_status(new)
    if current in TERMINAL:
        return False
    if new == DeliveryStatus.CANCELLED:
        return True
    return ordinal(new) > ordinal(current)


def advance(order: Order, new_status: Any) -> bool:
    """Move ``order`` to ``new_status`` if the transition is forward.

    Backward, repeated and post-terminal requests leave the order untouched
    and return False.
    """
    try:
        new = normalize_status(new_status)
    except ValueError:
        logger.warning("Unknown delivery status order_id=%s requested=%s", order.id, new_status)
        return False

    if not can_advance(order.delivery_status, new):
        logger.warning(
            "Rejected delivery transition order_id=%s %s -> %s",
            order.id, order.delivery_status, new.value,
        )
        return False

    logger.info("Delivery transition order_id=%s %s -> %s", order.id, order.delivery_status, new.value)
    order.delivery_status = new.value
    order.updated_at = utcnow()
    return True


def apply_status(session: Session, order: Order, new_status: Any) -> bool:
    """advance() plus persistence and the report side effect of delivery."""
    applied = advance(order, new_status)
    if not applied:
        return False

    session.add(order)
    if order.delivery_status == DeliveryStatus.DELIVERED.value:
        report = session.get(Report, order.report_id)
        if report is not None:
            report.status = report_model.DELIVERED
            report.updated_at = utcnow()
            session.add(report)
            logger.info("Report id=%s marked delivered via order_id=%s", report.id, order.id)
    session.commit()
    session.refresh(order)
    return True


def derive_steps(current_status: Any, view: str = "order") -> List[Step]:
    current = normalize_status(current_status)
    labels = STEP_LABELS.get(view, STEP_LABELS["order"])

    steps = []
    for status in STEPS:
        title, description = labels[status]
        if current == DeliveryStatus.CANCELLED:
            completed = is_current = False
        else:
            completed = ordinal(status) <= ordinal(current)
            is_current = status == current
        steps.append(Step(
            status=status.value,
            label=title,
            description=description,
            completed=completed,
            current=is_current,
        ))
    return steps


def badge_text(status: Any) -> str:
    try:
        return BADGE_TEXT[normalize_status(status)]
    except ValueError:
        return "Unknown"


def describe(order: Order, view: str = "order", report: Optional[Report] = None) -> Dict[str, Any]:
    payload = {
        "id": order.id,
        "report_id": order.report_id,
        "delivery_status": order.delivery_status,
        "status_text": badge_text(order.delivery_status),
        "delivery_address": order.address_payload(),
        "total_amount": order.total_amount,
        "payment_status": order.payment_status,
        "tracking_number": order.tracking_number,
        "created_at": order.created_at.isoformat(),
        "updated_at": order.updated_at.isoformat(),
        "steps": [s.as_dict() for s in derive_steps(order.delivery_status, view)],
    }
    if report is not None:
        payload["report"] = {"title": report.title, "pages": report.pages}
    return payload
