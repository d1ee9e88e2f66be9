import logging
import time
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)


class FulfilmentNotifier:
    """Posts order events to the print shop's webhook, if one is configured."""

    def __init__(self, webhook_url: Optional[str] = None, max_retries: int = 3, backoff: float = 0.5):
        self.webhook = webhook_url
        self.max_retries = max_retries
        self.backoff = backoff
        logger.debug("FulfilmentNotifier initialized with webhook=%s max_retries=%s", self.webhook, self.max_retries)

    def notify(self, event: str, payload: Dict[str, Any]) -> bool:
        if not self.webhook:
            logger.debug("No fulfilment webhook configured; skipping event=%s", event)
            return False

        body = {"event": event, **payload}
        headers = {"Content-Type": "application/json"}
        # lets the receiver drop duplicate deliveries of the same event
        if "order_id" in payload:
            headers["Idempotency-Key"] = f"order-{payload['order_id']}-{event}"

        for attempt in range(1, self.max_retries + 1):
            try:
                logger.debug("Notifying fulfilment attempt=%s event=%s", attempt, event)
                resp = requests.post(self.webhook, json=body, timeout=5, headers=headers)
                resp.raise_for_status()
                logger.info("Fulfilment notified event=%s status=%s", event, resp.status_code)
                return True
            except requests.RequestException as e:
                logger.warning("Attempt %s: failed to notify fulfilment event=%s: %s", attempt, event, e)
            if attempt < self.max_retries:
                time.sleep(self.backoff * attempt)

        logger.error("All %s attempts to notify fulfilment failed event=%s", self.max_retries, event)
        return False

    def order_placed(self, order) -> bool:
        return self.notify("order_placed", {
            "order_id": order.id,
            "report_id": order.report_id,
            "total_amount": order.total_amount,
            "tracking_number": order.tracking_number,
        })

    def status_changed(self, order) -> bool:
        return self.notify("status_changed", {
            "order_id": order.id,
            "delivery_status": order.delivery_status,
        })
