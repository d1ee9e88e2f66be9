"""Simulated live tracking for orders that are out for delivery.

The marker position is synthetic: it starts a fixed offset away from the
destination and closes 10% of the remaining gap on every tick, so it only
approaches the destination asymptotically. Good enough to animate a map,
not a substitute for a real location feed.
"""
import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from reporthub.services.delivery import DeliveryStatus, normalize_status

logger = logging.getLogger(__name__)

SEED_OFFSET = (0.01, 0.01)
APPROACH_FACTOR = 0.1
ETA_RANGE_MINUTES = (10, 30)
# ticks without a viewer reading the position before the session ends itself
IDLE_TICKS = 3


@dataclass
class DeliveryPosition:
    lat: float
    lng: float


class PositionInterpolator:
    def __init__(self, destination: Tuple[float, float], position: Optional[DeliveryPosition] = None):
        self.destination = DeliveryPosition(*destination)
        self.position = position

    def start(self) -> DeliveryPosition:
        if self.position is None:
            self.position = DeliveryPosition(
                self.destination.lat + SEED_OFFSET[0],
                self.destination.lng + SEED_OFFSET[1],
            )
        return self.position

    def tick(self) -> DeliveryPosition:
        prev = self.start()
        self.position = DeliveryPosition(
            prev.lat + APPROACH_FACTOR * (self.destination.lat - prev.lat),
            prev.lng + APPROACH_FACTOR * (self.destination.lng - prev.lng),
        )
        return self.position


def random_eta(rng: Optional[random.Random] = None) -> int:
    rng = rng or random
    return rng.randint(*ETA_RANGE_MINUTES)


class TrackingSession:
    """One periodic timer moving the marker for a single order."""

    def __init__(
        self,
        order_id: int,
        destination: Tuple[float, float],
        tick_seconds: float = 30.0,
        eta: Callable[[], int] = random_eta,
        max_idle_ticks: int = IDLE_TICKS,
        on_idle: Optional[Callable[["TrackingSession"], None]] = None,
    ):
        self.order_id = order_id
        self.tick_seconds = tick_seconds
        self.max_idle_ticks = max_idle_ticks
        self.idle_ticks = 0
        self._on_idle = on_idle
        self.interpolator = PositionInterpolator(destination)
        self._eta = eta
        self.eta_minutes = eta()
        self.ticks = 0
        self._task: Optional[asyncio.Task] = None
        self.interpolator.start()

    @property
    def position(self) -> DeliveryPosition:
        return self.interpolator.position

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def idle(self) -> bool:
        return self.max_idle_ticks > 0 and self.idle_ticks >= self.max_idle_ticks

    def touch(self) -> None:
        self.idle_ticks = 0

    def step(self) -> DeliveryPosition:
        pos = self.interpolator.tick()
        self.eta_minutes = self._eta()
        self.ticks += 1
        self.idle_ticks += 1
        logger.debug("Tracking tick order_id=%s tick=%s pos=%s", self.order_id, self.ticks, pos)
        return pos

    async def _run(self) -> None:
        while not self.idle:
            await asyncio.sleep(self.tick_seconds)
            self.step()

        logger.info("Tracking idle order_id=%s after %s ticks without a reader", self.order_id, self.idle_ticks)
        self._task = None
        if self._on_idle is not None:
            self._on_idle(self)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Tracking started order_id=%s tick=%ss", self.order_id, self.tick_seconds)

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.info("Tracking stopped order_id=%s after %s ticks", self.order_id, self.ticks)

    def snapshot(self) -> Dict[str, object]:
        """Current position for a viewer; reading it keeps the session alive."""
        self.touch()
        pos = self.position
        dest = self.interpolator.destination
        return {
            "order_id": self.order_id,
            "position": {"lat": pos.lat, "lng": pos.lng},
            "destination": {"lat": dest.lat, "lng": dest.lng},
            "estimated_minutes": self.eta_minutes,
            "estimated_time": f"{self.eta_minutes} mins",
            "ticks": self.ticks,
        }


class TrackerRegistry:
    """Keeps at most one tracking session alive per order."""

    def __init__(self, tick_seconds: float = 30.0, idle_ticks: int = IDLE_TICKS):
        self.tick_seconds = tick_seconds
        self.idle_ticks = idle_ticks
        self._sessions: Dict[int, TrackingSession] = {}

    def get(self, order_id: int) -> Optional[TrackingSession]:
        return self._sessions.get(order_id)

    def watch(self, order_id: int, delivery_status: str, destination: Tuple[float, float]) -> Optional[TrackingSession]:
        """Start (or reuse) the session for an order that is out for delivery.

        Returns None, and stops any stale session, for every other status.
        """
        if normalize_status(delivery_status) != DeliveryStatus.OUT_FOR_DELIVERY:
            self.release(order_id)
            return None

        session = self._sessions.get(order_id)
        if session is None:
            session = TrackingSession(
                order_id,
                destination,
                tick_seconds=self.tick_seconds,
                max_idle_ticks=self.idle_ticks,
                on_idle=self._expire,
            )
            self._sessions[order_id] = session
        session.touch()
        session.start()
        return session

    def release(self, order_id: int) -> bool:
        session = self._sessions.pop(order_id, None)
        if session is None:
            return False
        session.cancel()
        return True

    def _expire(self, session: TrackingSession) -> None:
        if self._sessions.get(session.order_id) is session:
            del self._sessions[session.order_id]

    def status_changed(self, order_id: int, delivery_status: str) -> None:
        if normalize_status(delivery_status) != DeliveryStatus.OUT_FOR_DELIVERY:
            self.release(order_id)

    def shutdown(self) -> None:
        for order_id in list(self._sessions):
            self.release(order_id)

    def __len__(self) -> int:
        return len(self._sessions)
