import json
from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import Field, SQLModel

from reporthub.utils.clock import utcnow


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    report_id: int = Field(foreign_key="reports.id", index=True)
    # JSON text: {address, coordinates: {lat, lng}, contactInfo, instructions}
    delivery_address: str
    total_amount: float
    delivery_status: str = "pending"
    payment_status: str = "pending"
    tracking_number: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def address_payload(self) -> Dict[str, Any]:
        return json.loads(self.delivery_address or "{}")

    def destination(self) -> Optional[tuple]:
        coords = self.address_payload().get("coordinates") or {}
        if "lat" not in coords or "lng" not in coords:
            return None
        return float(coords["lat"]), float(coords["lng"])


class Coordinates(SQLModel):
    lat: float
    lng: float


class ContactInfo(SQLModel):
    fullName: str = ""
    phone: str = ""
    email: Optional[str] = None
    alternatePhone: Optional[str] = None
    deliveryInstructions: Optional[str] = None
    preferredTime: str = "anytime"


class OrderCreate(SQLModel):
    report_id: int
    address: str
    coordinates: Coordinates
    contact: ContactInfo
    instructions: Optional[str] = None


class StatusChange(SQLModel):
    status: str


class WorkflowUpdate(SQLModel):
    order_id: int
    status: str
    tracking_number: Optional[str] = None
