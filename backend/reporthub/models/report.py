from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from reporthub.utils.clock import utcnow

REPORT_FORMATS = ("ieee", "college", "seminar")

GENERATING = "generating"
COMPLETED = "completed"
FAILED = "failed"
DELIVERED = "delivered"

# "ready" is what older rows and the browser app call a finished report
FINISHED_STATUSES = (COMPLETED, "ready", DELIVERED)
PENDING_STATUSES = ("pending", GENERATING)


class Report(SQLModel, table=True):
    __tablename__ = "reports"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    title: str
    topic: str
    pages: int
    format: str
    print_side: str = "double"
    binding: bool = True
    cover: bool = True
    additional_instructions: Optional[str] = None
    status: str = GENERATING
    generated_content: Optional[str] = None
    file_url: Optional[str] = None
    price: float = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class ReportCreate(SQLModel):
    title: str
    topic: str
    pages: int = 30
    format: str
    print_side: str = "double"
    binding: bool = True
    cover: bool = True
    additional_instructions: Optional[str] = None


class ReportRead(SQLModel):
    id: int
    title: str
    topic: str
    pages: int
    format: str
    print_side: str
    binding: bool
    cover: bool
    status: str
    generated_content: Optional[str] = None
    file_url: Optional[str] = None
    price: float
    created_at: datetime
