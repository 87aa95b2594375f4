import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, Enum as SAEnum, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from staffroom.db.base import Base


class ReallocationStatus(str, Enum):
    suggested = "suggested"
    approved = "approved"
    rejected = "rejected"


class Reallocation(Base):
    """A proposed substitute for one calendar occurrence of a timetable slot."""

    __tablename__ = "reallocations"
    __table_args__ = (
        UniqueConstraint(
            "timetable_slot_id",
            "reallocation_date",
            name="uq_reallocations_slot_date",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    leave_request_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    timetable_slot_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    original_faculty_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    substitute_faculty_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    reallocation_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[ReallocationStatus] = mapped_column(
        SAEnum(ReallocationStatus, name="reallocation_status"),
        nullable=False,
        default=ReallocationStatus.suggested,
        index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
