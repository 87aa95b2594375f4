import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from staffroom.db.base import Base


class TimetableSlot(Base):
    """A weekly recurring teaching commitment. ``day_of_week`` runs Monday=1 .. Saturday=6."""

    __tablename__ = "timetable_slots"
    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_timetable_slots_day_of_week"),
        CheckConstraint("period_number >= 1", name="ck_timetable_slots_period_number"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    period_number: Mapped[int] = mapped_column(Integer, nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    faculty_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    year_section_id: Mapped[str] = mapped_column(String(36), nullable=False)
    is_lab: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
