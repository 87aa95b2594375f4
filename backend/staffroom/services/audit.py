from __future__ import annotations

from datetime import date
import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from staffroom.models.activity_log import ActivityLog
from staffroom.models.user import User

if TYPE_CHECKING:
    from staffroom.services.reallocation_engine import AllocationSummary

logger = logging.getLogger(__name__)

REALLOCATION_GENERATE_ACTION = "reallocation.generate"


def log_activity(
    db: Session,
    *,
    user: User | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    details: dict | None = None,
) -> ActivityLog:
    """Stage an audit entry on the session; it is committed with the caller's unit of work."""
    record = ActivityLog(
        user_id=user.id if user is not None else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details or {},
    )
    db.add(record)
    logger.info("Activity %s on %s %s by %s", action, entity_type, entity_id, record.user_id)
    return record


def record_reallocation_run(
    db: Session,
    *,
    user: User,
    leave_request_id: str,
    start_date: date,
    end_date: date,
    summary: AllocationSummary,
) -> ActivityLog:
    return log_activity(
        db,
        user=user,
        action=REALLOCATION_GENERATE_ACTION,
        entity_type="leave_request",
        entity_id=leave_request_id,
        details={
            **summary.as_details(),
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
        },
    )
