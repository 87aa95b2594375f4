from datetime import date
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from staffroom.api.deps import get_current_user, get_db, require_roles
from staffroom.core.config import get_settings
from staffroom.core.exceptions import (
    LeaveNotApprovedError,
    ReallocationInputError,
    ReallocationPersistenceError,
    ResourceNotFoundError,
)
from staffroom.models.leave_request import LeaveRequest, LeaveStatus
from staffroom.models.reallocation import Reallocation, ReallocationStatus
from staffroom.models.user import User, UserRole
from staffroom.schemas.reallocation import (
    ReallocationGenerateRequest,
    ReallocationGenerateResponse,
    ReallocationOut,
)
from staffroom.services.audit import record_reallocation_run
from staffroom.services.reallocation_engine import SubstituteAllocator

router = APIRouter()
logger = logging.getLogger(__name__)
settings = get_settings()

REVIEWER_ROLES = {UserRole.admin, UserRole.hod}


def _visible_to(current_user: User, item: Reallocation) -> bool:
    if current_user.role in REVIEWER_ROLES:
        return True
    return current_user.faculty_id is not None and current_user.faculty_id in {
        item.original_faculty_id,
        item.substitute_faculty_id,
    }


def _load_approved_leave(db: Session, payload: ReallocationGenerateRequest) -> LeaveRequest:
    leave = db.get(LeaveRequest, payload.leave_request_id)
    if leave is None:
        raise ResourceNotFoundError("Leave request", payload.leave_request_id)
    if leave.faculty_id != payload.faculty_id:
        raise ReallocationInputError(
            "Leave request does not belong to the given faculty member",
            details={"leave_request_id": leave.id, "faculty_id": payload.faculty_id},
        )
    if leave.status != LeaveStatus.approved:
        raise LeaveNotApprovedError(leave.id, leave.status.value)
    return leave


@router.post("/reallocations/generate", response_model=ReallocationGenerateResponse)
def generate_reallocations(
    payload: ReallocationGenerateRequest,
    current_user: User = Depends(require_roles(UserRole.admin, UserRole.hod)),
    db: Session = Depends(get_db),
) -> ReallocationGenerateResponse:
    leave = _load_approved_leave(db, payload)

    allocator = SubstituteAllocator(
        db=db,
        leave_request_id=leave.id,
        faculty_id=payload.faculty_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        lock_runs=settings.reallocation_lock_runs,
    )
    summary = allocator.run()

    record_reallocation_run(
        db,
        user=current_user,
        leave_request_id=leave.id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        summary=summary,
    )
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Committing reallocation suggestions for leave %s failed", leave.id)
        raise ReallocationPersistenceError(str(getattr(exc, "orig", None) or exc)) from exc

    return ReallocationGenerateResponse(
        count=summary.created,
        message=summary.message,
        unassigned=summary.unassigned,
        skipped=summary.skipped,
    )


@router.get("/reallocations", response_model=list[ReallocationOut])
def list_reallocations(
    reallocation_status: ReallocationStatus | None = Query(default=None, alias="status"),
    leave_request_id: str | None = Query(default=None, max_length=36),
    from_date: date | None = Query(default=None),
    to_date: date | None = Query(default=None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ReallocationOut]:
    query = select(Reallocation)
    if current_user.role not in REVIEWER_ROLES:
        if current_user.faculty_id is None:
            return []
        query = query.where(
            or_(
                Reallocation.original_faculty_id == current_user.faculty_id,
                Reallocation.substitute_faculty_id == current_user.faculty_id,
            )
        )
    if reallocation_status is not None:
        query = query.where(Reallocation.status == reallocation_status)
    if leave_request_id is not None:
        query = query.where(Reallocation.leave_request_id == leave_request_id)
    if from_date is not None:
        query = query.where(Reallocation.reallocation_date >= from_date)
    if to_date is not None:
        query = query.where(Reallocation.reallocation_date <= to_date)
    query = query.order_by(Reallocation.created_at.desc(), Reallocation.reallocation_date.asc())
    return list(db.execute(query).scalars())


@router.get("/reallocations/{reallocation_id}", response_model=ReallocationOut)
def get_reallocation(
    reallocation_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReallocationOut:
    item = db.get(Reallocation, reallocation_id)
    if item is None or not _visible_to(current_user, item):
        raise ResourceNotFoundError("Reallocation", reallocation_id)
    return item
