from datetime import date, datetime

from pydantic import BaseModel, Field

from staffroom.models.reallocation import ReallocationStatus


class ReallocationGenerateRequest(BaseModel):
    leave_request_id: str = Field(alias="leaveRequestId", min_length=1, max_length=36)
    faculty_id: str = Field(alias="facultyId", min_length=1, max_length=36)
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")

    model_config = {"populate_by_name": True}


class ReallocationGenerateResponse(BaseModel):
    count: int
    message: str
    unassigned: int = 0
    skipped: int = 0


class ReallocationOut(BaseModel):
    id: str
    leave_request_id: str | None = None
    timetable_slot_id: str
    original_faculty_id: str
    substitute_faculty_id: str
    reallocation_date: date
    score: int | None = None
    status: ReallocationStatus
    notes: str | None = None
    approved_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
