"""Seed a small department, its timetable and an approved leave for trying the reallocation engine.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

from datetime import date, timedelta
import os

from sqlalchemy import select
from sqlalchemy.orm import Session

from staffroom.core.security import create_access_token
from staffroom.db.bootstrap import ensure_runtime_schema_compatibility
from staffroom.db.session import SessionLocal
from staffroom.models import (
    Department,
    Faculty,
    FacultySubject,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    Subject,
    TimetableSlot,
    User,
    UserRole,
)

DEPARTMENT_CODE = os.getenv("DEMO_DEPARTMENT_CODE", "CSE")
SECTION = "CSE-2A"

SUBJECTS = [
    {"code": "CS201", "name": "Data Structures", "is_lab": False},
    {"code": "CS202", "name": "Operating Systems", "is_lab": False},
    {"code": "CS203L", "name": "Data Structures Lab", "is_lab": True},
]

FACULTY = [
    {"name": "Anita Rao", "employee_id": "CSE-001", "lab": True, "subjects": ["CS201", "CS203L"]},
    {"name": "Bharat Iyer", "employee_id": "CSE-002", "lab": False, "subjects": ["CS201", "CS202"]},
    {"name": "Chitra Nair", "employee_id": "CSE-003", "lab": True, "subjects": ["CS203L"]},
    {"name": "Dev Menon", "employee_id": "CSE-004", "lab": False, "subjects": ["CS202"]},
]

# (faculty employee id, day_of_week, period, subject code)
WEEKLY_TIMETABLE = [
    ("CSE-001", 1, 1, "CS201"),
    ("CSE-001", 1, 3, "CS203L"),
    ("CSE-001", 3, 2, "CS201"),
    ("CSE-001", 5, 4, "CS203L"),
    ("CSE-002", 1, 1, "CS202"),
    ("CSE-002", 3, 3, "CS201"),
    ("CSE-003", 1, 2, "CS203L"),
    ("CSE-004", 3, 2, "CS202"),
]


def _get_or_create_department(session: Session) -> Department:
    department = session.execute(select(Department).where(Department.code == DEPARTMENT_CODE)).scalar_one_or_none()
    if department is None:
        department = Department(name="Computer Science and Engineering", code=DEPARTMENT_CODE)
        session.add(department)
        session.flush()
    return department


def _seed_subjects(session: Session, department: Department) -> dict[str, Subject]:
    subjects: dict[str, Subject] = {}
    for item in SUBJECTS:
        subject = session.execute(select(Subject).where(Subject.code == item["code"])).scalar_one_or_none()
        if subject is None:
            subject = Subject(
                code=item["code"],
                name=item["name"],
                department_id=department.id,
                is_lab=item["is_lab"],
            )
            session.add(subject)
        subjects[item["code"]] = subject
    session.flush()
    return subjects


def _seed_faculty(session: Session, department: Department, subjects: dict[str, Subject]) -> dict[str, Faculty]:
    members: dict[str, Faculty] = {}
    for item in FACULTY:
        member = session.execute(
            select(Faculty).where(Faculty.employee_id == item["employee_id"])
        ).scalar_one_or_none()
        if member is None:
            member = Faculty(
                full_name=item["name"],
                email=f"{item['employee_id'].lower()}@example.edu",
                employee_id=item["employee_id"],
                department_id=department.id,
                lab_qualified=item["lab"],
                max_periods_per_day=4,
            )
            session.add(member)
            session.flush()
            for code in item["subjects"]:
                session.add(FacultySubject(faculty_id=member.id, subject_id=subjects[code].id))
        members[item["employee_id"]] = member
    session.flush()
    return members


def _seed_timetable(session: Session, members: dict[str, Faculty], subjects: dict[str, Subject]) -> None:
    if session.execute(select(TimetableSlot.id).limit(1)).first() is not None:
        return
    for employee_id, day_of_week, period, code in WEEKLY_TIMETABLE:
        session.add(
            TimetableSlot(
                faculty_id=members[employee_id].id,
                subject_id=subjects[code].id,
                day_of_week=day_of_week,
                period_number=period,
                year_section_id=SECTION,
                is_lab=subjects[code].is_lab,
            )
        )


def _seed_leave(session: Session, absent: Faculty, approver: User) -> LeaveRequest:
    start = date.today() + timedelta(days=1)
    leave = LeaveRequest(
        faculty_id=absent.id,
        start_date=start,
        end_date=start + timedelta(days=13),
        leave_type=LeaveType.academic,
        reason="Conference travel",
        status=LeaveStatus.approved,
        approved_by=approver.id,
    )
    session.add(leave)
    return leave


def _get_or_create_hod(session: Session, department: Department) -> User:
    email = os.getenv("DEMO_HOD_EMAIL", "hod.demo@example.edu")
    user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if user is None:
        user = User(full_name="Demo HOD", email=email, role=UserRole.hod, department_id=department.id)
        session.add(user)
        session.flush()
    return user


def main() -> None:
    ensure_runtime_schema_compatibility()
    with SessionLocal() as session:
        department = _get_or_create_department(session)
        subjects = _seed_subjects(session, department)
        members = _seed_faculty(session, department, subjects)
        _seed_timetable(session, members, subjects)
        hod = _get_or_create_hod(session, department)
        leave = _seed_leave(session, members["CSE-001"], hod)
        session.commit()

        print("Seeded demo data.")
        print(f"  leaveRequestId: {leave.id}")
        print(f"  facultyId:      {leave.faculty_id}")
        print(f"  startDate:      {leave.start_date.isoformat()}")
        print(f"  endDate:        {leave.end_date.isoformat()}")
        print(f"  HOD token:      {create_access_token(hod.id)}")


if __name__ == "__main__":
    main()
