import os

# The application engine is created at import time; keep it off the network during tests.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

from datetime import date  # noqa: E402
import uuid  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from staffroom.api.deps import get_db  # noqa: E402
from staffroom.core.security import create_access_token  # noqa: E402
from staffroom.db.base import Base  # noqa: E402
from staffroom.main import app  # noqa: E402
from staffroom.models import (  # noqa: E402
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


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


class CampusBuilder:
    """Small helper for seeding departments, staff and timetables in tests."""

    def __init__(self, db):
        self.db = db

    def department(self, code: str) -> Department:
        item = Department(name=f"Department {code}", code=code)
        self.db.add(item)
        self.db.flush()
        return item

    def subject(self, code: str, department: Department, *, is_lab: bool = False) -> Subject:
        item = Subject(code=code, name=f"Subject {code}", department_id=department.id, is_lab=is_lab)
        self.db.add(item)
        self.db.flush()
        return item

    def faculty(
        self,
        name: str,
        department: Department,
        *,
        lab_qualified: bool = False,
        max_periods_per_day: int = 6,
        is_active: bool = True,
        subjects: tuple[Subject, ...] = (),
    ) -> Faculty:
        slug = name.lower().replace(" ", "-")
        item = Faculty(
            full_name=name,
            email=f"{slug}@example.edu",
            employee_id=f"EMP-{uuid.uuid4().hex[:8]}",
            department_id=department.id,
            lab_qualified=lab_qualified,
            max_periods_per_day=max_periods_per_day,
            is_active=is_active,
        )
        self.db.add(item)
        self.db.flush()
        for subject in subjects:
            self.db.add(FacultySubject(faculty_id=item.id, subject_id=subject.id))
        self.db.flush()
        return item

    def slot(
        self,
        faculty: Faculty,
        subject: Subject,
        *,
        day_of_week: int,
        period_number: int,
        is_lab: bool = False,
        section: str = "SEC-A",
    ) -> TimetableSlot:
        item = TimetableSlot(
            faculty_id=faculty.id,
            subject_id=subject.id,
            day_of_week=day_of_week,
            period_number=period_number,
            year_section_id=section,
            is_lab=is_lab,
        )
        self.db.add(item)
        self.db.flush()
        return item

    def leave(
        self,
        faculty: Faculty,
        start_date: date,
        end_date: date,
        *,
        status: LeaveStatus = LeaveStatus.approved,
    ) -> LeaveRequest:
        item = LeaveRequest(
            faculty_id=faculty.id,
            start_date=start_date,
            end_date=end_date,
            leave_type=LeaveType.sick,
            reason="Medical leave",
            status=status,
        )
        self.db.add(item)
        self.db.flush()
        return item

    def user(self, role: UserRole, *, faculty: Faculty | None = None, is_active: bool = True) -> User:
        item = User(
            full_name=f"{role.value.title()} User",
            email=f"{role.value}-{uuid.uuid4().hex[:8]}@example.edu",
            role=role,
            faculty_id=faculty.id if faculty is not None else None,
            is_active=is_active,
        )
        self.db.add(item)
        self.db.flush()
        return item


@pytest.fixture()
def campus(db_session):
    return CampusBuilder(db_session)


@pytest.fixture()
def auth_headers():
    def build(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return build
