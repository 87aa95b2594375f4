from staffroom.models.activity_log import ActivityLog  # noqa: F401
from staffroom.models.department import Department  # noqa: F401
from staffroom.models.faculty import Faculty, FacultySubject  # noqa: F401
from staffroom.models.leave_request import LeaveRequest, LeaveStatus, LeaveType  # noqa: F401
from staffroom.models.reallocation import Reallocation, ReallocationStatus  # noqa: F401
from staffroom.models.subject import Subject  # noqa: F401
from staffroom.models.timetable_slot import TimetableSlot  # noqa: F401
from staffroom.models.user import User, UserRole  # noqa: F401
