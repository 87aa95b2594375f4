"""create reallocation schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


leave_type = sa.Enum("sick", "casual", "academic", "personal", name="leave_type")
leave_status = sa.Enum("pending", "approved", "rejected", name="leave_status")
reallocation_status = sa.Enum("suggested", "approved", "rejected", name="reallocation_status")
user_role = sa.Enum("admin", "hod", "faculty", name="user_role")


def upgrade() -> None:
    op.create_table(
        "departments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False, unique=True),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_departments_code", "departments", ["code"], unique=True)

    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("is_lab", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("credits", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("semester", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)
    op.create_index("ix_subjects_department_id", "subjects", ["department_id"], unique=False)

    op.create_table(
        "faculty",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("employee_id", sa.String(length=50), nullable=False, unique=True),
        sa.Column("department_id", sa.String(length=36), nullable=False),
        sa.Column("designation", sa.String(length=200), nullable=False, server_default="Assistant Professor"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_hod", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("lab_qualified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("max_periods_per_day", sa.Integer(), nullable=False, server_default="6"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_faculty_email", "faculty", ["email"], unique=True)
    op.create_index("ix_faculty_department_id", "faculty", ["department_id"], unique=False)

    op.create_table(
        "faculty_subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("faculty_id", sa.String(length=36), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.UniqueConstraint("faculty_id", "subject_id", name="uq_faculty_subject"),
    )
    op.create_index("ix_faculty_subjects_faculty_id", "faculty_subjects", ["faculty_id"], unique=False)
    op.create_index("ix_faculty_subjects_subject_id", "faculty_subjects", ["subject_id"], unique=False)

    op.create_table(
        "timetable_slots",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("period_number", sa.Integer(), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("faculty_id", sa.String(length=36), nullable=False),
        sa.Column("year_section_id", sa.String(length=36), nullable=False),
        sa.Column("is_lab", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_timetable_slots_day_of_week"),
        sa.CheckConstraint("period_number >= 1", name="ck_timetable_slots_period_number"),
    )
    op.create_index("ix_timetable_slots_faculty_id", "timetable_slots", ["faculty_id"], unique=False)
    op.create_index("ix_timetable_slots_subject_id", "timetable_slots", ["subject_id"], unique=False)

    op.create_table(
        "leave_requests",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("faculty_id", sa.String(length=36), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("leave_type", leave_type, nullable=False),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("status", leave_status, nullable=False, server_default="pending"),
        sa.Column("approved_by", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_leave_requests_faculty_id", "leave_requests", ["faculty_id"], unique=False)

    op.create_table(
        "reallocations",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("leave_request_id", sa.String(length=36), nullable=True),
        sa.Column("timetable_slot_id", sa.String(length=36), nullable=False),
        sa.Column("original_faculty_id", sa.String(length=36), nullable=False),
        sa.Column("substitute_faculty_id", sa.String(length=36), nullable=False),
        sa.Column("reallocation_date", sa.Date(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=True),
        sa.Column("status", reallocation_status, nullable=False, server_default="suggested"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("approved_by", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("timetable_slot_id", "reallocation_date", name="uq_reallocations_slot_date"),
    )
    for column in (
        "leave_request_id",
        "timetable_slot_id",
        "original_faculty_id",
        "substitute_faculty_id",
        "reallocation_date",
        "status",
    ):
        op.create_index(f"ix_reallocations_{column}", "reallocations", [column], unique=False)

    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("full_name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("department_id", sa.String(length=36), nullable=True),
        sa.Column("faculty_id", sa.String(length=36), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_faculty_id", "users", ["faculty_id"], unique=False)

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_action", "activity_logs", ["action"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_activity_logs_action", table_name="activity_logs")
    op.drop_table("activity_logs")
    op.drop_index("ix_users_faculty_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    for column in (
        "status",
        "reallocation_date",
        "substitute_faculty_id",
        "original_faculty_id",
        "timetable_slot_id",
        "leave_request_id",
    ):
        op.drop_index(f"ix_reallocations_{column}", table_name="reallocations")
    op.drop_table("reallocations")
    op.drop_index("ix_leave_requests_faculty_id", table_name="leave_requests")
    op.drop_table("leave_requests")
    op.drop_index("ix_timetable_slots_subject_id", table_name="timetable_slots")
    op.drop_index("ix_timetable_slots_faculty_id", table_name="timetable_slots")
    op.drop_table("timetable_slots")
    op.drop_index("ix_faculty_subjects_subject_id", table_name="faculty_subjects")
    op.drop_index("ix_faculty_subjects_faculty_id", table_name="faculty_subjects")
    op.drop_table("faculty_subjects")
    op.drop_index("ix_faculty_department_id", table_name="faculty")
    op.drop_index("ix_faculty_email", table_name="faculty")
    op.drop_table("faculty")
    op.drop_index("ix_subjects_department_id", table_name="subjects")
    op.drop_index("ix_subjects_code", table_name="subjects")
    op.drop_table("subjects")
    op.drop_index("ix_departments_code", table_name="departments")
    op.drop_table("departments")

    bind = op.get_bind()
    for enum_type in (user_role, reallocation_status, leave_status, leave_type):
        enum_type.drop(bind, checkfirst=True)
