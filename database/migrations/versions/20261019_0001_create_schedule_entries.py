"""create subjects, schedule entries and activity logs

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


def upgrade() -> None:
    op.create_table(
        "subjects",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("yearly_hours", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_subjects_code", "subjects", ["code"], unique=True)

    op.create_table(
        "schedule_entries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("class_id", sa.String(length=36), nullable=False),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("teacher_id", sa.String(length=36), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("half", sa.Integer(), nullable=False),
        sa.Column("room", sa.String(length=50), nullable=True),
        sa.Column("room_key", sa.String(length=50), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_schedule_entries_subject_id", "schedule_entries", ["subject_id"])
    op.create_index("ix_schedule_entries_teacher_id", "schedule_entries", ["teacher_id"])
    op.create_index("ix_schedule_entries_room_key", "schedule_entries", ["room_key"])
    op.create_index("ix_schedule_entries_term", "schedule_entries", ["year", "half"])
    op.create_index("ix_schedule_entries_class_term", "schedule_entries", ["class_id", "year", "half"])
    op.create_index(
        "uq_schedule_entries_active_teacher",
        "schedule_entries",
        ["teacher_id", "day_of_week", "start_time", "end_time", "year", "half"],
        unique=True,
        sqlite_where=sa.text("active = 1"),
        postgresql_where=sa.text("active"),
    )
    op.create_index(
        "uq_schedule_entries_active_room",
        "schedule_entries",
        ["room_key", "day_of_week", "start_time", "end_time", "year", "half"],
        unique=True,
        sqlite_where=sa.text("active = 1 AND room_key IS NOT NULL"),
        postgresql_where=sa.text("active AND room_key IS NOT NULL"),
    )

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=100), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_entity_id", "activity_logs", ["entity_id"])


def downgrade() -> None:
    op.drop_index("ix_activity_logs_entity_id", table_name="activity_logs")
    op.drop_table("activity_logs")
    op.drop_index("uq_schedule_entries_active_room", table_name="schedule_entries")
    op.drop_index("uq_schedule_entries_active_teacher", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_class_term", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_term", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_room_key", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_teacher_id", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_subject_id", table_name="schedule_entries")
    op.drop_table("schedule_entries")
    op.drop_index("ix_subjects_code", table_name="subjects")
    op.drop_table("subjects")
