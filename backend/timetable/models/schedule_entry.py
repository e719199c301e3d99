import uuid
from datetime import datetime, time

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Time, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from timetable.db.base import Base


class ScheduleEntryRecord(Base):
    __tablename__ = "schedule_entries"
    __table_args__ = (
        Index("ix_schedule_entries_term", "year", "half"),
        Index("ix_schedule_entries_class_term", "class_id", "year", "half"),
        # Authoritative guard against two requests committing the same active booking.
        Index(
            "uq_schedule_entries_active_teacher",
            "teacher_id",
            "day_of_week",
            "start_time",
            "end_time",
            "year",
            "half",
            unique=True,
            sqlite_where=text("active = 1"),
            postgresql_where=text("active"),
        ),
        Index(
            "uq_schedule_entries_active_room",
            "room_key",
            "day_of_week",
            "start_time",
            "end_time",
            "year",
            "half",
            unique=True,
            sqlite_where=text("active = 1 AND room_key IS NOT NULL"),
            postgresql_where=text("active AND room_key IS NOT NULL"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    class_id: Mapped[str] = mapped_column(String(36), nullable=False)
    subject_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    teacher_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    half: Mapped[int] = mapped_column(Integer, nullable=False)
    room: Mapped[str | None] = mapped_column(String(50), nullable=True)
    room_key: Mapped[str | None] = mapped_column(String(50), index=True, nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
