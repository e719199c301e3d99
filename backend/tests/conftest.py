import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

from datetime import date  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from timetable.api.deps import get_db  # noqa: E402
from timetable.db.base import Base  # noqa: E402
from timetable.domain.schedule_entry import ScheduleEntry, Term  # noqa: E402
from timetable.domain.time_slot import TimeSlot  # noqa: E402
from timetable.main import app  # noqa: E402
import timetable.models  # noqa: E402,F401

CURRENT_YEAR = date.today().year


def make_entry(
    teacher_id="t1",
    day="Monday",
    start="08:00",
    end="08:50",
    room=None,
    class_id="c1",
    subject_id="math",
    year=2024,
    half=1,
    active=True,
    entry_id=None,
):
    fields = dict(
        class_id=class_id,
        subject_id=subject_id,
        teacher_id=teacher_id,
        time_slot=TimeSlot.create(day, start, end),
        term=Term(year, half),
        room=room,
        active=active,
    )
    if entry_id is not None:
        fields["id"] = entry_id
    return ScheduleEntry(**fields)


@pytest.fixture()
def db_session():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    engine.dispose()
