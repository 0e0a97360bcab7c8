from __future__ import annotations

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from attendance_reports.db.base import Base
from attendance_reports.db.dependencies import get_db_session
import attendance_reports.models.entities  # noqa: F401
from attendance_reports.main import create_app
from attendance_reports.models.entities import (
    AttendanceEntry,
    District,
    Group,
    OldGroup,
    Region,
    State,
    YouthAttendanceEntry,
)


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    app = create_app()

    def override_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _attendance(
    *,
    record_id: int,
    district_id: int,
    group_id: int,
    month: str,
    week: int,
    counts: tuple[int, int, int, int, int, int],
    region_id: int = 5,
    old_group_id: int | None = 10,
    state_id: int = 1,
    year: int = 2025,
) -> AttendanceEntry:
    men, women, youth_boys, youth_girls, children_boys, children_girls = counts
    return AttendanceEntry(
        id=record_id,
        state_id=state_id,
        region_id=region_id,
        old_group_id=old_group_id,
        group_id=group_id,
        district_id=district_id,
        year=year,
        month=month,
        week=week,
        men=men,
        women=women,
        youth_boys=youth_boys,
        youth_girls=youth_girls,
        children_boys=children_boys,
        children_girls=children_girls,
    )


def _youth(
    *,
    record_id: int,
    group_id: int,
    district_id: int,
    month: str,
    week: int | None,
    year: int = 2025,
    male: int = 0,
    female: int = 0,
    members: tuple[int, int] = (0, 0),
    visitors: tuple[int, int] = (0, 0),
) -> YouthAttendanceEntry:
    return YouthAttendanceEntry(
        id=record_id,
        attendance_type="weekly",
        state_id=1,
        region_id=5,
        old_group_id=10,
        group_id=group_id,
        district_id=district_id,
        year=year,
        month=month,
        week=week,
        male=male,
        female=female,
        member_boys=members[0],
        member_girls=members[1],
        visitor_boys=visitors[0],
        visitor_girls=visitors[1],
    )


@pytest.fixture()
def org_data(db_session: Session) -> Session:
    """Two states, region 5 with one old group, two groups and three districts."""

    db_session.add_all(
        [
            State(id=1, name="AKWA IBOM"),
            State(id=2, name="Rivers Central"),
        ]
    )
    db_session.flush()
    db_session.add_all(
        [
            Region(id=5, name="Region Five", state_id=1),
            Region(id=6, name="Region Six", state_id=1),
            Region(id=7, name="Port Region", state_id=2),
        ]
    )
    db_session.flush()
    db_session.add(OldGroup(id=10, name="Old Group Ten", state_id=1, region_id=5))
    db_session.flush()
    db_session.add_all(
        [
            Group(id=100, name="Group A", state_id=1, region_id=5, old_group_id=10),
            Group(id=101, name="Group B", state_id=1, region_id=5, old_group_id=10),
        ]
    )
    db_session.flush()
    db_session.add_all(
        [
            District(id=1000, name="District Alpha", group_id=100),
            District(id=1001, name="District Beta", group_id=100),
            District(id=1002, name="District Gamma", group_id=101),
        ]
    )
    db_session.flush()
    db_session.add_all(
        [
            _attendance(record_id=1, district_id=1000, group_id=100, month="January", week=1, counts=(5, 4, 1, 2, 2, 3)),
            _attendance(record_id=2, district_id=1001, group_id=100, month="January", week=2, counts=(3, 2, 0, 1, 1, 1)),
            _attendance(record_id=3, district_id=1002, group_id=101, month="February", week=1, counts=(7, 6, 2, 2, 1, 0)),
            _youth(record_id=1, group_id=100, district_id=1000, month="January", week=1, members=(10, 12), visitors=(2, 3)),
            _youth(record_id=2, group_id=100, district_id=1000, month="January", week=2, members=(8, 11), visitors=(1, 2)),
            _youth(record_id=3, group_id=101, district_id=1002, month="January", week=1, members=(6, 7), visitors=(1, 1)),
            _youth(record_id=4, group_id=100, district_id=1000, month="January", week=None, male=9, female=11),
            _youth(
                record_id=5,
                group_id=100,
                district_id=1000,
                month="December",
                week=1,
                year=2024,
                members=(20, 15),
                visitors=(5, 0),
            ),
        ]
    )
    db_session.commit()
    return db_session
