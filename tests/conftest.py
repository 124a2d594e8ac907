"""
tests/conftest.py

Shared fixtures: an in-memory SQLite database with the scorecard schema,
a session bound to it, a FastAPI test client wired to that session, and a
small seeded hierarchy.
"""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass
from datetime import date

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401  registers every table on Base.metadata
from app.api.routers import ALL_ROUTERS
from db.base import Base
from db.models.cvj_stage import CVJStage
from db.models.kpi import KPI
from db.models.sub_category import SubCategory
from db.models.week import Week
from db.session import get_db
from scorecard.types import UnitType


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite needs explicit BEGIN for SAVEPOINT support and a pragma for cascades.
    @event.listens_for(eng, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(eng, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory: sessionmaker) -> Generator[TestClient, None, None]:
    application = FastAPI()
    for router in ALL_ROUTERS:
        application.include_router(router)

    def _override_get_db() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    application.dependency_overrides[get_db] = _override_get_db
    with TestClient(application) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------


@dataclass
class SeededScorecard:
    aware: CVJStage
    engage: CVJStage
    brand: SubCategory
    social: SubCategory
    mentions: KPI
    impressions: KPI
    likes: KPI
    retired: KPI
    april_w17: Week
    may_w19: Week
    may_w20: Week
    june_w22: Week


@pytest.fixture()
def seeded(session: Session) -> SeededScorecard:
    """
    Two stages, two sub-categories, four KPIs (one inactive) and four weeks
    spanning April to June 2025.  Week 22 starts in May but belongs to June.
    """
    aware = CVJStage(name="Aware", display_order=1, color_code="from-blue-500 to-blue-600")
    engage = CVJStage(name="Engage", display_order=2, color_code="from-green-500 to-green-600")
    session.add_all([aware, engage])
    session.flush()

    brand = SubCategory(name="Brand Awareness", display_order=1, cvj_stage_id=aware.id)
    social = SubCategory(name="Social Engagement", display_order=1, cvj_stage_id=engage.id)
    session.add_all([brand, social])
    session.flush()

    mentions = KPI(
        name="Brand Mentions",
        unit_type=UnitType.NUMBER,
        default_monthly_target_value=1000,
        sub_category_id=brand.id,
    )
    impressions = KPI(
        name="Search Impressions",
        unit_type=UnitType.NUMBER,
        default_monthly_target_value=None,
        sub_category_id=brand.id,
    )
    likes = KPI(
        name="Social Likes",
        unit_type=UnitType.NUMBER,
        default_monthly_target_value=100,
        sub_category_id=social.id,
    )
    retired = KPI(
        name="Legacy Reach",
        unit_type=UnitType.NUMBER,
        default_monthly_target_value=50,
        is_active=False,
        sub_category_id=social.id,
    )
    session.add_all([mentions, impressions, likes, retired])

    april_w17 = Week(
        id="Week 17 [04/21-04/27]", year=2025, week_number=17, month=4,
        start_date=date(2025, 4, 21), end_date=date(2025, 4, 27),
    )
    may_w19 = Week(
        id="Week 19 [05/05-05/11]", year=2025, week_number=19, month=5,
        start_date=date(2025, 5, 5), end_date=date(2025, 5, 11),
    )
    may_w20 = Week(
        id="Week 20 [05/12-05/18]", year=2025, week_number=20, month=5,
        start_date=date(2025, 5, 12), end_date=date(2025, 5, 18),
    )
    june_w22 = Week(
        id="Week 22 [05/26-06/01]", year=2025, week_number=22, month=6,
        start_date=date(2025, 5, 26), end_date=date(2025, 6, 1),
    )
    session.add_all([april_w17, may_w19, may_w20, june_w22])
    session.commit()

    return SeededScorecard(
        aware=aware,
        engage=engage,
        brand=brand,
        social=social,
        mentions=mentions,
        impressions=impressions,
        likes=likes,
        retired=retired,
        april_w17=april_w17,
        may_w19=may_w19,
        may_w20=may_w20,
        june_w22=june_w22,
    )
