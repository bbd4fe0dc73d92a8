"""
Tests for the SQL data adapter, against an in-memory SQLite database.
"""

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db import Base
from recommendation.models import StudyProgram, UserPreferenceRecord, UserInteraction
from recommendation.logic.adapter import SqlProgramCatalog, SqlUserDataStore
from recommendation.logic.contracts import InteractionAction
from recommendation.logic.engine import RecommendationEngine


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    db = factory()
    db.add_all([
        StudyProgram(id="old", name="BSc Economics", country="Ghana", degree_type="Bachelor",
                     tuition_fee=500_000, scholarship_available=False,
                     created_at=datetime(2024, 1, 1)),
        StudyProgram(id="new", name="MSc AI", country="Canada", degree_type="Master",
                     tuition_fee=8_000_000, specialization="AI, Robotics",
                     scholarship_available=True, created_at=datetime(2025, 1, 1)),
        UserPreferenceRecord(user_id="student-1", budget_min=None, budget_max=9_000_000,
                             countries=["Canada"], degree_type=["Master"],
                             scholarship_needed=True),
    ])
    db.commit()
    db.close()

    yield factory
    engine.dispose()


def test_catalog_orders_newest_first(session_factory):
    catalog = SqlProgramCatalog(session_factory)

    programs = catalog.fetch_programs()

    assert [p.id for p in programs] == ["new", "old"]
    assert programs[0].specialization_tags() == ["ai", "robotics"]
    assert programs[0].scholarship_available is True


def test_catalog_lookups(session_factory):
    catalog = SqlProgramCatalog(session_factory)

    assert catalog.get_program("old").country == "Ghana"
    assert catalog.get_program("missing") is None
    assert [p.id for p in catalog.fetch_programs_by_ids(["old", "missing", "new"])] == ["old", "new"]
    assert catalog.fetch_programs_by_ids([]) == []


def test_preferences_are_mapped(session_factory):
    store = SqlUserDataStore(session_factory)

    preferences = store.fetch_preferences("student-1")

    assert preferences.countries == ["Canada"]
    assert preferences.budget_range.min == 0
    assert preferences.budget_range.max == 9_000_000
    assert preferences.preferred_cities == []
    assert store.fetch_preferences("stranger") is None


def test_interaction_log_is_append_only(session_factory):
    store = SqlUserDataStore(session_factory)

    store.record_interaction("student-1", InteractionAction.VIEW, program_id="new")
    store.record_interaction("student-1", InteractionAction.VIEW, program_id="old")
    store.record_interaction("student-1", InteractionAction.VIEW, program_id="new")
    store.record_interaction("student-1", InteractionAction.SAVE, program_id="old")
    store.record_interaction("student-1", InteractionAction.SEARCH, search_query="ai masters")

    assert store.fetch_viewed_programs("student-1") == ["new", "old"]
    assert store.fetch_saved_programs("student-1") == ["old"]
    assert store.fetch_applied_programs("student-1") == []
    assert store.fetch_search_history("student-1") == ["ai masters"]

    db = session_factory()
    try:
        assert db.query(UserInteraction).count() == 5
    finally:
        db.close()


def test_interactions_are_timestamped(session_factory):
    store = SqlUserDataStore(session_factory)
    store.record_interaction("student-1", InteractionAction.VIEW, program_id="new")

    db = session_factory()
    try:
        db.add(UserInteraction(user_id="student-1", action="view", program_id="old"))
        db.commit()
        stamps = [row.created_at for row in db.query(UserInteraction).order_by(UserInteraction.id)]
    finally:
        db.close()

    assert len(stamps) == 2
    assert all(isinstance(stamp, datetime) for stamp in stamps)
    assert stamps[0] <= stamps[1]
    assert store.fetch_viewed_programs("student-1") == ["new", "old"]


def test_engine_over_sql_sources(session_factory):
    # One worker: the in-memory database shares a single connection
    engine = RecommendationEngine(
        SqlProgramCatalog(session_factory),
        SqlUserDataStore(session_factory),
        behavior_workers=1,
    )

    match = engine.get_program_match_details("new", "student-1")

    # country 25 + degree 15 + budget 15 + scholarship 7
    assert match.match_score == 62
