"""
Shared fixtures for the recommendation tests.
"""

from datetime import datetime

import pytest

from recommendation.logic.contracts import Program, UserPreferences
from recommendation.logic.memory_store import InMemoryCatalog, InMemoryUserDataStore


def make_program(program_id="p1", **fields) -> Program:
    """Program with only the given fields set."""
    return Program(id=program_id, **fields)


@pytest.fixture
def canada_master():
    return make_program(
        "canada-1",
        university="University of Toronto",
        name="MSc Computer Science",
        country="Canada",
        city="Toronto",
        degree_type="Master",
        tuition_fee=8_000_000,
        specialization="Computer Science, Artificial Intelligence",
        duration="2 years",
        study_level="master",
        language_requirements="English",
        scholarship_available=True,
        created_at=datetime(2025, 3, 1),
    )


@pytest.fixture
def canada_preferences():
    return UserPreferences(
        countries=["Canada"],
        degree_type=["Master"],
        budget_range=[5_000_000, 10_000_000],
        scholarship_needed=True,
    )


@pytest.fixture
def catalog(canada_master):
    return InMemoryCatalog([
        canada_master,
        make_program("usa-1", country="USA", degree_type="Master",
                     specialization="Robotics", created_at=datetime(2025, 2, 1)),
        make_program("de-1", country="Germany", degree_type="Bachelor",
                     specialization="Data Science, Statistics", created_at=datetime(2025, 1, 1)),
    ])


@pytest.fixture
def user_store(canada_preferences):
    return InMemoryUserDataStore({"student-1": canada_preferences})
