"""
Data Adapter for Recommendation Engine

Reads the program catalog, stored user preferences and the interaction log
from SQL tables and transforms rows into the engine's contracts.

This is a pure READ + TRANSFORM layer (plus the append-only interaction
writer):
- NO scoring logic
- NO ranking/classification
- NO AI/LLM usage
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Protocol

from sqlalchemy.orm import Session

from .contracts import Program, UserPreferences, BudgetRange, InteractionAction
from ..models import StudyProgram, UserPreferenceRecord, UserInteraction

logger = logging.getLogger(__name__)


# =============================================================================
# COLLABORATOR PROTOCOLS
# =============================================================================

class ProgramCatalog(Protocol):
    """Read access to the program catalog."""

    def fetch_programs(self) -> List[Program]:
        """All active programs, newest `created_at` first."""
        ...

    def get_program(self, program_id: str) -> Optional[Program]:
        ...

    def fetch_programs_by_ids(self, program_ids: Iterable[str]) -> List[Program]:
        ...


class UserDataStore(Protocol):
    """Stored preferences and interaction history, keyed by user id."""

    def fetch_preferences(self, user_id: str) -> Optional[UserPreferences]:
        ...

    def fetch_viewed_programs(self, user_id: str) -> List[str]:
        ...

    def fetch_saved_programs(self, user_id: str) -> List[str]:
        ...

    def fetch_applied_programs(self, user_id: str) -> List[str]:
        ...

    def fetch_search_history(self, user_id: str) -> List[str]:
        ...

    def record_interaction(
        self,
        user_id: str,
        action: InteractionAction,
        program_id: Optional[str] = None,
        search_query: Optional[str] = None,
    ) -> None:
        ...


# =============================================================================
# HELPERS
# =============================================================================

@contextmanager
def session_scope(session_factory: Callable[[], Session]):
    """Open a session, commit on success, roll back on error."""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def unique_in_order(values: Iterable[Optional[str]]) -> List[str]:
    """Drop empties and duplicates, keeping first-seen order."""
    seen = set()
    result = []
    for value in values:
        if not value or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def _row_to_program(row: StudyProgram) -> Program:
    return Program(
        id=row.id,
        university=row.university or "",
        name=row.name or "",
        degree_type=row.degree_type,
        country=row.country,
        city=row.city,
        tuition_fee=row.tuition_fee,
        specialization=row.specialization,
        duration=row.duration,
        study_level=row.study_level,
        language_requirements=row.language_requirements,
        scholarship_available=bool(row.scholarship_available),
        created_at=row.created_at,
    )


def _row_to_preferences(row: UserPreferenceRecord) -> UserPreferences:
    budget = None
    if row.budget_max is not None:
        budget = BudgetRange(min=row.budget_min or 0, max=row.budget_max)

    return UserPreferences(
        budget_range=budget,
        countries=row.countries or [],
        degree_type=row.degree_type or [],
        specialization=row.specialization or [],
        duration=row.duration or [],
        study_level=row.study_level,
        language_preference=row.language_preference,
        scholarship_needed=bool(row.scholarship_needed),
        preferred_cities=row.preferred_cities or [],
        goals=row.goals,
    )


# =============================================================================
# SQL IMPLEMENTATIONS
# =============================================================================

class SqlProgramCatalog:
    """Program catalog backed by the `programs` table."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def fetch_programs(self) -> List[Program]:
        with session_scope(self.session_factory) as db:
            rows = (
                db.query(StudyProgram)
                .order_by(StudyProgram.created_at.desc(), StudyProgram.id)
                .all()
            )
            programs = [_row_to_program(row) for row in rows]
        logger.debug(f"Fetched {len(programs)} programs from catalog")
        return programs

    def get_program(self, program_id: str) -> Optional[Program]:
        with session_scope(self.session_factory) as db:
            row = db.get(StudyProgram, str(program_id))
            return _row_to_program(row) if row else None

    def fetch_programs_by_ids(self, program_ids: Iterable[str]) -> List[Program]:
        ids = unique_in_order(str(pid) for pid in program_ids)
        if not ids:
            return []
        with session_scope(self.session_factory) as db:
            rows = db.query(StudyProgram).filter(StudyProgram.id.in_(ids)).all()
            by_id = {row.id: _row_to_program(row) for row in rows}
        # Preserve the caller's ordering
        return [by_id[pid] for pid in ids if pid in by_id]


class SqlUserDataStore:
    """
    User preferences and interaction history backed by SQL tables.

    The interaction log is append-only: each tracked action is a new row,
    and reads return the full history.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def fetch_preferences(self, user_id: str) -> Optional[UserPreferences]:
        with session_scope(self.session_factory) as db:
            row = (
                db.query(UserPreferenceRecord)
                .filter(UserPreferenceRecord.user_id == user_id)
                .first()
            )
            return _row_to_preferences(row) if row else None

    def _program_ids_for(self, user_id: str, action: InteractionAction) -> List[str]:
        with session_scope(self.session_factory) as db:
            rows = (
                db.query(UserInteraction.program_id)
                .filter(
                    UserInteraction.user_id == user_id,
                    UserInteraction.action == action.value,
                )
                .order_by(UserInteraction.created_at, UserInteraction.id)
                .all()
            )
            return unique_in_order(row.program_id for row in rows)

    def fetch_viewed_programs(self, user_id: str) -> List[str]:
        return self._program_ids_for(user_id, InteractionAction.VIEW)

    def fetch_saved_programs(self, user_id: str) -> List[str]:
        return self._program_ids_for(user_id, InteractionAction.SAVE)

    def fetch_applied_programs(self, user_id: str) -> List[str]:
        return self._program_ids_for(user_id, InteractionAction.APPLY)

    def fetch_search_history(self, user_id: str) -> List[str]:
        with session_scope(self.session_factory) as db:
            rows = (
                db.query(UserInteraction.search_query)
                .filter(
                    UserInteraction.user_id == user_id,
                    UserInteraction.action == InteractionAction.SEARCH.value,
                )
                .order_by(UserInteraction.created_at, UserInteraction.id)
                .all()
            )
            return [row.search_query for row in rows if row.search_query]

    def record_interaction(
        self,
        user_id: str,
        action: InteractionAction,
        program_id: Optional[str] = None,
        search_query: Optional[str] = None,
    ) -> None:
        with session_scope(self.session_factory) as db:
            db.add(UserInteraction(
                user_id=user_id,
                action=InteractionAction(action).value,
                program_id=str(program_id) if program_id is not None else None,
                search_query=search_query,
                created_at=datetime.now(timezone.utc),
            ))
