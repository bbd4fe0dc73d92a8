"""
In-Memory Data Sources

Catalog and user-data implementations that live entirely in memory.
Used for development without a database and throughout the tests.
"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from .adapter import unique_in_order
from .contracts import Program, UserPreferences, InteractionAction


class InMemoryCatalog:
    """Program catalog over a fixed list of programs."""

    def __init__(self, programs: Optional[Iterable[Program]] = None):
        self._programs: Dict[str, Program] = {}
        for program in programs or []:
            self._programs[program.id] = program

    def fetch_programs(self) -> List[Program]:
        # Newest first; programs without a timestamp go last in insertion order
        dated = [p for p in self._programs.values() if p.created_at is not None]
        undated = [p for p in self._programs.values() if p.created_at is None]
        dated.sort(key=lambda p: p.created_at, reverse=True)
        return dated + undated

    def get_program(self, program_id: str) -> Optional[Program]:
        return self._programs.get(str(program_id))

    def fetch_programs_by_ids(self, program_ids: Iterable[str]) -> List[Program]:
        ids = unique_in_order(str(pid) for pid in program_ids)
        return [self._programs[pid] for pid in ids if pid in self._programs]


class InMemoryUserDataStore:
    """Preferences plus an append-only interaction log, held in memory."""

    def __init__(self, preferences: Optional[Dict[str, UserPreferences]] = None):
        self.preferences: Dict[str, UserPreferences] = dict(preferences or {})
        # (user_id, action, program_id, search_query)
        self.interactions: List[Tuple[str, InteractionAction, Optional[str], Optional[str]]] = []

    def fetch_preferences(self, user_id: str) -> Optional[UserPreferences]:
        return self.preferences.get(user_id)

    def _program_ids_for(self, user_id: str, action: InteractionAction) -> List[str]:
        return unique_in_order(
            program_id
            for uid, act, program_id, _ in self.interactions
            if uid == user_id and act == action
        )

    def fetch_viewed_programs(self, user_id: str) -> List[str]:
        return self._program_ids_for(user_id, InteractionAction.VIEW)

    def fetch_saved_programs(self, user_id: str) -> List[str]:
        return self._program_ids_for(user_id, InteractionAction.SAVE)

    def fetch_applied_programs(self, user_id: str) -> List[str]:
        return self._program_ids_for(user_id, InteractionAction.APPLY)

    def fetch_search_history(self, user_id: str) -> List[str]:
        return [
            query
            for uid, act, _, query in self.interactions
            if uid == user_id and act == InteractionAction.SEARCH and query
        ]

    def record_interaction(
        self,
        user_id: str,
        action: InteractionAction,
        program_id: Optional[str] = None,
        search_query: Optional[str] = None,
    ) -> None:
        self.interactions.append((
            user_id,
            InteractionAction(action),
            str(program_id) if program_id is not None else None,
            search_query,
        ))


def mock_programs(count: int = 10) -> List[Program]:
    """
    Sample catalog for development without a database.

    Args:
        count: Number of mock programs to return

    Returns:
        List of Program objects, newest first
    """
    mock_data = [
        ("University of Toronto", "MSc Computer Science", "Master", "Canada", "Toronto",
         8_000_000, "Computer Science, Artificial Intelligence", "2 years", "master", "English", True),
        ("University of British Columbia", "MEng Software Systems", "Master", "Canada", "Vancouver",
         9_500_000, "Software Engineering, Computer Science", "2 years", "master", "English", False),
        ("MIT", "SM Electrical Engineering", "Master", "USA", "Cambridge",
         30_000_000, "Electrical Engineering, Robotics", "2 years", "master", "English", True),
        ("TU Munich", "MSc Informatics", "Master", "Germany", "Munich",
         1_500_000, "Informatics, Data Science", "2 years", "master", "English, German", False),
        ("University of Amsterdam", "MSc Data Science", "Master", "Netherlands", "Amsterdam",
         12_000_000, "Data Science, Statistics", "1 year", "postgraduate", "English", True),
        ("Imperial College London", "MSc Computing", "Master", "UK", "London",
         22_000_000, "Computing, Machine Learning", "1 year", "postgraduate", "English", False),
        ("University of Melbourne", "Master of IT", "Master", "Australia", "Melbourne",
         18_000_000, "Information Technology, Cybersecurity", "2 years", "graduate", "English", True),
        ("KTH Royal Institute of Technology", "MSc Machine Learning", "Master", "Sweden", "Stockholm",
         10_000_000, "Machine Learning, Artificial Intelligence", "2 years", "master", "English", False),
        ("University of Lagos", "BSc Computer Science", "Bachelor", "Nigeria", "Lagos",
         600_000, "Computer Science", "4 years", "undergraduate", "English", False),
        ("Sorbonne University", "Master Informatique", "Master", "France", "Paris",
         2_000_000, "Computer Science, Mathematics", "2 years", "master", "French", True),
    ]

    base_time = datetime(2025, 1, 1)
    programs = []
    for i, row in enumerate(mock_data[:count]):
        (university, name, degree, country, city, tuition,
         specialization, duration, level, language, scholarship) = row
        programs.append(Program(
            id=f"prog-{i + 1}",
            university=university,
            name=name,
            degree_type=degree,
            country=country,
            city=city,
            tuition_fee=tuition,
            specialization=specialization,
            duration=duration,
            study_level=level,
            language_requirements=language,
            scholarship_available=scholarship,
            created_at=base_time - timedelta(days=i),
        ))
    return programs
