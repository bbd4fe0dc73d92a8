"""
Behavior Aggregator

Derives secondary signals from a student's interaction history:
- programs viewed before that resemble the candidate program
- countries the student saved programs in
- specialization tags of saved programs

Every lookup is best-effort. A failing catalog query degrades to an empty
signal and never blocks scoring.
"""

import logging
from typing import Dict, List, Tuple

from .adapter import ProgramCatalog, unique_in_order
from .contracts import Program

logger = logging.getLogger(__name__)


class BehaviorAggregator:
    """
    Read-only signal extraction against the catalog.

    One instance serves one recommendation call; lookups that do not depend
    on the candidate program are memoized for the lifetime of the instance.
    """

    def __init__(self, catalog: ProgramCatalog):
        self.catalog = catalog
        self._programs_by_ids: Dict[Tuple[str, ...], List[Program]] = {}

    def _load(self, program_ids: List[str]) -> List[Program]:
        key = tuple(program_ids)
        if key not in self._programs_by_ids:
            self._programs_by_ids[key] = self.catalog.fetch_programs_by_ids(program_ids)
        return self._programs_by_ids[key]

    def find_similar_programs(self, program: Program, viewed_ids: List[str]) -> List[str]:
        """
        Viewed program ids sharing the candidate's country or degree type.
        """
        if not viewed_ids or not (program.country or program.degree_type):
            return []
        try:
            viewed = self._load(viewed_ids)
        except Exception as e:
            logger.warning(f"Similar-program lookup failed for {program.id}: {e}")
            return []

        return [
            other.id
            for other in viewed
            if (program.country and other.country == program.country)
            or (program.degree_type and other.degree_type == program.degree_type)
        ]

    def get_country_interest(self, saved_ids: List[str]) -> List[str]:
        """Distinct countries among saved programs."""
        if not saved_ids:
            return []
        try:
            saved = self._load(saved_ids)
        except Exception as e:
            logger.warning(f"Country interest lookup failed: {e}")
            return []
        return unique_in_order(p.country for p in saved)

    def get_specialization_interest(self, saved_ids: List[str]) -> List[str]:
        """Distinct specialization tags among saved programs."""
        if not saved_ids:
            return []
        try:
            saved = self._load(saved_ids)
        except Exception as e:
            logger.warning(f"Specialization interest lookup failed: {e}")
            return []

        tags = []
        for program in saved:
            if program.specialization:
                tags.extend(tag.strip() for tag in program.specialization.split(","))
        return unique_in_order(tags)
