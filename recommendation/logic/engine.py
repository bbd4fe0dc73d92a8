"""
Recommendation Engine

Main orchestrator that combines all scoring components into a single pipeline.
This is the primary entry point for generating recommendations.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Union

from .adapter import ProgramCatalog, UserDataStore
from .behavior import BehaviorAggregator
from .categorizer import categorize, assign_category
from .contracts import (
    UserPreferences,
    UserBehavior,
    ProgramMatch,
    RecommendationCategory,
    SimilarityTables,
    InteractionAction,
)
from .constants import ENGINE_VERSION, BEHAVIOR_FETCH_WORKERS
from .match_scorer import MatchScorer

logger = logging.getLogger(__name__)


class RecommendationError(Exception):
    """Base class for errors raised by the recommendation engine."""


class CatalogUnavailableError(RecommendationError):
    """The program catalog could not be fetched; nothing can be scored."""


PreferencesInput = Union[UserPreferences, Dict[str, Any], None]


class RecommendationEngine:
    """
    Main recommendation engine that orchestrates the scoring pipeline.

    Pipeline flow:
    1. Catalog - Fetch all programs (newest first)
    2. Behavior - Fetch the student's interaction history (optional)
    3. Scoring - Score every program against preferences and behavior
    4. Categorization - Group, rank and truncate into categories
    """

    def __init__(
        self,
        catalog: ProgramCatalog,
        user_store: Optional[UserDataStore] = None,
        tables: Optional[SimilarityTables] = None,
        behavior_workers: int = BEHAVIOR_FETCH_WORKERS,
    ):
        """
        Initialize the recommendation engine.

        Args:
            catalog: Program catalog collaborator
            user_store: Preference / interaction store. Without one, user ids
                are ignored and behavior is always empty.
            tables: Similarity tables for the scorer
            behavior_workers: Threads used for the behavior sub-queries
        """
        self.catalog = catalog
        self.user_store = user_store
        self.scorer = MatchScorer(tables)
        self.behavior_workers = behavior_workers
        self.version = ENGINE_VERSION

    # -------------------------------------------------------------------------
    # Collaborator access
    # -------------------------------------------------------------------------

    def fetch_user_behavior(self, user_id: str) -> UserBehavior:
        """
        Load a student's interaction history.

        The sub-queries run concurrently and fail independently: a failing
        query contributes an empty list.
        """
        if self.user_store is None:
            return UserBehavior()

        queries = {
            "viewed_programs": self.user_store.fetch_viewed_programs,
            "saved_programs": self.user_store.fetch_saved_programs,
            "applied_programs": self.user_store.fetch_applied_programs,
            "search_history": self.user_store.fetch_search_history,
        }

        results: Dict[str, List[str]] = {}
        with ThreadPoolExecutor(max_workers=self.behavior_workers) as pool:
            futures = {name: pool.submit(query, user_id) for name, query in queries.items()}
            for name, future in futures.items():
                try:
                    results[name] = list(future.result() or [])
                except Exception as e:
                    logger.warning(f"Behavior lookup '{name}' failed for user {user_id}: {e}")
                    results[name] = []

        return UserBehavior(**results)

    def fetch_user_preferences(self, user_id: str) -> UserPreferences:
        """Stored preferences, or empty preferences when absent or unreadable."""
        if self.user_store is None:
            return UserPreferences()
        try:
            preferences = self.user_store.fetch_preferences(user_id)
        except Exception as e:
            logger.warning(f"Preference lookup failed for user {user_id}: {e}")
            return UserPreferences()
        if preferences is None:
            logger.info(f"No stored preferences for user {user_id}; using defaults")
            return UserPreferences()
        return preferences

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    @staticmethod
    def _coerce_preferences(preferences: PreferencesInput) -> UserPreferences:
        if preferences is None:
            return UserPreferences()
        if isinstance(preferences, UserPreferences):
            return preferences
        return UserPreferences(**preferences)

    def score_programs(
        self,
        preferences: PreferencesInput,
        user_id: Optional[str] = None
    ) -> List[ProgramMatch]:
        """
        Score every catalog program, without categorizing.

        Raises:
            CatalogUnavailableError: if the catalog cannot be fetched
        """
        preferences = self._coerce_preferences(preferences)

        try:
            programs = self.catalog.fetch_programs()
        except Exception as e:
            logger.error(f"Catalog fetch failed: {e}")
            raise CatalogUnavailableError("Failed to fetch programs") from e

        if not programs:
            logger.warning("Catalog is empty; no programs to score")
            return []

        behavior = self.fetch_user_behavior(user_id) if user_id else None
        aggregator = BehaviorAggregator(self.catalog)

        matches = [
            self.scorer.score(program, preferences, behavior, aggregator)
            for program in programs
        ]
        logger.debug(f"Scored {len(matches)} programs")
        return matches

    def get_recommendations(
        self,
        preferences: PreferencesInput,
        user_id: Optional[str] = None
    ) -> List[RecommendationCategory]:
        """
        Generate categorized recommendations.

        Args:
            preferences: Student's preferences (model or dict)
            user_id: Optional user whose behavior boosts the scores

        Returns:
            Ordered list of non-empty categories ([] for an empty catalog)
        """
        start_time = time.perf_counter()
        preferences = self._coerce_preferences(preferences)

        logger.info(f"Generating recommendations for user: {user_id or 'anonymous'}")

        matches = self.score_programs(preferences, user_id)
        categories = categorize(matches, preferences)

        processing_time = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Recommendations ready: {len(matches)} programs scored, "
            f"{len(categories)} categories ({processing_time:.2f}ms)"
        )
        return categories

    def refresh(
        self,
        preferences: PreferencesInput,
        user_id: Optional[str] = None
    ) -> List[RecommendationCategory]:
        """Explicit recompute; identical to get_recommendations (nothing is cached)."""
        logger.info(f"Refreshing recommendations for user: {user_id or 'anonymous'}")
        return self.get_recommendations(preferences, user_id)

    def recommend_from_dict(self, preferences_data: dict, **kwargs) -> List[RecommendationCategory]:
        """
        Convenience method for API integration.
        """
        return self.get_recommendations(UserPreferences(**preferences_data), **kwargs)

    # -------------------------------------------------------------------------
    # User-centric entry points
    # -------------------------------------------------------------------------

    def get_user_recommendations(self, user_id: str) -> List[RecommendationCategory]:
        """Recommendations from the user's stored preferences and behavior."""
        preferences = self.fetch_user_preferences(user_id)
        return self.get_recommendations(preferences, user_id)

    def get_program_match_details(self, program_id: str, user_id: str) -> Optional[ProgramMatch]:
        """
        Score a single program for a user.

        Returns None when the program does not exist or the user has no
        stored preferences.
        """
        try:
            program = self.catalog.get_program(program_id)
        except Exception as e:
            logger.warning(f"Program lookup failed for {program_id}: {e}")
            return None
        if program is None or self.user_store is None:
            return None

        try:
            preferences = self.user_store.fetch_preferences(user_id)
        except Exception as e:
            logger.warning(f"Preference lookup failed for user {user_id}: {e}")
            return None
        if preferences is None:
            return None

        behavior = self.fetch_user_behavior(user_id)
        match = self.scorer.score(program, preferences, behavior, BehaviorAggregator(self.catalog))
        return match.model_copy(update={"category": assign_category(match, preferences).value})

    def track_user_behavior(
        self,
        user_id: str,
        action: Union[InteractionAction, str],
        program_id: Optional[str] = None,
        search_query: Optional[str] = None,
    ) -> bool:
        """
        Append an interaction to the user's history.

        Tracking is non-critical: invalid input or storage errors return False.
        """
        if self.user_store is None:
            return False
        try:
            action = InteractionAction(action)
        except ValueError:
            logger.warning(f"Unknown interaction action: {action}")
            return False

        if action == InteractionAction.SEARCH and not search_query:
            return False
        if action != InteractionAction.SEARCH and not program_id:
            return False

        try:
            self.user_store.record_interaction(
                user_id,
                action,
                program_id=program_id,
                search_query=search_query if action == InteractionAction.SEARCH else None,
            )
        except Exception as e:
            logger.error(f"Error tracking user behavior: {e}")
            return False
        return True


# Convenience function for simple usage
def get_recommendations(
    preferences: PreferencesInput,
    catalog: ProgramCatalog,
    user_store: Optional[UserDataStore] = None,
    user_id: Optional[str] = None,
) -> List[RecommendationCategory]:
    """
    Convenience function to get recommendations.

    Args:
        preferences: Student preferences
        catalog: Program catalog
        user_store: Optional preference / interaction store
        user_id: Optional user id for behavior boosts

    Returns:
        List of RecommendationCategory
    """
    engine = RecommendationEngine(catalog, user_store)
    return engine.get_recommendations(preferences, user_id)
