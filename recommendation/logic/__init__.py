"""
Recommendation Logic Module

Provides the deterministic scoring engine for study-program recommendations.
"""

from .contracts import (
    Program,
    BudgetRange,
    UserPreferences,
    UserBehavior,
    ProgramMatch,
    FactorScore,
    RecommendationCategory,
    SimilarityTables,
    InteractionAction,
)
from .engine import (
    RecommendationEngine,
    RecommendationError,
    CatalogUnavailableError,
    get_recommendations,
)
from .match_scorer import MatchScorer
from .behavior import BehaviorAggregator
from .categorizer import categorize, assign_category
from .constants import CategoryId, Confidence

__all__ = [
    # Main engine
    "RecommendationEngine",
    "get_recommendations",
    "RecommendationError",
    "CatalogUnavailableError",

    # Components
    "MatchScorer",
    "BehaviorAggregator",
    "categorize",
    "assign_category",

    # Contracts
    "Program",
    "BudgetRange",
    "UserPreferences",
    "UserBehavior",
    "ProgramMatch",
    "FactorScore",
    "RecommendationCategory",
    "SimilarityTables",
    "InteractionAction",

    # Enums
    "CategoryId",
    "Confidence",
]
