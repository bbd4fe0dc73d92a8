"""
Categorizer

Groups scored programs into recommendation categories:
- Perfect Matches (90+ with high confidence)
- Budget-Friendly Options (80+ within budget)
- Rising Star Programs (75+ with scholarships)
- AI Insights (70+)
- Hidden Gems (60-69)
- Recommended Programs (fallback when nothing else qualifies)

Categories are evaluated in priority order; a program claimed by an
earlier category is excluded from all later ones.
"""

import math
from typing import Callable, Dict, List, Optional, Tuple

from .contracts import ProgramMatch, UserPreferences, RecommendationCategory
from .constants import (
    CategoryId,
    Confidence,
    CATEGORY_DISPLAY_CAPS,
    CATEGORY_METADATA,
    PERFECT_MATCH_MIN_SCORE,
    BUDGET_FRIENDLY_MIN_SCORE,
    RISING_STARS_MIN_SCORE,
    AI_SUGGESTED_MIN_SCORE,
    HIDDEN_GEMS_MIN_SCORE,
    HIDDEN_GEMS_MAX_SCORE,
)
from .match_scorer import format_amount

CategoryPredicate = Callable[[ProgramMatch, UserPreferences], bool]


def _is_perfect_match(match: ProgramMatch, preferences: UserPreferences) -> bool:
    return match.match_score >= PERFECT_MATCH_MIN_SCORE and match.confidence == Confidence.HIGH


def _is_budget_friendly(match: ProgramMatch, preferences: UserPreferences) -> bool:
    budget = preferences.budget_range
    tuition = match.program.tuition_fee
    return (
        match.match_score >= BUDGET_FRIENDLY_MIN_SCORE
        and budget is not None
        and tuition is not None
        and tuition <= budget.max
    )


def _is_rising_star(match: ProgramMatch, preferences: UserPreferences) -> bool:
    return match.match_score >= RISING_STARS_MIN_SCORE and match.program.scholarship_available


def _is_ai_suggested(match: ProgramMatch, preferences: UserPreferences) -> bool:
    return match.match_score >= AI_SUGGESTED_MIN_SCORE


def _is_hidden_gem(match: ProgramMatch, preferences: UserPreferences) -> bool:
    return HIDDEN_GEMS_MIN_SCORE <= match.match_score < HIDDEN_GEMS_MAX_SCORE


# Priority order; the general fallback is handled separately
CATEGORY_PREDICATES: List[Tuple[CategoryId, CategoryPredicate]] = [
    (CategoryId.PERFECT_MATCH, _is_perfect_match),
    (CategoryId.BUDGET_FRIENDLY, _is_budget_friendly),
    (CategoryId.RISING_STARS, _is_rising_star),
    (CategoryId.AI_SUGGESTED, _is_ai_suggested),
    (CategoryId.HIDDEN_GEMS, _is_hidden_gem),
]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def rank_matches(matches: List[ProgramMatch]) -> List[ProgramMatch]:
    """
    Sort matches by score (descending).
    Ties keep their incoming (catalog) order.
    """
    return sorted(matches, key=lambda m: m.match_score, reverse=True)


def assign_category(match: ProgramMatch, preferences: Optional[UserPreferences] = None) -> CategoryId:
    """
    First category whose predicate the match satisfies, ignoring exclusion.
    Used when a single program is considered on its own.
    """
    preferences = preferences or UserPreferences()
    for category_id, predicate in CATEGORY_PREDICATES:
        if predicate(match, preferences):
            return category_id
    return CategoryId.GENERAL


def partition_matches(
    matches: List[ProgramMatch],
    preferences: Optional[UserPreferences] = None
) -> Dict[CategoryId, List[ProgramMatch]]:
    """
    Claim matches into categories in priority order.

    Args:
        matches: Scored programs, any order
        preferences: Preferences the matches were scored with

    Returns:
        Dict mapping each non-empty category to its ranked members
        (untruncated, each tagged with its category)
    """
    preferences = preferences or UserPreferences()
    ranked = rank_matches(matches)

    claimed = set()
    by_category: Dict[CategoryId, List[ProgramMatch]] = {}

    for category_id, predicate in CATEGORY_PREDICATES:
        members = [
            m.model_copy(update={"category": category_id.value})
            for m in ranked
            if m.program.id not in claimed and predicate(m, preferences)
        ]
        if members:
            by_category[category_id] = members
            claimed.update(m.program.id for m in members)

    if not by_category and ranked:
        by_category[CategoryId.GENERAL] = [
            m.model_copy(update={"category": CategoryId.GENERAL.value}) for m in ranked
        ]

    return by_category


def _category_reason(
    category_id: CategoryId,
    members: List[ProgramMatch],
    preferences: UserPreferences
) -> str:
    if category_id == CategoryId.PERFECT_MATCH:
        top_reasons = members[0].reasons[:2] if members else []
        return ", ".join(top_reasons) or "Based on your preferences"
    if category_id == CategoryId.BUDGET_FRIENDLY:
        budget = preferences.budget_range
        amount = format_amount(budget.max) if budget else "your"
        return f"These programs fit your {amount} budget while maintaining quality"
    if category_id == CategoryId.RISING_STARS:
        return "Programs with high industry demand and scholarship opportunities"
    if category_id == CategoryId.AI_SUGGESTED:
        return "Based on successful profiles similar to yours"
    if category_id == CategoryId.HIDDEN_GEMS:
        return "Lesser-known programs with great potential"
    return "Based on available programs in our database"


def build_category(
    category_id: CategoryId,
    members: List[ProgramMatch],
    preferences: UserPreferences
) -> RecommendationCategory:
    """Truncate members to the display cap and summarize them."""
    displayed = members[:CATEGORY_DISPLAY_CAPS[category_id]]
    metadata = CATEGORY_METADATA[category_id]
    average = sum(m.match_score for m in displayed) / len(displayed) if displayed else 0

    return RecommendationCategory(
        id=category_id.value,
        title=metadata["title"],
        description=metadata["description"],
        icon=metadata["icon"],
        programs=[m.program for m in displayed],
        match_percentage=round_half_up(average),
        reason=_category_reason(category_id, displayed, preferences),
    )


def categorize(
    matches: List[ProgramMatch],
    preferences: Optional[UserPreferences] = None
) -> List[RecommendationCategory]:
    """
    Build the ordered category list for a set of scored programs.
    An empty input yields an empty list.
    """
    preferences = preferences or UserPreferences()
    by_category = partition_matches(matches, preferences)
    return [
        build_category(category_id, members, preferences)
        for category_id, members in by_category.items()
    ]
