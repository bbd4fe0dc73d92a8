"""
Match Scorer

Scores one program against a student's preferences and behavior.
Each factor scorer returns a FactorScore; the scorer sums the points,
collects the reasons in evaluation order and derives a confidence level.
Missing preference fields skip their factor. Nothing here raises on
sparse or malformed input.
"""

from typing import Callable, List, Optional

from .behavior import BehaviorAggregator
from .contracts import (
    Program,
    UserPreferences,
    UserBehavior,
    ProgramMatch,
    FactorScore,
    SimilarityTables,
)
from .constants import (
    Confidence,
    CONFIDENCE_THRESHOLDS,
    COUNTRY_MATCH_POINTS,
    COUNTRY_SIMILAR_REGION_POINTS,
    STUDY_LEVEL_MATCH_POINTS,
    STUDY_LEVEL_COMPATIBLE_POINTS,
    DEGREE_TYPE_MATCH_POINTS,
    BUDGET_WITHIN_RANGE_POINTS,
    BUDGET_UNDER_MIN_POINTS,
    BUDGET_SLIGHTLY_OVER_POINTS,
    BUDGET_OVER_POINTS,
    BUDGET_TOLERANCE_RATIO,
    SPECIALIZATION_MATCH_POINTS,
    CITY_MATCH_POINTS,
    DURATION_MATCH_POINTS,
    SCHOLARSHIP_NEEDED_POINTS,
    SCHOLARSHIP_AVAILABLE_POINTS,
    LANGUAGE_MATCH_POINTS,
    BEHAVIOR_VIEWED_SIMILAR_POINTS,
    BEHAVIOR_SAVED_COUNTRY_POINTS,
    BEHAVIOR_SAVED_SPECIALIZATION_POINTS,
    MAX_MATCH_SCORE,
    MIN_MATCH_SCORE,
    CURRENCY_SYMBOL,
)


def format_amount(amount: float) -> str:
    """Format a tuition amount for reason strings."""
    return f"{CURRENCY_SYMBOL}{amount:,.0f}"


# =============================================================================
# PREFERENCE FACTORS
# =============================================================================

def score_country(
    program: Program,
    preferences: UserPreferences,
    tables: SimilarityTables
) -> FactorScore:
    """
    Full credit for a preferred country, partial credit when the program's
    country lists a preferred country among its similar regions.
    """
    if not preferences.countries:
        return FactorScore(factor="country")

    if program.country in preferences.countries:
        return FactorScore(
            factor="country",
            points=COUNTRY_MATCH_POINTS,
            reason=f"Matches your preferred country: {program.country}",
            considered=True,
        )

    similar = [
        region for region in tables.similar_regions(program.country or "")
        if region in preferences.countries
    ]
    if similar:
        return FactorScore(
            factor="country",
            points=COUNTRY_SIMILAR_REGION_POINTS,
            reason=f"Similar to your preferred regions: {', '.join(similar)}",
            considered=True,
        )
    return FactorScore(factor="country", considered=True)


def is_compatible_study_level(
    preferred_level: str,
    program_level: str,
    tables: SimilarityTables
) -> bool:
    """Compatibility is keyed by the preferred level and checked by substring."""
    program_level = program_level.lower()
    return any(level in program_level for level in tables.compatible_levels(preferred_level))


def score_study_level(
    program: Program,
    preferences: UserPreferences,
    tables: SimilarityTables
) -> FactorScore:
    if not preferences.study_level or not program.study_level:
        return FactorScore(factor="study_level")

    if preferences.study_level.lower() == program.study_level.lower():
        return FactorScore(
            factor="study_level",
            points=STUDY_LEVEL_MATCH_POINTS,
            reason=f"Matches your study level: {program.study_level}",
            considered=True,
        )
    if is_compatible_study_level(preferences.study_level, program.study_level, tables):
        return FactorScore(
            factor="study_level",
            points=STUDY_LEVEL_COMPATIBLE_POINTS,
            reason=f"Compatible study level: {program.study_level}",
            considered=True,
        )
    return FactorScore(factor="study_level", considered=True)


def score_degree_type(
    program: Program,
    preferences: UserPreferences,
    tables: SimilarityTables
) -> FactorScore:
    if not preferences.degree_type:
        return FactorScore(factor="degree_type")

    if program.degree_type in preferences.degree_type:
        return FactorScore(
            factor="degree_type",
            points=DEGREE_TYPE_MATCH_POINTS,
            reason=f"Matches your degree preference: {program.degree_type}",
            considered=True,
        )
    return FactorScore(factor="degree_type", considered=True)


def score_budget(
    program: Program,
    preferences: UserPreferences,
    tables: SimilarityTables
) -> FactorScore:
    """
    Graded budget fit. Always explains the outcome when evaluated:
    within range, under the minimum (with savings), slightly over
    (up to 20% above max) or above budget.
    """
    budget = preferences.budget_range
    tuition = program.tuition_fee
    if budget is None or tuition is None:
        return FactorScore(factor="budget")

    if budget.min <= tuition <= budget.max:
        points = BUDGET_WITHIN_RANGE_POINTS
        reason = f"Within your budget range: {format_amount(tuition)}"
    elif tuition < budget.min:
        points = BUDGET_UNDER_MIN_POINTS
        reason = (
            f"Under budget: {format_amount(tuition)} "
            f"(saves {format_amount(budget.min - tuition)})"
        )
    elif tuition <= budget.max * BUDGET_TOLERANCE_RATIO:
        points = BUDGET_SLIGHTLY_OVER_POINTS
        reason = (
            f"Slightly over budget: {format_amount(tuition)} "
            f"({format_amount(tuition - budget.max)} over)"
        )
    else:
        points = BUDGET_OVER_POINTS
        reason = (
            f"Above budget: {format_amount(tuition)} "
            f"({format_amount(tuition - budget.max)} over)"
        )

    return FactorScore(factor="budget", points=points, reason=reason, considered=True)


def matching_specializations(program: Program, wanted: List[str]) -> List[str]:
    """Preferred specializations overlapping any program tag (substring either way)."""
    tags = program.specialization_tags()
    matches = []
    for spec in wanted:
        needle = spec.lower().strip()
        if not needle:
            continue
        if any(needle in tag or tag in needle for tag in tags):
            matches.append(spec)
    return matches


def score_specialization(
    program: Program,
    preferences: UserPreferences,
    tables: SimilarityTables
) -> FactorScore:
    if not preferences.specialization or not program.specialization:
        return FactorScore(factor="specialization")

    matches = matching_specializations(program, preferences.specialization)
    if matches:
        return FactorScore(
            factor="specialization",
            points=SPECIALIZATION_MATCH_POINTS,
            reason=f"Matches your specialization interests: {', '.join(matches)}",
            considered=True,
        )
    return FactorScore(factor="specialization", considered=True)


def score_city(
    program: Program,
    preferences: UserPreferences,
    tables: SimilarityTables
) -> FactorScore:
    if not preferences.preferred_cities or not program.city:
        return FactorScore(factor="city")

    if program.city in preferences.preferred_cities:
        return FactorScore(
            factor="city",
            points=CITY_MATCH_POINTS,
            reason=f"In your preferred city: {program.city}",
            considered=True,
        )
    return FactorScore(factor="city", considered=True)


def score_duration(
    program: Program,
    preferences: UserPreferences,
    tables: SimilarityTables
) -> FactorScore:
    if not preferences.duration or not program.duration:
        return FactorScore(factor="duration")

    if program.duration in preferences.duration:
        return FactorScore(
            factor="duration",
            points=DURATION_MATCH_POINTS,
            reason=f"Matches your preferred duration: {program.duration}",
            considered=True,
        )
    return FactorScore(factor="duration", considered=True)


def score_scholarship(
    program: Program,
    preferences: UserPreferences,
    tables: SimilarityTables
) -> FactorScore:
    # Not a preference factor: never counts toward confidence
    if not program.scholarship_available:
        return FactorScore(factor="scholarship")

    if preferences.scholarship_needed:
        return FactorScore(
            factor="scholarship",
            points=SCHOLARSHIP_NEEDED_POINTS,
            reason="Offers scholarships (matches your need)",
        )
    return FactorScore(
        factor="scholarship",
        points=SCHOLARSHIP_AVAILABLE_POINTS,
        reason="Offers scholarships",
    )


def score_language(
    program: Program,
    preferences: UserPreferences,
    tables: SimilarityTables
) -> FactorScore:
    if not preferences.language_preference or not program.language_requirements:
        return FactorScore(factor="language")

    if preferences.language_preference.lower() in program.language_requirements.lower():
        return FactorScore(
            factor="language",
            points=LANGUAGE_MATCH_POINTS,
            reason=f"Matches your language preference: {preferences.language_preference}",
            considered=True,
        )
    return FactorScore(factor="language", considered=True)


FactorScorer = Callable[[Program, UserPreferences, SimilarityTables], FactorScore]

# Evaluation order determines the order of reasons
PREFERENCE_FACTORS: List[FactorScorer] = [
    score_country,
    score_study_level,
    score_degree_type,
    score_budget,
    score_specialization,
    score_city,
    score_duration,
    score_scholarship,
    score_language,
]


# =============================================================================
# BEHAVIOR BOOST
# =============================================================================

def score_behavior(
    program: Program,
    behavior: UserBehavior,
    aggregator: BehaviorAggregator
) -> List[FactorScore]:
    """
    Boosts derived from past interactions: similarity to viewed programs,
    and country / specialization affinity of saved programs.
    """
    boosts: List[FactorScore] = []

    if behavior.viewed_programs:
        similar = aggregator.find_similar_programs(program, behavior.viewed_programs)
        if similar:
            boosts.append(FactorScore(
                factor="behavior_viewed",
                points=BEHAVIOR_VIEWED_SIMILAR_POINTS,
                reason="Similar to programs you've viewed",
            ))

    if behavior.saved_programs:
        countries = aggregator.get_country_interest(behavior.saved_programs)
        if program.country and program.country in countries:
            boosts.append(FactorScore(
                factor="behavior_saved_country",
                points=BEHAVIOR_SAVED_COUNTRY_POINTS,
                reason="In a country you're interested in",
            ))

        interests = aggregator.get_specialization_interest(behavior.saved_programs)
        specialization = (program.specialization or "").lower()
        if specialization and any(spec.lower() in specialization for spec in interests):
            boosts.append(FactorScore(
                factor="behavior_saved_specialization",
                points=BEHAVIOR_SAVED_SPECIALIZATION_POINTS,
                reason="Matches your field of interest",
            ))

    return boosts


# =============================================================================
# CONFIDENCE
# =============================================================================

def derive_confidence(factors_considered: int, score: int) -> Confidence:
    """Confidence follows from how many factors were evaluable and the score."""
    for level in (Confidence.HIGH, Confidence.MEDIUM):
        min_factors, min_score = CONFIDENCE_THRESHOLDS[level]
        if factors_considered >= min_factors and score >= min_score:
            return level
    return Confidence.LOW


# =============================================================================
# SCORER
# =============================================================================

class MatchScorer:
    """
    Weighted additive scorer.

    The similarity tables are injected so that alternative tables can be
    used without touching the module constants.
    """

    def __init__(self, tables: Optional[SimilarityTables] = None):
        self.tables = tables or SimilarityTables()

    def score(
        self,
        program: Program,
        preferences: UserPreferences,
        behavior: Optional[UserBehavior] = None,
        aggregator: Optional[BehaviorAggregator] = None,
    ) -> ProgramMatch:
        """
        Score a single program.

        Args:
            program: Catalog program
            preferences: Student's stated preferences
            behavior: Optional interaction history
            aggregator: Behavior aggregator used for behavior boosts

        Returns:
            ProgramMatch with score, reasons and confidence
        """
        factor_scores = [scorer(program, preferences, self.tables) for scorer in PREFERENCE_FACTORS]
        if behavior is not None and aggregator is not None:
            factor_scores.extend(score_behavior(program, behavior, aggregator))

        total = sum(f.points for f in factor_scores)
        factors_considered = sum(1 for f in factor_scores if f.considered)
        match_score = max(MIN_MATCH_SCORE, min(MAX_MATCH_SCORE, int(round(total))))

        return ProgramMatch(
            program=program,
            match_score=match_score,
            reasons=[f.reason for f in factor_scores if f.reason],
            factor_scores=factor_scores,
            confidence=derive_confidence(factors_considered, match_score),
            factors_considered=factors_considered,
        )
