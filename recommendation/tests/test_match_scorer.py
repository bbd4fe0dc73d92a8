"""
Tests for the match scorer.
"""

from recommendation.logic.behavior import BehaviorAggregator
from recommendation.logic.constants import Confidence
from recommendation.logic.contracts import UserPreferences, UserBehavior, SimilarityTables
from recommendation.logic.match_scorer import (
    MatchScorer,
    derive_confidence,
    score_budget,
    score_country,
    score_study_level,
    score_specialization,
)
from recommendation.logic.memory_store import InMemoryCatalog

from .conftest import make_program


def _points(match, factor):
    return sum(f.points for f in match.factor_scores if f.factor == factor)


def test_exact_match_scenario(canada_master, canada_preferences):
    match = MatchScorer().score(canada_master, canada_preferences)

    assert _points(match, "country") == 25
    assert _points(match, "degree_type") == 15
    assert _points(match, "budget") == 15
    assert _points(match, "scholarship") == 7
    assert match.match_score >= 62
    assert match.confidence in (Confidence.MEDIUM, Confidence.HIGH)
    assert match.reasons[0] == "Matches your preferred country: Canada"


def test_budget_shortfall_scenario(canada_master, canada_preferences):
    expensive = canada_master.model_copy(update={"tuition_fee": 20_000_000})

    match = MatchScorer().score(expensive, canada_preferences)

    assert _points(match, "budget") == 3
    assert any(r.startswith("Above budget") for r in match.reasons)
    assert match.match_score == 25 + 15 + 3 + 7


def test_region_fallback_scenario():
    program = make_program(country="Netherlands")
    preferences = UserPreferences(countries=["Germany"])

    result = score_country(program, preferences, SimilarityTables())

    assert result.points == 15
    assert "Germany" in result.reason
    assert result.considered


def test_region_table_is_one_directional():
    # Germany's cluster does not list the UK, even though the UK lists the Netherlands
    program = make_program(country="Germany")
    preferences = UserPreferences(countries=["UK"])

    assert score_country(program, preferences, SimilarityTables()).points == 0


def test_injected_tables_replace_defaults():
    tables = SimilarityTables(version="test", regions={"Ghana": ["Nigeria"]}, study_levels={})
    program = make_program(country="Ghana")
    preferences = UserPreferences(countries=["Nigeria"])

    match = MatchScorer(tables).score(program, preferences)

    assert match.match_score == 15


def test_no_preferences_scores_zero():
    program = make_program(country="Canada", degree_type="Master", tuition_fee=1000)

    match = MatchScorer().score(program, UserPreferences())

    assert match.match_score == 0
    assert match.confidence == Confidence.LOW
    assert match.reasons == []
    assert match.factors_considered == 0


def test_study_level_exact_and_compatible():
    tables = SimilarityTables()
    preferences = UserPreferences(study_level="Master")

    exact = score_study_level(make_program(study_level="master"), preferences, tables)
    compatible = score_study_level(make_program(study_level="Postgraduate Taught"), preferences, tables)
    unrelated = score_study_level(make_program(study_level="Foundation"), preferences, tables)

    assert exact.points == 20
    assert compatible.points == 12
    assert unrelated.points == 0 and unrelated.considered


def test_budget_grades():
    tables = SimilarityTables()
    preferences = UserPreferences(budget_range=[5_000_000, 10_000_000])

    under = score_budget(make_program(tuition_fee=2_000_000), preferences, tables)
    slightly_over = score_budget(make_program(tuition_fee=11_000_000), preferences, tables)
    edge = score_budget(make_program(tuition_fee=11_900_000), preferences, tables)

    assert under.points == 12
    assert "saves ₦3,000,000" in under.reason
    assert slightly_over.points == 8
    assert "₦1,000,000 over" in slightly_over.reason
    assert edge.points == 8


def test_single_number_budget_means_zero_minimum():
    preferences = UserPreferences(budget_range=10_000_000)

    assert preferences.budget_range.min == 0
    assert preferences.budget_range.max == 10_000_000
    result = score_budget(make_program(tuition_fee=100), preferences, SimilarityTables())
    assert result.points == 15


def test_malformed_budget_fields_skip_factor():
    preferences = UserPreferences(budget_range="a lot")
    assert preferences.budget_range is None

    program = make_program(tuition_fee="call us")
    assert program.tuition_fee is None

    result = score_budget(program, UserPreferences(budget_range=[1, 2]), SimilarityTables())
    assert result.points == 0
    assert result.reason is None
    assert not result.considered


def test_non_finite_budget_fields_skip_factor():
    tables = SimilarityTables()

    assert make_program(tuition_fee="NaN").tuition_fee is None
    assert make_program(tuition_fee=float("inf")).tuition_fee is None
    assert UserPreferences(budget_range=["nan", 10_000_000]).budget_range is None
    assert UserPreferences(budget_range={"min": 0, "max": float("inf")}).budget_range is None

    nan_tuition = score_budget(
        make_program(tuition_fee="NaN"), UserPreferences(budget_range=[1, 10]), tables
    )
    nan_budget = score_budget(
        make_program(tuition_fee=8_000_000),
        UserPreferences(budget_range=["nan", 10_000_000]),
        tables,
    )

    for result in (nan_tuition, nan_budget):
        assert result.points == 0
        assert result.reason is None
        assert not result.considered


def test_specialization_substring_either_way():
    tables = SimilarityTables()
    program = make_program(specialization="Computer Science, Artificial Intelligence")

    narrower = score_specialization(program, UserPreferences(specialization=["computer"]), tables)
    wider = score_specialization(
        program, UserPreferences(specialization=["Applied Artificial Intelligence"]), tables
    )
    none = score_specialization(program, UserPreferences(specialization=["History"]), tables)

    assert narrower.points == 10
    assert wider.points == 10
    assert none.points == 0


def test_language_preference_is_case_insensitive():
    program = make_program(language_requirements="IELTS 6.5 (English)")

    match = MatchScorer().score(program, UserPreferences(language_preference="english"))

    assert match.match_score == 5


def test_scholarship_without_need_still_counts():
    match = MatchScorer().score(make_program(scholarship_available=True), UserPreferences())

    assert match.match_score == 3
    assert match.reasons == ["Offers scholarships"]
    # Scholarship is not a preference factor
    assert match.factors_considered == 0


def test_score_is_clamped_to_100():
    program = make_program(
        "best",
        country="Canada", city="Toronto", degree_type="Master", tuition_fee=8_000_000,
        specialization="Computer Science", duration="2 years", study_level="master",
        language_requirements="English", scholarship_available=True,
    )
    preferences = UserPreferences(
        countries=["Canada"], preferred_cities=["Toronto"], degree_type=["Master"],
        budget_range=[5_000_000, 10_000_000], specialization=["Computer Science"],
        duration=["2 years"], study_level="master", language_preference="English",
        scholarship_needed=True,
    )
    viewed = make_program("viewed", country="Canada", specialization="Computer Science")
    aggregator = BehaviorAggregator(InMemoryCatalog([program, viewed]))
    behavior = UserBehavior(viewed_programs=["viewed"], saved_programs=["viewed"])

    match = MatchScorer().score(program, preferences, behavior, aggregator)

    assert match.match_score == 100
    assert match.confidence == Confidence.HIGH


def test_scoring_is_deterministic(canada_master, canada_preferences):
    scorer = MatchScorer()

    first = scorer.score(canada_master, canada_preferences)
    second = scorer.score(canada_master, canada_preferences)

    assert first == second


def test_adding_program_country_never_lowers_score():
    program = make_program(country="Netherlands", degree_type="Master")
    scorer = MatchScorer()

    for countries in ([], ["Germany"], ["Japan"]):
        before = scorer.score(program, UserPreferences(countries=countries, degree_type=["Master"]))
        after = scorer.score(
            program, UserPreferences(countries=countries + ["Netherlands"], degree_type=["Master"])
        )
        assert after.match_score >= before.match_score


def test_confidence_thresholds():
    assert derive_confidence(4, 70) == Confidence.HIGH
    assert derive_confidence(10, 69) == Confidence.MEDIUM
    assert derive_confidence(2, 50) == Confidence.MEDIUM
    assert derive_confidence(1, 95) == Confidence.LOW
    assert derive_confidence(5, 49) == Confidence.LOW


def test_behavior_boosts(canada_master):
    viewed = make_program("viewed-1", country="Canada", degree_type="Bachelor")
    saved = make_program("saved-1", country="Canada", specialization="Artificial Intelligence")
    aggregator = BehaviorAggregator(InMemoryCatalog([canada_master, viewed, saved]))
    behavior = UserBehavior(viewed_programs=["viewed-1"], saved_programs=["saved-1"])

    match = MatchScorer().score(canada_master, UserPreferences(), behavior, aggregator)

    assert _points(match, "behavior_viewed") == 5
    assert _points(match, "behavior_saved_country") == 3
    assert _points(match, "behavior_saved_specialization") == 2
    # 3 for the scholarship the program offers
    assert match.match_score == 13
    assert "Similar to programs you've viewed" in match.reasons
    assert match.factors_considered == 0


def test_behavior_ignored_without_aggregator(canada_master):
    behavior = UserBehavior(viewed_programs=["canada-1"])

    match = MatchScorer().score(canada_master, UserPreferences(), behavior)

    assert match.match_score == 3
