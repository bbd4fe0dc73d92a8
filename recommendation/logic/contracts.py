"""
Data Contracts for the Recommendation Scoring Engine

Defines Pydantic models for the catalog Program, the student's
UserPreferences and UserBehavior (inputs), and ProgramMatch /
RecommendationCategory (outputs).
These contracts are the API boundary for the scoring engine.
"""

import math
from datetime import datetime
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator, model_validator
from enum import Enum

from .constants import (
    Confidence,
    CategoryId,
    REGION_SIMILARITY,
    STUDY_LEVEL_COMPATIBILITY,
    SIMILARITY_TABLES_VERSION,
)


def _to_number(value: Any) -> Optional[float]:
    """Coerce a numeric-looking value to a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


# =============================================================================
# CATALOG
# =============================================================================

class Program(BaseModel):
    """
    A study program as supplied by the catalog.
    Only `id` is required; catalog rows are frequently sparse.
    """
    id: str
    university: str = ""
    name: str = ""
    degree_type: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    tuition_fee: Optional[float] = None
    specialization: Optional[str] = None  # comma-separated tags
    duration: Optional[str] = None
    study_level: Optional[str] = None
    language_requirements: Optional[str] = None
    scholarship_available: bool = False
    created_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_string(cls, value):
        return str(value) if value is not None else value

    @field_validator("tuition_fee", mode="before")
    @classmethod
    def _numeric_tuition(cls, value):
        return _to_number(value)

    @field_validator("scholarship_available", mode="before")
    @classmethod
    def _scholarship_flag(cls, value):
        return bool(value)

    def specialization_tags(self) -> List[str]:
        """Comma-split, trimmed, lower-cased specialization tags."""
        if not self.specialization:
            return []
        tags = [tag.strip().lower() for tag in self.specialization.split(",")]
        return [tag for tag in tags if tag]


# =============================================================================
# INPUT CONTRACTS
# =============================================================================

class BudgetRange(BaseModel):
    """
    Tuition budget as a closed [min, max] interval.

    Accepts a single number (treated as the maximum, min=0), a two-item
    sequence, or a mapping with min/max keys.
    """
    min: float = 0.0
    max: float

    @model_validator(mode="before")
    @classmethod
    def _coerce_shape(cls, value):
        if isinstance(value, BudgetRange):
            return value
        if isinstance(value, dict):
            low, high = value.get("min", 0), value.get("max")
        elif isinstance(value, (list, tuple)):
            if len(value) != 2:
                raise ValueError("budget range must have exactly two values")
            low, high = value
        else:
            low, high = 0, value

        low_num, high_num = _to_number(low), _to_number(high)
        if low_num is None or high_num is None:
            raise ValueError("budget range values must be numeric")
        if low_num > high_num:
            low_num, high_num = high_num, low_num
        return {"min": low_num, "max": high_num}


class UserPreferences(BaseModel):
    """
    Stated preferences of a student.
    Every field is optional; an absent field skips its scoring factor.
    """
    budget_range: Optional[BudgetRange] = None
    countries: List[str] = Field(default_factory=list)
    degree_type: List[str] = Field(default_factory=list)
    specialization: List[str] = Field(default_factory=list)
    duration: List[str] = Field(default_factory=list)
    study_level: Optional[str] = None
    language_preference: Optional[str] = None
    scholarship_needed: bool = False
    preferred_cities: List[str] = Field(default_factory=list)
    goals: Optional[str] = None  # free text, not scored

    @field_validator("budget_range", mode="before")
    @classmethod
    def _lenient_budget(cls, value):
        # Malformed budgets are treated as absent, not as a validation error
        if value is None:
            return None
        try:
            return BudgetRange.model_validate(value)
        except ValueError:
            return None

    @field_validator(
        "countries", "degree_type", "specialization", "duration", "preferred_cities",
        mode="before",
    )
    @classmethod
    def _list_or_empty(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("scholarship_needed", mode="before")
    @classmethod
    def _flag_or_false(cls, value):
        return bool(value)


class UserBehavior(BaseModel):
    """Interaction history of a student, read from the interaction log."""
    viewed_programs: List[str] = Field(default_factory=list)
    saved_programs: List[str] = Field(default_factory=list)
    applied_programs: List[str] = Field(default_factory=list)
    search_history: List[str] = Field(default_factory=list)  # not scored
    time_spent: Dict[str, float] = Field(default_factory=dict)  # not scored


class InteractionAction(str, Enum):
    """Tracked student interactions."""
    VIEW = "view"
    SAVE = "save"
    APPLY = "apply"
    SEARCH = "search"


class SimilarityTables(BaseModel):
    """
    Static similarity data injected into the scorer.
    Defaults to the versioned tables in constants; tests may swap them.
    """
    version: str = SIMILARITY_TABLES_VERSION
    regions: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in REGION_SIMILARITY.items()}
    )
    study_levels: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in STUDY_LEVEL_COMPATIBILITY.items()}
    )

    def similar_regions(self, country: str) -> List[str]:
        return self.regions.get(country, [])

    def compatible_levels(self, preferred_level: str) -> List[str]:
        return self.study_levels.get(preferred_level.lower(), [])


# =============================================================================
# OUTPUT CONTRACTS
# =============================================================================

class FactorScore(BaseModel):
    """Contribution of a single factor to a match score."""
    factor: str
    points: int = 0
    reason: Optional[str] = None
    considered: bool = False  # counts toward confidence


class ProgramMatch(BaseModel):
    """Score, explanation and confidence of one program for one student."""
    program: Program
    match_score: int = Field(ge=0, le=100)
    reasons: List[str] = Field(default_factory=list)
    factor_scores: List[FactorScore] = Field(default_factory=list)
    confidence: Confidence = Confidence.LOW
    category: str = CategoryId.GENERAL.value
    factors_considered: int = 0


class RecommendationCategory(BaseModel):
    """
    A named bucket of recommended programs.
    """
    id: str
    title: str
    description: str
    icon: str
    programs: List[Program] = Field(default_factory=list)
    match_percentage: int = 0
    reason: str = ""
