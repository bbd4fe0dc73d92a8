"""
Scoring Engine Constants

Defines factor caps, confidence thresholds, category definitions and the
static similarity tables used by the match scorer.
All values are deterministic with no AI/ML components.
"""

from enum import Enum
from typing import Dict, List

# =============================================================================
# FACTOR CAPS
# =============================================================================

# Points awarded per factor (evaluation order matters for reason ordering)
COUNTRY_MATCH_POINTS = 25
COUNTRY_SIMILAR_REGION_POINTS = 15

STUDY_LEVEL_MATCH_POINTS = 20
STUDY_LEVEL_COMPATIBLE_POINTS = 12

DEGREE_TYPE_MATCH_POINTS = 15

BUDGET_WITHIN_RANGE_POINTS = 15
BUDGET_UNDER_MIN_POINTS = 12
BUDGET_SLIGHTLY_OVER_POINTS = 8
BUDGET_OVER_POINTS = 3
BUDGET_TOLERANCE_RATIO = 1.2   # up to 20% over max counts as "slightly over"

SPECIALIZATION_MATCH_POINTS = 10
CITY_MATCH_POINTS = 8
DURATION_MATCH_POINTS = 5

SCHOLARSHIP_NEEDED_POINTS = 7
SCHOLARSHIP_AVAILABLE_POINTS = 3

LANGUAGE_MATCH_POINTS = 5

# Behavior boost (not counted as preference factors)
BEHAVIOR_VIEWED_SIMILAR_POINTS = 5
BEHAVIOR_SAVED_COUNTRY_POINTS = 3
BEHAVIOR_SAVED_SPECIALIZATION_POINTS = 2

MAX_MATCH_SCORE = 100
MIN_MATCH_SCORE = 0

# Currency symbol used in budget reasons
CURRENCY_SYMBOL = "₦"

# =============================================================================
# CONFIDENCE THRESHOLDS
# =============================================================================

class Confidence(str, Enum):
    """Qualitative reliability of a match score."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# (minimum factors considered, minimum score)
CONFIDENCE_THRESHOLDS: Dict[Confidence, tuple] = {
    Confidence.HIGH: (4, 70),
    Confidence.MEDIUM: (2, 50),
}

# =============================================================================
# CATEGORIES
# =============================================================================

class CategoryId(str, Enum):
    """Recommendation buckets, in priority order."""
    PERFECT_MATCH = "perfect-match"
    BUDGET_FRIENDLY = "budget-friendly"
    RISING_STARS = "rising-stars"
    AI_SUGGESTED = "ai-suggested"
    HIDDEN_GEMS = "hidden-gems"
    GENERAL = "general"


PERFECT_MATCH_MIN_SCORE = 90
BUDGET_FRIENDLY_MIN_SCORE = 80
RISING_STARS_MIN_SCORE = 75
AI_SUGGESTED_MIN_SCORE = 70
HIDDEN_GEMS_MIN_SCORE = 60
HIDDEN_GEMS_MAX_SCORE = 70   # exclusive

# Maximum programs displayed per category
CATEGORY_DISPLAY_CAPS: Dict[CategoryId, int] = {
    CategoryId.PERFECT_MATCH: 6,
    CategoryId.BUDGET_FRIENDLY: 4,
    CategoryId.RISING_STARS: 4,
    CategoryId.AI_SUGGESTED: 4,
    CategoryId.HIDDEN_GEMS: 3,
    CategoryId.GENERAL: 8,
}

# Presentation metadata: title, description, icon
CATEGORY_METADATA: Dict[CategoryId, Dict[str, str]] = {
    CategoryId.PERFECT_MATCH: {
        "title": "Perfect Matches",
        "description": "Programs that align perfectly with your profile and preferences",
        "icon": "Target",
    },
    CategoryId.BUDGET_FRIENDLY: {
        "title": "Budget-Friendly Options",
        "description": "High-quality programs within your budget range",
        "icon": "DollarSign",
    },
    CategoryId.RISING_STARS: {
        "title": "Rising Star Programs",
        "description": "Emerging programs with excellent career prospects and scholarships",
        "icon": "TrendingUp",
    },
    CategoryId.AI_SUGGESTED: {
        "title": "AI Insights",
        "description": "Programs our AI thinks you might have overlooked",
        "icon": "Brain",
    },
    CategoryId.HIDDEN_GEMS: {
        "title": "Hidden Gems",
        "description": "Unique programs that might surprise you",
        "icon": "Gem",
    },
    CategoryId.GENERAL: {
        "title": "Recommended Programs",
        "description": "Programs that might interest you",
        "icon": "Star",
    },
}

# =============================================================================
# SIMILARITY TABLES
# =============================================================================

SIMILARITY_TABLES_VERSION = "2025.1"

# Lookups go from the program's country to its cluster. Entries are not
# symmetric (e.g. Netherlands -> Germany but Germany's list differs).
REGION_SIMILARITY: Dict[str, List[str]] = {
    "Canada": ["USA", "UK", "Australia", "New Zealand"],
    "USA": ["Canada", "UK", "Australia", "Ireland"],
    "UK": ["Canada", "USA", "Ireland", "Netherlands"],
    "Germany": ["Netherlands", "Sweden", "Norway", "Denmark", "Austria"],
    "Australia": ["New Zealand", "Canada", "USA", "UK"],
    "France": ["Belgium", "Switzerland", "Luxembourg", "Canada"],
    "Netherlands": ["Germany", "Belgium", "Denmark", "Sweden"],
    "Sweden": ["Norway", "Denmark", "Finland", "Netherlands"],
    "Norway": ["Sweden", "Denmark", "Finland", "Iceland"],
}

# Keyed by the student's preferred level (lower-case); values are matched
# as substrings of the program's level.
STUDY_LEVEL_COMPATIBILITY: Dict[str, List[str]] = {
    "undergraduate": ["bachelor", "foundation"],
    "bachelor": ["undergraduate", "foundation"],
    "master": ["graduate", "postgraduate", "masters"],
    "graduate": ["master", "postgraduate", "masters"],
    "phd": ["doctoral", "doctorate"],
    "doctoral": ["phd", "doctorate"],
}

# =============================================================================
# ENGINE
# =============================================================================

ENGINE_VERSION = "1.0.0"

# Worker threads used for the independent behavior sub-queries
BEHAVIOR_FETCH_WORKERS = 3
