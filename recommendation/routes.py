"""
Recommendation API Routes

Exposes the recommendation engine via REST API.
"""

import logging
from typing import Optional, List, Dict, Any
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from db import SessionLocal
from .logic.adapter import SqlProgramCatalog, SqlUserDataStore
from .logic.contracts import UserPreferences, RecommendationCategory, ProgramMatch, InteractionAction
from .logic.engine import RecommendationEngine, CatalogUnavailableError
from .logic.constants import ENGINE_VERSION

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


def get_recommendation_engine() -> RecommendationEngine:
    """Engine wired to the SQL catalog and user store."""
    return RecommendationEngine(
        catalog=SqlProgramCatalog(SessionLocal),
        user_store=SqlUserDataStore(SessionLocal),
    )


# =============================================================================
# REQUEST/RESPONSE SCHEMAS
# =============================================================================

class RecommendationRequest(BaseModel):
    """Request body for recommendations endpoints."""
    preferences: Dict[str, Any] = Field(
        default_factory=dict,
        description="Student preferences",
        examples=[{
            "countries": ["Canada", "Germany"],
            "degree_type": ["Master"],
            "budget_range": [5000000, 10000000],
            "specialization": ["Computer Science"],
            "scholarship_needed": True,
        }],
    )
    user_id: Optional[str] = Field(
        default=None,
        description="User whose viewed/saved programs boost the scores"
    )


class InteractionRequest(BaseModel):
    """Request body for interaction tracking."""
    user_id: str
    action: InteractionAction
    program_id: Optional[str] = None
    search_query: Optional[str] = None


# =============================================================================
# ENDPOINTS
# =============================================================================

def _parse_preferences(data: Dict[str, Any]) -> UserPreferences:
    try:
        return UserPreferences(**data)
    except ValidationError as e:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid preferences: {str(e)}"
        )


def _categories_response(categories: List[RecommendationCategory]) -> Dict[str, Any]:
    return {
        "categories": [_serialize_category(c) for c in categories],
        "count": len(categories),
        "engine_version": ENGINE_VERSION,
    }


def _catalog_error(e: CatalogUnavailableError) -> JSONResponse:
    logger.error(f"Recommendation request failed: {e}")
    return JSONResponse(status_code=500, content={"error": str(e)})


@router.post("", summary="Get program recommendations")
@router.post("/", summary="Get program recommendations", include_in_schema=False)
def get_recommendations(
    request: RecommendationRequest,
    engine: RecommendationEngine = Depends(get_recommendation_engine)
):
    """
    Generate categorized program recommendations.

    **Request Body:**
    - `preferences`: Student's preferences (all fields optional)
    - `user_id`: Optional user for behavior-based boosts

    **Response:**
    - Ordered categories (Perfect Matches, Budget-Friendly, ...)
    """
    preferences = _parse_preferences(request.preferences)
    try:
        categories = engine.get_recommendations(preferences, request.user_id)
    except CatalogUnavailableError as e:
        return _catalog_error(e)
    return _categories_response(categories)


@router.post("/refresh", summary="Recompute program recommendations")
def refresh_recommendations(
    request: RecommendationRequest,
    engine: RecommendationEngine = Depends(get_recommendation_engine)
):
    preferences = _parse_preferences(request.preferences)
    try:
        categories = engine.refresh(preferences, request.user_id)
    except CatalogUnavailableError as e:
        return _catalog_error(e)
    return _categories_response(categories)


@router.get("/users/{user_id}", summary="Recommendations from stored preferences")
def get_user_recommendations(
    user_id: str,
    engine: RecommendationEngine = Depends(get_recommendation_engine)
):
    try:
        categories = engine.get_user_recommendations(user_id)
    except CatalogUnavailableError as e:
        return _catalog_error(e)
    return _categories_response(categories)


@router.get("/programs/{program_id}/match", summary="Match details for one program")
def get_program_match(
    program_id: str,
    user_id: str,
    engine: RecommendationEngine = Depends(get_recommendation_engine)
):
    match = engine.get_program_match_details(program_id, user_id)
    if match is None:
        raise HTTPException(status_code=404, detail="Program or preferences not found")
    return _serialize_match(match)


@router.post("/interactions", summary="Track a user interaction")
def track_interaction(
    request: InteractionRequest,
    engine: RecommendationEngine = Depends(get_recommendation_engine)
):
    recorded = engine.track_user_behavior(
        request.user_id,
        request.action,
        program_id=request.program_id,
        search_query=request.search_query,
    )
    return {"recorded": recorded}


def _serialize_category(category: RecommendationCategory) -> Dict[str, Any]:
    """Convert RecommendationCategory to JSON-serializable dict."""
    return {
        "id": category.id,
        "title": category.title,
        "description": category.description,
        "icon": category.icon,
        "match_percentage": category.match_percentage,
        "reason": category.reason,
        "programs": [p.model_dump(mode="json") for p in category.programs],
    }


def _serialize_match(match: ProgramMatch) -> Dict[str, Any]:
    """Convert ProgramMatch to JSON-serializable dict."""
    return {
        "program": match.program.model_dump(mode="json"),
        "match_score": match.match_score,
        "confidence": match.confidence.value,
        "category": match.category,
        "reasons": match.reasons,
        "factor_scores": {
            f.factor: {"points": f.points, "considered": f.considered}
            for f in match.factor_scores
        },
    }


# =============================================================================
# HEALTH CHECK
# =============================================================================

@router.get("/health", summary="Recommendation engine health check")
def health_check():
    """Check if recommendation engine is operational."""
    return {"status": "ok", "engine": "recommendation", "version": ENGINE_VERSION}
