"""Career Recommendation Routes"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from credably.database import get_db
from credably.middleware.auth import get_current_user_id, check_ownership
from credably.middleware.rate_limit import limiter, AI_LIMIT
from credably.models.career import CareerSuggestion, ResourceRecommendation
from credably.services.career_recommendations import (
    generate_career_recommendations,
    get_user_career_suggestions,
    update_resource_status,
    update_suggestion_status,
)
from credably.utils.errors import AIAnalysisError, AIConfigurationError, RecordValidationError
from credably.utils.logger import get_logger

router = APIRouter()
logger = get_logger()


class StatusUpdate(BaseModel):
    suggestionId: Optional[int] = None
    resourceId: Optional[int] = None
    status: str


@router.get("/recommendations")
@limiter.limit(AI_LIMIT)
async def list_recommendations(
    request: Request,
    regenerate: bool = False,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        recommendations = await get_user_career_suggestions(db, user_id, force_regenerate=regenerate)
    except Exception as e:
        if not isinstance(e, (AIAnalysisError, AIConfigurationError)):
            logger.error(f"Failed to fetch career recommendations for {user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to fetch career recommendations", "details": str(e)},
        )
    return {"success": True, "recommendations": recommendations, "count": len(recommendations)}


@router.post("/recommendations")
@limiter.limit(AI_LIMIT)
async def create_recommendations(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        recommendations = await generate_career_recommendations(db, user_id)
    except Exception as e:
        if not isinstance(e, (AIAnalysisError, AIConfigurationError)):
            logger.error(f"Failed to generate career recommendations for {user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to generate career recommendations", "details": str(e)},
        )
    return {
        "success": True,
        "recommendations": recommendations,
        "count": len(recommendations),
        "message": "Career recommendations generated successfully",
    }


@router.patch("/recommendations")
async def update_status(
    data: StatusUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    if data.suggestionId is None and data.resourceId is None:
        raise HTTPException(status_code=400, detail="Must provide either suggestionId or resourceId")

    try:
        if data.suggestionId is not None:
            suggestion = check_ownership(
                await db.get(CareerSuggestion, data.suggestionId), user_id, "Suggestion"
            )
            await update_suggestion_status(db, suggestion, data.status)
            return {"success": True, "message": "Suggestion status updated"}

        resource = check_ownership(
            await db.get(ResourceRecommendation, data.resourceId), user_id, "Resource"
        )
        await update_resource_status(db, resource, data.status)
        return {"success": True, "message": "Resource status updated"}
    except (HTTPException, RecordValidationError):
        raise
    except Exception as e:
        logger.error(f"Failed to update recommendation status for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to update status", "details": str(e)})
