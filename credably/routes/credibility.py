"""Credibility Score Routes"""

import secrets
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.config import get_settings
from credably.database import get_db
from credably.middleware.auth import get_current_user_id
from credably.models.credibility_score import CredibilityScore
from credably.models.user import User, Profile
from credably.services.credibility_scoring import (
    calculate_credibility_score,
    data_completeness,
    gather_scoring_input,
    get_user_credibility_score,
)
from credably.utils.logger import get_logger

router = APIRouter()
logger = get_logger()

SHARE_TOKEN_BYTES = 12  # 16 url-safe characters
SHARE_LINK_DAYS = 30


@router.get("/")
async def get_credibility(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Stored score (calculated on first request) with breakdown, badges and completeness"""
    try:
        score = await get_user_credibility_score(db, user_id)
        completeness = data_completeness(await gather_scoring_input(db, user_id))
    except Exception as e:
        logger.error(f"Failed to fetch credibility data for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch credibility data", "details": str(e)})

    return {
        "success": True,
        **score,
        "completeness": completeness["percentage"],
        "missingData": completeness["missing"],
    }


async def _calculate(user_id: str, db: AsyncSession, force: bool):
    try:
        score = await get_user_credibility_score(db, user_id, force_recalculate=force)
    except Exception as e:
        logger.error(f"Credibility calculation failed for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to calculate credibility score", "details": str(e)})
    return {"success": True, "data": score}


@router.get("/calculate")
async def get_calculated_score(
    force: bool = False,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await _calculate(user_id, db, force)


@router.post("/calculate")
async def calculate_score(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    return await _calculate(user_id, db, True)


@router.post("/refresh")
async def refresh_score(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        score = await calculate_credibility_score(db, user_id)
    except Exception as e:
        logger.error(f"Credibility refresh failed for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to refresh credibility score", "details": str(e)})

    return {
        "success": True,
        "message": "Credibility score recalculated",
        "data": score,
    }


@router.get("/export")
async def export_score(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        score = await get_user_credibility_score(db, user_id)
        user = await db.get(User, user_id)
        profile = (await db.execute(
            select(Profile).where(Profile.user_id == user_id)
        )).scalar_one_or_none()
    except Exception as e:
        logger.error(f"Credibility export failed for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to export credibility report", "details": str(e)})

    now = datetime.utcnow()
    export = {
        "user": {"name": user.name if user else None, "email": user.email if user else None},
        "profile": {
            "title": profile.title if profile else None,
            "bio": profile.bio if profile else None,
            "location": profile.location if profile else None,
        },
        "credibility": score,
        "exportedAt": now.isoformat(),
    }
    filename = f"credibility-report-{int(now.timestamp() * 1000)}.json"
    return JSONResponse(
        content=export,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/share")
async def create_share_link(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        row = (await db.execute(
            select(CredibilityScore).where(CredibilityScore.user_id == user_id)
        )).scalar_one_or_none()
        if row is None:
            raise HTTPException(
                status_code=404,
                detail="No credibility score found. Please refresh your score first.",
            )

        row.share_token = secrets.token_urlsafe(SHARE_TOKEN_BYTES)
        row.share_expires_at = datetime.utcnow() + timedelta(days=SHARE_LINK_DAYS)
        await db.commit()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create share link for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to generate share link", "details": str(e)})

    base_url = get_settings().public_base_url.rstrip("/")
    return {
        "success": True,
        "shareUrl": f"{base_url}/public/credibility/{user_id}?token={row.share_token}",
        "expiresAt": row.share_expires_at.isoformat(),
        "message": "Share link generated successfully",
    }
