"""Public (unauthenticated) credibility view behind a share token"""

import secrets
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.database import get_db
from credably.models.credibility_score import CredibilityScore
from credably.models.user import User, Profile
from credably.utils.logger import get_logger

router = APIRouter()
logger = get_logger()


@router.get("/credibility/{user_id}")
async def public_credibility(
    user_id: str,
    token: str,
    db: AsyncSession = Depends(get_db),
):
    try:
        row = (await db.execute(
            select(CredibilityScore).where(CredibilityScore.user_id == user_id)
        )).scalar_one_or_none()

        # Unknown user, wrong token and expired link all look the same
        if (
            row is None
            or not row.share_token
            or not secrets.compare_digest(row.share_token, token)
            or row.share_expires_at is None
            or row.share_expires_at < datetime.utcnow()
        ):
            raise HTTPException(status_code=404, detail="Share link not found or expired")

        user = await db.get(User, user_id)
        profile = (await db.execute(
            select(Profile).where(Profile.user_id == user_id)
        )).scalar_one_or_none()
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to load shared credibility for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch credibility data", "details": str(e)})

    return {
        "success": True,
        "user": {
            "name": user.name if user else None,
            "image": user.image if user else None,
            "title": profile.title if profile else None,
            "location": profile.location if profile else None,
        },
        "credibility": row.to_dict(),
        "expiresAt": row.share_expires_at.isoformat(),
    }
