"""Profile Routes"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.database import get_db
from credably.middleware.auth import get_current_user_id
from credably.models.user import User, Profile, CAREER_STAGES
from credably.utils.logger import get_logger

router = APIRouter()
logger = get_logger()

PROFILE_FIELDS = (
    "title", "company", "bio", "location", "years_experience",
    "career_stage", "industries", "target_role", "linkedin_url",
)


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = Field(None, max_length=255)
    title: Optional[str] = Field(None, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = Field(None, max_length=5000)
    location: Optional[str] = Field(None, max_length=255)
    years_experience: Optional[float] = Field(None, ge=0, le=70)
    career_stage: Optional[str] = None
    industries: Optional[List[str]] = None
    target_role: Optional[str] = Field(None, max_length=255)
    linkedin_url: Optional[str] = Field(None, max_length=500)

    @field_validator("career_stage")
    @classmethod
    def known_stage(cls, v):
        if v is not None and v not in CAREER_STAGES:
            raise ValueError(f"career_stage must be one of {', '.join(CAREER_STAGES)}")
        return v


async def _load_profile(db: AsyncSession, user_id: str) -> Optional[Profile]:
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


@router.get("/")
async def get_profile(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        user = await db.get(User, user_id)
        profile = await _load_profile(db, user_id)
    except Exception as e:
        logger.error(f"Failed to fetch profile for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch profile", "details": str(e)})

    return {
        "success": True,
        "user": user.to_dict() if user else None,
        "profile": profile.to_dict() if profile else None,
    }


@router.post("/")
async def update_profile(
    data: ProfileUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    changes = data.model_dump(exclude_unset=True)

    try:
        user = await db.get(User, user_id)
        if "name" in changes:
            user.name = changes.pop("name")

        profile = await _load_profile(db, user_id)
        if profile is None:
            profile = Profile(user_id=user_id)
            db.add(profile)
        for key in PROFILE_FIELDS:
            if key in changes:
                setattr(profile, key, changes[key])

        await db.commit()
        await db.refresh(profile)
    except Exception as e:
        logger.error(f"Failed to update profile for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to update profile", "details": str(e)})

    logger.info(f"Updated profile for {user_id}")
    return {
        "success": True,
        "user": user.to_dict(),
        "profile": profile.to_dict(),
    }
