from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.models.social_profile import SocialProfile


async def save_social_profile(db: AsyncSession, user_id: str, platform: str, **fields) -> SocialProfile:
    """Replace the stored (user, platform) profile with freshly synced values."""
    profile = (await db.execute(
        select(SocialProfile).where(
            SocialProfile.user_id == user_id,
            SocialProfile.platform == platform,
        )
    )).scalar_one_or_none()
    if profile is None:
        profile = SocialProfile(user_id=user_id, platform=platform)
        db.add(profile)

    for key, value in fields.items():
        setattr(profile, key, value)
    profile.last_synced_at = datetime.utcnow()
    await db.commit()
    return profile


async def get_social_profile(db: AsyncSession, user_id: str, platform: str):
    result = await db.execute(
        select(SocialProfile).where(
            SocialProfile.user_id == user_id,
            SocialProfile.platform == platform,
        )
    )
    return result.scalar_one_or_none()
