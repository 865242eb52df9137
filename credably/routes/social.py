"""Social & Developer Platform Sync Routes"""

from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.database import get_db
from credably.middleware.auth import get_current_user_id
from credably.middleware.rate_limit import limiter, SYNC_LIMIT
from credably.models.social_profile import GitHubProfile
from credably.services import sync_status
from credably.services.social.client import get_provider_http_client
from credably.services.social.profiles import get_social_profile
from credably.services.social.sync_all import (
    PLATFORM_PROVIDERS,
    get_access_tokens,
    get_sync_overview,
    sync_all_platforms,
    sync_platform,
)
from credably.utils.errors import AccountNotConnectedError
from credably.utils.logger import get_logger

router = APIRouter()
logger = get_logger()

PLATFORM_NAMES = {
    "github": "GitHub",
    "twitter": "Twitter",
    "instagram": "Instagram",
    "youtube": "YouTube",
}


def _require_platform(platform: str) -> str:
    if platform not in PLATFORM_PROVIDERS:
        raise HTTPException(status_code=400, detail=f"Unsupported platform: {platform}")
    return platform


@router.post("/{platform}/sync")
@limiter.limit(SYNC_LIMIT)
async def sync_single_platform(
    request: Request,
    platform: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    http_client: Optional[httpx.AsyncClient] = Depends(get_provider_http_client),
):
    _require_platform(platform)
    name = PLATFORM_NAMES[platform]

    try:
        await sync_platform(db, user_id, platform, client=http_client)
    except AccountNotConnectedError:
        raise HTTPException(
            status_code=400,
            detail={
                "error": f"{name} account not connected",
                "message": f"Please connect your {name} account to sync data",
                "action": f"connect_{platform}",
            },
        )
    except Exception as e:
        logger.error(f"{name} sync failed for {user_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={"error": f"Failed to sync {name} data", "details": str(e)},
        )

    return {"success": True, "message": f"{name} data synchronized successfully"}


@router.get("/{platform}/sync")
async def get_platform_sync_status(
    platform: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    _require_platform(platform)

    try:
        status = await sync_status.get_sync_status(db, user_id, platform)
        if platform == "github":
            profile = (await db.execute(
                select(GitHubProfile).where(GitHubProfile.user_id == user_id)
            )).scalar_one_or_none()
        else:
            profile = await get_social_profile(db, user_id, platform)
        tokens = await get_access_tokens(db, user_id)
    except Exception as e:
        logger.error(f"Failed to fetch {platform} sync status for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch sync status", "details": str(e)})

    return {
        "syncStatus": status.to_dict() if status else None,
        "profile": profile.to_dict() if profile else None,
        "isConnected": PLATFORM_PROVIDERS[platform] in tokens,
    }


@router.post("/sync-all")
@limiter.limit(SYNC_LIMIT)
async def sync_all(
    request: Request,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    http_client: Optional[httpx.AsyncClient] = Depends(get_provider_http_client),
):
    try:
        result = await sync_all_platforms(db, user_id, client=http_client)
    except Exception as e:
        logger.error(f"Sync-all failed for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to sync platforms", "details": str(e)})

    return {"success": True, **result}


@router.get("/sync-all")
async def sync_all_status(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        overview = await get_sync_overview(db, user_id)
    except Exception as e:
        logger.error(f"Failed to fetch sync overview for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch sync status", "details": str(e)})

    return {"success": True, **overview}
