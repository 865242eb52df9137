"""
Sync every connected platform for a user.

Platforms run one after another; each one records its own sync status, so a
failure on one platform never stops the others.
"""
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.models.social_profile import GitHubProfile, SocialProfile
from credably.models.user import ConnectedAccount
from credably.services import sync_status
from credably.services.credibility_scoring import calculate_credibility_score
from credably.services.social.github import sync_github_data
from credably.services.social.instagram import sync_instagram_data
from credably.services.social.twitter import sync_twitter_data
from credably.services.social.youtube import sync_youtube_data
from credably.utils.errors import AccountNotConnectedError
from credably.utils.logger import get_logger

logger = get_logger()

# platform -> sign-in provider that holds its token
PLATFORM_PROVIDERS = {
    "github": "github",
    "twitter": "twitter",
    "instagram": "facebook",
    "youtube": "google",
}

PLATFORM_SYNCS: Dict[str, Callable[..., Awaitable[Dict[str, Any]]]] = {
    "github": sync_github_data,
    "twitter": sync_twitter_data,
    "instagram": sync_instagram_data,
    "youtube": sync_youtube_data,
}


async def get_access_tokens(db: AsyncSession, user_id: str) -> Dict[str, str]:
    """Map provider -> access token for the user's connected accounts."""
    result = await db.execute(
        select(ConnectedAccount.provider, ConnectedAccount.access_token).where(
            ConnectedAccount.user_id == user_id,
            ConnectedAccount.provider.in_(PLATFORM_PROVIDERS.values()),
        )
    )
    return {provider: token for provider, token in result.all() if token}


async def get_access_token(db: AsyncSession, user_id: str, platform: str) -> str:
    provider = PLATFORM_PROVIDERS[platform]
    token = (await get_access_tokens(db, user_id)).get(provider)
    if not token:
        raise AccountNotConnectedError(platform)
    return token


async def sync_platform(
    db: AsyncSession,
    user_id: str,
    platform: str,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    token = await get_access_token(db, user_id, platform)
    return await PLATFORM_SYNCS[platform](db, user_id, token, client=client)


def summarize(results: Dict[str, Dict[str, Any]]) -> Dict[str, int]:
    statuses = [r["status"] for r in results.values()]
    return {
        "total": len(PLATFORM_PROVIDERS),
        "synced": statuses.count("success"),
        "failed": statuses.count("error"),
        "skipped": statuses.count("skipped"),
    }


async def sync_all_platforms(
    db: AsyncSession,
    user_id: str,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    # Tokens are read up front as plain strings: a failed sync rolls the
    # session back and expires every loaded row.
    tokens = await get_access_tokens(db, user_id)

    results: Dict[str, Dict[str, Any]] = {}
    for platform, provider in PLATFORM_PROVIDERS.items():
        token = tokens.get(provider)
        if not token:
            results[platform] = {"status": "skipped", "reason": "Not connected"}
            continue
        try:
            data = await PLATFORM_SYNCS[platform](db, user_id, token, client=client)
            results[platform] = {"status": "success", "data": data}
        except Exception as e:
            results[platform] = {"status": "error", "error": str(e)}

    summary = summarize(results)

    if summary["synced"] > 0:
        try:
            await calculate_credibility_score(db, user_id)
        except Exception as e:
            logger.error(f"Credibility recalculation after sync failed for {user_id}: {e}", exc_info=True)
            await db.rollback()

    logger.info(
        f"Sync-all for {user_id}: {summary['synced']} synced, "
        f"{summary['failed']} failed, {summary['skipped']} skipped"
    )

    return {
        "results": results,
        "summary": summary,
        "message": f"Synced {summary['synced']} platform(s) successfully, {summary['failed']} failed",
    }


async def get_sync_overview(db: AsyncSession, user_id: str) -> Dict[str, Any]:
    tokens = await get_access_tokens(db, user_id)

    github = (await db.execute(
        select(GitHubProfile).where(GitHubProfile.user_id == user_id)
    )).scalar_one_or_none()
    socials = (await db.execute(
        select(SocialProfile).where(SocialProfile.user_id == user_id)
    )).scalars().all()
    profiles = {p.platform: p.to_dict() for p in socials}
    if github is not None:
        profiles["github"] = github.to_dict()

    platforms = {}
    for platform, provider in PLATFORM_PROVIDERS.items():
        status = await sync_status.get_sync_status(db, user_id, platform)
        platforms[platform] = {
            "connected": provider in tokens,
            "synced": platform in profiles,
            "profile": profiles.get(platform),
            "syncStatus": status.to_dict() if status else None,
        }

    return {
        "platforms": platforms,
        "summary": {
            "total": len(PLATFORM_PROVIDERS),
            "connected": sum(1 for p in platforms.values() if p["connected"]),
            "synced": sum(1 for p in platforms.values() if p["synced"]),
        },
    }
