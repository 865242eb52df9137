"""
Instagram Integration Service (Graph API via the Facebook login)

Influence score (0-100):
    followers (35) + engagement (25) + follower ratio (15)
    + posting consistency (10) + account type (10) + posting frequency (5)
"""
import math
import statistics
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from credably.config import get_settings
from credably.services import sync_status
from credably.services.social.client import provider_client, get_json
from credably.services.social.profiles import save_social_profile
from credably.utils.errors import ProviderAPIError
from credably.utils.logger import get_logger

logger = get_logger()

PLATFORM = "instagram"
IDEAL_POSTS_PER_WEEK = 5
ACCOUNT_TYPE_POINTS = {"CREATOR": 8, "BUSINESS": 10}


async def fetch_profile(client: httpx.AsyncClient, access_token: str) -> Dict[str, Any]:
    base = get_settings().instagram_api_url
    return await get_json(
        client,
        PLATFORM,
        f"{base}/me",
        "fetch_profile",
        params={
            "fields": "id,username,account_type,media_count,followers_count,follows_count",
            "access_token": access_token,
        },
    )


async def fetch_insights(client: httpx.AsyncClient, access_token: str, ig_user_id: str) -> Dict[str, Any]:
    """Account insights; personal accounts have none, so any API error yields {}."""
    base = get_settings().instagram_api_url
    try:
        data = await get_json(
            client,
            PLATFORM,
            f"{base}/{ig_user_id}/insights",
            "fetch_insights",
            params={
                "metric": "follower_count,impressions,reach,profile_views",
                "period": "day",
                "access_token": access_token,
            },
        )
    except ProviderAPIError as e:
        logger.info(f"[Instagram] Insights unavailable: {e}")
        return {}

    insights = {}
    for metric in data.get("data") or []:
        values = metric.get("values") or []
        if values and values[0].get("value") is not None:
            insights[metric["name"]] = values[0]["value"]
    return insights


async def fetch_media(client: httpx.AsyncClient, access_token: str, ig_user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
    base = get_settings().instagram_api_url
    data = await get_json(
        client,
        PLATFORM,
        f"{base}/{ig_user_id}/media",
        "fetch_media",
        params={
            "fields": "id,caption,media_type,permalink,timestamp,like_count,comments_count",
            "limit": limit,
            "access_token": access_token,
        },
    )
    return data.get("data") or []


def _timestamp(value: str) -> float:
    # Graph API timestamps look like 2024-05-01T12:00:00+0000
    if value.endswith("+0000"):
        value = value[:-5] + "+00:00"
    return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()


def posting_consistency(timestamps: List[float]) -> int:
    if len(timestamps) < 2:
        return 0
    ordered = sorted(timestamps, reverse=True)
    gaps = [a - b for a, b in zip(ordered, ordered[1:])]
    mean_gap = sum(gaps) / len(gaps)
    if mean_gap <= 0:
        return 0
    cv = statistics.pstdev(gaps) / mean_gap
    return min(100, round(max(0, 100 - cv * 50)))


def analyze_media(media: List[Dict[str, Any]]) -> Dict[str, Any]:
    if not media:
        return {
            "totalPosts": 0,
            "avgLikes": 0,
            "avgComments": 0,
            "avgEngagement": 0,
            "postTypes": {"images": 0, "videos": 0, "carousels": 0},
            "postingFrequency": 0,
            "consistencyScore": 0,
        }

    avg_likes = sum(p.get("like_count", 0) for p in media) / len(media)
    avg_comments = sum(p.get("comments_count", 0) for p in media) / len(media)

    post_types = {"images": 0, "videos": 0, "carousels": 0}
    type_keys = {"IMAGE": "images", "VIDEO": "videos", "CAROUSEL_ALBUM": "carousels"}
    for post in media:
        key = type_keys.get(post.get("media_type"))
        if key:
            post_types[key] += 1

    timestamps = [_timestamp(p["timestamp"]) for p in media if p.get("timestamp")]
    span_days = (max(timestamps) - min(timestamps)) / 86400 if len(timestamps) > 1 else 7
    frequency = len(media) / span_days * 7 if span_days > 0 else 0

    return {
        "totalPosts": len(media),
        "avgLikes": round(avg_likes),
        "avgComments": round(avg_comments),
        "avgEngagement": round(avg_likes + avg_comments),
        "postTypes": post_types,
        "postingFrequency": round(frequency, 1),
        "consistencyScore": posting_consistency(timestamps),
    }


def calculate_engagement_rate(media_analysis: Dict[str, Any], followers: int) -> float:
    if not followers or not media_analysis["avgEngagement"]:
        return 0.0
    return round(min(100.0, media_analysis["avgEngagement"] / followers * 100), 2)


def calculate_influence_score(
    account_type: Optional[str],
    followers: int,
    follows: int,
    media_analysis: Dict[str, Any],
    engagement_rate: float,
) -> int:
    follower_score = min(35, math.log10(followers + 1) * 7)
    engagement_score = min(25, engagement_rate * 5)
    ratio = followers / follows if follows > 0 else followers
    ratio_score = min(15, math.log10(ratio + 1) * 10)
    consistency_score = media_analysis["consistencyScore"] / 100 * 10
    account_score = ACCOUNT_TYPE_POINTS.get(account_type or "", 0)
    frequency_score = max(0, 5 - abs(media_analysis["postingFrequency"] - IDEAL_POSTS_PER_WEEK))

    total = follower_score + engagement_score + ratio_score + consistency_score + account_score + frequency_score
    return min(100, round(total))


async def get_instagram_analytics(access_token: str, client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
    async with provider_client(client) as http:
        profile = await fetch_profile(http, access_token)
        insights = await fetch_insights(http, access_token, profile["id"])
        media = await fetch_media(http, access_token, profile["id"])

    analysis = analyze_media(media)
    followers = profile.get("followers_count") or insights.get("follower_count") or 0
    follows = profile.get("follows_count") or 0
    engagement = calculate_engagement_rate(analysis, followers)
    account_type = profile.get("account_type")

    return {
        "username": profile["username"],
        "profileUrl": f"https://instagram.com/{profile['username']}",
        "accountType": account_type,
        "verified": account_type in ACCOUNT_TYPE_POINTS,
        "followers": followers,
        "follows": follows,
        "mediaCount": profile.get("media_count", len(media)),
        "insights": insights,
        "mediaAnalysis": analysis,
        "engagementRate": engagement,
        "influenceScore": calculate_influence_score(account_type, followers, follows, analysis, engagement),
    }


async def sync_instagram_data(
    db: AsyncSession,
    user_id: str,
    access_token: str,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    async def work():
        analytics = await get_instagram_analytics(access_token, client)
        await save_social_profile(
            db,
            user_id,
            PLATFORM,
            username=analytics["username"],
            profile_url=analytics["profileUrl"],
            follower_count=analytics["followers"],
            following_count=analytics["follows"],
            post_count=analytics["mediaCount"],
            engagement_rate=analytics["engagementRate"],
            influence_score=analytics["influenceScore"],
            verified=analytics["verified"],
            metrics={
                "accountType": analytics["accountType"],
                "insights": analytics["insights"],
                "mediaAnalysis": analytics["mediaAnalysis"],
            },
        )
        return analytics

    return await sync_status.run_sync(db, user_id, PLATFORM, work)
