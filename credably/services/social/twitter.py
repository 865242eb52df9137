"""
Twitter/X Integration Service

Pulls the authenticated user's profile, public metrics and recent tweets from
the v2 API and derives an engagement rate and an influence score (0-100):

    followers (35) + engagement (25) + follower ratio (15)
    + verification (15) + account age (5) + listed count (5)

Content quality is an optional AI-assessed score; it stays 0 when OpenAI is
not configured or the assessment fails.
"""
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from credably.config import get_settings
from credably.schemas.analysis import ContentQualityResult
from credably.services import openai_client, sync_status
from credably.services.social.client import provider_client, get_json, bearer
from credably.services.social.profiles import save_social_profile
from credably.utils.logger import get_logger

logger = get_logger()

PLATFORM = "twitter"

VERIFICATION_POINTS = {"blue": 10, "business": 12, "government": 15}
LEGACY_VERIFIED_POINTS = 10


async def fetch_profile(client: httpx.AsyncClient, access_token: str) -> Dict[str, Any]:
    base = get_settings().twitter_api_url
    data = await get_json(
        client,
        PLATFORM,
        f"{base}/users/me",
        "fetch_profile",
        params={"user.fields": "id,name,username,profile_image_url,verified,verified_type,description,location,url,created_at"},
        headers=bearer(access_token),
    )
    return data["data"]


async def fetch_metrics(client: httpx.AsyncClient, access_token: str, twitter_id: str) -> Dict[str, Any]:
    base = get_settings().twitter_api_url
    data = await get_json(
        client,
        PLATFORM,
        f"{base}/users/{twitter_id}",
        "fetch_metrics",
        params={"user.fields": "public_metrics,verified_type"},
        headers=bearer(access_token),
    )
    user = data["data"]
    return {**user.get("public_metrics", {}), "verified_type": user.get("verified_type", "none")}


async def fetch_recent_tweets(
    client: httpx.AsyncClient,
    access_token: str,
    twitter_id: str,
    limit: int = 100,
) -> List[Dict[str, Any]]:
    base = get_settings().twitter_api_url
    data = await get_json(
        client,
        PLATFORM,
        f"{base}/users/{twitter_id}/tweets",
        "fetch_tweets",
        params={"max_results": limit, "tweet.fields": "public_metrics,created_at"},
        headers=bearer(access_token),
    )
    return data.get("data") or []


def calculate_engagement_rate(tweets: List[Dict[str, Any]], followers: int) -> float:
    if not tweets or not followers:
        return 0.0
    total = 0
    for tweet in tweets:
        m = tweet.get("public_metrics") or {}
        total += m.get("like_count", 0) + m.get("retweet_count", 0) + m.get("reply_count", 0) + m.get("quote_count", 0)
    rate = (total / len(tweets)) / followers * 100
    return round(min(100.0, rate), 2)


def calculate_influence_score(
    metrics: Dict[str, Any],
    engagement_rate: float,
    verified: bool,
    created_at: Optional[datetime],
    now: Optional[datetime] = None,
) -> int:
    now = now or datetime.utcnow()
    followers = metrics.get("followers_count", 0)
    following = metrics.get("following_count", 0)

    follower_score = min(35, math.log10(followers + 1) * 7)
    engagement_score = min(25, engagement_rate * 2.5)
    ratio = followers / following if following > 0 else followers
    ratio_score = min(15, math.log10(ratio + 1) * 10)

    verification_score = VERIFICATION_POINTS.get(metrics.get("verified_type") or "none", 0)
    if not verification_score and verified:
        verification_score = LEGACY_VERIFIED_POINTS

    age_score = 0.0
    if created_at:
        age_score = min(5, (now - created_at).days / 365)

    listed_score = min(5, math.log10(metrics.get("listed_count", 0) + 1) * 2)

    total = follower_score + engagement_score + ratio_score + verification_score + age_score + listed_score
    return min(100, round(total))


async def analyze_content_quality(tweets: List[Dict[str, Any]]) -> int:
    if not tweets or not get_settings().openai_api_key:
        return 0

    sample = "\n\n".join(t.get("text", "") for t in tweets[:10])
    try:
        result = await openai_client.complete_model(
            "twitter_content_quality",
            ContentQualityResult,
            "You are a content quality analyst. Rate social media content on clarity, "
            "professionalism, value and engagement potential. Respond with JSON: {\"score\": <0-100>}.",
            f"Analyze the quality of these tweets and provide a score (0-100):\n\n{sample}",
            error_message="Failed to analyze tweet content",
            temperature=0.3,
            max_tokens=50,
        )
    except Exception as e:
        logger.warning(f"[Twitter] Content quality analysis skipped: {e}")
        return 0
    return result.score


def _parse_created_at(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00")).replace(tzinfo=None)


async def get_twitter_analytics(access_token: str, client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
    async with provider_client(client) as http:
        profile = await fetch_profile(http, access_token)
        metrics = await fetch_metrics(http, access_token, profile["id"])
        tweets = await fetch_recent_tweets(http, access_token, profile["id"])

    verified_type = metrics.get("verified_type") or "none"
    verified = bool(profile.get("verified")) or verified_type != "none"
    engagement = calculate_engagement_rate(tweets, metrics.get("followers_count", 0))

    return {
        "username": profile["username"],
        "name": profile.get("name"),
        "profileUrl": f"https://twitter.com/{profile['username']}",
        "verified": verified,
        "metrics": metrics,
        "engagementRate": engagement,
        "influenceScore": calculate_influence_score(
            metrics, engagement, verified, _parse_created_at(profile.get("created_at"))
        ),
        "contentScore": await analyze_content_quality(tweets),
        "tweetsAnalyzed": len(tweets),
    }


async def sync_twitter_data(
    db: AsyncSession,
    user_id: str,
    access_token: str,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    async def work():
        analytics = await get_twitter_analytics(access_token, client)
        metrics = analytics["metrics"]
        await save_social_profile(
            db,
            user_id,
            PLATFORM,
            username=analytics["username"],
            profile_url=analytics["profileUrl"],
            follower_count=metrics.get("followers_count", 0),
            following_count=metrics.get("following_count", 0),
            post_count=metrics.get("tweet_count", 0),
            engagement_rate=analytics["engagementRate"],
            influence_score=analytics["influenceScore"],
            content_quality_score=analytics["contentScore"],
            verified=analytics["verified"],
            metrics={
                "listedCount": metrics.get("listed_count", 0),
                "verifiedType": metrics.get("verified_type"),
                "tweetsAnalyzed": analytics["tweetsAnalyzed"],
            },
        )
        return analytics

    return await sync_status.run_sync(db, user_id, PLATFORM, work)
