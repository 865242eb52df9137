"""
YouTube Integration Service (Data API v3 via the Google login)

Influence score (0-100):
    subscribers (30) + total views (20) + engagement (20)
    + upload consistency (15) + video count (10) + views per subscriber (5)
"""
import math
import statistics
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from credably.config import get_settings
from credably.services import sync_status
from credably.services.social.client import provider_client, get_json, bearer
from credably.services.social.profiles import save_social_profile
from credably.utils.errors import ProviderAPIError
from credably.utils.logger import get_logger

logger = get_logger()

PLATFORM = "youtube"
DAYS_PER_MONTH = 30


def _int(value: Any) -> int:
    # the API returns counts as strings
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


async def fetch_channel(client: httpx.AsyncClient, access_token: str) -> Dict[str, Any]:
    base = get_settings().youtube_api_url
    data = await get_json(
        client,
        PLATFORM,
        f"{base}/channels",
        "fetch_channel",
        params={"part": "snippet,contentDetails,statistics", "mine": "true"},
        headers=bearer(access_token),
    )
    items = data.get("items") or []
    if not items:
        raise ProviderAPIError(PLATFORM, 404, "No YouTube channel found for this account")

    channel = items[0]
    snippet = channel.get("snippet") or {}
    stats = channel.get("statistics") or {}
    thumbnails = snippet.get("thumbnails") or {}
    thumbnail = (thumbnails.get("high") or thumbnails.get("default") or {}).get("url")

    return {
        "id": channel["id"],
        "title": snippet.get("title"),
        "description": snippet.get("description"),
        "customUrl": snippet.get("customUrl"),
        "thumbnailUrl": thumbnail,
        "country": snippet.get("country"),
        "publishedAt": snippet.get("publishedAt"),
        "subscriberCount": _int(stats.get("subscriberCount")),
        "viewCount": _int(stats.get("viewCount")),
        "videoCount": _int(stats.get("videoCount")),
        "hiddenSubscriberCount": bool(stats.get("hiddenSubscriberCount", False)),
    }


async def fetch_videos(
    client: httpx.AsyncClient,
    access_token: str,
    channel_id: str,
    limit: int = 50,
) -> List[Dict[str, Any]]:
    base = get_settings().youtube_api_url
    search = await get_json(
        client,
        PLATFORM,
        f"{base}/search",
        "search_videos",
        params={
            "part": "snippet",
            "channelId": channel_id,
            "order": "date",
            "type": "video",
            "maxResults": limit,
        },
        headers=bearer(access_token),
    )
    video_ids = [item["id"]["videoId"] for item in search.get("items") or [] if item.get("id", {}).get("videoId")]
    if not video_ids:
        return []

    try:
        details = await get_json(
            client,
            PLATFORM,
            f"{base}/videos",
            "fetch_video_stats",
            params={"part": "statistics,snippet", "id": ",".join(video_ids)},
            headers=bearer(access_token),
        )
    except ProviderAPIError as e:
        logger.warning(f"[YouTube] Video statistics unavailable: {e}")
        return []
    return details.get("items") or []


def _published(video: Dict[str, Any]) -> float:
    value = video["snippet"]["publishedAt"]
    return datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp()


def upload_consistency(timestamps: List[float]) -> int:
    if len(timestamps) < 3:
        return 0
    ordered = sorted(timestamps, reverse=True)
    gaps = [a - b for a, b in zip(ordered, ordered[1:])]
    mean_gap = sum(gaps) / len(gaps)
    cv = statistics.pstdev(gaps) / mean_gap if mean_gap > 0 else 1
    return min(100, round(max(0, 100 - cv * 50)))


def analyze_videos(videos: List[Dict[str, Any]]) -> Dict[str, Any]:
    if not videos:
        return {
            "totalVideos": 0,
            "avgViews": 0,
            "avgLikes": 0,
            "avgComments": 0,
            "avgEngagement": 0,
            "engagementRate": 0.0,
            "uploadFrequency": 0,
            "consistencyScore": 0,
            "recentVideos": [],
        }

    count = len(videos)
    views = [_int(v.get("statistics", {}).get("viewCount")) for v in videos]
    likes = [_int(v.get("statistics", {}).get("likeCount")) for v in videos]
    comments = [_int(v.get("statistics", {}).get("commentCount")) for v in videos]

    avg_likes = round(sum(likes) / count)
    avg_comments = round(sum(comments) / count)

    per_video = [(l + c) / v * 100 for v, l, c in zip(views, likes, comments) if v > 0]
    engagement_rate = round(min(100.0, sum(per_video) / len(per_video)), 2) if per_video else 0.0

    timestamps = [_published(v) for v in videos if v.get("snippet", {}).get("publishedAt")]
    if len(timestamps) > 1:
        span_months = (max(timestamps) - min(timestamps)) / (86400 * DAYS_PER_MONTH)
    else:
        span_months = 1
    frequency = count / span_months if span_months > 0 else count

    recent = [
        {
            "id": v.get("id"),
            "title": v.get("snippet", {}).get("title"),
            "views": _int(v.get("statistics", {}).get("viewCount")),
            "likes": _int(v.get("statistics", {}).get("likeCount")),
            "comments": _int(v.get("statistics", {}).get("commentCount")),
            "publishedAt": v.get("snippet", {}).get("publishedAt"),
        }
        for v in videos[:10]
    ]

    return {
        "totalVideos": count,
        "avgViews": round(sum(views) / count),
        "avgLikes": avg_likes,
        "avgComments": avg_comments,
        "avgEngagement": avg_likes + avg_comments,
        "engagementRate": engagement_rate,
        "uploadFrequency": round(frequency, 1),
        "consistencyScore": upload_consistency(timestamps),
        "recentVideos": recent,
    }


def calculate_influence_score(channel: Dict[str, Any], video_analysis: Dict[str, Any]) -> int:
    subscribers = channel["subscriberCount"]
    views = channel["viewCount"]

    subscriber_score = min(30, math.log10(subscribers + 1) * 6)
    view_score = min(20, math.log10(views + 1) * 2)
    engagement_score = min(20, video_analysis["engagementRate"] * 4)
    consistency_score = video_analysis["consistencyScore"] / 100 * 15
    video_count_score = min(10, math.log10(channel["videoCount"] + 1) * 3)
    views_per_sub = views / subscribers if subscribers > 0 else 0
    quality_score = min(5, math.log10(views_per_sub + 1) * 2)

    total = subscriber_score + view_score + engagement_score + consistency_score + video_count_score + quality_score
    return min(100, round(total))


def channel_url(channel: Dict[str, Any]) -> str:
    custom = channel.get("customUrl")
    if custom:
        return f"https://youtube.com/{custom if custom.startswith('@') else '@' + custom}"
    return f"https://youtube.com/channel/{channel['id']}"


async def get_youtube_analytics(access_token: str, client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
    async with provider_client(client) as http:
        channel = await fetch_channel(http, access_token)
        videos = await fetch_videos(http, access_token, channel["id"])

    analysis = analyze_videos(videos)
    return {
        "channel": channel,
        "username": channel.get("customUrl") or channel.get("title") or channel["id"],
        "profileUrl": channel_url(channel),
        "videoAnalysis": analysis,
        "engagementRate": analysis["engagementRate"],
        "influenceScore": calculate_influence_score(channel, analysis),
    }


async def sync_youtube_data(
    db: AsyncSession,
    user_id: str,
    access_token: str,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    async def work():
        analytics = await get_youtube_analytics(access_token, client)
        channel = analytics["channel"]
        analysis = analytics["videoAnalysis"]
        await save_social_profile(
            db,
            user_id,
            PLATFORM,
            username=analytics["username"],
            profile_url=analytics["profileUrl"],
            follower_count=channel["subscriberCount"],
            following_count=0,
            post_count=channel["videoCount"],
            engagement_rate=analytics["engagementRate"],
            influence_score=analytics["influenceScore"],
            verified=False,
            metrics={
                "channelId": channel["id"],
                "title": channel["title"],
                "viewCount": channel["viewCount"],
                "hiddenSubscriberCount": channel["hiddenSubscriberCount"],
                "avgViews": analysis["avgViews"],
                "uploadFrequency": analysis["uploadFrequency"],
                "consistencyScore": analysis["consistencyScore"],
                "recentVideos": analysis["recentVideos"],
            },
        )
        return analytics

    return await sync_status.run_sync(db, user_id, PLATFORM, work)
