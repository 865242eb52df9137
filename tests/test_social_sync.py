from datetime import datetime

import httpx
import pytest
from sqlalchemy import select

from conftest import auth_headers
from credably.models.credibility_score import CredibilityScore
from credably.models.data_source_sync import DataSourceSync
from credably.models.social_profile import GitHubProfile, SocialProfile
from credably.services import sync_status

TODAY = datetime.utcnow().strftime("%Y-%m-%dT%H:%M:%SZ")


def github_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    assert request.headers["Authorization"] == "Bearer gh-token"
    if path == "/user":
        return httpx.Response(200, json={"login": "octo", "html_url": "https://github.com/octo", "followers": 5})
    if path == "/user/repos":
        return httpx.Response(200, json=[{
            "name": "repo1",
            "full_name": "octo/repo1",
            "description": "demo",
            "language": "Python",
            "stargazers_count": 3,
            "forks_count": 1,
            "fork": False,
            "html_url": "https://github.com/octo/repo1",
        }])
    if path == "/users/octo/events/public":
        return httpx.Response(200, json=[
            {"type": "PushEvent", "created_at": TODAY, "payload": {"commits": [{}, {}]}},
        ])
    if path == "/repos/octo/repo1/languages":
        return httpx.Response(200, json={"Python": 1000})
    if path == "/repos/octo/repo1/contents":
        return httpx.Response(200, json=[
            {"name": "README.md", "type": "file"},
            {"name": "tests", "type": "dir"},
        ])
    return httpx.Response(404, json={"message": "Not Found"})


def failing_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(500, text="upstream exploded")


async def test_state_machine_transitions(db, user):
    row = await sync_status.mark_syncing(db, "user-1", "github")
    assert row.status == "syncing"

    row = await sync_status.mark_completed(db, "user-1", "github")
    assert row.status == "completed"
    assert row.error is None
    assert row.next_sync_at > row.last_sync_at

    row = await sync_status.mark_failed(db, "user-1", "github", "boom")
    assert row.status == "failed"
    assert row.error == "boom"

    rows = (await db.execute(select(DataSourceSync))).scalars().all()
    assert len(rows) == 1


async def test_run_sync_records_failure_and_reraises(db, user):
    async def work():
        raise RuntimeError("provider down")

    with pytest.raises(RuntimeError):
        await sync_status.run_sync(db, "user-1", "twitter", work)

    row = await sync_status.get_sync_status(db, "user-1", "twitter")
    assert row.status == "failed"
    assert row.error == "provider down"


async def test_github_sync_route_completes(client, user, connect, provider_api, session_factory):
    await connect("github", "gh-token")
    provider_api(github_handler)

    response = await client.post("/api/social/github/sync", headers=auth_headers())
    assert response.status_code == 200
    assert response.json()["message"] == "GitHub data synchronized successfully"

    async with session_factory() as s:
        profile = (await s.execute(select(GitHubProfile))).scalar_one()
        assert profile.username == "octo"
        assert profile.languages_used == {"Python": 100.0}
        assert profile.total_commits == 2
        status = await sync_status.get_sync_status(s, "user-1", "github")
        assert status.status == "completed"

    response = await client.get("/api/social/github/sync", headers=auth_headers())
    body = response.json()
    assert body["isConnected"] is True
    assert body["syncStatus"]["status"] == "completed"
    assert body["profile"]["username"] == "octo"


async def test_github_sync_route_records_failure(client, user, connect, provider_api, session_factory):
    await connect("github", "gh-token")
    provider_api(failing_handler)

    response = await client.post("/api/social/github/sync", headers=auth_headers())
    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to sync GitHub data"
    assert "500" in body["details"]

    async with session_factory() as s:
        status = await sync_status.get_sync_status(s, "user-1", "github")
        assert status.status == "failed"
        assert "upstream exploded" in status.error


async def test_sync_without_connection_asks_to_connect(client, user):
    response = await client.post("/api/social/twitter/sync", headers=auth_headers())
    assert response.status_code == 400
    assert response.json() == {
        "error": "Twitter account not connected",
        "message": "Please connect your Twitter account to sync data",
        "action": "connect_twitter",
    }


async def test_unsupported_platform(client, user):
    response = await client.post("/api/social/myspace/sync", headers=auth_headers())
    assert response.status_code == 400
    assert response.json()["error"] == "Unsupported platform: myspace"


async def test_sync_all_skips_unconnected_and_rescores(client, user, connect, provider_api, session_factory):
    await connect("github", "gh-token")
    provider_api(github_handler)

    response = await client.post("/api/social/sync-all", headers=auth_headers())
    assert response.status_code == 200
    body = response.json()
    assert body["summary"] == {"total": 4, "synced": 1, "failed": 0, "skipped": 3}
    assert body["results"]["github"]["status"] == "success"
    assert body["results"]["youtube"] == {"status": "skipped", "reason": "Not connected"}
    assert body["message"] == "Synced 1 platform(s) successfully, 0 failed"

    async with session_factory() as s:
        score = (await s.execute(select(CredibilityScore))).scalar_one_or_none()
        assert score is not None


async def test_sync_all_keeps_going_after_a_failure(client, user, connect, provider_api, session_factory):
    await connect("github", "gh-token")
    await connect("twitter", "tw-token")

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "api.github.com":
            return github_handler(request)
        return httpx.Response(401, json={"title": "Unauthorized"})

    provider_api(handler)

    response = await client.post("/api/social/sync-all", headers=auth_headers())
    body = response.json()
    assert body["summary"]["synced"] == 1
    assert body["summary"]["failed"] == 1
    assert "401" in body["results"]["twitter"]["error"]

    async with session_factory() as s:
        github_status = await sync_status.get_sync_status(s, "user-1", "github")
        twitter_status = await sync_status.get_sync_status(s, "user-1", "twitter")
        assert github_status.status == "completed"
        assert twitter_status.status == "failed"
        assert (await s.execute(select(SocialProfile))).scalars().all() == []


async def test_sync_overview(client, user, connect):
    await connect("google", "yt-token")

    response = await client.get("/api/social/sync-all", headers=auth_headers())
    body = response.json()
    assert body["summary"] == {"total": 4, "connected": 1, "synced": 0}
    assert body["platforms"]["youtube"]["connected"] is True
    assert body["platforms"]["github"]["connected"] is False


def youtube_handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/channels"):
        return httpx.Response(200, json={"items": [{
            "id": "UC1",
            "snippet": {"title": "Ada Codes", "customUrl": "@adacodes", "thumbnails": {}},
            "statistics": {"subscriberCount": "1500", "viewCount": "90000", "videoCount": "12"},
        }]})
    if path.endswith("/search"):
        return httpx.Response(200, json={"items": [{"id": {"videoId": "v1"}}]})
    if path.endswith("/videos"):
        return httpx.Response(200, json={"items": [{
            "id": "v1",
            "snippet": {"title": "Intro", "publishedAt": "2024-04-01T00:00:00Z"},
            "statistics": {"viewCount": "1000", "likeCount": "30", "commentCount": "20"},
        }]})
    return httpx.Response(404)


async def test_youtube_sync_saves_channel(client, user, connect, provider_api, session_factory):
    await connect("google", "yt-token")
    provider_api(youtube_handler)

    response = await client.post("/api/social/youtube/sync", headers=auth_headers())
    assert response.status_code == 200

    async with session_factory() as s:
        profile = (await s.execute(
            select(SocialProfile).where(SocialProfile.platform == "youtube")
        )).scalar_one()
        assert profile.follower_count == 1500
        assert profile.post_count == 12
        assert profile.engagement_rate == 5.0
        assert profile.profile_url == "https://youtube.com/@adacodes"
