"""
GitHub Integration Service

Fetches a user's profile, repositories and recent public events, then derives
commit consistency, code quality and an overall contribution score.

Scores (each 0-100):
- consistency: active days (40) + regular gaps between active days (30) + recency (30)
- code quality: PR merge rate (20) + issue close rate (15) + reviews (20)
  + collaboration (15) + README/tests/docs practices (30)
- contribution: impact (25) + commit activity (25) + consistency (20)
  + quality (20) + community engagement (10)
"""
import math
import statistics
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.config import get_settings
from credably.models.social_profile import GitHubProfile
from credably.services import sync_status
from credably.services.social.client import provider_client, get_json
from credably.utils.errors import ProviderAPIError
from credably.utils.logger import get_logger

logger = get_logger()

PLATFORM = "github"
MAX_REPO_PAGES = 10
ANALYZED_REPOS = 10

TEST_DIRS = {"test", "tests", "__tests__", "spec"}
DOC_DIRS = {"docs", "documentation"}


def _headers(access_token: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {access_token}",
        "Accept": "application/vnd.github+json",
    }


# ---------------------------------------------------------------------------
# Fetching
# ---------------------------------------------------------------------------

async def fetch_user(client: httpx.AsyncClient, access_token: str) -> Dict[str, Any]:
    base = get_settings().github_api_url
    return await get_json(client, PLATFORM, f"{base}/user", "fetch_user", headers=_headers(access_token))


async def fetch_repositories(client: httpx.AsyncClient, access_token: str) -> List[Dict[str, Any]]:
    base = get_settings().github_api_url
    repos: List[Dict[str, Any]] = []
    for page in range(1, MAX_REPO_PAGES + 1):
        batch = await get_json(
            client,
            PLATFORM,
            f"{base}/user/repos",
            "fetch_repos",
            params={"per_page": 100, "page": page, "sort": "updated", "affiliation": "owner"},
            headers=_headers(access_token),
        )
        repos.extend(batch)
        if len(batch) < 100:
            break
    return repos


async def fetch_events(client: httpx.AsyncClient, access_token: str, login: str) -> List[Dict[str, Any]]:
    base = get_settings().github_api_url
    return await get_json(
        client,
        PLATFORM,
        f"{base}/users/{login}/events/public",
        "fetch_events",
        params={"per_page": 100},
        headers=_headers(access_token),
    )


async def _get_optional(client: httpx.AsyncClient, access_token: str, url: str, operation: str, default):
    # Empty repositories answer 404/409 for contents and languages
    try:
        return await get_json(client, PLATFORM, url, operation, headers=_headers(access_token))
    except ProviderAPIError as e:
        if e.status_code in (404, 409):
            return default
        raise


async def fetch_repo_details(
    client: httpx.AsyncClient,
    access_token: str,
    repos: List[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """Languages and root listing for the most-starred own repositories."""
    base = get_settings().github_api_url
    details = []
    for repo in top_repositories(repos, ANALYZED_REPOS):
        full_name = repo["full_name"]
        languages = await _get_optional(
            client, access_token, f"{base}/repos/{full_name}/languages", "fetch_languages", {}
        )
        contents = await _get_optional(
            client, access_token, f"{base}/repos/{full_name}/contents", "fetch_contents", []
        )
        details.append({"full_name": full_name, "languages": languages, "contents": contents})
    return details


# ---------------------------------------------------------------------------
# Analysis (pure)
# ---------------------------------------------------------------------------

def own_repositories(repos: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [r for r in repos if not r.get("fork")]


def top_repositories(repos: List[Dict[str, Any]], limit: int = 10) -> List[Dict[str, Any]]:
    return sorted(own_repositories(repos), key=lambda r: r.get("stargazers_count", 0), reverse=True)[:limit]


def commits_by_day(events: List[Dict[str, Any]]) -> Dict[str, int]:
    counts: Counter = Counter()
    for event in events:
        if event.get("type") != "PushEvent":
            continue
        commits = len(event.get("payload", {}).get("commits") or []) or 1
        day = (event.get("created_at") or "")[:10]
        if day:
            counts[day] += commits
    return dict(sorted(counts.items()))


def calculate_streaks(days: List[str], today: Optional[date] = None) -> Dict[str, int]:
    if not days:
        return {"longestStreak": 0, "currentStreak": 0}

    today = today or datetime.utcnow().date()
    parsed = [date.fromisoformat(d) for d in sorted(days)]

    longest = run = 1
    for prev, curr in zip(parsed, parsed[1:]):
        if (curr - prev).days == 1:
            run += 1
        else:
            longest = max(longest, run)
            run = 1
    longest = max(longest, run)

    current = 0
    if (today - parsed[-1]).days <= 1:
        current = 1
        for prev, curr in zip(reversed(parsed[:-1]), reversed(parsed[1:])):
            if (curr - prev).days != 1:
                break
            current += 1

    return {"longestStreak": longest, "currentStreak": current}


def calculate_consistency_score(days: List[str], today: Optional[date] = None) -> int:
    if not days:
        return 0

    today = today or datetime.utcnow().date()
    parsed = [date.fromisoformat(d) for d in sorted(days)]

    frequency = min(40, len(parsed) / 365 * 100)

    gaps = [(curr - prev).days for prev, curr in zip(parsed, parsed[1:])]
    mean_gap = sum(gaps) / len(gaps) if gaps else 0
    cv = statistics.pstdev(gaps) / mean_gap if mean_gap > 0 else 1
    distribution = max(0, 30 - cv * 10)

    recency = max(0, 30 - (today - parsed[-1]).days)

    return min(100, round(frequency + distribution + recency))


def event_counts(events: List[Dict[str, Any]]) -> Dict[str, int]:
    counts = {
        "pullRequests": 0,
        "mergedPullRequests": 0,
        "issues": 0,
        "closedIssues": 0,
        "reviews": 0,
        "prComments": 0,
        "issueComments": 0,
        "reposCreated": 0,
    }
    for event in events:
        kind = event.get("type")
        payload = event.get("payload") or {}
        if kind == "PullRequestEvent":
            counts["pullRequests"] += 1
            if payload.get("action") == "closed" and (payload.get("pull_request") or {}).get("merged"):
                counts["mergedPullRequests"] += 1
        elif kind == "IssuesEvent":
            counts["issues"] += 1
            if payload.get("action") == "closed":
                counts["closedIssues"] += 1
        elif kind == "PullRequestReviewEvent":
            counts["reviews"] += 1
        elif kind == "PullRequestReviewCommentEvent":
            counts["prComments"] += 1
        elif kind == "IssueCommentEvent":
            counts["issueComments"] += 1
        elif kind == "CreateEvent" and payload.get("ref_type") == "repository":
            counts["reposCreated"] += 1
    return counts


def repository_practices(details: List[Dict[str, Any]]) -> Dict[str, int]:
    readme = tests = docs = 0
    for repo in details:
        names = [(item.get("name") or "").lower() for item in repo.get("contents") or []]
        dirs = {(item.get("name") or "").lower() for item in repo.get("contents") or [] if item.get("type") == "dir"}
        if any(name.startswith("readme") for name in names):
            readme += 1
        if dirs & TEST_DIRS:
            tests += 1
        if dirs & DOC_DIRS:
            docs += 1
    return {"withReadme": readme, "withTests": tests, "withDocs": docs, "analyzed": len(details)}


def calculate_quality_score(counts: Dict[str, int], practices: Dict[str, int]) -> int:
    pr_rate = counts["mergedPullRequests"] / counts["pullRequests"] if counts["pullRequests"] else 0
    issue_rate = counts["closedIssues"] / counts["issues"] if counts["issues"] else 0
    reviews = min(20, counts["reviews"] * 2)
    collaboration = min(15, (counts["prComments"] + counts["issueComments"]) * 0.5)

    analyzed = practices["analyzed"]
    documentation = 0.0
    if analyzed:
        documentation = (
            practices["withReadme"] / analyzed * 10
            + practices["withTests"] / analyzed * 10
            + practices["withDocs"] / analyzed * 10
        )

    total = pr_rate * 20 + issue_rate * 15 + reviews + collaboration + documentation
    return min(100, round(total))


def language_percentages(details: List[Dict[str, Any]]) -> Dict[str, float]:
    totals: Counter = Counter()
    for repo in details:
        for language, size in (repo.get("languages") or {}).items():
            totals[language] += size
    total_bytes = sum(totals.values())
    if not total_bytes:
        return {}
    return {
        language: round(size / total_bytes * 100, 1)
        for language, size in totals.most_common()
    }


def calculate_contribution_score(
    repos: List[Dict[str, Any]],
    commits_last_year: int,
    consistency: int,
    quality: int,
    counts: Dict[str, int],
) -> int:
    own = own_repositories(repos)
    stars = sum(r.get("stargazers_count", 0) for r in own)
    forks = sum(r.get("forks_count", 0) for r in own)

    impact = min(25, math.log10(stars + forks + 1) * 5)
    activity = min(25, math.log10(commits_last_year + 1) * 6)
    engagement = min(10, math.log10(counts["pullRequests"] + counts["issues"] + 1) * 3)

    total = impact + activity + consistency / 100 * 20 + quality / 100 * 20 + engagement
    return min(100, round(total))


def build_analytics(
    user: Dict[str, Any],
    repos: List[Dict[str, Any]],
    events: List[Dict[str, Any]],
    details: List[Dict[str, Any]],
    today: Optional[date] = None,
) -> Dict[str, Any]:
    today = today or datetime.utcnow().date()
    by_day = commits_by_day(events)
    year_ago = (today - timedelta(days=365)).isoformat()
    commits_last_year = sum(count for day, count in by_day.items() if day >= year_ago)

    counts = event_counts(events)
    consistency = calculate_consistency_score(list(by_day), today)
    quality = calculate_quality_score(counts, repository_practices(details))
    contribution = calculate_contribution_score(repos, commits_last_year, consistency, quality, counts)

    own = own_repositories(repos)
    return {
        "username": user["login"],
        "profileUrl": user.get("html_url") or f"https://github.com/{user['login']}",
        "followers": user.get("followers", 0),
        "totalRepos": len(own),
        "totalCommits": sum(by_day.values()),
        "totalPRs": counts["pullRequests"],
        "totalIssues": counts["issues"],
        "totalStars": sum(r.get("stargazers_count", 0) for r in repos),
        "languages": language_percentages(details),
        "consistencyScore": consistency,
        "codeQualityScore": quality,
        "contributionScore": contribution,
        "overallScore": round(contribution * 0.4 + consistency * 0.3 + quality * 0.3),
        "streaks": calculate_streaks(list(by_day), today),
        "contributionGraph": by_day,
        "topRepos": [
            {
                "name": r["name"],
                "description": r.get("description"),
                "language": r.get("language"),
                "stars": r.get("stargazers_count", 0),
                "forks": r.get("forks_count", 0),
                "url": r.get("html_url") or f"https://github.com/{r['full_name']}",
            }
            for r in top_repositories(repos, 10)
        ],
    }


# ---------------------------------------------------------------------------
# Persistence & sync
# ---------------------------------------------------------------------------

async def get_github_analytics(access_token: str, client: Optional[httpx.AsyncClient] = None) -> Dict[str, Any]:
    async with provider_client(client) as http:
        user = await fetch_user(http, access_token)
        repos = await fetch_repositories(http, access_token)
        events = await fetch_events(http, access_token, user["login"])
        details = await fetch_repo_details(http, access_token, repos)
    return build_analytics(user, repos, events, details)


async def save_github_profile(db: AsyncSession, user_id: str, analytics: Dict[str, Any]) -> GitHubProfile:
    profile = (await db.execute(
        select(GitHubProfile).where(GitHubProfile.user_id == user_id)
    )).scalar_one_or_none()
    if profile is None:
        profile = GitHubProfile(user_id=user_id)
        db.add(profile)

    profile.username = analytics["username"]
    profile.profile_url = analytics["profileUrl"]
    profile.total_repos = analytics["totalRepos"]
    profile.total_commits = analytics["totalCommits"]
    profile.total_prs = analytics["totalPRs"]
    profile.total_issues = analytics["totalIssues"]
    profile.total_stars = analytics["totalStars"]
    profile.languages_used = analytics["languages"]
    profile.contribution_score = analytics["contributionScore"]
    profile.consistency_score = analytics["consistencyScore"]
    profile.code_quality_score = analytics["codeQualityScore"]
    profile.top_repos = analytics["topRepos"]
    profile.contribution_graph = analytics["contributionGraph"]
    profile.last_synced_at = datetime.utcnow()
    await db.commit()
    return profile


async def sync_github_data(
    db: AsyncSession,
    user_id: str,
    access_token: str,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    async def work():
        analytics = await get_github_analytics(access_token, client)
        await save_github_profile(db, user_id, analytics)
        return analytics

    return await sync_status.run_sync(db, user_id, PLATFORM, work)
