import pytest
from sqlalchemy import select

from conftest import auth_headers
from credably.models.career import CareerSuggestion
from credably.models.certification import Certification
from credably.models.social_profile import GitHubProfile
from credably.services.career_recommendations import (
    aggregate_user_skills,
    calculate_confidence,
    weeks_to_time_string,
)

RECOMMENDATIONS = {
    "recommendations": [
        {
            "role": "Platform Engineer",
            "readinessScore": 70,
            "estimatedWeeks": 12,
            "skillGaps": [
                {"skill": "Kubernetes", "currentLevel": None, "requiredLevel": "advanced", "priority": "critical"},
                {"skill": "Terraform", "requiredLevel": "intermediate", "priority": "important"},
            ],
            "matchingSkills": [{"skill": "Python", "level": "advanced", "source": "github"}],
            "resources": [
                {
                    "type": "certification",
                    "platform": "Linux Foundation",
                    "title": "Certified Kubernetes Administrator",
                    "provider": "CNCF",
                    "duration": "8 weeks",
                    "cost": "$395",
                    "difficulty": "advanced",
                    "skillsGained": ["Kubernetes"],
                    "relevanceScore": 95,
                },
            ],
            "reasoning": "Strong Python and infrastructure exposure",
            "priority": 2,
        },
        {
            "role": "Backend Engineer",
            "readinessScore": 85,
            "estimatedWeeks": 2,
            "reasoning": "Already close",
            "priority": 1,
        },
    ]
}


@pytest.mark.parametrize("weeks,expected", [
    (0, "Ready now"),
    (-3, "Ready now"),
    (1, "1 week"),
    (2, "2 weeks"),
    (3, "1 month"),
    (12, "3 months"),
    (52, "13 months"),
    (53, "2 years"),
])
def test_weeks_to_time_string(weeks, expected):
    assert weeks_to_time_string(weeks) == expected


def test_confidence():
    assert calculate_confidence(70, 2) == 72
    assert calculate_confidence(100, 0) == 100
    assert calculate_confidence(0, 10) == 0


async def test_aggregated_skills_prefer_user_entries(db, user, seed, client):
    await client.post(
        "/api/skills/",
        json={"name": "Python", "level": "expert", "proficiencyScore": 95},
        headers=auth_headers(),
    )
    await seed(
        GitHubProfile(user_id="user-1", username="octo", languages_used={"Python": 60.0, "Go": 20.0, "Shell": 5.0}),
        Certification(user_id="user-1", name="CKA", issuer="CNCF", issue_date=user.created_at, skills=["Kubernetes", "go"]),
    )

    skills = {s["name"]: s for s in await aggregate_user_skills(db, "user-1")}
    assert skills["Python"]["source"] == "manual"
    assert skills["Go"] == {"name": "Go", "level": "intermediate", "source": "github", "proficiency": 40.0, "yearsExperience": 0}
    assert skills["Shell"]["level"] == "beginner"
    assert skills["Kubernetes"]["proficiency"] == 70
    assert "go" not in skills


async def test_generate_and_reuse_recommendations(client, fake_openai, session_factory):
    calls = fake_openai(RECOMMENDATIONS)

    response = await client.post("/api/career/recommendations", headers=auth_headers())
    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    platform = body["recommendations"][0]
    assert platform["estimatedTime"] == "3 months"
    assert platform["confidence"] == 72
    assert platform["resources"][0]["title"] == "Certified Kubernetes Administrator"
    assert platform["resources"][0]["relevanceScore"] == 95
    assert calls.calls[0]["temperature"] == 0.7

    # stored suggestions come back without another completion
    response = await client.get("/api/career/recommendations", headers=auth_headers())
    assert response.status_code == 200
    titles = [r["title"] for r in response.json()["recommendations"]]
    assert titles == ["Backend Engineer", "Platform Engineer"]
    assert len(calls.calls) == 1


async def test_status_updates(client, fake_openai, session_factory):
    fake_openai(RECOMMENDATIONS)
    created = (await client.post("/api/career/recommendations", headers=auth_headers())).json()
    suggestion = created["recommendations"][0]
    resource = suggestion["resources"][0]

    response = await client.patch(
        "/api/career/recommendations",
        json={"suggestionId": suggestion["id"], "status": "dismissed"},
        headers=auth_headers(),
    )
    assert response.status_code == 200

    response = await client.patch(
        "/api/career/recommendations",
        json={"resourceId": resource["id"], "status": "bookmarked"},
        headers=auth_headers(),
    )
    assert response.status_code == 200

    response = await client.patch(
        "/api/career/recommendations",
        json={"resourceId": resource["id"], "status": "lost"},
        headers=auth_headers(),
    )
    assert response.status_code == 400

    response = await client.patch("/api/career/recommendations", json={"status": "active"}, headers=auth_headers())
    assert response.status_code == 400
    assert response.json() == {"error": "Must provide either suggestionId or resourceId"}

    response = await client.patch(
        "/api/career/recommendations",
        json={"suggestionId": suggestion["id"], "status": "active"},
        headers=auth_headers("user-2"),
    )
    assert response.status_code == 403

    async with session_factory() as s:
        row = (await s.execute(
            select(CareerSuggestion).where(CareerSuggestion.id == suggestion["id"])
        )).scalar_one()
        assert row.status == "dismissed"
        assert row.resources[0].status == "bookmarked"

    # dismissed suggestions are hidden from the stored list
    response = await client.get("/api/career/recommendations", headers=auth_headers())
    assert [r["title"] for r in response.json()["recommendations"]] == ["Backend Engineer"]


async def test_generation_failure_is_reported(client, fake_openai):
    fake_openai("not json at all")
    response = await client.post("/api/career/recommendations", headers=auth_headers())
    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to generate career recommendations",
        "details": "Failed to generate career recommendations",
    }
