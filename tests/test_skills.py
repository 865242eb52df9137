from conftest import auth_headers
from credably.models.skill import slugify
from credably.models.social_profile import GitHubProfile
from credably.services import skill_analyzer, skill_service
from credably.services.skill_service import level_for_proficiency


def test_level_for_proficiency():
    assert level_for_proficiency(90) == "expert"
    assert level_for_proficiency(85) == "expert"
    assert level_for_proficiency(70) == "advanced"
    assert level_for_proficiency(50) == "intermediate"
    assert level_for_proficiency(49) == "beginner"


async def test_insights_without_skills_is_static():
    insights = await skill_analyzer.generate_skill_insights([])
    assert insights["skillStrength"]["label"] == "Just Starting"
    assert insights["industryComparison"] == {"averageScore": 65, "userScore": 0, "percentile": 0}


async def test_insights_fill_in_comparison_and_verification(fake_openai):
    calls = fake_openai({
        "skillStrength": {"score": 72, "label": "Strong", "description": "Solid backend skills"},
        "topSkills": [{"name": "Python", "demand": "high", "growth": 12}],
        "careerReadiness": {"score": 70, "readyFor": ["Backend Engineer"], "gaps": ["Kubernetes"]},
        "recommendations": [{"type": "skill", "title": "Learn Kubernetes", "priority": "high"}],
        "industryComparison": {},
    })
    skills = [
        {"name": "Python", "category": "Programming Languages", "level": "advanced", "proficiencyScore": 80, "verified": True},
        {"name": "SQL", "category": "Databases", "level": "intermediate", "proficiencyScore": 60, "verified": False},
    ]
    insights = await skill_analyzer.generate_skill_insights(skills)
    assert insights["skillStrength"]["label"] == "Strong"
    assert insights["industryComparison"] == {"averageScore": 65, "userScore": 70, "percentile": 25}
    assert insights["verificationStatus"] == {"verified": 1, "pending": 0, "unverified": 1}
    assert calls.calls[0]["response_format"] == {"type": "json_object"}


async def test_manual_skill_crud(client):
    response = await client.post(
        "/api/skills/",
        json={"name": "TypeScript", "category": "Programming Languages", "level": "advanced", "proficiencyScore": 75},
        headers=auth_headers(),
    )
    assert response.status_code == 201
    skill = response.json()["skill"]
    assert skill["name"] == "TypeScript"
    assert skill["source"] == "manual"

    response = await client.post(
        "/api/skills/",
        json={"name": "typescript", "level": "expert", "proficiencyScore": 90},
        headers=auth_headers(),
    )
    assert response.json()["skill"]["id"] == skill["id"]

    response = await client.get("/api/skills/", headers=auth_headers())
    assert response.json()["count"] == 1
    assert response.json()["skills"][0]["level"] == "expert"

    response = await client.delete(f"/api/skills/{skill['id']}", headers=auth_headers())
    assert response.status_code == 200
    assert (await client.get("/api/skills/", headers=auth_headers())).json()["count"] == 0


async def test_manual_skill_rejects_unknown_level(client):
    response = await client.post("/api/skills/", json={"name": "Go", "level": "guru"}, headers=auth_headers())
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid skill level: guru"


async def test_text_analysis_saves_detected_skills(client, fake_openai):
    fake_openai({
        "skills": [
            {"name": "Python", "category": "Programming Languages", "level": "advanced", "confidence": 90, "reason": "5 years"},
            {"name": "Leadership", "category": "Soft Skills", "level": "intermediate", "confidence": 60},
        ],
        "recommendations": [{"skill": "Rust", "priority": "low"}],
        "careerInsights": {"strengths": ["Backend"], "suggestedRoles": [{"title": "Backend Engineer", "matchScore": 80}]},
    })
    response = await client.post(
        "/api/skills/analyze",
        json={"type": "text-analysis", "data": {"text": "Senior Python developer leading a team", "context": "resume"}},
        headers=auth_headers(),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["saved"] == 2
    assert body["insights"]["suggestedRoles"][0]["title"] == "Backend Engineer"

    skills = (await client.get("/api/skills/", headers=auth_headers())).json()["skills"]
    assert [s["name"] for s in skills] == ["Python", "Leadership"]
    assert skills[0]["source"] == "ai-analysis"
    assert skills[0]["evidence"]["aiAnalysis"]["confidence"] == 90


async def test_analysis_input_errors(client):
    response = await client.post(
        "/api/skills/analyze",
        json={"type": "horoscope", "data": {}},
        headers=auth_headers(),
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid analysis type"}

    response = await client.post(
        "/api/skills/analyze",
        json={"type": "text-analysis", "data": {"text": ""}},
        headers=auth_headers(),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid analysis data"


async def test_analysis_without_openai_key_fails_cleanly(client):
    response = await client.post(
        "/api/skills/analyze",
        json={"type": "career-readiness", "data": {"role": {"title": "Data Engineer"}}},
        headers=auth_headers(),
    )
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to analyze career readiness"


async def test_career_readiness(client, fake_openai):
    fake_openai({
        "readinessScore": 64,
        "strengths": [{"skill": "SQL", "analysis": "Strong"}],
        "gaps": [{"skill": "Spark", "requiredLevel": "advanced", "priority": "high"}],
        "estimatedTimeToReady": 4,
    })
    response = await client.post(
        "/api/skills/analyze",
        json={"type": "career-readiness", "data": {"role": {
            "title": "Data Engineer",
            "requiredSkills": [{"name": "Spark", "level": "advanced"}],
        }}},
        headers=auth_headers(),
    )
    assert response.status_code == 200
    assert response.json()["readinessScore"] == 64
    assert response.json()["gaps"][0]["skill"] == "Spark"


async def test_github_import_requires_synced_profile(client):
    response = await client.post("/api/skills/import/github", headers=auth_headers())
    assert response.status_code == 400
    assert response.json()["action"] == "connect_github"


async def test_github_import_creates_language_skills(client, user, seed):
    await seed(GitHubProfile(user_id="user-1", username="octo", languages_used={"Python": 10.0, "Go": 5.0}))

    response = await client.post("/api/skills/import/github", headers=auth_headers())
    assert response.status_code == 200
    assert response.json()["created"] == ["Python", "Go"]

    skills = {s["name"]: s for s in (await client.get("/api/skills/", headers=auth_headers())).json()["skills"]}
    # primary language gets the bonus
    assert skills["Python"]["proficiencyScore"] == 90
    assert skills["Python"]["level"] == "expert"
    assert skills["Go"]["proficiencyScore"] == 60
    assert skills["Go"]["level"] == "intermediate"
    assert skills["Go"]["verified"] is True

    response = await client.post("/api/skills/import/github", headers=auth_headers())
    assert response.json()["updated"] == ["Python", "Go"]


async def test_unexpected_failure_returns_error_envelope(client, monkeypatch):
    async def broken(db, user_id):
        raise RuntimeError("connection reset")

    monkeypatch.setattr(skill_service, "get_user_skills", broken)

    response = await client.get("/api/skills/", headers=auth_headers())
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch skills", "details": "connection reset"}


def test_slugify_keeps_symbol_languages_apart():
    assert slugify("C++") == "c-plus-plus"
    assert slugify("C#") == "c-sharp"
    assert slugify("C") == "c"
    assert slugify("Node.js") == "node-js"


async def test_similarly_named_languages_are_separate_skills(client):
    for name in ("C++", "C#", "C"):
        response = await client.post("/api/skills/", json={"name": name}, headers=auth_headers())
        assert response.status_code == 201

    skills = (await client.get("/api/skills/", headers=auth_headers())).json()["skills"]
    assert sorted(s["name"] for s in skills) == ["C", "C#", "C++"]
