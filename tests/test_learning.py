from conftest import auth_headers

LEARNING_PATH = {
    "milestones": [
        {
            "month": 1,
            "skills": ["Docker"],
            "projects": ["Containerise a Flask app"],
            "resources": [{"title": "Docker Deep Dive", "type": "book", "duration": "20 hours"}],
        },
        {
            "month": 2,
            "skills": ["Kubernetes"],
            "projects": ["Deploy to a local cluster"],
            "resources": [
                {"title": "Kubernetes Basics", "type": "course", "url": "https://kubernetes.io/docs/tutorials/"},
                {"title": "Build a k8s operator", "type": "project"},
            ],
        },
    ],
    "totalHours": 120,
    "difficulty": "intermediate",
}


async def test_generated_path(client, fake_openai):
    calls = fake_openai(LEARNING_PATH)
    await client.post("/api/skills/", json={"name": "Python", "level": "advanced"}, headers=auth_headers())

    response = await client.post(
        "/api/learning/paths",
        json={"generate": True, "targetRole": "Platform Engineer", "timeframeMonths": 3},
        headers=auth_headers(),
    )
    assert response.status_code == 201
    path = response.json()["path"]
    assert path["name"] == "Platform Engineer Learning Path"
    assert path["estimatedWeeks"] == 12
    assert path["status"] == "not_started"
    assert len(path["milestones"]) == 2
    assert [r["title"] for r in path["resources"]] == [
        "Docker Deep Dive",
        "Kubernetes Basics",
        "Build a k8s operator",
    ]
    assert "Python (advanced)" in calls.calls[0]["messages"][1]["content"]


async def test_generation_requires_target_role(client):
    response = await client.post("/api/learning/paths", json={"generate": True}, headers=auth_headers())
    assert response.status_code == 400


async def test_generation_failure(client, fake_openai):
    fake_openai({"milestones": []})
    response = await client.post(
        "/api/learning/paths",
        json={"generate": True, "targetRole": "Data Engineer"},
        headers=auth_headers(),
    )
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to generate learning path"


async def test_manual_path_lifecycle(client):
    response = await client.post("/api/learning/paths", json={"name": "SQL"}, headers=auth_headers())
    assert response.status_code == 400
    assert response.json() == {"error": "Name and description are required"}

    response = await client.post(
        "/api/learning/paths",
        json={"name": "SQL Mastery", "description": "Window functions and query plans", "estimatedWeeks": 6},
        headers=auth_headers(),
    )
    path_id = response.json()["path"]["id"]

    response = await client.post(f"/api/learning/paths/{path_id}/start", headers=auth_headers())
    body = response.json()
    assert body["isNew"] is True
    assert body["message"] == "Learning path started successfully"
    assert body["path"]["status"] == "in_progress"
    started_at = body["path"]["startedAt"]

    response = await client.post(f"/api/learning/paths/{path_id}/start", headers=auth_headers())
    assert response.json()["isNew"] is False
    assert response.json()["message"] == "Learning path resumed"
    assert response.json()["path"]["startedAt"] == started_at

    response = await client.patch(f"/api/learning/paths/{path_id}", json={"progress": 40}, headers=auth_headers())
    assert response.json()["path"]["progress"] == 40
    assert response.json()["path"]["completedAt"] is None

    response = await client.patch(f"/api/learning/paths/{path_id}", json={"progress": 100}, headers=auth_headers())
    path = response.json()["path"]
    assert path["status"] == "completed"
    assert path["completedAt"] is not None

    response = await client.get("/api/learning/paths", headers=auth_headers())
    assert response.json()["count"] == 1


async def test_update_validation_and_ownership(client):
    response = await client.post(
        "/api/learning/paths",
        json={"name": "Go", "description": "Concurrency patterns"},
        headers=auth_headers(),
    )
    path_id = response.json()["path"]["id"]

    response = await client.patch(f"/api/learning/paths/{path_id}", json={"status": "paused"}, headers=auth_headers())
    assert response.status_code == 400

    response = await client.patch(f"/api/learning/paths/{path_id}", json={"progress": 120}, headers=auth_headers())
    assert response.status_code == 422

    response = await client.get(f"/api/learning/paths/{path_id}", headers=auth_headers("user-2"))
    assert response.status_code == 403

    response = await client.get("/api/learning/paths/424242", headers=auth_headers())
    assert response.status_code == 404
    assert response.json() == {"error": "Learning path not found"}
