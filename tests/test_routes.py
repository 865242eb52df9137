from datetime import datetime, timedelta
from urllib.parse import parse_qs, urlparse

from sqlalchemy import select

from conftest import auth_headers, make_token
from credably.config import get_settings
from credably.models.credibility_score import CredibilityScore
from credably.models.user import User


async def test_health_and_metrics(client):
    response = await client.get("/health")
    assert response.json() == {"status": "ok"}
    assert response.headers["X-Correlation-ID"]

    response = await client.get("/metrics")
    snapshot = response.json()
    assert snapshot["counters"]["http.responses.2xx"] >= 1
    assert "http.request" in snapshot["histograms"]


async def test_correlation_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Correlation-ID": "abc-123"})
    assert response.headers["X-Correlation-ID"] == "abc-123"


async def test_missing_token_is_unauthorized(client):
    response = await client.get("/api/credibility/")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}
    assert response.headers["WWW-Authenticate"] == "Bearer"


async def test_invalid_tokens_are_unauthorized(client):
    bad_signature = {"Authorization": "Bearer " + make_token().rsplit(".", 1)[0] + ".forged"}
    assert (await client.get("/api/profile/", headers=bad_signature)).status_code == 401

    expired = make_token(exp=int((datetime.utcnow() - timedelta(hours=1)).timestamp()))
    response = await client.get("/api/profile/", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401

    response = await client.get("/api/profile/", headers={"Authorization": "Token abc"})
    assert response.status_code == 401


async def test_session_cookie_is_accepted(client, session_factory):
    cookie_name = get_settings().session_cookie_name
    client.cookies.set(cookie_name, make_token("cookie-user", email="c@example.com"))

    response = await client.get("/api/profile/")
    assert response.status_code == 200
    assert response.json()["user"]["id"] == "cookie-user"

    async with session_factory() as s:
        user = await s.get(User, "cookie-user")
        assert user.email == "c@example.com"


async def test_missing_secret_is_a_server_error(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "auth_secret", "")
    response = await client.get("/api/profile/", headers=auth_headers())
    assert response.status_code == 500


async def test_profile_update(client):
    response = await client.post(
        "/api/profile/",
        json={"name": "Ada Lovelace", "title": "Engineer", "careerStage": "senior", "yearsExperience": 8},
        headers=auth_headers(),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["name"] == "Ada Lovelace"
    assert body["profile"]["careerStage"] == "senior"
    assert body["profile"]["yearsExperience"] == 8

    response = await client.post("/api/profile/", json={"careerStage": "wizard"}, headers=auth_headers())
    assert response.status_code == 422


async def test_credibility_summary_includes_completeness(client):
    await client.post("/api/profile/", json={"title": "Engineer", "bio": "Builds things"}, headers=auth_headers())

    response = await client.get("/api/credibility/", headers=auth_headers())
    assert response.status_code == 200
    body = response.json()
    assert body["verificationLevel"] == "basic"
    assert set(body["scores"]) == {"education", "experience", "technical", "social", "certifications"}
    assert body["completeness"] == 22
    assert "github" in body["missingData"]


async def test_calculate_and_refresh(client):
    response = await client.post("/api/credibility/calculate", headers=auth_headers())
    assert response.status_code == 200
    assert response.json()["data"]["overallScore"] == 0

    response = await client.get("/api/credibility/calculate?force=true", headers=auth_headers())
    assert response.json()["success"] is True

    response = await client.post("/api/credibility/refresh", headers=auth_headers())
    assert response.json()["message"] == "Credibility score recalculated"


async def test_export_is_an_attachment(client):
    response = await client.get("/api/credibility/export", headers=auth_headers())
    assert response.status_code == 200
    disposition = response.headers["Content-Disposition"]
    assert disposition.startswith('attachment; filename="credibility-report-')
    assert "credibility" in response.json()


async def test_share_requires_a_score(client):
    response = await client.post("/api/credibility/share", headers=auth_headers())
    assert response.status_code == 404


async def test_share_link_round_trip(client, session_factory):
    await client.post("/api/credibility/calculate", headers=auth_headers())
    response = await client.post("/api/credibility/share", headers=auth_headers())
    assert response.status_code == 200
    share_url = response.json()["shareUrl"]
    assert share_url.startswith(f"{get_settings().public_base_url}/public/credibility/user-1?token=")
    token = parse_qs(urlparse(share_url).query)["token"][0]

    response = await client.get(f"/api/public/credibility/user-1?token={token}")
    assert response.status_code == 200
    assert response.json()["credibility"]["verificationLevel"] == "basic"

    response = await client.get("/api/public/credibility/user-1?token=wrong")
    assert response.status_code == 404
    assert response.json() == {"error": "Share link not found or expired"}

    async with session_factory() as s:
        row = (await s.execute(select(CredibilityScore))).scalar_one()
        row.share_expires_at = datetime.utcnow() - timedelta(minutes=1)
        await s.commit()

    response = await client.get(f"/api/public/credibility/user-1?token={token}")
    assert response.status_code == 404


async def test_public_view_for_unknown_user(client):
    response = await client.get("/api/public/credibility/nobody?token=abc")
    assert response.status_code == 404
