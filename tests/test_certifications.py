from datetime import datetime, timedelta
from types import SimpleNamespace

from conftest import auth_headers
from credably.models.certification import Certification
from credably.models.user import User
from credably.services.certification_service import (
    certification_score,
    certification_statistics,
    extract_skills,
    validate_certificate,
)

NOW = datetime(2025, 6, 1)


def test_trusted_issuer_with_matching_url_is_verified():
    validation = validate_certificate(
        "Amazon Web Services",
        datetime(2024, 1, 1),
        credential_url="https://aws.amazon.com/verification/abc",
        now=NOW,
    )
    assert validation.is_valid
    assert validation.issuer_verified
    assert validation.credential_verified
    assert validation.trust_score == 100


def test_expired_certificate_loses_trust():
    validation = validate_certificate("Coursera", datetime(2020, 1, 1), datetime(2022, 1, 1), now=NOW)
    assert validation.is_valid
    assert "Certificate has expired" in validation.warnings
    assert validation.trust_score == 70


def test_unknown_issuer_and_missing_url():
    validation = validate_certificate("Bob's Bootcamp", datetime(2024, 1, 1), credential_id="X-1", now=NOW)
    assert validation.is_valid
    assert not validation.issuer_verified
    assert validation.trust_score == 50
    assert "Credential ID provided but no verification URL" in validation.warnings


def test_invalid_dates_zero_the_trust_score():
    validation = validate_certificate("AWS", datetime(2030, 1, 1), datetime(2029, 1, 1), now=NOW)
    assert not validation.is_valid
    assert validation.trust_score == 0
    assert "Issue date is in the future" in validation.issues
    assert "Expiry date is before issue date" in validation.issues


def test_extract_skills_from_name_and_metadata():
    skills = extract_skills("AWS Certified Solutions Architect", "Amazon Web Services", {"topics": ["Docker"]})
    assert "AWS" in skills
    assert "Docker" in skills
    assert "Figma" not in skills


def test_score_and_statistics():
    certs = [
        SimpleNamespace(issuer="AWS", verified=True, issue_date=NOW - timedelta(days=30), skills=["AWS", "Docker"]),
        SimpleNamespace(issuer="Bob's Bootcamp", verified=False, issue_date=datetime(2015, 3, 1), skills=[]),
    ]
    score = certification_score(certs, now=NOW)
    # 12 + 15 + 10 + 4
    assert score["overallScore"] == 41
    assert score["trustedIssuers"] == 1
    assert score["recentCertifications"] == 1
    assert certification_score([], now=NOW)["overallScore"] == 0

    stats = certification_statistics(certs)
    assert stats["byType"] == {"cloud_certification": 1, "other": 1}
    assert stats["byYear"] == {str((NOW - timedelta(days=30)).year): 1, "2015": 1}


async def test_create_list_and_verify(client):
    response = await client.post(
        "/api/certifications/",
        json={
            "name": "Google Cloud Professional Data Engineer",
            "issuer": "Google Cloud",
            "issueDate": "2024-02-01T00:00:00",
            "expiryDate": (datetime.utcnow() + timedelta(days=30)).isoformat(),
        },
        headers=auth_headers(),
    )
    assert response.status_code == 201
    cert = response.json()["certification"]
    assert cert["verified"] is False
    assert cert["verificationMethod"] == "manual_review"
    assert "Google Cloud" in cert["skills"]

    response = await client.get("/api/certifications/?expiring=true&score=true&stats=true", headers=auth_headers())
    body = response.json()
    assert body["count"] == 1
    assert body["score"]["certificationCount"] == 1
    assert body["statistics"]["total"] == 1

    response = await client.patch(
        f"/api/certifications/{cert['id']}",
        json={"verified": True, "verificationMethod": "issuer_api"},
        headers=auth_headers(),
    )
    assert response.status_code == 200
    assert response.json()["certification"]["verified"] is True
    assert response.json()["certification"]["verificationMethod"] == "issuer_api"


async def test_create_rejects_invalid_dates(client):
    response = await client.post(
        "/api/certifications/",
        json={"name": "Cert", "issuer": "AWS", "issueDate": "2999-01-01T00:00:00"},
        headers=auth_headers(),
    )
    assert response.status_code == 400
    assert response.json()["details"] == ["Issue date is in the future"]


async def test_missing_fields_are_rejected(client):
    response = await client.post("/api/certifications/", json={"name": "Cert"}, headers=auth_headers())
    assert response.status_code == 422


async def test_other_users_certification_is_forbidden(client, seed):
    _, cert = await seed(
        User(id="user-2"),
        Certification(user_id="user-2", name="PMP", issuer="PMI", issue_date=datetime(2020, 1, 1)),
    )
    response = await client.delete(f"/api/certifications/{cert.id}", headers=auth_headers())
    assert response.status_code == 403

    response = await client.get("/api/certifications/99999", headers=auth_headers())
    assert response.status_code == 404
    assert response.json() == {"error": "Certification not found"}


async def test_unexpected_failure_returns_error_envelope(client, monkeypatch):
    async def broken(db, user_id):
        raise RuntimeError("db exploded")

    monkeypatch.setattr("credably.routes.certifications.get_user_certifications", broken)

    response = await client.get("/api/certifications/", headers=auth_headers())
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch certifications", "details": "db exploded"}


def test_issuer_names_match_whole_words():
    assert not validate_certificate("Lawson Training", datetime(2024, 1, 1), now=NOW).issuer_verified
    assert validate_certificate("AWS Training and Certification", datetime(2024, 1, 1), now=NOW).issuer_verified
