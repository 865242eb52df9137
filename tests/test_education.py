from datetime import datetime

import pytest

from conftest import auth_headers
from credably.models.education import EducationRecord
from credably.models.user import User
from credably.services.education_service import (
    detect_degree_level,
    education_statistics,
    gpa_percent,
    normalize_gpa,
    validate_education_record,
)

NOW = datetime(2025, 6, 1)


@pytest.mark.parametrize("degree,level", [
    ("PhD in Physics", "PhD"),
    ("Doctor of Philosophy", "PhD"),
    ("MBA", "Master's"),
    ("M.Tech Computer Science", "Master's"),
    ("B.Tech", "Bachelor's"),
    ("Bachelor of Arts", "Bachelor's"),
    ("Associate of Science", "Associate"),
    ("High School Diploma", "Diploma"),
    ("Juris Doctor", "Professional Degree"),
    ("Certificate of Attendance", "Certificate of Attendance"),
])
def test_detect_degree_level(degree, level):
    assert detect_degree_level(degree) == level


def test_gpa_scales():
    assert gpa_percent(3.0) == 75.0
    assert gpa_percent(8.5) == pytest.approx(85.0)
    assert gpa_percent(92) == 92.0
    assert gpa_percent(4.0) == 100.0
    assert normalize_gpa(9.0) == pytest.approx(3.6)


def test_recognized_institution_is_verified():
    validation = validate_education_record("Stanford University", datetime(2015, 9, 1), datetime(2019, 6, 1), 3.7, now=NOW)
    assert validation.is_valid
    assert validation.institution_verified
    assert validation.trust_score == 100
    assert validation.accreditation_status == "accredited"


def test_unrecognized_institution_warns():
    validation = validate_education_record("Springfield Community College", datetime(2015, 9, 1), now=NOW)
    assert validation.is_valid
    assert not validation.institution_verified
    assert validation.trust_score == 50
    assert validation.warnings


def test_invalid_dates_and_gpa():
    validation = validate_education_record(
        "MIT", datetime(2030, 1, 1), datetime(2029, 1, 1), gpa=-1, now=NOW
    )
    assert not validation.is_valid
    assert "Start date is in the future" in validation.issues
    assert "End date is before start date" in validation.issues
    assert "GPA cannot be negative" in validation.issues


def test_duration_warnings():
    short = validate_education_record("MIT", datetime(2020, 1, 1), datetime(2020, 3, 1), now=NOW)
    assert "Education duration is very short (less than 6 months)" in short.warnings
    long = validate_education_record("MIT", datetime(2000, 1, 1), datetime(2012, 1, 1), now=NOW)
    assert "Education duration is unusually long (more than 10 years)" in long.warnings


def test_statistics():
    records = [
        EducationRecord(institution_name="MIT", degree="Master of Science", degree_level="Master's",
                        gpa=3.6, start_date=datetime(2018, 9, 1), end_date=datetime(2020, 6, 1), verified=True),
        EducationRecord(institution_name="Local College", degree="BSc", degree_level="Bachelor's",
                        gpa=8.0, start_date=datetime(2014, 9, 1), end_date=datetime(2018, 6, 1), verified=False),
        EducationRecord(institution_name="Open University", degree="PhD", degree_level="PhD",
                        gpa=None, start_date=datetime(2024, 9, 1), end_date=None, verified=False),
    ]
    stats = education_statistics(records, now=NOW)
    assert stats["educationCount"] == 3
    assert stats["verifiedCount"] == 1
    assert stats["highestDegree"] == "PhD"
    assert stats["averageGPA"] == 3.4
    assert stats["recognizedInstitutions"] == 1
    assert len(stats["currentlyEnrolled"]) == 1


async def test_create_and_list(client):
    response = await client.post(
        "/api/education/",
        json={
            "institutionName": "MIT",
            "degree": "Master of Science",
            "fieldOfStudy": "Computer Science",
            "startDate": "2018-09-01T00:00:00Z",
            "endDate": "2020-06-01T00:00:00Z",
            "gpa": 3.8,
        },
        headers=auth_headers(),
    )
    assert response.status_code == 201
    record = response.json()["education"]
    assert record["verified"] is True
    assert record["degreeLevel"] == "Master's"
    assert record["trustScore"] == 100
    assert record["field"] == "Computer Science"

    response = await client.get("/api/education/", headers=auth_headers())
    body = response.json()
    assert len(body["education"]) == 1
    assert body["statistics"]["highestDegree"] == "Master's"


async def test_create_rejects_future_start(client):
    response = await client.post(
        "/api/education/",
        json={"institutionName": "MIT", "degree": "BSc", "startDate": "2999-01-01T00:00:00"},
        headers=auth_headers(),
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"].startswith("Education record validation failed")
    assert body["details"] == ["Start date is in the future"]


async def test_update_revalidates(client):
    created = await client.post(
        "/api/education/",
        json={"institutionName": "Local College", "degree": "BSc", "startDate": "2014-09-01T00:00:00"},
        headers=auth_headers(),
    )
    record_id = created.json()["education"]["id"]
    assert created.json()["education"]["verified"] is False

    response = await client.patch(
        f"/api/education/{record_id}",
        json={"institutionName": "University of Toronto", "degree": "PhD"},
        headers=auth_headers(),
    )
    assert response.status_code == 200
    record = response.json()["education"]
    assert record["verified"] is True
    assert record["degreeLevel"] == "PhD"
    assert record["trustScore"] == 97

    response = await client.patch(
        f"/api/education/{record_id}",
        json={"endDate": "2010-01-01T00:00:00"},
        headers=auth_headers(),
    )
    assert response.status_code == 400


async def test_ownership(client, seed):
    _, record = await seed(
        User(id="user-2"),
        EducationRecord(user_id="user-2", institution_name="MIT", degree="BSc", start_date=datetime(2010, 1, 1)),
    )

    response = await client.get(f"/api/education/{record.id}", headers=auth_headers())
    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden"}

    response = await client.delete(f"/api/education/{record.id}", headers=auth_headers("user-2"))
    assert response.status_code == 200

    response = await client.get(f"/api/education/{record.id}", headers=auth_headers("user-2"))
    assert response.status_code == 404
    assert response.json() == {"error": "Education record not found"}


async def test_unexpected_failure_returns_error_envelope(client, monkeypatch):
    async def broken(db, user_id):
        raise RuntimeError("db exploded")

    monkeypatch.setattr("credably.routes.education.get_user_education", broken)

    response = await client.get("/api/education/", headers=auth_headers())
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to fetch education records", "details": "db exploded"}


@pytest.mark.parametrize("name", ["Smith College", "Summit Academy"])
def test_short_names_do_not_match_inside_words(name):
    validation = validate_education_record(name, datetime(2015, 9, 1), now=NOW)
    assert not validation.institution_verified
    assert validation.trust_score == 50


def test_recognized_name_inside_longer_title():
    validation = validate_education_record("MIT Sloan School of Management", datetime(2015, 9, 1), now=NOW)
    assert validation.institution_verified
