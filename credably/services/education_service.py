"""
Education Record Service

Validates and stores academic credentials, recognises institutions, normalises
GPA across the common grading scales and summarises a user's education for
display. Records from a recognised institution are marked verified on create.
"""
import re
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.models.education import EducationRecord
from credably.services import sync_status
from credably.utils.errors import RecordValidationError
from credably.utils.text import mentions
from credably.utils.logger import get_logger

logger = get_logger()


RECOGNIZED_INSTITUTIONS = {
    # Top global universities
    "Harvard University": {"country": "USA", "ranking": 1, "trust_score": 100},
    "MIT": {"country": "USA", "ranking": 1, "trust_score": 100},
    "Stanford University": {"country": "USA", "ranking": 3, "trust_score": 100},
    "University of Cambridge": {"country": "UK", "ranking": 4, "trust_score": 100},
    "University of Oxford": {"country": "UK", "ranking": 5, "trust_score": 100},
    "Carnegie Mellon University": {"country": "USA", "ranking": 52, "trust_score": 98},
    "UC Berkeley": {"country": "USA", "ranking": 10, "trust_score": 99},
    "ETH Zurich": {"country": "Switzerland", "ranking": 7, "trust_score": 99},
    # India
    "IIT Bombay": {"country": "India", "ranking": 149, "trust_score": 97},
    "IIT Delhi": {"country": "India", "ranking": 197, "trust_score": 97},
    "IIT Madras": {"country": "India", "ranking": 250, "trust_score": 96},
    "IIT Kanpur": {"country": "India", "ranking": 264, "trust_score": 96},
    "IIT Kharagpur": {"country": "India", "ranking": 271, "trust_score": 96},
    "IIT Roorkee": {"country": "India", "ranking": 369, "trust_score": 95},
    "IIT Guwahati": {"country": "India", "ranking": 364, "trust_score": 95},
    "IIIT Hyderabad": {"country": "India", "ranking": 500, "trust_score": 94},
    "BITS Pilani": {"country": "India", "ranking": 500, "trust_score": 93},
    "IISc Bangalore": {"country": "India", "ranking": 225, "trust_score": 98},
    "NIT Trichy": {"country": "India", "ranking": 600, "trust_score": 92},
    "NIT Surathkal": {"country": "India", "ranking": 650, "trust_score": 92},
    "Delhi University": {"country": "India", "ranking": 500, "trust_score": 90},
    "Mumbai University": {"country": "India", "ranking": 700, "trust_score": 88},
    # Other notable universities
    "National University of Singapore": {"country": "Singapore", "ranking": 11, "trust_score": 99},
    "Tsinghua University": {"country": "China", "ranking": 12, "trust_score": 98},
    "Peking University": {"country": "China", "ranking": 14, "trust_score": 98},
    "University of Toronto": {"country": "Canada", "ranking": 21, "trust_score": 97},
    "University of Melbourne": {"country": "Australia", "ranking": 33, "trust_score": 96},
}

UNRECOGNIZED_INSTITUTION_TRUST = 50

DEGREE_HIERARCHY = {
    "High School": {"level": 1, "score": 20},
    "Diploma": {"level": 2, "score": 30},
    "Associate": {"level": 3, "score": 40},
    "Bachelor's": {"level": 4, "score": 60},
    "Master's": {"level": 5, "score": 80},
    "PhD": {"level": 6, "score": 100},
    "Doctorate": {"level": 6, "score": 100},
    "Professional Degree": {"level": 5, "score": 85},  # MD, JD
}

# Checked in order; first match wins
DEGREE_PATTERNS = [
    ("PhD", r"\b(phd|ph\.d|doctorate|doctor of philosophy)\b"),
    ("Professional Degree", r"\b(md|jd|m\.d|j\.d|doctor of medicine|juris doctor)\b"),
    ("Master's", r"\b(master|masters|msc|m\.sc|ma|mba|ms|m\.tech|mtech|meng)\b"),
    ("Bachelor's", r"\b(bachelor|bachelors|bsc|b\.sc|ba|bs|b\.tech|btech|be|b\.e|beng)\b"),
    ("Associate", r"\bassociate"),
    ("Diploma", r"\bdiploma\b"),
    ("High School", r"\b(high school|secondary)\b"),
]


@dataclass
class EducationValidation:
    is_valid: bool = True
    institution_verified: bool = False
    gpa_valid: bool = True
    dates_valid: bool = True
    accreditation_status: str = "unknown"
    trust_score: int = UNRECOGNIZED_INSTITUTION_TRUST
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def match_institution(name: str) -> Optional[Dict[str, Any]]:
    for institution, info in RECOGNIZED_INSTITUTIONS.items():
        if mentions(name, institution):
            return {"name": institution, **info}
    return None


def institution_trust_score(name: str) -> int:
    match = match_institution(name)
    return match["trust_score"] if match else UNRECOGNIZED_INSTITUTION_TRUST


def detect_degree_level(degree: str) -> str:
    """Map a free-form degree name onto DEGREE_HIERARCHY; unknown names are returned unchanged."""
    lowered = (degree or "").lower()
    for level, pattern in DEGREE_PATTERNS:
        if re.search(pattern, lowered):
            return level
    return degree


def gpa_scale(gpa: float) -> float:
    if gpa <= 4.0:
        return 4.0
    if gpa <= 10.0:
        return 10.0
    return 100.0


def gpa_percent(gpa: float) -> float:
    """GPA as a percentage of the scale it was most likely reported on."""
    return min(100.0, gpa / gpa_scale(gpa) * 100)


def normalize_gpa(gpa: float) -> float:
    """GPA on the 4.0 scale."""
    return gpa / gpa_scale(gpa) * 4.0


def validate_education_record(
    institution_name: str,
    start_date: datetime,
    end_date: Optional[datetime] = None,
    gpa: Optional[float] = None,
    now: Optional[datetime] = None,
) -> EducationValidation:
    validation = EducationValidation()
    now = now or datetime.utcnow()

    institution = match_institution(institution_name)
    if institution:
        validation.institution_verified = True
        validation.accreditation_status = "accredited"
        validation.trust_score = institution["trust_score"]
    else:
        validation.warnings.append("Institution not in recognized list - manual verification recommended")

    if start_date > now:
        validation.issues.append("Start date is in the future")
        validation.dates_valid = False

    if end_date and end_date < start_date:
        validation.issues.append("End date is before start date")
        validation.dates_valid = False

    if gpa is not None:
        if gpa < 0:
            validation.issues.append("GPA cannot be negative")
            validation.gpa_valid = False
        elif gpa > 100:
            validation.issues.append("GPA exceeds maximum possible value")
            validation.gpa_valid = False

    if end_date and validation.dates_valid:
        duration_years = (end_date - start_date).days / 365
        if duration_years < 0.5:
            validation.warnings.append("Education duration is very short (less than 6 months)")
        elif duration_years > 10:
            validation.warnings.append("Education duration is unusually long (more than 10 years)")

    if validation.issues:
        validation.is_valid = False

    return validation


async def create_education_record(
    db: AsyncSession,
    user_id: str,
    institution_name: str,
    degree: str,
    start_date: datetime,
    field_of_study: Optional[str] = None,
    end_date: Optional[datetime] = None,
    gpa: Optional[float] = None,
    credential_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> EducationRecord:
    validation = validate_education_record(institution_name, start_date, end_date, gpa)
    if not validation.is_valid:
        raise RecordValidationError(
            f"Education record validation failed: {', '.join(validation.issues)}",
            validation.issues,
        )

    record = EducationRecord(
        user_id=user_id,
        institution_name=institution_name,
        degree=degree,
        degree_level=detect_degree_level(degree),
        field=field_of_study,
        gpa=gpa,
        start_date=start_date,
        end_date=end_date,
        verified=validation.institution_verified,
        verification_source="recognized_institution" if validation.institution_verified else None,
        verification_date=datetime.utcnow() if validation.institution_verified else None,
        credential_id=credential_id,
        trust_score=validation.trust_score,
        metadata_={**(metadata or {}), "validation": validation.to_dict()},
    )
    db.add(record)
    await db.commit()
    await db.refresh(record)

    await sync_status.mark_completed(db, user_id, "education", sync_frequency="manual")
    logger.info(f"Created education record {record.id} for {user_id} (verified={record.verified})")
    return record


async def get_user_education(db: AsyncSession, user_id: str) -> List[EducationRecord]:
    result = await db.execute(
        select(EducationRecord)
        .where(EducationRecord.user_id == user_id)
        .order_by(EducationRecord.start_date.desc())
    )
    return list(result.scalars().all())


async def update_education_record(
    db: AsyncSession,
    record: EducationRecord,
    changes: Dict[str, Any],
) -> EducationRecord:
    """Apply changes and re-run validation against the merged record."""
    merged = {
        "institution_name": changes.get("institution_name", record.institution_name),
        "start_date": changes.get("start_date", record.start_date),
        "end_date": changes.get("end_date", record.end_date),
        "gpa": changes.get("gpa", record.gpa),
    }
    validation = validate_education_record(**merged)
    if not validation.is_valid:
        raise RecordValidationError(
            f"Education record validation failed: {', '.join(validation.issues)}",
            validation.issues,
        )

    for key, value in changes.items():
        if key == "field_of_study":
            record.field = value
        else:
            setattr(record, key, value)

    if "degree" in changes:
        record.degree_level = detect_degree_level(record.degree)
    if "institution_name" in changes:
        record.verified = validation.institution_verified
        record.verification_source = "recognized_institution" if validation.institution_verified else None
        record.trust_score = validation.trust_score

    record.metadata_ = {**(record.metadata_ or {}), "validation": validation.to_dict()}
    await db.commit()
    await db.refresh(record)
    return record


async def delete_education_record(db: AsyncSession, record: EducationRecord) -> None:
    await db.delete(record)
    await db.commit()


def education_statistics(records: List[EducationRecord], now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.utcnow()
    highest = None
    highest_level = 0
    for record in records:
        level = record.degree_level or detect_degree_level(record.degree)
        rank = DEGREE_HIERARCHY.get(level, {}).get("level", 0)
        if rank > highest_level:
            highest, highest_level = level, rank

    gpas = [normalize_gpa(r.gpa) for r in records if r.gpa is not None]
    current = [r for r in records if r.end_date is None or r.end_date > now]

    return {
        "educationCount": len(records),
        "verifiedCount": sum(1 for r in records if r.verified),
        "highestDegree": highest,
        "averageGPA": round(sum(gpas) / len(gpas), 2) if gpas else None,
        "recognizedInstitutions": sum(1 for r in records if match_institution(r.institution_name)),
        "currentlyEnrolled": [r.to_dict() for r in current],
    }
