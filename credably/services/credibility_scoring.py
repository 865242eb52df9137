"""
Credibility Scoring Service

Combines five category scores into a single 0-100 credibility score:

    education       0.25
    experience      0.30
    technical       0.20
    social          0.15
    certifications  0.10

Each category scorer is a pure function over the aggregated user data and
returns a CategoryScore whose score is the flat average of its named
sub-factors (each 0-100). The weighted combiner rounds half-up, so 76.5
becomes 77 rather than Python's banker's 76.

The result is persisted to the single credibility_scores row per user,
overwriting the previous calculation.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.models.user import User, Profile
from credably.models.skill import UserSkill
from credably.models.social_profile import GitHubProfile, SocialProfile
from credably.models.education import EducationRecord
from credably.models.certification import Certification
from credably.models.credibility_score import CredibilityScore
from credably.services.education_service import (
    DEGREE_HIERARCHY,
    detect_degree_level,
    gpa_percent,
    institution_trust_score,
)
from credably.services.certification_service import issuer_trust_score
from credably.utils.logger import get_logger

logger = get_logger()


CATEGORY_WEIGHTS: Dict[str, Decimal] = {
    "education": Decimal("0.25"),
    "experience": Decimal("0.30"),
    "technical": Decimal("0.20"),
    "social": Decimal("0.15"),
    "certifications": Decimal("0.10"),
}

# (minimum score, level), checked from the top
VERIFICATION_THRESHOLDS = [
    (90, "elite"),
    (75, "premium"),
    (60, "verified"),
]

CAREER_STAGE_SCORES = {
    "student": 10,
    "entry": 25,
    "mid": 50,
    "senior": 70,
    "lead": 85,
    "executive": 100,
}

# No LinkedIn API feed exists; used when the user has other social profiles but no LinkedIn row
LINKEDIN_CONNECTIONS_FALLBACK = 50

RECENT_CERTIFICATION_DAYS = 730


@dataclass
class CategoryScore:
    score: int
    weight: float
    factors: Dict[str, int]

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "weight": self.weight, "factors": dict(self.factors)}


@dataclass
class ScoringInput:
    """Everything the category scorers read, gathered once per calculation."""

    profile: Optional[Any] = None
    skills: List[Any] = field(default_factory=list)
    github: Optional[Any] = None
    social_profiles: List[Any] = field(default_factory=list)
    education: List[Any] = field(default_factory=list)
    certifications: List[Any] = field(default_factory=list)
    email_verified: bool = False
    now: datetime = field(default_factory=datetime.utcnow)


@dataclass
class CredibilityResult:
    overall_score: int
    verification_level: str
    categories: Dict[str, CategoryScore]
    badges: List[Dict[str, Any]]

    def breakdown(self) -> Dict[str, Any]:
        return {name: category.to_dict() for name, category in self.categories.items()}


def round_half_up(value) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def _category(name: str, factors: Dict[str, float]) -> CategoryScore:
    rounded = {key: round_half_up(_clamp(value)) for key, value in factors.items()}
    score = round_half_up(Decimal(sum(rounded.values())) / len(rounded)) if rounded else 0
    return CategoryScore(score=score, weight=float(CATEGORY_WEIGHTS[name]), factors=rounded)


# ---------------------------------------------------------------------------
# Category scorers
# ---------------------------------------------------------------------------

def score_education(data: ScoringInput) -> CategoryScore:
    records = data.education
    if not records:
        return _category("education", {
            "Degree Level": 0,
            "Institution Reputation": 0,
            "Academic Performance": 0,
            "Verification Status": 0,
        })

    degree_scores = []
    for record in records:
        level = record.degree_level or detect_degree_level(record.degree)
        degree_scores.append(DEGREE_HIERARCHY.get(level, {}).get("score", 0))

    gpas = [gpa_percent(r.gpa) for r in records if r.gpa is not None]
    verified = sum(1 for r in records if r.verified)

    return _category("education", {
        "Degree Level": max(degree_scores),
        "Institution Reputation": max(institution_trust_score(r.institution_name) for r in records),
        "Academic Performance": max(gpas) if gpas else 0,
        "Verification Status": verified / len(records) * 100,
    })


def score_experience(data: ScoringInput) -> CategoryScore:
    profile = data.profile
    if profile is None:
        return _category("experience", {
            "Years of Experience": 0,
            "Role Seniority": 0,
            "Professional Summary": 0,
            "Role Details": 0,
        })

    summary = 0
    if profile.bio:
        summary = 60
        if len(profile.bio) >= 200:
            summary += 40

    details = 0
    if profile.title:
        details += 35
    if profile.company:
        details += 35
    if profile.location:
        details += 30

    return _category("experience", {
        "Years of Experience": min(100, (profile.years_experience or 0) * 10),
        "Role Seniority": CAREER_STAGE_SCORES.get(profile.career_stage or "", 0),
        "Professional Summary": summary,
        "Role Details": details,
    })


def score_technical(data: ScoringInput) -> CategoryScore:
    github = data.github
    activity = 0.0
    quality = 0.0
    languages = 0
    if github is not None:
        volume = (
            min(20, (github.total_repos or 0) * 0.5)
            + min(15, (github.total_commits or 0) * 0.001)
            + min(10, (github.total_prs or 0) * 0.5)
            + min(10, (github.total_stars or 0) * 0.1)
        )
        activity = volume / 55 * 100
        quality = github.code_quality_score or 0
        languages = len(github.languages_used or {})

    verified_skills = sum(1 for s in data.skills if s.verified)

    return _category("technical", {
        "GitHub Activity": activity,
        "Code Quality": quality,
        "Tech Stack Breadth": min(100, languages * 20),
        "Verified Skills": min(100, verified_skills / 5 * 100),
    })


def score_social(data: ScoringInput) -> CategoryScore:
    profiles = data.social_profiles
    if not profiles:
        return _category("social", {
            "Audience Reach": 0,
            "Engagement": 0,
            "Platform Presence": 0,
            "LinkedIn Connections": 0,
        })

    total_followers = sum(p.follower_count or 0 for p in profiles)
    avg_engagement = sum(p.engagement_rate or 0 for p in profiles) / len(profiles)

    linkedin = next((p for p in profiles if p.platform == "linkedin"), None)
    if linkedin is not None:
        connections = min(100, (linkedin.follower_count or 0) / 5)
    else:
        connections = LINKEDIN_CONNECTIONS_FALLBACK

    return _category("social", {
        "Audience Reach": min(100, math.log10(total_followers + 1) * 20),
        "Engagement": min(100, avg_engagement * 10),
        "Platform Presence": min(100, len(profiles) * 25),
        "LinkedIn Connections": connections,
    })


def score_certifications(data: ScoringInput) -> CategoryScore:
    certs = data.certifications
    if not certs:
        return _category("certifications", {
            "Number of Certs": 0,
            "Verification Rate": 0,
            "Cert Recency": 0,
            "Issuer Reputation": 0,
        })

    cutoff = data.now - timedelta(days=RECENT_CERTIFICATION_DAYS)
    recent = sum(1 for c in certs if c.issue_date and c.issue_date >= cutoff)
    verified = sum(1 for c in certs if c.verified)

    return _category("certifications", {
        "Number of Certs": min(100, len(certs) * 20),
        "Verification Rate": verified / len(certs) * 100,
        "Cert Recency": min(100, recent * 50),
        "Issuer Reputation": sum(issuer_trust_score(c.issuer) for c in certs) / len(certs),
    })


CATEGORY_SCORERS = {
    "education": score_education,
    "experience": score_experience,
    "technical": score_technical,
    "social": score_social,
    "certifications": score_certifications,
}


# ---------------------------------------------------------------------------
# Combiner, level and badges
# ---------------------------------------------------------------------------

def combine_scores(scores: Dict[str, Any]) -> int:
    """Weighted sum of category scores, rounded half-up and clamped to 0-100.

    Accepts either plain numbers or CategoryScore values keyed by category name.
    """
    total = Decimal(0)
    for name, weight in CATEGORY_WEIGHTS.items():
        value = scores.get(name, 0)
        if isinstance(value, CategoryScore):
            value = value.score
        total += Decimal(str(value)) * weight
    return int(_clamp(round_half_up(total)))


def verification_level(score: int) -> str:
    for minimum, level in VERIFICATION_THRESHOLDS:
        if score >= minimum:
            return level
    return "basic"


BADGE_RULES = [
    ("academic-excellence", "Academic Excellence", "Holds a master's level degree or higher",
     lambda c, d: c["education"].factors["Degree Level"] >= 80),
    ("top-institution", "Top Institution Graduate", "Studied at a top-ranked recognised institution",
     lambda c, d: c["education"].factors["Institution Reputation"] >= 95),
    ("industry-veteran", "Industry Veteran", "10+ years of professional experience",
     lambda c, d: c["experience"].factors["Years of Experience"] >= 100),
    ("leadership-role", "Leadership Role", "Holds a lead or executive position",
     lambda c, d: c["experience"].factors["Role Seniority"] >= 85),
    ("active-developer", "Active Developer", "Sustained public GitHub activity",
     lambda c, d: c["technical"].factors["GitHub Activity"] >= 70),
    ("polyglot-developer", "Polyglot Developer", "Writes code in four or more languages",
     lambda c, d: c["technical"].factors["Tech Stack Breadth"] >= 80),
    ("code-quality-champion", "Code Quality Champion", "High code quality across repositories",
     lambda c, d: c["technical"].factors["Code Quality"] >= 80),
    ("social-influencer", "Social Influencer", "Large combined social audience",
     lambda c, d: c["social"].factors["Audience Reach"] >= 80),
    ("multi-platform", "Multi-Platform Presence", "Active on three or more platforms",
     lambda c, d: c["social"].factors["Platform Presence"] >= 75),
    ("certified-professional", "Certified Professional", "Every certification is verified",
     lambda c, d: bool(d.certifications) and c["certifications"].factors["Verification Rate"] >= 100),
    ("elite-certification", "Elite Certification Holder", "Certifications from top-tier issuers",
     lambda c, d: c["certifications"].factors["Issuer Reputation"] >= 95),
    ("complete-profile", "Complete Profile", "Data present in every credibility category",
     lambda c, d: all(category.score > 0 for category in c.values())),
]


def assign_badges(categories: Dict[str, CategoryScore], data: ScoringInput) -> List[Dict[str, Any]]:
    earned_at = data.now.isoformat()
    return [
        {"id": badge_id, "name": name, "description": description, "earnedAt": earned_at}
        for badge_id, name, description, rule in BADGE_RULES
        if rule(categories, data)
    ]


def compute_credibility(data: ScoringInput) -> CredibilityResult:
    categories = {name: scorer(data) for name, scorer in CATEGORY_SCORERS.items()}
    overall = combine_scores(categories)
    return CredibilityResult(
        overall_score=overall,
        verification_level=verification_level(overall),
        categories=categories,
        badges=assign_badges(categories, data),
    )


def data_completeness(data: ScoringInput) -> Dict[str, Any]:
    """Share of the nine profile signals a user has filled in."""
    profile = data.profile
    checks = {
        "title": bool(profile and profile.title),
        "company": bool(profile and profile.company),
        "bio": bool(profile and profile.bio),
        "location": bool(profile and profile.location),
        "education": len(data.education) > 0,
        "certifications": len(data.certifications) > 0,
        "skills": len(data.skills) >= 5,
        "github": data.github is not None,
        "emailVerified": data.email_verified,
    }
    completed = sum(1 for ok in checks.values() if ok)
    return {
        "percentage": round_half_up(completed / len(checks) * 100),
        "completed": completed,
        "total": len(checks),
        "missing": [name for name, ok in checks.items() if not ok],
    }


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

async def gather_scoring_input(db: AsyncSession, user_id: str) -> ScoringInput:
    user = await db.get(User, user_id)
    profile = (await db.execute(
        select(Profile).where(Profile.user_id == user_id)
    )).scalar_one_or_none()
    skills = (await db.execute(
        select(UserSkill).where(UserSkill.user_id == user_id)
    )).scalars().unique().all()
    github = (await db.execute(
        select(GitHubProfile).where(GitHubProfile.user_id == user_id)
    )).scalar_one_or_none()
    social = (await db.execute(
        select(SocialProfile).where(SocialProfile.user_id == user_id)
    )).scalars().all()
    education = (await db.execute(
        select(EducationRecord).where(EducationRecord.user_id == user_id)
    )).scalars().all()
    certifications = (await db.execute(
        select(Certification).where(Certification.user_id == user_id)
    )).scalars().all()

    return ScoringInput(
        profile=profile,
        skills=list(skills),
        github=github,
        social_profiles=list(social),
        education=list(education),
        certifications=list(certifications),
        email_verified=bool(user and user.email_verified),
    )


async def calculate_credibility_score(db: AsyncSession, user_id: str) -> Dict[str, Any]:
    """Recalculate and store the user's credibility score."""
    data = await gather_scoring_input(db, user_id)
    result = compute_credibility(data)

    row = (await db.execute(
        select(CredibilityScore).where(CredibilityScore.user_id == user_id)
    )).scalar_one_or_none()
    if row is None:
        row = CredibilityScore(user_id=user_id)
        db.add(row)

    row.overall_score = result.overall_score
    row.education_score = result.categories["education"].score
    row.experience_score = result.categories["experience"].score
    row.technical_score = result.categories["technical"].score
    row.social_score = result.categories["social"].score
    row.certification_score = result.categories["certifications"].score
    row.verification_level = result.verification_level
    row.badges = result.badges
    row.breakdown = result.breakdown()
    row.calculated_at = data.now
    await db.commit()

    logger.info(
        f"Credibility score for {user_id}: {result.overall_score} ({result.verification_level})"
    )
    return row.to_dict()


async def get_user_credibility_score(
    db: AsyncSession,
    user_id: str,
    force_recalculate: bool = False,
) -> Dict[str, Any]:
    """Stored score, or a fresh calculation when none exists or one is forced."""
    if not force_recalculate:
        row = (await db.execute(
            select(CredibilityScore).where(CredibilityScore.user_id == user_id)
        )).scalar_one_or_none()
        if row is not None:
            return row.to_dict()

    return await calculate_credibility_score(db, user_id)
