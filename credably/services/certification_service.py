"""
Certification Service

Validates certificates against a list of trusted issuers, extracts the skills
a certificate evidences, stores certification records and summarises them.
"""
import json
from collections import Counter
from dataclasses import dataclass, field, asdict
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.models.certification import Certification
from credably.services import sync_status
from credably.utils.errors import RecordValidationError
from credably.utils.text import mentions
from credably.utils.logger import get_logger

logger = get_logger()


TRUSTED_ISSUERS = {
    # Online learning platforms
    "Coursera": {"domain": "coursera.org", "verification_url": "https://www.coursera.org/account/accomplishments/verify/", "trust_score": 90, "type": "online_learning"},
    "edX": {"domain": "edx.org", "verification_url": "https://credentials.edx.org/credentials/", "trust_score": 90, "type": "online_learning"},
    "Udacity": {"domain": "udacity.com", "verification_url": "https://graduation.udacity.com/confirm/", "trust_score": 85, "type": "online_learning"},
    "Udemy": {"domain": "udemy.com", "verification_url": "https://www.udemy.com/certificate/", "trust_score": 70, "type": "online_learning"},
    "LinkedIn Learning": {"domain": "linkedin.com", "verification_url": "https://www.linkedin.com/learning/certificates/", "trust_score": 75, "type": "online_learning"},
    # Cloud providers
    "AWS": {"domain": "aws.amazon.com", "verification_url": "https://aws.amazon.com/verification", "trust_score": 95, "type": "cloud_certification"},
    "Amazon Web Services": {"domain": "aws.amazon.com", "verification_url": "https://aws.amazon.com/verification", "trust_score": 95, "type": "cloud_certification"},
    "Google Cloud": {"domain": "cloud.google.com", "verification_url": "https://www.credential.net/profile/", "trust_score": 95, "type": "cloud_certification"},
    "Microsoft": {"domain": "microsoft.com", "verification_url": "https://learn.microsoft.com/en-us/users/", "trust_score": 95, "type": "cloud_certification"},
    # Professional bodies
    "Project Management Institute": {"domain": "pmi.org", "verification_url": "https://www.pmi.org/certifications/certification-resources/registry", "trust_score": 98, "type": "professional_certification"},
    "PMI": {"domain": "pmi.org", "verification_url": "https://www.pmi.org/certifications/certification-resources/registry", "trust_score": 98, "type": "professional_certification"},
    "CompTIA": {"domain": "comptia.org", "verification_url": "https://www.certmetrics.com/comptia/public/verification.aspx", "trust_score": 92, "type": "technical_certification"},
    "Cisco": {"domain": "cisco.com", "verification_url": "https://www.cisco.com/c/en/us/training-events/training-certifications/verify-certification.html", "trust_score": 94, "type": "technical_certification"},
    "Oracle": {"domain": "oracle.com", "verification_url": "https://education.oracle.com/pls/certview/sharebadge", "trust_score": 93, "type": "technical_certification"},
    # Academic
    "Harvard University": {"domain": "harvard.edu", "verification_url": None, "trust_score": 100, "type": "academic"},
    "MIT": {"domain": "mit.edu", "verification_url": None, "trust_score": 100, "type": "academic"},
    "Stanford University": {"domain": "stanford.edu", "verification_url": None, "trust_score": 100, "type": "academic"},
}

UNKNOWN_ISSUER_TRUST = 50
EXPIRED_PENALTY = 20
CREDENTIAL_URL_BONUS = 10

CERTIFICATE_SKILL_KEYWORDS = {
    # Programming languages
    "JavaScript": ["javascript", "ecmascript", "node.js", "nodejs"],
    "Python": ["python", "django", "flask", "pandas", "numpy"],
    "Java": ["java ", "java,", "spring", "hibernate", "maven", "gradle"],
    "TypeScript": ["typescript"],
    "C++": ["c++", "cpp"],
    "C#": ["c#", "csharp", ".net"],
    "Go": ["golang", "go programming"],
    "Rust": ["rust programming"],
    "Ruby": ["ruby", "rails"],
    "PHP": ["php", "laravel", "symfony"],
    # Cloud & DevOps
    "AWS": ["aws", "amazon web services", "ec2", "lambda"],
    "Azure": ["azure"],
    "Google Cloud": ["gcp", "google cloud"],
    "Docker": ["docker", "containerization"],
    "Kubernetes": ["kubernetes", "k8s"],
    "CI/CD": ["ci/cd", "continuous integration", "jenkins", "gitlab ci"],
    "Terraform": ["terraform", "infrastructure as code"],
    # Data & AI
    "Machine Learning": ["machine learning", "deep learning"],
    "Data Science": ["data science", "data analysis", "data analytics"],
    "Artificial Intelligence": ["artificial intelligence"],
    "TensorFlow": ["tensorflow"],
    "PyTorch": ["pytorch"],
    "SQL": ["sql", "mysql", "postgresql", "database"],
    # Web development
    "React": ["react"],
    "Angular": ["angular"],
    "Vue.js": ["vue.js", "vuejs", "vue "],
    "Node.js": ["node.js", "nodejs", "express"],
    "Next.js": ["next.js", "nextjs"],
    # Project management
    "Agile": ["agile", "scrum", "kanban"],
    "PMP": ["pmp", "project management professional"],
    "Scrum Master": ["scrum master", "csm", "psm"],
    # Security
    "Cybersecurity": ["cybersecurity", "information security", "infosec", "security+"],
    "Ethical Hacking": ["ethical hacking", "penetration testing", "pentesting"],
    "CISSP": ["cissp", "certified information systems security"],
    # Design
    "UX Design": ["ux design", "user experience", "ux/ui"],
    "UI Design": ["ui design", "user interface"],
    "Figma": ["figma"],
    # Business
    "Digital Marketing": ["digital marketing", "seo", "sem "],
    "Product Management": ["product management", "product manager"],
    "Business Analytics": ["business analytics", "business intelligence"],
    "Finance": ["finance", "financial analysis", "accounting"],
}


@dataclass
class CertificateValidation:
    is_valid: bool = True
    issuer_verified: bool = False
    date_valid: bool = True
    credential_verified: bool = False
    trust_score: int = 0
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def match_issuer(issuer: str) -> Optional[Dict[str, Any]]:
    for name, info in TRUSTED_ISSUERS.items():
        if mentions(issuer, name):
            return {"name": name, **info}
    return None


def issuer_trust_score(issuer: str) -> int:
    info = match_issuer(issuer)
    return info["trust_score"] if info else UNKNOWN_ISSUER_TRUST


def validate_certificate(
    issuer: str,
    issue_date: datetime,
    expiry_date: Optional[datetime] = None,
    credential_id: Optional[str] = None,
    credential_url: Optional[str] = None,
    now: Optional[datetime] = None,
) -> CertificateValidation:
    validation = CertificateValidation()
    now = now or datetime.utcnow()

    info = match_issuer(issuer)
    if info:
        validation.issuer_verified = True
        validation.trust_score = info["trust_score"]
    else:
        validation.warnings.append("Issuer not in trusted list - manual verification required")
        validation.trust_score = UNKNOWN_ISSUER_TRUST

    if issue_date > now:
        validation.issues.append("Issue date is in the future")
        validation.date_valid = False

    if expiry_date:
        if expiry_date < now:
            validation.warnings.append("Certificate has expired")
            validation.trust_score = max(0, validation.trust_score - EXPIRED_PENALTY)
        if expiry_date < issue_date:
            validation.issues.append("Expiry date is before issue date")
            validation.date_valid = False

    if credential_url and info:
        if info["verification_url"] and info["domain"] in credential_url:
            validation.credential_verified = True
            validation.trust_score = min(100, validation.trust_score + CREDENTIAL_URL_BONUS)
    elif credential_id and not credential_url:
        validation.warnings.append("Credential ID provided but no verification URL")

    if validation.issues:
        validation.is_valid = False
        validation.trust_score = 0

    return validation


def extract_skills(name: str, issuer: str, metadata: Optional[Dict[str, Any]] = None) -> List[str]:
    search_text = f" {name} {issuer} {json.dumps(metadata or {})} ".lower()
    return [
        skill
        for skill, keywords in CERTIFICATE_SKILL_KEYWORDS.items()
        if any(keyword in search_text for keyword in keywords)
    ]


async def create_certification(
    db: AsyncSession,
    user_id: str,
    name: str,
    issuer: str,
    issue_date: datetime,
    expiry_date: Optional[datetime] = None,
    credential_id: Optional[str] = None,
    credential_url: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> Certification:
    validation = validate_certificate(issuer, issue_date, expiry_date, credential_id, credential_url)
    if not validation.is_valid:
        raise RecordValidationError(
            f"Certificate validation failed: {', '.join(validation.issues)}",
            validation.issues,
        )

    verified = validation.issuer_verified and validation.credential_verified
    certification = Certification(
        user_id=user_id,
        name=name,
        issuer=issuer,
        issue_date=issue_date,
        expiry_date=expiry_date,
        credential_id=credential_id,
        credential_url=credential_url,
        verified=verified,
        verification_method="trusted_issuer" if verified else "manual_review",
        verification_date=datetime.utcnow() if verified else None,
        trust_score=validation.trust_score,
        skills=extract_skills(name, issuer, metadata),
        metadata_={**(metadata or {}), "validation": validation.to_dict()},
    )
    db.add(certification)
    await db.commit()
    await db.refresh(certification)

    await sync_status.mark_completed(db, user_id, "certifications", sync_frequency="manual")
    logger.info(f"Created certification {certification.id} for {user_id} (verified={verified})")
    return certification


async def get_user_certifications(db: AsyncSession, user_id: str) -> List[Certification]:
    result = await db.execute(
        select(Certification)
        .where(Certification.user_id == user_id)
        .order_by(Certification.issue_date.desc())
    )
    return list(result.scalars().all())


async def get_expiring_certifications(
    db: AsyncSession,
    user_id: str,
    days: int = 90,
) -> List[Certification]:
    now = datetime.utcnow()
    result = await db.execute(
        select(Certification)
        .where(
            Certification.user_id == user_id,
            Certification.expiry_date.is_not(None),
            Certification.expiry_date >= now,
            Certification.expiry_date <= now + timedelta(days=days),
        )
        .order_by(Certification.expiry_date.asc())
    )
    return list(result.scalars().all())


async def verify_certification(
    db: AsyncSession,
    certification: Certification,
    verified: bool,
    method: str = "manual_review",
) -> Certification:
    certification.verified = verified
    certification.verification_method = method
    certification.verification_date = datetime.utcnow() if verified else None
    await db.commit()
    await db.refresh(certification)
    return certification


async def delete_certification(db: AsyncSession, certification: Certification) -> None:
    await db.delete(certification)
    await db.commit()


def certification_score(certifications: List[Certification], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Summary score out of 100: count, verification, recency and skill diversity."""
    now = now or datetime.utcnow()
    if not certifications:
        return {
            "certificationCount": 0,
            "verifiedCount": 0,
            "trustedIssuers": 0,
            "recentCertifications": 0,
            "diversityScore": 0,
            "overallScore": 0,
        }

    count = len(certifications)
    verified = sum(1 for c in certifications if c.verified)
    trusted = sum(1 for c in certifications if match_issuer(c.issuer))
    cutoff = now - timedelta(days=730)
    recent = sum(1 for c in certifications if c.issue_date and c.issue_date >= cutoff)
    distinct_skills = {skill for c in certifications for skill in (c.skills or [])}
    diversity = min(20, len(distinct_skills) * 10 / 5)

    overall = (
        min(30, count * 6)
        + (verified / count) * 30
        + min(20, recent * 10)
        + diversity
    )
    return {
        "certificationCount": count,
        "verifiedCount": verified,
        "trustedIssuers": trusted,
        "recentCertifications": recent,
        "diversityScore": round(diversity, 1),
        "overallScore": round(min(100, overall)),
    }


def certification_statistics(certifications: List[Certification]) -> Dict[str, Any]:
    by_type: Counter = Counter()
    by_issuer: Counter = Counter()
    by_year: Counter = Counter()
    for cert in certifications:
        info = match_issuer(cert.issuer)
        by_type[info["type"] if info else "other"] += 1
        by_issuer[cert.issuer] += 1
        if cert.issue_date:
            by_year[str(cert.issue_date.year)] += 1

    return {
        "total": len(certifications),
        "verified": sum(1 for c in certifications if c.verified),
        "byType": dict(by_type),
        "byIssuer": dict(by_issuer),
        "byYear": dict(by_year),
    }
