from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from datetime import datetime
from credably.database import Base


VERIFICATION_LEVELS = ("basic", "verified", "premium", "elite")


class CredibilityScore(Base):
    """Latest credibility calculation for a user; overwritten on every recalculation."""

    __tablename__ = "credibility_scores"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), unique=True, nullable=False, index=True)
    overall_score = Column(Integer, nullable=False, default=0)
    education_score = Column(Integer, default=0)
    experience_score = Column(Integer, default=0)
    technical_score = Column(Integer, default=0)
    social_score = Column(Integer, default=0)
    certification_score = Column(Integer, default=0)
    verification_level = Column(String(20), nullable=False, default="basic")
    badges = Column(JSON, default=list)
    breakdown = Column(JSON, default=dict)
    calculated_at = Column(DateTime, default=datetime.utcnow)
    share_token = Column(String(32), nullable=True, index=True)
    share_expires_at = Column(DateTime, nullable=True)

    def to_dict(self):
        return {
            "overallScore": self.overall_score,
            "verificationLevel": self.verification_level,
            "scores": {
                "education": self.education_score,
                "experience": self.experience_score,
                "technical": self.technical_score,
                "social": self.social_score,
                "certifications": self.certification_score,
            },
            "breakdown": self.breakdown or {},
            "badges": self.badges or [],
            "calculatedAt": self.calculated_at.isoformat() if self.calculated_at else None,
        }
