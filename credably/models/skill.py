import re

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Float, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from credably.database import Base


SKILL_LEVELS = ("beginner", "intermediate", "advanced", "expert")
SKILL_SOURCES = ("resume", "github", "manual", "ai-analysis")


SLUG_SYMBOLS = {"+": " plus ", "#": " sharp "}


def slugify(name: str) -> str:
    """C, C++ and C# must not collapse to the same slug"""
    name = name.lower()
    for symbol, word in SLUG_SYMBOLS.items():
        name = name.replace(symbol, word)
    return re.sub(r"[^a-z0-9]+", "-", name).strip("-")


class Skill(Base):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    category = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class UserSkill(Base):
    __tablename__ = "user_skills"
    __table_args__ = (
        UniqueConstraint("user_id", "skill_id", name="uq_user_skill"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    skill_id = Column(Integer, ForeignKey("skills.id"), nullable=False)
    proficiency_score = Column(Integer, default=50)
    level = Column(String(20), default="intermediate")
    source = Column(String(20), default="manual")
    verified = Column(Boolean, default=False)
    years_experience = Column(Float, nullable=True)
    evidence = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    skill = relationship("Skill", lazy="joined")

    def to_dict(self):
        return {
            "id": self.id,
            "skillId": self.skill_id,
            "name": self.skill.name if self.skill else None,
            "category": self.skill.category if self.skill else None,
            "proficiencyScore": self.proficiency_score,
            "level": self.level,
            "source": self.source,
            "verified": self.verified,
            "yearsExperience": self.years_experience,
            "evidence": self.evidence,
        }
