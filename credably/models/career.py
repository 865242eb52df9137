from sqlalchemy import Column, Integer, String, DateTime, Text, Float, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from credably.database import Base


SUGGESTION_STATUSES = {"active", "pursuing", "achieved", "dismissed"}
RESOURCE_STATUSES = {"suggested", "bookmarked", "in-progress", "completed", "dismissed"}


class CareerSuggestion(Base):
    __tablename__ = "career_suggestions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    reasoning = Column(Text, nullable=True)
    readiness_score = Column(Integer, default=0)
    skill_gaps = Column(JSON, default=list)
    matching_skills = Column(JSON, default=list)
    salary_range = Column(JSON, nullable=True)
    market_demand = Column(String(20), nullable=True)
    growth_potential = Column(String(20), nullable=True)
    estimated_time = Column(String(50), nullable=True)
    estimated_weeks = Column(Integer, nullable=True)
    priority = Column(Integer, default=1)
    confidence = Column(Integer, default=0)
    status = Column(String(20), default="active")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    resources = relationship(
        "ResourceRecommendation",
        back_populates="suggestion",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "reasoning": self.reasoning,
            "readinessScore": self.readiness_score,
            "skillGaps": self.skill_gaps or [],
            "matchingSkills": self.matching_skills or [],
            "salaryRange": self.salary_range,
            "marketDemand": self.market_demand,
            "growthPotential": self.growth_potential,
            "estimatedTime": self.estimated_time,
            "estimatedWeeks": self.estimated_weeks,
            "priority": self.priority,
            "confidence": self.confidence,
            "status": self.status,
            "resources": [r.to_dict() for r in self.resources],
        }


class ResourceRecommendation(Base):
    __tablename__ = "resource_recommendations"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    suggestion_id = Column(Integer, ForeignKey("career_suggestions.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    type = Column(String(50), nullable=True)
    platform = Column(String(255), nullable=True)
    provider = Column(String(255), nullable=True)
    url = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    duration = Column(String(100), nullable=True)
    cost = Column(String(100), nullable=True)
    difficulty = Column(String(20), nullable=True)
    relevance_score = Column(Integer, nullable=True)
    skills = Column(JSON, default=list)
    status = Column(String(20), default="suggested")
    created_at = Column(DateTime, default=datetime.utcnow)

    suggestion = relationship("CareerSuggestion", back_populates="resources")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "platform": self.platform,
            "provider": self.provider,
            "url": self.url,
            "description": self.description,
            "duration": self.duration,
            "cost": self.cost,
            "difficulty": self.difficulty,
            "relevanceScore": self.relevance_score,
            "skills": self.skills or [],
            "status": self.status,
        }


LEARNING_PATH_STATUSES = {"not_started", "in_progress", "completed", "abandoned"}


class LearningPath(Base):
    __tablename__ = "learning_paths"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    target_role = Column(String(255), nullable=True)
    estimated_weeks = Column(Integer, nullable=True)
    difficulty = Column(String(20), nullable=True)
    status = Column(String(20), default="not_started")
    progress = Column(Float, default=0)
    milestones = Column(JSON, default=list)
    resources = Column(JSON, default=list)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "title": self.title or self.name,
            "description": self.description,
            "targetRole": self.target_role,
            "estimatedWeeks": self.estimated_weeks,
            "difficulty": self.difficulty,
            "status": self.status,
            "progress": self.progress,
            "milestones": self.milestones or [],
            "resources": self.resources or [],
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
