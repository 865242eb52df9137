from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, Float, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from credably.database import Base


class User(Base):
    __tablename__ = "users"

    # Subject of the session token issued by the sign-in provider
    id = Column(String(64), primary_key=True)
    email = Column(String(255), nullable=True, index=True)
    name = Column(String(255), nullable=True)
    image = Column(String(500), nullable=True)
    email_verified = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "image": self.image,
            "emailVerified": self.email_verified.isoformat() if self.email_verified else None,
        }


CAREER_STAGES = ("student", "entry", "mid", "senior", "lead", "executive")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), unique=True, nullable=False, index=True)
    title = Column(String(255), nullable=True)
    company = Column(String(255), nullable=True)
    bio = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    years_experience = Column(Float, nullable=True)
    career_stage = Column(String(20), nullable=True)
    industries = Column(JSON, default=list)
    target_role = Column(String(255), nullable=True)
    linkedin_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="profile")

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "company": self.company,
            "bio": self.bio,
            "location": self.location,
            "yearsExperience": self.years_experience,
            "careerStage": self.career_stage,
            "industries": self.industries or [],
            "targetRole": self.target_role,
            "linkedinUrl": self.linkedin_url,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class ConnectedAccount(Base):
    """OAuth account linked through the sign-in flow; holds the provider token used for syncs."""

    __tablename__ = "connected_accounts"
    __table_args__ = (
        UniqueConstraint("provider", "provider_account_id", name="uq_connected_account_provider"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    provider = Column(String(50), nullable=False, index=True)
    provider_account_id = Column(String(255), nullable=False)
    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    expires_at = Column(Integer, nullable=True)
    scope = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
