from sqlalchemy import Column, Integer, String, DateTime, Boolean, Float, ForeignKey, JSON, UniqueConstraint
from datetime import datetime
from credably.database import Base


class GitHubProfile(Base):
    __tablename__ = "github_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), unique=True, nullable=False, index=True)
    username = Column(String(255), nullable=False)
    profile_url = Column(String(500), nullable=True)
    total_repos = Column(Integer, default=0)
    total_commits = Column(Integer, default=0)
    total_prs = Column(Integer, default=0)
    total_issues = Column(Integer, default=0)
    total_stars = Column(Integer, default=0)
    languages_used = Column(JSON, default=dict)  # {language: percent}
    contribution_score = Column(Float, default=0)
    consistency_score = Column(Float, default=0)
    code_quality_score = Column(Float, default=0)
    top_repos = Column(JSON, default=list)
    contribution_graph = Column(JSON, default=dict)
    last_synced_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "username": self.username,
            "profileUrl": self.profile_url,
            "totalRepos": self.total_repos,
            "totalCommits": self.total_commits,
            "totalPRs": self.total_prs,
            "totalIssues": self.total_issues,
            "totalStars": self.total_stars,
            "languagesUsed": self.languages_used or {},
            "contributionScore": self.contribution_score,
            "consistencyScore": self.consistency_score,
            "codeQualityScore": self.code_quality_score,
            "topRepos": self.top_repos or [],
            "lastSyncedAt": self.last_synced_at.isoformat() if self.last_synced_at else None,
        }


SOCIAL_PLATFORMS = ("twitter", "instagram", "youtube", "linkedin")


class SocialProfile(Base):
    __tablename__ = "social_profiles"
    __table_args__ = (
        UniqueConstraint("user_id", "platform", name="uq_social_profile_platform"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    platform = Column(String(50), nullable=False)
    username = Column(String(255), nullable=True)
    profile_url = Column(String(500), nullable=True)
    follower_count = Column(Integer, default=0)
    following_count = Column(Integer, default=0)
    post_count = Column(Integer, default=0)
    engagement_rate = Column(Float, default=0)
    influence_score = Column(Float, default=0)
    content_quality_score = Column(Float, default=0)
    verified = Column(Boolean, default=False)
    metrics = Column(JSON, default=dict)
    last_synced_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            "platform": self.platform,
            "username": self.username,
            "profileUrl": self.profile_url,
            "followerCount": self.follower_count,
            "followingCount": self.following_count,
            "postCount": self.post_count,
            "engagementRate": self.engagement_rate,
            "influenceScore": self.influence_score,
            "contentQualityScore": self.content_quality_score,
            "verified": self.verified,
            "metrics": self.metrics or {},
            "lastSyncedAt": self.last_synced_at.isoformat() if self.last_synced_at else None,
        }
