# Database models package
from credably.models.user import User, Profile, ConnectedAccount
from credably.models.skill import Skill, UserSkill
from credably.models.social_profile import GitHubProfile, SocialProfile
from credably.models.data_source_sync import DataSourceSync
from credably.models.credibility_score import CredibilityScore
from credably.models.education import EducationRecord
from credably.models.certification import Certification
from credably.models.career import CareerSuggestion, ResourceRecommendation, LearningPath

__all__ = [
    "User",
    "Profile",
    "ConnectedAccount",
    "Skill",
    "UserSkill",
    "GitHubProfile",
    "SocialProfile",
    "DataSourceSync",
    "CredibilityScore",
    "EducationRecord",
    "Certification",
    "CareerSuggestion",
    "ResourceRecommendation",
    "LearningPath",
]
