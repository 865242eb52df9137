"""
Pydantic schemas for AI analysis output
Every OpenAI JSON response is validated against one of these before use
"""
from typing import List, Optional, Literal
from pydantic import BaseModel, Field


SkillLevel = Literal["beginner", "intermediate", "advanced", "expert"]


# ========== Content Quality ==========
class ContentQualityResult(BaseModel):
    """Single 0-100 rating of a batch of social posts"""
    score: int = Field(..., ge=0, le=100)


# ========== Skill Analysis ==========
class DetectedSkill(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: str = "Other"
    level: SkillLevel = "intermediate"
    confidence: int = Field(50, ge=0, le=100)
    reason: str = ""


class SkillRecommendation(BaseModel):
    skill: str
    priority: Literal["high", "medium", "low"] = "medium"
    reason: str = ""
    resources: List[str] = Field(default_factory=list)


class SuggestedRole(BaseModel):
    title: str
    matchScore: int = Field(0, ge=0, le=100)
    missingSkills: List[str] = Field(default_factory=list)


class CareerInsights(BaseModel):
    strengths: List[str] = Field(default_factory=list)
    gaps: List[str] = Field(default_factory=list)
    opportunities: List[str] = Field(default_factory=list)
    suggestedRoles: List[SuggestedRole] = Field(default_factory=list)


class SkillAnalysisResult(BaseModel):
    """Skills extracted from a resume, LinkedIn summary or free text"""
    skills: List[DetectedSkill] = Field(default_factory=list)
    recommendations: List[SkillRecommendation] = Field(default_factory=list)
    careerInsights: CareerInsights = Field(default_factory=CareerInsights)


# ========== Career Readiness ==========
class SkillStrength(BaseModel):
    skill: str
    analysis: str = ""


class ReadinessGap(BaseModel):
    skill: str
    currentLevel: Optional[str] = None
    requiredLevel: str = "intermediate"
    priority: Literal["high", "medium", "low"] = "medium"
    timeToLearn: str = ""


class CareerReadinessResult(BaseModel):
    readinessScore: int = Field(..., ge=0, le=100)
    strengths: List[SkillStrength] = Field(default_factory=list)
    gaps: List[ReadinessGap] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    estimatedTimeToReady: float = Field(0, ge=0, description="Months")


# ========== Learning Path ==========
class LearningResource(BaseModel):
    title: str
    type: Literal["course", "book", "tutorial", "project"] = "course"
    url: Optional[str] = None
    duration: str = ""


class Milestone(BaseModel):
    month: int = Field(..., ge=1)
    skills: List[str] = Field(default_factory=list)
    projects: List[str] = Field(default_factory=list)
    resources: List[LearningResource] = Field(default_factory=list)


class LearningPathResult(BaseModel):
    milestones: List[Milestone] = Field(..., min_length=1)
    totalHours: int = Field(0, ge=0)
    difficulty: Literal["beginner", "intermediate", "advanced"] = "intermediate"


# ========== Skill Insights ==========
class StrengthSummary(BaseModel):
    score: int = Field(0, ge=0, le=100)
    label: str = ""
    description: str = ""


class TopSkill(BaseModel):
    name: str
    demand: Literal["high", "medium", "low"] = "medium"
    growth: float = Field(0, description="Growth trend percentage")


class ReadinessSummary(BaseModel):
    score: int = Field(0, ge=0, le=100)
    readyFor: List[str] = Field(default_factory=list)
    gaps: List[str] = Field(default_factory=list)


class InsightRecommendation(BaseModel):
    type: Literal["skill", "certification", "project"] = "skill"
    title: str
    description: str = ""
    priority: Literal["high", "medium", "low"] = "medium"


class IndustryComparison(BaseModel):
    averageScore: int = 65
    userScore: int = 0
    percentile: Optional[int] = Field(None, ge=0, le=100)


class SkillInsightsResult(BaseModel):
    skillStrength: StrengthSummary = Field(default_factory=StrengthSummary)
    topSkills: List[TopSkill] = Field(default_factory=list)
    careerReadiness: ReadinessSummary = Field(default_factory=ReadinessSummary)
    recommendations: List[InsightRecommendation] = Field(default_factory=list)
    industryComparison: IndustryComparison = Field(default_factory=IndustryComparison)


# ========== Career Recommendations ==========
class SkillGap(BaseModel):
    skill: str
    currentLevel: Optional[str] = None
    requiredLevel: str = "intermediate"
    priority: Literal["critical", "important", "nice-to-have"] = "important"
    timeToLearn: str = ""


class MatchingSkill(BaseModel):
    skill: str
    level: str = ""
    source: str = ""


class RecommendedResource(BaseModel):
    type: Literal["course", "certification", "tool", "book", "project"] = "course"
    platform: str = ""
    title: str
    url: Optional[str] = None
    provider: str = ""
    duration: str = ""
    cost: str = ""
    difficulty: Literal["beginner", "intermediate", "advanced"] = "intermediate"
    skillsGained: List[str] = Field(default_factory=list)
    relevanceScore: int = Field(0, ge=0, le=100)


class CareerRecommendation(BaseModel):
    role: str = Field(..., min_length=1, max_length=255)
    readinessScore: int = Field(..., ge=0, le=100)
    estimatedWeeks: int = Field(0, ge=0)
    skillGaps: List[SkillGap] = Field(default_factory=list)
    matchingSkills: List[MatchingSkill] = Field(default_factory=list)
    resources: List[RecommendedResource] = Field(default_factory=list)
    reasoning: str = ""
    priority: int = Field(3, ge=1, le=5)


class CareerRecommendationsResult(BaseModel):
    recommendations: List[CareerRecommendation] = Field(default_factory=list)
