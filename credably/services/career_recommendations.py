"""
AI-Powered Career Recommendation Service

Generates personalized career suggestions from the user's aggregated skills
(manual/AI skills, GitHub languages and certification skills), profile and
education, and stores each suggestion with its learning resources.
"""
import math
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.config import get_settings
from credably.models.career import (
    CareerSuggestion,
    ResourceRecommendation,
    RESOURCE_STATUSES,
    SUGGESTION_STATUSES,
)
from credably.models.certification import Certification
from credably.models.education import EducationRecord
from credably.models.skill import UserSkill
from credably.models.social_profile import GitHubProfile
from credably.models.user import Profile
from credably.schemas.analysis import CareerRecommendation, CareerRecommendationsResult
from credably.services import openai_client
from credably.utils.errors import RecordValidationError
from credably.utils.logger import get_logger

logger = get_logger()

RECOMMENDATION_COUNT = 5
CERTIFICATION_SKILL_PROFICIENCY = 70


async def aggregate_user_skills(db: AsyncSession, user_id: str) -> List[Dict[str, Any]]:
    """User skills first; GitHub languages and certification skills fill in names not already present."""
    user_skills = (await db.execute(
        select(UserSkill).where(UserSkill.user_id == user_id)
    )).scalars().unique().all()
    github = (await db.execute(
        select(GitHubProfile).where(GitHubProfile.user_id == user_id)
    )).scalar_one_or_none()
    certifications = (await db.execute(
        select(Certification).where(Certification.user_id == user_id)
    )).scalars().all()

    skills = [
        {
            "name": us.skill.name,
            "level": us.level,
            "source": us.source,
            "proficiency": us.proficiency_score or 0,
            "yearsExperience": us.years_experience or 0,
        }
        for us in user_skills
    ]
    seen = {s["name"].lower() for s in skills}

    if github is not None:
        for language, percentage in (github.languages_used or {}).items():
            if language.lower() in seen:
                continue
            seen.add(language.lower())
            if percentage > 30:
                level = "advanced"
            elif percentage > 15:
                level = "intermediate"
            else:
                level = "beginner"
            skills.append({
                "name": language,
                "level": level,
                "source": "github",
                "proficiency": min(100, percentage * 2),
                "yearsExperience": 0,
            })

    for cert in certifications:
        for name in cert.skills or []:
            if name.lower() in seen:
                continue
            seen.add(name.lower())
            skills.append({
                "name": name,
                "level": "intermediate",
                "source": "certification",
                "proficiency": CERTIFICATION_SKILL_PROFICIENCY,
                "yearsExperience": 0,
            })

    return skills


async def get_user_summary(db: AsyncSession, user_id: str) -> Dict[str, Any]:
    profile = (await db.execute(
        select(Profile).where(Profile.user_id == user_id)
    )).scalar_one_or_none()
    education = (await db.execute(
        select(EducationRecord).where(EducationRecord.user_id == user_id)
    )).scalars().all()

    return {
        "currentRole": (profile.title if profile else None) or "Not specified",
        "yearsExperience": (profile.years_experience if profile else None) or 0,
        "careerStage": (profile.career_stage if profile else None) or "entry",
        "industries": (profile.industries if profile else None) or [],
        "targetRole": profile.target_role if profile else None,
        "education": [
            {"degree": e.degree, "field": e.field, "institution": e.institution_name}
            for e in education
        ],
    }


def weeks_to_time_string(weeks: int) -> str:
    if weeks <= 0:
        return "Ready now"
    if weeks <= 2:
        return f"{weeks} week{'s' if weeks > 1 else ''}"
    if weeks <= 52:
        months = math.ceil(weeks / 4)
        return f"{months} month{'s' if months > 1 else ''}"
    years = math.ceil(weeks / 52)
    return f"{years} year{'s' if years > 1 else ''}"


def calculate_confidence(readiness_score: float, gap_count: int) -> int:
    readiness_factor = readiness_score * 0.6
    gap_factor = max(0, 40 - gap_count * 5)
    return min(100, round(readiness_factor + gap_factor))


def build_prompt(summary: Dict[str, Any], skills: List[Dict[str, Any]]) -> str:
    education = "; ".join(
        f"{e['degree']} in {e['field'] or 'General Studies'} from {e['institution']}" for e in summary["education"]
    ) or "Not specified"
    skill_lines = "\n".join(
        f"- {s['name']} ({s['level']}, proficiency: {s['proficiency']}%, source: {s['source']})" for s in skills
    ) or "- No skills recorded yet"

    return f"""Based on the user's profile, generate {RECOMMENDATION_COUNT} personalized career path recommendations.

User Profile:
- Current Role: {summary['currentRole']}
- Years of Experience: {summary['yearsExperience']}
- Career Stage: {summary['careerStage']}
- Industries: {', '.join(summary['industries']) or 'Not specified'}
- Target Role: {summary['targetRole'] or 'Not specified'}
- Education: {education}

Current Skills:
{skill_lines}

For each recommended career path, provide the role title, readinessScore (0-100),
estimatedWeeks to be ready, skillGaps, matchingSkills, the top 5 specific learning
resources (exact course/tool names, platform, provider, duration, cost, difficulty,
skillsGained, relevanceScore), reasoning, and priority (1-5, where 1 is highest).

Return JSON of the form:
{{"recommendations": [{{
  "role": "string",
  "readinessScore": 0,
  "estimatedWeeks": 0,
  "skillGaps": [{{"skill": "string", "currentLevel": "beginner|intermediate|advanced|null", "requiredLevel": "intermediate|advanced|expert", "priority": "critical|important|nice-to-have", "timeToLearn": "string"}}],
  "matchingSkills": [{{"skill": "string", "level": "string", "source": "string"}}],
  "resources": [{{"type": "course|certification|tool|book|project", "platform": "string", "title": "string", "url": "string", "provider": "string", "duration": "string", "cost": "string", "difficulty": "beginner|intermediate|advanced", "skillsGained": ["string"], "relevanceScore": 0}}],
  "reasoning": "string",
  "priority": 1
}}]}}

Focus on realistic, actionable paths and name the specific tools relevant to each role."""


def _suggestion_from(user_id: str, rec: CareerRecommendation) -> CareerSuggestion:
    resources = [
        ResourceRecommendation(
            user_id=user_id,
            title=r.title,
            type=r.type,
            platform=r.platform,
            provider=r.provider,
            url=r.url,
            duration=r.duration,
            cost=r.cost,
            difficulty=r.difficulty,
            relevance_score=r.relevanceScore,
            skills=r.skillsGained,
            status="suggested",
        )
        for r in rec.resources
    ]
    return CareerSuggestion(
        user_id=user_id,
        title=rec.role,
        reasoning=rec.reasoning,
        readiness_score=rec.readinessScore,
        skill_gaps=[g.model_dump() for g in rec.skillGaps],
        matching_skills=[m.model_dump() for m in rec.matchingSkills],
        estimated_time=weeks_to_time_string(rec.estimatedWeeks),
        estimated_weeks=rec.estimatedWeeks,
        priority=rec.priority,
        confidence=calculate_confidence(rec.readinessScore, len(rec.skillGaps)),
        status="active",
        resources=resources,
    )


async def generate_career_recommendations(db: AsyncSession, user_id: str) -> List[Dict[str, Any]]:
    skills = await aggregate_user_skills(db, user_id)
    summary = await get_user_summary(db, user_id)

    result = await openai_client.complete_model(
        "career_recommendations",
        CareerRecommendationsResult,
        "You are an expert career advisor who provides data-driven, personalized career "
        "recommendations based on verified skills and experience.",
        build_prompt(summary, skills),
        error_message="Failed to generate career recommendations",
        temperature=0.7,
        max_tokens=4000,
    )

    suggestions = [_suggestion_from(user_id, rec) for rec in result.recommendations]
    db.add_all(suggestions)
    await db.commit()

    logger.info(
        f"Generated {len(suggestions)} career recommendations for {user_id} "
        f"with {get_settings().openai_model}"
    )
    return [s.to_dict() for s in suggestions]


async def get_user_career_suggestions(
    db: AsyncSession,
    user_id: str,
    force_regenerate: bool = False,
) -> List[Dict[str, Any]]:
    if not force_regenerate:
        result = await db.execute(
            select(CareerSuggestion)
            .where(
                CareerSuggestion.user_id == user_id,
                CareerSuggestion.status != "dismissed",
            )
            .order_by(CareerSuggestion.priority.asc(), CareerSuggestion.readiness_score.desc())
            .limit(RECOMMENDATION_COUNT)
        )
        existing = result.scalars().all()
        if existing:
            return [s.to_dict() for s in existing]

    return await generate_career_recommendations(db, user_id)


async def update_suggestion_status(db: AsyncSession, suggestion: CareerSuggestion, status: str) -> CareerSuggestion:
    if status not in SUGGESTION_STATUSES:
        raise RecordValidationError(f"Invalid suggestion status: {status}")
    suggestion.status = status
    await db.commit()
    return suggestion


async def update_resource_status(
    db: AsyncSession,
    resource: ResourceRecommendation,
    status: str,
) -> ResourceRecommendation:
    if status not in RESOURCE_STATUSES:
        raise RecordValidationError(f"Invalid resource status: {status}")
    resource.status = status
    await db.commit()
    return resource
