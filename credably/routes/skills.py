"""Skill Routes: manual skills, AI analysis, insights and GitHub import"""

from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from credably.database import get_db
from credably.middleware.auth import get_current_user_id, check_ownership
from credably.middleware.rate_limit import limiter, AI_LIMIT
from credably.models.skill import UserSkill
from credably.services import skill_analyzer, skill_service
from credably.utils.errors import (
    AccountNotConnectedError,
    AIAnalysisError,
    AIConfigurationError,
    RecordValidationError,
)
from credably.utils.logger import get_logger

router = APIRouter()
logger = get_logger()


class SkillCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    category: Optional[str] = Field(None, max_length=255)
    level: str = "intermediate"
    proficiency_score: int = Field(50, ge=0, le=100)
    years_experience: Optional[float] = Field(None, ge=0, le=70)


class AnalyzeRequest(BaseModel):
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)


class TextAnalysisData(BaseModel):
    text: str = Field(..., min_length=1, max_length=50000)
    context: Literal["resume", "linkedin", "general"] = "general"


class RequiredSkill(BaseModel):
    name: str
    level: str = "intermediate"
    importance: Literal["must-have", "nice-to-have"] = "must-have"


class TargetRole(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    requiredSkills: List[RequiredSkill] = Field(default_factory=list)


class ReadinessData(BaseModel):
    role: TargetRole


class InsightsRequest(BaseModel):
    skills: Optional[List[Dict[str, Any]]] = None


def _parse(model, data: Dict[str, Any]):
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail={"error": "Invalid analysis data", "details": str(e)})


def _ai_failure(message: str, exc: Exception) -> HTTPException:
    return HTTPException(status_code=500, detail={"error": message, "details": str(exc)})


@router.get("/")
async def list_skills(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        skills = await skill_service.get_user_skills(db, user_id)
    except Exception as e:
        logger.error(f"Failed to fetch skills for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch skills", "details": str(e)})

    return {"success": True, "skills": [s.to_dict() for s in skills], "count": len(skills)}


@router.post("/", status_code=201)
async def add_skill(
    data: SkillCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        skill = await skill_service.add_manual_skill(
            db,
            user_id,
            name=data.name,
            category=data.category,
            level=data.level,
            proficiency_score=data.proficiency_score,
            years_experience=data.years_experience,
        )
    except RecordValidationError:
        raise
    except Exception as e:
        logger.error(f"Failed to add skill for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to add skill", "details": str(e)})

    return {"success": True, "skill": skill.to_dict()}


@router.delete("/{user_skill_id}")
async def delete_skill(
    user_skill_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        user_skill = check_ownership(await db.get(UserSkill, user_skill_id), user_id, "Skill")
        await skill_service.delete_user_skill(db, user_skill)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to remove skill {user_skill_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to remove skill", "details": str(e)})

    return {"success": True, "message": "Skill removed"}


async def _text_analysis(db: AsyncSession, user_id: str, payload: Dict[str, Any]):
    data = _parse(TextAnalysisData, payload)
    try:
        analysis = await skill_analyzer.analyze_skills_from_text(data.text, data.context)
    except (AIAnalysisError, AIConfigurationError) as e:
        raise _ai_failure("Failed to analyze skills", e)

    saved = await skill_service.save_detected_skills(db, user_id, analysis.skills)
    return {
        "success": True,
        "skills": [s.model_dump() for s in analysis.skills],
        "recommendations": [r.model_dump() for r in analysis.recommendations],
        "insights": analysis.careerInsights.model_dump(),
        "saved": saved,
    }


async def _career_readiness(db: AsyncSession, user_id: str, payload: Dict[str, Any]):
    data = _parse(ReadinessData, payload)
    skills = await skill_service.get_user_skills(db, user_id)
    try:
        readiness = await skill_analyzer.analyze_career_readiness(
            [
                {"name": s.skill.name, "level": s.level, "yearsExperience": s.years_experience or 0}
                for s in skills
            ],
            data.role.model_dump(),
        )
    except (AIAnalysisError, AIConfigurationError) as e:
        raise _ai_failure("Failed to analyze career readiness", e)
    return {"success": True, **readiness.model_dump()}


ANALYSES = {
    "text-analysis": _text_analysis,
    "career-readiness": _career_readiness,
}


@router.post("/analyze")
@limiter.limit(AI_LIMIT)
async def analyze(
    request: Request,
    body: AnalyzeRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    handler = ANALYSES.get(body.type)
    if handler is None:
        raise HTTPException(status_code=400, detail="Invalid analysis type")

    try:
        return await handler(db, user_id, body.data)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Skill analysis ({body.type}) failed for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Skill analysis failed", "details": str(e)})


@router.post("/insights")
@limiter.limit(AI_LIMIT)
async def insights(
    request: Request,
    body: InsightsRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        if body.skills is None:
            skills = [s.to_dict() for s in await skill_service.get_user_skills(db, user_id)]
        else:
            skills = body.skills
        result = await skill_analyzer.generate_skill_insights(skills)
    except (AIAnalysisError, AIConfigurationError) as e:
        raise _ai_failure("Failed to generate skill insights", e)
    except Exception as e:
        logger.error(f"Skill insights failed for {user_id}: {e}", exc_info=True)
        raise _ai_failure("Failed to generate skill insights", e)

    return {"success": True, **result}


@router.post("/import/github")
async def import_github(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        result = await skill_service.import_github_skills(db, user_id)
    except AccountNotConnectedError:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "GitHub data not synced",
                "message": "Connect and sync your GitHub account before importing skills",
                "action": "connect_github",
            },
        )
    except Exception as e:
        logger.error(f"GitHub skill import failed for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to import GitHub skills", "details": str(e)})

    return {"success": True, **result}
