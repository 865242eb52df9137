"""Learning Path Routes"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.database import get_db
from credably.middleware.auth import get_current_user_id, check_ownership
from credably.middleware.rate_limit import limiter, AI_LIMIT
from credably.models.career import LearningPath, LEARNING_PATH_STATUSES
from credably.services import skill_analyzer, skill_service
from credably.utils.errors import AIAnalysisError, AIConfigurationError
from credably.utils.logger import get_logger

router = APIRouter()
logger = get_logger()

WEEKS_PER_MONTH = 4


class LearningPathCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    generate: bool = False
    name: Optional[str] = Field(None, max_length=255)
    title: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    target_role: Optional[str] = Field(None, max_length=255)
    timeframe_months: int = Field(6, ge=1, le=36)
    estimated_weeks: Optional[int] = Field(None, ge=1)
    difficulty: Optional[str] = None
    milestones: List[Dict[str, Any]] = Field(default_factory=list)
    resources: List[Dict[str, Any]] = Field(default_factory=list)


class LearningPathUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    progress: Optional[float] = Field(None, ge=0, le=100)
    status: Optional[str] = None


@router.get("/paths")
async def list_paths(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        result = await db.execute(
            select(LearningPath)
            .where(LearningPath.user_id == user_id)
            .order_by(LearningPath.created_at.desc())
        )
        paths = result.scalars().all()
    except Exception as e:
        logger.error(f"Failed to fetch learning paths for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch learning paths", "details": str(e)})

    return {"success": True, "paths": [p.to_dict() for p in paths], "count": len(paths)}


async def _generated_path(db: AsyncSession, user_id: str, data: LearningPathCreate) -> LearningPath:
    if not data.target_role:
        raise HTTPException(status_code=400, detail="targetRole is required to generate a learning path")

    skills = await skill_service.get_user_skills(db, user_id)
    try:
        plan = await skill_analyzer.generate_learning_path(
            [{"name": s.skill.name, "level": s.level} for s in skills],
            data.target_role,
            data.timeframe_months,
        )
    except (AIAnalysisError, AIConfigurationError) as e:
        raise HTTPException(
            status_code=500,
            detail={"error": "Failed to generate learning path", "details": str(e)},
        )

    milestones = [m.model_dump() for m in plan.milestones]
    name = data.name or f"{data.target_role} Learning Path"
    return LearningPath(
        user_id=user_id,
        name=name,
        title=data.title or name,
        description=data.description
        or f"{data.timeframe_months}-month plan toward {data.target_role} (about {plan.totalHours} hours)",
        target_role=data.target_role,
        estimated_weeks=data.timeframe_months * WEEKS_PER_MONTH,
        difficulty=plan.difficulty,
        milestones=milestones,
        resources=[r for m in milestones for r in m["resources"]],
    )


@router.post("/paths", status_code=201)
@limiter.limit(AI_LIMIT)
async def create_path(
    request: Request,
    data: LearningPathCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        if data.generate:
            path = await _generated_path(db, user_id, data)
        else:
            if not data.name or not data.description:
                raise HTTPException(status_code=400, detail="Name and description are required")
            path = LearningPath(
                user_id=user_id,
                name=data.name,
                title=data.title or data.name,
                description=data.description,
                target_role=data.target_role,
                estimated_weeks=data.estimated_weeks,
                difficulty=data.difficulty,
                milestones=data.milestones,
                resources=data.resources,
            )

        db.add(path)
        await db.commit()
        await db.refresh(path)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create learning path for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to create learning path", "details": str(e)})

    logger.info(f"Created learning path {path.id} for {user_id} (generated={data.generate})")
    return {"success": True, "path": path.to_dict(), "message": "Learning path created successfully"}


@router.get("/paths/{path_id}")
async def get_path(
    path_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        path = check_ownership(await db.get(LearningPath, path_id), user_id, "Learning path")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch learning path {path_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch learning path", "details": str(e)})

    return {"success": True, "path": path.to_dict()}


@router.post("/paths/{path_id}/start")
async def start_path(
    path_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        path = check_ownership(await db.get(LearningPath, path_id), user_id, "Learning path")

        is_new = path.started_at is None
        path.started_at = path.started_at or datetime.utcnow()
        path.status = "in_progress"
        await db.commit()
        await db.refresh(path)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to start learning path {path_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to start learning path", "details": str(e)})

    return {
        "success": True,
        "path": path.to_dict(),
        "message": "Learning path started successfully" if is_new else "Learning path resumed",
        "isNew": is_new,
    }


@router.patch("/paths/{path_id}")
async def update_path(
    path_id: int,
    data: LearningPathUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        path = check_ownership(await db.get(LearningPath, path_id), user_id, "Learning path")

        if data.status is not None:
            if data.status not in LEARNING_PATH_STATUSES:
                raise HTTPException(status_code=400, detail=f"Invalid status: {data.status}")
            path.status = data.status

        if data.progress is not None:
            path.progress = data.progress
            if path.started_at is None:
                path.started_at = datetime.utcnow()
            if data.progress >= 100:
                path.status = "completed"
            elif data.status is None and path.status == "not_started":
                path.status = "in_progress"

        if path.status == "completed" and path.completed_at is None:
            path.completed_at = datetime.utcnow()

        await db.commit()
        await db.refresh(path)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update learning path {path_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to update learning path", "details": str(e)})

    return {"success": True, "path": path.to_dict()}
