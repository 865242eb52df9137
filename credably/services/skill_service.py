"""
User skill persistence: manual entries, AI-detected skills and GitHub languages.
The skills table is a shared catalogue keyed by slug; user_skills links a user
to a catalogue entry at most once.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from credably.models.skill import Skill, UserSkill, SKILL_LEVELS, slugify
from credably.models.social_profile import GitHubProfile
from credably.schemas.analysis import DetectedSkill
from credably.utils.errors import AccountNotConnectedError, RecordValidationError
from credably.utils.logger import get_logger

logger = get_logger()

PRIMARY_LANGUAGE_BONUS = 20


def level_for_proficiency(score: float) -> str:
    if score >= 85:
        return "expert"
    if score >= 70:
        return "advanced"
    if score >= 50:
        return "intermediate"
    return "beginner"


async def get_or_create_skill(db: AsyncSession, name: str, category: Optional[str] = None) -> Skill:
    slug = slugify(name)
    if not slug:
        raise RecordValidationError("Skill name is required")
    skill = (await db.execute(select(Skill).where(Skill.slug == slug))).scalar_one_or_none()
    if skill is None:
        skill = Skill(name=name.strip(), slug=slug, category=category)
        db.add(skill)
        await db.flush()
    elif category and not skill.category:
        skill.category = category
    return skill


async def _get_user_skill(db: AsyncSession, user_id: str, skill_id: int) -> Optional[UserSkill]:
    result = await db.execute(
        select(UserSkill).where(UserSkill.user_id == user_id, UserSkill.skill_id == skill_id)
    )
    return result.scalar_one_or_none()


async def upsert_user_skill(
    db: AsyncSession,
    user_id: str,
    name: str,
    category: Optional[str] = None,
    **fields,
) -> UserSkill:
    """Create or update the user's link to a catalogue skill. Caller commits."""
    skill = await get_or_create_skill(db, name, category)
    user_skill = await _get_user_skill(db, user_id, skill.id)
    if user_skill is None:
        user_skill = UserSkill(user_id=user_id, skill_id=skill.id, skill=skill)
        db.add(user_skill)
    for key, value in fields.items():
        setattr(user_skill, key, value)
    return user_skill


async def get_user_skills(db: AsyncSession, user_id: str) -> List[UserSkill]:
    result = await db.execute(
        select(UserSkill)
        .where(UserSkill.user_id == user_id)
        .order_by(UserSkill.proficiency_score.desc())
    )
    return list(result.scalars().unique().all())


async def add_manual_skill(
    db: AsyncSession,
    user_id: str,
    name: str,
    category: Optional[str] = None,
    level: str = "intermediate",
    proficiency_score: int = 50,
    years_experience: Optional[float] = None,
) -> UserSkill:
    if level not in SKILL_LEVELS:
        raise RecordValidationError(f"Invalid skill level: {level}", [f"level must be one of {', '.join(SKILL_LEVELS)}"])
    if not 0 <= proficiency_score <= 100:
        raise RecordValidationError("Proficiency score must be between 0 and 100")

    user_skill = await upsert_user_skill(
        db,
        user_id,
        name,
        category,
        level=level,
        proficiency_score=proficiency_score,
        years_experience=years_experience,
        source="manual",
    )
    await db.commit()
    await db.refresh(user_skill)
    return user_skill


async def delete_user_skill(db: AsyncSession, user_skill: UserSkill) -> None:
    await db.delete(user_skill)
    await db.commit()


async def save_detected_skills(db: AsyncSession, user_id: str, skills: List[DetectedSkill]) -> int:
    """Persist AI-detected skills; confidence becomes the proficiency score."""
    for detected in skills:
        await upsert_user_skill(
            db,
            user_id,
            detected.name,
            detected.category,
            level=detected.level,
            proficiency_score=detected.confidence,
            source="ai-analysis",
            evidence={"aiAnalysis": {"confidence": detected.confidence, "reason": detected.reason}},
        )
    await db.commit()
    logger.info(f"Saved {len(skills)} AI-detected skills for {user_id}")
    return len(skills)


async def import_github_skills(db: AsyncSession, user_id: str) -> Dict[str, Any]:
    """Turn the synced GitHub language mix into programming-language skills."""
    profile = (await db.execute(
        select(GitHubProfile).where(GitHubProfile.user_id == user_id)
    )).scalar_one_or_none()
    if profile is None:
        raise AccountNotConnectedError("github")

    languages: Dict[str, float] = profile.languages_used or {}
    primary = max(languages, key=languages.get) if languages else None
    created, updated = [], []

    for language, percentage in languages.items():
        proficiency = min(100, round(50 + percentage * 2 + (PRIMARY_LANGUAGE_BONUS if language == primary else 0)))
        skill = await get_or_create_skill(db, language, "Programming Languages")
        existing = await _get_user_skill(db, user_id, skill.id)
        (updated if existing else created).append(language)

        await upsert_user_skill(
            db,
            user_id,
            language,
            "Programming Languages",
            level=level_for_proficiency(proficiency),
            proficiency_score=proficiency,
            source="github",
            verified=True,
            evidence={
                "percentage": percentage,
                "isPrimary": language == primary,
                "source": "github",
                "analyzedAt": datetime.utcnow().isoformat(),
            },
        )

    await db.commit()
    logger.info(f"GitHub skill import for {user_id}: {len(created)} created, {len(updated)} updated")
    return {"created": created, "updated": updated, "total": len(languages)}
