"""
Skill Analyzer Service
AI extraction of skills from text, career readiness checks, learning paths
and skill insights. One OpenAI JSON completion per call.
"""
from typing import Any, Dict, List

from credably.schemas.analysis import (
    CareerReadinessResult,
    LearningPathResult,
    SkillAnalysisResult,
    SkillInsightsResult,
)
from credably.services import openai_client

ANALYSIS_CONTEXTS = ("resume", "linkedin", "general")

SKILL_CATEGORIES = (
    "Programming Languages, Frameworks & Libraries, Databases, Cloud & DevOps, "
    "Data Science & ML, Design & UX, Project Management, Soft Skills, "
    "Domain Knowledge, Tools & Software"
)

INDUSTRY_AVERAGE_SCORE = 65


async def analyze_skills_from_text(text: str, context: str = "general") -> SkillAnalysisResult:
    system_prompt = (
        "You are an expert career advisor and skill analyst. Analyze the provided text and "
        "extract technical skills, soft skills, and domain knowledge. Categorize skills "
        "appropriately and assess proficiency levels based on context clues. Be accurate "
        "and avoid hallucinating skills that aren't clearly indicated."
    )
    user_prompt = f"""Analyze this {context} text and extract skills:

{text}

Provide a JSON response with:
1. skills: Array of detected skills with name, category, level (beginner/intermediate/advanced/expert), confidence (0-100), and reason
2. recommendations: Suggested skills to learn with skill, priority (high/medium/low), reason and resources
3. careerInsights: strengths, gaps, opportunities and suggestedRoles (title, matchScore, missingSkills)

Categories can include: {SKILL_CATEGORIES}"""

    return await openai_client.complete_model(
        "analyze_skills",
        SkillAnalysisResult,
        system_prompt,
        user_prompt,
        error_message="Failed to analyze skills",
        temperature=0.3,
        max_tokens=2000,
    )


async def analyze_career_readiness(
    user_skills: List[Dict[str, Any]],
    target_role: Dict[str, Any],
) -> CareerReadinessResult:
    """
    user_skills: [{name, level, yearsExperience}]
    target_role: {title, requiredSkills: [{name, level, importance}]}
    """
    current = "\n".join(
        f"- {s['name']}: {s.get('level', 'intermediate')} ({s.get('yearsExperience') or 0} years)"
        for s in user_skills
    )
    required = "\n".join(
        f"- {s['name']}: {s.get('level', 'intermediate')} ({s.get('importance', 'must-have')})"
        for s in target_role.get("requiredSkills", [])
    ) or "- Not specified; infer the typical requirements for this role"

    user_prompt = f"""Analyze career readiness for {target_role['title']} role.

Current skills:
{current or '- None listed'}

Required skills:
{required}

Provide a JSON response with readinessScore (0-100), strengths (skill, analysis),
gaps (skill, currentLevel, requiredLevel, priority, timeToLearn), recommendations
and estimatedTimeToReady in months."""

    return await openai_client.complete_model(
        "career_readiness",
        CareerReadinessResult,
        "You are an expert career advisor analyzing job readiness. Be realistic and specific in your assessments.",
        user_prompt,
        error_message="Failed to analyze career readiness",
        temperature=0.3,
        max_tokens=1500,
    )


async def generate_learning_path(
    current_skills: List[Dict[str, Any]],
    target_role: str,
    timeframe_months: int,
) -> LearningPathResult:
    skills = "\n".join(f"- {s['name']} ({s.get('level', 'intermediate')})" for s in current_skills)
    user_prompt = f"""Create a learning path for someone with these skills:
{skills or '- No skills listed yet'}

Target role: {target_role}
Timeframe: {timeframe_months} months

Provide a JSON response with milestones (month, skills, projects, resources with
title, type course/book/tutorial/project, url, duration), totalHours and difficulty.
Be specific and practical."""

    return await openai_client.complete_model(
        "learning_path",
        LearningPathResult,
        "You are an expert career coach creating personalized learning paths. "
        "Provide practical, achievable plans with specific resources.",
        user_prompt,
        error_message="Failed to generate learning path",
        temperature=0.4,
        max_tokens=2000,
    )


def verification_counts(skills: List[Dict[str, Any]]) -> Dict[str, int]:
    verified = sum(1 for s in skills if s.get("verified"))
    return {"verified": verified, "pending": 0, "unverified": len(skills) - verified}


def _default_percentile(skill_count: int) -> int:
    if skill_count > 10:
        return 75
    if skill_count > 5:
        return 50
    return 25


async def generate_skill_insights(skills: List[Dict[str, Any]]) -> Dict[str, Any]:
    """AI summary of a skill set plus verification and industry comparison figures."""
    if not skills:
        return {
            "skillStrength": {
                "score": 0,
                "label": "Just Starting",
                "description": "Import your skills to get personalized insights",
            },
            "topSkills": [],
            "careerReadiness": {
                "score": 0,
                "readyFor": [],
                "gaps": ["Programming Languages", "Frameworks", "Tools"],
            },
            "recommendations": [
                {
                    "type": "skill",
                    "title": "Import Your Skills",
                    "description": "Connect GitHub, LinkedIn, or upload your resume to get started",
                    "priority": "high",
                }
            ],
            "industryComparison": {"averageScore": INDUSTRY_AVERAGE_SCORE, "userScore": 0, "percentile": 0},
            "verificationStatus": {"verified": 0, "pending": 0, "unverified": 0},
        }

    summary = ", ".join(
        f"{s['name']} ({s.get('category') or 'Other'}, {s.get('level', 'intermediate')}, {s.get('proficiencyScore') or 0}%)"
        for s in skills
    )
    user_prompt = f"""Analyze this developer's skills and provide career insights:

Skills: {summary}

Provide a JSON response with:
1. skillStrength: overall assessment (score 0-100, label, description)
2. topSkills: top 3 skills with name, demand (high/medium/low) and growth trend percentage
3. careerReadiness: score, readyFor roles, skill gaps
4. recommendations: 3 actionable recommendations (type: skill/certification/project, title, description, priority)
5. industryComparison: how they compare to the industry average (percentile)

Focus on practical, actionable insights for career growth."""

    result = await openai_client.complete_model(
        "skill_insights",
        SkillInsightsResult,
        "You are a career advisor specializing in tech skills analysis. Provide practical, data-driven insights.",
        user_prompt,
        error_message="Failed to generate skill insights",
        temperature=0.7,
        max_tokens=1500,
    )

    insights = result.model_dump()
    user_score = round(sum(s.get("proficiencyScore") or 0 for s in skills) / len(skills))
    insights["industryComparison"] = {
        "averageScore": INDUSTRY_AVERAGE_SCORE,
        "userScore": user_score,
        "percentile": result.industryComparison.percentile
        if result.industryComparison.percentile is not None
        else _default_percentile(len(skills)),
    }
    insights["verificationStatus"] = verification_counts(skills)
    return insights
