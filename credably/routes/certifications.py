"""Certification Routes"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from credably.database import get_db
from credably.middleware.auth import get_current_user_id, check_ownership
from credably.models.certification import Certification
from credably.services.certification_service import (
    certification_score,
    certification_statistics,
    create_certification,
    delete_certification,
    get_expiring_certifications,
    get_user_certifications,
    verify_certification,
)
from credably.utils.dates import naive_utc
from credably.utils.errors import RecordValidationError
from credably.utils.logger import get_logger

router = APIRouter()
logger = get_logger()

EXPIRING_WITHIN_DAYS = 90


class CertificationCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=255)
    issuer: str = Field(..., min_length=1, max_length=255)
    issue_date: datetime
    expiry_date: Optional[datetime] = None
    credential_id: Optional[str] = None
    credential_url: Optional[str] = Field(None, max_length=500)
    metadata: Optional[Dict[str, Any]] = None


class CertificationVerify(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    verified: bool
    verification_method: str = "manual_review"


@router.get("/")
async def list_certifications(
    score: bool = False,
    stats: bool = False,
    expiring: bool = False,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        if expiring:
            certifications = await get_expiring_certifications(db, user_id, EXPIRING_WITHIN_DAYS)
        else:
            certifications = await get_user_certifications(db, user_id)

        response = {
            "success": True,
            "certifications": [c.to_dict() for c in certifications],
            "count": len(certifications),
        }
        if score or stats:
            everything = certifications if not expiring else await get_user_certifications(db, user_id)
            if score:
                response["score"] = certification_score(everything)
            if stats:
                response["statistics"] = certification_statistics(everything)
    except Exception as e:
        logger.error(f"Failed to fetch certifications for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch certifications", "details": str(e)})

    return response


@router.post("/", status_code=201)
async def add_certification(
    data: CertificationCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        certification = await create_certification(
            db,
            user_id,
            name=data.name,
            issuer=data.issuer,
            issue_date=naive_utc(data.issue_date),
            expiry_date=naive_utc(data.expiry_date),
            credential_id=data.credential_id,
            credential_url=data.credential_url,
            metadata=data.metadata,
        )
    except RecordValidationError:
        raise
    except Exception as e:
        logger.error(f"Failed to create certification for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to create certification", "details": str(e)})

    return {"success": True, "certification": certification.to_dict()}


@router.get("/{certification_id}")
async def get_certification(
    certification_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        certification = check_ownership(
            await db.get(Certification, certification_id), user_id, "Certification"
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch certification {certification_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch certification", "details": str(e)})

    return {"success": True, "certification": certification.to_dict()}


@router.patch("/{certification_id}")
async def update_verification(
    certification_id: int,
    data: CertificationVerify,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        certification = check_ownership(
            await db.get(Certification, certification_id), user_id, "Certification"
        )
        certification = await verify_certification(db, certification, data.verified, data.verification_method)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update certification {certification_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to update certification", "details": str(e)})

    return {"success": True, "certification": certification.to_dict()}


@router.delete("/{certification_id}")
async def remove_certification(
    certification_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        certification = check_ownership(
            await db.get(Certification, certification_id), user_id, "Certification"
        )
        await delete_certification(db, certification)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete certification {certification_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to delete certification", "details": str(e)})

    logger.info(f"Deleted certification {certification_id} for {user_id}")
    return {"success": True, "message": "Certification deleted"}
