"""Education Record Routes"""

from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession

from credably.database import get_db
from credably.middleware.auth import get_current_user_id, check_ownership
from credably.models.education import EducationRecord
from credably.services.education_service import (
    create_education_record,
    delete_education_record,
    education_statistics,
    get_user_education,
    update_education_record,
)
from credably.utils.dates import naive_utc
from credably.utils.errors import RecordValidationError
from credably.utils.logger import get_logger

router = APIRouter()
logger = get_logger()


class EducationCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    institution_name: str = Field(..., min_length=1, max_length=255)
    degree: str = Field(..., min_length=1, max_length=255)
    field_of_study: Optional[str] = Field(None, max_length=255)
    start_date: datetime
    end_date: Optional[datetime] = None
    gpa: Optional[float] = None
    credential_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class EducationUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    institution_name: Optional[str] = Field(None, min_length=1, max_length=255)
    degree: Optional[str] = Field(None, min_length=1, max_length=255)
    field_of_study: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    gpa: Optional[float] = None
    credential_id: Optional[str] = None


@router.get("/")
async def list_education(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        records = await get_user_education(db, user_id)
        statistics = education_statistics(records)
    except Exception as e:
        logger.error(f"Failed to fetch education for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch education records", "details": str(e)})

    return {
        "success": True,
        "education": [r.to_dict() for r in records],
        "statistics": statistics,
    }


@router.post("/", status_code=201)
async def create_education(
    data: EducationCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        record = await create_education_record(
            db,
            user_id,
            institution_name=data.institution_name,
            degree=data.degree,
            start_date=naive_utc(data.start_date),
            field_of_study=data.field_of_study,
            end_date=naive_utc(data.end_date),
            gpa=data.gpa,
            credential_id=data.credential_id,
            metadata=data.metadata,
        )
    except RecordValidationError:
        raise
    except Exception as e:
        logger.error(f"Failed to create education record for {user_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to create education record", "details": str(e)})

    return {"success": True, "education": record.to_dict()}


@router.get("/{record_id}")
async def get_education(
    record_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        record = check_ownership(await db.get(EducationRecord, record_id), user_id, "Education record")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch education record {record_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to fetch education record", "details": str(e)})

    return {"success": True, "education": record.to_dict()}


@router.patch("/{record_id}")
async def update_education(
    record_id: int,
    data: EducationUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        record = check_ownership(await db.get(EducationRecord, record_id), user_id, "Education record")

        changes = data.model_dump(exclude_unset=True)
        for key in ("start_date", "end_date"):
            if key in changes:
                changes[key] = naive_utc(changes[key])

        record = await update_education_record(db, record, changes)
    except (HTTPException, RecordValidationError):
        raise
    except Exception as e:
        logger.error(f"Failed to update education record {record_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to update education record", "details": str(e)})

    return {"success": True, "education": record.to_dict()}


@router.delete("/{record_id}")
async def delete_education(
    record_id: int,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    try:
        record = check_ownership(await db.get(EducationRecord, record_id), user_id, "Education record")
        await delete_education_record(db, record)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete education record {record_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail={"error": "Failed to delete education record", "details": str(e)})

    logger.info(f"Deleted education record {record_id} for {user_id}")
    return {"success": True, "message": "Education record deleted"}
