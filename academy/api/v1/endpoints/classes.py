from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api import deps
from academy.models.enums import ClassStatus
from academy.models.user import User
from academy.schemas.academic import ClassResponse
from academy.schemas.responses import PaginatedResponse, PaginationMeta
from academy.services.academic_service import AcademicService

router = APIRouter()


@router.get("", response_model=PaginatedResponse[ClassResponse])
async def list_classes(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    status: Optional[ClassStatus] = None,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    classes, total = await AcademicService.list_classes(
        db, current_user, skip=(page - 1) * limit, limit=limit, status=status
    )
    return PaginatedResponse(
        data=[ClassResponse.model_validate(c) for c in classes],
        meta=PaginationMeta.build(page, limit, total),
    )
