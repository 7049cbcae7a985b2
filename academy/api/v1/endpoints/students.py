from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from academy.api import deps
from academy.models.enums import StudentStatus
from academy.models.user import User
from academy.schemas.responses import PaginatedResponse, PaginationMeta
from academy.schemas.student import StudentResponse
from academy.services.academic_service import AcademicService

router = APIRouter()


@router.get("", response_model=PaginatedResponse[StudentResponse])
async def list_students(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    status: Optional[StudentStatus] = None,
    current_user: User = Depends(deps.get_current_user),
    db: AsyncSession = Depends(deps.get_db),
) -> Any:
    """
    List students. Admins see all, teachers their own students, students themselves.
    """
    students, total = await AcademicService.list_students(
        db, current_user, skip=(page - 1) * limit, limit=limit, status=status
    )
    return PaginatedResponse(
        data=[StudentResponse.model_validate(s) for s in students],
        meta=PaginationMeta.build(page, limit, total),
    )
