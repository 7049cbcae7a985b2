from typing import Optional, List, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from academy.models.academic import ClassSession
from academy.models.enums import ClassStatus, StudentStatus
from academy.models.student import Student
from academy.models.user import User
from academy.services.scope_service import apply_scope_to_classes, apply_scope_to_students


class AcademicService:
    @staticmethod
    async def list_students(
        db: AsyncSession,
        user: User,
        skip: int = 0,
        limit: int = 50,
        status: Optional[StudentStatus] = None,
    ) -> Tuple[List[Student], int]:
        """Students visible to ``user``, newest first, with total count."""
        stmt = select(Student)
        if status is not None:
            stmt = stmt.where(Student.status == status)
        stmt = await apply_scope_to_students(db, user, stmt)

        total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()
        result = await db.execute(
            stmt.order_by(Student.created_at.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all()), total

    @staticmethod
    async def list_classes(
        db: AsyncSession,
        user: User,
        skip: int = 0,
        limit: int = 50,
        status: Optional[ClassStatus] = None,
    ) -> Tuple[List[ClassSession], int]:
        """Classes visible to ``user``, soonest first."""
        stmt = select(ClassSession)
        if status is not None:
            stmt = stmt.where(ClassSession.status == status)
        stmt = await apply_scope_to_classes(db, user, stmt)

        total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()
        result = await db.execute(
            stmt.order_by(ClassSession.scheduled_at.asc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all()), total
