"""Role-based narrowing of list queries"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select, Select
from sqlalchemy.ext.asyncio import AsyncSession

from academy.core.exceptions import NotFoundError
from academy.models.academic import ClassSession
from academy.models.billing import Invoice
from academy.models.enums import UserRole
from academy.models.student import Student
from academy.models.user import Teacher, User


async def get_teacher_id(db: AsyncSession, user_id: UUID) -> Optional[UUID]:
    """Teacher profile id for a user, or None."""
    result = await db.execute(select(Teacher.id).where(Teacher.user_id == user_id))
    return result.scalar_one_or_none()


async def get_student_id(db: AsyncSession, user_id: UUID) -> Optional[UUID]:
    """Student profile id for a user, or None."""
    result = await db.execute(select(Student.id).where(Student.user_id == user_id))
    return result.scalar_one_or_none()


async def _require_teacher_id(db: AsyncSession, user: User) -> UUID:
    teacher_id = await get_teacher_id(db, user.id)
    if teacher_id is None:
        raise NotFoundError("Teacher profile not found")
    return teacher_id


async def _require_student_id(db: AsyncSession, user: User) -> UUID:
    student_id = await get_student_id(db, user.id)
    if student_id is None:
        raise NotFoundError("Student profile not found")
    return student_id


async def apply_scope_to_students(db: AsyncSession, user: User, stmt: Select) -> Select:
    """
    Admins see every student, teachers their assigned students, students themselves.

    Raises:
        NotFoundError: the role's profile row is missing
    """
    if user.role == UserRole.ADMIN:
        return stmt
    if user.role == UserRole.TEACHER:
        return stmt.where(Student.teacher_id == await _require_teacher_id(db, user))
    if user.role == UserRole.STUDENT:
        return stmt.where(Student.id == await _require_student_id(db, user))
    raise ValueError(f"Unknown role: {user.role}")


async def apply_scope_to_classes(db: AsyncSession, user: User, stmt: Select) -> Select:
    if user.role == UserRole.ADMIN:
        return stmt
    if user.role == UserRole.TEACHER:
        return stmt.where(ClassSession.teacher_id == await _require_teacher_id(db, user))
    if user.role == UserRole.STUDENT:
        return stmt.where(ClassSession.student_id == await _require_student_id(db, user))
    raise ValueError(f"Unknown role: {user.role}")


async def apply_scope_to_invoices(db: AsyncSession, user: User, stmt: Select) -> Select:
    if user.role == UserRole.ADMIN:
        return stmt
    if user.role == UserRole.TEACHER:
        return stmt.where(Invoice.teacher_id == await _require_teacher_id(db, user))
    if user.role == UserRole.STUDENT:
        return stmt.where(Invoice.student_id == await _require_student_id(db, user))
    raise ValueError(f"Unknown role: {user.role}")
