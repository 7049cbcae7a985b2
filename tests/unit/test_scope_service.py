"""Unit tests for role-based query scoping."""

import pytest
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from academy.core.exceptions import NotFoundError
from academy.models.academic import ClassSession
from academy.models.billing import Invoice
from academy.models.enums import UserRole
from academy.models.student import Student
from academy.models.user import User
from academy.services.scope_service import (
    apply_scope_to_classes,
    apply_scope_to_invoices,
    apply_scope_to_students,
)


def _db_returning(profile_id):
    db = AsyncMock(spec=AsyncSession)
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = profile_id
    db.execute.return_value = mock_result
    return db


@pytest.mark.asyncio
async def test_admin_sees_everything():
    db = _db_returning(None)
    admin = User(id=uuid4(), role=UserRole.ADMIN)
    stmt = select(Invoice)

    assert await apply_scope_to_invoices(db, admin, stmt) is stmt
    assert not db.execute.called


@pytest.mark.asyncio
async def test_teacher_sees_own_invoices():
    teacher_id = uuid4()
    db = _db_returning(teacher_id)
    teacher = User(id=uuid4(), role=UserRole.TEACHER)

    scoped = await apply_scope_to_invoices(db, teacher, select(Invoice))

    assert "invoices.teacher_id" in str(scoped)
    assert teacher_id in scoped.compile().params.values()


@pytest.mark.asyncio
async def test_student_sees_own_invoices():
    student_id = uuid4()
    db = _db_returning(student_id)
    student = User(id=uuid4(), role=UserRole.STUDENT)

    scoped = await apply_scope_to_invoices(db, student, select(Invoice))

    assert "invoices.student_id" in str(scoped)
    assert student_id in scoped.compile().params.values()


@pytest.mark.asyncio
async def test_teacher_sees_assigned_students_and_own_classes():
    teacher_id = uuid4()
    teacher = User(id=uuid4(), role=UserRole.TEACHER)

    students = await apply_scope_to_students(_db_returning(teacher_id), teacher, select(Student))
    classes = await apply_scope_to_classes(_db_returning(teacher_id), teacher, select(ClassSession))

    assert "students.teacher_id" in str(students)
    assert "classes.teacher_id" in str(classes)


@pytest.mark.asyncio
async def test_student_sees_only_self():
    student_id = uuid4()
    student = User(id=uuid4(), role=UserRole.STUDENT)

    scoped = await apply_scope_to_students(_db_returning(student_id), student, select(Student))

    assert "students.id" in str(scoped)
    assert student_id in scoped.compile().params.values()


@pytest.mark.asyncio
async def test_missing_teacher_profile_is_not_found():
    teacher = User(id=uuid4(), role=UserRole.TEACHER)

    with pytest.raises(NotFoundError, match="Teacher profile not found"):
        await apply_scope_to_invoices(_db_returning(None), teacher, select(Invoice))


@pytest.mark.asyncio
async def test_missing_student_profile_is_not_found():
    student = User(id=uuid4(), role=UserRole.STUDENT)

    with pytest.raises(NotFoundError, match="Student profile not found"):
        await apply_scope_to_classes(_db_returning(None), student, select(ClassSession))
