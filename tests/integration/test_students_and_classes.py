"""Integration tests for the scoped student and class listings."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from academy.models.academic import ClassSession
from academy.models.enums import UserRole
from academy.utils.time import get_utc_now


@pytest.fixture
async def roster(seed, database):
    teacher_user, teacher = await seed.teacher()
    _, other_teacher = await seed.teacher(full_name="Other Teacher")
    student_user = await seed.user(UserRole.STUDENT)
    mine = await seed.student(full_name="Mine", user=student_user, teacher_id=teacher.id)
    theirs = await seed.student(full_name="Theirs", teacher_id=other_teacher.id)

    async with database.transaction() as session:
        session.add_all([
            ClassSession(
                teacher_id=teacher.id, student_id=mine.id, title="Tajweed 1",
                scheduled_at=get_utc_now() + timedelta(days=1),
            ),
            ClassSession(
                teacher_id=other_teacher.id, student_id=theirs.id, title="Arabic 1",
                scheduled_at=get_utc_now() + timedelta(days=2),
            ),
        ])
    return {"teacher_user": teacher_user, "student_user": student_user, "mine": mine}


@pytest.mark.asyncio
async def test_admin_lists_all_students(async_client: AsyncClient, api_base, admin_user, headers_for, roster):
    resp = await async_client.get(f"{api_base}/students", headers=headers_for(admin_user))

    assert resp.status_code == 200
    assert resp.json()["meta"]["total"] == 2


@pytest.mark.asyncio
async def test_teacher_lists_assigned_students_only(async_client: AsyncClient, api_base, headers_for, roster):
    resp = await async_client.get(f"{api_base}/students", headers=headers_for(roster["teacher_user"]))

    assert [s["full_name"] for s in resp.json()["data"]] == ["Mine"]


@pytest.mark.asyncio
async def test_student_sees_own_classes(async_client: AsyncClient, api_base, headers_for, roster):
    resp = await async_client.get(f"{api_base}/classes", headers=headers_for(roster["student_user"]))

    assert resp.status_code == 200
    assert [c["title"] for c in resp.json()["data"]] == ["Tajweed 1"]


@pytest.mark.asyncio
async def test_classes_paginate(async_client: AsyncClient, api_base, admin_user, headers_for, roster):
    resp = await async_client.get(
        f"{api_base}/classes", params={"page": 2, "limit": 1}, headers=headers_for(admin_user)
    )

    body = resp.json()
    assert body["meta"] == {"page": 2, "page_size": 1, "total": 2, "total_pages": 2}
    assert [c["title"] for c in body["data"]] == ["Arabic 1"]


@pytest.mark.asyncio
async def test_user_without_profile_gets_404(async_client: AsyncClient, api_base, seed, headers_for):
    orphan = await seed.user(UserRole.STUDENT)

    resp = await async_client.get(f"{api_base}/students", headers=headers_for(orphan))

    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Student profile not found"
