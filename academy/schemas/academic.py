from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, ConfigDict

from academy.models.enums import ClassStatus


class ClassResponse(BaseModel):
    id: UUID
    teacher_id: UUID
    student_id: UUID
    title: str
    scheduled_at: datetime
    duration_minutes: int
    status: ClassStatus

    model_config = ConfigDict(from_attributes=True)
