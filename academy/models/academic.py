"""Scheduled classes between a teacher and a student"""

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship

from academy.models.base import BaseModel
from academy.models.enums import ClassStatus


class ClassSession(BaseModel):
    __tablename__ = "classes"

    teacher_id = Column(ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    scheduled_at = Column(DateTime, nullable=False, index=True)
    duration_minutes = Column(Integer, default=60, nullable=False)
    status = Column(
        Enum(ClassStatus, name="class_status"),
        default=ClassStatus.SCHEDULED,
        nullable=False,
        index=True,
    )

    teacher = relationship("Teacher")
    student = relationship("Student")

    def __repr__(self) -> str:
        return f"<ClassSession {self.title} @ {self.scheduled_at}>"
