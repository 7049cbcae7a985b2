"""Students and the trial requests they convert from"""

from sqlalchemy import Column, String, Integer, Text, ForeignKey, Enum

from sqlalchemy.orm import relationship

from academy.models.base import BaseModel
from academy.models.enums import StudentStatus, TrialRequestStatus


class TrialRequest(BaseModel):
    """
    Prospective-student inquiry. Becomes CONVERTED once an enrollment
    payment for it is approved.
    """
    __tablename__ = "trial_requests"

    student_name = Column(String(255), nullable=False)
    student_age = Column(Integer, nullable=True)
    contact_email = Column(String(255), nullable=False, index=True)
    contact_phone = Column(String(50), nullable=True)
    course_name = Column(String(255), nullable=True)
    preferred_time = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(
        Enum(TrialRequestStatus, name="trial_request_status"),
        default=TrialRequestStatus.PENDING,
        nullable=False,
        index=True,
    )

    invoices = relationship("Invoice", back_populates="trial_request")

    def __repr__(self) -> str:
        return f"<TrialRequest {self.student_name} - {self.status}>"


class Student(BaseModel):
    """
    Enrolled learner. A student may exist without a login (user_id is NULL).
    """
    __tablename__ = "students"

    user_id = Column(ForeignKey("users.id", ondelete="SET NULL"), unique=True, nullable=True, index=True)
    full_name = Column(String(255), nullable=False)
    age = Column(Integer, nullable=True)
    contact_email = Column(String(255), nullable=True, index=True)
    contact_phone = Column(String(50), nullable=True)
    teacher_id = Column(ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(
        Enum(StudentStatus, name="student_status"),
        default=StudentStatus.ACTIVE,
        nullable=False,
        index=True,
    )

    user = relationship("User", back_populates="student_profile")
    teacher = relationship("Teacher", back_populates="students")
    invoices = relationship("Invoice", back_populates="student")

    def __repr__(self) -> str:
        return f"<Student {self.full_name}>"
