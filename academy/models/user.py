"""Users & Teacher profiles"""

from sqlalchemy import Column, String, Boolean, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship

from academy.models.base import BaseModel, StatusMixin
from academy.models.enums import UserRole


class User(BaseModel, StatusMixin):
    """
    Login credential for every role (Admin, Teacher, Student).
    Emails are stored lower-cased; uniqueness is enforced by the database.
    """
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    role = Column(Enum(UserRole, name="user_role"), nullable=False, index=True)

    # System-provisioned accounts must choose their own password on first login
    must_reset_password = Column(Boolean, default=False, nullable=False)

    teacher_profile = relationship("Teacher", back_populates="user", uselist=False)
    student_profile = relationship("Student", back_populates="user", uselist=False)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"


class Teacher(BaseModel, StatusMixin):
    """Teaching profile attached to a TEACHER (or admin-as-teacher) user"""
    __tablename__ = "teachers"

    user_id = Column(ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)
    bio = Column(Text, nullable=True)

    user = relationship("User", back_populates="teacher_profile")
    students = relationship("Student", back_populates="teacher")

    def __repr__(self) -> str:
        return f"<Teacher {self.id}>"
