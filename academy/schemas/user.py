"""User Pydantic Schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict

from academy.models.enums import UserRole


class UserResponse(BaseModel):
    """Schema for user responses"""
    id: UUID
    email: str
    full_name: Optional[str] = None
    role: UserRole
    is_active: bool
    must_reset_password: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
