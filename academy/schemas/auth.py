from typing import Optional
from pydantic import BaseModel, EmailStr

from academy.models.enums import UserRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    role: UserRole
    user_id: str
    must_reset_password: bool = False


class TokenData(BaseModel):
    user_id: Optional[str] = None
    role: Optional[UserRole] = None
