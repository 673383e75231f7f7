from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal

from .user import UserRole


class Login(BaseModel):
    email: EmailStr = Field(..., description="User e-mail")
    password: str = Field(..., min_length=1, description="Password")


class SessionUser(BaseModel):
    """What is kept in the signed session cookie."""
    id: str
    user_name: str
    first_name: str
    last_name: str
    email: str
    role: UserRole


class AuthOut(BaseModel):
    user: SessionUser
    access_token: str
    token_type: str = "bearer"
    message: str


class CurrentUser(BaseModel):
    id: str
    user_name: str
    role: UserRole
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    auth_method: Literal["session", "jwt"]


class HybridCheck(BaseModel):
    message: str
    auth_method: Literal["session", "jwt"]
    user: CurrentUser
