from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum
import re


class UserRole(str, Enum):
    user = "user"
    admin = "admin"


def validate_strong_password(password: str) -> str:
    """At least 8 characters, one upper-case letter, one lower-case letter and one digit."""
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if len(password) > 72:  # bcrypt limit
        raise ValueError("Password cannot exceed 72 characters")
    if not re.search(r"[A-Z]", password):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"[0-9]", password):
        raise ValueError("Password must contain at least one number")
    return password


def _strip_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Field cannot be blank")
    return v


class UserBase(BaseModel):
    user_name: str = Field(..., min_length=3, max_length=50, description="Unique user name")
    first_name: str = Field(..., min_length=1, max_length=80)
    last_name: str = Field(..., min_length=1, max_length=80)
    email: EmailStr
    age: int = Field(..., ge=18, le=120)

    @field_validator("user_name", "first_name", "last_name")
    @classmethod
    def strip_names(cls, v: str) -> str:
        return _strip_name(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class UserRegister(UserBase):
    password: str = Field(..., description="Min. 8 characters, upper, lower and digit")

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_strong_password(v)


class UserCreate(UserRegister):
    """Admin-side creation, the only place a role can be chosen."""
    role: UserRole = UserRole.user


class UserUpdate(BaseModel):
    user_name: Optional[str] = Field(None, min_length=3, max_length=50)
    first_name: Optional[str] = Field(None, min_length=1, max_length=80)
    last_name: Optional[str] = Field(None, min_length=1, max_length=80)
    email: Optional[EmailStr] = None
    age: Optional[int] = Field(None, ge=18, le=120)
    password: Optional[str] = None

    @field_validator("user_name", "first_name", "last_name")
    @classmethod
    def strip_names(cls, v: Optional[str]) -> Optional[str]:
        return _strip_name(v)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().lower() if v else v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return validate_strong_password(v)
        return v


class UserDocumentOut(BaseModel):
    name: str
    reference: str
    upload_date: datetime
    size: int
    mime_type: str


class UserOut(BaseModel):
    id: str
    user_name: str
    first_name: str
    last_name: str
    email: str
    age: Optional[int] = None
    role: UserRole = UserRole.user
    is_email_verified: bool = False
    documents: List[UserDocumentOut] = []
    last_connection: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class UserPage(BaseModel):
    data: List[UserOut]
    pagination: Pagination


class UserDeleted(BaseModel):
    message: str
    id: str


class DocumentsUploaded(BaseModel):
    message: str
    documents_count: int
    user: UserOut
