from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime
from typing import Optional, List


class AdoptionStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class AdoptionCreate(BaseModel):
    pet: str = Field(..., description="Id of the pet to adopt")
    notes: Optional[str] = Field(None, max_length=1000, description="Why you want to adopt")


class AdoptionStatusUpdate(BaseModel):
    status: AdoptionStatus
    notes: Optional[str] = Field(None, max_length=1000, description="Admin notes")


class UserSummary(BaseModel):
    id: str
    user_name: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    age: Optional[int] = None


class PetSummary(BaseModel):
    id: str
    name: str
    breed: Optional[str] = None
    age: Optional[int] = None
    status: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None


class AdoptionOut(BaseModel):
    id: str
    user: Optional[UserSummary] = None
    pet: Optional[PetSummary] = None
    status: AdoptionStatus
    admin_approver: Optional[UserSummary] = None
    request_date: Optional[datetime] = None
    approved_date: Optional[datetime] = None
    rejected_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdoptionPage(BaseModel):
    adoptions: List[AdoptionOut]
    total: int
    page: int
    limit: int


class AdoptionStats(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
