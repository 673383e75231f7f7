from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum


class PetStatus(str, Enum):
    available = "available"
    adopted = "adopted"
    pending = "pending"


class PetSpecies(str, Enum):
    dog = "dog"
    cat = "cat"
    rabbit = "rabbit"
    bird = "bird"
    other = "other"


class PetGender(str, Enum):
    male = "male"
    female = "female"


class AgeRange(str, Enum):
    young = "young"    # 0-2
    adult = "adult"    # 3-7
    senior = "senior"  # 8+


AGE_RANGES: dict[AgeRange, dict] = {
    AgeRange.young: {"$lte": 2},
    AgeRange.adult: {"$gte": 3, "$lte": 7},
    AgeRange.senior: {"$gte": 8},
}


def _strip_text(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Field cannot be blank")
    return v


def _validate_image(v: Optional[str]) -> Optional[str]:
    if v and not (v.startswith("http://") or v.startswith("https://") or v.startswith("/media/")):
        raise ValueError("image must be an http(s) URL or a /media/ path")
    return v


class PetCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=80)
    breed: str = Field(..., min_length=1, max_length=80)
    age: int = Field(..., ge=0, le=30, description="Age in years")
    species: PetSpecies
    gender: PetGender
    description: Optional[str] = Field(None, max_length=2000)
    image: Optional[str] = None
    characteristics: List[str] = []
    status: PetStatus = PetStatus.available

    @field_validator("name", "breed")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return _strip_text(v)

    @field_validator("image")
    @classmethod
    def validate_image(cls, v: Optional[str]) -> Optional[str]:
        return _validate_image(v)


class PetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=80)
    breed: Optional[str] = Field(None, min_length=1, max_length=80)
    age: Optional[int] = Field(None, ge=0, le=30)
    species: Optional[PetSpecies] = None
    gender: Optional[PetGender] = None
    description: Optional[str] = Field(None, max_length=2000)
    image: Optional[str] = None
    characteristics: Optional[List[str]] = None
    status: Optional[PetStatus] = None

    @field_validator("name", "breed")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _strip_text(v)

    @field_validator("image")
    @classmethod
    def validate_image(cls, v: Optional[str]) -> Optional[str]:
        return _validate_image(v)


class PetOut(BaseModel):
    id: str
    name: str
    breed: str
    age: int
    species: PetSpecies
    gender: PetGender
    owner: Optional[str] = None
    status: PetStatus
    description: Optional[str] = None
    image: Optional[str] = None
    characteristics: List[str] = []
    liked_by: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PetPage(BaseModel):
    pets: List[PetOut]
    total: int
    page: int
    limit: int


class LikeResult(BaseModel):
    message: str
    success: bool = True
