from pydantic import BaseModel, Field
from typing import Optional


class AppStats(BaseModel):
    total_users: int
    total_pets: int
    total_adoptions: int
    total_notifications: int
    available_pets: int
    adopted_pets: int
    pending_adoptions: int
    approved_adoptions: int
    rejected_adoptions: int


class AdoptionSummary(BaseModel):
    total_adoptions: int
    pending_adoptions: int
    happy_families: int


class GenerateData(BaseModel):
    users: int = Field(50, ge=1, le=1000)
    pets: int = Field(100, ge=1, le=2000)


class GenerationSummary(BaseModel):
    users_generated: int
    pets_generated: int
    total_records: int


class HealthOut(BaseModel):
    status: str
    timestamp: str
    service: str
    environment: str
    database: Optional[dict] = None


class MockResult(BaseModel):
    message: str
    count: int
