"""Pydantic schemas for the forbidden-term list."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ForbiddenTermCreate(BaseModel):
    phrase: str


class ForbiddenTermCreator(BaseModel):
    id: UUID
    name: str


class ForbiddenTermResponse(BaseModel):
    id: UUID
    phrase: str
    normalized_phrase: str
    created_at: datetime | None = None
    created_by: ForbiddenTermCreator | None = None

    model_config = {"from_attributes": True}
