"""Base schemas for the application."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema class with common configuration."""
    model_config = ConfigDict(from_attributes=True)


class BaseModelSchema(BaseSchema):
    """Base schema for database models."""
    id: int
    created_at: datetime
    updated_at: datetime


class ResponseSchema(BaseSchema):
    """Standard API response schema."""
    status: str
    message: Optional[str] = None
    data: Optional[dict] = None
