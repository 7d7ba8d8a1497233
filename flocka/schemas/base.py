"""Base DTOs for API endpoints"""

from datetime import datetime
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    # needed for ORM
    model_config = ConfigDict(
        from_attributes=True,
        arbitrary_types_allowed=True,
    )

    # default dump options to deserialize pydantic models
    def dump(self):
        return self.model_dump(exclude_none=True)


class BaseReadSchema(BaseSchema):
    id: str
    created_at: datetime
    modified_at: datetime | None = None


class BaseUpdateSchema(BaseSchema):
    pass


M = TypeVar("M")


class ResponseSchema(BaseSchema, Generic[M]):
    """Uniform envelope of every API response."""

    success: bool = True
    data: Optional[M] = None
    error: Optional[str] = None
    message: Optional[str] = None


class ErrorSchema(BaseSchema):
    success: bool = False
    error: str
    error_code: str
    where: str | None = None
    correlation_id: str | None = None
    details: Any | None = None


def envelope(data: Any = None, message: str | None = None) -> dict:
    """Wrap a route result, response_model validation does the rest."""
    return {"success": True, "data": data, "message": message}
