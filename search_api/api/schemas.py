from typing import Literal

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body returned for 400 and 500 responses."""

    error: str = Field(..., description="Human readable failure reason")


class HealthResponse(BaseModel):
    """Liveness payload."""

    status: Literal["ok"] = "ok"
    time: str = Field(..., description="Current UTC time in ISO 8601")
