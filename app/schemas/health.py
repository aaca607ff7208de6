"""Pydantic schema for the health check response."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok"] = Field(default="ok", description="Service status")
    environment: Literal["dev", "prod"] = Field(description="APP_ENV of the running service")
    database: Literal["connected", "disconnected"] | None = Field(
        default=None,
        description="Whether SELECT 1 succeeded against DATABASE_URL",
    )
