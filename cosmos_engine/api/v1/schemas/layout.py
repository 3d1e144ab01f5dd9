"""Request models for the layout API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TickRequest(BaseModel):
    delta_time: float | None = Field(default=None, ge=0, examples=[0.01])
