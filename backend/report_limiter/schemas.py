from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class ReportRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str = ""

    @field_validator("url", mode="before")
    @classmethod
    def null_url_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ReportResponse(BaseModel):
    blocked: bool


class HealthResponse(BaseModel):
    status: str
    ts: str
    tracked_urls: int
