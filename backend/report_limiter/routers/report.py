from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from ..config import Settings
from ..rate_limit import AccessLimiter
from ..schemas import ReportRequest, ReportResponse

router = APIRouter(tags=["report"])
logger = logging.getLogger("report_limiter.app")


def get_limiter(request: Request) -> AccessLimiter:
    return request.app.state.limiter


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def read_report(request: Request) -> ReportRequest:
    # Reporters often omit Content-Type, so the body is decoded as JSON regardless.
    raw = await request.body()
    try:
        return ReportRequest.model_validate_json(raw)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc


@router.post(
    "/report",
    response_model=ReportResponse,
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": ReportRequest.model_json_schema()}},
        }
    },
)
async def report_url(
    payload: ReportRequest = Depends(read_report),
    limiter: AccessLimiter = Depends(get_limiter),
    cfg: Settings = Depends(get_settings),
) -> ReportResponse:
    """Count one sighting of a URL and say whether it is now over threshold."""

    logger.info("Received report request", extra={"event": "report_received", "url": payload.url})
    decision = limiter.should_limit(payload.url, cfg.threshold, cfg.ttl_seconds)
    logger.info(
        "URL has been reported %d times, reporting as %s",
        decision.count,
        str(decision.blocked).lower(),
        extra={
            "event": "report_decided",
            "url": decision.url,
            "count": decision.count,
            "threshold": decision.threshold,
        },
    )
    return ReportResponse(blocked=decision.blocked)
