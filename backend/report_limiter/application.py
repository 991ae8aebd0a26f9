from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse, Response

from .config import Settings, get_settings
from .metrics import CONTENT_TYPE_LATEST, REQUESTS_TOTAL, generate_latest
from .rate_limit import AccessLimiter
from .routers.report import router as report_router
from .schemas import HealthResponse
from .window import WindowResetter

logger = logging.getLogger("report_limiter.app")


def _format_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        loc = ".".join(str(item) for item in error.get("loc", ()))
        parts.append(f"{loc}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts) or "invalid request body"


def create_app(cfg: Optional[Settings] = None, limiter: Optional[AccessLimiter] = None) -> FastAPI:
    cfg = cfg if cfg is not None else get_settings()
    limiter = limiter if limiter is not None else AccessLimiter()
    window = WindowResetter(limiter, interval_seconds=cfg.ttl_seconds)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        await window.start()
        logger.info(
            "Report limiter startup complete",
            extra={"event": "startup", "threshold": cfg.threshold, "host": cfg.host, "port": cfg.port},
        )
        try:
            yield
        finally:
            await window.stop()
            logger.info("Report limiter stopped", extra={"event": "shutdown"})

    app = FastAPI(title="Report Limiter API", version="1.0.0", lifespan=lifespan)
    app.state.settings = cfg
    app.state.limiter = limiter
    app.state.window = window

    @app.exception_handler(RequestValidationError)
    async def bad_request_handler(request: Request, exc: RequestValidationError) -> PlainTextResponse:
        detail = _format_validation_error(exc)
        logger.warning(
            "Rejected malformed request body",
            extra={"event": "bad_request", "path": request.url.path, "status": 400},
        )
        return PlainTextResponse(detail, status_code=400)

    @app.middleware("http")
    async def request_metrics_middleware(request: Request, call_next):
        response = await call_next(request)
        REQUESTS_TOTAL.labels(
            method=request.method,
            path=request.url.path,
            status=str(response.status_code),
        ).inc()
        return response

    @app.get("/health", response_model=HealthResponse)
    async def healthcheck() -> HealthResponse:
        return HealthResponse(
            status="ok",
            ts=datetime.now(timezone.utc).isoformat(),
            tracked_urls=len(limiter),
        )

    @app.get("/metrics")
    async def metrics() -> Response:
        if not cfg.enable_prometheus_metrics:
            raise HTTPException(status_code=404, detail="Metrics disabled")
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(report_router)
    return app
