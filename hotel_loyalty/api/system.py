from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from hotel_loyalty.api.deps import get_config
from hotel_loyalty.core.config import AppConfig
from hotel_loyalty.core.database import get_db
from hotel_loyalty.core.errors import UpstreamError
from hotel_loyalty.schemas.system import ConfigOut, HealthOut
from hotel_loyalty.services.guests import GuestStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["system"])


@router.get("/config", response_model=ConfigOut)
def public_config(config: AppConfig = Depends(get_config)):
    return ConfigOut(authDisabled=config.auth_disabled)


@router.get("/health", response_model=HealthOut)
def health(request: Request, db: Session = Depends(get_db), config: AppConfig = Depends(get_config)):
    try:
        GuestStore(db).ping()
    except UpstreamError as e:
        logger.error("Health check: %s", e.detail or e.message)
        error = e.detail if (config.is_development and e.detail) else e.message
        return JSONResponse({"status": "❌ ERROR", "error": error}, status_code=500)

    return HealthOut(
        status="✅ OK",
        database="Connected",
        uptime=round(time.monotonic() - request.app.state.started_at, 3),
    )


@router.get("/metrics", include_in_schema=False)
def metrics(request: Request):
    return request.app.state.metrics.render()
