"""
Health endpoint.

Used by load balancers and container orchestrators as a liveness probe.
It does not touch the catalog.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request

from catalog_api.app.schemas.health import HealthRead

router = APIRouter()


@router.get("", response_model=HealthRead)
async def health(request: Request) -> HealthRead:
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    return HealthRead(timestamp=datetime.now(timezone.utc), uptime=time.monotonic() - started_at)
