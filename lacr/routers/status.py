"""
Status router - liveness and basic runtime information.
"""

import time

from fastapi import APIRouter

from lacr.core.clock import utcnow
from lacr.core.config import settings

router = APIRouter(prefix="/status", tags=["status"])

STARTED_AT = time.monotonic()


def uptime_seconds() -> float:
    return round(time.monotonic() - STARTED_AT, 1)


@router.get("")
def status():
    return {
        "success": True,
        "status": "online",
        "timestamp": utcnow().isoformat(),
    }


@router.get("/detailed")
def detailed_status():
    return {
        "success": True,
        "status": "online",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "uptime_seconds": uptime_seconds(),
        "timestamp": utcnow().isoformat(),
    }
