"""
LAC-R companion API - builds the FastAPI app and mounts every router at the
root and under /api.
Run with: uvicorn lacr.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from lacr.core.config import settings
from lacr.core.errors import (
    AppError,
    app_error_handler,
    http_exception_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from lacr.core.logging_config import configure_logging
from lacr.routers import (
    alarms,
    auth,
    buzzer,
    chat,
    esp32,
    heartbeat,
    led,
    robots,
    tasks,
    users,
    wifi,
)
from lacr.routers import settings as settings_router
from lacr.routers import status as status_router

configure_logging()
logger = logging.getLogger("lacr.main")

# ---------------------------------------------------------------------------
# CREATE FASTAPI APPLICATION
# ---------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ---------------------------------------------------------------------------
# CORS MIDDLEWARE
# ---------------------------------------------------------------------------
# Exact origins for known front-ends plus a regex for preview deployments.
# The mobile app is not a browser, so CORS never applies to it.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX or None,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# EXCEPTION HANDLERS
# ---------------------------------------------------------------------------
# Every error leaves as {"success": false, "error": "..."}.
app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# Each router is served twice: at the root (/robot/list) and under /api
# (/api/robot/list), which older app builds still call. The /api copies
# are left out of the OpenAPI docs.
ROUTERS = (
    esp32.router,
    robots.router,
    auth.router,
    users.router,
    status_router.router,
    alarms.router,
    heartbeat.router,
    chat.router,
    settings_router.router,
    led.router,
    buzzer.router,
    wifi.router,
    tasks.router,
)

for router in ROUTERS:
    app.include_router(router)
    app.include_router(router, prefix="/api", include_in_schema=False)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINTS
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
def health_check():
    """
    Simple health check endpoint for the hosting platform's probes.

    Does NOT check database connectivity.

    Returns:
        {"status": "ok"}
    """
    return {"status": "ok"}


@app.get("/ping", tags=["health"])
def ping():
    return {"success": True, "message": "pong"}


logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started ({settings.ENVIRONMENT})")
