"""FastAPI application for the call tracker API."""
from __future__ import annotations

import logging

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.errors import ApiError, AuthenticationError
from .core.logging import configure_logging
from .routers import call_logs, health, users

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Call Tracker API", version="0.1.0")

if settings.cors_origins_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.exception_handler(ApiError)
async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(), headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for error in exc.errors():
        where = ".".join(str(part) for part in error.get("loc", ()))
        details.append(f"{where}: {error.get('msg', 'invalid value')}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": details},
    )


app.include_router(health.router, prefix="/api")
app.include_router(call_logs.router, prefix="/api/call-logs", tags=["call-logs"])
app.include_router(users.router, prefix="/api/users", tags=["users"])


def run() -> None:
    """Serve the API with uvicorn on the configured port."""

    logger.info("Starting call tracker API on port %s (%s)", settings.port, settings.app_env)
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
