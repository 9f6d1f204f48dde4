"""
FastAPI application factory
"""
import logging
import os
import time
import traceback
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from app.api.v1 import auth, subscriptions
from app.application.errors import AppError, InternalError
from app.config import get_settings
from app.infrastructure.db.session import check_db_connection

logger = logging.getLogger(__name__)

_STARTED_AT = time.monotonic()

AVAILABLE_ROUTES = {
    "health": "GET /health",
    "auth": {
        "register": "POST /api/auth/register",
        "login": "POST /api/auth/login",
        "me": "GET /api/auth/me",
        "refresh": "POST /api/auth/refresh",
        "logout": "POST /api/auth/logout",
    },
    "subscriptions": {
        "list": "GET /api/subscriptions",
        "create": "POST /api/subscriptions",
        "get": "GET /api/subscriptions/:id",
        "update": "PUT /api/subscriptions/:id",
        "delete": "DELETE /api/subscriptions/:id",
        "analytics": "GET /api/subscriptions/analytics",
    },
}


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Last line of defence: log the traceback, answer with the generic 500 envelope"""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception:
            tb_str = traceback.format_exc()
            logger.error(f"\n{'='*60}\nERROR on {request.method} {request.url.path}\n{tb_str}{'='*60}")
            return JSONResponse(status_code=500, content=InternalError().to_dict())


def _format_validation_errors(exc: RequestValidationError) -> list[str]:
    details = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        details.append(f"{location}: {err.get('msg')}" if location else err.get("msg", "Invalid input"))
    return details


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc.__cause__)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "error": "Validation failed",
                "message": "Please check your input and try again",
                "details": _format_validation_errors(exc),
            },
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content={
                    "error": "Not found",
                    "message": f"Route {request.method} {request.url.path} not found",
                    "availableRoutes": AVAILABLE_ROUTES,
                },
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "Error", "message": str(exc.detail)},
        )


def create_app() -> FastAPI:
    """
    Application factory - builds and wires the FastAPI app

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    app = FastAPI(
        title="Subscription Manager API",
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
    )

    app.add_middleware(ErrorLoggingMiddleware)
    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(subscriptions.router)

    @app.get("/", tags=["system"])
    def root():
        return {
            "message": "Subscription Manager API",
            "version": settings.APP_VERSION,
            "health": "/health",
            "endpoints": AVAILABLE_ROUTES,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/health", tags=["system"])
    def health():
        """Liveness: the process is up"""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - _STARTED_AT, 3),
            "environment": settings.ENVIRONMENT,
            "version": settings.APP_VERSION,
            "pid": os.getpid(),
        }

    @app.get("/ready", tags=["system"])
    def ready():
        """Readiness: the database answers"""
        try:
            check_db_connection()
        except Exception:
            logger.exception("Readiness check failed")
            return JSONResponse(
                status_code=503,
                content={"error": "Service unavailable", "message": "Database connection failed"},
            )
        return {"status": "ok"}

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
