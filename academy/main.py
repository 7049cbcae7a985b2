"""FastAPI Application Entry Point"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from academy.config import settings
from academy.database import Database
from academy.core.exceptions import AppError
from academy.core.logging import setup_logging, get_logger
from academy.core.middleware import RequestContextMiddleware, SecurityHeadersMiddleware
from academy.core.rate_limit import limiter
from academy.api.v1.router import api_router
from academy.schemas.responses import ErrorDetail, ErrorResponse
from academy.services.email_service import EmailNotifier

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the persistence gateway and notifier; tear them down on shutdown"""
    logger.info("Starting application", extra={"environment": settings.ENVIRONMENT})

    database: Optional[Database] = getattr(app.state, "database", None)
    if database is None:
        database = Database(settings)
        app.state.database = database
    if getattr(app.state, "notifier", None) is None:
        app.state.notifier = EmailNotifier()

    # Use Alembic outside development
    if settings.is_development:
        await database.create_all()
        logger.info("Database initialized")

    yield

    logger.info("Shutting down application")
    await database.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Tutoring academy administration API: invoicing and payment verification",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=settings.ALLOWED_METHODS,
    allow_headers=[settings.ALLOWED_HEADERS],
    expose_headers=["X-Request-ID", "X-Process-Time"],
)

app.add_middleware(SecurityHeadersMiddleware, api_prefix=settings.API_V1_PREFIX)
app.add_middleware(RequestContextMiddleware)

app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/health", tags=["Health"])
async def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT
    }


def _error_response(status_code: int, code: str, message: str, details=None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """Named failures from the service layer"""
    logger.warning(
        exc.message,
        extra={"path": request.url.path, "error_code": exc.code},
    )
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors"""
    logger.warning(
        "Validation error",
        extra={"path": request.url.path, "errors": exc.errors()},
    )
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "VALIDATION_ERROR",
        "Validation failed",
        details=jsonable_encoder(exc.errors()),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Anything unnamed, including failed transactions, is a 500"""
    # Runs outside RequestContextMiddleware, so the request id is passed explicitly
    logger.error(
        "Unhandled exception: %s",
        exc,
        extra={
            "path": request.url.path,
            "correlation_id": getattr(request.state, "request_id", None),
        },
        exc_info=True,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "Internal server error",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "academy.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
