"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from identity_service.api.middleware import RequestIDMiddleware
from identity_service.api.routes import api_router
from identity_service.core.exceptions import IdentityServiceError, InvariantViolation
from identity_service.logging_config import setup_logging
from identity_service.persistence.database import dispose_engine
from identity_service.settings import settings

# Setup logging
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Identity service starting", extra={"environment": settings.environment})
    yield
    # Shutdown
    await dispose_engine()


# Create FastAPI app
app = FastAPI(
    title="Identity Reconciliation API",
    description="Links customer contacts that share an email or phone number",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestIDMiddleware)


@app.exception_handler(IdentityServiceError)
async def identity_service_error_handler(request: Request, exc: IdentityServiceError) -> JSONResponse:
    """Translate domain errors into {"error": ...} bodies."""
    if isinstance(exc, InvariantViolation):
        logger.critical(
            "Contact store invariant violated",
            extra={"path": request.url.path, "detail": str(exc)},
        )
    elif exc.status_code >= 500:
        logger.error(
            "Request failed",
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies, parameters and ids are plain 400s."""
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"{location}: {message}" if location else message},
    )


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Store errors that escaped a service never expose their text."""
    logger.error(
        "Unhandled store error",
        extra={"path": request.url.path, "error_type": type(exc).__name__},
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


app.include_router(api_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Identity Reconciliation API",
        "version": "0.1.0",
        "docs": "/docs",
    }


def run() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "identity_service.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
