"""
Prover Service - Main Application
=================================

FastAPI application for heuristic proof generation and verification.

Version: 0.1.0
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ghostfi.config import settings
from ghostfi.ledger import get_ledger_client
from ghostfi.logging import get_logger, setup_logging
from services.prover.routes import proofs


setup_logging(
    log_level=settings.log_level.value,
    json_logs=settings.is_production,
    service_name="prover",
)

logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Service health check response."""

    status: str = "healthy"
    service: str
    version: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    components: dict[str, dict[str, Any]] = Field(default_factory=dict)


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:
    """Application lifespan manager."""
    logger.info(
        "prover_service_starting",
        environment=settings.environment.value,
        port=settings.port,
        circuit_workspace=str(settings.circuit_workspace),
    )

    try:
        get_ledger_client()
        logger.info("ledger_connected", mode=settings.ledger.mode.value)
    except Exception as e:
        logger.error("startup_failed", error=str(e))
        raise

    yield

    logger.info("prover_service_shutting_down")


app = FastAPI(
    title="GhostFi Prover Service",
    description="Zero-knowledge eligibility proofs for undisclosed lending heuristics",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Service health check."""
    components: dict[str, dict[str, Any]] = {
        "ledger": await get_ledger_client().health_check(),
        "circuit_workspace": {
            "status": "healthy" if settings.circuit_workspace.is_dir() else "unavailable",
            "path": str(settings.circuit_workspace),
        },
    }

    all_healthy = all(c.get("status") == "healthy" for c in components.values())

    return HealthResponse(
        status="healthy" if all_healthy else "degraded",
        service="prover",
        version="0.1.0",
        components=components,
    )


app.include_router(proofs.router, tags=["Proofs"])


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Any, exc: HTTPException) -> Any:
    """Handle HTTP exceptions."""
    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "status_code": exc.status_code,
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Any, exc: Exception) -> Any:
    """Handle unexpected exceptions."""
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Internal server error",
            "status_code": 500,
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.prover.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.value.lower(),
    )
