"""
FastAPI backend for the SmartBagan optimization engine.

Provides REST API endpoints for:
- Fleet analysis: move/stay per bagan and the service vessel route
- Single move checks
- Optimizer configuration
- Fishing zone recommendations and point scoring

Version: 1.0.0
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from api.config import settings
from api.middleware import error_response, setup_middleware, structured_logger
from api.routers import optimization, system, zones
from src.optimization.errors import ComputationError, ValidationError

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(message)s',  # JSON logs are self-contained
)
logger = logging.getLogger(__name__)


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    """
    Application factory for the SmartBagan API.

    Returns:
        FastAPI: Configured application instance
    """
    application = FastAPI(
        title="SmartBagan API",
        description="""
## Bagan Relocation Optimization API

Decides which floating fishing platforms (bagans) are worth towing to a
better site tonight, and in what order a single service vessel should
visit them.

### Features
- Environmental suitability scoring (chlorophyll, SST, moon, waves, wind)
- Candidate site scanning around the vessel
- Per-bagan move economics (fuel cost vs. extra catch revenue)
- Minimum-distance pickup route
        """,
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    setup_middleware(application, debug=settings.is_development)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "OPTIONS"],
        allow_headers=["*"],
    )

    @application.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        structured_logger.warning(
            "Rejected input", path=request.url.path, error=str(exc),
        )
        return error_response(400, "Invalid input", str(exc))

    @application.exception_handler(ComputationError)
    async def computation_error_handler(request: Request, exc: ComputationError):
        structured_logger.error(
            "Computation failed",
            path=request.url.path,
            error=str(exc),
            platform_id=exc.platform_id,
            site_id=exc.site_id,
        )
        return error_response(500, "Computation failed", str(exc))

    @application.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.error(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=422, content={"detail": jsonable_errors(exc)})

    application.include_router(system.router)
    application.include_router(optimization.router)
    application.include_router(zones.router)

    return application


def jsonable_errors(exc: RequestValidationError) -> list:
    """Pydantic error list with the non-serializable ``ctx``/``input`` entries dropped."""
    return [
        {k: v for k, v in err.items() if k in ("type", "loc", "msg")}
        for err in exc.errors()
    ]


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level,
    )
