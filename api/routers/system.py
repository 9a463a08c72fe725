"""
System API router.

Handles the root endpoint and the health check.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from api.middleware import get_request_id
from api.state import get_engine_state
from src.data.resilience import get_all_circuit_breaker_status

router = APIRouter(tags=["System"])

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


@router.get("/")
async def root():
    """
    API root endpoint.

    Returns basic API information and available endpoint categories.
    """
    return {
        "name": "SmartBagan API",
        "version": API_VERSION,
        "status": "operational",
        "docs": "/api/docs",
        "endpoints": {
            "health": "/api/health",
            "optimize": "/api/optimize/...",
            "zones": "/api/zones/...",
        }
    }


@router.get("/api/health")
async def health_check():
    """
    Health check for load balancers.

    Reports component state and the circuit breaker of every
    environmental data provider. The service is ``degraded`` while any
    breaker is open, since scores then rely on fallback values.
    """
    components = get_engine_state().health_check()
    breakers = get_all_circuit_breaker_status()
    degraded = any(b.get("state") == "open" for b in breakers.values())
    return {
        "status": "degraded" if degraded else "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": API_VERSION,
        "components": components,
        "circuit_breakers": breakers,
        "request_id": get_request_id(),
    }
