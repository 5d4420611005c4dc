"""Health check endpoint."""

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health(request: Request):
    """Health check endpoint with component status."""
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        "services": {}
    }

    if getattr(request.app.state, "token_service", None) is not None:
        health_status["services"]["token_service"] = {
            "status": "healthy",
            "message": "Key pair loaded"
        }
    else:
        health_status["services"]["token_service"] = {
            "status": "unhealthy",
            "message": "Key pair not loaded"
        }
        health_status["status"] = "degraded"

    # unauthenticated endpoint: no account count
    health_status["services"]["user_store"] = {
        "status": "healthy",
        "message": "In-memory store available"
    }

    status_code = status.HTTP_200_OK if health_status["status"] == "healthy" else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        content=health_status,
        status_code=status_code
    )
