"""
Unprotected status endpoints for load balancers and monitoring.
"""

from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError, version

from fastapi import APIRouter

from ..models.api.common import HealthStatus, PingResponse

router = APIRouter(tags=["Status"])


def get_app_version() -> str:
  """Get the application version from installed package metadata."""
  try:
    return version("meemo")
  except PackageNotFoundError:
    return "unknown"


@router.get(
  "/status",
  response_model=HealthStatus,
  operation_id="getServiceStatus",
  summary="Health Check",
  description="Service health check endpoint for monitoring and load balancers",
  responses={200: {"description": "Service is healthy", "model": HealthStatus}},
)
async def service_status() -> HealthStatus:
  return HealthStatus(
    status="healthy",
    timestamp=datetime.now(timezone.utc),
    details={"service": "meemo-api", "version": get_app_version()},
  )


@router.get(
  "/ping",
  response_model=PingResponse,
  operation_id="ping",
  summary="Ping",
  description="Liveness probe.",
)
async def ping() -> PingResponse:
  return PingResponse(message="pong")
