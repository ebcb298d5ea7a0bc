"""
Common API models shared across multiple routers.

Consistent error and health payloads for every endpoint.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
  """Standard error response format used across all API endpoints."""

  detail: str = Field(
    ...,
    description="Human-readable error message explaining what went wrong",
    examples=["File 'report.pdf' not found"],
  )
  code: str | None = Field(
    None,
    description="Machine-readable error code for programmatic handling",
    examples=["ENTITY_NOT_FOUND"],
  )
  request_id: str | None = Field(
    None,
    description="Unique request ID for tracking and debugging",
    examples=["req_1234567890abcdef"],
  )
  timestamp: datetime | None = Field(
    None,
    description="Timestamp when the error occurred",
    examples=["2024-01-01T00:00:00Z"],
  )


class SuccessResponse(BaseModel):
  """Standard success response for operations without specific return data."""

  success: bool = Field(
    True, description="Indicates the operation completed successfully"
  )
  message: str = Field(
    ...,
    description="Human-readable success message",
    examples=["Operation completed successfully"],
  )
  data: dict[str, Any] | None = Field(
    None, description="Optional additional data related to the operation"
  )


class HealthStatus(BaseModel):
  """Health check status information."""

  status: str = Field(
    ...,
    description="Current health status",
    examples=["healthy"],
    pattern="^(healthy|degraded|unhealthy)$",
  )
  timestamp: datetime = Field(
    ..., description="Time of health check", examples=["2024-01-01T00:00:00Z"]
  )
  details: dict[str, Any] | None = Field(
    None, description="Additional health check details"
  )


class PingResponse(BaseModel):
  message: str = Field("pong", description="Liveness reply")
