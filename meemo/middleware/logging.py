"""
Logging middleware for structured API request logging.
"""

import time
import uuid
from typing import Callable, Optional
from urllib.parse import parse_qsl, urlencode

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from meemo.logger import log_api, log_app_error

# Query parameters that are always redacted in logs
SENSITIVE_QUERY_PARAMS = {
  "token",
  "authorization",
  "password",
  "secret",
  "jwt",
  "access_token",
  "refresh_token",
}


def redact_sensitive_query_params(query_string: str) -> str:
  """
  Redact sensitive query parameters from a query string for safe logging.

  Args:
      query_string: The raw query string from a URL

  Returns:
      Query string with sensitive values replaced with REDACTED
  """
  if not query_string:
    return ""

  qs_pairs = parse_qsl(query_string, keep_blank_values=True)
  redacted_pairs = [
    (k, "REDACTED" if k.lower() in SENSITIVE_QUERY_PARAMS else v) for k, v in qs_pairs
  ]
  return urlencode(redacted_pairs)


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
  """
  Logs every API request with timing, status and a request id.

  The request id is taken from an incoming ``X-Request-ID`` header when
  present, generated otherwise, and returned in the response header.
  """

  def __init__(self, app, exclude_paths: Optional[list] = None):
    super().__init__(app)
    self.exclude_paths = exclude_paths or [
      "/api/v1/status",
      "/api/v1/ping",
      "/favicon.ico",
      "/docs",
      "/redoc",
      "/openapi.json",
    ]

  async def dispatch(self, request: Request, call_next: Callable) -> Response:
    if any(request.url.path.startswith(path) for path in self.exclude_paths):
      return await call_next(request)

    # Keep a caller-supplied id so traces line up across services
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    request.state.request_id = request_id
    start_time = time.time()

    try:
      response = await call_next(request)
    except Exception as e:
      duration_ms = (time.time() - start_time) * 1000
      user_id = getattr(request.state, "user_id", None)
      log_app_error(
        error=e,
        component="api_middleware",
        action="request_processing",
        user_id=str(user_id) if user_id else None,
        metadata={
          "method": request.method,
          "path": request.url.path,
          "query": redact_sensitive_query_params(str(request.url.query)),
          "duration_ms": duration_ms,
          "request_id": request_id,
        },
      )
      raise

    duration_ms = (time.time() - start_time) * 1000
    user_id = getattr(request.state, "user_id", None)
    log_api(
      method=request.method,
      path=request.url.path,
      status_code=response.status_code,
      duration_ms=duration_ms,
      user_id=str(user_id) if user_id else None,
      request_id=request_id,
    )

    response.headers["X-Request-ID"] = request_id
    return response
