"""Meemo file storage API main application module."""

from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from meemo.config import env
from meemo.config.logging import get_logger
from meemo.database import init_db
from meemo.exceptions import MeemoError
from meemo.middleware.database import DatabaseSessionMiddleware
from meemo.middleware.logging import StructuredLoggingMiddleware
from meemo.routers import router as v1_router
from meemo.routers.status import get_app_version
from meemo.routers.utils import GENERIC_ERROR_DETAIL, status_code_for

logger = get_logger("meemo.api")


def create_app() -> FastAPI:
  """
  Create the FastAPI app and include the routers.

  Returns:
      FastAPI: The configured FastAPI application.
  """
  app = FastAPI(
    title="Meemo API",
    version=get_app_version(),
    description="Multi-tenant file storage: accounts, file metadata and S3-backed content.",
    openapi_url="/openapi.json",
  )

  app.state.current_time = datetime.now(timezone.utc)

  @app.on_event("startup")
  async def startup_event():
    """Validate configuration on startup."""
    logger.info("Starting Meemo API...")

    errors = env.validate()
    if errors:
      logger.error(f"Configuration validation failed: {errors}")
      if env.is_production():
        # In production, fail fast on invalid configuration
        raise RuntimeError(f"Invalid configuration: {'; '.join(errors)}")
      logger.warning("Continuing with invalid configuration (non-production)")
    else:
      logger.info(f"Configuration validated successfully: {env.get_config_summary()}")

    if env.is_development():
      # Migrations own the schema elsewhere
      init_db()

    logger.info("Meemo API startup complete")

  app.add_middleware(
    CORSMiddleware,
    allow_origins=env.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Accept", "Content-Type", "Authorization", "X-Requested-With"],
    expose_headers=["X-Request-ID", "Content-Disposition"],
    max_age=3600,
  )

  # Order matters - last added = outermost layer
  app.add_middleware(DatabaseSessionMiddleware)
  app.add_middleware(StructuredLoggingMiddleware)

  @app.exception_handler(MeemoError)
  async def meemo_exception_handler(request: Request, exc: MeemoError) -> JSONResponse:
    """Map typed errors that escape a router to their HTTP status."""
    request_id = getattr(request.state, "request_id", None)
    status_code = status_code_for(exc)

    if status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
      logger.error(
        f"Unhandled application error: {exc.message}",
        extra={"request_id": request_id, "error_code": exc.error_code},
        exc_info=True,
      )
      detail, code = GENERIC_ERROR_DETAIL, None
    else:
      detail, code = exc.message, exc.error_code

    return JSONResponse(
      status_code=status_code,
      content={
        "detail": detail,
        "code": code,
        "request_id": request_id,
        "timestamp": exc.timestamp,
      },
    )

  @app.exception_handler(Exception)
  async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler returning generic error and request ID.

    Internal exception details are logged server-side; clients receive a generic
    message with a correlation identifier.
    """
    request_id = getattr(request.state, "request_id", None)
    logger.error("Unhandled exception", extra={"request_id": request_id}, exc_info=True)

    return JSONResponse(
      status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
      content={"detail": GENERIC_ERROR_DETAIL, "request_id": request_id},
    )

  app.include_router(v1_router)

  return app


app = create_app()


if __name__ == "__main__":
  import uvicorn

  uvicorn.run("main:app", host=env.HOST, port=env.PORT, log_level=env.LOG_LEVEL.lower())
