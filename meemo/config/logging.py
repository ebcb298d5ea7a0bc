"""
Structured logging configuration for Meemo.

Key Features:
- Tiered handlers (critical/operational/debug) in deployed environments
- Structured JSON output that log aggregators can query by field
- Human-readable console output in development
- Helpers for request, error and security records
"""

import json
import logging
import logging.config
import traceback
from datetime import datetime, timezone
from typing import Any

from meemo.config.env import EnvConfig

APP_LOGGERS = ["meemo", "meemo.api", "meemo.security", "meemo.storage"]

# Deployed environments: (level, debug tier enabled)
ENVIRONMENT_LEVELS = {
  "prod": ("INFO", False),
  "staging": ("INFO", True),
  "test": ("WARNING", False),
}

# Third-party loggers held at WARNING, routed to the named tier
LIBRARY_LOGGERS = {
  "uvicorn": "operational",
  "sqlalchemy": "operational",
  "boto3": "critical",
  "botocore": "critical",
}


class StructuredFormatter(logging.Formatter):
  """
  JSON formatter producing one searchable object per log line.

  Output format:
  - Timestamp in ISO format
  - Consistent field names for filtering
  - Hierarchical component/action structure
  - Metadata preserved as searchable fields
  """

  def format(self, record: logging.LogRecord) -> str:
    log_entry = {
      "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
      .isoformat()
      .replace("+00:00", "Z"),
      "level": record.levelname,
      "component": getattr(record, "component", record.name),
      "message": record.getMessage(),
    }

    if hasattr(record, "action"):
      log_entry["action"] = record.action

    for field in ("user_id", "file_id", "duration_ms", "status_code", "request_id"):
      if hasattr(record, field):
        log_entry[field] = getattr(record, field)

    if record.levelno >= logging.ERROR:
      if record.exc_info:
        log_entry["error"] = {
          "type": record.exc_info[0].__name__ if record.exc_info[0] else "Unknown",
          "message": str(record.exc_info[1]) if record.exc_info[1] else "",
          "traceback": traceback.format_exception(*record.exc_info),
        }

      if hasattr(record, "error_category"):
        log_entry["error_category"] = record.error_category

    if hasattr(record, "metadata"):
      log_entry["metadata"] = record.metadata

    return json.dumps(log_entry, default=str, separators=(",", ":"))


class TieredLogFilter:
  """
  Filter logs by tier.

  Tier 1 (Critical): ERROR, CRITICAL
  Tier 2 (Operational): INFO, WARNING
  Tier 3 (Debug): DEBUG
  """

  def __init__(self, tier: str):
    self.tier = tier

  def filter(self, record: logging.LogRecord) -> bool:
    if self.tier == "critical":
      return record.levelno >= logging.ERROR
    elif self.tier == "operational":
      return logging.INFO <= record.levelno < logging.ERROR
    elif self.tier == "debug":
      return record.levelno == logging.DEBUG
    return True


def get_logging_config(environment: str | None = None) -> dict[str, Any]:
  """
  Generate logging configuration based on environment.

  - prod: INFO level, structured output, no debug logs
  - staging: INFO level, with debug logs enabled
  - test: WARNING level, minimal output for clean test runs
  - anything else (dev, local): console output at LOG_LEVEL, DEBUG if unset
  """
  env = environment or EnvConfig.ENVIRONMENT
  default_level, enable_debug = ENVIRONMENT_LEVELS.get(
    env, (EnvConfig.LOG_LEVEL or "DEBUG", None)
  )
  if enable_debug is None:
    enable_debug = default_level == "DEBUG"

  console_only = env not in ENVIRONMENT_LEVELS
  app_handlers = ["console"] if console_only else ["critical", "operational"]

  def library_handlers(tier: str) -> list[str]:
    return ["console"] if console_only else [tier]

  config = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
      "structured": {"()": StructuredFormatter},
      "simple": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
    },
    "filters": {
      f"{tier}_filter": {"()": TieredLogFilter, "tier": tier}
      for tier in ("critical", "operational", "debug")
    },
    "handlers": {
      "critical": {
        "class": "logging.StreamHandler",
        "level": "ERROR",
        "formatter": "structured",
        "filters": ["critical_filter"],
        "stream": "ext://sys.stderr",
      },
      "operational": {
        "class": "logging.StreamHandler",
        "level": "INFO",
        "formatter": "structured",
        "filters": ["operational_filter"],
        "stream": "ext://sys.stdout",
      },
      "console": {
        "class": "logging.StreamHandler",
        "level": default_level,
        "formatter": "simple" if console_only else "structured",
        "stream": "ext://sys.stdout",
      },
    },
    "loggers": {
      **{
        name: {
          "level": default_level,
          "handlers": list(app_handlers),
          "propagate": False,
        }
        for name in APP_LOGGERS
      },
      **{
        name: {
          "level": "WARNING",
          "handlers": library_handlers(tier),
          "propagate": False,
        }
        for name, tier in LIBRARY_LOGGERS.items()
      },
    },
    "root": {"level": "WARNING", "handlers": library_handlers("critical")},
  }

  if enable_debug:
    config["handlers"]["debug"] = {
      "class": "logging.StreamHandler",
      "level": "DEBUG",
      "formatter": "structured",
      "filters": ["debug_filter"],
      "stream": "ext://sys.stdout",
    }

    if not console_only:
      for logger_name in APP_LOGGERS:
        config["loggers"][logger_name]["handlers"].append("debug")

  return config


def setup_logging(environment: str | None = None) -> None:
  """Initialize structured logging configuration."""
  config = get_logging_config(environment)
  logging.config.dictConfig(config)


def get_logger(name: str) -> logging.Logger:
  """Get a logger with structured logging capabilities."""
  return logging.getLogger(name)


def log_api_request(
  logger: logging.Logger,
  method: str,
  path: str,
  status_code: int,
  duration_ms: float,
  user_id: str | None = None,
  request_id: str | None = None,
) -> None:
  """Log an API request with structured data."""
  logger.info(
    f"{method} {path} - {status_code} ({duration_ms:.2f}ms)",
    extra={
      "component": "api",
      "action": "request_completed",
      "method": method,
      "path": path,
      "status_code": status_code,
      "duration_ms": duration_ms,
      "user_id": user_id,
      "request_id": request_id,
    },
  )


def log_error(
  logger: logging.Logger,
  error: Exception,
  component: str,
  action: str,
  error_category: str = "application",
  user_id: str | None = None,
  metadata: dict[str, Any] | None = None,
) -> None:
  """Log error with structured data for easy searching."""
  logger.error(
    f"Error in {component}.{action}: {error!s}",
    exc_info=True,
    extra={
      "component": component,
      "action": action,
      "error_category": error_category,
      "user_id": user_id,
      "metadata": metadata or {},
    },
  )


def log_security_event(
  logger: logging.Logger,
  event_type: str,
  user_id: str | None = None,
  ip_address: str | None = None,
  success: bool = True,
  metadata: dict[str, Any] | None = None,
) -> None:
  """Log security events for monitoring and alerting."""
  level = logging.INFO if success else logging.WARNING

  logger.log(
    level,
    f"Security event: {event_type} - {'Success' if success else 'Failed'}",
    extra={
      "component": "security",
      "action": event_type,
      "user_id": user_id,
      "ip_address": ip_address,
      "success": success,
      "metadata": metadata or {},
    },
  )
