import json
import logging
import sys
from unittest.mock import MagicMock

import pytest

from meemo.config.logging import (
  APP_LOGGERS,
  StructuredFormatter,
  TieredLogFilter,
  get_logging_config,
  log_error,
  log_security_event,
)


def make_record(level=logging.INFO, msg="hello", **extra):
  record = logging.LogRecord("meemo.storage", level, __file__, 1, msg, None, None)
  for key, value in extra.items():
    setattr(record, key, value)
  return record


class TestStructuredFormatter:
  def test_basic_fields(self):
    output = json.loads(StructuredFormatter().format(make_record(file_id=3)))

    assert output["level"] == "INFO"
    assert output["component"] == "meemo.storage"
    assert output["message"] == "hello"
    assert output["file_id"] == 3
    assert output["timestamp"].endswith("Z")

  def test_error_includes_exception(self):
    try:
      raise ValueError("bad value")
    except ValueError:
      record = make_record(logging.ERROR, error_category="STORAGE_ERROR")
      record.exc_info = sys.exc_info()

    output = json.loads(StructuredFormatter().format(record))

    assert output["error"]["type"] == "ValueError"
    assert output["error"]["message"] == "bad value"
    assert output["error_category"] == "STORAGE_ERROR"


@pytest.mark.parametrize(
  "tier,level,expected",
  [
    ("critical", logging.ERROR, True),
    ("critical", logging.WARNING, False),
    ("operational", logging.WARNING, True),
    ("operational", logging.ERROR, False),
    ("debug", logging.DEBUG, True),
    ("debug", logging.INFO, False),
  ],
)
def test_tiered_filter(tier, level, expected):
  assert TieredLogFilter(tier).filter(make_record(level)) is expected


class TestLoggingConfig:
  def test_production_uses_structured_tiers(self):
    config = get_logging_config("prod")

    assert config["loggers"]["meemo"]["level"] == "INFO"
    assert config["loggers"]["meemo"]["handlers"] == ["critical", "operational"]
    assert "debug" not in config["handlers"]

  def test_staging_adds_debug_tier(self):
    config = get_logging_config("staging")

    for name in APP_LOGGERS:
      assert "debug" in config["loggers"][name]["handlers"]

  def test_dev_logs_to_console(self):
    config = get_logging_config("dev")

    assert config["loggers"]["meemo.api"]["handlers"] == ["console"]
    assert config["handlers"]["console"]["formatter"] == "simple"
    assert config["loggers"]["botocore"]["handlers"] == ["console"]

  def test_test_environment_is_quiet(self):
    config = get_logging_config("test")

    assert config["loggers"]["meemo"]["level"] == "WARNING"
    assert config["loggers"]["boto3"]["handlers"] == ["critical"]


def test_failed_security_event_logs_warning():
  logger = MagicMock()

  log_security_event(logger, "login", user_id="1", ip_address="10.0.0.1", success=False)

  level, message = logger.log.call_args.args
  assert level == logging.WARNING
  assert message == "Security event: login - Failed"
  assert logger.log.call_args.kwargs["extra"]["ip_address"] == "10.0.0.1"


def test_log_error_records_context():
  logger = MagicMock()

  log_error(logger, RuntimeError("boom"), "files", "upload", metadata={"file_id": 1})

  extra = logger.error.call_args.kwargs["extra"]
  assert extra["component"] == "files"
  assert extra["action"] == "upload"
  assert extra["metadata"] == {"file_id": 1}
