# catalog/logger.py

import logging
from logging.handlers import RotatingFileHandler
import os
import sys
import json
from datetime import datetime, timezone


# Context passed with extra=... that is copied into the JSON record
EXTRA_FIELDS = ("dataset", "path", "product_id")


# One JSON object per log line
class JsonFormatter(logging.Formatter):
  def format(self, record):
    log_record = {
      "timestamp": datetime.now(timezone.utc).isoformat(),
      "level": record.levelname,
      "logger": record.name,
      "message": record.getMessage(),
      "file": record.pathname,
      "line": record.lineno,
      "function": record.funcName
    }

    for key in EXTRA_FIELDS:
      if hasattr(record, key):
        log_record[key] = getattr(record, key)

    if record.exc_info:
      log_record["exception"] = self.formatException(record.exc_info)

    return json.dumps(log_record, ensure_ascii=False)


json_formatter = JsonFormatter()

def configure_logging():
  ENV = os.getenv("APP_ENV", "development")

  LOG_DIR = os.getenv("CATALOG_LOG_DIR", "logs")
  APP_LOG_FILE = os.path.join(LOG_DIR, "app.log")
  TEST_LOG_FILE = os.path.join(LOG_DIR, "test.log")

  os.makedirs(LOG_DIR, exist_ok=True)

  # Root logger
  logger = logging.getLogger()
  if ENV == "testing" or ENV == "development":
    logger.setLevel(logging.DEBUG)
  else: # production
    logger.setLevel(logging.INFO)

  # Clear previous handler
  if logger.hasHandlers():
    logger.handlers.clear()

  # --- Console (stdout) logger ---
  console_handler = logging.StreamHandler(sys.stdout)
  console_handler.setFormatter(json_formatter)
  console_handler.setLevel(logging.ERROR)
  logger.addHandler(console_handler)

  # testing -> test.log, everything else -> app.log
  if ENV == "testing":
    file_handler = RotatingFileHandler(TEST_LOG_FILE, maxBytes=1*1024*1024, backupCount=1, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
  else:
    file_handler = RotatingFileHandler(APP_LOG_FILE, maxBytes=5*1024*1024, backupCount=3, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
  file_handler.setFormatter(json_formatter)
  logger.addHandler(file_handler)


def get_logger(name):
  """
  Returns a logger object with specific name.
  Before call this function configure_logging() must be called.
  """
  return logging.getLogger(name)
