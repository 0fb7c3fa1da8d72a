# catalog/config.py

from dataclasses import dataclass
from functools import lru_cache
import os


@dataclass(frozen=True)
class Settings:
  """Typed view of environment variables."""

  app_env: str
  data_dir: str
  max_body_bytes: int
  api_port: int
  api_url: str
  dashboard_port: int


def _int(value, default: int) -> int:
  try:
    return int(value)
  except (TypeError, ValueError):
    return default


@lru_cache
def get_settings() -> Settings:
  """Read the current environment and build a Settings instance."""
  return Settings(
    app_env=(os.getenv("APP_ENV") or "development").lower(),
    data_dir=os.getenv("CATALOG_DATA_DIR", "data"),
    max_body_bytes=_int(os.getenv("CATALOG_MAX_BODY_BYTES"), 10 * 1024 * 1024), # 10mb for base64 images
    api_port=_int(os.getenv("CATALOG_API_PORT"), 3000),
    api_url=os.getenv("CATALOG_API_URL", "http://127.0.0.1:3000").rstrip("/"),
    dashboard_port=_int(os.getenv("CATALOG_DASHBOARD_PORT"), 5000),
  )
