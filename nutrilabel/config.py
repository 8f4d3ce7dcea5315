"""
Environment-driven settings.

Values come from the process environment, optionally populated from a .env
file in the working directory. Everything has a default except the USDA
FoodData Central API key, which is only required once a request is sent.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent

USDA_API_KEY = os.getenv("USDA_API_KEY", "")
FDC_BASE_URL = os.getenv("FDC_BASE_URL", "https://api.nal.usda.gov/fdc/v1").rstrip("/")
FDC_TIMEOUT = float(os.getenv("FDC_TIMEOUT", "10"))
FDC_MAX_RETRIES = int(os.getenv("FDC_MAX_RETRIES", "3"))
FDC_MAX_WORKERS = int(os.getenv("FDC_MAX_WORKERS", "6"))
FDC_CACHE_FILE = Path(os.getenv("FDC_CACHE_FILE", str(PACKAGE_DIR / "cache" / ".cache_fdc.json")))
FDC_CACHE_TTL = int(float(os.getenv("FDC_CACHE_TTL_DAYS", "14")) * 24 * 3600)

MAX_TEXT_BYTES = int(os.getenv("RECIPE_MAX_BYTES", "50000"))
MAX_LINES = int(os.getenv("RECIPE_MAX_LINES", "500"))

LOG_LEVEL = os.getenv("NUTRILABEL_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO), format=LOG_FORMAT)
