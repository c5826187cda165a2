"""Application settings."""

import os
from datetime import timedelta
from pathlib import Path

# Logging
LOG_DIR = Path(os.getenv("TELEMETRY_LOG_DIR", "logs"))

# API
API_BASE_URL = os.getenv("TELEMETRY_API_URL", "https://apptelemetry.io/api/v1")
API_TOKEN = os.getenv("TELEMETRY_API_TOKEN")
API_TIMEOUT = int(os.getenv("TELEMETRY_API_TIMEOUT", "60"))
MAX_CONCURRENT = int(os.getenv("TELEMETRY_MAX_CONCURRENT", "20"))

# Insight cache
INSIGHTS_STALE_AFTER = timedelta(seconds=int(os.getenv("TELEMETRY_INSIGHTS_STALE_SECONDS", "300")))
