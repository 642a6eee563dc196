"""Project-wide runtime settings for calamine."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

# ---------------------------------------------------------------------------
# Batch processing
# ---------------------------------------------------------------------------
BATCH_MAX_WORKERS = 8
