"""
logging.py — Application-Wide Logging Configuration

Purpose:
- Apply `settings.LOG_LEVEL` and one line format to the root logger, so API
  requests, valuation runs and background scenario jobs log the same way.
- Hand out named loggers to the rest of the package.

Format: timestamp | level | module | message
"""

import logging
from typing import Optional

from valuador.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# -----------------------------------------------------------------------------
# Root Logger Initialization
# -----------------------------------------------------------------------------

def configure_logging(level: Optional[str] = None) -> int:
    """
    Configure the root logger and return the numeric level applied.

    `level` defaults to `settings.LOG_LEVEL`. The level is set on the root
    logger explicitly, since basicConfig leaves an already-configured root
    (uvicorn, pytest) untouched. Called once from `main.py`.
    """
    name = (level or settings.LOG_LEVEL).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.basicConfig(format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric)

    logging.getLogger(__name__).info("Logging initialized with level %s", logging.getLevelName(numeric))
    return numeric

# -----------------------------------------------------------------------------
# Logger Access Helper
# -----------------------------------------------------------------------------

def get_logger(name: str) -> logging.Logger:
    """Return `logging.getLogger(name)`; modules call it with `__name__`."""
    return logging.getLogger(name)
