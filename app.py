import logging
import os
from typing import Any, Dict

from src.app.api_handler import api_handler


def resolve_log_level(name: str) -> int:
    """Map a LOG_LEVEL value to a logging level, INFO when unrecognized."""
    level = logging.getLevelName((name or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


# ---------- Logger ----------
logger = logging.getLogger()
logger.setLevel(resolve_log_level(os.environ.get("LOG_LEVEL", "INFO")))


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    logger.info("RAW_EVENT_KEYS=%s", sorted(event.keys()) if isinstance(event, dict) else type(event).__name__)
    return api_handler(event, context)
