# =============================================================================
# Application Entry Points
# =============================================================================
# Thin transport adapter that parses events and calls the dispatcher.
# =============================================================================

from src.app.api_handler import api_handler

__all__ = [
    "api_handler",
]
