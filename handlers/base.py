# Base utilities for all handlers
# Response builders and JSON helpers shared by the relay handlers
import json
from typing import Any, Dict


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================
def jdump(x: Any, pretty: bool = False) -> str:
    """JSON dump with defaults for non-serializable types."""
    return json.dumps(x, ensure_ascii=False, default=str, indent=2 if pretty else None)


# =============================================================================
# RESPONSE HELPERS
# =============================================================================
def ok_response() -> Dict[str, Any]:
    """Empty 200 response. Slack never learns whether an event was forwarded."""
    return {"statusCode": 200, "body": ""}


def text_response(body: str, status_code: int = 200) -> Dict[str, Any]:
    """Plain-text response (url_verification handshake)."""
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "text/plain"},
        "body": body,
        "isBase64Encoded": False,
    }
