# =============================================================================
# API Gateway Handler
# =============================================================================
# Entry point for Slack Events API requests.
# Parses request, verifies it, dispatches, returns the proxy response.
# =============================================================================

import logging
from typing import Any, Dict
from handlers.webhook_security import verify_request
from src.runtime.deps import Deps, get_deps
from src.runtime.dispatch import dispatch
from src.runtime.parse_event import parse_event

logger = logging.getLogger(__name__)


def api_handler(event: Dict[str, Any], context: Any, deps: Deps = None) -> Dict[str, Any]:
    """
    API Gateway / direct invoke entry point.

    Args:
        event: API Gateway proxy event, or a raw Slack payload
        context: Lambda context
        deps: Dependency container (defaults to the per-process instance)

    Returns:
        API Gateway response format

    Raises:
        ParseError: malformed request; the invocation fails
        AuthError: verification failed; the invocation fails
        ConfigError: configuration could not be loaded
    """
    envelope, source = parse_event(event)
    logger.info(f"Received {envelope.kind.value} from {source}: request={envelope.request_id}")

    if deps is None:
        deps = get_deps()

    verify_request(envelope, deps.config)
    return dispatch(envelope, deps)
