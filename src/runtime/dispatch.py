# =============================================================================
# Unified Dispatcher
# =============================================================================
# Routes a verified Envelope:
# - url_verification → challenge echo
# - event_callback   → registered inner-event handler, or no-op
# - anything else    → no-op
# =============================================================================

import logging
from typing import Any, Callable, Dict, List, Optional
from src.runtime.envelope import Envelope, InnerEvent
from src.runtime.deps import Deps, get_deps
from handlers.base import ok_response, text_response

logger = logging.getLogger(__name__)

# Type definitions
HandlerFunc = Callable[[InnerEvent, Deps], Dict[str, Any]]

# =============================================================================
# HANDLER REGISTRY
# =============================================================================
_HANDLERS: Dict[str, HandlerFunc] = {}
_HANDLER_METADATA: Dict[str, Dict[str, Any]] = {}


def register(event_type: str, description: str = None):
    """
    Decorator to register a handler for an inner event type.

    Usage:
        @register("message")
        def handle_message(event: MessageEvent, deps: Deps) -> Dict:
            return {"statusCode": 200, "body": ""}
    """
    def decorator(func: HandlerFunc) -> HandlerFunc:
        desc = description
        if not desc and func.__doc__:
            desc = func.__doc__.split("\n")[0].strip()
        if not desc:
            desc = f"Handle {event_type} events"

        _HANDLERS[event_type] = func
        _HANDLER_METADATA[event_type] = {
            "description": desc,
            "module": func.__module__,
            "function": func.__name__,
        }
        return func
    return decorator


def get_handler(event_type: str) -> Optional[HandlerFunc]:
    """Get handler for an inner event type."""
    _ensure_handlers_loaded()
    return _HANDLERS.get(event_type)


def handler_exists(event_type: str) -> bool:
    """Check if handler exists."""
    _ensure_handlers_loaded()
    return event_type in _HANDLERS


def list_handlers() -> Dict[str, str]:
    """List all handlers with descriptions."""
    _ensure_handlers_loaded()
    return {event_type: meta["description"] for event_type, meta in _HANDLER_METADATA.items()}


# =============================================================================
# DISPATCH FUNCTIONS
# =============================================================================

def dispatch(envelope: Envelope, deps: Deps = None) -> Dict[str, Any]:
    """
    Dispatch a verified envelope.

    Args:
        envelope: Normalized Slack envelope
        deps: Dependency injection container (optional, uses global if not provided)

    Returns:
        API Gateway response dict

    Raises:
        ParseError: if a handshake or callback payload is malformed
    """
    if envelope.is_url_verification:
        logger.info(f"Answering url_verification request={envelope.request_id}")
        return text_response(envelope.challenge)

    if not envelope.is_event_callback:
        logger.info(f"Ignoring envelope kind={envelope.kind.value} request={envelope.request_id}")
        return ok_response()

    inner = envelope.inner_event
    retry_num = envelope.metadata.get("retryNum")
    logger.info(
        f"Dispatching event_callback type={inner.type} request={envelope.request_id}"
        + (f" retry={retry_num}" if retry_num else "")
    )

    handler = get_handler(inner.type)
    if handler is None:
        return ok_response()

    if deps is None:
        deps = get_deps()
    return handler(inner, deps)


# =============================================================================
# HANDLER LOADING
# =============================================================================

_handlers_loaded = False

HANDLER_MODULES: List[str] = [
    "handlers.timeline",
]


def _ensure_handlers_loaded():
    """Ensure all handler modules are imported into the registry."""
    global _handlers_loaded
    if _handlers_loaded:
        return
    _handlers_loaded = True

    import importlib

    for module in HANDLER_MODULES:
        importlib.import_module(module)

    logger.debug(f"Loaded {len(_HANDLERS)} handlers into registry")
