# =============================================================================
# Event Parser - Detect and Parse Lambda Events
# =============================================================================
# Detects event source and normalizes into Envelope format.
# Supports: API Gateway (REST v1 / HTTP v2) and direct invoke.
# =============================================================================

import base64
import binascii
import json
import logging
import uuid
from typing import Any, Dict, Tuple
from src.runtime.envelope import Envelope
from src.runtime.errors import ParseError

logger = logging.getLogger(__name__)


class EventSource:
    """Event source identifiers."""
    API_GATEWAY = "api_gateway"
    DIRECT = "direct"
    UNKNOWN = "unknown"


def detect_event_source(event: Dict[str, Any]) -> str:
    """
    Detect the source of a Lambda event.

    Returns one of: api_gateway, direct, unknown
    """
    if not event or not isinstance(event, dict):
        return EventSource.UNKNOWN

    # API Gateway HTTP API (v2) or REST API (v1)
    if "requestContext" in event:
        if "http" in event.get("requestContext", {}):
            return EventSource.API_GATEWAY  # HTTP API v2
        if "httpMethod" in event.get("requestContext", {}):
            return EventSource.API_GATEWAY  # REST API v1

    # Proxy events without a request context (local tooling, tests)
    if "body" in event and ("headers" in event or "isBase64Encoded" in event):
        return EventSource.API_GATEWAY

    # Direct invoke with the Slack payload itself
    if "type" in event:
        return EventSource.DIRECT

    return EventSource.UNKNOWN


def _decode_body(event: Dict[str, Any]) -> str:
    """Return the request body as text, undoing API Gateway base64 encoding."""
    body = event.get("body")
    if body is None:
        raise ParseError("Request has no body")
    if not isinstance(body, str):
        raise ParseError("Request body must be a string")

    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ParseError(f"Invalid base64 body: {e}") from e
    return body


def _parse_api_gateway_event(event: Dict[str, Any]) -> Envelope:
    """Parse API Gateway HTTP API or REST API event."""
    request_context = event.get("requestContext") or {}
    headers = event.get("headers") or {}

    request_id = request_context.get("requestId") or str(uuid.uuid4())

    raw_body = _decode_body(event)
    try:
        payload = json.loads(raw_body)
    except json.JSONDecodeError as e:
        raise ParseError(f"Body is not valid JSON: {e}") from e

    lowered = {str(k).lower(): v for k, v in headers.items()}

    return Envelope.from_payload(
        payload,
        source=EventSource.API_GATEWAY,
        request_id=request_id,
        raw_body=raw_body,
        headers=headers,
        metadata={
            "httpMethod": request_context.get("http", {}).get("method") or request_context.get("httpMethod"),
            "path": request_context.get("http", {}).get("path") or event.get("path"),
            "retryNum": lowered.get("x-slack-retry-num"),
            "retryReason": lowered.get("x-slack-retry-reason"),
        },
    )


def parse_event(event: Dict[str, Any]) -> Tuple[Envelope, str]:
    """
    Parse any supported Lambda event into an Envelope.

    Returns:
        Tuple of (envelope, source)

    Raises:
        ParseError: if the event cannot be parsed into a Slack envelope
    """
    source = detect_event_source(event)
    logger.debug(f"Detected event source: {source}")

    if source == EventSource.API_GATEWAY:
        return _parse_api_gateway_event(event), source

    if source == EventSource.DIRECT:
        return Envelope.from_payload(dict(event), source=EventSource.DIRECT), source

    raise ParseError("Unrecognized event shape")
