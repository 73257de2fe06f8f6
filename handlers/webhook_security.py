# =============================================================================
# Webhook Security & Verification
# =============================================================================
# Authenticity checks for Slack Events API requests.
# Ref: https://api.slack.com/authentication/verifying-requests-from-slack
#
# Features:
# - Verification token comparison (payload `token`)
# - HMAC-SHA256 request signature validation (X-Slack-Signature)
# - Replay attack prevention with timestamp validation
# =============================================================================

import hashlib
import hmac
import logging
import time
from typing import Optional, Tuple

from src.runtime.config import RelayConfig
from src.runtime.envelope import Envelope
from src.runtime.errors import AuthError
from src.runtime.parse_event import EventSource

logger = logging.getLogger(__name__)

SIGNATURE_VERSION = "v0"
SIGNATURE_HEADER = "X-Slack-Signature"
TIMESTAMP_HEADER = "X-Slack-Request-Timestamp"

# Timestamp validation window (seconds) - reject requests older than this
TIMESTAMP_TOLERANCE_SECONDS = 300  # 5 minutes


# =============================================================================
# SECURITY HELPER FUNCTIONS
# =============================================================================

def compute_signature(body: str, timestamp: str, secret: str) -> str:
    """Compute the versioned Slack signature for a request body."""
    base_string = f"{SIGNATURE_VERSION}:{timestamp}:{body}"
    digest = hmac.new(
        secret.encode("utf-8"),
        base_string.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def validate_signature(body: str, timestamp: str, signature: str, secret: str) -> Tuple[bool, str]:
    """Validate request signature with timing-safe comparison.

    Returns: (is_valid, error_message)
    """
    if not signature:
        return False, "Missing signature"

    if not timestamp:
        return False, "Missing request timestamp"

    if not signature.startswith(f"{SIGNATURE_VERSION}="):
        return False, f"Invalid signature format. Expected '{SIGNATURE_VERSION}=...'"

    expected = compute_signature(body, timestamp, secret)
    if not hmac.compare_digest(signature.lower().encode("utf-8"), expected.encode("utf-8")):
        return False, "Signature mismatch"

    return True, ""


def validate_timestamp(timestamp: str, now: Optional[float] = None) -> Tuple[bool, str]:
    """Validate request timestamp to prevent replay attacks.

    Returns: (is_valid, error_message)
    """
    try:
        sent_at = int(timestamp)
    except (TypeError, ValueError):
        return False, f"Invalid request timestamp: {timestamp!r}"

    current_time = int(now if now is not None else time.time())
    time_diff = abs(current_time - sent_at)

    if time_diff > TIMESTAMP_TOLERANCE_SECONDS:
        return False, f"Timestamp too old. Difference: {time_diff}s, max allowed: {TIMESTAMP_TOLERANCE_SECONDS}s"

    return True, ""


def validate_token(provided: str, expected: str) -> Tuple[bool, str]:
    """Compare the payload verification token.

    Returns: (is_valid, error_message)
    """
    if not provided:
        return False, "Missing verification token"

    if not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        return False, "Verification token mismatch"

    return True, ""


# =============================================================================
# REQUEST VERIFICATION
# =============================================================================

def verify_request(envelope: Envelope, config: RelayConfig, now: Optional[float] = None) -> None:
    """Verify an inbound envelope before classification.

    The payload token is checked whenever a verification token is configured.
    The signature is checked for API Gateway requests whenever a signing
    secret is configured; direct invokes carry no headers and so need a
    verification token.

    Raises:
        AuthError: with a generic message; the reason is only logged
    """
    checks = []

    if config.verification_token:
        checks.append(validate_token(envelope.token, config.verification_token))

    if config.signing_secret and envelope.source == EventSource.API_GATEWAY:
        timestamp = envelope.header(TIMESTAMP_HEADER)
        checks.append(validate_timestamp(timestamp, now))
        checks.append(validate_signature(
            envelope.raw_body,
            timestamp,
            envelope.header(SIGNATURE_HEADER),
            config.signing_secret,
        ))

    if not checks:
        logger.warning(f"Request {envelope.request_id} rejected: no applicable verification for source {envelope.source}")
        raise AuthError()

    for is_valid, error in checks:
        if not is_valid:
            logger.warning(f"Request {envelope.request_id} rejected: {error}")
            raise AuthError()
