# =============================================================================
# Relay Errors
# =============================================================================
# ParseError, AuthError and ConfigError propagate to the Lambda runtime as a
# failed invocation. ExternalCallFailure is caught inside the pipeline and
# only logged. Filter rejections are values, not exceptions.
# =============================================================================

from typing import Optional


class RelayError(Exception):
    """Base class for all relay errors."""


class ParseError(RelayError):
    """Inbound payload does not match the expected envelope shape."""


class AuthError(RelayError):
    """Verification token or request signature did not match.

    The message is always generic; the concrete reason is only logged.
    """

    def __init__(self, message: str = "Request verification failed"):
        super().__init__(message)


class ConfigError(RelayError):
    """Configuration could not be loaded at cold start."""


class ExternalCallFailure(RelayError):
    """A Slack Web API call failed."""

    def __init__(self, operation: str, error: str, cause: Optional[Exception] = None):
        self.operation = operation
        self.error = error
        self.cause = cause
        super().__init__(f"{operation} failed: {error}")
