# =============================================================================
# Runtime Package - Envelope, Parsing, Dispatch
# =============================================================================
# Normalizes Lambda events into Envelopes and routes them:
# - API Gateway (HTTP / REST proxy)
# - Lambda direct invoke (internal tooling)
# =============================================================================

from src.runtime.envelope import Envelope, EnvelopeKind, MessageEvent, OtherEvent
from src.runtime.errors import AuthError, ConfigError, ExternalCallFailure, ParseError, RelayError
from src.runtime.parse_event import parse_event, detect_event_source
from src.runtime.config import RelayConfig, load_config
from src.runtime.deps import Deps, create_deps
from src.runtime.dispatch import dispatch

__all__ = [
    "Envelope",
    "EnvelopeKind",
    "MessageEvent",
    "OtherEvent",
    "AuthError",
    "ConfigError",
    "ExternalCallFailure",
    "ParseError",
    "RelayError",
    "parse_event",
    "detect_event_source",
    "RelayConfig",
    "load_config",
    "Deps",
    "create_deps",
    "dispatch",
]
