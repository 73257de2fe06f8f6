# =============================================================================
# Envelope - Normalized Slack Events API Container
# =============================================================================
# Every inbound request (API Gateway or direct invoke) is normalized into an
# Envelope before verification and dispatch.
# =============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union
import uuid

from src.runtime.errors import ParseError


class EnvelopeKind(str, Enum):
    """Outer envelope types sent by the Slack Events API."""
    URL_VERIFICATION = "url_verification"  # One-time endpoint handshake
    EVENT_CALLBACK = "event_callback"      # Envelope carrying one inner event
    UNKNOWN = "unknown"

    @classmethod
    def from_type(cls, value: Any) -> "EnvelopeKind":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class MessageEvent:
    """Inner `message` event. Absent attributes are empty strings."""
    channel: str = ""
    channel_type: str = ""
    bot_id: str = ""
    thread_ts: str = ""
    subtype: str = ""
    ts: str = ""
    user: str = ""
    text: str = ""

    type = "message"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MessageEvent":
        def text_field(name: str) -> str:
            value = data.get(name)
            return value if isinstance(value, str) else ""

        return cls(
            channel=text_field("channel"),
            channel_type=text_field("channel_type"),
            bot_id=text_field("bot_id"),
            thread_ts=text_field("thread_ts"),
            subtype=text_field("subtype"),
            ts=text_field("ts"),
            user=text_field("user"),
            text=text_field("text"),
        )


@dataclass(frozen=True)
class OtherEvent:
    """Any inner event the relay does not act on."""
    type: str = ""


InnerEvent = Union[MessageEvent, OtherEvent]


def parse_inner_event(data: Any) -> InnerEvent:
    """Build the tagged inner event from the callback's `event` object."""
    if not isinstance(data, dict):
        raise ParseError("event_callback without an event object")

    event_type = data.get("type", "")
    if event_type == MessageEvent.type:
        return MessageEvent.from_dict(data)
    return OtherEvent(type=str(event_type or ""))


@dataclass
class Envelope:
    """
    Normalized Slack request.

    Attributes:
        kind: Outer envelope type (url_verification, event_callback, unknown)
        request_id: API Gateway request id, or a generated one
        source: Origin of the event (api_gateway, direct)
        payload: Decoded JSON body
        raw_body: Body exactly as received, used for signature checks
        headers: Request headers with lower-cased names
        metadata: Additional context (retry headers, http method, ...)
    """
    kind: EnvelopeKind
    request_id: str
    source: str
    payload: Dict[str, Any]
    raw_body: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def token(self) -> str:
        """Verification token bundled in the payload."""
        value = self.payload.get("token", "")
        return value if isinstance(value, str) else ""

    @property
    def challenge(self) -> str:
        """Challenge string of a url_verification handshake."""
        value = self.payload.get("challenge")
        if not isinstance(value, str):
            raise ParseError("url_verification without a challenge string")
        return value

    @property
    def is_url_verification(self) -> bool:
        return self.kind == EnvelopeKind.URL_VERIFICATION

    @property
    def is_event_callback(self) -> bool:
        return self.kind == EnvelopeKind.EVENT_CALLBACK

    @property
    def inner_event(self) -> Optional[InnerEvent]:
        """Inner event of a callback envelope, None for other kinds."""
        if not self.is_event_callback:
            return None
        return parse_inner_event(self.payload.get("event"))

    def header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def to_dict(self) -> Dict[str, Any]:
        """Convert envelope to dictionary (token omitted)."""
        return {
            "kind": self.kind.value,
            "requestId": self.request_id,
            "source": self.source,
            "eventId": self.payload.get("event_id"),
            "teamId": self.payload.get("team_id"),
            "metadata": self.metadata,
        }

    @classmethod
    def from_payload(
        cls,
        payload: Dict[str, Any],
        source: str = "direct",
        request_id: str = None,
        raw_body: str = "",
        headers: Dict[str, str] = None,
        metadata: Dict[str, Any] = None,
    ) -> "Envelope":
        """Create envelope from a decoded Slack payload."""
        if not isinstance(payload, dict):
            raise ParseError("Slack payload must be a JSON object")
        return cls(
            kind=EnvelopeKind.from_type(payload.get("type")),
            request_id=request_id or str(uuid.uuid4()),
            source=source,
            payload=payload,
            raw_body=raw_body,
            headers={str(k).lower(): str(v) for k, v in (headers or {}).items()},
            metadata=metadata or {},
        )
