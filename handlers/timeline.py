# =============================================================================
# Timeline Relay
# =============================================================================
# Forwards top-level messages posted in public `times-*` channels to the
# timeline channel as permalinks.
#
# Predicates run in a fixed order and stop at the first failure. The local
# checks come first so the conversations.info lookup is skipped whenever the
# event is already disqualified.
# =============================================================================

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from handlers.base import ok_response
from handlers.slack_api import get_channel_name, get_permalink, post_message
from src.runtime.deps import Deps
from src.runtime.dispatch import register
from src.runtime.envelope import MessageEvent
from src.runtime.errors import ExternalCallFailure

logger = logging.getLogger(__name__)

PUBLIC_CHANNEL_TYPE = "channel"
TIMES_CHANNEL_PREFIX = "times-"
ALLOWED_SUBTYPES = frozenset({"", "file_share"})


class RejectionReason(str, Enum):
    NOT_PUBLIC_CHANNEL = "not_public_channel"
    BOT_MESSAGE = "bot_message"
    THREAD_MESSAGE = "thread_message"
    HAS_SUBTYPE = "has_subtype"
    NOT_TIMES_CHANNEL = "not_times_channel"


@dataclass(frozen=True)
class FilterVerdict:
    """Accepted when reason is None."""
    reason: Optional[RejectionReason] = None
    channel_name: str = ""

    @property
    def accepted(self) -> bool:
        return self.reason is None

    @classmethod
    def accept(cls, channel_name: str) -> "FilterVerdict":
        return cls(channel_name=channel_name)

    @classmethod
    def reject(cls, reason: RejectionReason, channel_name: str = "") -> "FilterVerdict":
        return cls(reason=reason, channel_name=channel_name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": self.accepted,
            "reason": self.reason.value if self.reason else None,
            "channelName": self.channel_name or None,
        }


# =============================================================================
# FILTER PIPELINE
# =============================================================================

def check_local(event: MessageEvent) -> Optional[RejectionReason]:
    """Run the checks that need no Slack call."""
    if event.channel_type != PUBLIC_CHANNEL_TYPE:
        return RejectionReason.NOT_PUBLIC_CHANNEL
    if event.bot_id:
        return RejectionReason.BOT_MESSAGE
    if event.thread_ts:
        return RejectionReason.THREAD_MESSAGE
    if event.subtype not in ALLOWED_SUBTYPES:
        return RejectionReason.HAS_SUBTYPE
    return None


def is_times_channel(name: str) -> bool:
    return name.startswith(TIMES_CHANNEL_PREFIX)


def evaluate(event: MessageEvent, lookup_channel_name: Callable[[str], str]) -> FilterVerdict:
    """Classify a message event.

    Args:
        event: The inner message event
        lookup_channel_name: Resolves a channel id to its name; only called
            when every local check passes

    Raises:
        ExternalCallFailure: if the channel name cannot be resolved
    """
    reason = check_local(event)
    if reason is not None:
        return FilterVerdict.reject(reason)

    name = lookup_channel_name(event.channel)
    if not is_times_channel(name):
        return FilterVerdict.reject(RejectionReason.NOT_TIMES_CHANNEL, name)

    return FilterVerdict.accept(name)


# =============================================================================
# FORWARDING
# =============================================================================

def forward(event: MessageEvent, deps: Deps) -> bool:
    """Post the message permalink to the timeline channel.

    Returns True when the post succeeded.
    """
    try:
        permalink = get_permalink(deps.slack, event.channel, event.ts)
    except ExternalCallFailure as e:
        logger.error(f"Could not resolve permalink for {event.channel}/{event.ts}: {e}")
        return False

    try:
        post_message(deps.slack, deps.config.timeline_channel, permalink)
    except ExternalCallFailure as e:
        logger.error(f"Failed to forward {permalink} to {deps.config.timeline_channel}: {e}")
        return False

    logger.info(f"Forwarded {permalink} to {deps.config.timeline_channel}")
    return True


def relay_message(event: MessageEvent, deps: Deps) -> Optional[FilterVerdict]:
    """Evaluate one message event and forward it when accepted.

    Returns None when the channel lookup failed and no verdict was reached.
    """
    try:
        verdict = evaluate(event, lambda channel: get_channel_name(deps.slack, channel))
    except ExternalCallFailure as e:
        logger.error(f"Could not resolve channel {event.channel}: {e}")
        return None

    if not verdict.accepted:
        logger.info(
            f"Rejected message channel={event.channel} ts={event.ts} reason={verdict.reason.value}"
        )
        return verdict

    forward(event, deps)
    return verdict


@register("message", description="Forward times-* channel messages to the timeline")
def handle_message(event: MessageEvent, deps: Deps) -> Dict[str, Any]:
    relay_message(event, deps)
    return ok_response()
