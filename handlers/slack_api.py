# =============================================================================
# Slack Web API Operations
# =============================================================================
# The three Web API calls used by the relay:
# - conversations.info  → channel name
# - chat.getPermalink   → durable message URL
# - chat.postMessage    → forward into the timeline channel
# Every failure surfaces as ExternalCallFailure. No retries.
# =============================================================================

import logging
from typing import Any

from slack_sdk.errors import SlackApiError, SlackClientError

from src.runtime.errors import ExternalCallFailure

logger = logging.getLogger(__name__)


def _call(operation: str, method, **kwargs) -> Any:
    try:
        return method(**kwargs)
    except SlackApiError as e:
        error = e.response.get("error", "unknown_error") if e.response is not None else "unknown_error"
        raise ExternalCallFailure(operation, error, e) from e
    except (SlackClientError, OSError) as e:
        raise ExternalCallFailure(operation, str(e), e) from e


def get_channel_name(client: Any, channel_id: str) -> str:
    """Resolve a channel's display name from its id."""
    response = _call("conversations.info", client.conversations_info, channel=channel_id)
    name = (response.get("channel") or {}).get("name")
    if not name:
        raise ExternalCallFailure("conversations.info", "missing_channel_name")
    return name


def get_permalink(client: Any, channel_id: str, message_ts: str) -> str:
    """Resolve the permalink of one message."""
    response = _call("chat.getPermalink", client.chat_getPermalink, channel=channel_id, message_ts=message_ts)
    permalink = response.get("permalink")
    if not permalink:
        raise ExternalCallFailure("chat.getPermalink", "missing_permalink")
    return permalink


def post_message(client: Any, channel_id: str, text: str) -> Any:
    """Post text with link and media unfurling enabled."""
    return _call(
        "chat.postMessage",
        client.chat_postMessage,
        channel=channel_id,
        text=text,
        unfurl_links=True,
        unfurl_media=True,
    )
