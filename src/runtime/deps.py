# =============================================================================
# Dependency Injection Container
# =============================================================================
# Holds the immutable RelayConfig and a lazily built Slack client.
# Handlers receive Deps instead of creating their own clients.
# =============================================================================

import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Optional

from slack_sdk import WebClient

from src.runtime.config import RelayConfig, load_config

logger = logging.getLogger(__name__)


@dataclass
class Deps:
    """
    Dependency injection container for handlers.

    Usage:
        def handle_my_event(event: InnerEvent, deps: Deps) -> None:
            deps.slack.chat_postMessage(channel=deps.config.timeline_channel, ...)
    """
    config: RelayConfig
    slack_client: Optional[Any] = None

    @cached_property
    def slack(self) -> Any:
        """Slack Web API client (retry handlers disabled)."""
        if self.slack_client is not None:
            return self.slack_client
        return WebClient(token=self.config.bot_token, retry_handlers=[])


def create_deps(config: RelayConfig = None, slack_client: Any = None) -> Deps:
    """Create a new Deps instance, loading configuration if none is given."""
    return Deps(config=config or load_config(), slack_client=slack_client)


# Built on the first invocation and reused while the container stays warm
_global_deps: Optional[Deps] = None


def get_deps() -> Deps:
    """Get or create the per-process Deps instance."""
    global _global_deps
    if _global_deps is None:
        _global_deps = create_deps()
    return _global_deps


def reset_deps() -> None:
    """Drop the cached Deps (tests, config rotation)."""
    global _global_deps
    _global_deps = None
