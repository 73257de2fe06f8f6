# =============================================================================
# Relay Configuration
# =============================================================================
# Loaded once per cold start and carried by Deps. Two profiles:
# - ssm: secrets from SSM Parameter Store (SecureString, decrypted)
# - env: secrets from plain environment variables
# TIMELINE_CHANNEL always comes from the environment.
# =============================================================================

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.runtime.errors import ConfigError

logger = logging.getLogger(__name__)

SOURCE_SSM = "ssm"
SOURCE_ENV = "env"

DEFAULT_VERIFICATION_TOKEN_PARAMETER = "Woodpecker-VerificationToken"
DEFAULT_SLACK_TOKEN_PARAMETER = "Woodpecker-Token"


@dataclass(frozen=True)
class RelayConfig:
    """Immutable relay settings."""
    bot_token: str
    timeline_channel: str
    verification_token: str = ""
    signing_secret: str = ""

    def __post_init__(self):
        if not self.bot_token:
            raise ConfigError("Slack bot token is not configured")
        if not self.timeline_channel:
            raise ConfigError("TIMELINE_CHANNEL is not configured")
        if not self.verification_token and not self.signing_secret:
            raise ConfigError("Neither a verification token nor a signing secret is configured")

    def __repr__(self) -> str:
        return (
            f"RelayConfig(timeline_channel={self.timeline_channel!r}, "
            f"verification_token={'set' if self.verification_token else 'unset'}, "
            f"signing_secret={'set' if self.signing_secret else 'unset'})"
        )


def get_parameter(ssm: Any, name: str) -> str:
    """Read one decrypted SecureString parameter."""
    try:
        response = ssm.get_parameter(Name=name, WithDecryption=True)
    except (ClientError, BotoCoreError) as e:
        raise ConfigError(f"Failed to read SSM parameter {name}: {e}") from e

    value = response.get("Parameter", {}).get("Value", "")
    if not value:
        raise ConfigError(f"SSM parameter {name} is empty")
    return value


def _load_from_ssm(ssm: Any = None) -> RelayConfig:
    if ssm is None:
        ssm = boto3.client("ssm", region_name=os.environ.get("AWS_REGION"))

    verification_name = os.environ.get("VERIFICATION_TOKEN_PARAMETER", DEFAULT_VERIFICATION_TOKEN_PARAMETER)
    token_name = os.environ.get("SLACK_TOKEN_PARAMETER", DEFAULT_SLACK_TOKEN_PARAMETER)
    signing_name = os.environ.get("SIGNING_SECRET_PARAMETER", "")

    return RelayConfig(
        verification_token=get_parameter(ssm, verification_name) if verification_name else "",
        bot_token=get_parameter(ssm, token_name),
        signing_secret=get_parameter(ssm, signing_name) if signing_name else "",
        timeline_channel=os.environ.get("TIMELINE_CHANNEL", ""),
    )


def _load_from_env() -> RelayConfig:
    return RelayConfig(
        verification_token=os.environ.get("VERIFICATION_TOKEN", ""),
        bot_token=os.environ.get("SLACK_TOKEN", ""),
        signing_secret=os.environ.get("SLACK_SIGNING_SECRET", ""),
        timeline_channel=os.environ.get("TIMELINE_CHANNEL", ""),
    )


def load_config(source: Optional[str] = None, ssm: Any = None) -> RelayConfig:
    """
    Build the RelayConfig for this process.

    Args:
        source: "ssm" or "env"; defaults to CONFIG_SOURCE, then "ssm"
        ssm: Optional pre-built SSM client

    Raises:
        ConfigError: on unknown source, missing values or SSM failures
    """
    source = (source or os.environ.get("CONFIG_SOURCE") or SOURCE_SSM).lower()

    if source == SOURCE_SSM:
        config = _load_from_ssm(ssm)
    elif source == SOURCE_ENV:
        config = _load_from_env()
    else:
        raise ConfigError(f"Unknown CONFIG_SOURCE: {source}")

    logger.info(f"Loaded configuration from {source}: {config!r}")
    return config
