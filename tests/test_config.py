"""
Tests for configuration loading.

Run with: pytest tests/test_config.py -v
"""
import os
import sys
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.runtime.config import RelayConfig, load_config
from src.runtime.errors import ConfigError

CONFIG_VARS = [
    "CONFIG_SOURCE",
    "TIMELINE_CHANNEL",
    "VERIFICATION_TOKEN",
    "SLACK_TOKEN",
    "SLACK_SIGNING_SECRET",
    "VERIFICATION_TOKEN_PARAMETER",
    "SLACK_TOKEN_PARAMETER",
    "SIGNING_SECRET_PARAMETER",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("TIMELINE_CHANNEL", "C0TIMELINE")


def stub_ssm(values):
    ssm = MagicMock()

    def get_parameter(Name, WithDecryption):
        assert WithDecryption is True
        if Name not in values:
            raise ClientError(
                {"Error": {"Code": "ParameterNotFound", "Message": Name}}, "GetParameter"
            )
        return {"Parameter": {"Name": Name, "Type": "SecureString", "Value": values[Name]}}

    ssm.get_parameter.side_effect = get_parameter
    return ssm


class TestRelayConfig:
    """Tests for RelayConfig validation."""

    def test_requires_bot_token(self):
        with pytest.raises(ConfigError):
            RelayConfig(bot_token="", timeline_channel="C", verification_token="t")

    def test_requires_channel(self):
        with pytest.raises(ConfigError):
            RelayConfig(bot_token="x", timeline_channel="", verification_token="t")

    def test_requires_some_verification(self):
        with pytest.raises(ConfigError):
            RelayConfig(bot_token="x", timeline_channel="C")

    def test_immutable(self):
        config = RelayConfig(bot_token="x", timeline_channel="C", verification_token="t")
        with pytest.raises(AttributeError):
            config.timeline_channel = "other"

    def test_repr_hides_secrets(self):
        config = RelayConfig(bot_token="xoxb-secret", timeline_channel="C", verification_token="tok-secret")
        text = repr(config)
        assert "xoxb-secret" not in text
        assert "tok-secret" not in text
        assert "verification_token=set" in text
        assert "signing_secret=unset" in text


class TestSsmProfile:
    """Tests for the SSM Parameter Store profile."""

    def test_default_parameter_names(self):
        ssm = stub_ssm({"Woodpecker-VerificationToken": "tok", "Woodpecker-Token": "xoxb-1"})

        config = load_config(ssm=ssm)

        assert config.verification_token == "tok"
        assert config.bot_token == "xoxb-1"
        assert config.signing_secret == ""
        assert config.timeline_channel == "C0TIMELINE"

    def test_custom_parameter_names(self, monkeypatch):
        monkeypatch.setenv("VERIFICATION_TOKEN_PARAMETER", "/relay/verify")
        monkeypatch.setenv("SLACK_TOKEN_PARAMETER", "/relay/token")
        monkeypatch.setenv("SIGNING_SECRET_PARAMETER", "/relay/signing")
        ssm = stub_ssm({"/relay/verify": "tok", "/relay/token": "xoxb-2", "/relay/signing": "sec"})

        config = load_config("ssm", ssm=ssm)

        assert config.bot_token == "xoxb-2"
        assert config.signing_secret == "sec"

    def test_missing_parameter(self):
        ssm = stub_ssm({"Woodpecker-Token": "xoxb-1"})
        with pytest.raises(ConfigError) as exc_info:
            load_config("ssm", ssm=ssm)
        assert "Woodpecker-VerificationToken" in str(exc_info.value)

    def test_empty_parameter(self):
        ssm = stub_ssm({"Woodpecker-VerificationToken": "", "Woodpecker-Token": "xoxb-1"})
        with pytest.raises(ConfigError):
            load_config("ssm", ssm=ssm)

    def test_builds_boto3_client(self, monkeypatch):
        monkeypatch.setenv("AWS_REGION", "ap-northeast-1")
        ssm = stub_ssm({"Woodpecker-VerificationToken": "tok", "Woodpecker-Token": "xoxb-1"})

        with patch("src.runtime.config.boto3.client", return_value=ssm) as client:
            load_config()

        client.assert_called_once_with("ssm", region_name="ap-northeast-1")


class TestEnvProfile:
    """Tests for the environment profile."""

    def test_env_values(self, monkeypatch):
        monkeypatch.setenv("CONFIG_SOURCE", "env")
        monkeypatch.setenv("VERIFICATION_TOKEN", "tok")
        monkeypatch.setenv("SLACK_TOKEN", "xoxb-3")
        monkeypatch.setenv("SLACK_SIGNING_SECRET", "sec")

        config = load_config()

        assert config == RelayConfig(
            bot_token="xoxb-3", timeline_channel="C0TIMELINE", verification_token="tok", signing_secret="sec"
        )

    def test_missing_channel(self, monkeypatch):
        monkeypatch.delenv("TIMELINE_CHANNEL")
        monkeypatch.setenv("VERIFICATION_TOKEN", "tok")
        monkeypatch.setenv("SLACK_TOKEN", "xoxb-3")
        with pytest.raises(ConfigError):
            load_config("env")

    def test_unknown_source(self):
        with pytest.raises(ConfigError):
            load_config("vault")
