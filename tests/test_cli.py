"""
Tests for the developer CLI.

Run with: pytest tests/test_cli.py -v
"""
import argparse
import json
import os
import sys
from unittest.mock import MagicMock, patch

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "tools"))

import cli


def classify_args(payload, channel_name):
    return argparse.Namespace(json=json.dumps(payload), file=None, pretty=False, channel_name=channel_name)


MESSAGE = {
    "type": "event_callback",
    "event": {"type": "message", "channel": "C1", "channel_type": "channel", "ts": "1.0"},
}


class TestClassify:
    """Tests for the offline classify command."""

    def test_accepted(self, capsys):
        assert cli.cmd_classify(classify_args(MESSAGE, "times-alice")) == 0
        assert json.loads(capsys.readouterr().out) == {
            "accepted": True, "reason": None, "channelName": "times-alice",
        }

    def test_rejected(self, capsys):
        cli.cmd_classify(classify_args(MESSAGE, "general"))
        assert json.loads(capsys.readouterr().out)["reason"] == "not_times_channel"

    def test_non_message(self, capsys):
        cli.cmd_classify(classify_args({"type": "url_verification", "challenge": "c"}, "times-x"))
        assert json.loads(capsys.readouterr().out) == {"handled": False, "kind": "url_verification"}


def replay_args(payload, sign):
    return argparse.Namespace(json=json.dumps(payload), file=None, pretty=False, sign=sign)


@pytest.fixture
def env_deps(monkeypatch):
    from src.runtime.config import load_config
    from src.runtime.deps import Deps

    monkeypatch.setenv("TIMELINE_CHANNEL", "C0TIMELINE")
    monkeypatch.setenv("SLACK_TOKEN", "xoxb-test")
    monkeypatch.setenv("SLACK_SIGNING_SECRET", "shh")
    monkeypatch.delenv("VERIFICATION_TOKEN", raising=False)

    deps = Deps(config=load_config("env"), slack_client=MagicMock())
    with patch("src.app.api_handler.get_deps", return_value=deps):
        yield deps


class TestReplay:
    """Tests for the replay command."""

    HANDSHAKE = {"type": "url_verification", "challenge": "abc123"}

    def test_signed_handshake(self, env_deps, capsys):
        """--sign produces a signature the relay accepts."""
        assert cli.cmd_replay(replay_args(self.HANDSHAKE, sign=True)) == 0

        result = json.loads(capsys.readouterr().out)
        assert result["statusCode"] == 200
        assert result["body"] == "abc123"
        assert env_deps.slack.method_calls == []

    def test_signature_headers(self, env_deps):
        """The signature is built from SLACK_SIGNING_SECRET over the sent body."""
        from handlers.webhook_security import compute_signature

        with patch("app.lambda_handler", return_value={"statusCode": 200, "body": ""}) as handler:
            cli.cmd_replay(replay_args(self.HANDSHAKE, sign=True))

        event = handler.call_args[0][0]
        headers = event["headers"]
        assert headers["X-Slack-Signature"] == compute_signature(
            event["body"], headers["X-Slack-Request-Timestamp"], "shh"
        )

    def test_unsigned_is_rejected(self, env_deps):
        """Without --sign the relay refuses the request."""
        from src.runtime.errors import AuthError

        with pytest.raises(AuthError):
            cli.cmd_replay(replay_args(self.HANDSHAKE, sign=False))

    def test_sign_needs_secret(self, monkeypatch):
        monkeypatch.delenv("SLACK_SIGNING_SECRET", raising=False)
        with pytest.raises(SystemExit):
            cli.cmd_replay(replay_args(self.HANDSHAKE, sign=True))
