#!/usr/bin/env python3
# =============================================================================
# CLI Tool for the Timeline Relay
# =============================================================================
# Developer tooling for local testing.
#
# Usage:
#   python tools/cli.py classify --file event.json --channel-name times-alice
#   python tools/cli.py replay --file event.json
#   python tools/cli.py replay --json '{"type": "url_verification", ...}' --sign
# =============================================================================

import argparse
import json
import logging
import sys
import os
import time

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from handlers.base import jdump
from handlers.timeline import evaluate
from handlers.webhook_security import SIGNATURE_HEADER, TIMESTAMP_HEADER, compute_signature
from src.runtime.envelope import Envelope, MessageEvent
from src.runtime.errors import RelayError


def _load_payload(args) -> dict:
    if args.file:
        with open(args.file, "r") as f:
            return json.load(f)
    if args.json:
        return json.loads(args.json)
    raise SystemExit("Provide --file or --json")


def _print(result, pretty: bool):
    print(jdump(result, pretty=pretty))


def cmd_classify(args) -> int:
    """Run the filter offline with a fixed channel name."""
    envelope = Envelope.from_payload(_load_payload(args))
    inner = envelope.inner_event
    if not isinstance(inner, MessageEvent):
        _print({"handled": False, "kind": envelope.kind.value}, args.pretty)
        return 0

    verdict = evaluate(inner, lambda _channel: args.channel_name)
    _print(verdict.to_dict(), args.pretty)
    return 0


def cmd_replay(args) -> int:
    """Send the payload through lambda_handler as an API Gateway request."""
    from app import lambda_handler

    body = json.dumps(_load_payload(args))
    headers = {"Content-Type": "application/json"}

    if args.sign:
        secret = os.environ.get("SLACK_SIGNING_SECRET", "")
        if not secret:
            raise SystemExit("--sign needs SLACK_SIGNING_SECRET")
        timestamp = str(int(time.time()))
        headers[TIMESTAMP_HEADER] = timestamp
        headers[SIGNATURE_HEADER] = compute_signature(body, timestamp, secret)

    event = {
        "headers": headers,
        "body": body,
        "isBase64Encoded": False,
        "requestContext": {"requestId": "cli", "http": {"method": "POST", "path": "/slack/events"}},
    }
    _print(lambda_handler(event, None), args.pretty)
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Timeline relay CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s classify --file event.json --channel-name times-alice
  %(prog)s replay --file event.json --pretty
  %(prog)s replay --json '{"type": "url_verification", "token": "t", "challenge": "abc"}'
        """
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, func in (("classify", cmd_classify), ("replay", cmd_replay)):
        sub = subparsers.add_parser(name, help=func.__doc__)
        sub.add_argument("--json", "-j", help="JSON payload")
        sub.add_argument("--file", "-f", help="JSON file to load payload from")
        sub.add_argument("--pretty", "-p", action="store_true", help="Pretty print output")
        sub.set_defaults(func=func)

    subparsers.choices["classify"].add_argument(
        "--channel-name", required=True, help="Channel name returned by the lookup"
    )
    subparsers.choices["replay"].add_argument(
        "--sign", action="store_true", help="Sign the request with SLACK_SIGNING_SECRET"
    )

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        sys.exit(args.func(args))
    except RelayError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
