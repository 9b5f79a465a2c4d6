"""Place a single outbound call from the command line."""

from __future__ import annotations

import argparse
import logging
import sys

from calls.errors import BridgeError
from calls.outbound import OutboundCaller
from config.settings import Settings, get_settings
from integrations.twilio_client import build_twilio_client

LOGGER = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None, settings: Settings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an outbound Twilio voice call")
    parser.add_argument("--to", default=settings.target_number, help="E.164 destination (default: TARGET_NUMBER)")
    parser.add_argument(
        "--bridge",
        action="store_true",
        help="Ring the browser client once the destination answers instead of using the TwiML App/URL.",
    )
    parser.add_argument("--identity", default=None, help="Client identity to bridge to (default: CLIENT_ID)")
    return parser.parse_args(argv)


def run(argv: list[str] | None = None, settings: Settings | None = None, client=None) -> str:
    settings = settings or get_settings()
    args = _parse_args(argv, settings)

    target = (args.to or "").strip()
    if not target:
        LOGGER.error("Missing TARGET_NUMBER in environment (or pass --to)")
        sys.exit(1)

    try:
        caller = OutboundCaller(client or build_twilio_client(settings), settings)
        if args.bridge:
            placed = caller.bridge_dial(target, identity=args.identity)
        else:
            placed = caller.direct_dial(target)
    except BridgeError as exc:
        LOGGER.error("Error creating call: %s", exc)
        sys.exit(1)

    print(f"Call initiated. SID: {placed.sid}")
    return placed.sid


def main() -> None:
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    run()


if __name__ == "__main__":
    main()
