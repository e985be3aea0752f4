"""
Simple command-line interface for the AT-Connect Python SDK.

Provides quick access to SMS, airtime, mobile data, balance and voice operations
without having to write custom scripts. Credentials come from the
--api-key/--username flags or the AFRICASTALKING_API_KEY and
AFRICASTALKING_USERNAME environment variables. The ``network`` command
works offline and needs no credentials.
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from typing import Any, Callable, Dict

from dotenv import load_dotenv

from at_connect.client import AtClient
from at_connect.config import AtConfig
from at_connect.exceptions import AfricasTalkingError
from at_connect.models import AirtimeRecipient, DataUnit, DataValidity, MobileDataRecipient
from at_connect.network import NetworkCode


def _load_client(args: argparse.Namespace) -> AtClient:
    """
    Create an AtClient from CLI arguments/environment variables.

    Priority order for credentials: flag -> env var. Exits with code 2 if missing.
    """
    load_dotenv()
    api_key = args.api_key or os.getenv("AFRICASTALKING_API_KEY")
    username = args.username or os.getenv("AFRICASTALKING_USERNAME")
    if not api_key or not username:
        print(
            "Error: API key and username are required. Provide --api-key/--username "
            "or set AFRICASTALKING_API_KEY and AFRICASTALKING_USERNAME.",
            file=sys.stderr,
        )
        sys.exit(2)

    config_kwargs: Dict[str, Any] = {
        "api_key": api_key,
        "username": username,
    }

    if args.environment:
        config_kwargs["environment"] = args.environment
    if args.timeout:
        config_kwargs["timeout"] = args.timeout

    try:
        config = AtConfig(**config_kwargs)
    except AfricasTalkingError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    return AtClient(config=config)


def _print_json(data: Any) -> None:
    """Pretty-print dictionaries, lists or pydantic models as JSON."""
    if isinstance(data, list):
        payload = [item.model_dump() if hasattr(item, "model_dump") else item for item in data]
    elif hasattr(data, "model_dump"):
        payload = data.model_dump()
    elif hasattr(data, "__dict__"):
        payload = data.__dict__
    else:
        payload = data

    print(json.dumps(payload, default=str, indent=2))


def _handle_client_call(
    args: argparse.Namespace,
    handler: Callable[[AtClient, argparse.Namespace], Any],
) -> None:
    """Execute a handler with error handling and resource cleanup."""
    client = _load_client(args)
    try:
        result = handler(client, args)
        if result is not None:
            _print_json(result)
    except AfricasTalkingError as exc:
        print(f"Request failed: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        client.close()


def _cmd_send_sms(client: AtClient, args: argparse.Namespace) -> Any:
    return client.send_sms(args.to, args.message, sender_id=args.sender_id, enqueue=args.enqueue)


def _cmd_fetch_messages(client: AtClient, args: argparse.Namespace) -> Any:
    return client.fetch_messages(args.last_received_id)


def _cmd_send_airtime(client: AtClient, args: argparse.Namespace) -> Any:
    recipient = AirtimeRecipient(
        phone_number=args.phone_number,
        amount=args.amount,
        currency_code=args.currency,
    )
    return client.send_airtime([recipient])


def _cmd_send_data(client: AtClient, args: argparse.Namespace) -> Any:
    recipient = MobileDataRecipient(
        phone_number=args.phone_number,
        quantity=args.quantity,
        unit=DataUnit(args.unit),
        validity=DataValidity(args.validity),
    )
    return client.send_mobile_data(args.product_name, [recipient])


def _cmd_balance(client: AtClient, args: argparse.Namespace) -> Any:
    return client.get_application_data()


def _cmd_make_call(client: AtClient, args: argparse.Namespace) -> Any:
    return client.make_call(args.call_from, args.to)


def _cmd_queued_calls(client: AtClient, args: argparse.Namespace) -> Any:
    return client.get_queued_calls(args.phone_numbers)


def _cmd_upload_media(client: AtClient, args: argparse.Namespace) -> Any:
    return client.upload_media(args.url, args.phone_number)


def _cmd_network(args: argparse.Namespace) -> None:
    network = NetworkCode.from_code(args.code)
    _print_json(
        {
            "code": network.code,
            "name": network.name,
            "country": network.country,
            "known": network.is_known,
        }
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="at-connect",
        description="CLI for Africa's Talking SMS, airtime, mobile data and voice APIs.",
    )
    parser.add_argument(
        "--api-key",
        help="Africa's Talking API key (falls back to AFRICASTALKING_API_KEY env var).",
    )
    parser.add_argument(
        "--username",
        help="Application username (falls back to AFRICASTALKING_USERNAME env var).",
    )
    parser.add_argument(
        "--environment",
        choices=["sandbox", "production"],
        help="Target environment (default: sandbox).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Request timeout in seconds (default: 30).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    send_sms = subparsers.add_parser("send-sms", help="Send an SMS to one or more numbers.")
    send_sms.add_argument("message", help="Message body.")
    send_sms.add_argument("to", nargs="+", help="Recipient numbers (e.g., +254711XXXYYY).")
    send_sms.add_argument("--sender-id", help="Short code or alphanumeric sender ID.")
    send_sms.add_argument(
        "--enqueue",
        action="store_true",
        help="Queue messages on the gateway for bulk delivery.",
    )
    send_sms.set_defaults(func=_cmd_send_sms)

    fetch = subparsers.add_parser("fetch-messages", help="Fetch inbound messages.")
    fetch.add_argument(
        "--last-received-id",
        type=int,
        default=0,
        help="Only return messages received after this id.",
    )
    fetch.set_defaults(func=_cmd_fetch_messages)

    airtime = subparsers.add_parser("send-airtime", help="Send airtime to a phone number.")
    airtime.add_argument("phone_number", help="Recipient number.")
    airtime.add_argument("amount", type=float, help="Amount to send.")
    airtime.add_argument("--currency", default="KES", help="Currency code (default: KES).")
    airtime.set_defaults(func=_cmd_send_airtime)

    data = subparsers.add_parser("send-data", help="Send a mobile data bundle.")
    data.add_argument("product_name", help="Mobile data product name.")
    data.add_argument("phone_number", help="Recipient number.")
    data.add_argument("quantity", type=int, help="Bundle size.")
    data.add_argument(
        "--unit",
        choices=[unit.value for unit in DataUnit],
        default=DataUnit.MB.value,
        help="Bundle size unit (default: MB).",
    )
    data.add_argument(
        "--validity",
        choices=[validity.value for validity in DataValidity],
        default=DataValidity.DAY.value,
        help="Bundle validity (default: Day).",
    )
    data.set_defaults(func=_cmd_send_data)

    balance = subparsers.add_parser("balance", help="Show the application wallet balance.")
    balance.set_defaults(func=_cmd_balance)

    call = subparsers.add_parser("make-call", help="Place an outbound call.")
    call.add_argument("call_from", metavar="from", help="Your Africa's Talking number.")
    call.add_argument("to", nargs="+", help="Destination numbers.")
    call.set_defaults(func=_cmd_make_call)

    queued = subparsers.add_parser("queued-calls", help="Show queued call counts.")
    queued.add_argument("phone_numbers", nargs="+", help="Your Africa's Talking numbers.")
    queued.set_defaults(func=_cmd_queued_calls)

    media = subparsers.add_parser("upload-media", help="Upload an audio file for Play actions.")
    media.add_argument("url", help="Public URL of the media file.")
    media.add_argument("phone_number", help="Your Africa's Talking voice number.")
    media.set_defaults(func=_cmd_upload_media)

    network = subparsers.add_parser(
        "network",
        help="Look up the telco behind a network code (offline).",
    )
    network.add_argument("code", help="Network code (e.g., 63902).")
    network.set_defaults(func=_cmd_network, offline=True)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the console script."""
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        sys.exit(2)
    if getattr(args, "offline", False):
        handler(args)
        return
    _handle_client_call(args, handler)


if __name__ == "__main__":
    main()
