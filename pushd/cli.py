"""Operator CLI for pushd.

Inspect the effective configuration, poke presence records and send one-off
notifications against the configured Redis and broker.

Examples:
    pushd config
    pushd presence open u1 s1 c1
    pushd presence check u1 c1
    pushd send ack u1 c1 m1
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

import yaml
from aio_pika.exceptions import AMQPError
from instrukt_ai_logging import get_logger

from pushd.config import ConfigProvider
from pushd.logging_config import setup_logging
from pushd.payloads import UserSnapshot
from pushd.presence.types import ChannelActivity
from pushd.publisher import PublishOutcome
from pushd.runtime import PushdRuntime

logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pushd", description="Push notification fan-out tools.")
    parser.add_argument("--config", type=Path, default=None, help="Path to pushd.yml (default: PUSHD_CONFIG_PATH).")
    parser.add_argument("--log-level", default=None, help="Override PUSHD_LOG_LEVEL.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("config", help="Print the effective configuration as YAML.")

    presence = sub.add_parser("presence", help="Read or write channel presence.")
    presence_sub = presence.add_subparsers(dest="action", required=True)
    for activity in ChannelActivity:
        p = presence_sub.add_parser(activity.value, help=f"Mark a channel {activity.value} for a session.")
        p.add_argument("user_id")
        p.add_argument("session_id")
        p.add_argument("channel_id")
    check = presence_sub.add_parser("check", help="Report whether a user is viewing a channel.")
    check.add_argument("user_id")
    check.add_argument("channel_id")

    send = sub.add_parser("send", help="Publish a single notification.")
    send_sub = send.add_subparsers(dest="kind", required=True)
    generic = send_sub.add_parser("generic", help="Send a generic notification to one user.")
    generic.add_argument("user_id")
    generic.add_argument("title")
    generic.add_argument("body")
    generic.add_argument("--icon", default=None)
    ack = send_sub.add_parser("ack", help="Send a read acknowledgement.")
    ack.add_argument("user_id")
    ack.add_argument("channel_id")
    ack.add_argument("message_id")

    return parser


async def _run_presence(runtime: PushdRuntime, args: argparse.Namespace) -> int:
    store = await runtime.start_presence()
    try:
        if args.action == "check":
            viewing = await store.is_viewing(args.user_id, args.channel_id)
            print("viewing" if viewing else "not viewing")
        else:
            await store.update_activity(args.user_id, args.session_id, args.channel_id, args.action)
            print(f"{args.action}: {args.user_id}/{args.session_id} -> {args.channel_id}")
    finally:
        await runtime.stop()
    return 0


async def _run_send(runtime: PushdRuntime, args: argparse.Namespace) -> int:
    try:
        await runtime.start()
    except (AMQPError, OSError) as e:
        logger.error("broker_connect_failed", kind=args.kind, error=repr(e))
        print(f"failed: cannot connect to broker: {e!r}", file=sys.stderr)
        return 1

    try:
        outcome: PublishOutcome
        if args.kind == "generic":
            user = UserSnapshot(_id=args.user_id)
            outcome = await runtime.notifier.generic_message(user, args.title, args.body, args.icon)
        else:
            outcome = await runtime.notifier.ack_message(args.user_id, args.channel_id, args.message_id)
    finally:
        await runtime.stop()

    if not outcome.ok:
        logger.error("send_failed", kind=args.kind, error=str(outcome.error))
        print(f"failed: {outcome.error}", file=sys.stderr)
        return 1
    print(f"{outcome.status.value}: {outcome.routing_key or outcome.reason}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    setup_logging(args.log_level)
    provider = ConfigProvider(args.config)

    if args.command == "config":
        print(yaml.safe_dump(provider.get().model_dump(mode="json"), sort_keys=False), end="")
        return 0

    runtime = PushdRuntime(provider)
    if args.command == "presence":
        return asyncio.run(_run_presence(runtime, args))
    return asyncio.run(_run_send(runtime, args))


if __name__ == "__main__":
    sys.exit(main())
