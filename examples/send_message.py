#!/usr/bin/env python
"""
Example: Send a message, optionally with an attachment, using discord_rest.

This example demonstrates:
- Loading the bot token from the environment, a .env file or a credentials file
- Creating a client using the factory
- Dispatching several requests concurrently while they are sent in order
- Listening to ratelimit notifications

Usage:
    python examples/send_message.py CHANNEL_ID "Hello from discord_rest!"
    python examples/send_message.py CHANNEL_ID "Look at this" --file path/to/image.png
    python examples/send_message.py CHANNEL_ID "Burst" --repeat 10

Requirements:
    Set DISCORD_TOKEN, add it to .env, or create credentials/discord_config.json.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from discord_rest.config import ConfigManager
from discord_rest.exceptions import ConfigurationError, DiscordAPIError, DiscordRestError
from discord_rest.factory import RestClientFactory
from discord_rest.logging import configure_logging
from discord_rest.models import MessageFile, RestCallProperties


def report_call(props: RestCallProperties) -> None:
    print(f"{props.method} {props.endpoint} -> {props.status} ({props.ping:.0f}ms)")


async def run(args: argparse.Namespace) -> int:
    client = RestClientFactory.create_from_config(ConfigManager())
    client.on("ratelimited", lambda: print("Ratelimited, waiting before the next request..."))
    client.on("call", report_call)

    attachment = None
    if args.file is not None:
        attachment = MessageFile(file=args.file.read_bytes(), name=args.file.name)

    async with client:
        messages = await asyncio.gather(
            *(
                client.dispatch(
                    f"/channels/{args.channel_id}/messages",
                    "POST",
                    auth=True,
                    file=attachment,
                    data={"content": args.text if args.repeat == 1 else f"{args.text} #{index + 1}"},
                )
                for index in range(args.repeat)
            )
        )

    for message in messages:
        print(f"Sent message {message['id']}")
    return 0


def main() -> int:
    """Main entry point for the example."""
    parser = argparse.ArgumentParser(description="Send a message to a Discord channel")
    parser.add_argument("channel_id", help="Target channel ID")
    parser.add_argument("text", help="Message content")
    parser.add_argument("--file", type=Path, help="Optional attachment")
    parser.add_argument("--repeat", type=int, default=1, help="Number of messages to send")
    parser.add_argument("--log-level", default="info")
    args = parser.parse_args()

    configure_logging(args.log_level)

    try:
        return asyncio.run(run(args))
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        print("\nSet DISCORD_TOKEN or create credentials/discord_config.json")
        return 1
    except DiscordRestError as e:
        print(f"Discord rejected the request: {e}")
        return 1
    except DiscordAPIError as e:
        print(f"Discord server error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
