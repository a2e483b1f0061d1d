"""Mock responses for Discord API integration tests."""

from __future__ import annotations

MESSAGE_RESPONSE = {
    "id": "1100000000000000001",
    "channel_id": "1000000000000000001",
    "content": "Hello from integration test!",
    "author": {"id": "900000000000000001", "username": "wumpus", "bot": True},
}

GATEWAY_RESPONSE = {"url": "wss://gateway.discord.gg"}

RATE_LIMIT_RESPONSE = {
    "message": "You are being rate limited.",
    "retry_after": 0.25,
    "global": False,
}

GLOBAL_RATE_LIMIT_RESPONSE = {
    "message": "You are being rate limited.",
    "retry_after": 1.0,
    "global": True,
}

MISSING_ACCESS_RESPONSE = {"code": 50001, "message": "Missing Access"}

INVALID_FORM_BODY_RESPONSE = {
    "code": 50035,
    "message": "Invalid Form Body",
    "errors": {
        "content": {
            "_errors": [
                {
                    "code": "BASE_TYPE_MAX_LENGTH",
                    "message": "Must be 2000 or fewer in length.",
                }
            ]
        }
    },
}
