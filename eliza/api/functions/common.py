"""Shared plumbing for the edge proxy functions.

Architectural role:
    Holds the pieces every proxy function uses: the gateway client dependency,
    request body parsing, message-list truncation, and the translation of
    gateway rate-limit / billing replies into client-facing JSON responses.

Error handling strategy:
    Helpers raise ordinary exceptions; each function handler owns its
    catch-all and its own error envelope shape.
"""

import json
from functools import lru_cache
from typing import Any, List

from fastapi import Request
from fastapi.responses import JSONResponse

from eliza.llm.client import GatewayClient
from eliza.llm.errors import GatewayError, GatewayErrorKind


FALLBACK_RESPONSE = "I'm here to help with XMRT-DAO tasks."
MESSAGES_REQUIRED = "Messages array is required"
SERVICE_NOT_CONFIGURED = "AI service not configured"

# Client-facing texts for the chat functions (gemini-chat, deepseek-chat).
CHAT_LIMIT_MESSAGES = {
    GatewayErrorKind.RATE_LIMITED: "Lovable AI rate limit exceeded. Please try again in a moment.",
    GatewayErrorKind.CREDITS_EXHAUSTED: (
        "Lovable AI credits exhausted. Please add credits at Settings → Workspace → Usage."
    ),
}


@lru_cache(maxsize=1)
def get_gateway_client() -> GatewayClient:
    """FastAPI dependency returning the process gateway client."""
    return GatewayClient()


async def read_json_object(request: Request) -> dict:
    """Parse the request body and require a JSON object.

    Raises:
        ValueError: Body is not valid JSON or not an object.
    """
    body = await request.json()
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


def require_messages(body: dict) -> List[Any]:
    messages = body.get("messages")
    if not isinstance(messages, list):
        raise ValueError(MESSAGES_REQUIRED)
    return messages


def last_messages(messages: List[Any], limit: int) -> List[Any]:
    """Return the last `limit` messages, preserving chronological order."""
    if limit <= 0:
        return []
    return list(messages[-limit:])


def coerce_message(message: Any) -> dict:
    """Strip a message to `{role, content}`, JSON-serializing non-string content."""
    if not isinstance(message, dict):
        return {"role": None, "content": json.dumps(message)}
    content = message.get("content")
    if not isinstance(content, str):
        content = json.dumps(content)
    return {"role": message.get("role"), "content": content}


def resolve_gateway_key(gateway: GatewayClient, missing_message: str) -> str:
    key = gateway.key_loader()
    if not key:
        raise RuntimeError(missing_message)
    return key


def limit_response(err: GatewayError, messages: dict):
    """Return a 429/402 JSON response for limit errors, else `None`."""
    text = messages.get(err.kind)
    if text is None:
        return None
    return JSONResponse(
        status_code=err.status_code,
        content={"success": False, "error": text},
    )
