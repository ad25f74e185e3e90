"""`openai-chat` edge function: flexible pass-through chat completion.

Input validation behavior:
- `messages` missing or not a list -> HTTP 400, no outbound call.

Parameter handling:
- `model`, `temperature`, `max_tokens` are forwarded exactly as given
  (including `null`), falling back to the configured defaults only when the
  key is absent.

Error handling strategy:
- Gateway 429 / 402 -> same status with a rate-limit / payment message.
- Other gateway errors -> HTTP 500 carrying the upstream `error.message`.
- Any other exception -> HTTP 500 flat error string.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from eliza.api.functions.common import (
    MESSAGES_REQUIRED,
    get_gateway_client,
    limit_response,
    resolve_gateway_key,
)
from eliza.llm.client import GatewayClient, extract_message_content
from eliza.llm.errors import GatewayError, GatewayErrorKind
from eliza.llm.provider_config import (
    GATEWAY_KEY_ENV,
    OPENAI_CHAT_MAX_TOKENS,
    OPENAI_CHAT_MODEL,
    OPENAI_CHAT_TEMPERATURE,
)


logger = logging.getLogger(__name__)

router = APIRouter()

LIMIT_MESSAGES = {
    GatewayErrorKind.RATE_LIMITED: "Rate limit exceeded, please try again later",
    GatewayErrorKind.CREDITS_EXHAUSTED: "Payment required, please add credits to your workspace",
}


def _param(body: dict, key: str, default):
    return body[key] if key in body else default


@router.post("/functions/v1/openai-chat")
async def openai_chat(request: Request, gateway: GatewayClient = Depends(get_gateway_client)):
    try:
        body = await request.json()

        messages = body.get("messages") if isinstance(body, dict) else None
        if not isinstance(messages, list):
            return JSONResponse(status_code=400, content={"success": False, "error": MESSAGES_REQUIRED})

        api_key = resolve_gateway_key(gateway, f"{GATEWAY_KEY_ENV} not configured")

        payload = {
            "model": _param(body, "model", OPENAI_CHAT_MODEL),
            "messages": messages,
            "temperature": _param(body, "temperature", OPENAI_CHAT_TEMPERATURE),
            "max_tokens": _param(body, "max_tokens", OPENAI_CHAT_MAX_TOKENS),
        }

        logger.info(
            "OpenAI chat - processing request: messages=%d model=%s temperature=%s max_tokens=%s",
            len(messages),
            payload["model"],
            payload["temperature"],
            payload["max_tokens"],
        )

        try:
            data = await run_in_threadpool(gateway.create_chat_completion, payload, api_key)
        except GatewayError as err:
            limited = limit_response(err, LIMIT_MESSAGES)
            if limited is not None:
                return limited
            raise RuntimeError(err.upstream_message or "AI Gateway request failed") from err

        logger.info("OpenAI chat - response received: usage=%s", data.get("usage"))

        return {
            "success": True,
            "response": extract_message_content(data) or "",
            "usage": data.get("usage"),
            "model": data.get("model"),
        }

    except Exception as err:
        logger.exception("OpenAI chat function error")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(err) or "Unknown error occurred"},
        )
