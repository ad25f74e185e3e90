"""`gemini-chat` edge function.

Request lifecycle:
1. Parse `{messages, conversationHistory?, userContext?, miningStats?, systemVersion?}`.
2. Require the gateway key.
3. Build the concise context prompt (summary excerpt, live mining, founder flag).
4. Forward the system prompt plus the last 10 messages to the gateway.
5. Return `{success, response, hasToolCalls}`.

Error handling strategy:
- Gateway 429 / 402 -> same status with a rate-limit / credits message.
- Anything else -> HTTP 500 with the structured error object below.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from eliza.api.functions.common import (
    CHAT_LIMIT_MESSAGES,
    FALLBACK_RESPONSE,
    SERVICE_NOT_CONFIGURED,
    get_gateway_client,
    last_messages,
    limit_response,
    read_json_object,
    require_messages,
    resolve_gateway_key,
)
from eliza.core.context import ConversationContext
from eliza.llm.client import GatewayClient, extract_message_content
from eliza.llm.errors import GatewayError
from eliza.llm.provider_config import GEMINI_CHAT_MODEL
from eliza.prompting.prompt_builder import build_gateway_prompt


logger = logging.getLogger(__name__)

router = APIRouter()

SERVICE_NAME = "gemini-chat"
HISTORY_LIMIT = 10


def _error_envelope(message: str) -> dict:
    return {
        "success": False,
        "error": {
            "type": "invalid_request",
            "code": 400,
            "message": message,
            "service": SERVICE_NAME,
            "details": {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "executive": "CIO",
                "model": GEMINI_CHAT_MODEL,
            },
            "canRetry": False,
            "suggestedAction": "check_request_format",
        },
    }


@router.post(f"/functions/v1/{SERVICE_NAME}")
async def gemini_chat(request: Request, gateway: GatewayClient = Depends(get_gateway_client)):
    try:
        body = await read_json_object(request)
        api_key = resolve_gateway_key(gateway, SERVICE_NOT_CONFIGURED)
        messages = require_messages(body)

        logger.info("Gemini chat - processing request (%d messages)", len(messages))

        context = ConversationContext.from_payload(body)
        payload = {
            "model": GEMINI_CHAT_MODEL,
            "messages": [
                {"role": "system", "content": build_gateway_prompt(context)},
                *last_messages(messages, HISTORY_LIMIT),
            ],
        }

        try:
            data = await run_in_threadpool(gateway.create_chat_completion, payload, api_key)
        except GatewayError as err:
            limited = limit_response(err, CHAT_LIMIT_MESSAGES)
            if limited is not None:
                return limited
            raise

        content = extract_message_content(data)
        logger.info("Gateway response: has_content=%s usage=%s", bool(content), data.get("usage"))

        return {"success": True, "response": content or FALLBACK_RESPONSE, "hasToolCalls": False}

    except Exception as err:
        logger.exception("Gemini chat error")
        return JSONResponse(status_code=500, content=_error_envelope(str(err) or "Unknown error"))
