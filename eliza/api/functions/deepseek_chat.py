"""`deepseek-chat` edge function.

Ultra-minimal variant: a fixed one-line system prompt and only the last 3
messages, each stripped to `{role, content}` with non-string content
JSON-serialized. Gateway call and 429/402 mapping match `gemini-chat`; the
error envelope on failure is a flat string.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from eliza.api.functions.common import (
    CHAT_LIMIT_MESSAGES,
    FALLBACK_RESPONSE,
    SERVICE_NOT_CONFIGURED,
    coerce_message,
    get_gateway_client,
    last_messages,
    limit_response,
    read_json_object,
    require_messages,
    resolve_gateway_key,
)
from eliza.llm.client import GatewayClient, extract_message_content
from eliza.llm.errors import GatewayError
from eliza.llm.provider_config import DEEPSEEK_CHAT_MODEL
from eliza.prompting.prompt_builder import MINIMAL_SYSTEM_PROMPT


logger = logging.getLogger(__name__)

router = APIRouter()

HISTORY_LIMIT = 3


@router.post("/functions/v1/deepseek-chat")
async def deepseek_chat(request: Request, gateway: GatewayClient = Depends(get_gateway_client)):
    try:
        body = await read_json_object(request)
        api_key = resolve_gateway_key(gateway, SERVICE_NOT_CONFIGURED)
        messages = require_messages(body)

        logger.info("Deepseek chat - processing request (%d messages)", len(messages))

        recent = [coerce_message(msg) for msg in last_messages(messages, HISTORY_LIMIT)]
        payload = {
            "model": DEEPSEEK_CHAT_MODEL,
            "messages": [{"role": "system", "content": MINIMAL_SYSTEM_PROMPT}, *recent],
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
        logger.exception("Deepseek chat error")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(err) or "Unknown error"},
        )
