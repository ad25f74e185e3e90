"""
HTTP adapter hosting the Eliza edge proxy functions.

Architectural role:
- Mount the three gateway-backed chat functions on one FastAPI app.
- Answer CORS preflight requests and stamp CORS headers on every response.

Endpoints:
- `POST /functions/v1/gemini-chat`
- `POST /functions/v1/deepseek-chat`
- `POST /functions/v1/openai-chat`
- `OPTIONS <any path>` -> empty 200 with CORS headers.

Error handling strategy:
- Each function catches its own failures and always answers with JSON.
- No retries; 429/402 from the gateway keep their status code.

Side effects:
- Loads environment variables at import time via `load_dotenv()`.
- Emits request debug logs when `DEBUG == "true"`.
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import Response

from eliza.api.functions import deepseek_chat, gemini_chat, openai_chat


logger = logging.getLogger(__name__)

# Request debug logging is opt-in.
DEBUG = os.getenv("DEBUG") == "true"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

app = FastAPI(title="Eliza edge functions")

app.include_router(gemini_chat.router)
app.include_router(deepseek_chat.router)
app.include_router(openai_chat.router)


# ============================================================
# CORS
# ============================================================

@app.middleware("http")
async def cors_middleware(request: Request, call_next):
    """
    Short-circuit preflight requests and add CORS headers to all responses.

    Preflight requests never reach route handlers, so they succeed even for
    paths without an OPTIONS route.
    """
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    if DEBUG:
        logger.debug("%s %s", request.method, request.url.path)

    response = await call_next(request)
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    return response


# ============================================================
# Server runner
# ============================================================

def main():
    """Run the edge functions with uvicorn (`HOST`/`PORT` from the environment)."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s :: %(message)s")
    uvicorn.run(
        app,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    main()
