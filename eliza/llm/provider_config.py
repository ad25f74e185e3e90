"""Provider/runtime configuration for the LLM layer.

Architectural role:
    Centralizes model selection, endpoint URLs and credential lookup for
    `eliza.llm.client`, `eliza.llm.key_manager`, `eliza.core.assistant` and the
    edge proxy functions in `eliza.api.functions`.

Model call flow integration:
    - `core.assistant.DirectAssistantClient` consumes `DIRECT_MODEL_NAME` and
      `DIRECT_GENERATION_CONFIG`.
    - `client.GenerativeClient` consumes `GEMINI_URL_TEMPLATE`.
    - `client.GatewayClient` consumes `GATEWAY_URL` and `load_gateway_key`.

Determinism:
    Deterministic for a fixed process environment and key files. Values are
    resolved at import time, except the gateway key which is read per request so
    that a running server picks up rotated secrets.

Failure behavior:
    Missing key material is represented as `None` and handled by callers as
    configuration errors.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Direct Gemini access used by the in-process assistant client.
GEMINI_URL_TEMPLATE = os.getenv(
    "GEMINI_URL_TEMPLATE",
    "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
)
GEMINI_KEY_FILE = "config/gemini.key"
DIRECT_MODEL_NAME = os.getenv("DIRECT_MODEL_NAME", "gemini-2.0-flash-exp")

# Fixed sampling parameters for direct generation.
DIRECT_GENERATION_CONFIG = {
    "temperature": 0.7,
    "topP": 0.8,
    "topK": 40,
    "maxOutputTokens": 2048,
}

# Hosted OpenAI-compatible gateway used by the edge proxy functions.
GATEWAY_URL = os.getenv(
    "GATEWAY_URL",
    "https://ai.gateway.lovable.dev/v1/chat/completions",
)
GATEWAY_KEY_ENV = "LOVABLE_API_KEY"

# Per-function model identifiers.
GEMINI_CHAT_MODEL = "google/gemini-2.5-pro"
DEEPSEEK_CHAT_MODEL = "google/gemini-2.5-flash"
OPENAI_CHAT_MODEL = "openai/gpt-5-mini"
OPENAI_CHAT_TEMPERATURE = 0.9
OPENAI_CHAT_MAX_TOKENS = 8000

# HTTP timeout (seconds) for every outbound model call.
REQUEST_TIMEOUT = 120


def load_key(path):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable inferred from file stem (for example
           `config/gemini.key` -> `GEMINI_API_KEY`).
        2. Raw file contents at `path`.

    Args:
        path: Configured key file path or `None`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - `None` path returns `None`.
        - Missing file returns `None`.
        - Empty file returns `None`.
    """
    if not path:
        return None
    key_name = os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"
    env_value = os.getenv(key_name)
    if env_value:
        return env_value
    if not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None


def load_gateway_key():
    """Return the gateway API key from the environment, or `None`."""
    return os.getenv(GATEWAY_KEY_ENV) or None
