"""Provider-specific transport clients for model requests.

Architectural role:
    Executes HTTP requests against the Gemini generative-language API (direct
    assistant path) and the hosted OpenAI-compatible gateway (edge proxy path).

Model invocation flow:
    - Direct: `GenerativeClient(api_key).get_model(...)` ->
      `GenerativeModel.generate_content(prompt)` -> `GenerateContentResponse.text()`.
    - Gateway: `GatewayClient.create_chat_completion(payload, api_key)` -> parsed JSON.

Retry behavior:
    No retry loop is implemented. Each HTTP call is attempted once with
    timeout=`REQUEST_TIMEOUT`.

Failure handling model:
    Non-2xx replies are classified here, where the status code and upstream
    error payload are available, into `AssistantError` / `GatewayError`.
    Transport exceptions (`requests.exceptions.RequestException`) propagate
    unchanged.
"""

import logging

import requests

from eliza.llm.errors import AssistantError, AssistantErrorKind, GatewayError
from eliza.llm.provider_config import (
    GATEWAY_URL,
    GEMINI_URL_TEMPLATE,
    REQUEST_TIMEOUT,
    load_gateway_key,
)


logger = logging.getLogger(__name__)


def _error_payload(response) -> dict:
    """Return the `error` object of a JSON error body, or an empty dict."""
    try:
        data = response.json()
    except ValueError:
        return {}
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return data["error"]
    return {}


def classify_gemini_error(response) -> AssistantError:
    """Map a non-2xx Gemini reply to a typed `AssistantError`.

    Classification:
        - 429 / `RESOURCE_EXHAUSTED` -> `QUOTA_EXCEEDED`
        - 401 / `UNAUTHENTICATED` / reason `API_KEY_INVALID` -> `INVALID_API_KEY`
        - 403 / `PERMISSION_DENIED` -> `PERMISSION_DENIED`
        - anything else -> `UPSTREAM_ERROR` with the upstream message
    """
    status_code = response.status_code
    error = _error_payload(response)
    status_name = str(error.get("status") or "")
    reasons = {
        str(item.get("reason"))
        for item in error.get("details") or []
        if isinstance(item, dict) and item.get("reason")
    }
    detail = error.get("message") or response.text

    if status_code == 429 or status_name == "RESOURCE_EXHAUSTED":
        kind = AssistantErrorKind.QUOTA_EXCEEDED
    elif status_code == 401 or status_name == "UNAUTHENTICATED" or "API_KEY_INVALID" in reasons:
        kind = AssistantErrorKind.INVALID_API_KEY
    elif status_code == 403 or status_name == "PERMISSION_DENIED":
        kind = AssistantErrorKind.PERMISSION_DENIED
    else:
        return AssistantError(
            AssistantErrorKind.UPSTREAM_ERROR,
            message=f"Gemini request failed ({status_code}): {detail}",
            status_code=status_code,
            detail=detail,
        )

    return AssistantError(kind, status_code=status_code, detail=detail)


class GenerateContentResponse:
    """Thin view over a `generateContent` JSON reply."""

    def __init__(self, data: dict):
        self.data = data or {}

    def text(self) -> str:
        """Concatenated text parts of the first candidate ("" when absent)."""
        candidates = self.data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(str(part.get("text", "")) for part in parts if isinstance(part, dict))


class GenerativeModel:
    """One configured Gemini model bound to an API key."""

    def __init__(self, api_key: str, model: str, generation_config: dict | None = None, session=None):
        self.api_key = api_key
        self.model = model
        self.generation_config = dict(generation_config or {})
        self.session = session or requests

    def generate_content(self, prompt: str) -> GenerateContentResponse:
        """Send one single-turn prompt and return the parsed reply.

        Raises:
            AssistantError: Classified non-2xx reply.
            requests.exceptions.RequestException: Transport failure.
        """
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if self.generation_config:
            payload["generationConfig"] = self.generation_config

        response = self.session.post(
            GEMINI_URL_TEMPLATE.format(model=self.model),
            headers={
                "x-goog-api-key": self.api_key,
                "Content-Type": "application/json",
            },
            json=payload,
            timeout=REQUEST_TIMEOUT,
        )

        if response.status_code != 200:
            raise classify_gemini_error(response)

        return GenerateContentResponse(response.json())


class GenerativeClient:
    """Factory for `GenerativeModel` instances sharing one API key."""

    def __init__(self, api_key: str, session=None):
        if not api_key:
            raise ValueError("GenerativeClient requires an API key.")
        self.api_key = api_key
        self.session = session or requests.Session()

    def get_model(self, model: str, generation_config: dict | None = None) -> GenerativeModel:
        return GenerativeModel(self.api_key, model, generation_config, session=self.session)


class GatewayClient:
    """HTTP client for the hosted OpenAI-compatible chat-completion gateway.

    Args:
        url: Chat-completion endpoint.
        key_loader: Callable returning the bearer key; handlers read it per
            request so a missing key can be reported in their own envelope.
        session: Optional `requests` session (tests inject fakes here).
    """

    def __init__(self, url: str = GATEWAY_URL, key_loader=load_gateway_key, session=None):
        self.url = url
        self.key_loader = key_loader
        self.session = session or requests

    def create_chat_completion(self, payload: dict, api_key: str) -> dict:
        """POST one non-streaming chat-completion request.

        Args:
            payload: `{model, messages, temperature?, max_tokens?}`; `stream` is
                forced to `False`.
            api_key: Bearer key resolved by the caller.

        Returns:
            Parsed JSON reply (`{choices, usage, model}`).

        Raises:
            GatewayError: Non-2xx reply, with status and upstream message.
        """
        body = dict(payload)
        body["stream"] = False

        response = self.session.post(
            self.url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json=body,
            timeout=REQUEST_TIMEOUT,
        )

        if not 200 <= response.status_code < 300:
            upstream_message = _error_payload(response).get("message")
            logger.error("AI gateway error: %s %s", response.status_code, response.text)
            raise GatewayError(response.status_code, response.text, upstream_message)

        return response.json()


def extract_message_content(data: dict):
    """Return `choices[0].message.content` or `None` when absent."""
    choices = (data or {}).get("choices") or []
    if not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message") or {}
    return message.get("content")
