"""Structured error types for model and gateway calls.

Architectural role:
    Failure conditions are classified once, at the point where they are
    detected (HTTP status / upstream error payload), and travel upward as a
    typed `kind`. Callers branch on the kind instead of inspecting message text.

Taxonomy:
    - `AssistantError`: failures of the direct Gemini path (missing key, empty
      output, quota, invalid key, permission).
    - `GatewayError`: non-2xx replies from the hosted chat-completion gateway.
"""

from enum import Enum


class AssistantErrorKind(str, Enum):
    NO_API_KEY = "no_api_key"
    EMPTY_RESPONSE = "empty_response"
    QUOTA_EXCEEDED = "quota_exceeded"
    INVALID_API_KEY = "invalid_api_key"
    PERMISSION_DENIED = "permission_denied"
    UPSTREAM_ERROR = "upstream_error"


# User-facing messages shown by UI layers.
ASSISTANT_ERROR_MESSAGES = {
    AssistantErrorKind.NO_API_KEY: "Gemini Direct Service not available - no API key",
    AssistantErrorKind.EMPTY_RESPONSE: "Empty response from Gemini",
    AssistantErrorKind.QUOTA_EXCEEDED: (
        "Gemini API quota exceeded. Please add your own API key or try again later."
    ),
    AssistantErrorKind.INVALID_API_KEY: (
        "Invalid Gemini API key. Please check your API key configuration."
    ),
    AssistantErrorKind.PERMISSION_DENIED: (
        "API key lacks permissions. Please ensure Gemini API is enabled."
    ),
    AssistantErrorKind.UPSTREAM_ERROR: "Gemini request failed",
}


class AssistantError(Exception):
    """Typed failure of the direct assistant path.

    Attributes:
        kind: Classification populated where the failure was detected.
        status_code: Upstream HTTP status, when the failure came from HTTP.
        detail: Raw upstream detail (error body or message), for logging only.
    """

    def __init__(self, kind, message=None, status_code=None, detail=None):
        self.kind = AssistantErrorKind(kind)
        self.message = message or ASSISTANT_ERROR_MESSAGES[self.kind]
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.message)


class GatewayErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    CREDITS_EXHAUSTED = "credits_exhausted"
    UPSTREAM_ERROR = "upstream_error"


class GatewayError(Exception):
    """Non-2xx reply from the chat-completion gateway.

    Attributes:
        kind: `RATE_LIMITED` (429), `CREDITS_EXHAUSTED` (402) or `UPSTREAM_ERROR`.
        status_code: Original HTTP status, preserved for the proxy response.
        body: Raw response text.
        upstream_message: `error.message` from a JSON error body, if present.
    """

    def __init__(self, status_code: int, body: str = "", upstream_message: str | None = None):
        self.status_code = status_code
        self.body = body
        self.upstream_message = upstream_message
        if status_code == 429:
            self.kind = GatewayErrorKind.RATE_LIMITED
        elif status_code == 402:
            self.kind = GatewayErrorKind.CREDITS_EXHAUSTED
        else:
            self.kind = GatewayErrorKind.UPSTREAM_ERROR
        super().__init__(f"Lovable AI Gateway error: {status_code} - {body}")

