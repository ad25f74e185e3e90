import json
import unittest

from eliza.llm.client import (
    GatewayClient,
    GenerateContentResponse,
    GenerativeClient,
    classify_gemini_error,
    extract_message_content,
)
from eliza.llm.errors import (
    AssistantError,
    AssistantErrorKind,
    GatewayError,
    GatewayErrorKind,
)


class _FakeResponse:
    def __init__(self, status_code, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no JSON body")
        return self._payload


class _FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    def post(self, url, headers=None, json=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
        return self.responses.pop(0)


def _gemini_error(code, status, message="", reasons=()):
    return {
        "error": {
            "code": code,
            "status": status,
            "message": message,
            "details": [{"reason": r} for r in reasons],
        }
    }


class TestGeminiErrorClassification(unittest.TestCase):
    def test_quota(self):
        err = classify_gemini_error(_FakeResponse(429, _gemini_error(429, "RESOURCE_EXHAUSTED")))
        self.assertEqual(err.kind, AssistantErrorKind.QUOTA_EXCEEDED)
        self.assertEqual(err.status_code, 429)

    def test_invalid_key_reason(self):
        payload = _gemini_error(400, "INVALID_ARGUMENT", "API key not valid.", reasons=["API_KEY_INVALID"])
        err = classify_gemini_error(_FakeResponse(400, payload))
        self.assertEqual(err.kind, AssistantErrorKind.INVALID_API_KEY)

    def test_permission(self):
        err = classify_gemini_error(_FakeResponse(403, _gemini_error(403, "PERMISSION_DENIED")))
        self.assertEqual(err.kind, AssistantErrorKind.PERMISSION_DENIED)

    def test_other_status_keeps_upstream_detail(self):
        err = classify_gemini_error(_FakeResponse(500, text="internal"))
        self.assertEqual(err.kind, AssistantErrorKind.UPSTREAM_ERROR)
        self.assertIn("internal", err.message)


class TestGenerativeModel(unittest.TestCase):
    def test_generate_content_posts_prompt_and_config(self):
        session = _FakeSession(
            [_FakeResponse(200, {"candidates": [{"content": {"parts": [{"text": "Hi "}, {"text": "there"}]}}]})]
        )
        model = GenerativeClient("gem-key", session=session).get_model("gemini-test", {"temperature": 0.7})

        response = model.generate_content("hello")

        self.assertEqual(response.text(), "Hi there")
        call = session.calls[0]
        self.assertIn("/models/gemini-test:generateContent", call["url"])
        self.assertEqual(call["headers"]["x-goog-api-key"], "gem-key")
        self.assertEqual(call["json"]["contents"][0]["parts"][0]["text"], "hello")
        self.assertEqual(call["json"]["generationConfig"], {"temperature": 0.7})

    def test_generate_content_raises_classified_error(self):
        session = _FakeSession([_FakeResponse(429, _gemini_error(429, "RESOURCE_EXHAUSTED"))])
        model = GenerativeClient("gem-key", session=session).get_model("gemini-test")

        with self.assertRaises(AssistantError) as ctx:
            model.generate_content("hello")
        self.assertEqual(ctx.exception.kind, AssistantErrorKind.QUOTA_EXCEEDED)

    def test_missing_candidates_yield_empty_text(self):
        self.assertEqual(GenerateContentResponse({}).text(), "")
        self.assertEqual(GenerateContentResponse({"candidates": [{}]}).text(), "")

    def test_client_requires_key(self):
        with self.assertRaises(ValueError):
            GenerativeClient("")


class TestGatewayClient(unittest.TestCase):
    def test_forces_non_streaming_and_bearer_auth(self):
        session = _FakeSession([_FakeResponse(200, {"choices": [{"message": {"content": "yo"}}]})])
        gateway = GatewayClient(url="https://gw.example/v1/chat", session=session)

        data = gateway.create_chat_completion({"model": "m", "messages": [], "stream": True}, "gw-key")

        self.assertEqual(extract_message_content(data), "yo")
        call = session.calls[0]
        self.assertEqual(call["url"], "https://gw.example/v1/chat")
        self.assertEqual(call["headers"]["Authorization"], "Bearer gw-key")
        self.assertIs(call["json"]["stream"], False)

    def test_status_codes_map_to_kinds(self):
        cases = [
            (429, GatewayErrorKind.RATE_LIMITED),
            (402, GatewayErrorKind.CREDITS_EXHAUSTED),
            (400, GatewayErrorKind.UPSTREAM_ERROR),
        ]
        for status, kind in cases:
            session = _FakeSession([_FakeResponse(status, {"error": {"message": "nope"}})])
            gateway = GatewayClient(session=session)
            with self.assertRaises(GatewayError) as ctx:
                gateway.create_chat_completion({"model": "m", "messages": []}, "k")
            self.assertEqual(ctx.exception.kind, kind)
            self.assertEqual(ctx.exception.status_code, status)
            self.assertEqual(ctx.exception.upstream_message, "nope")

    def test_extract_message_content_handles_absent_choices(self):
        self.assertIsNone(extract_message_content({}))
        self.assertIsNone(extract_message_content({"choices": []}))
        self.assertIsNone(extract_message_content({"choices": [{"message": {}}]}))


if __name__ == "__main__":
    unittest.main()
