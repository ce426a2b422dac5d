"""
Shared fixtures: a fake Gemini endpoint on httpx.MockTransport.
"""

import json

import httpx
import pytest

from speakcoach.tutor.llm import GeminiClient, ServiceConfig

TEST_BASE_URL = "https://gemini.test/v1beta/models"
TEST_MODEL = "gemini-test"


def gemini_reply(text: str, usage: bool = True) -> dict:
    body = {
        "candidates": [
            {
                "content": {"parts": [{"text": text}], "role": "model"},
                "finishReason": "STOP",
                "index": 0,
                "safetyRatings": [
                    {"category": "HARM_CATEGORY_HARASSMENT", "probability": "NEGLIGIBLE"},
                ],
            }
        ]
    }
    if usage:
        body["usageMetadata"] = {
            "promptTokenCount": 120,
            "candidatesTokenCount": 80,
            "totalTokenCount": 200,
        }
    return body


class FakeGemini:
    """Records requests and answers each with a fresh response (or raises)."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._status = 200
        self._kwargs = {}
        self._error = None

    def respond_text(self, text: str):
        self.respond(200, json_body=gemini_reply(text))

    def respond(self, status: int = 200, json_body=None, content: bytes = None):
        self._status = status
        self._kwargs = {"content": content} if content is not None else {"json": json_body}
        self._error = None

    def fail(self, exc: Exception):
        self._error = exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._error is not None:
            raise self._error
        return httpx.Response(self._status, **self._kwargs)

    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def fake_gemini():
    fake = FakeGemini()
    fake.respond_text("OK")
    return fake


@pytest.fixture
def http_client(fake_gemini):
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_gemini.handler))


@pytest.fixture
def service_config():
    return ServiceConfig(api_key="test-key", model=TEST_MODEL, base_url=TEST_BASE_URL)


@pytest.fixture
def gemini_client(service_config, http_client):
    return GeminiClient(service_config, http_client)
