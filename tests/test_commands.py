"""
Tests for the command surface the UI calls.
"""

import json

import httpx
import pytest

from speakcoach import commands
from speakcoach.commands import CommandError
from speakcoach.state.service import ServiceHolder, NOT_INITIALIZED_MESSAGE
from speakcoach.tutor.feedback_parser import NO_JSON_FEEDBACK
from speakcoach.tutor.fallback import fallback_feedback, DEFAULT_PRACTICE_TEXT

pytestmark = pytest.mark.asyncio

BASE = "https://gemini.test/v1beta/models"


@pytest.fixture
def holder():
    return ServiceHolder()


async def _init(holder, http_client):
    return await commands.initialize_service(
        "test-key", holder=holder, http_client=http_client, model="gemini-test", base_url=BASE,
    )


# ─── Initialization ──────────────────────────────────────────────────────────

class TestInitialize:
    async def test_initialize(self, holder, http_client):
        assert await _init(holder, http_client) == "Gemini service initialized successfully"
        assert await holder.is_initialized()

    async def test_blank_key_rejected(self, holder, http_client):
        with pytest.raises(CommandError):
            await commands.initialize_service("  ", holder=holder, http_client=http_client)
        assert not await holder.is_initialized()

    async def test_reinitialize_switches_model(self, holder, http_client, fake_gemini):
        await _init(holder, http_client)
        await commands.initialize_service(
            "other-key", holder=holder, http_client=http_client, model="gemini-2", base_url=BASE,
        )
        await commands.generate_practice_content("daily", "beginner", [], holder=holder)
        request = fake_gemini.requests[-1]
        assert "/gemini-2:generateContent" in str(request.url)
        assert request.url.params["key"] == "other-key"


class TestConnectionTest:
    async def test_success_installs_service(self, holder, http_client, fake_gemini):
        fake_gemini.respond_text("A" * 80)
        message = await commands.test_connection(
            "test-key", holder=holder, http_client=http_client, base_url=BASE,
        )
        assert message == "連接測試成功！生成的測試內容：" + "A" * 50
        assert await holder.is_initialized()
        prompt = fake_gemini.last_body()["contents"][0]["parts"][0]["text"]
        assert "主題：daily" in prompt and "學生興趣：測試" in prompt

    async def test_failure_is_surfaced_not_substituted(self, holder, http_client, fake_gemini):
        fake_gemini.respond(400, json_body={"error": {"message": "API key not valid"}})
        with pytest.raises(CommandError) as exc:
            await commands.test_connection(
                "bad-key", holder=holder, http_client=http_client, base_url=BASE,
            )
        assert exc.value.message.startswith("連接測試失敗：")
        assert not await holder.is_initialized()

    async def test_failure_keeps_previous_service(self, holder, http_client, fake_gemini):
        await _init(holder, http_client)
        before = await holder.get()
        fake_gemini.fail(httpx.ConnectError("down"))
        with pytest.raises(CommandError):
            await commands.test_connection("new-key", holder=holder, http_client=http_client)
        assert await holder.get() is before


# ─── Uninitialized ───────────────────────────────────────────────────────────

class TestUninitialized:
    async def test_feedback(self, holder):
        with pytest.raises(CommandError) as exc:
            await commands.get_tutor_feedback({"overall": 90}, "ctx", holder=holder)
        assert exc.value.message == NOT_INITIALIZED_MESSAGE
        assert exc.value.not_initialized

    async def test_practice_content(self, holder):
        with pytest.raises(CommandError) as exc:
            await commands.generate_practice_content("daily", "beginner", [], holder=holder)
        assert exc.value.not_initialized

    async def test_speech(self, holder):
        with pytest.raises(CommandError) as exc:
            await commands.text_to_speech_enhance("hi", holder=holder)
        assert exc.value.not_initialized


# ─── Generation ──────────────────────────────────────────────────────────────

class TestGeneration:
    async def test_feedback_prose_reply(self, holder, http_client, fake_gemini):
        await _init(holder, http_client)
        fake_gemini.respond_text("")
        assert await commands.get_tutor_feedback({}, "ctx", holder=holder) == NO_JSON_FEEDBACK

    async def test_feedback_transport_failure(self, holder, http_client, fake_gemini):
        await _init(holder, http_client)
        fake_gemini.fail(httpx.ConnectError("down"))
        metrics = {"overall": 65}
        fb = await commands.get_tutor_feedback(metrics, "ctx", holder=holder)
        assert fb == fallback_feedback(metrics)

    async def test_practice_failure_default_text(self, holder, http_client, fake_gemini):
        await _init(holder, http_client)
        fake_gemini.respond(200, json_body={"candidates": []})
        text = await commands.generate_practice_content(
            "travel", "advanced", ["food"], holder=holder,
        )
        assert text == DEFAULT_PRACTICE_TEXT

    async def test_speech_returns_valid_json(self, holder, http_client, fake_gemini):
        await _init(holder, http_client)
        fake_gemini.respond_text('Say "hello" ↗ slowly.\n')
        raw = await commands.text_to_speech_enhance('Say "hello"', holder=holder)
        assert json.loads(raw) == {
            "enhanced_text": 'Say "hello" ↗ slowly.',
            "original_text": 'Say "hello"',
        }

    async def test_speech_failure_surfaces(self, holder, http_client, fake_gemini):
        await _init(holder, http_client)
        fake_gemini.respond(200, content=b"garbage")
        with pytest.raises(CommandError) as exc:
            await commands.text_to_speech_enhance("hi", holder=holder)
        assert exc.value.message.startswith("Gemini語音合成失敗: ")
        assert not exc.value.not_initialized
