"""
speakcoach — Command Surface
Async commands invoked by the desktop UI. Each returns a success value or
raises CommandError with a message the UI can show as-is.

Feedback and practice content never fail once the service is set up: upstream
errors are replaced by offline fallbacks. Speech enhancement surfaces them.
"""

import json
import logging
from typing import Mapping, Optional

import httpx

from speakcoach.models import TutorFeedback
from speakcoach.state.service import ServiceHolder, ServiceNotInitialized
from speakcoach.tutor.llm import GeminiError, get_http_client
from speakcoach.tutor.service import FeedbackGenerator

logger = logging.getLogger(__name__)

CONNECTION_TEST_TOPIC = "daily"
CONNECTION_TEST_DIFFICULTY = "beginner"
CONNECTION_TEST_INTERESTS = ["測試"]
CONNECTION_TEST_PREVIEW_CHARS = 50

default_holder = ServiceHolder()


class CommandError(Exception):
    """User-facing command failure."""

    def __init__(self, message: str, not_initialized: bool = False):
        super().__init__(message)
        self.message = message
        self.not_initialized = not_initialized


async def _generator(holder: ServiceHolder) -> FeedbackGenerator:
    try:
        return await holder.get()
    except ServiceNotInitialized as e:
        raise CommandError(str(e), not_initialized=True) from e


def _require_key(api_key: str) -> str:
    key = (api_key or "").strip()
    if not key:
        raise CommandError("API key is required.")
    return key


async def initialize_service(
    api_key: str,
    *,
    holder: ServiceHolder = default_holder,
    http_client: Optional[httpx.AsyncClient] = None,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
) -> str:
    generator = FeedbackGenerator.create(
        _require_key(api_key),
        http_client or get_http_client(),
        model=model,
        base_url=base_url,
    )
    await holder.set(generator)
    return "Gemini service initialized successfully"


async def test_connection(
    api_key: str,
    *,
    holder: ServiceHolder = default_holder,
    http_client: Optional[httpx.AsyncClient] = None,
    model: Optional[str] = None,
    base_url: Optional[str] = None,
) -> str:
    """Probe the API with a throwaway generator; install it only on success."""
    candidate = FeedbackGenerator.create(
        _require_key(api_key),
        http_client or get_http_client(),
        model=model,
        base_url=base_url,
    )
    try:
        content = await candidate.request_practice_content(
            CONNECTION_TEST_TOPIC, CONNECTION_TEST_DIFFICULTY, CONNECTION_TEST_INTERESTS,
        )
    except GeminiError as e:
        logger.warning(f"Connection test failed: {e}")
        raise CommandError(f"連接測試失敗：{e}") from e

    await holder.set(candidate)
    return f"連接測試成功！生成的測試內容：{content[:CONNECTION_TEST_PREVIEW_CHARS]}"


async def get_tutor_feedback(
    performance_metrics: Mapping[str, object],
    context: str,
    *,
    holder: ServiceHolder = default_holder,
) -> TutorFeedback:
    generator = await _generator(holder)
    return await generator.tutor_feedback(performance_metrics or {}, context)


async def generate_practice_content(
    topic: str,
    difficulty: str,
    interests: list[str],
    *,
    holder: ServiceHolder = default_holder,
) -> str:
    generator = await _generator(holder)
    return await generator.practice_content(topic, difficulty, list(interests or []))


async def text_to_speech_enhance(
    text: str,
    *,
    holder: ServiceHolder = default_holder,
) -> str:
    """Returns a JSON string: {"enhanced_text": ..., "original_text": ...}."""
    generator = await _generator(holder)
    try:
        enhanced = await generator.speech_enhancement(text)
    except GeminiError as e:
        raise CommandError(f"Gemini語音合成失敗: {e}") from e
    return json.dumps(
        {"enhanced_text": enhanced, "original_text": text},
        ensure_ascii=False,
    )
