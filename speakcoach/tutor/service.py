"""
speakcoach — Feedback Generator
The three Gemini-backed operations. Each has a strict form (raises
GeminiError) and a boundary form that applies the operation's failure policy.
"""

import logging
from typing import Mapping, Optional

import httpx

from speakcoach.config import GEMINI_BASE_URL, GEMINI_MODEL
from speakcoach.models import TutorFeedback
from speakcoach.tutor.fallback import fallback_feedback, fallback_practice_content
from speakcoach.tutor.feedback_parser import parse_tutor_feedback
from speakcoach.tutor.llm import (
    GeminiClient, ServiceConfig,
    TUTOR_OPTIONS, PRACTICE_OPTIONS, SPEECH_OPTIONS,
)
from speakcoach.tutor.policy import attempt, resolve
from speakcoach.tutor.prompts import (
    build_tutor_prompt, build_practice_prompt, build_speech_prompt,
)

logger = logging.getLogger(__name__)


class FeedbackGenerator:
    def __init__(self, client: GeminiClient):
        self.client = client

    @classmethod
    def create(
        cls,
        api_key: str,
        http_client: httpx.AsyncClient,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> "FeedbackGenerator":
        config = ServiceConfig(
            api_key=api_key,
            model=model or GEMINI_MODEL,
            base_url=base_url or GEMINI_BASE_URL,
        )
        return cls(GeminiClient(config, http_client))

    # ─── Strict ──────────────────────────────────────────────────────────────

    async def request_tutor_feedback(
        self, metrics: Mapping[str, object], context: str
    ) -> TutorFeedback:
        prompt = build_tutor_prompt(metrics, context)
        result = await self.client.generate(prompt, TUTOR_OPTIONS)
        return parse_tutor_feedback(result.text)

    async def request_practice_content(
        self, topic: str, difficulty: str, interests: list[str]
    ) -> str:
        prompt = build_practice_prompt(topic, difficulty, interests)
        result = await self.client.generate(prompt, PRACTICE_OPTIONS)
        return result.text.strip()

    async def request_speech_enhancement(self, text: str) -> str:
        result = await self.client.generate(build_speech_prompt(text), SPEECH_OPTIONS)
        return result.text.strip()

    # ─── Boundary ────────────────────────────────────────────────────────────

    async def tutor_feedback(
        self, metrics: Mapping[str, object], context: str
    ) -> TutorFeedback:
        outcome = await attempt(self.request_tutor_feedback(metrics, context))
        return resolve("tutor_feedback", outcome, lambda: fallback_feedback(metrics))

    async def practice_content(
        self, topic: str, difficulty: str, interests: list[str]
    ) -> str:
        outcome = await attempt(self.request_practice_content(topic, difficulty, interests))
        return resolve(
            "practice_content", outcome,
            lambda: fallback_practice_content(topic, difficulty),
        )

    async def speech_enhancement(self, text: str) -> str:
        outcome = await attempt(self.request_speech_enhancement(text))
        return resolve("speech_enhance", outcome, lambda: text)
