"""
speakcoach — Gemini Abstraction Layer
Builds generateContent requests, sends them over a shared async HTTP client,
and decodes the reply into typed models.

One attempt per call: no retry, no backoff, no timeout.
"""

import time
import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)


# ─── Errors ──────────────────────────────────────────────────────────────────

class GeminiError(Exception):
    """Base class for failures talking to the generation API."""


class TransportError(GeminiError):
    """Network failure or non-2xx HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DecodeError(GeminiError):
    """Reply body is not JSON or does not match GenerationResponse."""


class NoCandidatesError(GeminiError):
    """Well-formed reply without a usable candidate."""


# ─── Wire Models ─────────────────────────────────────────────────────────────

class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Part(_WireModel):
    text: str = ""


class Content(_WireModel):
    parts: list[Part] = Field(default_factory=list)
    role: Optional[str] = None


class GenerationConfig(_WireModel):
    temperature: float
    top_k: int = Field(alias="topK")
    top_p: float = Field(alias="topP")
    max_output_tokens: int = Field(alias="maxOutputTokens")


class SafetySetting(_WireModel):
    category: str
    threshold: str


class GenerationRequest(_WireModel):
    contents: list[Content]
    generation_config: GenerationConfig = Field(alias="generationConfig")
    safety_settings: list[SafetySetting] = Field(
        default_factory=list, alias="safetySettings"
    )


class SafetyRating(_WireModel):
    category: str
    probability: str


class Candidate(_WireModel):
    content: Content = Field(default_factory=Content)
    finish_reason: Optional[str] = Field(default=None, alias="finishReason")
    index: Optional[int] = None
    safety_ratings: list[SafetyRating] = Field(
        default_factory=list, alias="safetyRatings"
    )


class UsageMetadata(_WireModel):
    prompt_token_count: int = Field(default=0, alias="promptTokenCount")
    candidates_token_count: int = Field(default=0, alias="candidatesTokenCount")
    total_token_count: int = Field(default=0, alias="totalTokenCount")


class GenerationResponse(_WireModel):
    candidates: list[Candidate]
    usage_metadata: Optional[UsageMetadata] = Field(default=None, alias="usageMetadata")


# ─── Presets ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class GenerationOptions:
    temperature: float
    top_k: int
    top_p: float
    max_output_tokens: int
    safety_settings: tuple[tuple[str, str], ...] = ()


_BLOCK_MEDIUM = "BLOCK_MEDIUM_AND_ABOVE"

# Tutor feedback: balanced creativity, filtered
TUTOR_OPTIONS = GenerationOptions(
    temperature=0.7,
    top_k=40,
    top_p=0.95,
    max_output_tokens=1024,
    safety_settings=(
        ("HARM_CATEGORY_HARASSMENT", _BLOCK_MEDIUM),
        ("HARM_CATEGORY_HATE_SPEECH", _BLOCK_MEDIUM),
    ),
)
PRACTICE_OPTIONS = GenerationOptions(
    temperature=0.8, top_k=40, top_p=0.95, max_output_tokens=512
)
# Speech annotation: near-deterministic
SPEECH_OPTIONS = GenerationOptions(
    temperature=0.3, top_k=20, top_p=0.8, max_output_tokens=256
)


def build_request(prompt: str, options: GenerationOptions) -> GenerationRequest:
    return GenerationRequest(
        contents=[Content(parts=[Part(text=prompt)], role="user")],
        generation_config=GenerationConfig(
            temperature=options.temperature,
            top_k=options.top_k,
            top_p=options.top_p,
            max_output_tokens=options.max_output_tokens,
        ),
        safety_settings=[
            SafetySetting(category=category, threshold=threshold)
            for category, threshold in options.safety_settings
        ],
    )


# ─── Client ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ServiceConfig:
    api_key: str
    model: str
    base_url: str

    @property
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/{self.model}:generateContent"


@dataclass
class GenerationResult:
    text: str
    latency_ms: int
    model: str
    usage: dict = field(default_factory=dict)


class GeminiClient:
    """Thin async client for one model. Holds no mutable state."""

    def __init__(self, config: ServiceConfig, http_client: httpx.AsyncClient):
        self.config = config
        self._http = http_client

    async def generate(self, prompt: str, options: GenerationOptions) -> GenerationResult:
        request = build_request(prompt, options)
        payload = request.model_dump(by_alias=True, exclude_none=True)
        model = self.config.model

        start = time.perf_counter()
        try:
            response = await self._http.post(
                self.config.endpoint,
                params={"key": self.config.api_key},
                json=payload,
            )
        except httpx.HTTPError as e:
            elapsed = int((time.perf_counter() - start) * 1000)
            logger.error(f"Gemini [{model}] transport error after {elapsed}ms: {e!r}")
            raise TransportError(f"request failed: {e}") from e

        elapsed = int((time.perf_counter() - start) * 1000)
        if response.is_error:
            logger.error(
                f"Gemini [{model}] HTTP {response.status_code} after {elapsed}ms: "
                f"{response.text[:200]}"
            )
            raise TransportError(
                f"HTTP {response.status_code}", status_code=response.status_code
            )

        try:
            decoded = GenerationResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Gemini [{model}] undecodable body after {elapsed}ms: {e}")
            raise DecodeError(f"unexpected response body: {e}") from e

        if not decoded.candidates or not decoded.candidates[0].content.parts:
            logger.warning(f"Gemini [{model}]: no candidates after {elapsed}ms")
            raise NoCandidatesError("No response from Gemini API")

        usage = {}
        if decoded.usage_metadata is not None:
            usage = {
                "prompt_tokens": decoded.usage_metadata.prompt_token_count,
                "completion_tokens": decoded.usage_metadata.candidates_token_count,
                "total_tokens": decoded.usage_metadata.total_token_count,
            }
        logger.info(
            f"Gemini [{model}]: {elapsed}ms, {usage.get('total_tokens', '?')} tokens"
        )
        return GenerationResult(
            text=decoded.candidates[0].content.parts[0].text,
            latency_ms=elapsed,
            model=model,
            usage=usage,
        )


# ─── Shared HTTP Client ──────────────────────────────────────────────────────

_http_client: Optional[httpx.AsyncClient] = None


def get_http_client() -> httpx.AsyncClient:
    """Get the pooled HTTP client (singleton). No timeout is configured."""
    global _http_client
    if _http_client is None or _http_client.is_closed:
        _http_client = httpx.AsyncClient(timeout=httpx.Timeout(None))
    return _http_client


async def close_http_client() -> None:
    global _http_client
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
