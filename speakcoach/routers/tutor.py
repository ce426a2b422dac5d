"""
speakcoach — Tutor Router
Local HTTP adapter over speakcoach.commands for the desktop UI.
CommandError → 400, or 409 when the service is not initialized yet.
"""

import json
import logging
from typing import Any, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from speakcoach import commands
from speakcoach.commands import CommandError
from speakcoach.models import TutorFeedback
from speakcoach.state.service import ServiceHolder

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/tutor", tags=["tutor"])


def get_holder(request: Request) -> ServiceHolder:
    return request.app.state.holder


def get_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def _http_error(e: CommandError) -> HTTPException:
    return HTTPException(status_code=409 if e.not_initialized else 400, detail=e.message)


# ─── Request/Response Models ─────────────────────────────────────────────────

class InitializeRequest(BaseModel):
    api_key: str
    model: Optional[str] = None
    base_url: Optional[str] = None

class MessageResponse(BaseModel):
    message: str

class FeedbackRequest(BaseModel):
    performance_metrics: dict[str, Any] = Field(default_factory=dict)
    context: str = ""

class PracticeContentRequest(BaseModel):
    topic: str
    difficulty: str
    interests: list[str] = Field(default_factory=list)

class PracticeContentResponse(BaseModel):
    content: str

class SpeechEnhanceRequest(BaseModel):
    text: str

class SpeechEnhanceResponse(BaseModel):
    enhanced_text: str
    original_text: str

class HealthResponse(BaseModel):
    status: str
    initialized: bool


# ─── Service Setup ───────────────────────────────────────────────────────────

@router.post("/initialize", response_model=MessageResponse)
async def initialize(
    body: InitializeRequest,
    holder: ServiceHolder = Depends(get_holder),
    client: httpx.AsyncClient = Depends(get_client),
):
    try:
        message = await commands.initialize_service(
            body.api_key, holder=holder, http_client=client,
            model=body.model, base_url=body.base_url,
        )
    except CommandError as e:
        raise _http_error(e)
    return MessageResponse(message=message)


@router.post("/test-connection", response_model=MessageResponse)
async def test_connection(
    body: InitializeRequest,
    holder: ServiceHolder = Depends(get_holder),
    client: httpx.AsyncClient = Depends(get_client),
):
    try:
        message = await commands.test_connection(
            body.api_key, holder=holder, http_client=client,
            model=body.model, base_url=body.base_url,
        )
    except CommandError as e:
        raise _http_error(e)
    return MessageResponse(message=message)


# ─── Generation ──────────────────────────────────────────────────────────────

@router.post("/feedback", response_model=TutorFeedback)
async def feedback(body: FeedbackRequest, holder: ServiceHolder = Depends(get_holder)):
    try:
        return await commands.get_tutor_feedback(
            body.performance_metrics, body.context, holder=holder,
        )
    except CommandError as e:
        raise _http_error(e)


@router.post("/practice-content", response_model=PracticeContentResponse)
async def practice_content(
    body: PracticeContentRequest, holder: ServiceHolder = Depends(get_holder)
):
    try:
        content = await commands.generate_practice_content(
            body.topic, body.difficulty, body.interests, holder=holder,
        )
    except CommandError as e:
        raise _http_error(e)
    return PracticeContentResponse(content=content)


@router.post("/speech-enhance", response_model=SpeechEnhanceResponse)
async def speech_enhance(
    body: SpeechEnhanceRequest, holder: ServiceHolder = Depends(get_holder)
):
    try:
        raw = await commands.text_to_speech_enhance(body.text, holder=holder)
    except CommandError as e:
        raise _http_error(e)
    return SpeechEnhanceResponse(**json.loads(raw))


@router.get("/health", response_model=HealthResponse)
async def health(holder: ServiceHolder = Depends(get_holder)):
    return HealthResponse(status="ok", initialized=await holder.is_initialized())
