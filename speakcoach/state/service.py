"""
speakcoach — Service Holder

Holds the active FeedbackGenerator. Written on (re)initialization, read on
every command.

Locking Rules:
- The lock covers reading or swapping the reference, nothing else.
- Never await a network call while holding it.
- A completed set() happens-before any later get().
"""

import asyncio
import logging
from typing import Optional

from speakcoach.tutor.service import FeedbackGenerator

logger = logging.getLogger(__name__)

NOT_INITIALIZED_MESSAGE = "Gemini service not initialized. Please set up your API key first."


class ServiceNotInitialized(Exception):
    def __init__(self, message: str = NOT_INITIALIZED_MESSAGE):
        super().__init__(message)


class ServiceHolder:
    def __init__(self, generator: Optional[FeedbackGenerator] = None):
        self._generator = generator
        self._lock = asyncio.Lock()

    async def get(self) -> FeedbackGenerator:
        async with self._lock:
            generator = self._generator
        if generator is None:
            raise ServiceNotInitialized()
        return generator

    async def set(self, generator: FeedbackGenerator) -> None:
        async with self._lock:
            self._generator = generator
        logger.info(f"Gemini service configured (model={generator.client.config.model})")

    async def reset(self) -> None:
        async with self._lock:
            self._generator = None
        logger.info("Gemini service cleared")

    async def is_initialized(self) -> bool:
        async with self._lock:
            return self._generator is not None
