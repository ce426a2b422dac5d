"""
speakcoach — Failure Policy
Inner operations report an Outcome (value or GeminiError). The boundary then
decides per operation whether to substitute fallback content or surface the
error. Only GeminiError is captured; anything else is a bug and propagates.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Generic, Optional, TypeVar

from speakcoach.tutor.llm import GeminiError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Policy(str, Enum):
    SUBSTITUTE = "substitute"
    SURFACE = "surface"


OPERATION_POLICIES = {
    "tutor_feedback": Policy.SUBSTITUTE,
    "practice_content": Policy.SUBSTITUTE,
    "speech_enhance": Policy.SURFACE,
}


@dataclass(frozen=True)
class Outcome(Generic[T]):
    value: Optional[T] = None
    error: Optional[GeminiError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value


async def attempt(coro: Awaitable[T]) -> Outcome[T]:
    try:
        return Outcome(value=await coro)
    except GeminiError as e:
        return Outcome(error=e)


def resolve(
    operation: str,
    outcome: Outcome[T],
    fallback: Callable[[], T],
) -> T:
    """Apply the operation's policy. SURFACE re-raises the captured error."""
    if outcome.ok:
        return outcome.value

    policy = OPERATION_POLICIES[operation]
    if policy is Policy.SUBSTITUTE:
        logger.warning(
            f"{operation}: {type(outcome.error).__name__}: {outcome.error}, using fallback"
        )
        return fallback()

    logger.error(f"{operation}: {type(outcome.error).__name__}: {outcome.error}")
    return outcome.unwrap()
