"""
speakcoach — Tutor Feedback Parser
Turns the model's free-text reply into a TutorFeedback. Never raises.

The reply is expected to contain a JSON object somewhere in the text. The
object is taken as the span from the first '{' to the last '}'. Text with
several objects can therefore produce an unparseable slice; that case lands
on INVALID_JSON_FEEDBACK like any other bad slice.

Three levels:
1. Object parsed: each field is read independently, with its own default.
2. Span found but not a JSON object: INVALID_JSON_FEEDBACK.
3. No span at all: NO_JSON_FEEDBACK.
"""

import json
import logging
from typing import Optional

from speakcoach.models import DifficultyAdjustment, MotivationLevel, TutorFeedback

logger = logging.getLogger(__name__)


# ─── Field Defaults ──────────────────────────────────────────────────────────

DEFAULT_ENCOURAGEMENT = "很好的嘗試！繼續加油！"
DEFAULT_SPECIFIC_FEEDBACK = "您的發音整體不錯，繼續練習會更好。"
DEFAULT_IMPROVEMENT_TIPS = ("多聽多練", "注意語調")
DEFAULT_NEXT_CHALLENGE = "嘗試更複雜的句子練習"
DEFAULT_MOTIVATION_LEVEL = MotivationLevel.MEDIUM.value
DEFAULT_DIFFICULTY_ADJUSTMENT = DifficultyAdjustment.MAINTAIN.value

_MOTIVATION_LEVELS = {m.value for m in MotivationLevel}
_DIFFICULTY_ADJUSTMENTS = {d.value for d in DifficultyAdjustment}


# ─── Canned Records ──────────────────────────────────────────────────────────

# A {...} span was found but did not parse
INVALID_JSON_FEEDBACK = TutorFeedback(
    encouragement="很好的練習！您正在進步中。",
    specific_feedback="繼續保持練習的節奏，您會看到明顯的改善。",
    improvement_tips=[
        "每天堅持練習15分鐘",
        "注意單詞的重音位置",
        "模仿母語者的語調",
    ],
    next_challenge="嘗試朗讀一段新聞文章",
    motivation_level="medium",
    difficulty_adjustment="maintain",
)

# No {...} span in the reply
NO_JSON_FEEDBACK = TutorFeedback(
    encouragement="很棒的嘗試！每一次練習都是進步。",
    specific_feedback="您的努力很值得讚賞，繼續保持這種學習態度。",
    improvement_tips=[
        "保持每日練習的習慣",
        "錄音後多聽幾遍自己的發音",
    ],
    next_challenge="挑戰更長的對話練習",
    motivation_level="high",
    difficulty_adjustment="maintain",
)


# ─── Parsing ─────────────────────────────────────────────────────────────────

def extract_json_span(text: str) -> Optional[str]:
    """Return text from the first '{' to the last '}' inclusive, or None."""
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end < start:
        return None
    return text[start:end + 1]


def _str_field(data: dict, key: str, default: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else default


def _choice_field(data: dict, key: str, allowed: set[str], default: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) and value in allowed else default


def _tips_field(data: dict) -> list[str]:
    value = data.get("improvement_tips")
    if not isinstance(value, list):
        return list(DEFAULT_IMPROVEMENT_TIPS)
    return [tip for tip in value if isinstance(tip, str)]


def feedback_from_object(data: dict) -> TutorFeedback:
    """Build feedback field by field; a bad field never spoils the others."""
    return TutorFeedback(
        encouragement=_str_field(data, "encouragement", DEFAULT_ENCOURAGEMENT),
        specific_feedback=_str_field(data, "specific_feedback", DEFAULT_SPECIFIC_FEEDBACK),
        improvement_tips=_tips_field(data),
        next_challenge=_str_field(data, "next_challenge", DEFAULT_NEXT_CHALLENGE),
        motivation_level=_choice_field(
            data, "motivation_level", _MOTIVATION_LEVELS, DEFAULT_MOTIVATION_LEVEL
        ),
        difficulty_adjustment=_choice_field(
            data, "difficulty_adjustment", _DIFFICULTY_ADJUSTMENTS,
            DEFAULT_DIFFICULTY_ADJUSTMENT,
        ),
    )


def parse_tutor_feedback(text: str) -> TutorFeedback:
    span = extract_json_span(text or "")
    if span is None:
        logger.warning("Tutor reply has no JSON object, using canned feedback")
        return NO_JSON_FEEDBACK

    try:
        data = json.loads(span)
    except json.JSONDecodeError as e:
        logger.warning(f"Tutor reply JSON invalid ({e.msg} at {e.pos}), using canned feedback")
        return INVALID_JSON_FEEDBACK
    except RecursionError:
        logger.warning("Tutor reply JSON nested too deeply, using canned feedback")
        return INVALID_JSON_FEEDBACK

    # span starts with '{', so a successful parse is always a dict
    logger.debug(f"Tutor reply parsed, fields={sorted(data)}")
    return feedback_from_object(data)
