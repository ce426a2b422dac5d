"""
speakcoach — Offline Fallbacks
Pre-written content used when the Gemini call itself fails.
No network, no randomness.
"""

from typing import Mapping

from speakcoach.models import TutorFeedback
from speakcoach.tutor.prompts import metric_score

HIGH_SCORE = 80.0
MID_SCORE = 60.0

FALLBACK_TIPS = (
    "每天堅持練習15-20分鐘",
    "注意單詞的重音和語調",
    "多聽母語者的發音並模仿",
)

PRACTICE_FALLBACKS = {
    ("daily", "beginner"): (
        "Hello! How are you today? I hope you have a great day. "
        "What are your plans for this weekend?"
    ),
    ("daily", "intermediate"): (
        "Good morning! I was wondering if you could help me with something. "
        "I'm looking for a good restaurant nearby. Do you have any recommendations?"
    ),
    ("business", "beginner"): (
        "Good morning. I would like to schedule a meeting. "
        "When would be a good time for you? Thank you for your time."
    ),
    ("business", "intermediate"): (
        "I'd like to discuss our quarterly results and explore new opportunities "
        "for growth. Could we arrange a conference call with the team next week?"
    ),
}

DEFAULT_PRACTICE_TEXT = (
    "Practice makes perfect. The more you speak, the more confident you become. "
    "Keep up the great work and don't be afraid to make mistakes."
)


def fallback_feedback(metrics: Mapping[str, object]) -> TutorFeedback:
    """Score-branched feedback. Low scores still get 'high' motivation."""
    overall = metric_score(metrics, "overall")
    if overall >= HIGH_SCORE:
        encouragement = "太棒了！您的發音非常標準，繼續保持這種優秀的表現！"
        motivation = "high"
    elif overall >= MID_SCORE:
        encouragement = "很好的進步！您正在穩步提升，繼續努力！"
        motivation = "medium"
    else:
        encouragement = "每一次練習都是進步，不要氣餒，您一定會越來越好！"
        motivation = "high"

    return TutorFeedback(
        encouragement=encouragement,
        specific_feedback="您的努力很值得讚賞，在發音準確度方面有不錯的表現。",
        improvement_tips=list(FALLBACK_TIPS),
        next_challenge="嘗試挑戰更複雜的句型練習",
        motivation_level=motivation,
        difficulty_adjustment="maintain",
    )


def fallback_practice_content(topic: str, difficulty: str) -> str:
    return PRACTICE_FALLBACKS.get((topic, difficulty), DEFAULT_PRACTICE_TEXT)
