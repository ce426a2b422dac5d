"""
speakcoach — Prompt Templates
Renders the instruction prompts sent to Gemini. Each template embeds its own
output contract: a JSON object for tutor feedback, plain text for the rest.

Caller strings are embedded verbatim (no escaping).
"""

from numbers import Real
from typing import Mapping

METRIC_NAMES = ("overall", "pronunciation", "fluency", "completeness")


TUTOR_TEMPLATE = """你是一位專業的英語口語私人導師，具有豐富的教學經驗和激勵學生的能力。請根據學生的練習表現提供個性化的反饋和指導。

學生練習情況：
- 練習內容：{context}
- 總體得分：{overall:.1f}分
- 發音準確度：{pronunciation:.1f}分
- 流利度：{fluency:.1f}分
- 完整度：{completeness:.1f}分

請以JSON格式回應，包含以下字段：
{{
  "encouragement": "鼓勵性話語，要具體且真誠",
  "specific_feedback": "針對具體表現的詳細反饋",
  "improvement_tips": ["改進建議1", "改進建議2", "改進建議3"],
  "next_challenge": "下一步挑戰或練習建議",
  "motivation_level": "根據表現判斷激勵程度：high/medium/low",
  "difficulty_adjustment": "難度調整建議：increase/maintain/decrease"
}}

要求：
1. 鼓勵為主，建設性批評為輔
2. 提供具體可行的改進建議
3. 根據分數水平調整激勵策略
4. 像Duolingo一樣提供即時、積極的反饋
5. 使用繁體中文回應"""


PRACTICE_TEMPLATE = """作為英語口語教學專家，請為學生生成個性化的練習內容。

要求：
- 主題：{topic}
- 難度等級：{difficulty}
- 學生興趣：{interests}

請生成一段適合的英語練習文本（50-100詞），要求：
1. 符合指定主題和難度
2. 融入學生的興趣點
3. 語言自然流暢
4. 適合口語練習
5. 包含常用詞彙和句型

只返回練習文本，不要其他說明。"""


SPEECH_TEMPLATE = """請將以下文本轉換為適合語音合成的格式，添加適當的語調標記和停頓：

原文：{text}

要求：
1. 保持原意不變
2. 添加適當的語調變化
3. 標記重音位置
4. 適合英語學習者聽讀

只返回優化後的文本，不要其他說明。"""


def metric_score(metrics: Mapping[str, object], name: str) -> float:
    """Read one score. Absent or non-numeric values count as 0.0."""
    value = metrics.get(name) if metrics else None
    # bool is a Real; a JSON true/false is not a score
    if isinstance(value, bool) or not isinstance(value, Real):
        return 0.0
    return float(value)


def build_tutor_prompt(metrics: Mapping[str, object], context: str) -> str:
    scores = {name: metric_score(metrics, name) for name in METRIC_NAMES}
    return TUTOR_TEMPLATE.format(context=context, **scores)


def build_practice_prompt(topic: str, difficulty: str, interests: list[str]) -> str:
    return PRACTICE_TEMPLATE.format(
        topic=topic,
        difficulty=difficulty,
        interests="、".join(interests),
    )


def build_speech_prompt(text: str) -> str:
    return SPEECH_TEMPLATE.format(text=text)
