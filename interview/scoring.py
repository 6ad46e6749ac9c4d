"""End-of-interview evaluation through the assistant."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, List, Optional

from config.settings import settings
from llm_gateway import Assistant, AssistantUnavailable

from .models import NO_ANSWER

if TYPE_CHECKING:
    from .models import Session

logger = logging.getLogger(__name__)

EVAL_INSTRUCTION = (
    "Evaluate this interview transcript and give a score out of 100. Only return the numeric score."
)

_DIGITS = re.compile(r"\d+")


@dataclass(frozen=True)
class TranscriptEntry:
    question: str
    answer: str


@dataclass(frozen=True)
class ScoreOutcome:
    score: int
    degraded: bool
    prompt: str
    reply: Optional[str] = None


def _clamp(value: int) -> int:
    return max(0, min(100, value))


def first_integer(text: str) -> Optional[int]:
    match = _DIGITS.search(text or "")
    return int(match.group(0)) if match else None


def parse_score(reply: str) -> int:
    """Score from a free-text reply: first digit run, 0 when there is none."""

    value = first_integer(reply)
    return 0 if value is None else _clamp(value)


def coerce_final_score(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return _clamp(int(value))
    parsed = first_integer(str(value))
    return None if parsed is None else _clamp(parsed)


def build_transcript(session: "Session") -> List[TranscriptEntry]:
    entries: List[TranscriptEntry] = []
    for index, question in enumerate(session.questions):
        answer = session.answers[index] if index < len(session.answers) else None
        entries.append(TranscriptEntry(question=question.text, answer=answer or NO_ANSWER))
    return entries


def build_evaluation_prompt(transcript: List[TranscriptEntry]) -> str:
    blocks = [
        f"Q{number}: {entry.question}\nA{number}: {entry.answer}"
        for number, entry in enumerate(transcript, start=1)
    ]
    return f"{EVAL_INSTRUCTION}\n\n" + "\n\n".join(blocks)


def evaluate_session(
    session: "Session",
    assistant: Assistant,
    *,
    fallback_score: Optional[int] = None,
) -> ScoreOutcome:
    """Ask the assistant for a 0-100 score; fall back to a neutral score when it is down."""

    prompt = build_evaluation_prompt(build_transcript(session))
    try:
        reply = assistant.ask(prompt)
    except AssistantUnavailable:
        neutral = settings.FALLBACK_SCORE if fallback_score is None else fallback_score
        logger.warning("Evaluation failed, assigning fallback score %d", neutral)
        return ScoreOutcome(score=neutral, degraded=True, prompt=prompt)
    return ScoreOutcome(score=parse_score(reply), degraded=False, prompt=prompt, reply=reply)


__all__ = [
    "EVAL_INSTRUCTION",
    "ScoreOutcome",
    "TranscriptEntry",
    "build_evaluation_prompt",
    "build_transcript",
    "coerce_final_score",
    "evaluate_session",
    "first_integer",
    "parse_score",
]
