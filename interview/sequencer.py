"""Fixed six-step question plan with an offline fallback bank."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

from config.settings import settings
from llm_gateway import Assistant, AssistantUnavailable

from .models import Difficulty

logger = logging.getLogger(__name__)

TIME_BUDGETS: Dict[str, int] = {"Easy": 20, "Medium": 60, "Hard": 120}

FALLBACK_QUESTIONS: Tuple[str, ...] = (
    "Explain the virtual DOM and how React uses it to optimize rendering.",
    "How do you manage state in a React application? Describe at least two approaches.",
    "Describe the event loop in Node.js and how it handles asynchronous I/O.",
    "What is the purpose of middleware in Express.js? Give an example use case.",
    "Explain CORS and how you'd handle it in a Node/Express API.",
    "How do hooks like useEffect and useMemo help with performance in React?",
)

QUESTION_PROMPT = (
    "Ask one {difficulty} interview question about {subject} for a {role}. "
    "Return only the question text."
)


class SequenceComplete(IndexError):
    """Every slot of the plan has been asked."""


@dataclass(frozen=True)
class Slot:
    difficulty: Difficulty
    subject: str
    time_budget: int


@dataclass(frozen=True)
class QuestionDraft:
    text: str
    slot: Slot
    from_fallback: bool = False


def build_plan(subject_a: str, subject_b: str) -> Tuple[Slot, ...]:
    difficulties: Tuple[Difficulty, ...] = ("Easy", "Medium", "Hard")
    return tuple(
        Slot(difficulty=difficulty, subject=subject, time_budget=TIME_BUDGETS[difficulty])
        for difficulty in difficulties
        for subject in (subject_a, subject_b)
    )


class QuestionSequencer:  # Supplies question text per slot, degrading to the local bank
    def __init__(
        self,
        assistant: Assistant,
        *,
        subjects: Optional[Tuple[str, str]] = None,
        role: str = "full-stack React/Node.js developer",
        fallback_questions: Sequence[str] = FALLBACK_QUESTIONS,
    ) -> None:
        if not fallback_questions:
            raise ValueError("fallback bank must not be empty")
        subject_a, subject_b = subjects or (settings.SUBJECT_A, settings.SUBJECT_B)
        self._assistant = assistant
        self._role = role
        self._fallbacks = tuple(fallback_questions)
        self.plan = build_plan(subject_a, subject_b)
        self.degraded = False
        self.fallback_cursor = 0

    def reset(self) -> None:  # Per-session: fallback bank restarts at #1
        self.degraded = False
        self.fallback_cursor = 0

    @property
    def total(self) -> int:
        return len(self.plan)

    def current_slot(self, index: int) -> Optional[Slot]:
        if 0 <= index < len(self.plan):
            return self.plan[index]
        return None

    def is_complete(self, index: int) -> bool:
        return index >= len(self.plan)

    def prompt_for(self, slot: Slot) -> str:
        return QUESTION_PROMPT.format(difficulty=slot.difficulty, subject=slot.subject, role=self._role)

    def next_fallback(self) -> str:
        text = self._fallbacks[self.fallback_cursor % len(self._fallbacks)]
        self.fallback_cursor += 1
        return text

    def next_question_text(self, index: int) -> QuestionDraft:
        """Question for slot ``index``; the local bank answers while the assistant is down.

        ``degraded`` stays set after a fallback and is only cleared by the
        next call the assistant answers.

        Raises:
            SequenceComplete: when ``index`` is past the last slot.
        """

        slot = self.current_slot(index)
        if slot is None:
            raise SequenceComplete(index)
        try:
            text = self._assistant.ask(self.prompt_for(slot))
        except AssistantUnavailable:
            self.degraded = True
            fallback = self.next_fallback()
            logger.warning("Assistant unavailable, using fallback question #%d", self.fallback_cursor)
            return QuestionDraft(text=fallback, slot=slot, from_fallback=True)
        self.degraded = False
        return QuestionDraft(text=text, slot=slot)


__all__ = [
    "FALLBACK_QUESTIONS",
    "QUESTION_PROMPT",
    "QuestionDraft",
    "QuestionSequencer",
    "SequenceComplete",
    "Slot",
    "TIME_BUDGETS",
    "build_plan",
]
