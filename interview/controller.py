"""Drives one candidate through intake, questions, answers and scoring."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional

from config.settings import settings
from llm_gateway import Assistant
from observability import log_event

from .archive import ArchiveStore
from .candidate import ChatMessage, InfoCollector, match_resumable
from .models import ArchivedSession, CandidateInfo, Question, Session
from .scoring import ScoreOutcome, evaluate_session
from .sequencer import QuestionSequencer, Slot
from .session import PreconditionError, SessionStateMachine
from .timer import CountdownTimer

logger = logging.getLogger(__name__)

SubmitSource = Literal["manual", "timer"]


@dataclass
class IntakeOutcome:
    """Result of handing extracted resume details to the controller."""

    candidate_info: CandidateInfo
    resume_available: bool = False
    welcome_back: bool = False
    question: Optional[Question] = None
    message: Optional[ChatMessage] = None


@dataclass
class SubmitOutcome:
    accepted: bool
    reason: Optional[str] = None
    index: Optional[int] = None
    next_question: Optional[Question] = None
    completed: bool = False
    final_score: Optional[int] = None
    archived_id: Optional[str] = None
    degraded: bool = False


class InterviewController:
    """Session controller sitting between the HTTP surface and the state machine.

    Owns the countdown for the question on screen and the guard that keeps a
    timer-driven submit and a manual submit from both going through.
    """

    def __init__(
        self,
        machine: SessionStateMachine,
        assistant: Assistant,
        *,
        sequencer: Optional[QuestionSequencer] = None,
        tick_seconds: Optional[float] = None,
        run_timers: bool = True,
    ) -> None:
        self.machine = machine
        self.assistant = assistant
        self.sequencer = sequencer or QuestionSequencer(assistant)
        self.archive = ArchiveStore(machine)
        self.collector: Optional[InfoCollector] = None
        self.last_result: Optional[ArchivedSession] = None
        self.timer: Optional[CountdownTimer] = None
        self._tick_seconds = tick_seconds or settings.TICK_SECONDS
        self._run_timers = run_timers
        self._draft = ""
        self._submit_lock = threading.Lock()
        self._submitting = False

    # -- views -----------------------------------------------------------

    @property
    def session(self) -> Session:
        return self.machine.current

    @property
    def current_question(self) -> Optional[Question]:
        session = self.machine.current
        if session.current_question_index < len(session.questions):
            return session.questions[session.current_question_index]
        return None

    @property
    def current_slot(self) -> Optional[Slot]:
        return self.sequencer.current_slot(self.machine.current.current_question_index)

    @property
    def time_left(self) -> Optional[int]:
        return self.timer.remaining if self.timer is not None and not self.timer.cancelled else None

    @property
    def degraded(self) -> bool:
        return self.sequencer.degraded

    # -- intake ----------------------------------------------------------

    def accept_candidate(self, info: CandidateInfo) -> IntakeOutcome:
        """Route freshly extracted details: resume offer, direct start, or chat collection.

        Raises:
            PreconditionError: when an interview is already running.
        """

        match = match_resumable(self.machine.pointer, info)
        if match.matches:
            return IntakeOutcome(candidate_info=info, resume_available=True, welcome_back=match.welcome_back)

        if self.machine.current.status not in ("not_started", "collecting_info"):
            raise PreconditionError(f"an interview is already {self.machine.current.status}")

        fields = info.model_dump()
        if self.machine.current.status == "not_started" and info.is_complete():
            self.machine.update_candidate_info(**fields)
            self.machine.start_interview()
            self._start_session()
            return IntakeOutcome(candidate_info=self.machine.current.candidate_info, question=self.begin())

        self.machine.set_candidate_info(**fields)
        self.collector = InfoCollector(self.machine)
        return IntakeOutcome(candidate_info=self.machine.current.candidate_info, message=self.collector.opening())

    def collect(self, text: str) -> ChatMessage:
        if self.machine.current.status != "collecting_info":
            raise PreconditionError("candidate details are not being collected")
        if self.collector is None:
            self.collector = InfoCollector(self.machine)
            self.collector.opening()
        return self.collector.reply(text)

    def start(self) -> Optional[Question]:
        self.machine.start_interview()
        self.collector = None
        self._start_session()
        return self.begin()

    # -- question cycle --------------------------------------------------

    def begin(self) -> Optional[Question]:
        """Put a question on screen for an ``in_progress`` session.

        Fetches the first question automatically, or re-arms the countdown for
        a question that was asked before a resume.
        """

        session = self.machine.current
        if session.status != "in_progress":
            return None
        question = self.current_question
        if question is not None and question.answer is not None:
            if session.current_question_index >= self.sequencer.total - 1:
                self._complete(session)
                return None
            self.machine.advance(total=self.sequencer.total)
            if self.machine.current.status != "in_progress":
                return None
        return self.load_question()

    def load_question(self) -> Optional[Question]:
        self._cancel_timer()
        session = self.machine.current
        index = session.current_question_index
        slot = self.sequencer.current_slot(index)
        if slot is None:
            return None
        question = self.current_question
        if question is None:
            draft = self.sequencer.next_question_text(index)
            question = self.machine.record_question(draft.text, slot.difficulty, slot.subject)
            log_event(
                "question_asked",
                session.id,
                index=index,
                difficulty=slot.difficulty,
                subject=slot.subject,
                degraded=draft.from_fallback,
            )
        self._draft = ""
        self._arm_timer(question, slot.time_budget)
        return question

    def update_draft(self, text: str) -> None:
        self._draft = text or ""

    def submit_answer(
        self,
        text: Optional[str] = None,
        *,
        question_id: Optional[str] = None,
        source: SubmitSource = "manual",
    ) -> SubmitOutcome:
        """Record the answer for the question on screen and move on.

        Only one submission runs at a time; a second one arriving while the
        first is in flight, or aimed at a question that is no longer current,
        is rejected without touching the session.
        """

        with self._submit_lock:
            if self._submitting:
                return SubmitOutcome(accepted=False, reason="in_flight")
            session = self.machine.current
            if session.status != "in_progress":
                return SubmitOutcome(accepted=False, reason="not_in_progress")
            question = self.current_question
            if question is None:
                return SubmitOutcome(accepted=False, reason="no_question")
            if question_id is not None and question_id != question.id:
                return SubmitOutcome(accepted=False, reason="stale")
            if question.answer is not None:
                return SubmitOutcome(accepted=False, reason="already_answered")
            self._submitting = True

        try:
            return self._submit(session, text if text is not None else self._draft, source)
        finally:
            with self._submit_lock:
                self._submitting = False

    def _submit(self, session: Session, answer: str, source: SubmitSource) -> SubmitOutcome:
        self._cancel_timer()
        index = self.machine.record_answer(answer or None)
        self._draft = ""
        log_event("answer_submitted", session.id, index=index, source=source)

        if index < self.sequencer.total - 1:
            self.machine.advance(total=self.sequencer.total)
            question = self.load_question()
            return SubmitOutcome(accepted=True, index=index, next_question=question, degraded=self.sequencer.degraded)

        archived, outcome = self._complete(session)
        return SubmitOutcome(
            accepted=True,
            index=index,
            completed=True,
            final_score=archived.final_score,
            archived_id=archived.id,
            degraded=outcome.degraded,
        )

    def _complete(self, session: Session) -> tuple[ArchivedSession, ScoreOutcome]:  # Score, close and archive
        self._cancel_timer()
        outcome = evaluate_session(session, self.assistant)
        final_score = self.machine.finalize(outcome.score)
        self.machine.advance(total=self.sequencer.total)
        log_event("scored", session.id, score=final_score, degraded=outcome.degraded)
        archived = self.machine.archive()
        self.last_result = archived
        return archived, outcome

    def _arm_timer(self, question: Question, seconds: int) -> None:
        question_id = question.id

        def _expire() -> None:
            result = self.submit_answer(question_id=question_id, source="timer")
            if not result.accepted:
                logger.debug("Timer submit for %s ignored: %s", question_id, result.reason)

        self.timer = CountdownTimer(seconds, _expire, interval=self._tick_seconds)
        if self._run_timers:
            self.timer.start()

    def _cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()

    # -- lifecycle -------------------------------------------------------

    def _start_session(self, history: Optional[List[Dict[str, str]]] = None) -> None:
        """Fresh assistant chat and fallback cursor for the session about to run."""

        self.assistant.reset(history)
        self.sequencer.reset()

    def _replay_history(self, session: Session) -> List[Dict[str, str]]:
        history: List[Dict[str, str]] = []
        for index, question in enumerate(session.questions):
            slot = self.sequencer.current_slot(index)
            if slot is None:
                break
            history.append({"role": "user", "content": self.sequencer.prompt_for(slot)})
            history.append({"role": "assistant", "content": question.text})
        return history

    def resume(self) -> Optional[Session]:
        restored = self.machine.resume_from_pointer()
        if restored is None:
            return None
        if restored.status == "collecting_info":
            self.collector = InfoCollector(self.machine)
            self.collector.opening()
        else:
            self._start_session(self._replay_history(restored))
            self.begin()
        return restored

    def discard(self) -> None:
        self._cancel_timer()
        self.collector = None
        self.machine.discard_session()

    def restart(self, candidate_info: Optional[CandidateInfo] = None) -> Optional[Question]:
        self._cancel_timer()
        info = candidate_info
        if info is None and self.last_result is not None:
            info = self.last_result.candidate_info
        self.machine.restart_keeping_candidate(info)
        self.last_result = None
        self._start_session()
        return self.begin()

    def restart_archived(self, session_id: str) -> Optional[Question]:
        self._cancel_timer()
        self.archive.restart(session_id)
        self.last_result = None
        self._start_session()
        return self.begin()

    def suspend(self) -> bool:
        """Teardown hook: stop the countdown and park an unfinished session."""

        self._cancel_timer()
        self.collector = None
        return self.machine.suspend() is not None

    def close(self) -> None:
        self._cancel_timer()


__all__ = ["InterviewController", "IntakeOutcome", "SubmitOutcome", "SubmitSource"]
