"""Candidate-facing interview session state machine."""
from __future__ import annotations

import logging
from functools import wraps
from threading import RLock
from typing import TYPE_CHECKING, Any, Callable, List, Optional, TypeVar

from observability import log_event

from .models import (
    NO_ANSWER,
    ArchivedSession,
    CandidateInfo,
    Difficulty,
    InterviewState,
    Question,
    ResumableSession,
    Session,
    Status,
    utcnow,
)
from .scoring import coerce_final_score
from .transitions import Event, allows, is_valid_status, next_status

if TYPE_CHECKING:
    from storage.state_store import StateStore

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


class PreconditionError(RuntimeError):
    """An operation was requested in a state that does not allow it."""


def _mutation(fn: F) -> F:  # Serialize the call and persist afterwards
    @wraps(fn)
    def wrapper(self: "SessionStateMachine", *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            result = fn(self, *args, **kwargs)
            self.persist()
            return result

    return wrapper  # type: ignore[return-value]


class SessionStateMachine:
    """Owns the live session, the archive and the resumable pointer.

    All writes go through the methods below; each one persists the whole
    state through the injected store once it returns.
    """

    def __init__(self, store: Optional["StateStore"] = None, state: Optional[InterviewState] = None) -> None:
        self._store = store
        self._lock = RLock()
        if state is not None:
            self.state = state
        elif store is not None:
            self.state = store.load()
        else:
            self.state = InterviewState()

    @property
    def current(self) -> Session:
        return self.state.current_interview

    @property
    def archive_entries(self) -> List[ArchivedSession]:
        return self.state.interviews

    @property
    def pointer(self) -> Optional[ResumableSession]:
        return self.state.last_active_session

    @property
    def store(self) -> Optional["StateStore"]:
        return self._store

    def persist(self) -> None:
        if self._store is not None:
            self._store.save(self.state)

    def _fire(self, event: Event) -> Status:
        session = self.current
        before = session.status
        session.status = next_status(before, event)
        if session.status != before:
            log_event("status_changed", session.id, event=event, status=session.status, previous=before)
        return session.status

    def _merge_info(self, partial: dict[str, Any]) -> None:
        updates = {key: value for key, value in partial.items() if key in ("name", "email", "phone") and value is not None}
        merged = self.current.candidate_info.model_dump()
        merged.update({key: str(value) for key, value in updates.items()})
        self.current.candidate_info = CandidateInfo(**merged)

    # -- candidate info -------------------------------------------------

    @_mutation
    def set_candidate_info(self, **partial: Any) -> Session:
        self._merge_info(partial)
        self._fire("candidate_info_set")
        return self.current

    @_mutation
    def update_candidate_info(self, **partial: Any) -> Session:
        self._merge_info(partial)
        return self.current

    @_mutation
    def start_interview(self) -> Session:
        """Move into ``in_progress`` once name, email and phone are known.

        Raises:
            PreconditionError: when candidate info is incomplete or the
                session is not waiting to start.
        """

        session = self.current
        missing = session.candidate_info.missing_fields()
        if missing:
            raise PreconditionError(f"candidate info incomplete: missing {', '.join(missing)}")
        if not allows(session.status, "interview_started"):
            raise PreconditionError(f"cannot start an interview that is {session.status}")
        self._fire("interview_started")
        return session

    # -- questions and answers ------------------------------------------

    @_mutation
    def record_question(
        self,
        text: str,
        difficulty: Optional[Difficulty] = None,
        subject: Optional[str] = None,
        *,
        question_id: Optional[str] = None,
    ) -> Question:
        session = self.current
        question = Question(text=text or "", difficulty=difficulty, subject=subject)
        if question_id:
            question.id = question_id
        session.questions.append(question)
        while len(session.answers) < len(session.questions):
            session.answers.append(None)
        self._fire("question_recorded")
        return question

    @_mutation
    def record_answer(
        self,
        answer: Optional[str],
        index: Optional[int] = None,
        *,
        question_id: Optional[str] = None,
        score: Optional[float] = None,
        feedback: Optional[str] = None,
    ) -> int:
        """Store an answer and mirror it onto its question; returns the index written."""

        session = self.current
        target = session.current_question_index if index is None else index
        if question_id:
            for position, question in enumerate(session.questions):
                if question.id == question_id:
                    target = position
                    break
        if target < 0:
            raise ValueError(f"answer index must be >= 0, got {target}")
        text = answer if answer else NO_ANSWER
        while len(session.answers) <= target:
            session.answers.append(None)
        session.answers[target] = text
        if target < len(session.questions):
            question = session.questions[target]
            question.answer = text
            if score is not None:
                question.score = score
            if feedback is not None:
                question.feedback = feedback
        return target

    @_mutation
    def advance(self, total: Optional[int] = None) -> int:
        session = self.current
        next_index = session.current_question_index + 1
        if total is not None:
            if next_index >= total:
                session.current_question_index = max(0, total - 1)
                self._fire("sequence_finished")
            else:
                session.current_question_index = next_index
        else:
            session.current_question_index = min(next_index, max(0, len(session.questions) - 1))
        return session.current_question_index

    @_mutation
    def set_current_question_index(self, index: int) -> int:
        session = self.current
        if index >= 0:
            session.current_question_index = min(index, max(0, len(session.questions) - 1))
        return session.current_question_index

    @_mutation
    def finalize(self, score: Any) -> Optional[int]:
        self.current.final_score = coerce_final_score(score)
        return self.current.final_score

    @_mutation
    def set_status(self, status: str) -> Session:
        if not is_valid_status(status):
            raise ValueError(f"unknown status: {status!r}")
        self.current.status = status  # type: ignore[assignment]
        if status == "completed":
            self.state.last_active_session = None
        return self.current

    # -- session lifecycle ----------------------------------------------

    @_mutation
    def archive(self, summary: Optional[str] = None) -> ArchivedSession:
        snapshot = self.current.model_copy(deep=True)
        archived = ArchivedSession(
            **snapshot.model_dump(exclude={"status"}),
            status="completed",
            date=utcnow(),
            summary=summary or None,
        )
        self.state.interviews.append(archived)
        if self._store is not None and archived.candidate_info.is_complete():
            self._store.save_candidate_cache(archived.candidate_info)
        self.state.current_interview = Session()
        self.state.last_active_session = None
        log_event("archived", archived.id, score=archived.final_score)
        return archived

    @_mutation
    def reset(self) -> Session:
        self.state.current_interview = Session()
        return self.current

    @_mutation
    def restart_keeping_candidate(self, candidate_info: Optional[CandidateInfo] = None) -> Session:
        kept = (candidate_info or self.current.candidate_info).model_copy()
        fresh = Session(candidate_info=kept)
        fresh.status = next_status(fresh.status, "restarted")
        self.state.current_interview = fresh
        self.state.last_active_session = None
        log_event("restarted", fresh.id, status=fresh.status)
        return fresh

    @_mutation
    def save_resumable(self) -> ResumableSession:
        session = self.current.model_copy(deep=True)
        pointer = ResumableSession(
            candidate_info=session.candidate_info,
            questions=session.questions,
            answers=session.answers,
            current_question_index=session.current_question_index,
            status=session.status,
            timestamp=utcnow(),
        )
        self.state.last_active_session = pointer
        return pointer

    @_mutation
    def suspend(self) -> Optional[ResumableSession]:
        """Park an unfinished session behind the pointer and clear the live one."""

        if self.current.status not in ("collecting_info", "in_progress"):
            return None
        pointer = self.save_resumable()
        log_event("suspended", self.current.id, status=self.current.status, index=self.current.current_question_index)
        self.state.current_interview = Session()
        return pointer

    @_mutation
    def resume_from_pointer(self) -> Optional[Session]:
        pointer = self.state.last_active_session
        if pointer is None:
            return None
        restored = Session(
            candidate_info=pointer.candidate_info.model_copy(),
            questions=[question.model_copy() for question in pointer.questions],
            answers=list(pointer.answers),
            current_question_index=pointer.current_question_index,
            status=pointer.status or "in_progress",
        )
        self.state.current_interview = restored
        self.state.last_active_session = None
        log_event("resumed", restored.id, status=restored.status, index=restored.current_question_index)
        return restored

    @_mutation
    def discard_session(self, session_id: Optional[str] = None) -> None:
        if session_id is not None and session_id != self.current.id:
            logger.info("Discarding current session %s (requested %s)", self.current.id, session_id)
        self.state.last_active_session = None
        self.state.current_interview = Session()

    @_mutation
    def remove_archived(self, session_id: str) -> bool:
        before = len(self.state.interviews)
        self.state.interviews = [entry for entry in self.state.interviews if entry.id != session_id]
        return len(self.state.interviews) != before


__all__ = ["PreconditionError", "SessionStateMachine"]
