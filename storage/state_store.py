"""Durable snapshot of the interview state with schema repair on load."""
from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from config.settings import settings
from interview.models import (
    DIFFICULTIES,
    STATUSES,
    ArchivedSession,
    CandidateInfo,
    InterviewState,
    Question,
    ResumableSession,
    Session,
    new_id,
    utcnow,
)

from .kv import delete_value, get_value, put_value

logger = logging.getLogger(__name__)

_DATETIME = TypeAdapter(datetime)


class MalformedPersistedState(ValueError):
    """The stored document could not be decoded into an interview state."""


class StateStore:
    """Keyed JSON documents in SQLite.

    ``save`` is best-effort and never raises. ``load`` never raises either:
    anything it cannot use is replaced by the matching default, field by
    field, so a half-broken document still yields every usable piece.
    """

    def __init__(
        self,
        *,
        db_path: Optional[str] = None,
        state_key: Optional[str] = None,
        candidate_key: Optional[str] = None,
    ) -> None:
        self._db_path = db_path
        self.state_key = state_key or settings.STATE_KEY
        self.candidate_key = candidate_key or settings.CANDIDATE_KEY

    def save(self, state: InterviewState) -> bool:
        try:
            put_value(self.state_key, json.dumps(state.to_document(), ensure_ascii=False), db_path=self._db_path)
            return True
        except Exception:  # noqa: BLE001
            logger.exception("Failed to save interview state")
            return False

    def load(self) -> InterviewState:
        try:
            raw = get_value(self.state_key, db_path=self._db_path)
        except Exception:  # noqa: BLE001
            logger.exception("Failed to read interview state, using defaults")
            return InterviewState()
        if not raw:
            return InterviewState()
        try:
            return repair_state(decode(raw))
        except MalformedPersistedState as exc:
            logger.error("Failed to load interview state, using defaults: %s", exc)
            return InterviewState()

    def save_candidate_cache(self, info: CandidateInfo) -> bool:
        try:
            put_value(self.candidate_key, info.model_dump_json(by_alias=True), db_path=self._db_path)
            return True
        except Exception:  # noqa: BLE001
            logger.exception("Failed to cache candidate info")
            return False

    def load_candidate_cache(self) -> Optional[CandidateInfo]:
        try:
            raw = get_value(self.candidate_key, db_path=self._db_path)
            if not raw:
                return None
            return _repair_candidate(decode(raw))
        except Exception as exc:  # noqa: BLE001
            logger.error("Ignoring unreadable candidate cache: %s", exc)
            return None

    def clear(self) -> None:  # Drop both documents; interviewer "delete"
        for key in (self.state_key, self.candidate_key):
            try:
                delete_value(key, db_path=self._db_path)
            except Exception:  # noqa: BLE001
                logger.exception("Failed to delete stored key %s", key)


def decode(raw: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise MalformedPersistedState(f"not JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise MalformedPersistedState(f"expected an object, got {type(parsed).__name__}")
    return parsed


def repair_state(raw: Dict[str, Any]) -> InterviewState:
    """Merge a decoded document over the defaults, dropping what does not fit."""

    interviews_raw = raw.get("interviews")
    interviews: List[ArchivedSession] = []
    if isinstance(interviews_raw, list):
        for entry in interviews_raw:
            archived = _repair_archived(entry)
            if archived is not None:
                interviews.append(archived)
    return InterviewState(
        interviews=interviews,
        current_interview=_repair_session(raw.get("currentInterview")),
        last_active_session=_repair_pointer(raw.get("lastActiveSession")),
    )


def _repair_candidate(raw: Any) -> CandidateInfo:
    if not isinstance(raw, dict):
        return CandidateInfo()
    return CandidateInfo(**{field: _str(raw.get(field)) for field in ("name", "email", "phone")})


def _repair_question(raw: Any) -> Optional[Question]:
    """Coerce each field of a stored question; only a non-object entry is unusable."""

    if not isinstance(raw, dict):
        return None
    raw_id = raw.get("id")
    difficulty = raw.get("difficulty")
    fields: Dict[str, Any] = {
        "text": _str(raw.get("text")),
        "difficulty": difficulty if difficulty in DIFFICULTIES else None,
        "subject": _optional_str(raw.get("subject")),
        "created_at": _repair_datetime(raw.get("createdAt")) or utcnow(),
        "answer": _optional_str(raw.get("answer")),
        "score": _repair_number(raw.get("score")),
        "feedback": _optional_str(raw.get("feedback")),
    }
    if isinstance(raw_id, str) and raw_id:
        fields["id"] = raw_id
    return Question(**fields)


def _repair_transcript(raw_questions: Any, raw_answers: Any) -> Tuple[List[Question], List[Optional[str]]]:
    """Questions and answers repaired together so answer ``i`` stays with question ``i``."""

    answers_in = [item if isinstance(item, str) else None for item in raw_answers] if isinstance(raw_answers, list) else []
    entries = raw_questions if isinstance(raw_questions, list) else []
    questions: List[Question] = []
    answers: List[Optional[str]] = []
    for position, entry in enumerate(entries):
        question = _repair_question(entry)
        if question is None:
            logger.warning("Dropping unreadable stored question at position %d", position)
            continue
        questions.append(question)
        answers.append(answers_in[position] if position < len(answers_in) else None)
    answers.extend(answers_in[len(entries):])
    return questions, answers


def _repair_index(raw: Any, questions: int) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
        return 0
    return min(raw, max(0, questions - 1))


def _repair_number(raw: Any) -> Optional[float]:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    return raw


def _repair_score(raw: Any) -> Optional[int]:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    return int(raw)


def _repair_status(raw: Any, default: Optional[str] = "not_started") -> Optional[str]:
    return raw if isinstance(raw, str) and raw in STATUSES else default


def _repair_datetime(raw: Any) -> Optional[datetime]:
    if raw is None:
        return None
    try:
        return _DATETIME.validate_python(raw)
    except ValidationError:
        return None


def _session_fields(raw: Dict[str, Any]) -> Dict[str, Any]:
    questions, answers = _repair_transcript(raw.get("questions"), raw.get("answers"))
    raw_id = raw.get("id")
    return {
        "id": raw_id if isinstance(raw_id, str) and raw_id else new_id("iv"),
        "candidate_info": _repair_candidate(raw.get("candidateInfo")),
        "questions": questions,
        "answers": answers,
        "current_question_index": _repair_index(raw.get("currentQuestionIndex"), len(questions)),
        "final_score": _repair_score(raw.get("finalScore")),
    }


def _repair_session(raw: Any) -> Session:
    if not isinstance(raw, dict):
        return Session()
    return Session(**_session_fields(raw), status=_repair_status(raw.get("status")))


def _repair_archived(raw: Any) -> Optional[ArchivedSession]:
    if not isinstance(raw, dict):
        return None
    summary = raw.get("summary")
    return ArchivedSession(
        **_session_fields(raw),
        status="completed",
        date=_repair_datetime(raw.get("date")),
        summary=summary if isinstance(summary, str) else None,
    )


def _repair_pointer(raw: Any) -> Optional[ResumableSession]:
    if not isinstance(raw, dict):
        return None
    questions, answers = _repair_transcript(raw.get("questions"), raw.get("answers"))
    return ResumableSession(
        candidate_info=_repair_candidate(raw.get("candidateInfo")),
        questions=questions,
        answers=answers,
        current_question_index=_repair_index(raw.get("currentQuestionIndex"), len(questions)),
        status=_repair_status(raw.get("status"), default=None),
        timestamp=_repair_datetime(raw.get("timestamp")) or utcnow(),
    )


def _str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


__all__ = ["MalformedPersistedState", "StateStore", "decode", "repair_state"]
