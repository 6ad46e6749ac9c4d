from __future__ import annotations  # Interview session state models

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, get_args
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Status = Literal["not_started", "collecting_info", "in_progress", "completed"]
Difficulty = Literal["Easy", "Medium", "Hard"]

STATUSES: tuple[str, ...] = get_args(Status)
DIFFICULTIES: tuple[str, ...] = get_args(Difficulty)
NO_ANSWER = "(No answer provided)"


def new_id(prefix: str = "id") -> str:  # Opaque unique identifier
    return f"{prefix}_{uuid4().hex[:16]}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _Model(BaseModel):  # Stored documents use camelCase keys
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CandidateInfo(_Model):  # Candidate identity gathered from resume and chat
    name: str = ""
    email: str = ""
    phone: str = ""

    def is_complete(self) -> bool:
        return bool(self.name and self.email and self.phone)

    def missing_fields(self) -> List[str]:
        return [field for field in ("name", "email", "phone") if not getattr(self, field)]


class Question(_Model):  # One asked question plus whatever the candidate returned
    id: str = Field(default_factory=lambda: new_id("q"))
    text: str = ""
    difficulty: Optional[Difficulty] = None
    subject: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    answer: Optional[str] = None
    score: Optional[float] = None
    feedback: Optional[str] = None


class Session(_Model):  # The live, mutable interview
    id: str = Field(default_factory=lambda: new_id("iv"))
    candidate_info: CandidateInfo = Field(default_factory=CandidateInfo)
    questions: List[Question] = Field(default_factory=list)
    answers: List[Optional[str]] = Field(default_factory=list)
    current_question_index: int = Field(default=0, ge=0)
    final_score: Optional[int] = None
    status: Status = "not_started"


class ArchivedSession(Session):  # Frozen snapshot kept for interviewers
    date: Optional[datetime] = None
    status: Status = "completed"
    summary: Optional[str] = None


class ResumableSession(_Model):  # Snapshot that lets a candidate continue after a reload
    candidate_info: CandidateInfo = Field(default_factory=CandidateInfo)
    questions: List[Question] = Field(default_factory=list)
    answers: List[Optional[str]] = Field(default_factory=list)
    current_question_index: int = Field(default=0, ge=0)
    status: Optional[Status] = None
    timestamp: datetime = Field(default_factory=utcnow)


class InterviewState(_Model):
    """Everything that is persisted under the state key."""

    interviews: List[ArchivedSession] = Field(default_factory=list)
    current_interview: Session = Field(default_factory=Session)
    last_active_session: Optional[ResumableSession] = None

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


__all__ = [
    "ArchivedSession",
    "CandidateInfo",
    "DIFFICULTIES",
    "Difficulty",
    "InterviewState",
    "NO_ANSWER",
    "Question",
    "ResumableSession",
    "STATUSES",
    "Session",
    "Status",
    "new_id",
    "utcnow",
]
