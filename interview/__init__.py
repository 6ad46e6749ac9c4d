from __future__ import annotations  # Re-export interview public API

from .archive import ArchiveStore, filter_sessions, sort_by_score
from .candidate import FieldValidationError, InfoCollector, ResumeMatch, match_resumable
from .controller import InterviewController, IntakeOutcome, SubmitOutcome
from .models import (
    NO_ANSWER,
    ArchivedSession,
    CandidateInfo,
    InterviewState,
    Question,
    ResumableSession,
    Session,
)
from .scoring import ScoreOutcome, evaluate_session
from .sequencer import QuestionDraft, QuestionSequencer, SequenceComplete, Slot
from .session import PreconditionError, SessionStateMachine
from .timer import CountdownTimer

__all__ = [
    "ArchiveStore",
    "ArchivedSession",
    "CandidateInfo",
    "CountdownTimer",
    "FieldValidationError",
    "InfoCollector",
    "IntakeOutcome",
    "InterviewController",
    "InterviewState",
    "NO_ANSWER",
    "PreconditionError",
    "Question",
    "QuestionDraft",
    "QuestionSequencer",
    "ResumableSession",
    "ResumeMatch",
    "ScoreOutcome",
    "SequenceComplete",
    "Session",
    "SessionStateMachine",
    "Slot",
    "SubmitOutcome",
    "evaluate_session",
    "filter_sessions",
    "match_resumable",
    "sort_by_score",
]
