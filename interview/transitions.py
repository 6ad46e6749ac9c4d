"""Single transition table for session status changes.

Every mutator of the state machine asks this module for the next status
instead of carrying its own guard. Pairs missing from the table leave the
status untouched, so a status can never regress through an unrelated event.
"""
from __future__ import annotations

from typing import Dict, Literal, Tuple

from .models import STATUSES, Status

Event = Literal[
    "candidate_info_set",
    "interview_started",
    "question_recorded",
    "sequence_finished",
    "restarted",
    "reset",
]

TRANSITIONS: Dict[Tuple[str, str], Status] = {
    ("not_started", "candidate_info_set"): "collecting_info",
    ("not_started", "interview_started"): "in_progress",
    ("collecting_info", "interview_started"): "in_progress",
    ("not_started", "question_recorded"): "in_progress",
    ("not_started", "sequence_finished"): "completed",
    ("collecting_info", "sequence_finished"): "completed",
    ("in_progress", "sequence_finished"): "completed",
}
TRANSITIONS.update({(status, "restarted"): "in_progress" for status in STATUSES})
TRANSITIONS.update({(status, "reset"): "not_started" for status in STATUSES})


def next_status(current: Status, event: Event) -> Status:
    """Status after ``event``; unchanged when the pair has no entry."""

    return TRANSITIONS.get((current, event), current)


def allows(current: Status, event: Event) -> bool:
    return (current, event) in TRANSITIONS


def is_valid_status(value: object) -> bool:
    return isinstance(value, str) and value in STATUSES


__all__ = ["Event", "TRANSITIONS", "allows", "is_valid_status", "next_status"]
