"""Candidate contact normalization, validation, collection and resume matching."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Literal, Optional

from .models import CandidateInfo, ResumableSession

if TYPE_CHECKING:
    from .session import SessionStateMachine

AskingFor = Literal["name", "email", "phone", "done"]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?(\d[\s-]?){9,14}\d$")
_NON_DIGITS = re.compile(r"\D+")


class FieldValidationError(ValueError):
    """User-entered contact detail has the wrong format; nothing was stored."""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(message)
        self.field_name = field_name
        self.message = message


def normalize_phone(value: Optional[str]) -> str:
    return _NON_DIGITS.sub("", value or "")


def normalize_email(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def validate_email(value: str) -> str:
    cleaned = (value or "").strip()
    if not EMAIL_PATTERN.match(cleaned):
        raise FieldValidationError("email", "That doesn't look like a valid email. Please try again.")
    return cleaned


def validate_phone(value: str) -> str:
    cleaned = (value or "").strip()
    if not PHONE_PATTERN.match(cleaned):
        raise FieldValidationError("phone", "That doesn't look like a valid phone number. Please try again.")
    return normalize_phone(cleaned)


@dataclass(frozen=True)
class ResumeMatch:
    matches: bool
    welcome_back: bool = False


def match_resumable(pointer: Optional[ResumableSession], info: CandidateInfo) -> ResumeMatch:
    """Whether freshly extracted details belong to the saved session.

    Email and phone must both agree after normalization; the name only
    decides whether the greeting is personalized.
    """

    if pointer is None:
        return ResumeMatch(matches=False)
    saved = pointer.candidate_info
    if normalize_email(saved.email) != normalize_email(info.email):
        return ResumeMatch(matches=False)
    if normalize_phone(saved.phone) != normalize_phone(info.phone):
        return ResumeMatch(matches=False)
    same_name = (saved.name or "").strip().lower() == (info.name or "").strip().lower()
    return ResumeMatch(matches=True, welcome_back=same_name)


@dataclass
class ChatMessage:
    sender: Literal["bot", "user"]
    text: str


_READY = "Perfect, I have all your details. Ready to start the interview?"


@dataclass
class InfoCollector:  # Asks for whichever contact fields the resume did not yield
    machine: "SessionStateMachine"
    messages: List[ChatMessage] = field(default_factory=list)
    asking_for: AskingFor = "name"

    def _next_field(self) -> AskingFor:
        missing = self.machine.current.candidate_info.missing_fields()
        return missing[0] if missing else "done"  # type: ignore[return-value]

    def opening(self) -> ChatMessage:
        info = self.machine.current.candidate_info
        self.asking_for = self._next_field()
        if self.asking_for == "name":
            text = "Hello! I couldn't find your name in the resume. What is your full name?"
        elif self.asking_for == "email":
            text = f"Hello {info.name}! What's your email address?"
        elif self.asking_for == "phone":
            text = f"Thanks, {info.name}. Lastly, what is your phone number?"
        else:
            text = _READY
        return self._bot(text)

    def reply(self, text: str) -> ChatMessage:
        """Take the candidate's message for the field being asked and prompt for the next one."""

        cleaned = (text or "").strip()
        if not cleaned or self.asking_for == "done":
            return self.messages[-1] if self.messages else self.opening()
        self.messages.append(ChatMessage(sender="user", text=cleaned))

        field_name = self.asking_for
        try:
            if field_name == "email":
                value = validate_email(cleaned)
            elif field_name == "phone":
                value = validate_phone(cleaned)
            else:
                value = cleaned
        except FieldValidationError as exc:
            return self._bot(exc.message)

        self.machine.update_candidate_info(**{field_name: value})
        self.asking_for = self._next_field()
        if self.asking_for == "email":
            return self._bot(f"Thanks, {self.machine.current.candidate_info.name}. Now, what is your email address?")
        if self.asking_for == "phone":
            return self._bot("Great. Lastly, what is your phone number?")
        if self.asking_for == "name":
            return self._bot("Thanks. What is your full name?")
        return self._bot(_READY)

    @property
    def ready(self) -> bool:
        return self.asking_for == "done"

    def _bot(self, text: str) -> ChatMessage:
        message = ChatMessage(sender="bot", text=text)
        self.messages.append(message)
        return message


__all__ = [
    "ChatMessage",
    "EMAIL_PATTERN",
    "FieldValidationError",
    "InfoCollector",
    "PHONE_PATTERN",
    "ResumeMatch",
    "match_resumable",
    "normalize_email",
    "normalize_phone",
    "validate_email",
    "validate_phone",
]
