"""Pydantic schemas for the interview session API."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from interview.models import ArchivedSession, CandidateInfo, Question, Session


class ChatMessagePayload(BaseModel):
    sender: Literal["bot", "user"]
    text: str


class SlotPayload(BaseModel):
    difficulty: str
    subject: str
    time_budget: int


class StateResp(BaseModel):
    session: Session
    question: Optional[Question] = None
    slot: Optional[SlotPayload] = None
    question_number: int = 0
    total_questions: int = 6
    time_left: Optional[int] = None
    degraded: bool = False
    resume_available: bool = False
    last_result: Optional[ArchivedSession] = None


class UploadResp(BaseModel):
    candidate_info: CandidateInfo
    status: str
    resume_available: bool = False
    welcome_back: bool = False
    question: Optional[Question] = None
    message: Optional[ChatMessagePayload] = None


class InfoReq(BaseModel):
    message: str


class InfoResp(BaseModel):
    reply: ChatMessagePayload
    ready: bool
    candidate_info: CandidateInfo


class DraftReq(BaseModel):
    text: str = ""


class AnswerReq(BaseModel):
    question_id: str
    answer: Optional[str] = None


class AnswerResp(BaseModel):
    accepted: bool
    reason: Optional[str] = None
    index: Optional[int] = None
    next_question: Optional[Question] = None
    completed: bool = False
    final_score: Optional[int] = None
    archived_id: Optional[str] = None
    degraded: bool = False


class RestartReq(BaseModel):
    candidate_info: Optional[CandidateInfo] = None


class ArchiveListResp(BaseModel):
    items: List[ArchivedSession] = Field(default_factory=list)
    total: int = 0
