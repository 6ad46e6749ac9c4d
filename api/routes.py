"""FastAPI routes for the candidate flow and the interviewer dashboard."""
from __future__ import annotations

from dataclasses import asdict
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile

from api.schemas import (
    AnswerReq,
    AnswerResp,
    ArchiveListResp,
    ChatMessagePayload,
    DraftReq,
    InfoReq,
    InfoResp,
    RestartReq,
    SlotPayload,
    StateResp,
    UploadResp,
)
from config import resolve_route
from config.settings import settings
from interview import (
    ArchivedSession,
    InterviewController,
    PreconditionError,
    SessionStateMachine,
)
from interview.archive import FilterBy
from llm_gateway import AssistantClient
from resume import ExtractionFailure, extract_candidate_info, ocr_pdf
from storage.state_store import StateStore


candidate_router = APIRouter(prefix="/api/interview")
dashboard_router = APIRouter(prefix="/api/interviews")


@lru_cache(maxsize=1)
def get_controller() -> InterviewController:
    """Process-wide controller bound to the configured store and LLM route."""

    machine = SessionStateMachine(StateStore())
    assistant = AssistantClient(resolve_route(settings.LLM_CONFIG_PATH))
    return InterviewController(machine, assistant)


def _state(controller: InterviewController) -> StateResp:
    slot = controller.current_slot if controller.session.status == "in_progress" else None
    return StateResp(
        session=controller.session,
        question=controller.current_question,
        slot=SlotPayload(difficulty=slot.difficulty, subject=slot.subject, time_budget=slot.time_budget) if slot else None,
        question_number=controller.session.current_question_index + 1,
        total_questions=controller.sequencer.total,
        time_left=controller.time_left,
        degraded=controller.degraded,
        resume_available=controller.machine.pointer is not None,
        last_result=controller.last_result,
    )


def _conflict(exc: PreconditionError) -> HTTPException:
    return HTTPException(status_code=409, detail=str(exc))


@candidate_router.get("/state", response_model=StateResp)
def get_state(controller: InterviewController = Depends(get_controller)) -> StateResp:
    return _state(controller)


@candidate_router.post("/resume", response_model=UploadResp)
def upload_resume(
    file: UploadFile = File(...),
    controller: InterviewController = Depends(get_controller),
) -> UploadResp:
    if file.content_type not in ("application/pdf", "application/x-pdf"):
        raise HTTPException(status_code=400, detail="Please select a valid PDF file.")
    data = file.file.read()
    try:
        info = extract_candidate_info(data, ocr=ocr_pdf)
    except ExtractionFailure as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    try:
        outcome = controller.accept_candidate(info)
    except PreconditionError as exc:
        raise _conflict(exc) from exc
    return UploadResp(
        candidate_info=outcome.candidate_info,
        status=controller.session.status,
        resume_available=outcome.resume_available,
        welcome_back=outcome.welcome_back,
        question=outcome.question,
        message=ChatMessagePayload(**asdict(outcome.message)) if outcome.message else None,
    )


@candidate_router.post("/info", response_model=InfoResp)
def collect_info(req: InfoReq, controller: InterviewController = Depends(get_controller)) -> InfoResp:
    try:
        reply = controller.collect(req.message)
    except PreconditionError as exc:
        raise _conflict(exc) from exc
    collector = controller.collector
    return InfoResp(
        reply=ChatMessagePayload(**asdict(reply)),
        ready=bool(collector and collector.ready),
        candidate_info=controller.session.candidate_info,
    )


@candidate_router.post("/start", response_model=StateResp)
def start_interview(controller: InterviewController = Depends(get_controller)) -> StateResp:
    try:
        controller.start()
    except PreconditionError as exc:
        raise _conflict(exc) from exc
    return _state(controller)


@candidate_router.post("/draft", status_code=204)
def update_draft(req: DraftReq, controller: InterviewController = Depends(get_controller)) -> None:
    controller.update_draft(req.text)


@candidate_router.post("/answer", response_model=AnswerResp)
def submit_answer(req: AnswerReq, controller: InterviewController = Depends(get_controller)) -> AnswerResp:
    outcome = controller.submit_answer(req.answer, question_id=req.question_id, source="manual")
    if not outcome.accepted and outcome.reason == "not_in_progress":
        raise HTTPException(status_code=409, detail="no interview in progress")
    return AnswerResp(**asdict(outcome))


@candidate_router.post("/save", response_model=StateResp)
def save_on_close(controller: InterviewController = Depends(get_controller)) -> StateResp:
    controller.suspend()
    return _state(controller)


@candidate_router.post("/resume-session", response_model=StateResp)
def resume_session(controller: InterviewController = Depends(get_controller)) -> StateResp:
    if controller.resume() is None:
        raise HTTPException(status_code=404, detail="no saved session")
    return _state(controller)


@candidate_router.post("/discard", response_model=StateResp)
def discard_session(controller: InterviewController = Depends(get_controller)) -> StateResp:
    controller.discard()
    return _state(controller)


@candidate_router.post("/restart", response_model=StateResp)
def restart_interview(req: Optional[RestartReq] = None, controller: InterviewController = Depends(get_controller)) -> StateResp:
    controller.restart(req.candidate_info if req else None)
    return _state(controller)


@dashboard_router.get("", response_model=ArchiveListResp)
def list_interviews(
    q: str = Query(default=""),
    by: FilterBy = Query(default="name"),
    controller: InterviewController = Depends(get_controller),
) -> ArchiveListResp:
    items = controller.archive.search(q, by)
    return ArchiveListResp(items=items, total=len(items))


@dashboard_router.get("/{session_id}", response_model=ArchivedSession)
def get_interview(session_id: str, controller: InterviewController = Depends(get_controller)) -> ArchivedSession:
    entry = controller.archive.get(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="interview not found")
    return entry


@dashboard_router.delete("/{session_id}", status_code=204)
def delete_interview(session_id: str, controller: InterviewController = Depends(get_controller)) -> None:
    if not controller.archive.delete(session_id):
        raise HTTPException(status_code=404, detail="interview not found")


@dashboard_router.post("/{session_id}/restart", response_model=StateResp)
def restart_archived(session_id: str, controller: InterviewController = Depends(get_controller)) -> StateResp:
    try:
        controller.restart_archived(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="interview not found") from exc
    return _state(controller)


__all__ = ["candidate_router", "dashboard_router", "get_controller"]
