import os
import sys
import tempfile
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storage.migrate import migrate
from config.settings import settings
from llm_gateway import AssistantUnavailable
import observability.logger as event_logger


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    monkeypatch.setattr(event_logger, "ENABLE_FILE_LOGS", False)
    migrate(db_path)
    try:
        yield db_path
    finally:
        td.cleanup()


class ScriptedAssistant:
    """Answers prompts from a script; ``None`` entries mean the service is down."""

    def __init__(self, replies: Optional[List[Optional[str]]] = None, default: Optional[str] = "Question?") -> None:
        self.replies = list(replies or [])
        self.default = default
        self.prompts: List[str] = []
        self.resets: List[List[Dict[str, str]]] = []

    def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else self.default
        if reply is None:
            raise AssistantUnavailable()
        return reply

    def reset(self, history: Optional[Sequence[Dict[str, str]]] = None) -> None:
        self.resets.append([dict(item) for item in history or []])


class ScoringAssistant(ScriptedAssistant):
    """Numbered questions, and ``score`` for the evaluation prompt."""

    def __init__(self, score: Optional[str] = "82") -> None:
        super().__init__()
        self.score = score

    def ask(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if prompt.startswith("Evaluate this interview transcript"):
            if self.score is None:
                raise AssistantUnavailable()
            return self.score
        return f"Question {len(self.prompts)}?"


@pytest.fixture
def scripted_assistant() -> Callable[..., ScriptedAssistant]:
    return ScriptedAssistant


@pytest.fixture
def scoring_assistant() -> Callable[..., ScoringAssistant]:
    return ScoringAssistant


@pytest.fixture
def store(tmp_db):
    from storage.state_store import StateStore

    return StateStore(db_path=tmp_db)


@pytest.fixture
def machine(store):
    from interview import SessionStateMachine

    return SessionStateMachine(store)


@pytest.fixture
def complete_info():
    from interview import CandidateInfo

    return CandidateInfo(name="Ada Lovelace", email="ada@example.com", phone="5551234567")
