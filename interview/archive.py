"""Interviewer-side view over archived sessions."""
from __future__ import annotations

from typing import Iterable, List, Literal, Optional

from .models import ArchivedSession, CandidateInfo, Session
from .session import SessionStateMachine

FilterBy = Literal["name", "email", "phone", "all"]
FILTER_FIELDS = ("name", "email", "phone")


def filter_sessions(entries: Iterable[ArchivedSession], query: str, by: FilterBy = "name") -> List[ArchivedSession]:
    """Case-insensitive substring match on one contact field, or on all three."""

    needle = (query or "").strip().lower()
    items = list(entries)
    if not needle:
        return items
    fields = FILTER_FIELDS if by == "all" else (by,)

    def _hit(entry: ArchivedSession) -> bool:
        info = entry.candidate_info
        return any(needle in (getattr(info, name) or "").lower() for name in fields)

    return [entry for entry in items if _hit(entry)]


def sort_by_score(entries: Iterable[ArchivedSession]) -> List[ArchivedSession]:
    """Highest final score first; a missing score counts as 0."""

    return sorted(entries, key=lambda entry: entry.final_score or 0, reverse=True)


class ArchiveStore:  # Search, delete and restart over the machine's archive
    def __init__(self, machine: SessionStateMachine) -> None:
        self._machine = machine

    @property
    def entries(self) -> List[ArchivedSession]:
        return list(self._machine.archive_entries)

    def search(self, query: str = "", by: FilterBy = "name") -> List[ArchivedSession]:
        return sort_by_score(filter_sessions(self._machine.archive_entries, query, by))

    def get(self, session_id: str) -> Optional[ArchivedSession]:
        for entry in self._machine.archive_entries:
            if entry.id == session_id:
                return entry
        return None

    def delete(self, session_id: str) -> bool:
        """Remove an archived entry; a matching live session is discarded too."""

        removed = self._machine.remove_archived(session_id)
        if self._machine.current.id == session_id:
            self._machine.discard_session(session_id)
            removed = True
        return removed

    def restart(self, session_id: Optional[str] = None) -> Session:
        """Start a fresh interview for the candidate of ``session_id``.

        Falls back to the cached last-known candidate when the entry is gone.

        Raises:
            KeyError: when no candidate details can be found.
        """

        info: Optional[CandidateInfo] = None
        entry = self.get(session_id) if session_id else None
        if entry is not None:
            info = entry.candidate_info
        elif self._machine.store is not None:
            info = self._machine.store.load_candidate_cache()
        if info is None:
            raise KeyError(session_id or "candidate")
        return self._machine.restart_keeping_candidate(info)


__all__ = ["ArchiveStore", "FilterBy", "filter_sessions", "sort_by_score"]
