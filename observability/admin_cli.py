"""Lightweight CLI helpers for inspecting the stored interview state."""
from __future__ import annotations

import argparse
from typing import Optional, Sequence

from interview.archive import sort_by_score
from storage.state_store import StateStore


def list_archive(store: StateStore, limit: int = 20) -> None:
    for entry in sort_by_score(store.load().interviews)[:limit]:
        info = entry.candidate_info
        date = entry.date.isoformat() if entry.date else "-"
        score = "-" if entry.final_score is None else entry.final_score
        print(f"[{date}] {entry.id} {info.name or '?'} <{info.email}> {info.phone} score={score}")


def show_current(store: StateStore) -> None:
    state = store.load()
    session = state.current_interview
    answered = sum(1 for answer in session.answers if answer is not None)
    print(
        f"current {session.id} status={session.status} question={session.current_question_index + 1} "
        f"answered={answered}/{len(session.questions)} candidate={session.candidate_info.name or '?'}"
    )
    pointer = state.last_active_session
    if pointer is not None:
        print(
            f"resumable {pointer.candidate_info.email} status={pointer.status or 'in_progress'} "
            f"question={pointer.current_question_index + 1} saved={pointer.timestamp.isoformat()}"
        )


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--db", help="SQLite file to read instead of the configured one")
    parser.add_argument("--archive", type=int, metavar="N", help="Show the N best-scored archived interviews")
    parser.add_argument("--current", action="store_true", help="Show the live session and any resumable one")
    parser.add_argument("--clear", action="store_true", help="Delete the stored state and candidate cache")
    args = parser.parse_args(argv)

    store = StateStore(db_path=args.db)
    if args.archive:
        list_archive(store, args.archive)
    if args.current:
        show_current(store)
    if args.clear:
        store.clear()
        print("cleared")


if __name__ == "__main__":
    main()
