import pytest

from interview import ArchiveStore, ArchivedSession, CandidateInfo, filter_sessions, sort_by_score


def _entry(name, email="", phone="", score=None):
    return ArchivedSession(candidate_info=CandidateInfo(name=name, email=email, phone=phone), final_score=score)


def test_filter_by_field_case_insensitive():
    entries = [_entry("Ada Lovelace", "ada@x.com"), _entry("Alan Turing", "alan@y.com", "5550001111")]
    assert [e.candidate_info.name for e in filter_sessions(entries, "ADA")] == ["Ada Lovelace"]
    assert [e.candidate_info.name for e in filter_sessions(entries, "y.com", by="email")] == ["Alan Turing"]
    assert [e.candidate_info.name for e in filter_sessions(entries, "0001", by="phone")] == ["Alan Turing"]
    assert len(filter_sessions(entries, "a", by="all")) == 2
    assert filter_sessions(entries, "  ") == entries


def test_sort_missing_score_counts_as_zero():
    entries = [_entry("a", score=None), _entry("b", score=90), _entry("c", score=0), _entry("d", score=45)]
    assert [e.candidate_info.name for e in sort_by_score(entries)] == ["b", "d", "a", "c"]


def _archive_one(machine, info, score):
    machine.set_candidate_info(**info.model_dump())
    machine.start_interview()
    machine.finalize(score)
    return machine.archive()


def test_store_delete_and_search(machine, complete_info):
    first = _archive_one(machine, complete_info, 40)
    second = _archive_one(machine, CandidateInfo(name="Grace", email="g@x.com", phone="5552223333"), 90)
    archive = ArchiveStore(machine)

    assert [e.id for e in archive.search()] == [second.id, first.id]
    assert archive.get(first.id) is not None
    assert archive.delete(first.id)
    assert not archive.delete(first.id)
    assert [e.id for e in archive.entries] == [second.id]


def test_delete_matching_live_session_discards_it(machine, complete_info):
    machine.set_candidate_info(**complete_info.model_dump())
    live_id = machine.current.id
    assert ArchiveStore(machine).delete(live_id)
    assert machine.current.id != live_id
    assert machine.current.status == "not_started"


def test_restart_from_entry_or_cache(machine, complete_info):
    entry = _archive_one(machine, complete_info, 70)
    archive = ArchiveStore(machine)

    session = archive.restart(entry.id)
    assert session.status == "in_progress"
    assert session.candidate_info == complete_info

    session = archive.restart("missing")
    assert session.candidate_info == complete_info


def test_restart_without_any_candidate_raises(machine):
    with pytest.raises(KeyError):
        ArchiveStore(machine).restart("missing")
