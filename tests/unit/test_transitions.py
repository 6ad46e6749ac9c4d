from interview.models import STATUSES
from interview.transitions import allows, is_valid_status, next_status


def test_forward_paths():
    assert next_status("not_started", "candidate_info_set") == "collecting_info"
    assert next_status("collecting_info", "interview_started") == "in_progress"
    assert next_status("not_started", "question_recorded") == "in_progress"
    assert next_status("in_progress", "sequence_finished") == "completed"


def test_no_regression_from_unrelated_events():
    assert next_status("in_progress", "candidate_info_set") == "in_progress"
    assert next_status("completed", "question_recorded") == "completed"
    assert next_status("completed", "interview_started") == "completed"
    assert not allows("completed", "candidate_info_set")


def test_restart_and_reset_from_anywhere():
    for status in STATUSES:
        assert next_status(status, "restarted") == "in_progress"
        assert next_status(status, "reset") == "not_started"


def test_is_valid_status():
    assert is_valid_status("completed")
    assert not is_valid_status("paused")
    assert not is_valid_status(None)


def test_only_waiting_sessions_can_start():
    assert allows("not_started", "interview_started")
    assert allows("collecting_info", "interview_started")
    assert not allows("in_progress", "interview_started")
    assert not allows("completed", "interview_started")
