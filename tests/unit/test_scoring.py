import pytest

from interview.models import NO_ANSWER, Question, Session
from interview.scoring import (
    EVAL_INSTRUCTION,
    build_evaluation_prompt,
    build_transcript,
    coerce_final_score,
    evaluate_session,
    parse_score,
)


def _session(answers):
    questions = [Question(text=f"Q text {n}") for n in range(1, 7)]
    return Session(questions=questions, answers=answers, status="in_progress")


@pytest.mark.parametrize(
    "reply,expected",
    [("78", 78), ("Score: 85/100", 85), ("I'd say 72.", 72), ("no idea", 0), ("", 0), ("250", 100)],
)
def test_parse_score(reply, expected):
    assert parse_score(reply) == expected


@pytest.mark.parametrize(
    "value,expected",
    [(None, None), (True, None), (88, 88), (91.7, 91), (-3, 0), ("85/100", 85), ("n/a", None)],
)
def test_coerce_final_score(value, expected):
    assert coerce_final_score(value) == expected


def test_transcript_uses_sentinel_for_missing_answers():
    session = _session(["a1", None, "a3"])
    transcript = build_transcript(session)
    assert len(transcript) == 6
    assert transcript[1].answer == NO_ANSWER
    assert transcript[5].answer == NO_ANSWER

    prompt = build_evaluation_prompt(transcript)
    assert prompt.startswith(EVAL_INSTRUCTION + "\n\n")
    assert "Q1: Q text 1\nA1: a1" in prompt
    assert "Q6: Q text 6\nA6: " + NO_ANSWER in prompt


def test_evaluate_uses_first_integer(scripted_assistant):
    assistant = scripted_assistant(["Score: 85/100"])
    outcome = evaluate_session(_session(["a"] * 6), assistant)
    assert outcome.score == 85
    assert not outcome.degraded
    assert assistant.prompts[0].count("\nA") == 6


def test_evaluate_falls_back_when_unavailable(scripted_assistant):
    outcome = evaluate_session(_session(["a"] * 6), scripted_assistant(default=None))
    assert outcome.score == 50
    assert outcome.degraded
