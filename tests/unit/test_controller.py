import threading

from interview import CandidateInfo, InterviewController, SessionStateMachine
from llm_gateway import AssistantClient, Ok
from interview.sequencer import FALLBACK_QUESTIONS


def _controller(machine, assistant):
    return InterviewController(machine, assistant, run_timers=False)


def _answer_all(controller, text="my answer"):
    outcome = None
    for _ in range(controller.sequencer.total):
        outcome = controller.submit_answer(text, question_id=controller.current_question.id)
        assert outcome.accepted
    return outcome


def test_complete_resume_starts_directly(machine, complete_info, scoring_assistant):
    controller = _controller(machine, scoring_assistant())
    outcome = controller.accept_candidate(complete_info)

    assert not outcome.resume_available
    assert outcome.question is not None
    session = controller.session
    assert session.status == "in_progress"
    assert session.current_question_index == 0
    assert len(session.questions) == 1
    assert session.questions[0].difficulty == "Easy"
    assert session.questions[0].subject == "React"
    assert controller.timer.remaining == 20


def test_partial_resume_collects_then_starts(machine, scoring_assistant):
    controller = _controller(machine, scoring_assistant())
    outcome = controller.accept_candidate(CandidateInfo(email="ada@example.com"))
    assert outcome.message is not None and "name" in outcome.message.text
    assert controller.session.status == "collecting_info"

    controller.collect("Ada Lovelace")
    controller.collect("555 123 4567")
    assert controller.collector.ready
    question = controller.start()
    assert question is not None
    assert controller.session.status == "in_progress"


def test_full_run_scores_and_archives(machine, complete_info, scoring_assistant):
    controller = _controller(machine, scoring_assistant("Score: 85/100"))
    controller.accept_candidate(complete_info)
    last = _answer_all(controller)

    assert last.completed
    assert last.final_score == 85
    archived = controller.archive.get(last.archived_id)
    assert archived.status == "completed"
    assert len(archived.questions) == 6
    assert [q.difficulty for q in archived.questions] == ["Easy", "Easy", "Medium", "Medium", "Hard", "Hard"]
    assert archived.answers == ["my answer"] * 6
    assert controller.last_result.id == archived.id
    assert controller.session.status == "not_started"


def test_scoring_outage_gives_fallback_score(machine, complete_info, scoring_assistant):
    controller = _controller(machine, scoring_assistant(score=None))
    controller.accept_candidate(complete_info)
    last = _answer_all(controller)
    assert last.final_score == 50
    assert last.degraded


def test_question_outage_uses_fallback_bank(machine, complete_info, scripted_assistant):
    controller = _controller(machine, scripted_assistant(default=None))
    controller.accept_candidate(complete_info)
    assert controller.current_question.text == FALLBACK_QUESTIONS[0]
    assert controller.degraded
    _answer_all(controller, "")
    archived = controller.archive.entries[-1]
    assert [q.text for q in archived.questions] == list(FALLBACK_QUESTIONS)
    assert archived.final_score == 50
    assert archived.answers == ["(No answer provided)"] * 6


def test_timer_expiry_submits_draft(machine, complete_info, scoring_assistant):
    controller = _controller(machine, scoring_assistant())
    controller.accept_candidate(complete_info)
    controller.update_draft("half typed")
    for _ in range(20):
        controller.timer.tick()
    assert controller.session.answers[0] == "half typed"
    assert controller.session.current_question_index == 1
    assert controller.timer.remaining == 20


def test_timer_and_manual_submit_race(machine, complete_info, scoring_assistant):
    controller = _controller(machine, scoring_assistant())
    controller.accept_candidate(complete_info)
    question_id = controller.current_question.id
    expired_timer = controller.timer

    manual = controller.submit_answer("typed", question_id=question_id)
    for _ in range(20):
        expired_timer.tick()
    late = controller.submit_answer("again", question_id=question_id)

    assert manual.accepted
    assert not late.accepted and late.reason == "stale"
    assert controller.session.answers[0] == "typed"
    assert controller.session.current_question_index == 1


def test_concurrent_submits_record_once(machine, complete_info, scoring_assistant):
    controller = _controller(machine, scoring_assistant())
    controller.accept_candidate(complete_info)
    question_id = controller.current_question.id
    results = []
    barrier = threading.Barrier(2)

    def _submit(text, source):
        barrier.wait()
        results.append(controller.submit_answer(text, question_id=question_id, source=source))

    threads = [threading.Thread(target=_submit, args=("a", "manual")), threading.Thread(target=_submit, args=("b", "timer"))]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(result.accepted for result in results) == [False, True]
    assert controller.session.current_question_index == 1
    assert controller.session.answers[0] in ("a", "b")
    assert controller.session.answers[1] is None


def test_submit_rejected_outside_interview(machine, scoring_assistant):
    controller = _controller(machine, scoring_assistant())
    outcome = controller.submit_answer("x")
    assert not outcome.accepted
    assert outcome.reason == "not_in_progress"


def test_suspend_and_resume_with_matching_resume(store, complete_info, scoring_assistant):
    controller = _controller(SessionStateMachine(store), scoring_assistant())
    controller.accept_candidate(complete_info)
    controller.submit_answer("first", question_id=controller.current_question.id)
    assert controller.suspend()

    controller = _controller(SessionStateMachine(store), scoring_assistant())
    offer = controller.accept_candidate(
        CandidateInfo(name="Ada Lovelace", email="ADA@example.com", phone="(555) 123-4567")
    )
    assert offer.resume_available and offer.welcome_back
    assert controller.session.status == "not_started"

    controller.resume()
    session = controller.session
    assert session.status == "in_progress"
    assert session.current_question_index == 1
    assert session.answers[0] == "first"
    assert len(session.questions) == 2
    assert controller.current_question.id == session.questions[1].id


def test_discard_then_fresh_start(store, complete_info, scoring_assistant):
    controller = _controller(SessionStateMachine(store), scoring_assistant())
    controller.accept_candidate(complete_info)
    controller.suspend()
    controller.discard()
    assert controller.machine.pointer is None
    outcome = controller.accept_candidate(complete_info)
    assert not outcome.resume_available
    assert controller.session.status == "in_progress"


def test_restart_after_completion(machine, complete_info, scoring_assistant):
    controller = _controller(machine, scoring_assistant())
    controller.accept_candidate(complete_info)
    _answer_all(controller)
    question = controller.restart()
    assert question is not None
    assert controller.session.status == "in_progress"
    assert controller.session.candidate_info == complete_info
    assert len(controller.session.questions) == 1
    assert controller.last_result is None


def test_each_interview_gets_a_fresh_chat(machine, complete_info):
    calls = []

    def transport(messages):
        calls.append(list(messages))
        prompt = messages[-1]["content"]
        return Ok("80" if prompt.startswith("Evaluate this interview transcript") else "Question?")

    controller = _controller(machine, AssistantClient(transport=transport, sleep=lambda _: None))
    controller.accept_candidate(complete_info)
    _answer_all(controller)
    assert len(calls[-1]) > 1

    before = len(calls)
    controller.accept_candidate(CandidateInfo(name="Grace Hopper", email="grace@example.com", phone="5552223333"))
    assert len(calls[before]) == 1
    assert "Easy" in calls[before][0]["content"]


def test_resume_replays_asked_questions_into_chat(store, complete_info, scoring_assistant):
    controller = _controller(SessionStateMachine(store), scoring_assistant())
    controller.accept_candidate(complete_info)
    controller.submit_answer("first", question_id=controller.current_question.id)
    asked = [question.text for question in controller.session.questions]
    controller.suspend()

    assistant = scoring_assistant()
    controller = _controller(SessionStateMachine(store), assistant)
    controller.resume()
    history = assistant.resets[-1]
    assert [item["role"] for item in history] == ["user", "assistant", "user", "assistant"]
    assert [item["content"] for item in history if item["role"] == "assistant"] == asked
    assert assistant.prompts == []


def test_resume_after_last_answer_scores_and_archives(store, complete_info, scoring_assistant):
    controller = _controller(SessionStateMachine(store), scoring_assistant())
    controller.accept_candidate(complete_info)
    for _ in range(5):
        controller.submit_answer("answer", question_id=controller.current_question.id)
    controller.machine.record_answer("last answer")
    assert controller.suspend()

    controller = _controller(SessionStateMachine(store), scoring_assistant("64"))
    controller.resume()
    assert controller.session.status == "not_started"
    archived = controller.archive.entries[-1]
    assert archived.final_score == 64
    assert archived.answers[5] == "last answer"
    assert controller.last_result.id == archived.id

    outcome = controller.accept_candidate(CandidateInfo(name="Grace", email="grace@example.com", phone="5552223333"))
    assert outcome.question is not None
    assert controller.session.status == "in_progress"


def test_fallback_bank_restarts_for_each_session(machine, complete_info, scripted_assistant):
    controller = _controller(machine, scripted_assistant(default=None))
    controller.accept_candidate(complete_info)
    controller.submit_answer("one", question_id=controller.current_question.id)
    assert controller.current_question.text == FALLBACK_QUESTIONS[1]

    controller.discard()
    controller.accept_candidate(complete_info)
    assert controller.current_question.text == FALLBACK_QUESTIONS[0]
    assert controller.degraded
