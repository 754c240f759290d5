from __future__ import annotations

import pytest

from quiz_host.core.errors import (
    ActionUnavailableError,
    AutoStartNumError,
    InvalidActionError,
    InvalidSessionError,
    InvalidTokenError,
    NoQuestionsError,
    QuizInTrashError,
    QuizNotOwnedError,
    TooManyActiveSessionsError,
)
from quiz_host.core.models import SessionAction, SessionState
from tests.conftest import ADMIN_USER_ID

ALLOWED = {
    (SessionState.LOBBY, SessionAction.NEXT_QUESTION),
    (SessionState.LOBBY, SessionAction.END),
    (SessionState.QUESTION_COUNTDOWN, SessionAction.SKIP_COUNTDOWN),
    (SessionState.QUESTION_COUNTDOWN, SessionAction.END),
    (SessionState.QUESTION_OPEN, SessionAction.GO_TO_ANSWER),
    (SessionState.QUESTION_OPEN, SessionAction.END),
    (SessionState.QUESTION_CLOSE, SessionAction.GO_TO_ANSWER),
    (SessionState.QUESTION_CLOSE, SessionAction.GO_TO_FINAL_RESULTS),
    (SessionState.QUESTION_CLOSE, SessionAction.NEXT_QUESTION),
    (SessionState.QUESTION_CLOSE, SessionAction.END),
    (SessionState.ANSWER_SHOW, SessionAction.GO_TO_FINAL_RESULTS),
    (SessionState.ANSWER_SHOW, SessionAction.NEXT_QUESTION),
    (SessionState.ANSWER_SHOW, SessionAction.END),
    (SessionState.FINAL_RESULTS, SessionAction.END),
}

FORBIDDEN = [
    (state, action)
    for state in SessionState
    for action in SessionAction
    if (state, action) not in ALLOWED
]


def _state(manager, token, quiz_id, session_id) -> SessionState:
    return SessionState(manager.get_session_status(token, quiz_id, session_id)["state"])


@pytest.mark.parametrize(("state", "action"), FORBIDDEN)
def test_actions_outside_the_table_are_rejected(manager, admin_token, quiz_id, drive_session, state, action):
    session_id = drive_session(state)
    with pytest.raises(ActionUnavailableError):
        manager.update_session(admin_token, quiz_id, session_id, action.value)
    assert _state(manager, admin_token, quiz_id, session_id) is state


def test_start_creates_lobby_session(manager, admin_token, quiz_id):
    session_id = manager.start_session(admin_token, quiz_id, 0)

    status = manager.get_session_status(admin_token, quiz_id, session_id)
    assert status["state"] == "LOBBY"
    assert status["atQuestion"] == 0
    assert status["players"] == []
    assert status["metadata"]["numQuestions"] == 2
    assert status["metadata"]["duration"] == 15
    assert manager.list_sessions(admin_token, quiz_id) == {
        "activeSessions": [session_id],
        "inactiveSessions": [],
    }


@pytest.mark.parametrize("auto_start_num", [-1, 51])
def test_start_rejects_auto_start_out_of_range(manager, admin_token, quiz_id, auto_start_num):
    with pytest.raises(AutoStartNumError):
        manager.start_session(admin_token, quiz_id, auto_start_num)


def test_start_accepts_auto_start_limit(manager, admin_token, quiz_id):
    manager.start_session(admin_token, quiz_id, 50)


def test_start_rejects_quiz_without_questions(manager, admin_token, quizzes):
    empty_quiz = quizzes.create_quiz(ADMIN_USER_ID, "Empty")
    with pytest.raises(NoQuestionsError):
        manager.start_session(admin_token, empty_quiz, 0)


def test_eleventh_active_session_is_rejected(manager, admin_token, quiz_id):
    session_ids = [manager.start_session(admin_token, quiz_id, 0) for _ in range(10)]
    with pytest.raises(TooManyActiveSessionsError):
        manager.start_session(admin_token, quiz_id, 0)

    manager.update_session(admin_token, quiz_id, session_ids[0], "END")
    manager.start_session(admin_token, quiz_id, 0)


def test_admin_operations_check_token_and_ownership(manager, admin_token, other_token, quiz_id, quizzes):
    with pytest.raises(InvalidTokenError):
        manager.start_session("not-a-token", quiz_id, 0)
    with pytest.raises(InvalidTokenError):
        manager.list_sessions(None, quiz_id)
    with pytest.raises(QuizNotOwnedError):
        manager.start_session(other_token, quiz_id, 0)

    quizzes.move_to_trash(quiz_id)
    with pytest.raises(QuizInTrashError):
        manager.start_session(admin_token, quiz_id, 0)


def test_update_rejects_unknown_action(manager, admin_token, quiz_id, drive_session):
    session_id = drive_session(SessionState.LOBBY)
    with pytest.raises(InvalidActionError):
        manager.update_session(admin_token, quiz_id, session_id, "REWIND")


def test_update_rejects_session_of_another_quiz(manager, admin_token, quiz_id, quizzes, drive_session):
    session_id = drive_session(SessionState.LOBBY)
    other_quiz = quizzes.create_quiz(ADMIN_USER_ID, "Other")
    quizzes.add_question(other_quiz, "1 + 1?", [("2", True), ("3", False)], duration=5, points=1)

    with pytest.raises(InvalidSessionError):
        manager.update_session(admin_token, other_quiz, session_id, "END")
    with pytest.raises(InvalidSessionError):
        manager.update_session(admin_token, quiz_id, 999, "END")


def test_countdown_opens_question_after_three_seconds(manager, admin_token, quiz_id, scheduler, drive_session):
    session_id = drive_session(SessionState.QUESTION_COUNTDOWN)
    assert _state(manager, admin_token, quiz_id, session_id) is SessionState.QUESTION_COUNTDOWN

    scheduler.advance(2.9)
    assert _state(manager, admin_token, quiz_id, session_id) is SessionState.QUESTION_COUNTDOWN

    scheduler.advance(0.1)
    assert _state(manager, admin_token, quiz_id, session_id) is SessionState.QUESTION_OPEN

    scheduler.advance(10)
    assert _state(manager, admin_token, quiz_id, session_id) is SessionState.QUESTION_CLOSE


def test_at_most_one_timer_is_pending(manager, admin_token, quiz_id, scheduler, drive_session):
    session_id = drive_session(SessionState.QUESTION_COUNTDOWN)
    assert len(scheduler.pending()) == 1

    manager.update_session(admin_token, quiz_id, session_id, "SKIP_COUNTDOWN")
    assert len(scheduler.pending()) == 1

    manager.update_session(admin_token, quiz_id, session_id, "GO_TO_ANSWER")
    assert scheduler.pending() == []

    # Letting the old question deadline pass changes nothing.
    scheduler.advance(30)
    assert _state(manager, admin_token, quiz_id, session_id) is SessionState.ANSWER_SHOW


def test_stale_timer_callback_is_ignored(manager, admin_token, quiz_id, scheduler, drive_session):
    session_id = drive_session(SessionState.QUESTION_COUNTDOWN)
    countdown_timer = scheduler.pending()[0]

    manager.update_session(admin_token, quiz_id, session_id, "END")
    assert countdown_timer.cancelled

    # A cancelled timer racing with END still fires once.
    countdown_timer.callback()
    assert _state(manager, admin_token, quiz_id, session_id) is SessionState.END


def test_next_question_moves_on_and_stops_at_the_last(manager, admin_token, quiz_id, scheduler, drive_session):
    session_id = drive_session(SessionState.ANSWER_SHOW)

    manager.update_session(admin_token, quiz_id, session_id, "NEXT_QUESTION")
    status = manager.get_session_status(admin_token, quiz_id, session_id)
    assert status["state"] == "QUESTION_COUNTDOWN"
    assert status["atQuestion"] == 2

    scheduler.advance(3 + 5)
    assert _state(manager, admin_token, quiz_id, session_id) is SessionState.QUESTION_CLOSE

    with pytest.raises(ActionUnavailableError):
        manager.update_session(admin_token, quiz_id, session_id, "NEXT_QUESTION")
    assert _state(manager, admin_token, quiz_id, session_id) is SessionState.QUESTION_CLOSE


@pytest.mark.parametrize(
    "state",
    [
        SessionState.LOBBY,
        SessionState.QUESTION_COUNTDOWN,
        SessionState.QUESTION_OPEN,
        SessionState.QUESTION_CLOSE,
        SessionState.ANSWER_SHOW,
        SessionState.FINAL_RESULTS,
    ],
)
def test_end_moves_session_to_inactive_list(manager, admin_token, quiz_id, scheduler, drive_session, state):
    session_id = drive_session(state)

    manager.update_session(admin_token, quiz_id, session_id, "END")

    assert _state(manager, admin_token, quiz_id, session_id) is SessionState.END
    assert manager.list_sessions(admin_token, quiz_id) == {
        "activeSessions": [],
        "inactiveSessions": [session_id],
    }
    assert scheduler.pending() == []


def test_session_lists_are_sorted(manager, admin_token, quiz_id):
    first = manager.start_session(admin_token, quiz_id, 0)
    second = manager.start_session(admin_token, quiz_id, 0)
    third = manager.start_session(admin_token, quiz_id, 0)
    manager.update_session(admin_token, quiz_id, third, "END")
    manager.update_session(admin_token, quiz_id, first, "END")

    assert manager.list_sessions(admin_token, quiz_id) == {
        "activeSessions": [second],
        "inactiveSessions": [first, third],
    }


def test_session_keeps_snapshot_when_quiz_is_edited(manager, admin_token, quiz_id, quizzes, drive_session):
    session_id = drive_session(SessionState.LOBBY)

    quizzes.update_question(
        quiz_id,
        1,
        "What is the capital of Italy?",
        [("Rome", True), ("Milan", False)],
        duration=20,
        points=2,
    )

    question = manager.get_session_status(admin_token, quiz_id, session_id)["metadata"]["questions"][0]
    assert question["question"] == "What is the capital of France?"
    assert question["duration"] == 10
    assert [a["answer"] for a in question["answers"]] == ["Paris", "Lyon", "Nice"]

    new_session = manager.start_session(admin_token, quiz_id, 0)
    edited = manager.get_session_status(admin_token, quiz_id, new_session)["metadata"]["questions"][0]
    assert edited["question"] == "What is the capital of Italy?"
