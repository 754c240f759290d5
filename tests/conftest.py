"""Shared fixtures: a manual clock, seeded collaborators and a manager."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

import pytest

from quiz_host.core.models import SessionState
from quiz_host.core.name_assigner import NameAssigner
from quiz_host.core.services.quiz_repository import QuizRepository
from quiz_host.core.services.token_registry import TokenRegistry
from quiz_host.core.session_manager import QuizHostManager

ADMIN_USER_ID = 1
OTHER_USER_ID = 2
START_TIME = 1_700_000_000.0


@dataclass
class ManualTimer:
    due: float
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """Scheduler whose clock only moves when a test advances it."""

    current: float = START_TIME
    timers: list[ManualTimer] = field(default_factory=list)

    def now(self) -> float:
        return self.current

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(due=self.current + delay_seconds, callback=callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in order."""
        target = self.current + seconds
        while True:
            due = [t for t in self.pending() if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.current = timer.due
            timer.fired = True
            timer.callback()
        self.current = target

    def pending(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def tokens() -> TokenRegistry:
    return TokenRegistry()


@pytest.fixture
def admin_token(tokens: TokenRegistry) -> str:
    return tokens.issue_token(ADMIN_USER_ID)


@pytest.fixture
def other_token(tokens: TokenRegistry) -> str:
    return tokens.issue_token(OTHER_USER_ID)


@pytest.fixture
def quizzes() -> QuizRepository:
    return QuizRepository()


@pytest.fixture
def quiz_id(quizzes: QuizRepository) -> int:
    """Two-question quiz: a single-answer 5 pointer and a multi-answer 1 pointer."""
    quiz_id = quizzes.create_quiz(ADMIN_USER_ID, "Capitals", "Warm-up round")
    quizzes.add_question(
        quiz_id,
        "What is the capital of France?",
        [("Paris", True), ("Lyon", False), ("Nice", False)],
        duration=10,
        points=5,
    )
    quizzes.add_question(
        quiz_id,
        "Which numbers are even?",
        [("2", True), ("4", True), ("5", False)],
        duration=5,
        points=1,
    )
    return quiz_id


@pytest.fixture
def manager(tokens: TokenRegistry, quizzes: QuizRepository, scheduler: ManualScheduler) -> QuizHostManager:
    return QuizHostManager(
        tokens=tokens,
        quizzes=quizzes,
        scheduler=scheduler,
        name_assigner=NameAssigner(seed=7),
    )


@pytest.fixture
def drive_session(manager: QuizHostManager, admin_token: str, quiz_id: int, scheduler: ManualScheduler):
    """Return a helper that starts a session and walks it into the requested state."""

    def drive(state: SessionState, players: tuple[str, ...] = ()) -> int:
        session_id = manager.start_session(admin_token, quiz_id, 0)
        for name in players:
            manager.join_session(session_id, name)
        if state is SessionState.LOBBY:
            return session_id
        if state is SessionState.END:
            manager.update_session(admin_token, quiz_id, session_id, "END")
            return session_id
        manager.update_session(admin_token, quiz_id, session_id, "NEXT_QUESTION")
        if state is SessionState.QUESTION_COUNTDOWN:
            return session_id
        manager.update_session(admin_token, quiz_id, session_id, "SKIP_COUNTDOWN")
        if state is SessionState.QUESTION_OPEN:
            return session_id
        if state is SessionState.QUESTION_CLOSE:
            scheduler.advance(10)
            return session_id
        manager.update_session(admin_token, quiz_id, session_id, "GO_TO_ANSWER")
        if state is SessionState.ANSWER_SHOW:
            return session_id
        manager.update_session(admin_token, quiz_id, session_id, "GO_TO_FINAL_RESULTS")
        return session_id

    return drive
