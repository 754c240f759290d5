"""Domain models for quiz sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from threading import RLock
from typing import Any

from quiz_host.core.errors import InvalidActionError


class SessionState(str, Enum):
    LOBBY = "LOBBY"
    QUESTION_COUNTDOWN = "QUESTION_COUNTDOWN"
    QUESTION_OPEN = "QUESTION_OPEN"
    QUESTION_CLOSE = "QUESTION_CLOSE"
    ANSWER_SHOW = "ANSWER_SHOW"
    FINAL_RESULTS = "FINAL_RESULTS"
    END = "END"


class SessionAction(str, Enum):
    NEXT_QUESTION = "NEXT_QUESTION"
    SKIP_COUNTDOWN = "SKIP_COUNTDOWN"
    GO_TO_ANSWER = "GO_TO_ANSWER"
    GO_TO_FINAL_RESULTS = "GO_TO_FINAL_RESULTS"
    END = "END"

    @classmethod
    def parse(cls, action_name: Any) -> "SessionAction":
        """Convert an action name received at the boundary into the enum."""
        if isinstance(action_name, cls):
            return action_name
        try:
            return cls(action_name)
        except ValueError as exc:
            raise InvalidActionError() from exc


@dataclass(frozen=True, slots=True)
class Answer:
    """One selectable answer of a question."""

    answer_id: int
    answer: str
    correct: bool
    colour: str = ""


@dataclass(frozen=True, slots=True)
class Question:
    """Multiple-choice question with one or more correct answers."""

    question_id: int
    question: str
    duration: int
    points: int
    answers: tuple[Answer, ...]
    thumbnail_url: str = ""

    @property
    def correct_answer_ids(self) -> frozenset[int]:
        return frozenset(a.answer_id for a in self.answers if a.correct)

    @property
    def answer_id_range(self) -> tuple[int, int]:
        ids = [a.answer_id for a in self.answers]
        return min(ids), max(ids)


@dataclass(frozen=True, slots=True)
class QuizSnapshot:
    """Read-only copy of a quiz taken when a session starts."""

    quiz_id: int
    name: str
    description: str
    time_created: int
    time_last_edited: int
    questions: tuple[Question, ...]
    thumbnail_url: str = ""

    @property
    def num_questions(self) -> int:
        return len(self.questions)

    @property
    def duration(self) -> int:
        return sum(q.duration for q in self.questions)


@dataclass(slots=True)
class RankedPlayer:
    """Entry of the session leaderboard."""

    player_id: int
    name: str
    score: int = 0


@dataclass(slots=True)
class PlayerResult:
    """A player's verdict for one question.

    ``time`` holds the absolute unix time of the verdict while the question is
    open and the elapsed seconds since opening once the question is scored.
    It is ``None`` until the player submits.
    """

    player_id: int
    name: str
    correct: bool = False
    time: float | None = None
    rank: int = 0
    score: int = 0


@dataclass(slots=True)
class QuestionResult:
    player_results: list[PlayerResult] = field(default_factory=list)
    average_answer_time: int = 0
    percent_correct: int = 0
    scored: bool = False


@dataclass(frozen=True, slots=True)
class ChatMessage:
    message_body: str
    player_id: int
    player_name: str
    time_sent: int


@dataclass(eq=False)
class Session:
    """Live play-through of one quiz snapshot."""

    session_id: int
    metadata: QuizSnapshot
    auto_start_num: int = 0
    state: SessionState = SessionState.LOBBY
    at_question: int = 0
    question_open_time: float = 0.0
    users_ranked_by_score: list[RankedPlayer] = field(default_factory=list)
    results: list[QuestionResult] = field(default_factory=list)
    messages: list[ChatMessage] = field(default_factory=list)
    # Pending countdown or question-close timer; never more than one.
    timer: Any = field(default=None, repr=False)
    lock: RLock = field(default_factory=RLock, repr=False)

    @property
    def quiz_id(self) -> int:
        return self.metadata.quiz_id

    @property
    def current_question(self) -> Question:
        return self.metadata.questions[self.at_question - 1]

    def has_more_questions(self) -> bool:
        return self.at_question < self.metadata.num_questions

    def find_player(self, player_id: int) -> RankedPlayer | None:
        return next((p for p in self.users_ranked_by_score if p.player_id == player_id), None)

    def has_player_named(self, name: str) -> bool:
        return any(p.name == name for p in self.users_ranked_by_score)
