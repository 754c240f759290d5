"""In-memory quiz storage standing in for the quiz-management subsystem.

The session engine only needs :meth:`QuizRepository.get_owned_quiz`; the
editing methods exist so quizzes can be seeded and changed while sessions
run on their own snapshots.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from itertools import count
from threading import Lock

from quiz_host.core.errors import QuizInTrashError, QuizNotFoundError, QuizNotOwnedError
from quiz_host.core.models import Answer, Question, QuizSnapshot


@dataclass(slots=True)
class QuizRecord:
    """Mutable quiz as owned by its author."""

    quiz_id: int
    owner_id: int
    name: str
    description: str
    time_created: int
    time_last_edited: int
    questions: list[Question] = field(default_factory=list)
    thumbnail_url: str = ""
    in_trash: bool = False

    def snapshot(self) -> QuizSnapshot:
        # Questions and answers are frozen, so a tuple copy is a full snapshot.
        return QuizSnapshot(
            quiz_id=self.quiz_id,
            name=self.name,
            description=self.description,
            time_created=self.time_created,
            time_last_edited=self.time_last_edited,
            questions=tuple(self.questions),
            thumbnail_url=self.thumbnail_url,
        )


class QuizRepository:
    """Manages quizzes and their questions for every author."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._quizzes: dict[int, QuizRecord] = {}
        self._quiz_ids = count(1)
        self._rng = random.Random()

    def create_quiz(self, owner_id: int, name: str, description: str = "") -> int:
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Quiz name must not be empty.")
        now = int(time.time())
        with self._lock:
            quiz_id = next(self._quiz_ids)
            self._quizzes[quiz_id] = QuizRecord(
                quiz_id=quiz_id,
                owner_id=owner_id,
                name=cleaned,
                description=description.strip(),
                time_created=now,
                time_last_edited=now,
            )
        return quiz_id

    def add_question(
        self,
        quiz_id: int,
        question_text: str,
        answers: list[tuple[str, bool]],
        duration: int,
        points: int,
        thumbnail_url: str = "",
    ) -> int:
        """Append a question and return its id (1-based within the quiz)."""
        with self._lock:
            quiz = self._require(quiz_id)
            question = self._prepare_question(
                len(quiz.questions) + 1, question_text, answers, duration, points, thumbnail_url
            )
            quiz.questions.append(question)
            quiz.time_last_edited = int(time.time())
            return question.question_id

    def update_question(
        self,
        quiz_id: int,
        question_id: int,
        question_text: str,
        answers: list[tuple[str, bool]],
        duration: int,
        points: int,
        thumbnail_url: str = "",
    ) -> None:
        with self._lock:
            quiz = self._require(quiz_id)
            index = next((i for i, q in enumerate(quiz.questions) if q.question_id == question_id), None)
            if index is None:
                raise ValueError(f"Question {question_id} does not exist in quiz {quiz_id}.")
            quiz.questions[index] = self._prepare_question(
                question_id, question_text, answers, duration, points, thumbnail_url
            )
            quiz.time_last_edited = int(time.time())

    def move_to_trash(self, quiz_id: int) -> None:
        with self._lock:
            self._require(quiz_id).in_trash = True

    def restore(self, quiz_id: int) -> None:
        with self._lock:
            self._require(quiz_id).in_trash = False

    def get_owned_quiz(self, auth_user_id: int, quiz_id: int) -> QuizSnapshot:
        """Return a snapshot of a quiz the user owns and has not trashed."""
        with self._lock:
            quiz = self._quizzes.get(quiz_id)
            if quiz is None:
                raise QuizNotFoundError()
            if quiz.owner_id != auth_user_id:
                raise QuizNotOwnedError()
            if quiz.in_trash:
                raise QuizInTrashError()
            return quiz.snapshot()

    def _require(self, quiz_id: int) -> QuizRecord:
        quiz = self._quizzes.get(quiz_id)
        if quiz is None:
            raise QuizNotFoundError()
        return quiz

    def _prepare_question(
        self,
        question_id: int,
        question_text: str,
        answers: list[tuple[str, bool]],
        duration: int,
        points: int,
        thumbnail_url: str,
    ) -> Question:
        """Validate and normalize a question before storage."""
        cleaned_text = question_text.strip()
        if not cleaned_text:
            raise ValueError("Question text must not be empty.")
        if not 2 <= len(answers) <= 6:
            raise ValueError("A question must have between 2 and 6 answers.")
        if not any(correct for _, correct in answers):
            raise ValueError("A question must have at least one correct answer.")
        if duration <= 0:
            raise ValueError("Question duration must be a positive number of seconds.")
        if points <= 0:
            raise ValueError("Question points must be positive.")
        return Question(
            question_id=question_id,
            question=cleaned_text,
            duration=duration,
            points=points,
            answers=tuple(
                Answer(
                    answer_id=position,
                    answer=text.strip(),
                    correct=correct,
                    colour=self._random_colour(),
                )
                for position, (text, correct) in enumerate(answers, start=1)
            ),
            thumbnail_url=thumbnail_url,
        )

    def _random_colour(self) -> str:
        return "#" + "".join(self._rng.choices("0123456789ABCDEF", k=6))
