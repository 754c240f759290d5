"""Utilities for importing quizzes from a human-friendly text file.

File format (question blocks separated by blank lines or '---'):

    TITLE: Quiz name              (optional, defaults to the file name)
    DESCRIPTION: Short blurb      (optional)

    Q: Question text (supports markdown + LaTeX). Additional lines until the
       next marker are treated as part of the question.
    A: First option text
    B: Second option text
    ...                           (two to six options, A-F)
    CORRECT: A or A,C             (one or more letters)
    POINTS: integer               (optional, default 1)
    DURATION: seconds             (optional, default 10)

Example:

    TITLE: Capitals

    Q: What is the capital of France?
    A: Paris
    B: Lyon
    CORRECT: A
    POINTS: 5
    DURATION: 10
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from quiz_host.core.services.quiz_repository import QuizRepository

_OPTION_ORDER = ["A", "B", "C", "D", "E", "F"]
_DEFAULT_POINTS = 1
_DEFAULT_DURATION = 10


class QuizImportError(Exception):
    """Raised when a quiz definition cannot be parsed."""


@dataclass(slots=True)
class ImportedQuestion:
    question_text: str
    answers: list[tuple[str, bool]]
    points: int
    duration: int


@dataclass(slots=True)
class ImportedQuiz:
    """Container for imported quiz metadata and questions."""

    source_path: Path
    title: str
    description: str
    questions: list[ImportedQuestion]


def load_quiz_from_file(file_path: Path) -> ImportedQuiz:
    text = file_path.read_text(encoding="utf-8")
    title, description, body = _split_header(text)
    questions = _parse_quiz_text(body)
    if not questions:
        raise QuizImportError("Quiz file did not contain any questions.")
    return ImportedQuiz(
        source_path=file_path,
        title=title or file_path.stem,
        description=description,
        questions=questions,
    )


def import_quiz_file(repository: QuizRepository, owner_id: int, file_path: Path) -> int:
    """Load a quiz file into the repository for ``owner_id`` and return the new quiz id."""
    imported = load_quiz_from_file(file_path)
    quiz_id = repository.create_quiz(owner_id, imported.title, imported.description)
    for question in imported.questions:
        try:
            repository.add_question(
                quiz_id,
                question.question_text,
                question.answers,
                duration=question.duration,
                points=question.points,
            )
        except ValueError as exc:
            raise QuizImportError(str(exc)) from exc
    return quiz_id


def _split_header(text: str) -> tuple[str, str, str]:
    title = ""
    description = ""
    body_lines: list[str] = []
    for raw_line in text.splitlines():
        upper = raw_line.strip().upper()
        if upper.startswith("TITLE:"):
            title = raw_line.split(":", 1)[1].strip()
        elif upper.startswith("DESCRIPTION:"):
            description = raw_line.split(":", 1)[1].strip()
        else:
            body_lines.append(raw_line)
    return title, description, "\n".join(body_lines)


def _parse_quiz_text(text: str) -> list[ImportedQuestion]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in text.splitlines():
        stripped = raw_line.strip()
        if stripped == "---":
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            # Blank line encountered after content - finalize current block
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())

    return [_parse_block(block) for block in blocks if block]


def _parse_block(block: str) -> ImportedQuestion:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letters: list[str] = []
    points = _DEFAULT_POINTS
    duration = _DEFAULT_DURATION
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        upper = line.upper()
        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        if upper.startswith("CORRECT:"):
            raw_value = line.split(":", 1)[1]
            correct_letters = [part.strip().upper() for part in raw_value.split(",") if part.strip()]
            current_section = None
            continue

        if upper.startswith("POINTS:"):
            points = _parse_positive_int("POINTS", line)
            current_section = None
            continue

        if upper.startswith("DURATION:"):
            duration = _parse_positive_int("DURATION", line)
            current_section = None
            continue

        if len(line) > 2 and line[0].upper() in _OPTION_ORDER and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section in _OPTION_ORDER:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise QuizImportError(
                f"Encountered text outside of a known section: '{line}'."
            )

    if not question_lines:
        raise QuizImportError("Question text missing (Q: ...)")

    letters = _OPTION_ORDER[: len(options)]
    if len(options) < 2 or sorted(options) != letters:
        raise QuizImportError("Each question must define two to six consecutive options starting at A.")
    if not correct_letters:
        raise QuizImportError("CORRECT must name at least one option.")
    unknown = [letter for letter in correct_letters if letter not in options]
    if unknown:
        raise QuizImportError(f"CORRECT refers to undefined options: {', '.join(unknown)}.")

    answers = [(options[letter].strip(), letter in correct_letters) for letter in letters]
    if any(not text for text, _ in answers):
        raise QuizImportError("Option text cannot be empty.")

    question_text = "\n".join(question_lines).strip()
    if not question_text:
        raise QuizImportError("Question text cannot be empty.")

    return ImportedQuestion(
        question_text=question_text,
        answers=answers,
        points=points,
        duration=duration,
    )


def _parse_positive_int(label: str, line: str) -> int:
    raw_value = line.split(":", 1)[1].strip()
    try:
        parsed_value = int(raw_value)
    except ValueError as exc:
        raise QuizImportError(f"{label} must be an integer.") from exc
    if parsed_value <= 0:
        raise QuizImportError(f"{label} must be a positive integer.")
    return parsed_value
