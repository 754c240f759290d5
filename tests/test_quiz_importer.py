from __future__ import annotations

from pathlib import Path

import pytest

from quiz_host.core.quiz_importer import QuizImportError, import_quiz_file, load_quiz_from_file
from quiz_host.core.services.quiz_repository import QuizRepository

QUIZ_TEXT = """\
TITLE: Capitals
DESCRIPTION: European capitals

Q: What is the capital of **France**?
A: Paris
B: Lyon
CORRECT: A
POINTS: 5
DURATION: 20

---
Q: Which of these are
   capitals?
A: Rome
B: Milan
C: Madrid
CORRECT: A, C
"""


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "quiz.txt"
    path.write_text(text, encoding="utf-8")
    return path


def test_load_parses_header_and_questions(tmp_path):
    imported = load_quiz_from_file(_write(tmp_path, QUIZ_TEXT))

    assert imported.title == "Capitals"
    assert imported.description == "European capitals"
    first, second = imported.questions
    assert first.question_text == "What is the capital of **France**?"
    assert first.answers == [("Paris", True), ("Lyon", False)]
    assert (first.points, first.duration) == (5, 20)
    assert second.question_text == "Which of these are\ncapitals?"
    assert second.answers == [("Rome", True), ("Milan", False), ("Madrid", True)]
    assert (second.points, second.duration) == (1, 10)


def test_title_defaults_to_file_name(tmp_path):
    imported = load_quiz_from_file(_write(tmp_path, "Q: Yes?\nA: Yes\nB: No\nCORRECT: A\n"))
    assert imported.title == "quiz"


def test_import_creates_owned_quiz(tmp_path):
    repository = QuizRepository()

    quiz_id = import_quiz_file(repository, 7, _write(tmp_path, QUIZ_TEXT))

    snapshot = repository.get_owned_quiz(7, quiz_id)
    assert snapshot.name == "Capitals"
    assert snapshot.num_questions == 2
    assert snapshot.questions[1].correct_answer_ids == frozenset({1, 3})


@pytest.mark.parametrize(
    "text",
    [
        "",
        "Q: Lonely?\nA: Yes\nCORRECT: A\n",
        "Q: Gap?\nA: Yes\nC: No\nCORRECT: A\n",
        "Q: None right?\nA: Yes\nB: No\n",
        "Q: Unknown?\nA: Yes\nB: No\nCORRECT: D\n",
        "Q: Points?\nA: Yes\nB: No\nCORRECT: A\nPOINTS: zero\n",
        "Q: Duration?\nA: Yes\nB: No\nCORRECT: A\nDURATION: 0\n",
        "stray text\nQ: Where?\nA: Yes\nB: No\nCORRECT: A\n",
    ],
)
def test_malformed_files_are_rejected(tmp_path, text):
    with pytest.raises(QuizImportError):
        load_quiz_from_file(_write(tmp_path, text))
