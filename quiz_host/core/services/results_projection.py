"""Read-only views built from session records.

The dictionaries returned here use the camelCase keys exposed to clients so
the HTTP layer can return them unchanged.
"""

from __future__ import annotations

from quiz_host.core.errors import ResultsUnavailableError
from quiz_host.core.models import Question, QuestionResult, QuizSnapshot, Session, SessionState


def question_results_view(session: Session, index: int) -> dict[str, object]:
    result: QuestionResult = session.results[index]
    return {
        "questionId": session.metadata.questions[index].question_id,
        "playersCorrectList": [r.name for r in result.player_results if r.correct],
        "averageAnswerTime": result.average_answer_time,
        "percentCorrect": result.percent_correct,
    }


def final_results_view(session: Session) -> dict[str, object]:
    """Leaderboard plus per-question summaries; only valid in FINAL_RESULTS."""
    if session.state is not SessionState.FINAL_RESULTS:
        raise ResultsUnavailableError()
    return {
        "usersRankedByScore": [
            {"name": player.name, "score": player.score} for player in session.users_ranked_by_score
        ],
        "questionResults": [question_results_view(session, i) for i in range(len(session.results))],
    }


def question_view(question: Question, include_correct: bool = False) -> dict[str, object]:
    answers = []
    for answer in question.answers:
        entry: dict[str, object] = {
            "answerId": answer.answer_id,
            "answer": answer.answer,
            "colour": answer.colour,
        }
        if include_correct:
            entry["correct"] = answer.correct
        answers.append(entry)
    return {
        "questionId": question.question_id,
        "question": question.question,
        "duration": question.duration,
        "thumbnailUrl": question.thumbnail_url,
        "points": question.points,
        "answers": answers,
    }


def metadata_view(metadata: QuizSnapshot) -> dict[str, object]:
    return {
        "quizId": metadata.quiz_id,
        "name": metadata.name,
        "timeCreated": metadata.time_created,
        "timeLastEdited": metadata.time_last_edited,
        "description": metadata.description,
        "numQuestions": metadata.num_questions,
        "questions": [question_view(q, include_correct=True) for q in metadata.questions],
        "duration": metadata.duration,
        "thumbnailUrl": metadata.thumbnail_url,
    }


def session_status_view(session: Session) -> dict[str, object]:
    return {
        "state": session.state.value,
        "atQuestion": session.at_question,
        "players": [player.name for player in session.users_ranked_by_score],
        "metadata": metadata_view(session.metadata),
    }


def player_status_view(session: Session) -> dict[str, object]:
    return {
        "state": session.state.value,
        "numQuestions": session.metadata.num_questions,
        "atQuestion": session.at_question,
    }


def chat_view(session: Session) -> dict[str, object]:
    return {
        "messages": [
            {
                "messageBody": message.message_body,
                "playerId": message.player_id,
                "playerName": message.player_name,
                "timeSent": message.time_sent,
            }
            for message in session.messages
        ]
    }
