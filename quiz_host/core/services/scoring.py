"""Scoring and ranking for a closed question."""

from __future__ import annotations

import logging
import math

from quiz_host.core.models import PlayerResult, QuestionResult, Session

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    return math.floor(value + 0.5)


def init_question_results(session: Session) -> None:
    """Create placeholder results for every question of the session.

    Each player starts out unsubmitted and incorrect for every question.
    """
    session.results = [
        QuestionResult(
            player_results=[
                PlayerResult(player_id=player.player_id, name=player.name)
                for player in session.users_ranked_by_score
            ]
        )
        for _ in session.metadata.questions
    ]


def close_question(session: Session, index: int) -> QuestionResult:
    """Rank, score and summarise question ``index`` (0-based) exactly once.

    Correct players are ranked by how early they answered; rank ``n`` earns
    ``points / n`` rounded half up. Calling this again for an already scored
    question leaves every score untouched.
    """
    result = session.results[index]
    if result.scored:
        logger.debug("Question %d of session %d already scored", index + 1, session.session_id)
        return result

    question = session.metadata.questions[index]
    correct = sorted((r for r in result.player_results if r.correct), key=lambda r: r.time)
    incorrect = [r for r in result.player_results if not r.correct]

    leaderboard = {player.player_id: player for player in session.users_ranked_by_score}
    for position, player_result in enumerate(correct, start=1):
        player_result.rank = position
        player_result.time = player_result.time - session.question_open_time
        player_result.score = round_half_up(question.points / position)
        ranked = leaderboard.get(player_result.player_id)
        if ranked is not None:
            ranked.score += player_result.score

    result.player_results = correct + incorrect
    if correct:
        result.average_answer_time = round_half_up(sum(r.time for r in correct) / len(correct))
    else:
        result.average_answer_time = 0
    total_players = len(session.users_ranked_by_score)
    if total_players:
        result.percent_correct = round_half_up(len(correct) / total_players * 100)
    else:
        result.percent_correct = 0

    # list.sort is stable, so ties keep their join order.
    session.users_ranked_by_score.sort(key=lambda p: p.score, reverse=True)
    result.scored = True
    logger.info(
        "Scored question %d of session %d: %d/%d correct",
        index + 1,
        session.session_id,
        len(correct),
        total_players,
    )
    return result
