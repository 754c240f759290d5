"""CSV rendering of a session's final results."""

from __future__ import annotations

import csv
import io

from quiz_host.core.errors import ResultsUnavailableError
from quiz_host.core.models import Session, SessionState


def render_results_csv(session: Session) -> str:
    """Render one row per player, in ranking order, with a score/rank pair per question.

    Raises ``ResultsUnavailableError`` unless the session shows final results.
    """
    if session.state is not SessionState.FINAL_RESULTS:
        raise ResultsUnavailableError()
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(_header(len(session.results)))
    for player in session.users_ranked_by_score:
        writer.writerow(_player_row(session, player.player_id, player.name))
    return buffer.getvalue()


def _header(question_count: int) -> list[str]:
    header = ["Player"]
    for number in range(1, question_count + 1):
        header.append(f"question{number}score")
        header.append(f"question{number}rank")
    return header


def _player_row(session: Session, player_id: int, name: str) -> list[str]:
    row = [name]
    for result in session.results:
        entry = next((r for r in result.player_results if r.player_id == player_id), None)
        score = entry.score if entry is not None else 0
        rank = entry.rank if entry is not None else 0
        row.extend([str(score), str(rank)])
    return row
