"""Service for guest players: joining, answering, chatting and read views."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from quiz_host.constants.session_constants import (
    CHAT_MESSAGE_MAX_LENGTH,
    CHAT_MESSAGE_MIN_LENGTH,
)
from quiz_host.core.errors import (
    InvalidAnswersError,
    InvalidMessageLengthError,
    InvalidQuestionPositionError,
    InvalidSessionStateError,
    NameTakenError,
    SessionNotInLobbyError,
)
from quiz_host.core.markdown_math_renderer import renderer
from quiz_host.core.models import ChatMessage, RankedPlayer, Session, SessionState
from quiz_host.core.name_assigner import NameAssigner
from quiz_host.core.services.results_projection import (
    chat_view,
    final_results_view,
    player_status_view,
    question_results_view,
    question_view,
)
from quiz_host.core.services.session_engine import SessionEngine
from quiz_host.core.services.session_store import SessionStore
from quiz_host.core.services.timer_service import Scheduler

logger = logging.getLogger(__name__)

_QUESTION_VISIBLE_STATES = frozenset(
    {
        SessionState.QUESTION_OPEN,
        SessionState.QUESTION_CLOSE,
        SessionState.ANSWER_SHOW,
        SessionState.FINAL_RESULTS,
    }
)


class PlayerService:
    """Handles every player-initiated operation against a session."""

    def __init__(
        self,
        store: SessionStore,
        engine: SessionEngine,
        scheduler: Scheduler,
        name_assigner: NameAssigner | None = None,
    ) -> None:
        self._store = store
        self._engine = engine
        self._scheduler = scheduler
        self._names = name_assigner or NameAssigner()

    # --- Lobby ---

    def join(self, session_id: int, name: str | None) -> int:
        """Admit a guest into a lobby and return the new player id.

        An empty name gets a generated guest handle. When the lobby reaches its
        auto-start count the first question countdown begins immediately.
        """
        session = self._store.get(session_id)
        with self._store.transaction(session):
            if session.state is not SessionState.LOBBY:
                raise SessionNotInLobbyError()
            chosen = (name or "").strip()
            if chosen and session.has_player_named(chosen):
                raise NameTakenError()
            if not chosen:
                chosen = self._names.next_guest_name(session.has_player_named)

            player_id = self._names.next_player_id(
                lambda candidate: self._store.register_player(candidate, session.session_id)
            )
            session.users_ranked_by_score.append(RankedPlayer(player_id=player_id, name=chosen))
            logger.info("Player %d (%s) joined session %d", player_id, chosen, session.session_id)

            if session.auto_start_num > 0 and len(session.users_ranked_by_score) == session.auto_start_num:
                logger.info("Session %d reached autoStartNum=%d", session.session_id, session.auto_start_num)
                self._engine.start_first_question(session)
            return player_id

    # --- Answers ---

    def submit_answer(self, player_id: int, question_position: int, answer_ids: Sequence[int]) -> None:
        """Record a player's verdict for the open question.

        Exact set equality with the correct answers counts as correct at the
        current time; anything else is incorrect at the last possible instant.
        Resubmitting before the question closes replaces the earlier verdict.
        """
        session = self._store.session_for_player(player_id)
        with self._store.transaction(session):
            self._check_position(session, question_position)
            if session.state is not SessionState.QUESTION_OPEN:
                raise InvalidSessionStateError("Session is not in QUESTION_OPEN state")
            if question_position != session.at_question:
                raise InvalidSessionStateError()

            question = session.metadata.questions[question_position - 1]
            submitted = list(answer_ids)
            if not submitted:
                raise InvalidAnswersError("Less than 1 answer ID was submitted")
            if len(set(submitted)) != len(submitted):
                raise InvalidAnswersError("Duplicate Answer Ids are provided")
            lowest, highest = question.answer_id_range
            if any(not lowest <= answer_id <= highest for answer_id in submitted):
                raise InvalidAnswersError()

            result = session.results[question_position - 1]
            entry = next(r for r in result.player_results if r.player_id == player_id)
            entry.correct = frozenset(submitted) == question.correct_answer_ids
            if entry.correct:
                entry.time = self._scheduler.now()
            else:
                entry.time = session.question_open_time + question.duration
            logger.debug(
                "Player %d answered question %d of session %d (correct=%s)",
                player_id,
                question_position,
                session.session_id,
                entry.correct,
            )

    # --- Read views ---

    def status(self, player_id: int) -> dict[str, object]:
        session = self._store.session_for_player(player_id)
        with self._store.transaction(session):
            return player_status_view(session)

    def question_info(self, player_id: int, question_position: int) -> dict[str, object]:
        session = self._store.session_for_player(player_id)
        with self._store.transaction(session):
            self._check_position(session, question_position)
            if session.state not in _QUESTION_VISIBLE_STATES:
                raise InvalidSessionStateError("Question is not visible in the current session state")
            question = session.metadata.questions[question_position - 1]
            view = question_view(question)
            view["questionHtml"] = renderer.render_fragment(question.question)
            return view

    def question_results(self, player_id: int, question_position: int) -> dict[str, object]:
        session = self._store.session_for_player(player_id)
        with self._store.transaction(session):
            self._check_position(session, question_position)
            if session.state is not SessionState.ANSWER_SHOW:
                raise InvalidSessionStateError("Session is not in ANSWER_SHOW state")
            if question_position != session.at_question:
                raise InvalidSessionStateError()
            return question_results_view(session, question_position - 1)

    def final_results(self, player_id: int) -> dict[str, object]:
        session = self._store.session_for_player(player_id)
        with self._store.transaction(session):
            return final_results_view(session)

    # --- Chat ---

    def send_chat(self, player_id: int, message_body: str) -> None:
        session = self._store.session_for_player(player_id)
        if not CHAT_MESSAGE_MIN_LENGTH <= len(message_body) <= CHAT_MESSAGE_MAX_LENGTH:
            raise InvalidMessageLengthError()
        with self._store.transaction(session):
            player = session.find_player(player_id)
            session.messages.append(
                ChatMessage(
                    message_body=message_body,
                    player_id=player_id,
                    player_name=player.name,
                    time_sent=int(self._scheduler.now() * 1000),
                )
            )

    def get_chat(self, player_id: int) -> dict[str, object]:
        session = self._store.session_for_player(player_id)
        with self._store.transaction(session):
            return chat_view(session)

    @staticmethod
    def _check_position(session: Session, question_position: int) -> None:
        if not 1 <= question_position <= session.metadata.num_questions:
            raise InvalidQuestionPositionError()
