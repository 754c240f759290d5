"""Facade over the session services, shared by the API server and app entry point."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from quiz_host.core.errors import InvalidSessionError, InvalidTokenError
from quiz_host.core.models import QuizSnapshot, Session, SessionAction
from quiz_host.core.name_assigner import NameAssigner
from quiz_host.core.results_exporter import render_results_csv
from quiz_host.core.services.player_service import PlayerService
from quiz_host.core.services.results_projection import final_results_view, session_status_view
from quiz_host.core.services.session_engine import SessionEngine
from quiz_host.core.services.session_store import SessionStore
from quiz_host.core.services.timer_service import Scheduler, ThreadingScheduler


class TokenResolver(Protocol):
    def resolve_token(self, token: str | None) -> int | None: ...


class QuizProvider(Protocol):
    def get_owned_quiz(self, auth_user_id: int, quiz_id: int) -> QuizSnapshot: ...


class QuizHostManager:
    """Entry point for admin and player operations on live sessions.

    Admin operations authenticate the token and check quiz ownership through
    the injected collaborators before touching any session.
    """

    def __init__(
        self,
        tokens: TokenResolver,
        quizzes: QuizProvider,
        scheduler: Scheduler | None = None,
        name_assigner: NameAssigner | None = None,
    ) -> None:
        self._tokens = tokens
        self._quizzes = quizzes
        self._scheduler = scheduler or ThreadingScheduler()
        self._store = SessionStore()
        self._engine = SessionEngine(self._store, self._scheduler)
        self._players = PlayerService(self._store, self._engine, self._scheduler, name_assigner)

    # --- Admin: session lifecycle ---

    def start_session(self, token: str | None, quiz_id: int, auto_start_num: int) -> int:
        auth_user_id = self._authenticate(token)
        snapshot = self._quizzes.get_owned_quiz(auth_user_id, quiz_id)
        return self._engine.start(snapshot, auto_start_num).session_id

    def update_session(self, token: str | None, quiz_id: int, session_id: int, action_name: str) -> None:
        auth_user_id = self._authenticate(token)
        self._quizzes.get_owned_quiz(auth_user_id, quiz_id)
        action = SessionAction.parse(action_name)
        session = self._session_in_quiz(quiz_id, session_id)
        with self._store.transaction(session):
            self._engine.apply(session, action)

    def list_sessions(self, token: str | None, quiz_id: int) -> dict[str, list[int]]:
        auth_user_id = self._authenticate(token)
        self._quizzes.get_owned_quiz(auth_user_id, quiz_id)
        return {
            "activeSessions": self._store.active_session_ids(quiz_id),
            "inactiveSessions": self._store.inactive_session_ids(quiz_id),
        }

    def get_session_status(self, token: str | None, quiz_id: int, session_id: int) -> dict[str, object]:
        session = self._authorised_session(token, quiz_id, session_id)
        with self._store.transaction(session):
            return session_status_view(session)

    def get_session_results(self, token: str | None, quiz_id: int, session_id: int) -> dict[str, object]:
        session = self._authorised_session(token, quiz_id, session_id)
        with self._store.transaction(session):
            return final_results_view(session)

    def get_session_results_csv(self, token: str | None, quiz_id: int, session_id: int) -> str:
        session = self._authorised_session(token, quiz_id, session_id)
        with self._store.transaction(session):
            return render_results_csv(session)

    # --- Player delegation ---

    def join_session(self, session_id: int, name: str | None) -> int:
        return self._players.join(session_id, name)

    def get_player_status(self, player_id: int) -> dict[str, object]:
        return self._players.status(player_id)

    def get_question_info(self, player_id: int, question_position: int) -> dict[str, object]:
        return self._players.question_info(player_id, question_position)

    def submit_answer(self, player_id: int, question_position: int, answer_ids: Sequence[int]) -> None:
        self._players.submit_answer(player_id, question_position, answer_ids)

    def get_question_results(self, player_id: int, question_position: int) -> dict[str, object]:
        return self._players.question_results(player_id, question_position)

    def get_final_results(self, player_id: int) -> dict[str, object]:
        return self._players.final_results(player_id)

    def send_chat(self, player_id: int, message_body: str) -> None:
        self._players.send_chat(player_id, message_body)

    def get_chat(self, player_id: int) -> dict[str, object]:
        return self._players.get_chat(player_id)

    # --- Helpers ---

    def _authenticate(self, token: str | None) -> int:
        auth_user_id = self._tokens.resolve_token(token)
        if auth_user_id is None:
            raise InvalidTokenError()
        return auth_user_id

    def _authorised_session(self, token: str | None, quiz_id: int, session_id: int) -> Session:
        auth_user_id = self._authenticate(token)
        self._quizzes.get_owned_quiz(auth_user_id, quiz_id)
        return self._session_in_quiz(quiz_id, session_id)

    def _session_in_quiz(self, quiz_id: int, session_id: int) -> Session:
        try:
            session = self._store.get(session_id)
        except InvalidSessionError:
            raise InvalidSessionError() from None
        if session.quiz_id != quiz_id:
            raise InvalidSessionError()
        return session
