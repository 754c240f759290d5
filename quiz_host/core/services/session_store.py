"""In-memory collection of sessions with scoped, per-session transactions."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from itertools import count
from threading import Lock

from quiz_host.core.errors import (
    InvalidPlayerError,
    InvalidSessionError,
    TooManyActiveSessionsError,
)
from quiz_host.core.models import QuizSnapshot, Session


class SessionStore:
    """Owns every Session plus the indexes that span sessions.

    Mutations of a single session happen inside :meth:`transaction`, which
    holds that session's lock. The store lock guards the cross-session
    indexes only; it may be taken while a session lock is held, never the
    other way round.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._sessions: dict[int, Session] = {}
        self._session_ids = count()
        self._player_sessions: dict[int, int] = {}
        self._active_by_quiz: dict[int, list[int]] = {}
        self._inactive_by_quiz: dict[int, list[int]] = {}

    # --- Creation & lookup ---

    def create_session(
        self,
        metadata: QuizSnapshot,
        auto_start_num: int,
        max_active: int,
    ) -> Session:
        """Create a LOBBY session and list it as active for its quiz."""
        with self._lock:
            if len(self._active_by_quiz.get(metadata.quiz_id, [])) >= max_active:
                raise TooManyActiveSessionsError()
            session = Session(
                session_id=next(self._session_ids),
                metadata=metadata,
                auto_start_num=auto_start_num,
            )
            self._sessions[session.session_id] = session
            self._active_by_quiz.setdefault(metadata.quiz_id, []).append(session.session_id)
            return session

    def get(self, session_id: int) -> Session:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            raise InvalidSessionError("Session does not exist")
        return session

    def session_for_player(self, player_id: int) -> Session:
        with self._lock:
            session_id = self._player_sessions.get(player_id)
            session = self._sessions.get(session_id) if session_id is not None else None
        if session is None:
            raise InvalidPlayerError()
        return session

    @contextmanager
    def transaction(self, session: Session) -> Iterator[Session]:
        """Hold the session's lock for the duration of the block."""
        with session.lock:
            yield session

    # --- Player index ---

    def register_player(self, player_id: int, session_id: int) -> bool:
        """Claim ``player_id`` for a session; False if another session owns it."""
        with self._lock:
            if player_id in self._player_sessions:
                return False
            self._player_sessions[player_id] = session_id
            return True

    # --- Quiz session lists ---

    def active_session_ids(self, quiz_id: int) -> list[int]:
        with self._lock:
            return sorted(self._active_by_quiz.get(quiz_id, []))

    def inactive_session_ids(self, quiz_id: int) -> list[int]:
        with self._lock:
            return sorted(self._inactive_by_quiz.get(quiz_id, []))

    def mark_inactive(self, session: Session) -> None:
        with self._lock:
            active = self._active_by_quiz.get(session.quiz_id, [])
            if session.session_id in active:
                active.remove(session.session_id)
            inactive = self._inactive_by_quiz.setdefault(session.quiz_id, [])
            if session.session_id not in inactive:
                inactive.append(session.session_id)
