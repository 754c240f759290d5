"""State machine that drives a session from the lobby to the end."""

from __future__ import annotations

import logging
from typing import Callable

from quiz_host.constants.session_constants import (
    COUNTDOWN_SECONDS,
    MAX_ACTIVE_SESSIONS_PER_QUIZ,
    MAX_AUTO_START_NUM,
)
from quiz_host.core.errors import ActionUnavailableError, AutoStartNumError, NoQuestionsError
from quiz_host.core.models import QuizSnapshot, Session, SessionAction, SessionState
from quiz_host.core.services.scoring import close_question, init_question_results
from quiz_host.core.services.session_store import SessionStore
from quiz_host.core.services.timer_service import Scheduler

logger = logging.getLogger(__name__)

_Transition = Callable[[Session], None]


class SessionEngine:
    """Validates actions against the current state and applies transitions.

    Every method that takes a :class:`Session` expects the caller to hold the
    session's transaction. Timer callbacks acquire it themselves.
    """

    def __init__(
        self,
        store: SessionStore,
        scheduler: Scheduler,
        countdown_seconds: float = COUNTDOWN_SECONDS,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._countdown_seconds = countdown_seconds
        self._transitions: dict[tuple[SessionState, SessionAction], _Transition] = {
            (SessionState.LOBBY, SessionAction.NEXT_QUESTION): self.start_first_question,
            (SessionState.LOBBY, SessionAction.END): self._finalize,
            (SessionState.QUESTION_COUNTDOWN, SessionAction.SKIP_COUNTDOWN): self._open_question,
            (SessionState.QUESTION_COUNTDOWN, SessionAction.END): self._finalize,
            (SessionState.QUESTION_OPEN, SessionAction.GO_TO_ANSWER): self._show_answer,
            (SessionState.QUESTION_OPEN, SessionAction.END): self._finalize,
            (SessionState.QUESTION_CLOSE, SessionAction.GO_TO_ANSWER): self._show_answer,
            (SessionState.QUESTION_CLOSE, SessionAction.GO_TO_FINAL_RESULTS): self._show_final_results,
            (SessionState.QUESTION_CLOSE, SessionAction.NEXT_QUESTION): self._advance_question,
            (SessionState.QUESTION_CLOSE, SessionAction.END): self._finalize,
            (SessionState.ANSWER_SHOW, SessionAction.GO_TO_FINAL_RESULTS): self._show_final_results,
            (SessionState.ANSWER_SHOW, SessionAction.NEXT_QUESTION): self._advance_question,
            (SessionState.ANSWER_SHOW, SessionAction.END): self._finalize,
            (SessionState.FINAL_RESULTS, SessionAction.END): self._finalize,
        }

    # --- Operations ---

    def start(self, metadata: QuizSnapshot, auto_start_num: int) -> Session:
        """Create a LOBBY session for an already authorised quiz snapshot."""
        if not 0 <= auto_start_num <= MAX_AUTO_START_NUM:
            raise AutoStartNumError()
        if not metadata.questions:
            raise NoQuestionsError()
        session = self._store.create_session(
            metadata,
            auto_start_num,
            max_active=MAX_ACTIVE_SESSIONS_PER_QUIZ,
        )
        logger.info(
            "Started session %d for quiz %d (autoStartNum=%d)",
            session.session_id,
            metadata.quiz_id,
            auto_start_num,
        )
        return session

    def apply(self, session: Session, action: SessionAction) -> None:
        transition = self._transitions.get((session.state, action))
        if transition is None:
            logger.debug(
                "Rejected %s for session %d in %s",
                action.value,
                session.session_id,
                session.state.value,
            )
            raise ActionUnavailableError()
        previous = session.state
        transition(session)
        logger.info(
            "Session %d: %s --%s--> %s",
            session.session_id,
            previous.value,
            action.value,
            session.state.value,
        )

    def start_first_question(self, session: Session) -> None:
        """LOBBY -> QUESTION_COUNTDOWN; also used when a lobby auto-starts."""
        init_question_results(session)
        session.at_question = 1
        self._begin_countdown(session)

    # --- Transitions ---

    def _advance_question(self, session: Session) -> None:
        if not session.has_more_questions():
            raise ActionUnavailableError("No more questions in this session")
        session.at_question += 1
        self._begin_countdown(session)

    def _begin_countdown(self, session: Session) -> None:
        session.state = SessionState.QUESTION_COUNTDOWN
        self._schedule(session, self._countdown_seconds, SessionState.QUESTION_COUNTDOWN, self._open_question)

    def _open_question(self, session: Session) -> None:
        self._cancel_timer(session)
        session.state = SessionState.QUESTION_OPEN
        session.question_open_time = self._scheduler.now()
        duration = session.current_question.duration
        self._schedule(session, duration, SessionState.QUESTION_OPEN, self._close_question)

    def _close_question(self, session: Session) -> None:
        session.state = SessionState.QUESTION_CLOSE
        close_question(session, session.at_question - 1)

    def _show_answer(self, session: Session) -> None:
        self._cancel_timer(session)
        session.state = SessionState.ANSWER_SHOW
        close_question(session, session.at_question - 1)

    def _show_final_results(self, session: Session) -> None:
        session.state = SessionState.FINAL_RESULTS

    def _finalize(self, session: Session) -> None:
        self._cancel_timer(session)
        session.state = SessionState.END
        self._store.mark_inactive(session)

    # --- Timers ---

    def _schedule(
        self,
        session: Session,
        delay_seconds: float,
        expected_state: SessionState,
        transition: _Transition,
    ) -> None:
        self._cancel_timer(session)
        handle = None

        def on_timer() -> None:
            with self._store.transaction(session):
                # A cancelled or superseded timer may still fire once.
                if session.timer is not handle or session.state is not expected_state:
                    logger.debug("Ignoring stale timer for session %d", session.session_id)
                    return
                session.timer = None
                try:
                    transition(session)
                except Exception:
                    logger.exception(
                        "Automatic transition from %s failed for session %d",
                        expected_state.value,
                        session.session_id,
                    )
                    return
                logger.info(
                    "Session %d: %s --timer--> %s",
                    session.session_id,
                    expected_state.value,
                    session.state.value,
                )

        handle = self._scheduler.call_later(delay_seconds, on_timer)
        session.timer = handle
        logger.debug(
            "Session %d: %s timer set for %ss",
            session.session_id,
            expected_state.value,
            delay_seconds,
        )

    def _cancel_timer(self, session: Session) -> None:
        if session.timer is not None:
            session.timer.cancel()
            session.timer = None
            logger.debug("Session %d: pending timer cancelled", session.session_id)
