"""Exception hierarchy raised by the session engine and its collaborators.

Every failure falls into one of five families. The HTTP layer maps the
families to status codes; the core never needs to know about transport.
"""

from __future__ import annotations


class QuizHostError(Exception):
    """Base class for recoverable quiz host errors."""

    default_message = "Quiz host error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class AuthenticationError(QuizHostError):
    default_message = "Token provided is invalid"


class AuthorizationError(QuizHostError):
    default_message = "Not authorised"


class NotFoundError(QuizHostError):
    default_message = "Not found"


class ValidationError(QuizHostError):
    default_message = "Invalid input"


class StateConflictError(QuizHostError):
    default_message = "Operation not allowed in the current state"


# --- Authentication / authorization ---

class InvalidTokenError(AuthenticationError):
    default_message = "Token provided is invalid"


class QuizNotOwnedError(AuthorizationError):
    default_message = "Quiz ID does not refer to a quiz that this user owns."


# --- Missing entities ---

class QuizNotFoundError(NotFoundError):
    default_message = "Quiz ID does not refer to a valid quiz."


class InvalidSessionError(NotFoundError):
    default_message = "Session Id does not refer to a valid session within this quiz"


class InvalidPlayerError(NotFoundError):
    default_message = "Player ID does not exist"


class InvalidQuestionPositionError(NotFoundError):
    default_message = "Question position is not valid for the session the player is in"


# --- Bad input ---

class InvalidActionError(ValidationError):
    default_message = "Action provided is not a valid action"


class QuizInTrashError(ValidationError):
    default_message = "Quiz found in user's trash"


class TooManyActiveSessionsError(ValidationError):
    default_message = "10 sessions that are not in END state currently exist for this quiz"


class NoQuestionsError(ValidationError):
    default_message = "The quiz does not have any questions in it"


class AutoStartNumError(ValidationError):
    default_message = "autoStartNum must be between 0 and 50"


class NameTakenError(ValidationError):
    default_message = "The given name already exists"


class InvalidAnswersError(ValidationError):
    default_message = "Answer IDs are not valid for this particular question"


class InvalidMessageLengthError(ValidationError):
    default_message = "Message must be between 1 and 100 characters"


# --- State conflicts ---

class ActionUnavailableError(StateConflictError):
    default_message = "Action enum cannot be applied in the current state"


class SessionNotInLobbyError(StateConflictError):
    default_message = "Session is not in the LOBBY state."


class InvalidSessionStateError(StateConflictError):
    default_message = "Session is not currently on this question"


class ResultsUnavailableError(StateConflictError):
    default_message = "Session is not in FINAL_RESULTS state"
