"""Application entry point for the QuizHost server."""

from __future__ import annotations

from pathlib import Path
import sys

from quiz_host.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_host.core.quiz_importer import QuizImportError, import_quiz_file
from quiz_host.core.services.quiz_repository import QuizRepository
from quiz_host.core.services.token_registry import TokenRegistry
from quiz_host.core.session_manager import QuizHostManager
from quiz_host.server.api_server import run_api_server
from quiz_host.utils.logging_config import configure_logging

_ADMIN_USER_ID = 1


def main(argv: list[str] | None = None) -> None:
    """Initialize logging, seed quizzes from the given files and serve the API."""
    logger = configure_logging()
    logger.info("Starting QuizHost server…")

    tokens = TokenRegistry()
    quizzes = QuizRepository()
    for raw_path in argv if argv is not None else sys.argv[1:]:
        try:
            quiz_id = import_quiz_file(quizzes, _ADMIN_USER_ID, Path(raw_path))
        except (OSError, QuizImportError) as exc:
            logger.error("Could not import %s: %s", raw_path, exc)
            continue
        logger.info("Imported %s as quiz %d", raw_path, quiz_id)

    admin_token = tokens.issue_token(_ADMIN_USER_ID)
    logger.info("Admin token: %s", admin_token)

    manager = QuizHostManager(tokens=tokens, quizzes=quizzes)
    run_api_server(manager, host=DEFAULT_HOST, port=DEFAULT_PORT)


if __name__ == "__main__":
    main()
