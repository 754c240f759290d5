"""FastAPI server that exposes admin session endpoints and player endpoints."""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field
import uvicorn

from quiz_host.constants.about import APP_ABOUT_TEXT, APP_LICENSE, APP_NAME, APP_VERSION
from quiz_host.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_host.core.errors import (
    AuthenticationError,
    AuthorizationError,
    QuizHostError,
    QuizNotFoundError,
)
from quiz_host.core.session_manager import QuizHostManager

logger = logging.getLogger(__name__)


class StartSessionPayload(BaseModel):
    """Payload schema for launching a session."""

    auto_start_num: int = Field(default=0, alias="autoStartNum")


class UpdateSessionPayload(BaseModel):
    action: str


class JoinPayload(BaseModel):
    """Payload schema for the lobby join flow."""

    session_id: int = Field(alias="sessionId")
    name: str = ""


class AnswerPayload(BaseModel):
    """Payload schema for submitted answers."""

    answer_ids: list[int] = Field(alias="answerIds")


class ChatBody(BaseModel):
    message_body: str = Field(alias="messageBody")


class ChatPayload(BaseModel):
    message: ChatBody


def _status_code_for(exc: QuizHostError) -> int:
    if isinstance(exc, AuthenticationError):
        return 401
    if isinstance(exc, (AuthorizationError, QuizNotFoundError)):
        return 403
    return 400


def _get_quiz_manager_dependency(quiz_manager: QuizHostManager):
    def dependency() -> QuizHostManager:
        return quiz_manager

    return dependency


def create_api_app(quiz_manager: QuizHostManager) -> FastAPI:
    """Create a FastAPI application wired to the provided manager."""
    app = FastAPI(
        title=f"{APP_NAME} API",
        version=APP_VERSION,
        description=APP_ABOUT_TEXT,
        license_info={"name": APP_LICENSE},
    )
    manager_dep = _get_quiz_manager_dependency(quiz_manager)

    @app.exception_handler(QuizHostError)
    async def handle_quiz_host_error(request: Request, exc: QuizHostError) -> JSONResponse:
        status_code = _status_code_for(exc)
        logger.info("%s %s -> %d: %s", request.method, request.url.path, status_code, exc)
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    @app.get("/ping")
    def health_check() -> dict[str, bool]:
        return {"ok": True}

    # --- Admin session routes ---

    @app.post("/v1/admin/quiz/{quizid}/session/start")
    def start_session(
        quizid: int,
        payload: StartSessionPayload,
        token: str | None = Header(default=None),
        manager: QuizHostManager = Depends(manager_dep),
    ) -> dict[str, int]:
        session_id = manager.start_session(token, quizid, payload.auto_start_num)
        return {"sessionId": session_id}

    @app.put("/v1/admin/quiz/{quizid}/session/{sessionid}")
    def update_session(
        quizid: int,
        sessionid: int,
        payload: UpdateSessionPayload,
        token: str | None = Header(default=None),
        manager: QuizHostManager = Depends(manager_dep),
    ) -> dict[str, object]:
        manager.update_session(token, quizid, sessionid, payload.action)
        return {}

    @app.get("/v1/admin/quiz/{quizid}/sessions")
    def list_sessions(
        quizid: int,
        token: str | None = Header(default=None),
        manager: QuizHostManager = Depends(manager_dep),
    ) -> dict[str, list[int]]:
        return manager.list_sessions(token, quizid)

    @app.get("/v1/admin/quiz/{quizid}/session/{sessionid}")
    def get_session_status(
        quizid: int,
        sessionid: int,
        token: str | None = Header(default=None),
        manager: QuizHostManager = Depends(manager_dep),
    ) -> dict[str, object]:
        return manager.get_session_status(token, quizid, sessionid)

    @app.get("/v1/admin/quiz/{quizid}/session/{sessionid}/results")
    def get_session_results(
        quizid: int,
        sessionid: int,
        token: str | None = Header(default=None),
        manager: QuizHostManager = Depends(manager_dep),
    ) -> dict[str, object]:
        return manager.get_session_results(token, quizid, sessionid)

    @app.get("/v1/admin/quiz/{quizid}/session/{sessionid}/results/csv", response_class=PlainTextResponse)
    def get_session_results_csv(
        quizid: int,
        sessionid: int,
        token: str | None = Header(default=None),
        manager: QuizHostManager = Depends(manager_dep),
    ) -> PlainTextResponse:
        document = manager.get_session_results_csv(token, quizid, sessionid)
        return PlainTextResponse(document, media_type="text/csv")

    # --- Player routes ---

    @app.post("/v1/player/join")
    def join_session(
        payload: JoinPayload,
        manager: QuizHostManager = Depends(manager_dep),
    ) -> dict[str, int]:
        player_id = manager.join_session(payload.session_id, payload.name)
        return {"playerId": player_id}

    @app.get("/v1/player/{playerid}")
    def get_player_status(
        playerid: int,
        manager: QuizHostManager = Depends(manager_dep),
    ) -> dict[str, object]:
        return manager.get_player_status(playerid)

    @app.get("/v1/player/{playerid}/question/{questionposition}")
    def get_question_info(
        playerid: int,
        questionposition: int,
        manager: QuizHostManager = Depends(manager_dep),
    ) -> dict[str, object]:
        return manager.get_question_info(playerid, questionposition)

    @app.put("/v1/player/{playerid}/question/{questionposition}/answer")
    def submit_answer(
        playerid: int,
        questionposition: int,
        payload: AnswerPayload,
        manager: QuizHostManager = Depends(manager_dep),
    ) -> dict[str, object]:
        manager.submit_answer(playerid, questionposition, payload.answer_ids)
        return {}

    @app.get("/v1/player/{playerid}/question/{questionposition}/results")
    def get_question_results(
        playerid: int,
        questionposition: int,
        manager: QuizHostManager = Depends(manager_dep),
    ) -> dict[str, object]:
        return manager.get_question_results(playerid, questionposition)

    @app.get("/v1/player/{playerid}/results")
    def get_final_results(
        playerid: int,
        manager: QuizHostManager = Depends(manager_dep),
    ) -> dict[str, object]:
        return manager.get_final_results(playerid)

    @app.get("/v1/player/{playerid}/chat")
    def get_chat(
        playerid: int,
        manager: QuizHostManager = Depends(manager_dep),
    ) -> dict[str, object]:
        return manager.get_chat(playerid)

    @app.post("/v1/player/{playerid}/chat")
    def send_chat(
        playerid: int,
        payload: ChatPayload,
        manager: QuizHostManager = Depends(manager_dep),
    ) -> dict[str, object]:
        manager.send_chat(playerid, payload.message.message_body)
        return {}

    return app


def run_api_server(
    quiz_manager: QuizHostManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> None:
    """Serve the API in the current thread until interrupted."""
    app = create_api_app(quiz_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)
    server.run()
