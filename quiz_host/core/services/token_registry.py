"""In-memory login tokens standing in for the authentication subsystem."""

from __future__ import annotations

from threading import Lock
from uuid import uuid4


class TokenRegistry:
    """Issues opaque tokens and resolves them back to user ids."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._tokens: dict[str, int] = {}

    def issue_token(self, auth_user_id: int) -> str:
        token = uuid4().hex
        with self._lock:
            self._tokens[token] = auth_user_id
        return token

    def revoke_token(self, token: str) -> None:
        with self._lock:
            self._tokens.pop(token, None)

    def resolve_token(self, token: str | None) -> int | None:
        if not token:
            return None
        with self._lock:
            return self._tokens.get(token)
