"""Utility for assigning guest handles and numeric player ids."""

from __future__ import annotations

import random
import string
from threading import Lock
from typing import Callable

from quiz_host.constants.session_constants import (
    GUEST_NAME_DIGIT_COUNT,
    GUEST_NAME_LETTER_COUNT,
    PLAYER_ID_UPPER_BOUND,
)


class NameAssigner:
    """Produces random guest handles like ``qwert123`` and random player ids."""

    def __init__(self, seed: int | None = None) -> None:
        self._lock = Lock()
        self._rng = random.Random(seed)

    def next_guest_name(self, is_taken: Callable[[str], bool] = lambda _: False) -> str:
        """Return a handle of lowercase letters followed by digits not rejected by ``is_taken``."""
        while True:
            with self._lock:
                letters = "".join(self._rng.choices(string.ascii_lowercase, k=GUEST_NAME_LETTER_COUNT))
                digits = "".join(self._rng.choices(string.digits, k=GUEST_NAME_DIGIT_COUNT))
            name = letters + digits
            if not is_taken(name):
                return name

    def next_player_id(self, claim: Callable[[int], bool]) -> int:
        """Draw ids until ``claim`` accepts one, and return it."""
        while True:
            with self._lock:
                candidate = self._rng.randrange(PLAYER_ID_UPPER_BOUND)
            if claim(candidate):
                return candidate
