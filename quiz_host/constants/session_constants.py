"""Session engine limits and timings shared across core and server layers."""

COUNTDOWN_SECONDS: int = 3
MAX_ACTIVE_SESSIONS_PER_QUIZ: int = 10
MAX_AUTO_START_NUM: int = 50

CHAT_MESSAGE_MIN_LENGTH: int = 1
CHAT_MESSAGE_MAX_LENGTH: int = 100

PLAYER_ID_UPPER_BOUND: int = 1_000_000
GUEST_NAME_LETTER_COUNT: int = 5
GUEST_NAME_DIGIT_COUNT: int = 3
