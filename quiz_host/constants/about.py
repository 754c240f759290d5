"""Static metadata describing QuizHost."""

APP_NAME = "QuizHost"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "QuizHost runs live quiz sessions: hosts launch a session from one of their quizzes, "
    "guests join from the lobby, and the engine drives countdowns, question timers and scoring."
)
