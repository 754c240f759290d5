"""Network configuration constants for the quiz host."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 3200
