from __future__ import annotations

__version__ = "1.0.0"


class Settings:
    DEFAULT_TIMEOUT_SECONDS: int = 5
    MAX_TIMEOUT_SECONDS: int = 86400
    DEFAULT_METHOD: str = "GET"
    ALLOWED_METHODS: tuple[str, ...] = ("GET", "HEAD")
    USER_AGENT: str = f"httpcheck/{__version__}"


settings = Settings()
