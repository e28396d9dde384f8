"""
Runtime configuration.

Values come from the environment (a local `.env` is loaded first) and are
collected into one `Config` object that the gateway hands to each service.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",  # Vite dev server for the student and admin clients
    "http://localhost:3000",
    "http://localhost:5050",
]


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


@dataclass
class Config:
    database_url: Optional[str] = None
    jwt_secret: Optional[str] = None
    token_expiration_minutes: int = 60
    email_from: str = "no-reply@campushub.local"
    email_from_name: str = "CampusHub"
    aws_region: str = "us-east-1"
    email_development_mode: bool = True
    email_timeout_seconds: int = 5
    notify_on_event_update: bool = True
    sync_notifications: bool = False
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    gateway_port: int = 5050

    def validate(self) -> None:
        """
        Fail fast on settings the server cannot run without.

        Raises:
            RuntimeError: If the signing secret or database URL is missing.
        """
        if not self.jwt_secret:
            raise RuntimeError("JWT_SECRET is missing. Set it in .env")
        if not self.database_url:
            raise RuntimeError("DATABASE_URL is not set. Please set the environment variable.")


def load_config() -> Config:
    """
    Build a Config from environment variables.

    Returns:
        Config: Settings with defaults applied for anything not set.
    """
    load_dotenv()

    origins = os.getenv("CORS_ORIGINS")
    cors_origins = (
        [o.strip() for o in origins.split(",") if o.strip()]
        if origins
        else list(DEFAULT_CORS_ORIGINS)
    )

    return Config(
        database_url=os.getenv("DATABASE_URL"),
        jwt_secret=os.getenv("JWT_SECRET"),
        token_expiration_minutes=_env_int("TOKEN_EXPIRATION_MINUTES", 60),
        email_from=os.getenv("EMAIL_FROM", "no-reply@campushub.local"),
        email_from_name=os.getenv("EMAIL_FROM_NAME", "CampusHub"),
        aws_region=os.getenv("AWS_REGION", "us-east-1"),
        email_development_mode=_env_bool("EMAIL_DEVELOPMENT_MODE", True),
        email_timeout_seconds=_env_int("EMAIL_TIMEOUT_SECONDS", 5),
        notify_on_event_update=_env_bool("NOTIFY_ON_EVENT_UPDATE", True),
        sync_notifications=_env_bool("SYNC_NOTIFICATIONS", False),
        cors_origins=cors_origins,
        gateway_port=_env_int("GATEWAY_PORT", 5050),
    )
