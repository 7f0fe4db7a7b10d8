from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    secret_key: str
    database_url: str = "sqlite:///./blinky.db"
    jwt_algorithm: str = "HS256"
    resend_api_key: str = ""
    resend_from: str = "Blinky <onboarding@resend.dev>"
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)
    auto_migrate: bool = True
    log_level: str = "INFO"


def _as_bool(x: str | None, default: bool = False) -> bool:
    if x is None:
        return default
    return x.strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> Settings:
    """Read settings from the environment (and ``.env`` when present).

    ``SECRET_KEY`` is a startup precondition: without it no session token can
    be signed, so we refuse to build the app at all.
    """
    load_dotenv()

    secret_key = os.getenv("SECRET_KEY", "").strip()
    if not secret_key:
        raise RuntimeError("SECRET_KEY is not set")

    origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    return Settings(
        secret_key=secret_key,
        database_url=os.getenv("DATABASE_URL", "sqlite:///./blinky.db").strip(),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256").strip(),
        resend_api_key=os.getenv("RESEND_API_KEY", "").strip(),
        resend_from=os.getenv("RESEND_FROM", "Blinky <onboarding@resend.dev>").strip(),
        cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
        auto_migrate=_as_bool(os.getenv("AUTO_MIGRATE"), default=True),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
