from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(name, default)


def _bool(name: str, default: str = "false") -> bool:
    return (_env(name, default) or "").strip().lower() in {"1", "true", "yes", "on"}


def _list(name: str) -> tuple[str, ...]:
    value = _env(name, "") or ""
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    postgres_dsn: str
    jwt_secret: str
    jwt_access_ttl_minutes: int
    jwt_refresh_ttl_days: int
    google_client_ids: tuple[str, ...]
    email_host: str
    email_port: int
    email_use_ssl: bool
    email_user: str
    email_password: str
    sender_email: str
    email_workers: int
    backend_public_url: str
    refresh_cookie_secure: bool
    cors_origins: tuple[str, ...]
    log_level: str


def get_settings() -> Settings:
    google_client_ids = tuple(
        client_id
        for client_id in (
            _env("GOOGLE_CLIENT_ID_WEB", ""),
            _env("GOOGLE_CLIENT_ID_ANDROID", ""),
            _env("GOOGLE_CLIENT_ID_IOS", ""),
        )
        if client_id
    )
    return Settings(
        postgres_dsn=_env("POSTGRES_DSN", ""),
        jwt_secret=_env("JWT_SECRET", ""),
        jwt_access_ttl_minutes=int(_env("JWT_ACCESS_TTL_MINUTES", "60")),
        jwt_refresh_ttl_days=int(_env("JWT_REFRESH_TTL_DAYS", "7")),
        google_client_ids=google_client_ids,
        email_host=_env("EMAIL_SERVICE_HOST", ""),
        email_port=int(_env("EMAIL_SERVICE_PORT", "587")),
        email_use_ssl=_bool("EMAIL_SERVICE_SECURE"),
        email_user=_env("EMAIL_AUTH_USER", ""),
        email_password=_env("EMAIL_AUTH_PASSWORD", ""),
        sender_email=_env("SENDER_EMAIL", ""),
        email_workers=int(_env("EMAIL_WORKERS", "2")),
        backend_public_url=_env("BACKEND_PUBLIC_URL", "http://localhost:3000"),
        refresh_cookie_secure=_bool("REFRESH_COOKIE_SECURE"),
        cors_origins=_list("CORS_ORIGINS") or ("*",),
        log_level=(_env("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
