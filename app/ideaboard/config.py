import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str
    database_url: str
    app_url: str

    ideas_per_page: int
    comments_per_page: int

    mail_backend: str
    smtp_server: str
    smtp_port: int
    smtp_use_tls: bool
    smtp_username: str
    smtp_password: str
    mail_from: str

    notify_queue: str
    notify_workers: int


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _getenv_bool(name: str, default: bool) -> bool:
    raw = _getenv(name).lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        database_url=_getenv("DATABASE_URL", "sqlite:///ideaboard.db"),
        app_url=_getenv("APP_URL", "http://localhost:5000").rstrip("/"),
        ideas_per_page=max(1, _getenv_int("IDEAS_PER_PAGE", 10)),
        comments_per_page=max(1, _getenv_int("COMMENTS_PER_PAGE", 15)),
        mail_backend=_getenv("MAIL_BACKEND", "console").lower(),
        smtp_server=_getenv("SMTP_SERVER", ""),
        smtp_port=_getenv_int("SMTP_PORT", 587),
        smtp_use_tls=_getenv_bool("SMTP_USE_TLS", True),
        smtp_username=_getenv("SMTP_USERNAME", ""),
        smtp_password=_getenv("SMTP_PASSWORD", ""),
        mail_from=_getenv("MAIL_FROM", "ideas@example.com"),
        notify_queue=_getenv("NOTIFY_QUEUE", "thread").lower(),
        notify_workers=max(1, _getenv_int("NOTIFY_WORKERS", 4)),
    )


def load_config() -> dict:
    s = load_settings()
    is_production = s.env in ("prod", "production")
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "DATABASE_URL": s.database_url,
        "APP_URL": s.app_url,
        "IDEAS_PER_PAGE": s.ideas_per_page,
        "COMMENTS_PER_PAGE": s.comments_per_page,
        "MAIL_BACKEND": s.mail_backend,
        "SMTP_SERVER": s.smtp_server,
        "SMTP_PORT": s.smtp_port,
        "SMTP_USE_TLS": s.smtp_use_tls,
        "SMTP_USERNAME": s.smtp_username,
        "SMTP_PASSWORD": s.smtp_password,
        "MAIL_FROM": s.mail_from,
        "NOTIFY_QUEUE": s.notify_queue,
        "NOTIFY_WORKERS": s.notify_workers,
        # security defaults
        "SESSION_COOKIE_HTTPONLY": True,
        "SESSION_COOKIE_SAMESITE": "Lax",
        "SESSION_COOKIE_SECURE": is_production,  # Require HTTPS in production
    }
