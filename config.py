"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: config.py – конфигурация приложения.

Назначение модуля:
- Определение базовых параметров приложения Flask (секретный ключ, строка подключения к БД).
- Список инвайт-кодов, допускающих регистрацию, и лимиты тарифных планов.
- Параметры восстановления пароля, SMTP и локализации.
"""

import json
import os
import warnings


def _get_env_bool(name: str, default: bool = False) -> bool:
    """Преобразует переменную окружения в bool."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_env_int(name: str, default: int) -> int:
    """Преобразует переменную окружения в int."""
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str] | None = None) -> list[str]:
    """Преобразует переменную окружения вида 'a,b,c' в список."""
    value = os.environ.get(name)
    if value is None:
        return list(default or [])
    return [item.strip() for item in value.split(",") if item.strip()]


def _get_env_json(name: str, default: dict) -> dict:
    """Читает JSON-объект из переменной окружения."""
    value = os.environ.get(name)
    if not value:
        return default
    try:
        parsed = json.loads(value)
    except ValueError:
        return default
    return parsed if isinstance(parsed, dict) else default


def _is_production() -> bool:
    """Определяет production-режим по FLASK_ENV."""
    return os.environ.get("FLASK_ENV", "").strip().lower() == "production"


class Config:
    """Базовая конфигурация приложения."""

    _PRODUCTION = _is_production()

    SECRET_KEY = os.environ.get("SECRET_KEY")
    if not SECRET_KEY:
        if _PRODUCTION:
            raise RuntimeError(
                "SECRET_KEY environment variable is required in production. "
                "Set a strong random value before starting the app."
            )
        SECRET_KEY = "dev-insecure-secret-key"
        warnings.warn(
            "SECRET_KEY is not set. Using insecure development fallback key.",
            RuntimeWarning,
            stacklevel=1,
        )

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL",
        "sqlite:////app/instance/baseapp.db" if _PRODUCTION else "sqlite:///baseapp.db",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SESSION_COOKIE_SECURE = _get_env_bool("SESSION_COOKIE_SECURE", default=_PRODUCTION)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.environ.get("SESSION_COOKIE_SAMESITE", "Lax")
    REMEMBER_COOKIE_SECURE = SESSION_COOKIE_SECURE
    REMEMBER_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_SAMESITE = SESSION_COOKIE_SAMESITE

    CORS_ENABLED = _get_env_bool("CORS_ENABLED", default=False)
    CORS_ORIGINS = _get_env_list(
        "CORS_ORIGINS",
        default=[
            "http://127.0.0.1:5000",
            "http://localhost:5000",
        ],
    )
    CSRF_ENABLED = _get_env_bool("CSRF_ENABLED", default=True)
    API_KEY_HEADER = "X-API-Key"
    RATE_LIMIT_ENABLED = _get_env_bool("RATE_LIMIT_ENABLED", default=True)

    # Инвайт-коды читаются один раз при старте и дальше не меняются
    INVITE_CODES = frozenset(_get_env_list("INVITE_CODES", default=["BASEAPP-BETA"]))

    DEFAULT_PLAN = os.environ.get("DEFAULT_PLAN", "free").strip() or "free"
    PLAN_LIMITS = _get_env_json(
        "PLAN_LIMITS_JSON",
        default={
            "free": {"uploads": 10, "invoices": 5, "projects": 3},
            "basic": {"uploads": 100, "invoices": 50, "projects": 15},
            "premium": {"uploads": 1000, "invoices": 500, "projects": 100},
        },
    )

    PASSWORD_MIN_LENGTH = _get_env_int("PASSWORD_MIN_LENGTH", 6)
    PASSWORD_MAX_LENGTH = 128
    RESET_PASSWORD_WITHIN_HOURS = _get_env_int("RESET_PASSWORD_WITHIN_HOURS", 6)

    SMTP_HOST = os.environ.get("SMTP_HOST", "").strip()
    SMTP_PORT = _get_env_int("SMTP_PORT", 587)
    SMTP_USER = os.environ.get("SMTP_USER", "").strip()
    SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD", "")
    SMTP_FROM = os.environ.get("SMTP_FROM", "").strip()
    SMTP_USE_TLS = _get_env_bool("SMTP_USE_TLS", default=True)
    SMTP_USE_SSL = _get_env_bool("SMTP_USE_SSL", default=False)

    SUPPORTED_LANGUAGES = ("ru", "en")
    DEFAULT_LANGUAGE = os.environ.get("DEFAULT_LANGUAGE", "en").strip().lower() or "en"
    LANG_COOKIE_NAME = os.environ.get("LANG_COOKIE_NAME", "site_lang").strip() or "site_lang"
    LANG_COOKIE_MAX_AGE = _get_env_int("LANG_COOKIE_MAX_AGE", 31536000)
