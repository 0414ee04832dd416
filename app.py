"""
Название: «Baseapp»
Язык: Python (Flask)
Краткое описание: веб-приложение для управления проектами, клиентами, задачами, счетами и заявками
"""

import hmac
import os
import secrets

from flask import Flask, current_app, g, jsonify, request, session
from flask_babel import gettext as _
from werkzeug.exceptions import HTTPException

from config import Config
from extensions import db, login_manager, cors, babel
import models  # noqa: F401 - регистрирует модели для db.create_all()
from routes.auth import load_user_from_api_key, register_routes as register_auth_routes
from routes.pages import register_routes as register_page_routes
from routes.resources import register_routes as register_resource_routes
from utils.errors import ValidationError
from utils.http import api_error, validation_error_response
from utils.i18n import is_supported_language, resolve_request_language
from utils.plan_settings import PlanSettings
from utils.provisioning import UserProvisioner
from utils.rate_limit import InMemoryRateLimiter


def create_app(config_object=Config) -> Flask:
    """Фабрика приложения, собирающая все модули воедино."""
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Инициализация расширений
    db.init_app(app)
    login_manager.init_app(app)

    def select_locale() -> str:
        return getattr(g, "lang", app.config["DEFAULT_LANGUAGE"])

    babel.init_app(app, locale_selector=select_locale)

    if app.config["CORS_ENABLED"]:
        cors.init_app(
            app,
            resources={r"/*": {"origins": app.config["CORS_ORIGINS"]}},
            supports_credentials=True,
        )

    app.extensions["rate_limiter"] = InMemoryRateLimiter()
    plan_settings = PlanSettings(app.config["PLAN_LIMITS"])
    app.extensions["plan_settings"] = plan_settings
    # Инвайт-коды фиксируются при создании приложения
    app.extensions["provisioner"] = UserProvisioner(
        invite_codes=app.config["INVITE_CODES"],
        plan_settings=plan_settings,
        default_plan=app.config["DEFAULT_PLAN"],
        password_min_length=app.config["PASSWORD_MIN_LENGTH"],
        password_max_length=app.config["PASSWORD_MAX_LENGTH"],
    )
    if not plan_settings.has_plan(app.config["DEFAULT_PLAN"]):
        app.logger.warning("Тариф по умолчанию %s отсутствует в PLAN_LIMITS", app.config["DEFAULT_PLAN"])

    os.makedirs(app.instance_path, exist_ok=True)

    # Регистрация роутов по модулям
    register_page_routes(app)
    register_auth_routes(app)
    register_resource_routes(app)

    with app.app_context():
        # Создаем отсутствующие таблицы (без изменения существующих колонок)
        db.create_all()

    def _ensure_csrf_token() -> str:
        """Служебная функция `_ensure_csrf_token` для внутренней логики модуля."""
        token = session.get("csrf_token")
        if not token:
            token = secrets.token_urlsafe(32)
            session["csrf_token"] = token
        return token

    def _is_csrf_valid() -> bool:
        """Служебная функция `_is_csrf_valid` для внутренней логики модуля."""
        expected = session.get("csrf_token")
        data = request.get_json(silent=True)
        provided = request.headers.get("X-CSRF-Token") or request.form.get("csrf_token")
        if not provided and isinstance(data, dict):
            provided = data.get("csrf_token")
        if not expected or not isinstance(provided, str):
            return False
        return hmac.compare_digest(expected, provided)

    @login_manager.unauthorized_handler
    def handle_unauthorized():
        return api_error(_("Пожалуйста, войдите, чтобы получить доступ к этой странице."), 401)

    @app.before_request
    def resolve_request_language_middleware():
        g.lang = resolve_request_language(
            request=request,
            supported_languages=app.config["SUPPORTED_LANGUAGES"],
            cookie_name=app.config["LANG_COOKIE_NAME"],
            default_language=app.config["DEFAULT_LANGUAGE"],
        )

    @app.before_request
    def enforce_csrf():
        """Проверка CSRF-токена для изменяющих запросов с cookie-сессией."""
        if not current_app.config.get("CSRF_ENABLED", True):
            return None

        if request.method in {"GET", "HEAD", "OPTIONS", "TRACE"}:
            return None

        if request.endpoint in {"healthz"}:
            return None

        # Запросы с действующим API-ключом не используют cookie-сессию
        if load_user_from_api_key(request) is not None:
            return None

        if _is_csrf_valid():
            return None

        return api_error(_("Недействительный CSRF-токен. Обновите страницу и повторите попытку."), 400)

    @app.after_request
    def persist_lang_cookie(response):
        supported_languages: tuple[str, ...] = app.config["SUPPORTED_LANGUAGES"]
        request_lang = request.args.get("lang")

        if request_lang and is_supported_language(request_lang, supported_languages):
            request_lang = request_lang.strip().lower()
            cookie_name = app.config["LANG_COOKIE_NAME"]
            if request.cookies.get(cookie_name) != request_lang:
                response.set_cookie(
                    cookie_name,
                    request_lang,
                    max_age=app.config["LANG_COOKIE_MAX_AGE"],
                    secure=app.config["SESSION_COOKIE_SECURE"],
                    httponly=False,
                    samesite="Lax",
                    path="/",
                )

        return response

    @app.after_request
    def apply_security_headers(response):
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("Permissions-Policy", "camera=(), microphone=(), geolocation=()")
        return response

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        return validation_error_response(error)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"success": False, "error": error.description}), error.code

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    @app.get("/csrf-token")
    def csrf_token():
        """Выдаёт CSRF-токен текущей сессии для последующих POST-запросов."""
        return jsonify({"csrf_token": _ensure_csrf_token()})

    return app


app = create_app()


if __name__ == "__main__":
    is_production = os.environ.get("FLASK_ENV", "").lower() == "production"
    app.run(debug=not is_production)
