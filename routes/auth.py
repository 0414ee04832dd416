"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: routes/auth.py – маршруты аутентификации и управления учётной записью.

Назначение модуля:
- Регистрация по инвайт-коду с созданием аккаунта и API-ключа.
- Вход и выход из системы с использованием Flask-Login, учёт входов (счётчик, время, IP).
- Аутентификация API-клиентов по заголовку X-API-Key.
- Изменение профиля и восстановление пароля по ссылке из письма.
"""

from datetime import timedelta

from flask import current_app, jsonify, request
from flask_babel import gettext as _
from flask_login import current_user, login_required, login_user, logout_user
from sqlalchemy.exc import SQLAlchemyError

from extensions import db, login_manager
from models.user import User
from utils.errors import ValidationError
from utils.http import api_error, request_data, validation_error_response
from utils.rate_limit import get_client_identifier, is_rate_limited
from utils.reset_delivery import send_reset_password_instructions
from utils.validators import clean_text, normalize_email


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, str(user_id))


@login_manager.request_loader
def load_user_from_api_key(req):
    """Аутентификация API-клиента по ключу пользователя."""
    header = current_app.config.get("API_KEY_HEADER", "X-API-Key")
    api_key = (req.headers.get(header) or "").strip()
    if not api_key:
        return None
    return User.query.filter_by(api_key=api_key).first()


def _is_truthy(value) -> bool:
    if isinstance(value, bool):
        return value
    return clean_text(value).lower() in {"1", "true", "yes", "on"}


def _sign_in(user: User, remember: bool = False) -> None:
    login_user(user, remember=remember)
    user.track_sign_in(get_client_identifier())
    if remember:
        user.remember()
    db.session.commit()


def register_routes(app):
    @app.post("/users/new")
    def signup():
        """Регистрация нового пользователя (владельца нового аккаунта)."""
        if is_rate_limited("signup", limit=10, window_seconds=15 * 60):
            return api_error(_("Слишком много попыток регистрации. Попробуйте через несколько минут."), 429)

        provisioner = current_app.extensions["provisioner"]
        try:
            user = provisioner.create(request_data())
        except ValidationError as error:
            return validation_error_response(error)
        except SQLAlchemyError:
            current_app.logger.exception("Ошибка регистрации пользователя")
            return api_error(_("Внутренняя ошибка сервера"), 500)

        _sign_in(user)
        return (
            jsonify({"success": True, "user": user.to_dict(), "api_key": user.api_key}),
            201,
        )

    @app.post("/users/login")
    def login():
        data = request_data()
        email = normalize_email(data.get("email"))
        password = str(data.get("password") or "")

        if is_rate_limited("login_ip", limit=20, window_seconds=10 * 60):
            return api_error(_("Слишком много попыток входа. Попробуйте позже."), 429)

        if is_rate_limited(
            "login_user",
            limit=10,
            window_seconds=10 * 60,
            identity=email or "anonymous",
        ):
            return api_error(_("Слишком много попыток входа для этого пользователя. Попробуйте позже."), 429)

        user = User.query.filter_by(email=email).first() if email else None
        if user is None or not user.check_password(password):
            return api_error(_("Неверный email или пароль"), 401)

        _sign_in(user, remember=_is_truthy(data.get("remember_me")))
        current_app.logger.info("Пользователь %s вошёл в систему", user.id)
        return jsonify({"success": True, "user": user.to_dict()})

    @app.post("/users/logout")
    @login_required
    def logout():
        current_user.forget()
        db.session.commit()
        logout_user()
        return jsonify({"success": True})

    @app.get("/users/edit")
    @login_required
    def edit_registration():
        payload = current_user.to_dict()
        payload["api_key"] = current_user.api_key
        payload["account"] = current_user.account.to_dict()
        return jsonify({"success": True, "user": payload})

    @app.post("/users/edit")
    @login_required
    def update_registration():
        data = request_data()
        if not current_user.check_password(str(data.get("current_password") or "")):
            return validation_error_response(
                ValidationError({"current_password": [_("неверный текущий пароль")]})
            )

        provisioner = current_app.extensions["provisioner"]
        try:
            user = provisioner.update(current_user._get_current_object(), data)
        except ValidationError as error:
            return validation_error_response(error)
        except SQLAlchemyError:
            current_app.logger.exception("Ошибка изменения профиля")
            return api_error(_("Внутренняя ошибка сервера"), 500)

        return jsonify({"success": True, "user": user.to_dict()})

    @app.post("/users/password/new")
    def new_password():
        """Запрос ссылки для сброса пароля."""
        if is_rate_limited("forgot_password_ip", limit=8, window_seconds=15 * 60):
            return api_error(_("Слишком много запросов. Попробуйте позже."), 429)

        email = normalize_email(request_data().get("email"))
        if not email:
            return validation_error_response(ValidationError({"email": [_("не может быть пустым")]}))

        if is_rate_limited("forgot_password_email", limit=5, window_seconds=15 * 60, identity=email):
            return api_error(_("Слишком много запросов для этого email. Попробуйте позже."), 429)

        payload = {
            "success": True,
            # Не раскрываем, существует ли аккаунт с таким email.
            "message": _("Если email найден, инструкции по восстановлению отправлены."),
        }
        user = User.query.filter_by(email=email).first()
        if user is not None:
            raw_token = user.issue_reset_password_token()
            db.session.commit()
            sent = send_reset_password_instructions(user.email, raw_token)
            if not sent:
                current_app.logger.warning("Не удалось доставить инструкции по сбросу пароля для %s", user.id)
                if current_app.debug:
                    payload["reset_password_token"] = raw_token

        return jsonify(payload)

    @app.route("/users/password/edit", methods=["GET", "POST"])
    def edit_password():
        """Проверка токена (GET) и установка нового пароля (POST)."""
        if request.method == "GET":
            raw_token = clean_text(request.args.get("reset_password_token"))
        else:
            if is_rate_limited("reset_password_ip", limit=20, window_seconds=15 * 60):
                return api_error(_("Слишком много попыток сброса пароля. Попробуйте позже."), 429)
            data = request_data()
            raw_token = clean_text(data.get("reset_password_token"))

        user = None
        if raw_token:
            user = User.query.filter_by(reset_password_token=User.digest_token(raw_token)).first()
        within = timedelta(hours=current_app.config.get("RESET_PASSWORD_WITHIN_HOURS", 6))
        if user is None or not user.reset_password_period_valid(within):
            return validation_error_response(
                ValidationError({"reset_password_token": [_("недействителен или истёк")]})
            )

        if request.method == "GET":
            return jsonify({"success": True, "email": user.email})

        provisioner = current_app.extensions["provisioner"]
        try:
            provisioner.change_password(user, data.get("password"), data.get("password_confirmation"))
        except ValidationError as error:
            return validation_error_response(error)
        except SQLAlchemyError:
            current_app.logger.exception("Ошибка сброса пароля")
            return api_error(_("Внутренняя ошибка сервера"), 500)

        return jsonify({"success": True, "message": _("Пароль обновлён. Теперь вы можете войти с новым паролем.")})
