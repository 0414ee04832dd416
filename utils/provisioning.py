"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: utils/provisioning.py – создание пользователей и их аккаунтов.

Назначение модуля:
- Проверка регистрационной формы с накоплением всех ошибок по полям.
- Проверка инвайт-кода (только при создании пользователя).
- Создание аккаунта для нового владельца и выдача API-ключа в одной транзакции.
- Изменение профиля без повторного запуска шагов создания.
"""

from flask import current_app
from flask_babel import gettext as _
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from extensions import db
from models.account import Account
from models.user import Role, User
from utils.errors import ValidationError
from utils.plan_settings import Entitlement, PlanSettings
from utils.validators import clean_text, is_valid_email, normalize_email, password_length_error

PROFILE_FIELDS = ("first_name", "last_name", "email", "avatar_url")


class UserProvisioner:
    """Создаёт пользователей и отвечает на вопросы о лимитах их тарифа."""

    def __init__(
        self,
        invite_codes,
        plan_settings: PlanSettings,
        default_plan: str = "free",
        password_min_length: int = 6,
        password_max_length: int = 128,
    ):
        self.invite_codes = frozenset(clean_text(code) for code in invite_codes if clean_text(code))
        self.plan_settings = plan_settings
        self.default_plan = default_plan
        self.password_min_length = password_min_length
        self.password_max_length = password_max_length

    # ---- создание ----

    def create(self, attributes, account: Account | None = None, role=None) -> User:
        """Создаёт пользователя; при ошибках формы бросает ValidationError со всеми нарушениями."""
        data = self._extract(attributes)
        errors: dict[str, list[str]] = {}

        self._validate_profile(data, errors, password_required=True)
        self._validate_invite_code(data["invite_code"], errors)
        if errors:
            raise ValidationError(errors)

        user = User(
            email=data["email"],
            first_name=data["first_name"],
            last_name=data["last_name"],
            avatar_url=data["avatar_url"] or None,
            invite_code=data["invite_code"],
            role=(role.value if isinstance(role, Role) else role) or Role.ADMIN.value,
        )
        user.set_password(data["password"])

        if account is None:
            account = Account(plan=self.default_plan)
            db.session.add(account)
            user.account_owner = True
        user.account = account
        # Ключ строится на локальном идентификаторе, поэтому аккаунт, пользователь и ключ пишутся одним коммитом
        user.ensure_api_key()
        db.session.add(user)

        self._commit(user.email)
        current_app.logger.info(
            "Создан пользователь %s (аккаунт %s, владелец: %s)",
            user.id,
            account.id,
            user.account_owner,
        )
        return user

    # ---- изменение ----

    def update(self, user: User, attributes) -> User:
        """Меняет профиль; инвайт-код не проверяется и не перезаписывается."""
        data = self._extract(attributes, partial=True)
        merged = {field: getattr(user, field) or "" for field in PROFILE_FIELDS}
        merged.update({key: value for key, value in data.items() if key in PROFILE_FIELDS and value is not None})
        merged["password"] = data.get("password") or ""
        merged["password_confirmation"] = data.get("password_confirmation")

        errors: dict[str, list[str]] = {}
        self._validate_profile(merged, errors, password_required=False, user=user)
        if errors:
            raise ValidationError(errors)

        user.first_name = merged["first_name"]
        user.last_name = merged["last_name"]
        user.email = merged["email"]
        user.avatar_url = merged["avatar_url"] or None
        if merged["password"]:
            user.set_password(merged["password"])

        self._commit(user.email, exclude=user)
        current_app.logger.info("Профиль пользователя %s обновлён", user.id)
        return user

    def change_password(self, user: User, password, confirmation) -> User:
        """Новый пароль по токену сброса; токен после этого больше не действует."""
        password = str(password or "")
        confirmation = None if confirmation is None else str(confirmation)
        errors: dict[str, list[str]] = {}
        self._validate_password(password, confirmation, errors, required=True)
        if errors:
            raise ValidationError(errors)

        user.set_password(password)
        user.clear_reset_password_token()
        self._commit(user.email, exclude=user)
        current_app.logger.info("Пароль пользователя %s изменён", user.id)
        return user

    # ---- лимиты ----

    def check_entitlement(self, user: User, kind: Entitlement):
        return user.check_entitlement(kind, self.plan_settings)

    def is_valid_invite_code(self, code: str | None) -> bool:
        return clean_text(code) in self.invite_codes

    # ---- служебное ----

    def _extract(self, attributes, partial: bool = False) -> dict:
        attributes = attributes or {}
        data = {}
        for field in ("first_name", "last_name", "avatar_url", "invite_code"):
            if partial and field not in attributes:
                continue
            data[field] = clean_text(attributes.get(field))
        if not partial or "email" in attributes:
            data["email"] = normalize_email(attributes.get("email"))
        data["password"] = str(attributes.get("password") or "")
        confirmation = attributes.get("password_confirmation")
        data["password_confirmation"] = None if confirmation is None else str(confirmation)
        return data

    def _validate_profile(self, data: dict, errors: dict, password_required: bool, user: User | None = None):
        blank = _("не может быть пустым")
        for field in ("email", "first_name", "last_name"):
            if not data.get(field):
                errors.setdefault(field, []).append(blank)
        email = data.get("email")
        if email:
            if not is_valid_email(email):
                errors.setdefault("email", []).append(_("имеет неверный формат"))
            elif self._email_taken(email, exclude=user):
                errors.setdefault("email", []).append(_("уже используется"))

        self._validate_password(data["password"], data.get("password_confirmation"), errors, password_required)

    def _validate_password(self, password: str, confirmation: str | None, errors: dict, required: bool) -> None:
        if not password:
            if required:
                errors.setdefault("password", []).append(_("не может быть пустым"))
            return
        length_error = password_length_error(password, self.password_min_length, self.password_max_length)
        if length_error:
            errors.setdefault("password", []).append(length_error)
        if confirmation is not None and confirmation != password:
            errors.setdefault("password_confirmation", []).append(_("не совпадает с паролем"))

    def _validate_invite_code(self, code: str, errors: dict) -> None:
        if not code:
            errors.setdefault("invite_code", []).append(_("не может быть пустым"))
        elif code not in self.invite_codes:
            errors.setdefault("invite_code", []).append(_("недействителен"))

    def _email_taken(self, email: str, exclude: User | None = None) -> bool:
        query = User.query.filter(User.email == email)
        if exclude is not None and exclude.id:
            query = query.filter(User.id != exclude.id)
        return db.session.query(query.exists()).scalar()

    def _commit(self, email: str, exclude: User | None = None) -> None:
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            # Гонка за уникальный email решается ограничением в базе
            if self._email_taken(email, exclude=exclude):
                raise ValidationError({"email": [_("уже используется")]}) from None
            raise
        except SQLAlchemyError:
            db.session.rollback()
            raise
