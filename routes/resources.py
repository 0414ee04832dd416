"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: routes/resources.py – REST-маршруты ресурсов пользователя.

Назначение модуля:
- CRUD для проектов, заявок, загрузок, клиентов и задач текущего пользователя.
- Проверка лимита хранилища и лимита проектов тарифа перед созданием.
- Публичная ссылка на загрузку пользователя (share).
"""

from datetime import date

from flask import current_app, jsonify
from flask_babel import gettext as _
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models.client import Client
from models.issue import Issue
from models.project import Project
from models.task import Task
from models.upload import Upload
from utils.errors import UnknownPlanLimitError, ValidationError
from utils.http import api_error, request_data, validation_error_response
from utils.plan_settings import Entitlement
from utils.validators import clean_text

RESOURCES = (
    ("projects", Project),
    ("issues", Issue),
    ("uploads", Upload),
    ("clients", Client),
    ("tasks", Task),
)


def _coerce(kind, raw):
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if kind is None:
        return clean_text(raw)
    if kind is bool:
        if isinstance(raw, bool):
            return raw
        return clean_text(raw).lower() in {"1", "true", "yes", "on"}
    if kind is int:
        if isinstance(raw, bool):
            raise ValueError(raw)
        # Дробная часть не отбрасывается молча
        if isinstance(raw, float) and not raw.is_integer():
            raise ValueError(raw)
        return int(raw)
    if kind is float:
        return float(raw)
    if kind == "date":
        return date.fromisoformat(clean_text(raw))
    raise ValueError(kind)


def _collect_values(model_cls, data, record=None) -> dict:
    """Разбирает поля запроса; все ошибки собираются и выбрасываются одним ValidationError."""
    errors: dict[str, list[str]] = {}
    values = {}
    table = model_cls.__table__

    for field in model_cls.editable_fields:
        if field not in data:
            continue
        try:
            value = _coerce(model_cls.field_types.get(field), data.get(field))
        except (TypeError, ValueError):
            errors.setdefault(field, []).append(_("имеет неверный формат"))
            continue
        if value is None and not table.c[field].nullable and field not in model_cls.required_fields:
            # Пустое значение для поля со значением по умолчанию
            continue
        values[field] = value

    for field in model_cls.required_fields:
        current = values[field] if field in values else getattr(record, field, None)
        if current is None or current == "":
            errors.setdefault(field, []).append(_("не может быть пустым"))

    for field, allowed in model_cls.choices.items():
        if values.get(field) is not None and values[field] not in allowed:
            errors.setdefault(field, []).append(_("недопустимое значение"))

    for field, minimum in model_cls.min_values.items():
        if values.get(field) is not None and values[field] < minimum:
            errors.setdefault(field, []).append(_("не может быть меньше %(min)s", min=minimum))

    for field, maximum in model_cls.max_values.items():
        if values.get(field) is not None and values[field] > maximum:
            errors.setdefault(field, []).append(_("не может быть больше %(max)s", max=maximum))

    for field, ref_cls in model_cls.owned_references.items():
        ref_id = values.get(field)
        if ref_id is not None and ref_cls.query.filter_by(id=ref_id, user_id=current_user.id).first() is None:
            errors.setdefault(field, []).append(_("не найден"))

    if errors:
        raise ValidationError(errors)
    return values


def _guard_upload_quota(user):
    if user.upload_limit_reached:
        return api_error(_("Превышен допустимый объём загруженных файлов"), 403)
    return None


def _guard_project_limit(user):
    provisioner = current_app.extensions["provisioner"]
    try:
        limit = provisioner.check_entitlement(user, Entitlement.PROJECTS)
    except UnknownPlanLimitError:
        current_app.logger.warning("Лимит проектов не настроен для тарифа %s", user.account.plan)
        return None
    if isinstance(limit, bool) or not isinstance(limit, (int, float)):
        return None
    if user.project_count >= limit:
        return api_error(_("Достигнут лимит проектов для вашего тарифа"), 403)
    return None


CREATE_GUARDS = {
    "uploads": _guard_upload_quota,
    "projects": _guard_project_limit,
}


def _register_resource(app, name: str, model_cls):
    def _owned_query():
        return model_cls.query.filter_by(user_id=current_user.id)

    def _find_or_404(record_id: int):
        return _owned_query().filter_by(id=record_id).first_or_404()

    @login_required
    def index():
        records = _owned_query().order_by(model_cls.id).all()
        return jsonify({"success": True, name: [record.to_dict() for record in records]})

    @login_required
    def create():
        guard = CREATE_GUARDS.get(name)
        if guard is not None:
            refused = guard(current_user._get_current_object())
            if refused is not None:
                return refused

        try:
            values = _collect_values(model_cls, request_data())
            record = model_cls(user_id=current_user.id, **values)
            db.session.add(record)
            db.session.commit()
        except ValidationError as error:
            return validation_error_response(error)
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception("Ошибка создания записи %s", name)
            return api_error(_("Внутренняя ошибка сервера"), 500)

        return jsonify({"success": True, "record": record.to_dict()}), 201

    @login_required
    def show(record_id: int):
        return jsonify({"success": True, "record": _find_or_404(record_id).to_dict()})

    @login_required
    def update(record_id: int):
        record = _find_or_404(record_id)
        try:
            values = _collect_values(model_cls, request_data(), record=record)
            for field, value in values.items():
                setattr(record, field, value)
            db.session.commit()
        except ValidationError as error:
            return validation_error_response(error)
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception("Ошибка изменения записи %s #%s", name, record_id)
            return api_error(_("Внутренняя ошибка сервера"), 500)

        return jsonify({"success": True, "record": record.to_dict()})

    @login_required
    def destroy(record_id: int):
        record = _find_or_404(record_id)
        try:
            db.session.delete(record)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.exception("Ошибка удаления записи %s #%s", name, record_id)
            return api_error(_("Внутренняя ошибка сервера"), 500)

        return jsonify({"success": True})

    app.add_url_rule(f"/{name}", f"{name}_index", index, methods=["GET"])
    app.add_url_rule(f"/{name}", f"{name}_create", create, methods=["POST"])
    app.add_url_rule(f"/{name}/<int:record_id>", f"{name}_show", show, methods=["GET"])
    app.add_url_rule(
        f"/{name}/<int:record_id>",
        f"{name}_update",
        update,
        methods=["POST", "PUT", "PATCH"],
    )
    app.add_url_rule(f"/{name}/<int:record_id>", f"{name}_destroy", destroy, methods=["DELETE"])


def register_routes(app):
    for name, model_cls in RESOURCES:
        _register_resource(app, name, model_cls)

    @app.get("/uploads/<user_id>/share/<int:upload_id>")
    def share_upload(user_id: str, upload_id: int):
        """Публичная ссылка на файл: владелец и идентификатор загрузки."""
        upload = Upload.query.filter_by(id=upload_id, user_id=user_id).first_or_404()
        return jsonify({"success": True, "upload": upload.share_dict()})
