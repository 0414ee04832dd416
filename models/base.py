"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: models/base.py – общие части моделей, принадлежащих пользователю.

Назначение модуля:
- Привязка записи к владельцу с каскадным удалением вместе с пользователем.
- Метки времени создания и изменения.
- Сериализация колонок модели в JSON-совместимый словарь.
"""

from datetime import date, datetime

from sqlalchemy import inspect
from sqlalchemy.orm import declared_attr

from extensions import db


class OwnedResourceMixin:
    """Запись живёт столько же, сколько пользователь-владелец."""

    # Поля, которые клиент может передавать при создании и изменении
    editable_fields = ()
    required_fields = ()
    # Нестроковые поля: int, float, bool или "date"
    field_types = {}
    choices = {}
    owned_references = {}
    min_values = {}
    max_values = {}

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
        index=True,
    )

    @declared_attr
    def user_id(cls):
        return db.Column(
            db.String(32),
            db.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )

    def to_dict(self) -> dict:
        data = {}
        for column in inspect(self).mapper.column_attrs:
            value = getattr(self, column.key)
            if isinstance(value, (datetime, date)):
                data[column.key] = value.isoformat()
            else:
                data[column.key] = value
        return data
