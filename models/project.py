"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: models/project.py – модель проекта пользователя.
"""

from extensions import db
from models.base import OwnedResourceMixin


class Project(OwnedResourceMixin, db.Model):
    """Класс `Project` описывает сущность текущего модуля."""
    editable_fields = ("name", "description")
    required_fields = ("name",)

    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)

    tasks = db.relationship("Task", back_populates="project", lazy=True)
