"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: models/issue.py – модель заявки (issue) в трекере пользователя.
"""

from extensions import db
from models.base import OwnedResourceMixin

ISSUE_STATUSES = ("open", "closed")


class Issue(OwnedResourceMixin, db.Model):
    """Класс `Issue` описывает сущность текущего модуля."""
    editable_fields = ("title", "description", "status")
    required_fields = ("title",)
    choices = {"status": ISSUE_STATUSES}

    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(20), nullable=False, default="open")
