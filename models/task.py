"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: models/task.py – модель задачи.
"""

from extensions import db
from models.base import OwnedResourceMixin
from models.project import Project


class Task(OwnedResourceMixin, db.Model):
    """Класс `Task` описывает сущность текущего модуля."""
    editable_fields = ("title", "notes", "done", "due_date", "project_id")
    required_fields = ("title",)
    field_types = {"done": bool, "due_date": "date", "project_id": int}
    # Ссылки на другие ресурсы того же владельца
    owned_references = {"project_id": Project}

    title = db.Column(db.String(200), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    done = db.Column(db.Boolean, nullable=False, default=False)
    due_date = db.Column(db.Date, nullable=True)
    project_id = db.Column(db.Integer, db.ForeignKey("project.id", ondelete="SET NULL"), nullable=True)

    project = db.relationship("Project", back_populates="tasks")
