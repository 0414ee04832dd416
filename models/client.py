"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: models/client.py – модель клиента (заказчика) пользователя.
"""

from extensions import db
from models.base import OwnedResourceMixin


class Client(OwnedResourceMixin, db.Model):
    """Класс `Client` описывает сущность текущего модуля."""
    editable_fields = ("name", "email", "company", "phone")
    required_fields = ("name",)

    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(254), nullable=True)
    company = db.Column(db.String(200), nullable=True)
    phone = db.Column(db.String(20), nullable=True)

    invoices = db.relationship("Invoice", back_populates="client", lazy=True)
