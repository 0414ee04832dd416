"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: models/invoice.py – модель выставленного счёта.
"""

from datetime import date

from extensions import db
from models.base import OwnedResourceMixin


class Invoice(OwnedResourceMixin, db.Model):
    """Класс `Invoice` описывает сущность текущего модуля."""
    number = db.Column(db.String(40), nullable=True)
    total = db.Column(db.Float, nullable=False, default=0.0)
    date = db.Column(db.Date, nullable=False, default=date.today, index=True)
    client_id = db.Column(db.Integer, db.ForeignKey("client.id", ondelete="SET NULL"), nullable=True)

    client = db.relationship("Client", back_populates="invoices")
