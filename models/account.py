"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: models/account.py – модель аккаунта (тарифный план и его участники).

Назначение модуля:
- Описание ORM-модели Account, к которой привязаны пользователи.
- Хранение тарифного плана, по которому определяются лимиты ресурсов.
"""

from datetime import datetime

from extensions import db
from utils.plan_settings import PlanSettings


class Account(db.Model):
    """Класс `Account` описывает сущность текущего модуля."""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=True)
    plan = db.Column(db.String(40), nullable=False, default="free")
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    users = db.relationship("User", back_populates="account", lazy=True)

    @property
    def owner(self):
        """Пользователь, создавший аккаунт при регистрации."""
        for user in self.users:
            if user.account_owner:
                return user
        return None

    def limit_for(self, resource, plan_settings: PlanSettings):
        """Лимит ресурса для текущего тарифа; промах по таблице обрабатывает PlanSettings."""
        return plan_settings.lookup(self.plan, resource)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "plan": self.plan,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
