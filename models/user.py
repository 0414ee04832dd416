"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: models/user.py – модель пользователя системы.

Назначение модуля:
- Описание ORM-модели User: учётные данные, служебные поля входа и восстановления пароля.
- Владение проектами, клиентами, загрузками, задачами, счетами и заявками (удаляются вместе с пользователем).
- Производные значения: полное имя, роли, первый вход, суммы счетов, лимит загрузок, лимиты тарифа.
- Однократная выдача API-ключа перед первой записью в базу.
"""

import calendar
import hashlib
import secrets
import uuid
from datetime import date, datetime, timedelta
from enum import Enum

from flask_login import UserMixin
from sqlalchemy import event, func, select
from werkzeug.security import check_password_hash, generate_password_hash

from extensions import db
from models.invoice import Invoice
from models.project import Project
from models.upload import Upload
from utils.plan_settings import Entitlement, PlanSettings

# Общий объём файлов пользователя, байты
UPLOAD_LIMIT = 11_000_000
RECENT_PROJECTS_WINDOW = timedelta(weeks=2)
MONTH_LABEL_FORMATS = ("%Y-%m", "%Y-%m-%d", "%B %Y", "%b %Y", "%m/%Y")


class Role(Enum):
    """Фиксированный набор ролей пользователя."""

    ADMIN = "admin"
    CLIENT = "client"
    COLLABORATOR = "collaborator"


def new_user_id() -> str:
    """Идентификатор пользователя генерируется локально, до первой записи."""
    return uuid.uuid4().hex


def generate_api_key(identifier: str) -> str:
    """API-ключ: идентификатор + 10 символов SHA-1 (позиции 1..10) от времени и случайного числа."""
    seed = f"{datetime.utcnow().isoformat()}{secrets.randbelow(12345678)}"
    fragment = hashlib.sha1(seed.encode("utf-8")).hexdigest()[1:11]
    return f"{identifier}{fragment}"


def parse_month_label(label) -> date:
    """Первое число месяца, заданного строкой вида 2024-03, 2024-03-15 или March 2024."""
    if isinstance(label, datetime):
        return label.date().replace(day=1)
    if isinstance(label, date):
        return label.replace(day=1)

    text = (label or "").strip()
    for fmt in MONTH_LABEL_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().replace(day=1)
        except ValueError:
            continue
    raise ValueError(f"Unrecognised month label: {label!r}")


def _owned_collection(model_name: str):
    return db.relationship(
        model_name,
        lazy="dynamic",
        cascade="all, delete-orphan",
        order_by=f"{model_name}.id",
    )


class User(UserMixin, db.Model):
    """Класс `User` описывает сущность текущего модуля."""
    id = db.Column(db.String(32), primary_key=True, default=new_user_id)

    # Учётные данные
    email = db.Column(db.String(254), unique=True, nullable=False, index=True)
    encrypted_password = db.Column(db.String(255), nullable=False)

    # Восстановление пароля (хранится только SHA-256 от токена)
    reset_password_token = db.Column(db.String(64), unique=True, nullable=True, index=True)
    reset_password_sent_at = db.Column(db.DateTime, nullable=True)

    # Запоминание входа
    remember_created_at = db.Column(db.DateTime, nullable=True)

    # Отслеживание входов
    sign_in_count = db.Column(db.Integer, nullable=False, default=0)
    current_sign_in_at = db.Column(db.DateTime, nullable=True)
    last_sign_in_at = db.Column(db.DateTime, nullable=True)
    current_sign_in_ip = db.Column(db.String(45), nullable=True)
    last_sign_in_ip = db.Column(db.String(45), nullable=True)

    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    avatar_url = db.Column(db.String(1024), nullable=True)
    # Неизвестные роли не отклоняются, для них просто нет предиката
    role = db.Column(db.String(20), nullable=False, default=Role.ADMIN.value)
    # Ключ не уникален на уровне схемы: коллизия маловероятна и не проверяется
    api_key = db.Column(db.String(64), nullable=True, index=True)
    invite_code = db.Column(db.String(64), nullable=True)
    account_owner = db.Column(db.Boolean, nullable=False, default=False)

    account_id = db.Column(db.Integer, db.ForeignKey("account.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    account = db.relationship("Account", back_populates="users")

    projects = _owned_collection("Project")
    clients = _owned_collection("Client")
    uploads = _owned_collection("Upload")
    tasks = _owned_collection("Task")
    invoices = _owned_collection("Invoice")
    issues = _owned_collection("Issue")

    # ---- пароль и служебные поля входа ----

    def set_password(self, password: str) -> None:
        self.encrypted_password = generate_password_hash(password, method="scrypt")

    def check_password(self, password: str) -> bool:
        if not self.encrypted_password or password is None:
            return False
        return check_password_hash(self.encrypted_password, password)

    def ensure_api_key(self) -> None:
        """Назначает идентификатор и API-ключ, если их ещё нет; существующий ключ не меняется."""
        if not self.id:
            self.id = new_user_id()
        if not self.api_key:
            self.api_key = generate_api_key(self.id)

    def track_sign_in(self, ip: str | None, now: datetime | None = None) -> None:
        """Обновляет счётчик, время и IP входа (предыдущие значения уходят в last_*)."""
        now = now or datetime.utcnow()
        self.last_sign_in_at = self.current_sign_in_at or now
        self.current_sign_in_at = now
        self.last_sign_in_ip = self.current_sign_in_ip or ip
        self.current_sign_in_ip = ip
        self.sign_in_count = (self.sign_in_count or 0) + 1

    def remember(self, now: datetime | None = None) -> None:
        if self.remember_created_at is None:
            self.remember_created_at = now or datetime.utcnow()

    def forget(self) -> None:
        self.remember_created_at = None

    def issue_reset_password_token(self, now: datetime | None = None) -> str:
        """Возвращает токен в открытом виде; в базе остаётся только его хеш."""
        raw_token = secrets.token_urlsafe(32)
        self.reset_password_token = self.digest_token(raw_token)
        self.reset_password_sent_at = now or datetime.utcnow()
        return raw_token

    def reset_password_period_valid(self, within: timedelta, now: datetime | None = None) -> bool:
        if self.reset_password_sent_at is None:
            return False
        now = now or datetime.utcnow()
        return now - self.reset_password_sent_at < within

    def clear_reset_password_token(self) -> None:
        self.reset_password_token = None
        self.reset_password_sent_at = None

    @staticmethod
    def digest_token(raw_token: str) -> str:
        return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()

    # ---- производные значения ----

    @property
    def full_name(self) -> str:
        """Полное имя: имя и фамилия через один пробел, даже если одно из них пустое."""
        return f"{self.first_name or ''} {self.last_name or ''}"

    name = full_name

    def is_role(self, role) -> bool:
        """Точное сравнение с учётом регистра."""
        value = role.value if isinstance(role, Role) else role
        return self.role == value

    @property
    def is_admin(self) -> bool:
        # В отличие от is_role, регистр здесь не важен
        return (self.role or "").lower() == Role.ADMIN.value

    @property
    def is_client(self) -> bool:
        return self.is_role(Role.CLIENT)

    @property
    def is_collaborator(self) -> bool:
        return self.is_role(Role.COLLABORATOR)

    @property
    def project_count(self) -> int:
        return self.projects.count()

    number_of_projects = project_count

    @property
    def is_first_login(self) -> bool:
        """Первый вход и ещё нет ни проектов, ни клиентов, ни задач."""
        total = (
            (self.sign_in_count or 0)
            + (self.projects.count() or 0)
            + (self.clients.count() or 0)
            + (self.tasks.count() or 0)
        )
        return total == 1

    @property
    def recent_projects(self):
        """Проекты, изменённые за последние две недели (запрос можно итерировать повторно)."""
        cutoff = datetime.utcnow() - RECENT_PROJECTS_WINDOW
        return self.projects.filter(Project.updated_at > cutoff)

    def _sum_owned(self, column, *criteria) -> float:
        stmt = (
            select(func.coalesce(func.sum(column), 0))
            .where(column.class_.user_id == self.id, *criteria)
        )
        return db.session.scalar(stmt) or 0

    @property
    def invoice_total(self) -> float:
        return float(self._sum_owned(Invoice.total))

    def invoiced_amount_for_month(self, month_label) -> float:
        """Сумма счетов, датированных с первого по последнее число указанного месяца включительно."""
        start = parse_month_label(month_label)
        last_day = calendar.monthrange(start.year, start.month)[1]
        end = start.replace(day=last_day)
        return float(self._sum_owned(Invoice.total, Invoice.date >= start, Invoice.date <= end))

    @property
    def uploaded_bytes(self) -> int:
        return int(self._sum_owned(Upload.file_size))

    @property
    def upload_limit_reached(self) -> bool:
        return self.uploaded_bytes > UPLOAD_LIMIT

    def check_entitlement(self, kind: Entitlement, plan_settings: PlanSettings):
        """Значение лимита из тарифа аккаунта; результат не интерпретируется."""
        return self.account.limit_for(Entitlement(kind), plan_settings)

    def upload_limit(self, plan_settings: PlanSettings):
        return self.check_entitlement(Entitlement.UPLOADS, plan_settings)

    def invoice_limit(self, plan_settings: PlanSettings):
        return self.check_entitlement(Entitlement.INVOICES, plan_settings)

    def project_limit(self, plan_settings: PlanSettings):
        return self.check_entitlement(Entitlement.PROJECTS, plan_settings)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "avatar_url": self.avatar_url,
            "role": self.role,
            "account_id": self.account_id,
            "account_owner": self.account_owner,
            "sign_in_count": self.sign_in_count or 0,
        }


@event.listens_for(User, "before_insert")
def _assign_api_key(mapper, connection, target):
    """Ключ выдаётся перед первой записью и больше не пересчитывается."""
    target.ensure_api_key()
