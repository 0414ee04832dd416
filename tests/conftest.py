"""
Общие фикстуры тестов: приложение на in-memory SQLite, клиенты и фабрики пользователей.
"""

import os
import uuid

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest

from app import create_app
from config import Config
from extensions import db

INVITE_CODE = "WELCOME-1"
PASSWORD = "secret-pass"


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    CSRF_ENABLED = False
    RATE_LIMIT_ENABLED = False
    INVITE_CODES = frozenset({INVITE_CODE, "WELCOME-2"})
    DEFAULT_PLAN = "free"
    PLAN_LIMITS = {
        "free": {"uploads": 10, "invoices": 5, "projects": 3},
        "premium": {"uploads": 1000, "invoices": 500, "projects": 100},
    }
    SMTP_HOST = ""
    SMTP_FROM = ""


@pytest.fixture
def app():
    """Новое приложение и пустая база для каждого теста."""
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Контекст приложения для тестов моделей и сервисов (без HTTP-запросов)."""
    with app.app_context():
        yield app


@pytest.fixture
def provisioner(app):
    return app.extensions["provisioner"]


def make_attributes(**overrides) -> dict:
    attributes = {
        "email": f"user_{uuid.uuid4().hex[:8]}@example.com",
        "password": PASSWORD,
        "password_confirmation": PASSWORD,
        "first_name": "Ada",
        "last_name": "Lovelace",
        "invite_code": INVITE_CODE,
    }
    attributes.update(overrides)
    return attributes


@pytest.fixture
def attributes():
    """Фабрика корректных регистрационных данных с уникальным email."""
    return make_attributes


@pytest.fixture
def create_user(ctx, provisioner):
    """Создаёт пользователя через провижинер (нужен активный контекст приложения)."""

    def _create_user(**overrides):
        account = overrides.pop("account", None)
        role = overrides.pop("role", None)
        return provisioner.create(make_attributes(**overrides), account=account, role=role)

    return _create_user


@pytest.fixture
def signup(app):
    """Регистрирует пользователя через HTTP и возвращает (клиент с сессией, JSON ответа)."""

    def _signup(**overrides):
        client = app.test_client()
        response = client.post("/users/new", json=make_attributes(**overrides))
        assert response.status_code == 201, response.get_json()
        return client, response.get_json()

    return _signup


@pytest.fixture
def client_factory(app):
    """Новый HTTP-клиент без сессии (отдельный «браузер» на каждый вызов)."""
    return app.test_client
