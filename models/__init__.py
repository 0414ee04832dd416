"""
Модуль: `models/__init__.py`.
Назначение: Импорт моделей для корректной регистрации в SQLAlchemy metadata.
"""

from .account import Account
from .project import Project
from .client import Client
from .upload import Upload
from .task import Task
from .invoice import Invoice
from .issue import Issue
from .user import User, Role, UPLOAD_LIMIT

__all__ = [
    "Account",
    "User",
    "Role",
    "UPLOAD_LIMIT",
    "Project",
    "Client",
    "Upload",
    "Task",
    "Invoice",
    "Issue",
]
