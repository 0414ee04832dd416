"""
Модуль: `utils/validators.py`.
Назначение: Нормализация и проверка email, имён и паролей пользователей.
"""

import re

from flask_babel import gettext as _


EMAIL_RE = re.compile(r"^[A-Z0-9._%-]+@[A-Z0-9.-]+\.[A-Z]{2,4}$", re.IGNORECASE)


def normalize_email(value: str | None) -> str:
    """Обрезает пробелы и приводит email к нижнему регистру, не проверяя формат."""
    return clean_text(value).lower()


def is_valid_email(value: str | None) -> bool:
    if not value:
        return False
    return EMAIL_RE.fullmatch(value) is not None


def clean_text(value) -> str:
    """Служебная функция `clean_text`: строка без крайних пробелов или пустая строка."""
    if value is None:
        return ""
    return str(value).strip()


def password_length_error(password: str, min_length: int, max_length: int) -> str | None:
    if not (min_length <= len(password) <= max_length):
        return _(
            "Пароль должен содержать от %(min)s до %(max)s символов.",
            min=min_length,
            max=max_length,
        )
    return None
