"""
Программа: «Baseapp» – веб-приложение для управления проектами.
Модуль: models/upload.py – модель загруженного файла.

Назначение модуля:
- Описание ORM-модели Upload для учёта файлов пользователя.
- Размер файла участвует в проверке общего лимита хранилища.
- Сам файл хранится вне приложения, здесь только его метаданные.
"""

from extensions import db
from models.base import OwnedResourceMixin


class Upload(OwnedResourceMixin, db.Model):
    """Класс `Upload` описывает сущность текущего модуля."""
    editable_fields = ("file_name", "file_size", "content_type", "file_url")
    required_fields = ("file_name",)
    field_types = {"file_size": int}
    min_values = {"file_size": 0}
    # Верхняя граница знакового 64-битного INTEGER
    max_values = {"file_size": 2**63 - 1}

    file_name = db.Column(db.String(255), nullable=False)
    # Размер в байтах
    file_size = db.Column(db.Integer, nullable=False, default=0)
    content_type = db.Column(db.String(120), nullable=True)
    file_url = db.Column(db.String(1024), nullable=True)

    def share_dict(self) -> dict:
        """Публичное представление для ссылки «поделиться»."""
        return {
            "id": self.id,
            "file_name": self.file_name,
            "file_size": self.file_size,
            "content_type": self.content_type,
            "file_url": self.file_url,
        }
