"""
Модуль: `utils/http.py`.
Назначение: Общие помощники JSON-ответов и чтения тела запроса.
"""

from flask import jsonify, request

from utils.errors import ValidationError


def api_error(message: str, status: int = 400):
    return jsonify({"success": False, "error": message}), status


def validation_error_response(error: ValidationError, status: int = 422):
    return jsonify(error.to_dict()), status


def request_data():
    """Данные запроса: JSON-объект, если он передан, иначе поля формы."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form
