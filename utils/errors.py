"""
Модуль: `utils/errors.py`.
Назначение: Исключения предметной области, которые маршруты превращают в JSON-ответы.
"""


class ValidationError(Exception):
    """Ошибки валидации, сгруппированные по полям формы."""

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = {field: list(messages) for field, messages in errors.items()}
        super().__init__(self._summary())

    def _summary(self) -> str:
        parts = [f"{field}: {'; '.join(messages)}" for field, messages in self.errors.items()]
        return ", ".join(parts) or "validation failed"

    def __contains__(self, field: str) -> bool:
        return field in self.errors

    def to_dict(self) -> dict:
        return {"success": False, "errors": self.errors}


class UnknownPlanLimitError(LookupError):
    """Для пары (тариф, ресурс) лимит не настроен."""

    def __init__(self, plan: str, resource: str):
        self.plan = plan
        self.resource = resource
        super().__init__(f"No limit configured for plan {plan!r} and resource {resource!r}")
