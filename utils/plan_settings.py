"""
Модуль: `utils/plan_settings.py`.
Назначение: Таблица лимитов тарифных планов (тариф, ресурс) -> значение.
"""

from enum import Enum
from types import MappingProxyType

from utils.errors import UnknownPlanLimitError


class Entitlement(Enum):
    """Ресурсы, для которых тарифный план задаёт ограничения."""

    UPLOADS = "uploads"
    INVOICES = "invoices"
    PROJECTS = "projects"


class PlanSettings:
    """Неизменяемая таблица лимитов, собранная из конфигурации при старте."""

    def __init__(self, limits: dict[str, dict[str, object]]):
        self._limits = MappingProxyType(
            {plan: MappingProxyType(dict(values)) for plan, values in (limits or {}).items()}
        )

    @property
    def plans(self) -> tuple[str, ...]:
        return tuple(self._limits)

    def lookup(self, plan: str, resource: str | Entitlement):
        """Возвращает лимит как есть; неизвестная пара приводит к UnknownPlanLimitError."""
        if isinstance(resource, Entitlement):
            resource = resource.value
        try:
            return self._limits[plan][resource]
        except KeyError:
            raise UnknownPlanLimitError(plan, resource) from None

    def has_plan(self, plan: str) -> bool:
        return plan in self._limits
