"""
Тесты таблицы лимитов тарифов.
"""
import pytest

from utils.errors import UnknownPlanLimitError
from utils.plan_settings import Entitlement, PlanSettings


@pytest.fixture
def settings():
    return PlanSettings(
        {
            "free": {"uploads": 10, "invoices": 5, "projects": 3, "reports": False},
            "premium": {"uploads": 1000},
        }
    )


class TestLookup:
    """lookup(plan, resource) возвращает значение как есть."""

    def test_lookup_by_name(self, settings):
        assert settings.lookup("free", "projects") == 3

    def test_lookup_by_entitlement(self, settings):
        assert settings.lookup("premium", Entitlement.UPLOADS) == 1000

    def test_non_numeric_values_are_returned_untouched(self, settings):
        assert settings.lookup("free", "reports") is False

    def test_unknown_plan_raises(self, settings):
        with pytest.raises(UnknownPlanLimitError) as exc_info:
            settings.lookup("enterprise", "projects")
        assert exc_info.value.plan == "enterprise"
        assert exc_info.value.resource == "projects"

    def test_unknown_resource_raises_lookup_error(self, settings):
        with pytest.raises(LookupError):
            settings.lookup("premium", Entitlement.PROJECTS)

    def test_plans_and_has_plan(self, settings):
        assert settings.plans == ("free", "premium")
        assert settings.has_plan("free") is True
        assert settings.has_plan("gold") is False


def test_settings_are_copied_on_construction():
    source = {"free": {"projects": 3}}
    settings = PlanSettings(source)
    source["free"]["projects"] = 99
    assert settings.lookup("free", "projects") == 3
