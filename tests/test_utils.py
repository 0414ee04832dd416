"""
Тесты вспомогательных модулей: проверка email, ограничитель частоты, ValidationError.
"""
import pytest

from utils.errors import ValidationError
from utils.rate_limit import InMemoryRateLimiter
from utils.validators import clean_text, is_valid_email, normalize_email


class TestEmail:
    """Формат local@domain.tld с доменом верхнего уровня из 2–4 букв."""

    @pytest.mark.parametrize("email", ["a@b.co", "john.doe@mail.example.info", "X%Y@Z.ORG"])
    def test_valid(self, email):
        assert is_valid_email(email) is True

    @pytest.mark.parametrize("email", ["", None, "a@b", "a@b.toolong", "@b.com", "a@.c"])
    def test_invalid(self, email):
        assert is_valid_email(email) is False

    def test_normalize_email(self):
        assert normalize_email("  Foo@Bar.COM ") == "foo@bar.com"
        assert normalize_email(None) == ""

    def test_clean_text(self):
        assert clean_text("  x ") == "x"
        assert clean_text(None) == ""
        assert clean_text(5) == "5"


class TestRateLimiter:
    """Скользящее окно по ключу."""

    def test_blocks_after_limit_and_recovers(self):
        now = [100.0]
        limiter = InMemoryRateLimiter(clock=lambda: now[0])

        assert limiter.is_allowed("login:1.2.3.4", limit=2, window_seconds=60)
        assert limiter.is_allowed("login:1.2.3.4", limit=2, window_seconds=60)
        assert not limiter.is_allowed("login:1.2.3.4", limit=2, window_seconds=60)
        assert limiter.is_allowed("login:5.6.7.8", limit=2, window_seconds=60)

        now[0] += 61
        assert limiter.is_allowed("login:1.2.3.4", limit=2, window_seconds=60)

    def test_reset(self):
        limiter = InMemoryRateLimiter()
        assert limiter.is_allowed("k", limit=1, window_seconds=60)
        assert not limiter.is_allowed("k", limit=1, window_seconds=60)
        limiter.reset()
        assert limiter.is_allowed("k", limit=1, window_seconds=60)

    def test_non_positive_limit_denies(self):
        assert InMemoryRateLimiter().is_allowed("k", limit=0, window_seconds=60) is False


def test_validation_error_keeps_fields():
    error = ValidationError({"email": ["имеет неверный формат"], "first_name": ["не может быть пустым"]})
    assert "email" in error
    assert "last_name" not in error
    assert error.to_dict() == {
        "success": False,
        "errors": {"email": ["имеет неверный формат"], "first_name": ["не может быть пустым"]},
    }
    assert "email" in str(error)
