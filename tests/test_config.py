import pytest
from pydantic import ValidationError

from app.config import Settings


def test_plain_postgres_url_gets_async_driver():
    settings = Settings(_env_file=None, TASKFLOW_DATABASE_URL="postgresql://u:p@db:5432/tasks")
    assert settings.app_database_url == "postgresql+asyncpg://u:p@db:5432/tasks"
    assert settings.is_sqlite is False


def test_unsupported_database_url():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, TASKFLOW_DATABASE_URL="mysql://u:p@db/tasks")


def test_broadcast_scope_values():
    assert Settings(_env_file=None, BROADCAST_SCOPE="ALL").broadcast_scope == "all"
    with pytest.raises(ValidationError):
        Settings(_env_file=None, BROADCAST_SCOPE="team")


def test_bcrypt_rounds_floor():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, BCRYPT_ROUNDS=4)


def test_token_lifetime_defaults_to_a_week(monkeypatch):
    monkeypatch.delenv("ACCESS_TOKEN_EXPIRE_MINUTES", raising=False)
    assert Settings(_env_file=None).access_token_expire_minutes == 7 * 24 * 60
