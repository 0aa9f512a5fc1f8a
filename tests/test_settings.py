import pytest

from core import db
from core.settings import load_settings


def test_defaults(clean_env):
    clean_env.setenv("DATABASE_URL", "postgresql://u:p@db:5432/albums")
    settings = load_settings()
    assert settings.album_store == "postgres"
    assert settings.database_url == "postgresql://u:p@db:5432/albums"
    assert settings.reset_on_startup is True
    assert (settings.pool_min_size, settings.pool_max_size) == (1, 5)
    assert settings.command_timeout == 30.0
    assert settings.port == 8080


def test_postgres_requires_dsn(clean_env):
    with pytest.raises(RuntimeError, match="DATABASE_URL is not set"):
        load_settings()


def test_db_dsn_fallback(clean_env):
    clean_env.setenv("DB_DSN", "postgresql://legacy@db/albums")
    assert load_settings().database_url == "postgresql://legacy@db/albums"


def test_stub_does_not_need_dsn(clean_env):
    clean_env.setenv("ALBUM_STORE", "Stub")
    settings = load_settings()
    assert settings.album_store == "stub"
    assert settings.database_url == ""


def test_unknown_store_is_rejected(clean_env):
    clean_env.setenv("ALBUM_STORE", "mysql")
    with pytest.raises(RuntimeError, match="ALBUM_STORE"):
        load_settings()


def test_reset_flag_and_bad_numbers(clean_env):
    clean_env.setenv("ALBUM_STORE", "stub")
    clean_env.setenv("ALBUMS_RESET_ON_STARTUP", "false")
    clean_env.setenv("DB_POOL_MIN_SIZE", "4")
    clean_env.setenv("DB_POOL_MAX_SIZE", "2")
    clean_env.setenv("DB_COMMAND_TIMEOUT", "soon")
    clean_env.setenv("PORT", "eighty")
    settings = load_settings()
    assert settings.reset_on_startup is False
    assert (settings.pool_min_size, settings.pool_max_size) == (4, 4)
    assert settings.command_timeout == 30.0
    assert settings.port == 8080


def test_sslmode_is_stripped(clean_env):
    clean_env.setenv("DATABASE_URL", "postgresql://u:p@db/albums?sslmode=disable&application_name=albums")
    assert load_settings().database_url == "postgresql://u:p@db/albums?application_name=albums"


def test_sanitize_leaves_plain_url_alone():
    assert db.sanitize_database_url("postgresql://db/albums") == "postgresql://db/albums"


def test_sslmode_only_query_is_dropped():
    assert db.sanitize_database_url("postgresql://db/albums?sslmode=require") == "postgresql://db/albums"
