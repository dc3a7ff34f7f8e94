from sqlalchemy import text

from stockconv.core.config import _env_flag, _env_number, _env_str, normalize_database_url
from stockconv.db.database import build_engine


def test_blank_env_values_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("STOCKCONV_TEST_NAME", "   ")
    monkeypatch.setenv("STOCKCONV_TEST_FLAG", "maybe")

    assert _env_str("STOCKCONV_TEST_NAME", "fallback") == "fallback"
    assert _env_flag("STOCKCONV_TEST_FLAG", True) is True


def test_flags_accept_common_spellings(monkeypatch):
    monkeypatch.setenv("STOCKCONV_TEST_FLAG", " Yes ")
    assert _env_flag("STOCKCONV_TEST_FLAG", False) is True

    monkeypatch.setenv("STOCKCONV_TEST_FLAG", "off")
    assert _env_flag("STOCKCONV_TEST_FLAG", True) is False


def test_numbers_are_clamped_and_bad_values_ignored(monkeypatch):
    monkeypatch.setenv("STOCKCONV_TEST_LIMIT", "0")
    assert _env_number("STOCKCONV_TEST_LIMIT", 5) == 1

    monkeypatch.setenv("STOCKCONV_TEST_LIMIT", "5000")
    assert _env_number("STOCKCONV_TEST_LIMIT", 5, upper=20) == 20

    monkeypatch.setenv("STOCKCONV_TEST_LIMIT", "lots")
    assert _env_number("STOCKCONV_TEST_LIMIT", 5) == 5


def test_postgres_urls_get_the_psycopg_driver():
    assert normalize_database_url("postgres://u:p@db/stock") == "postgresql+psycopg://u:p@db/stock"
    assert normalize_database_url("postgresql://u:p@db/stock") == "postgresql+psycopg://u:p@db/stock"
    assert normalize_database_url("sqlite:///stock.db") == "sqlite:///stock.db"


def test_sqlite_engine_enforces_foreign_keys(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'fk.db'}")
    try:
        with engine.connect() as connection:
            assert connection.execute(text("PRAGMA foreign_keys")).scalar() == 1
    finally:
        engine.dispose()
