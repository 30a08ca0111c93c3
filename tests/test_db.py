from src.database.db import build_database_url


def test_build_database_url():
    assert build_database_url("postgresql://u:p@db:5432/bika") == "postgresql+asyncpg://u:p@db:5432/bika"
    assert build_database_url("sqlite:///bika.db") == "sqlite+aiosqlite:///bika.db"
    assert build_database_url("sqlite+aiosqlite://") == "sqlite+aiosqlite://"
