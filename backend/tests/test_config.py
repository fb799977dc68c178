from shared.config import Settings


def test_default_settings(monkeypatch):
    for name in ("DATABASE_URL", "REDIS_URL", "BROADCAST_BACKEND", "PREVIEW_LENGTH"):
        monkeypatch.delenv(name, raising=False)

    s = Settings(_env_file=None)
    assert "postgresql+asyncpg" in s.DATABASE_URL
    assert "redis" in s.REDIS_URL
    assert s.JWT_ALGORITHM == "HS256"
    assert s.JWT_EXPIRATION_MINUTES == 60
    assert s.BROADCAST_BACKEND == "memory"
    assert s.PREVIEW_LENGTH == 160


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://test:test@db:5432/testdb")
    monkeypatch.setenv("REDIS_URL", "redis://redis-test:6379")
    monkeypatch.setenv("JWT_SECRET", "supersecret")
    monkeypatch.setenv("BROADCAST_BACKEND", "redis")
    monkeypatch.setenv("MAX_ATTACHMENT_BYTES", "1024")

    s = Settings()
    assert s.DATABASE_URL == "postgresql+asyncpg://test:test@db:5432/testdb"
    assert s.REDIS_URL == "redis://redis-test:6379"
    assert s.JWT_SECRET == "supersecret"
    assert s.BROADCAST_BACKEND == "redis"
    assert s.MAX_ATTACHMENT_BYTES == 1024
