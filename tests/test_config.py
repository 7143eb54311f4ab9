"""Settings overrides and the pools built from them."""

from __future__ import annotations

from ridelink.config import Settings, settings
from ridelink.infrastructure import redis_client
from ridelink.infrastructure.database import engine


class TestSettings:
    def test_pool_sizes_come_from_environment(self, monkeypatch):
        monkeypatch.setenv("DB_POOL_SIZE", "5")
        monkeypatch.setenv("DB_MAX_OVERFLOW", "2")
        monkeypatch.setenv("REDIS_MAX_CONNECTIONS", "7")

        configured = Settings(_env_file=None)

        assert configured.db_pool_size == 5
        assert configured.db_max_overflow == 2
        assert configured.redis_max_connections == 7

    def test_engine_uses_configured_pool(self):
        assert engine.pool.size() == settings.db_pool_size

    def test_redis_pool_uses_configured_limit(self):
        assert redis_client._pool.max_connections == settings.redis_max_connections
