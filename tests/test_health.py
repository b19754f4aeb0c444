# tests/test_health.py

from __future__ import annotations

import pytest

from app import config
from app.api.health import classify_utilization, get_pool_health
from app.db.session import dispose_engine, get_engine


@pytest.mark.parametrize(
    ("percent", "status"),
    [(0, "healthy"), (79.99, "healthy"), (80, "warning"), (90, "critical"), (100, "critical")],
)
def test_classify_utilization(percent, status) -> None:
    assert classify_utilization(percent) == status


@pytest.mark.asyncio
async def test_pool_health_before_and_after_engine_creation(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr(config, "DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'pool.db'}")
    await dispose_engine()

    try:
        idle = await get_pool_health()
        assert idle["status"] == "idle"
        assert idle["engine_initialized"] is False
        assert idle["capacity"] == config.DB_POOL_SIZE + config.DB_MAX_OVERFLOW
        assert idle["in_use"] == 0

        get_engine()
        started = await get_pool_health()
        assert started["status"] == "healthy"
        assert started["engine_initialized"] is True
        assert started["in_use"] == 0
        assert started["utilization_percent"] == 0
    finally:
        await dispose_engine()
