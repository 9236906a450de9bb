"""Tests for container wiring."""

import asyncio
from pathlib import Path

from ask4rent.config import Settings
from ask4rent.containers import build_container
from ask4rent.domain.search import SearchMode


def _settings(tmp_path: Path) -> Settings:
    return Settings(
        api_base_url="https://api.test/",
        session_store_path=str(tmp_path / "store.json"),
        session_ttl_seconds=120,
    )


def test_build_container_creates_services(tmp_path: Path) -> None:
    settings = _settings(tmp_path)

    container = build_container(settings)

    assert container.orchestrator.mode is SearchMode.HOME
    assert container.orchestrator.sessions is container.session_manager
    assert container.favorites_service.sessions is container.session_manager
    assert container.session_manager.store.ttl.total_seconds() == 120
    assert container.orchestrator.viewport.zone_zoom == settings.zone_zoom
    asyncio.run(container.close_resources())


def test_close_resources_clears_persisted_session(tmp_path: Path) -> None:
    container = build_container(_settings(tmp_path))
    store = container.session_manager.store
    store.create("abc")

    asyncio.run(container.close_resources())

    assert store.read() is None
    assert "abc" not in (tmp_path / "store.json").read_text(encoding="utf-8")
