"""Tests for the database engine and session management module."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy import inspect

import voter_radius.core.database as db_module

from voter_radius.core.database import (
    LOCAL,
    REGISTRY,
    dispose_engine,
    dispose_engines,
    ensure_schema,
    get_engine,
    get_session_factory,
    init_engine,
    init_engines,
)


class TestGetEngine:
    """Tests for get_engine."""

    def test_raises_when_not_initialized(self) -> None:
        with pytest.raises(RuntimeError, match="Database engine 'nowhere' not initialized"):
            get_engine("nowhere")

    async def test_returns_engine_when_initialized(self) -> None:
        engine = init_engine("sqlite+aiosqlite:///:memory:")
        try:
            assert get_engine() is engine
        finally:
            await dispose_engine()


class TestGetSessionFactory:
    """Tests for get_session_factory."""

    def test_raises_when_not_initialized(self) -> None:
        with pytest.raises(RuntimeError, match="Session factory 'nowhere' not initialized"):
            get_session_factory("nowhere")


class TestInitEngine:
    """Tests for init_engine."""

    @pytest.fixture(autouse=True)
    def _forget_mock_engine(self):
        yield
        db_module._engines.pop("pg-test", None)
        db_module._session_factories.pop("pg-test", None)

    async def test_creates_named_engines(self) -> None:
        init_engines("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:")
        try:
            assert get_engine(LOCAL) is not get_engine(REGISTRY)
            assert get_session_factory(REGISTRY) is not None
        finally:
            await dispose_engines()

    def test_pool_defaults_for_server_databases(self) -> None:
        with patch("voter_radius.core.database.create_async_engine", return_value=MagicMock()) as mock_create:
            init_engine("postgresql+asyncpg://localhost/db", name="pg-test", echo=False)
            mock_create.assert_called_once_with(
                "postgresql+asyncpg://localhost/db",
                echo=False,
                pool_size=10,
                max_overflow=5,
                pool_pre_ping=True,
            )

    def test_init_engine_with_schema(self) -> None:
        """init_engine with schema injects connect_args with search_path."""
        with patch("voter_radius.core.database.create_async_engine", return_value=MagicMock()) as mock_create:
            init_engine("postgresql+asyncpg://localhost/db", name="pg-test", schema="pr_42")
            _, kwargs = mock_create.call_args
            assert kwargs["connect_args"] == {"options": "-c search_path=pr_42,public"}


class TestEnsureSchema:
    """Tests for ensure_schema."""

    async def test_creates_cache_tables_only(self, tmp_path: Path) -> None:
        engine = init_engine(f"sqlite+aiosqlite:///{tmp_path / 'schema.db'}")
        try:
            await ensure_schema()
            await ensure_schema()  # second call is a no-op
            async with engine.connect() as conn:
                tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
            assert set(tables) == {"geocode_cache", "cached_voters"}
        finally:
            await dispose_engine()


class TestDisposeEngine:
    """Tests for dispose_engine."""

    async def test_dispose_removes_engine(self) -> None:
        init_engine("sqlite+aiosqlite:///:memory:", name="temp")
        await dispose_engine("temp")
        with pytest.raises(RuntimeError):
            get_engine("temp")

    async def test_dispose_unknown_is_noop(self) -> None:
        await dispose_engine("never-initialized")
