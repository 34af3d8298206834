"""Async database engines and session management.

Two independent stores are used: the local store (geocoded addresses,
geocode cache, cached voters) and the remote voter registry.  Each gets its
own named engine and session factory, created at startup and disposed at
shutdown, using SQLAlchemy 2.x async engines.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

LOCAL = "local"
REGISTRY = "registry"

_engines: dict[str, AsyncEngine] = {}
_session_factories: dict[str, async_sessionmaker[AsyncSession]] = {}


def get_engine(name: str = LOCAL) -> AsyncEngine:
    """Return the named async engine.

    Raises:
        RuntimeError: If the engine has not been initialized.
    """
    engine = _engines.get(name)
    if engine is None:
        msg = f"Database engine {name!r} not initialized. Call init_engine() first."
        raise RuntimeError(msg)
    return engine


def get_session_factory(name: str = LOCAL) -> async_sessionmaker[AsyncSession]:
    """Return the named session factory.

    Raises:
        RuntimeError: If the engine has not been initialized.
    """
    factory = _session_factories.get(name)
    if factory is None:
        msg = f"Session factory {name!r} not initialized. Call init_engine() first."
        raise RuntimeError(msg)
    return factory


def init_engine(
    database_url: str,
    *,
    name: str = LOCAL,
    schema: str | None = None,
    **kwargs: object,
) -> AsyncEngine:
    """Create and store a named async engine and its session factory.

    Args:
        database_url: Async connection string.
        name: Registry key for the engine (``local`` or ``registry``).
        schema: Optional PostgreSQL schema for isolated environments.
        **kwargs: Additional arguments passed to create_async_engine.

    Returns:
        The created async engine.
    """
    if schema is not None:
        connect_args = kwargs.pop("connect_args", {})
        if not isinstance(connect_args, dict):
            msg = "connect_args must be a dict"
            raise TypeError(msg)
        connect_args["options"] = f"-c search_path={schema},public"
        kwargs["connect_args"] = connect_args
    # Only set pool defaults for connection-pooled engines (not SQLite/StaticPool)
    uses_static_pool = kwargs.get("poolclass") is StaticPool or "sqlite" in database_url
    if not uses_static_pool:
        kwargs.setdefault("pool_size", 10)
        kwargs.setdefault("max_overflow", 5)
        kwargs.setdefault("pool_pre_ping", True)
    engine = create_async_engine(database_url, **kwargs)
    _engines[name] = engine
    _session_factories[name] = async_sessionmaker(engine, expire_on_commit=False)
    return engine


def init_engines(database_url: str, registry_database_url: str, *, schema: str | None = None) -> None:
    """Initialize both the local and registry engines.

    The schema override applies to the local store only; the registry is
    owned by another system.
    """
    init_engine(database_url, name=LOCAL, schema=schema)
    init_engine(registry_database_url, name=REGISTRY)


async def dispose_engine(name: str = LOCAL) -> None:
    """Dispose of a named engine and release its connections."""
    engine = _engines.pop(name, None)
    _session_factories.pop(name, None)
    if engine is not None:
        await engine.dispose()


async def dispose_engines() -> None:
    """Dispose of every initialized engine."""
    for name in list(_engines):
        await dispose_engine(name)


async def ensure_schema(name: str = LOCAL) -> None:
    """Create the locally owned tables (geocode cache, cached voters) if absent.

    The geocoded-address table and the registry tables belong to other
    systems and are never created here.
    """
    from voter_radius.models import Base

    async with get_engine(name).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
