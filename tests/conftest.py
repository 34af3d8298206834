"""Shared test fixtures: settings and file-backed SQLite stores for the local and registry databases."""

from collections.abc import AsyncGenerator, Awaitable, Callable, Sequence
from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from voter_radius.core.config import Settings
from voter_radius.lib.fetcher import BatchFetcher
from voter_radius.lib.geocoder import GeocodeCache, GeocodeResolver
from voter_radius.lib.geocoder.base import GeocodingResult
from voter_radius.lib.locator import CandidateLocator
from voter_radius.lib.result_cache import ResultCache
from voter_radius.models.base import Base, RegistryBase
from voter_radius.models.registry import ACTIVE_EXP_DATE, Demographics, MasterVoterAddress, VoterMaster
from voter_radius.services.retrieval_service import RetrievalService

# Portable stand-in for the spatial store's table; the geometry column is never read.
GEOCODED_ADDRESSES_DDL = """
CREATE TABLE geocoded_addresses (
    address_id INTEGER PRIMARY KEY,
    lat REAL NOT NULL,
    lon REAL NOT NULL,
    full_address TEXT,
    county VARCHAR(3),
    location BLOB
)
"""


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        registry_database_url="sqlite+aiosqlite:///:memory:",
        candidate_prefilter="latlon",
        _env_file=None,
    )  # type: ignore[call-arg]


@pytest.fixture
async def local_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Local store: cache tables plus a geocoded_addresses table."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'local.db'}", poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(text(GEOCODED_ADDRESSES_DDL))

    yield engine

    await engine.dispose()


@pytest.fixture
def local_factory(local_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(local_engine, expire_on_commit=False)


@pytest.fixture
async def registry_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Registry store: voter_master, demographics and master_voter_address."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'registry.db'}", poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(RegistryBase.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def registry_factory(registry_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(registry_engine, expire_on_commit=False)


@pytest.fixture
def add_addresses(
    local_factory: async_sessionmaker[AsyncSession],
) -> Callable[[Sequence[tuple[int, float, float, str]]], Awaitable[None]]:
    """Insert ``(address_id, lat, lon, full_address)`` rows into geocoded_addresses."""

    async def _add(rows: Sequence[tuple[int, float, float, str]]) -> None:
        async with local_factory() as session:
            for address_id, lat, lon, full_address in rows:
                await session.execute(
                    text(
                        "INSERT INTO geocoded_addresses (address_id, lat, lon, full_address) "
                        "VALUES (:address_id, :lat, :lon, :full_address)"
                    ),
                    {"address_id": address_id, "lat": lat, "lon": lon, "full_address": full_address},
                )
            await session.commit()

    return _add


@pytest.fixture
def add_voter(registry_factory: async_sessionmaker[AsyncSession]) -> Callable[..., Awaitable[None]]:
    """Insert one voter_master + demographics row (and the address if new)."""
    next_id = iter(range(1, 100_000))

    async def _add(
        voter_id: int,
        address_id: int,
        *,
        county: str = "VOL",
        party: str | None = "DEM",
        street: str = "100 MAIN ST",
        line2: str | None = None,
        apt: str | None = None,
        first_name: str = "Pat",
        last_name: str = "Doe",
        birth_date: date | None = date(1980, 5, 17),
        exp_date: date = ACTIVE_EXP_DATE,
    ) -> None:
        row_id = next(next_id)
        async with registry_factory() as session:
            if await session.get(MasterVoterAddress, address_id) is None:
                session.add(
                    MasterVoterAddress(id=address_id, street_address=street, address_line2=line2, apt_number=apt)
                )
            session.add(
                Demographics(
                    id=row_id,
                    county=county,
                    voter_id=voter_id,
                    voter_name=f"{first_name} {last_name}",
                    first_name=first_name,
                    last_name=last_name,
                    email_address=f"{first_name.lower()}@example.com",
                    phone_number="386-555-0100",
                    birth_date=birth_date,
                )
            )
            session.add(
                VoterMaster(
                    id=row_id,
                    voter_id=voter_id,
                    county=county,
                    voter_addr_id=address_id,
                    demographics_id=row_id,
                    party=party,
                    exp_date=exp_date,
                )
            )
            await session.commit()

    return _add


# Downtown DeLand, Volusia County
ORIGIN_LAT = 29.0283
ORIGIN_LON = -81.3031


@pytest.fixture
def geocoder() -> MagicMock:
    """Provider stub that always matches the DeLand origin."""
    provider = MagicMock()
    provider.provider_name = "census"
    provider.geocode = AsyncMock(return_value=GeocodingResult(latitude=ORIGIN_LAT, longitude=ORIGIN_LON))
    return provider


@pytest.fixture
def retrieval_service(settings: Settings, local_factory, registry_factory, geocoder: MagicMock) -> RetrievalService:
    """RetrievalService over the SQLite stores with a stubbed geocoder."""
    return RetrievalService(
        resolver=GeocodeResolver(geocoder, GeocodeCache(local_factory)),
        locator=CandidateLocator(local_factory, prefilter="latlon"),
        cache=ResultCache(local_factory),
        fetcher=BatchFetcher(registry_factory, max_concurrency=2),
        settings=settings,
    )
