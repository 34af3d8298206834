"""Chunked, concurrency-bounded fetching of registry rows for address ids."""

import asyncio
import time
from collections.abc import Sequence
from datetime import date, datetime

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from voter_radius.lib.errors import StoreError
from voter_radius.lib.fetcher.chunking import DEFAULT_CHUNK_SIZE, chunked
from voter_radius.lib.fetcher.strategies import JoinStrategy, get_strategy
from voter_radius.lib.types import VoterRecord

DEFAULT_MAX_CONCURRENCY = 4


def compose_voter_address(street: str | None, line2: str | None, apt: str | None) -> str:
    """Street line, then ``line2 apt`` on a second line when either is present."""
    second = " ".join(part.strip() for part in (line2, apt) if part and part.strip())
    lines = [line for line in ((street or "").strip(), second) if line]
    return "\n".join(lines)


def _as_date(value: date | datetime | str | None) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def row_to_record(row) -> VoterRecord:
    """Convert a strategy result row into a VoterRecord."""
    return VoterRecord(
        county=row.county,
        address_id=int(row.address_id),
        voter_id=int(row.voter_id),
        voter_name=row.voter_name,
        first_name=row.first_name,
        last_name=row.last_name,
        email_address=row.email_address,
        phone_number=row.phone_number,
        birth_date=_as_date(row.birth_date),
        party=row.party,
        voter_address=compose_voter_address(row.street_address, row.address_line2, row.apt_number),
    )


class BatchFetcher:
    """Fetch denormalized registry rows for address ids, one query per chunk.

    Chunks run concurrently (each on its own session) with at most
    ``max_concurrency`` in flight.  If any chunk fails, or the caller is
    cancelled, the outstanding chunks are cancelled before the error
    propagates.  Results are concatenated in chunk order.

    Args:
        session_factory: Session factory for the registry store.
        strategy: Default join strategy (instance or name).
        chunk_size: Default ids per chunk.
        max_concurrency: Chunk queries allowed in flight at once.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        strategy: JoinStrategy | str = "registry",
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if chunk_size <= 0:
            msg = f"chunk_size must be positive, got {chunk_size}"
            raise ValueError(msg)
        if max_concurrency <= 0:
            msg = f"max_concurrency must be positive, got {max_concurrency}"
            raise ValueError(msg)
        self._session_factory = session_factory
        self._strategy = get_strategy(strategy) if isinstance(strategy, str) else strategy
        self._chunk_size = chunk_size
        self._max_concurrency = max_concurrency

    @property
    def strategy(self) -> JoinStrategy:
        return self._strategy

    async def fetch(
        self,
        county: str,
        address_ids: Sequence[int],
        party: str,
        *,
        strategy: JoinStrategy | str | None = None,
        chunk_size: int | None = None,
    ) -> list[VoterRecord]:
        """Fetch active registry rows for ``address_ids`` in ``county``.

        Args:
            county: County code filter.
            address_ids: Address ids to fetch; duplicates are ignored.
            party: Party filter, or ALL.
            strategy: Override of the default join strategy.
            chunk_size: Override of the default chunk size.

        Returns:
            Rows of every chunk, concatenated in chunk order.

        Raises:
            StoreError: If a chunk query fails.
        """
        if isinstance(strategy, str):
            strategy = get_strategy(strategy)
        join = strategy or self._strategy
        size = chunk_size or self._chunk_size

        ids = list(dict.fromkeys(address_ids))
        chunks = list(chunked(ids, size))
        if not chunks:
            return []

        semaphore = asyncio.Semaphore(self._max_concurrency)
        tasks = [
            asyncio.create_task(self._fetch_chunk(index, chunk, county, party, join, semaphore))
            for index, chunk in enumerate(chunks, start=1)
        ]
        try:
            per_chunk = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        rows = [row for chunk_rows in per_chunk for row in chunk_rows]
        logger.info(
            f"Registry fetch: county={county} party={party} strategy={join.name} "
            f"ids={len(ids)} chunks={len(chunks)} rows={len(rows)}"
        )
        return rows

    async def _fetch_chunk(
        self,
        index: int,
        address_ids: list[int],
        county: str,
        party: str,
        strategy: JoinStrategy,
        semaphore: asyncio.Semaphore,
    ) -> list[VoterRecord]:
        async with semaphore:
            started = time.perf_counter()
            try:
                async with self._session_factory() as session:
                    result = await session.execute(strategy.build(address_ids, county, party))
                    rows = [row_to_record(row) for row in result.all()]
            except SQLAlchemyError as e:
                logger.error(f"Chunk {index} failed ({len(address_ids)} ids): {e}")
                raise StoreError("registry", f"Registry query failed on chunk {index}") from e
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(f"Chunk {index}: ids={len(address_ids)}, rows={len(rows)}, {elapsed_ms:.2f} ms")
            return rows
