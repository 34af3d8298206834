"""TTL-bounded local cache of registry rows keyed by (county, address_id, voter_id).

A refresh replaces every cached row of the given addresses: the delete and
the batched inserts run in one transaction, and refreshes of the same county
are serialized by an in-process lock.  Readers therefore see either the old
or the new rows of an address, never a deleted-but-not-reinserted gap.
"""

import asyncio
from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from loguru import logger
from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from voter_radius.lib.errors import CacheDegraded
from voter_radius.lib.fetcher.chunking import chunked
from voter_radius.lib.types import ALL_PARTIES, VoterRecord, matches_all_parties
from voter_radius.models.cached_voter import CachedVoter

DEFAULT_INSERT_BATCH_SIZE = 200
# Bound on ids per IN (...) when reading or deleting
_ID_BATCH_SIZE = 1000

_RECORD_COLUMNS = (
    "voter_name",
    "first_name",
    "last_name",
    "email_address",
    "phone_number",
    "birth_date",
    "party",
    "voter_address",
)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class CacheReadResult:
    """Partition of requested address ids into cached rows and misses."""

    fresh: list[VoterRecord] = field(default_factory=list)
    missing: list[int] = field(default_factory=list)


def _in_party(row: VoterRecord, party: str) -> bool:
    return matches_all_parties(party) or row.party == party


def _to_record(row: CachedVoter) -> VoterRecord:
    return VoterRecord(
        county=row.county,
        address_id=row.address_id,
        voter_id=row.voter_id,
        **{name: getattr(row, name) for name in _RECORD_COLUMNS},
    )


class ResultCache:
    """Read and refresh the ``cached_voters`` table.

    Args:
        session_factory: Session factory for the local store.
        insert_batch_size: Rows per multi-row INSERT during a refresh.
        clock: Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        insert_batch_size: int = DEFAULT_INSERT_BATCH_SIZE,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._session_factory = session_factory
        self._insert_batch_size = insert_batch_size
        self._clock = clock
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def read(
        self,
        county: str,
        address_ids: Sequence[int],
        party: str,
        ttl: timedelta,
    ) -> CacheReadResult:
        """Return fresh cached rows and the requested ids that have none.

        A row is fresh when its county matches, its address id was requested,
        its party matches (unless ``party`` is ALL) and it was written no
        longer than ``ttl`` ago.

        Raises:
            CacheDegraded: If the cache store cannot be read.
        """
        requested = list(dict.fromkeys(address_ids))
        if not requested:
            return CacheReadResult()

        cutoff = self._clock() - ttl
        fresh: list[VoterRecord] = []
        try:
            async with self._session_factory() as session:
                for id_batch in chunked(requested, _ID_BATCH_SIZE):
                    query = select(CachedVoter).where(
                        CachedVoter.county == county,
                        CachedVoter.address_id.in_(id_batch),
                        CachedVoter.updated_at >= cutoff,
                    )
                    if not matches_all_parties(party):
                        query = query.where(CachedVoter.party == party)
                    query = query.order_by(CachedVoter.address_id, CachedVoter.voter_id)
                    result = await session.execute(query)
                    fresh.extend(_to_record(row) for row in result.scalars().all())
        except SQLAlchemyError as e:
            raise CacheDegraded(f"Cache read failed: {e}") from e

        present = {record.address_id for record in fresh}
        missing = [address_id for address_id in requested if address_id not in present]
        return CacheReadResult(fresh=fresh, missing=missing)

    async def refresh(
        self,
        county: str,
        address_ids: Sequence[int],
        rows: Sequence[VoterRecord],
        party: str = ALL_PARTIES,
    ) -> int:
        """Replace the cached rows for ``county`` at ``address_ids`` with ``rows``.

        With a party other than ALL only that party's rows are replaced, since
        ``rows`` were fetched under the same filter.  Rows outside the
        county/address/party scope are ignored; duplicate keys keep
        the last row.  Cancellation before commit rolls the whole refresh back.

        Returns:
            Number of rows written.

        Raises:
            CacheDegraded: If the refresh could not be committed.
        """
        ids = list(dict.fromkeys(address_ids))
        if not ids:
            return 0

        id_set = set(ids)
        by_key: dict[tuple[str, int, int], VoterRecord] = {}
        for row in rows:
            if row.county != county or row.address_id not in id_set or not _in_party(row, party):
                logger.warning(f"Skipping cache row outside refresh scope: {row.key}")
                continue
            by_key[row.key] = row

        voters_at: defaultdict[int, set[int]] = defaultdict(set)
        for row in by_key.values():
            voters_at[row.address_id].add(row.voter_id)
        updated_at = self._clock()
        values = [
            {
                "county": county,
                "address_id": row.address_id,
                "voter_id": row.voter_id,
                **{name: getattr(row, name) for name in _RECORD_COLUMNS},
                "updated_at": updated_at,
            }
            for row in by_key.values()
        ]

        try:
            async with self._locks[county]:
                async with self._session_factory() as session, session.begin():
                    for id_batch in chunked(ids, _ID_BATCH_SIZE):
                        scope = (CachedVoter.county == county, CachedVoter.address_id.in_(id_batch))
                        if matches_all_parties(party):
                            await session.execute(delete(CachedVoter).where(*scope))
                            continue
                        await session.execute(delete(CachedVoter).where(*scope, CachedVoter.party == party))
                        # Incoming voters may still be cached under another party
                        incoming = sorted({v for address_id in id_batch for v in voters_at.get(address_id, ())})
                        for voter_batch in chunked(incoming, _ID_BATCH_SIZE):
                            await session.execute(
                                delete(CachedVoter).where(*scope, CachedVoter.voter_id.in_(voter_batch))
                            )
                    for batch in chunked(values, self._insert_batch_size):
                        await session.execute(insert(CachedVoter).values(batch))
        except SQLAlchemyError as e:
            raise CacheDegraded(f"Cache refresh failed: {e}") from e

        logger.info(f"Cache refreshed: county={county} addresses={len(ids)} rows={len(values)}")
        return len(values)
