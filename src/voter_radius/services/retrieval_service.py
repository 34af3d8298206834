"""Retrieval service — nearby-voter search and cache warming.

Runs the pipeline geocode → candidate lookup → result cache → registry
fetch for misses → cache refresh → merge → ordering.  Stages run in
sequence; every backend failure surfaces as a ``RetrievalError`` subclass
except cache failures, which are logged and bypassed.
"""

import math
import time
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import timedelta

import httpx
from loguru import logger

from voter_radius.core.config import Settings
from voter_radius.core.database import (
    LOCAL,
    REGISTRY,
    dispose_engines,
    ensure_schema,
    get_session_factory,
    init_engines,
)
from voter_radius.lib.errors import CacheDegraded, SearchValidationError
from voter_radius.lib.fetcher import BatchFetcher, chunked, get_strategy
from voter_radius.lib.geocoder import GeocodeCache, GeocodeResolver, get_geocoder
from voter_radius.lib.locator import BoundingBox, CandidateLocator
from voter_radius.lib.result_cache import CacheReadResult, ResultCache
from voter_radius.lib.routing import order_records
from voter_radius.lib.types import VoterRecord
from voter_radius.schemas.nearby import SearchRequest, SearchResult, VoterRecordResponse, WarmSummary

MAX_ADDRESS_LENGTH = 500


class RetrievalService:
    """Nearby-voter retrieval over the local and registry stores.

    Args:
        resolver: Address → coordinate resolution.
        locator: Candidate address lookup.
        cache: Result cache of registry rows.
        fetcher: Chunked registry fetcher.
        settings: Allow-lists and TTL.
    """

    def __init__(
        self,
        *,
        resolver: GeocodeResolver,
        locator: CandidateLocator,
        cache: ResultCache,
        fetcher: BatchFetcher,
        settings: Settings,
    ) -> None:
        self._resolver = resolver
        self._locator = locator
        self._cache = cache
        self._fetcher = fetcher
        self._settings = settings

    @property
    def ttl(self) -> timedelta:
        return timedelta(days=self._settings.cache_ttl_days)

    def _check_county(self, county: str) -> str:
        county = county.strip().upper()
        if county not in self._settings.allowed_county_list:
            raise SearchValidationError("county", "Invalid county.")
        return county

    @staticmethod
    def _check_radius(radius: float) -> float:
        # Also rejects NaN and inf
        if not (math.isfinite(radius) and radius > 0):
            raise SearchValidationError("radius", "Please enter a valid radius greater than 0.")
        return radius

    def _check_party(self, party: str) -> str:
        party = party.strip().upper()
        if party not in self._settings.allowed_party_list:
            raise SearchValidationError("party", "Invalid party.")
        return party

    def validate(self, request: SearchRequest) -> SearchRequest:
        """Normalize and check a search request without touching any backend.

        Returns:
            A copy with trimmed address and upper-cased county/party.

        Raises:
            SearchValidationError: On the first invalid field, checked in the
                order address, radius, county, party.
        """
        address = request.address.strip()
        if not address:
            raise SearchValidationError("address", "Please enter an address.")
        if len(address) > MAX_ADDRESS_LENGTH:
            raise SearchValidationError("address", f"Address must be at most {MAX_ADDRESS_LENGTH} characters.")
        self._check_radius(request.radius)
        county = self._check_county(request.county)
        party = self._check_party(request.party or "ALL")
        return request.model_copy(update={"address": address, "county": county, "party": party})

    async def _read_cache(self, county: str, address_ids: list[int], party: str) -> CacheReadResult:
        try:
            return await self._cache.read(county, address_ids, party, self.ttl)
        except CacheDegraded as e:
            logger.warning(f"{e.message}; treating {len(address_ids)} ids as missing")
            return CacheReadResult(fresh=[], missing=list(address_ids))

    async def _refresh_cache(self, county: str, address_ids: list[int], rows: list[VoterRecord], party: str) -> int:
        try:
            return await self._cache.refresh(county, address_ids, rows, party)
        except CacheDegraded as e:
            logger.warning(f"{e.message}; returning uncached results")
            return 0

    async def search(self, request: SearchRequest) -> SearchResult:
        """Find voters registered at addresses within the radius of an address.

        Args:
            request: Search parameters.

        Returns:
            Ordered records with their address coordinates.  No nearby
            addresses, or no matching voters, is an empty result.

        Raises:
            SearchValidationError: If the request is invalid.
            GeocodeFailure: If the address cannot be geocoded.
            StoreError: If the spatial or registry store fails.
        """
        request = self.validate(request)
        origin = await self._resolver.resolve(request.address)
        candidates = await self._locator.locate(origin.latitude, origin.longitude, request.radius)

        result = SearchResult(
            latitude=origin.latitude,
            longitude=origin.longitude,
            radius=request.radius,
            county=request.county,
            party=request.party,
            order=request.order,
            candidates=len(candidates),
            cache_hits=0,
            fetched=0,
        )
        if not candidates:
            logger.info(f"Search: county={request.county} radius={request.radius} no candidates")
            return result

        address_ids = [c.address_id for c in candidates]
        cached = await self._read_cache(request.county, address_ids, request.party)

        fetched: list[VoterRecord] = []
        if cached.missing:
            fetched = await self._fetcher.fetch(request.county, cached.missing, request.party)
            await self._refresh_cache(request.county, cached.missing, fetched, request.party)

        by_id = {c.address_id: c for c in candidates}
        records = cached.fresh + fetched
        for record in records:
            candidate = by_id.get(record.address_id)
            if candidate is not None:
                record.latitude = candidate.latitude
                record.longitude = candidate.longitude

        ordered = order_records(records, request.order)
        logger.info(
            f"Search: county={request.county} party={request.party} radius={request.radius} "
            f"candidates={len(candidates)} cache_hits={len(cached.fresh)} fetched={len(fetched)}"
        )
        return result.model_copy(
            update={
                "cache_hits": len(cached.fresh),
                "fetched": len(fetched),
                "records": [VoterRecordResponse.model_validate(r) for r in ordered],
            }
        )

    async def ids_near_address(self, address: str, radius: float) -> list[int]:
        """Address ids within ``radius`` miles of a geocoded address.

        Raises:
            SearchValidationError: If the radius is not a positive finite number.
            GeocodeFailure: If the address cannot be geocoded.
            StoreError: If the spatial store fails.
        """
        self._check_radius(radius)
        origin = await self._resolver.resolve(address)
        candidates = await self._locator.locate(origin.latitude, origin.longitude, radius)
        return [c.address_id for c in candidates]

    async def ids_in_box(self, box: BoundingBox) -> list[int]:
        """Address ids inside an explicit bounding box."""
        return await self._locator.ids_in_box(box)

    async def warm(
        self,
        county: str,
        address_ids: Sequence[int],
        party: str = "ALL",
        *,
        strategy: str | None = None,
        chunk_size: int | None = None,
        respect_ttl: bool = False,
        dry_run: bool = False,
    ) -> WarmSummary:
        """Pre-populate the result cache for ``address_ids``.

        Args:
            county: County code.
            address_ids: Ids to warm; duplicates are ignored.
            party: Party filter, or ALL.
            strategy: Join strategy override.
            chunk_size: Ids per registry query.
            respect_ttl: Only fetch ids without fresh cached rows.
            dry_run: Fetch but do not write the cache.

        Raises:
            SearchValidationError: If the county or party is not allowed.
            StoreError: If the registry store fails.
            CacheDegraded: If the cache cannot be read or written.
        """
        county = self._check_county(county)
        party = self._check_party(party)
        join = get_strategy(strategy) if strategy else self._fetcher.strategy
        size = chunk_size or self._settings.fetch_chunk_size
        ids = list(dict.fromkeys(address_ids))
        started = time.perf_counter()

        missing = ids
        if respect_ttl:
            missing = (await self._cache.read(county, ids, party, self.ttl)).missing
        summary = WarmSummary(
            county=county,
            party=party,
            strategy=join.name,
            requested=len(ids),
            skipped_fresh=len(ids) - len(missing),
            fetched_ids=len(missing),
            chunks=len(list(chunked(missing, size))),
            dry_run=dry_run,
        )
        if not missing:
            logger.info(f"Warm: county={county} nothing to do (cache fresh)")
            return summary

        rows = await self._fetcher.fetch(county, missing, party, strategy=join, chunk_size=size)
        written = 0
        if not dry_run:
            written = await self._cache.refresh(county, missing, rows, party)

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"Warm: county={county} ids={len(missing)} rows={len(rows)} written={written} {elapsed_ms:.2f} ms")
        return summary.model_copy(update={"rows": len(rows), "written": written, "elapsed_ms": elapsed_ms})


def build_retrieval_service(settings: Settings, *, http_client: httpx.AsyncClient | None = None) -> RetrievalService:
    """Assemble a RetrievalService over the initialized local and registry engines.

    Args:
        settings: Application settings.
        http_client: Optional shared client for the geocoding provider.
    """
    local = get_session_factory(LOCAL)
    geocoder = get_geocoder("census", timeout=settings.geocoder_timeout, client=http_client)
    return RetrievalService(
        resolver=GeocodeResolver(geocoder, GeocodeCache(local)),
        locator=CandidateLocator(local, prefilter=settings.candidate_prefilter),
        cache=ResultCache(local, insert_batch_size=settings.cache_insert_batch_size),
        fetcher=BatchFetcher(
            get_session_factory(REGISTRY),
            strategy=settings.fetch_strategy,
            chunk_size=settings.fetch_chunk_size,
            max_concurrency=settings.fetch_max_concurrency,
        ),
        settings=settings,
    )


@asynccontextmanager
async def retrieval_service_scope(settings: Settings) -> AsyncIterator[RetrievalService]:
    """Open both stores and a provider client for one CLI run, then release them."""
    init_engines(settings.database_url, settings.registry_database_url, schema=settings.database_schema)
    try:
        await ensure_schema()
        async with httpx.AsyncClient(timeout=settings.geocoder_timeout) as client:
            yield build_retrieval_service(settings, http_client=client)
    finally:
        await dispose_engines()
