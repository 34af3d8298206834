"""Integration test: a full nearby search around downtown DeLand (Volusia County).

Runs geocode → candidate lookup → cache read → registry fetch → cache
refresh over the SQLite stores, then checks the cache serves the next read.
"""

from datetime import timedelta

import pytest

from voter_radius.lib.fetcher import BatchFetcher
from voter_radius.schemas.nearby import SearchRequest


@pytest.fixture
async def deland(add_addresses, add_voter) -> None:
    """Two addresses inside 0.1 mi of the origin with three active voters, plus one far away."""
    await add_addresses(
        [
            (5001, 29.0287, -81.3030, "118 N WOODLAND BLVD, DELAND, FL 32720"),
            (5002, 29.0280, -81.3035, "101 W NEW YORK AVE, DELAND, FL 32720"),
            (5003, 29.0500, -81.3031, "1200 N WOODLAND BLVD, DELAND, FL 32720"),
        ]
    )
    await add_voter(901, 5001, party="DEM", street="118 N WOODLAND BLVD", first_name="Rosa")
    await add_voter(902, 5001, party="NPA", street="118 N WOODLAND BLVD", first_name="Omar")
    await add_voter(903, 5002, party="DEM", street="101 W NEW YORK AVE", apt="2B", first_name="Lena")
    await add_voter(904, 5003, party="REP", street="1200 N WOODLAND BLVD", first_name="Hal")


@pytest.fixture
def chunk_calls(monkeypatch: pytest.MonkeyPatch) -> list[list[int]]:
    calls: list[list[int]] = []
    original = BatchFetcher._fetch_chunk

    async def _spy(self, index, address_ids, *args):
        calls.append(list(address_ids))
        return await original(self, index, address_ids, *args)

    monkeypatch.setattr(BatchFetcher, "_fetch_chunk", _spy)
    return calls


@pytest.mark.usefixtures("deland")
async def test_search_fetches_once_then_serves_from_cache(retrieval_service, chunk_calls) -> None:
    request = SearchRequest(address="118 N Woodland Blvd, DeLand, FL", radius=0.1, county="VOL", party="ALL")

    result = await retrieval_service.search(request)

    assert (result.latitude, result.longitude) == (29.0283, -81.3031)
    assert result.candidates == 2
    assert len(chunk_calls) == 1
    assert sorted(chunk_calls[0]) == [5001, 5002]
    assert result.fetched == 3
    assert sorted(r.voter_id for r in result.records) == [901, 902, 903]

    cached = await retrieval_service._cache.read("VOL", [5001, 5002], "ALL", timedelta(days=30))
    assert len(cached.fresh) == 3
    assert cached.missing == []

    again = await retrieval_service.search(request)
    assert len(chunk_calls) == 1
    assert again.cache_hits == 3
    assert again.fetched == 0


@pytest.mark.usefixtures("deland")
async def test_party_with_no_members_is_empty_not_error(retrieval_service, chunk_calls) -> None:
    request = SearchRequest(address="118 N Woodland Blvd, DeLand, FL", radius=0.1, county="VOL", party="REP")

    result = await retrieval_service.search(request)

    assert result.candidates == 2
    assert result.records == []
    assert len(chunk_calls) == 1
    cached = await retrieval_service._cache.read("VOL", [5001, 5002], "REP", timedelta(days=30))
    assert cached.fresh == []
