"""Tests for street ordering and record ordering."""

import pytest

from voter_radius.lib.routing import OrderMode, order_records, street_order, street_sort_key
from voter_radius.lib.types import VoterRecord


class TestStreetSortKey:
    def test_strips_house_number(self) -> None:
        assert street_sort_key("120 W Rich Ave") == ("w rich ave", 120)

    def test_missing_number_sorts_as_zero(self) -> None:
        assert street_sort_key("W Rich Ave") == ("w rich ave", 0)

    def test_none(self) -> None:
        assert street_sort_key(None) == ("", 0)


class TestStreetOrder:
    """Tests for street_order."""

    def test_groups_by_street_then_number(self) -> None:
        addresses = ["130 W RICH AVE", "12 N WOODLAND BLVD", "110 W Rich Ave", "9 N Woodland Blvd", "W RICH AVE"]
        assert street_order(addresses) == [3, 1, 4, 2, 0]

    def test_numeric_not_lexicographic(self) -> None:
        assert street_order(["100 MAIN ST", "20 MAIN ST", "3 MAIN ST"]) == [2, 1, 0]

    def test_ties_keep_input_order(self) -> None:
        assert street_order(["5 OAK ST\nAPT 2", "5 OAK ST\nAPT 2", "5 OAK ST\nAPT 2"]) == [0, 1, 2]

    def test_tie_keys_before_input_order(self) -> None:
        assert street_order(["5 OAK ST", "5 OAK ST", "1 OAK ST"], [("b",), ("a",), ("z",)]) == [2, 1, 0]

    @pytest.mark.parametrize("count", [0, 1, 7])
    def test_permutation(self, count: int) -> None:
        order = street_order([f"{i * 7 % 5} ELM ST" for i in range(count)])
        assert sorted(order) == list(range(count))


def _record(
    voter_id: int, address: str, lat: float | None = None, lon: float | None = None, last_name: str | None = None
) -> VoterRecord:
    return VoterRecord(
        county="VOL",
        address_id=voter_id,
        voter_id=voter_id,
        last_name=last_name,
        voter_address=address,
        latitude=lat,
        longitude=lon,
    )


class TestOrderRecords:
    """Tests for order_records."""

    def test_street_mode(self) -> None:
        records = [_record(1, "20 ELM ST"), _record(2, "5 ASH ST"), _record(3, "3 ELM ST")]
        assert [r.voter_id for r in order_records(records, "street")] == [2, 3, 1]

    def test_street_mode_same_address_by_last_name_then_voter_id(self) -> None:
        records = [
            _record(9, "5 OAK ST", last_name="Young"),
            _record(7, "5 OAK ST", last_name="adams"),
            _record(3, "5 OAK ST", last_name="Young"),
            _record(1, "9 OAK ST", last_name="Baker"),
        ]
        assert [r.voter_id for r in order_records(records, "street")] == [7, 3, 9, 1]
        assert [r.voter_id for r in order_records(list(reversed(records)), "street")] == [7, 3, 9, 1]

    def test_route_mode_keeps_unlocated_last(self) -> None:
        records = [
            _record(1, "1 A ST", 29.0, -81.0),
            _record(2, "2 A ST"),
            _record(3, "3 A ST", 29.002, -81.0),
            _record(4, "4 A ST", 29.001, -81.0),
        ]
        assert [r.voter_id for r in order_records(records, OrderMode.ROUTE)] == [1, 4, 3, 2]

    def test_unknown_mode(self) -> None:
        with pytest.raises(ValueError):
            order_records([], "alphabetical")
