"""Apply a visiting order to merged voter records."""

from enum import StrEnum

from voter_radius.lib.routing.street import street_order
from voter_radius.lib.routing.tour import optimized_tour_order
from voter_radius.lib.types import VoterRecord


class OrderMode(StrEnum):
    STREET = "street"
    ROUTE = "route"


def order_records(records: list[VoterRecord], mode: OrderMode | str = OrderMode.STREET) -> list[VoterRecord]:
    """Return ``records`` reordered for display.

    ``street`` sorts by voter address, then last name, then voter id, so
    the order is the same whether rows came from the cache or the registry.
    ``route`` runs the tour heuristic over records that carry coordinates;
    records without coordinates follow in input order.

    Raises:
        ValueError: If ``mode`` is not a known ordering.
    """
    mode = OrderMode(mode)
    if mode is OrderMode.STREET:
        ties = [((r.last_name or "").casefold(), r.voter_id) for r in records]
        return [records[i] for i in street_order([r.voter_address for r in records], ties)]

    located = [r for r in records if r.latitude is not None and r.longitude is not None]
    unlocated = [r for r in records if r.latitude is None or r.longitude is None]
    order = optimized_tour_order([(r.latitude, r.longitude) for r in located])
    return [located[i] for i in order] + unlocated
