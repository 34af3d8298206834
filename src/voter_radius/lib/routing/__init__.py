"""Routing library — display orderings for a result set.

Public API:
    - optimized_tour_order: Nearest-neighbour + 2-opt visiting order
    - street_order: Street name, then house number
    - order_records: Apply either ordering to VoterRecords
"""

from voter_radius.lib.routing.ordering import OrderMode, order_records
from voter_radius.lib.routing.street import street_order, street_sort_key
from voter_radius.lib.routing.tour import distance_matrix, optimized_tour_order, tour_length, two_opt

__all__ = [
    "OrderMode",
    "distance_matrix",
    "optimized_tour_order",
    "order_records",
    "street_order",
    "street_sort_key",
    "tour_length",
    "two_opt",
]
