"""Street ordering: group addresses by street name, then by house number."""

import re
from collections.abc import Sequence

_HOUSE_NUMBER = re.compile(r"^\s*(\d+)\s*(.*)$", re.DOTALL)


def street_sort_key(address: str | None) -> tuple[str, int]:
    """``(street text without house number, house number)`` for sorting.

    >>> street_sort_key("120 Main St")
    ('main st', 120)
    >>> street_sort_key("PO Box 4")
    ('po box 4', 0)
    """
    text = (address or "").strip()
    match = _HOUSE_NUMBER.match(text)
    if match is None:
        return (text.casefold(), 0)
    return (match.group(2).strip().casefold(), int(match.group(1)))


def street_order(addresses: Sequence[str | None], tie_keys: Sequence[tuple] | None = None) -> list[int]:
    """Indices of ``addresses`` sorted by street, then house number, then input order.

    ``tie_keys``, one per address, orders equal addresses ahead of input order.
    """
    if tie_keys is None:
        return sorted(range(len(addresses)), key=lambda i: (*street_sort_key(addresses[i]), i))
    return sorted(range(len(addresses)), key=lambda i: (*street_sort_key(addresses[i]), tie_keys[i], i))
