"""Fixed-size partitioning of id lists for bounded outgoing statements."""

from collections.abc import Iterator, Sequence
from typing import TypeVar

T = TypeVar("T")

DEFAULT_CHUNK_SIZE = 200


def chunked(items: Sequence[T], size: int = DEFAULT_CHUNK_SIZE) -> Iterator[list[T]]:
    """Yield consecutive slices of at most ``size`` items, preserving order.

    ``len(items)`` items yield ``ceil(len(items) / size)`` chunks.

    Raises:
        ValueError: If ``size`` is not positive.
    """
    if size <= 0:
        msg = f"chunk size must be positive, got {size}"
        raise ValueError(msg)
    for start in range(0, len(items), size):
        yield list(items[start : start + size])
